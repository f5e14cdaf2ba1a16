"""Benchmark: tag generation and session throughput.

Measures how many files the built-in analyzers can tag per second, and
how many protocol requests a session can answer per second, using the
public ExtensionDispatcher and run_session APIs.
"""
from __future__ import annotations

import io
import json
import sys
import time
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from tagserver.analyzers import ExtensionDispatcher
from tagserver.config import ServerConfig
from tagserver.server import run_session

_ITERATIONS: int = 2_000
_SESSION_REQUESTS: int = 1_000

_SAMPLE_GO = b"""package server

import "net/http"

type Server struct {
	Addr    string
	Handler http.Handler
}

type Store interface {
	Get(key string) ([]byte, error)
}

const DefaultAddr = ":8080"

func New(addr string) *Server {
	return &Server{Addr: addr}
}

func (s *Server) Start() error {
	return http.ListenAndServe(s.Addr, s.Handler)
}
"""

_SAMPLE_PY = b"""import os

DEFAULT_PORT = 8080


class Server:
    timeout = 30

    def __init__(self, addr: str) -> None:
        self.addr = addr

    def start(self) -> None:
        os.getenv("PORT")


def main() -> int:
    return 0
"""


def _result(operation: str, iterations: int, total: float) -> dict[str, object]:
    result: dict[str, object] = {
        "operation": operation,
        "iterations": iterations,
        "total_seconds": round(total, 4),
        "ops_per_second": round(iterations / total, 1),
        "avg_latency_ms": round(total / iterations * 1000, 4),
    }
    print(
        f"[bench_throughput] {result['operation']}: "
        f"{result['ops_per_second']:,.0f} ops/sec  "
        f"avg {result['avg_latency_ms']:.4f} ms"
    )
    return result


def bench_analyze_throughput() -> dict[str, object]:
    """Benchmark tag generation for one Go and one Python file.

    Returns
    -------
    dict with keys: operation, iterations, total_seconds, ops_per_second,
    avg_latency_ms.
    """
    dispatcher = ExtensionDispatcher()

    start = time.perf_counter()
    for _ in range(_ITERATIONS):
        list(dispatcher.analyze("server.go", _SAMPLE_GO))
        list(dispatcher.analyze("server.py", _SAMPLE_PY))
    total = time.perf_counter() - start

    return _result("tagserver_analyze_throughput", _ITERATIONS * 2, total)


def bench_session_throughput() -> dict[str, object]:
    """Benchmark a full session answering a stream of requests.

    Returns
    -------
    dict with keys: operation, iterations, total_seconds, ops_per_second,
    avg_latency_ms.
    """
    request = json.dumps({"GenerateTags": {"filename": "server.go", "size": len(_SAMPLE_GO)}})
    data = (request.encode("utf-8") + b"\n" + _SAMPLE_GO) * _SESSION_REQUESTS
    config = ServerConfig(load_entrypoints=False)

    start = time.perf_counter()
    result = run_session(io.BytesIO(data), io.BytesIO(), config=config)
    total = time.perf_counter() - start

    if result.requests_completed != _SESSION_REQUESTS:
        raise RuntimeError(f"session ended early: {result.error}")
    return _result("tagserver_session_throughput", _SESSION_REQUESTS, total)


if __name__ == "__main__":
    results_dir = Path(__file__).parent / "results"
    results_dir.mkdir(exist_ok=True)

    for bench_fn, fname in [
        (bench_analyze_throughput, "analyze_throughput_baseline.json"),
        (bench_session_throughput, "session_throughput_baseline.json"),
    ]:
        result = bench_fn()
        output_path = results_dir / fname
        with open(output_path, "w", encoding="utf-8") as fh:
            json.dump(result, fh, indent=2)
        print(f"Results saved to {output_path}")
