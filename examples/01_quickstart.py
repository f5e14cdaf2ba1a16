#!/usr/bin/env python3
"""Example: Quickstart — tagserver

Minimal working example: tag a Go file in-process, then drive one
protocol session over in-memory streams, as a peer would over stdio.

Usage:
    python examples/01_quickstart.py

Requirements:
    pip install tagserver
"""
from __future__ import annotations

import io
import json

import tagserver
from tagserver.config import ServerConfig
from tagserver.server import run_session

GO_SOURCE = b'''package greeting

type Greeter struct {
	Name string
}

func (g *Greeter) Hello() string {
	return "Hello, " + g.Name
}
'''


def main() -> None:
    print(f"tagserver version: {tagserver.__version__}")

    # Step 1: Generate tags directly
    for tag in tagserver.generate_tags("greeting.go", GO_SOURCE):
        scope = f" in {tag.scope}" if tag.scope else ""
        print(f"  {tag.line:>3}  {tag.kind:<8} {tag.name}{scope}")

    # Step 2: Frame one request the way a peer does
    request = {"GenerateTags": {"filename": "greeting.go", "size": len(GO_SOURCE)}}
    stdin = io.BytesIO(json.dumps(request).encode("utf-8") + b"\n" + GO_SOURCE)
    stdout = io.BytesIO()

    # Step 3: Run a session until end of input
    result = run_session(stdin, stdout, config=ServerConfig(load_entrypoints=False))
    print(f"\nSession completed {result.requests_completed} request(s), "
          f"exit code {result.exit_code}")
    print(stdout.getvalue().decode("utf-8"))


if __name__ == "__main__":
    main()
