"""Shared test fixtures for tagserver.

Fixtures defined here are available to all tests in the suite without
needing an explicit import. Add project-wide fixtures here; keep
domain-specific fixtures close to the tests that use them.
"""
from __future__ import annotations

import io
import json
from collections.abc import Callable, Iterable, Iterator
from typing import Any

import pytest

from tagserver.protocol.messages import Program
from tagserver.protocol.sink import OutputSink
from tagserver.session.session import Session, SessionResult


class StubAnalyzer:
    """Analyzer that returns canned records and remembers its calls."""

    def __init__(self, records: Callable[[str, bytes], Iterable[Any]] | None = None) -> None:
        self._records = records or (lambda filename, content: [])
        self.calls: list[tuple[str, bytes]] = []

    def analyze(self, filename: str, content: bytes) -> Iterator[Any]:
        self.calls.append((filename, content))
        return iter(self._records(filename, content))


def frame(filename: str, content: bytes, size: int | None = None) -> bytes:
    """Encode one request line followed by its payload."""
    declared = len(content) if size is None else size
    line = json.dumps({"GenerateTags": {"filename": filename, "size": declared}})
    return line.encode("utf-8") + b"\n" + content


@pytest.fixture()
def package_name() -> str:
    """Return the importable package name for assertions."""
    return "tagserver"


@pytest.fixture()
def expected_version() -> str:
    """Return the current expected version string.

    Update this fixture when cutting a release so that the version
    test immediately catches stale ``__version__`` values.
    """
    return "0.1.0"


@pytest.fixture()
def run_session() -> Callable[..., tuple[SessionResult, list[str]]]:
    """Return a helper that runs a session over in-memory streams.

    The helper returns the session result and the output split into
    lines (terminators removed).
    """

    def _run(
        data: bytes,
        analyzer: Any = None,
        buffer_size: int = 8192,
    ) -> tuple[SessionResult, list[str]]:
        source = io.BytesIO(data)
        destination = io.BytesIO()
        session = Session(
            analyzer=analyzer if analyzer is not None else StubAnalyzer(),
            source=source,
            sink=OutputSink(destination, buffer_size=buffer_size),
            announcement=Program(name="SCIP Ctags", version="5.9.0"),
        )
        result = session.run()
        return result, destination.getvalue().decode("utf-8").split("\n")

    return _run
