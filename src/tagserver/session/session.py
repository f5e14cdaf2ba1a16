"""The request/reply session loop.

A ``Session`` owns one input stream and one ``OutputSink`` for the
lifetime of the process.  It announces itself once, then handles
requests strictly one at a time::

    AWAITING_REQUEST -> READING_PAYLOAD -> ANALYZING -> EMITTING
           ^                                               |
           +-----------------------------------------------+

An empty read at a request boundary moves the session to ``CLOSED``.
Any ``SessionError`` moves it to ``FAILED``: output buffered for the
in-flight request is dropped and no ``Completed`` reply is written, which
is how the peer learns that the request failed.

``run()`` never exits the process; it returns a ``SessionResult`` that
the caller turns into an exit status.
"""
from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum, auto
from typing import BinaryIO

from tagserver.analyzers.base import Analyzer
from tagserver.protocol.codec import decode_request, encode, encode_record
from tagserver.protocol.errors import AnalyzerFailure, MalformedRequest, SessionError
from tagserver.protocol.messages import Completed, GenerateTags, Program, Request
from tagserver.protocol.payload import read_exact
from tagserver.protocol.sink import OutputSink

logger = logging.getLogger(__name__)


class SessionState(Enum):
    """Lifecycle states of a ``Session``."""

    AWAITING_REQUEST = auto()
    READING_PAYLOAD = auto()
    ANALYZING = auto()
    EMITTING = auto()
    CLOSED = auto()
    FAILED = auto()


@dataclass(frozen=True)
class SessionResult:
    """Outcome of a finished session.

    Parameters
    ----------
    requests_completed:
        Number of requests whose ``Completed`` reply was flushed.
    error:
        The fatal error that ended the session, or ``None`` on a clean
        end-of-stream.
    """

    requests_completed: int
    error: SessionError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def exit_code(self) -> int:
        """Process exit status: 0 on success, else the error's code."""
        return 0 if self.error is None else self.error.exit_code


class Session:
    """Single-threaded tag protocol server.

    Parameters
    ----------
    analyzer:
        Turns ``(filename, content)`` into output records.
    source:
        Binary input stream.  Request lines and payload bytes are both
        read from this one buffered object.
    sink:
        The only writer of the output stream.
    announcement:
        Program name and version written before the first request.
    """

    def __init__(
        self,
        analyzer: Analyzer,
        source: BinaryIO,
        sink: OutputSink,
        announcement: Program,
    ) -> None:
        self._analyzer = analyzer
        self._source = source
        self._sink = sink
        self._announcement = announcement
        self._state = SessionState.AWAITING_REQUEST
        self._handlers: dict[type, Callable[[Request], None]] = {
            GenerateTags: self._generate_tags,
        }

    @property
    def state(self) -> SessionState:
        return self._state

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def run(self) -> SessionResult:
        """Serve requests until end-of-stream or a fatal error.

        Returns
        -------
        SessionResult
            How many requests completed, and the fatal error if any.
        """
        self._announce()
        completed = 0
        try:
            while True:
                request = self._next_request()
                if request is None:
                    break
                self._handlers[type(request)](request)
                completed += 1
        except SessionError as exc:
            self._state = SessionState.FAILED
            self._sink.discard()
            logger.error("Session failed after %d request(s): %s", completed, exc)
            return SessionResult(requests_completed=completed, error=exc)

        self._state = SessionState.CLOSED
        logger.debug("Input closed after %d request(s)", completed)
        return SessionResult(requests_completed=completed)

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    def _announce(self) -> None:
        self._sink.write(encode(self._announcement))
        self._sink.write_blank()
        self._sink.flush()

    def _next_request(self) -> Request | None:
        self._state = SessionState.AWAITING_REQUEST
        raw = self._source.readline()
        if not raw:
            return None
        try:
            line = raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise MalformedRequest(
                "request line is not valid UTF-8", raw.decode("utf-8", errors="replace")
            ) from exc
        return decode_request(line)

    def _read_payload(self, request: Request) -> bytes:
        """Read the raw bytes that follow a request line, if it declares any."""
        size = request.payload_size
        if size is None:
            return b""
        self._state = SessionState.READING_PAYLOAD
        return read_exact(self._source, size)

    def _generate_tags(self, request: GenerateTags) -> None:
        content = self._read_payload(request)
        logger.debug("Request %s (%d bytes)", request.filename, request.size)

        self._state = SessionState.ANALYZING
        count = self._emit_records(request.filename, content)

        self._state = SessionState.EMITTING
        self._sink.write(encode(Completed(command=request.COMMAND)))
        self._sink.flush()
        logger.debug("Completed %s with %d record(s)", request.filename, count)

    def _emit_records(self, filename: str, content: bytes) -> int:
        """Forward every analyzer record to the sink, in production order."""
        count = 0
        try:
            for record in self._analyzer.analyze(filename, content):
                self._sink.write(encode_record(record))
                count += 1
        except Exception as exc:  # noqa: BLE001
            raise AnalyzerFailure(filename, f"{type(exc).__name__}: {exc}") from exc
        return count
