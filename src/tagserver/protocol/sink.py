"""Buffered, ordered writer for protocol output.

The ``OutputSink`` is the only object that touches the output stream.
Lines are collected in an in-memory buffer and reach the destination in
the order they were written.  ``flush()`` marks a request boundary: once
it returns, everything written for the request is on the destination.
"""
from __future__ import annotations

import logging
from typing import BinaryIO

logger = logging.getLogger(__name__)

DEFAULT_BUFFER_SIZE: int = 8192


class OutputSink:
    """Line-oriented, flush-on-boundary output writer.

    Parameters
    ----------
    destination:
        Binary stream to write to, typically ``sys.stdout.buffer``.
    buffer_size:
        Buffered byte count above which pending lines are handed to the
        destination before the next ``flush()``.  The destination itself
        is only flushed by ``flush()``.
    """

    __slots__ = ("_destination", "_buffer", "_buffer_size", "_lines_written")

    def __init__(self, destination: BinaryIO, buffer_size: int = DEFAULT_BUFFER_SIZE) -> None:
        if buffer_size <= 0:
            raise ValueError("buffer_size must be positive")
        self._destination = destination
        self._buffer = bytearray()
        self._buffer_size = buffer_size
        self._lines_written = 0

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def write(self, line: str) -> None:
        """Append one encoded message, terminated by a newline."""
        self._buffer += line.encode("utf-8")
        self._buffer += b"\n"
        self._lines_written += 1
        if len(self._buffer) > self._buffer_size:
            self._drain()

    def write_blank(self) -> None:
        """Append an empty line."""
        self._buffer += b"\n"

    def flush(self) -> None:
        """Write all buffered bytes and flush the destination."""
        self._drain()
        self._destination.flush()

    def discard(self) -> int:
        """Drop buffered bytes that have not reached the destination.

        Returns
        -------
        int
            Number of bytes dropped.
        """
        dropped = len(self._buffer)
        self._buffer.clear()
        if dropped:
            logger.debug("Discarded %d buffered byte(s)", dropped)
        return dropped

    @property
    def pending(self) -> int:
        """Number of bytes buffered but not yet handed to the destination."""
        return len(self._buffer)

    @property
    def lines_written(self) -> int:
        """Total number of message lines accepted since creation."""
        return self._lines_written

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _drain(self) -> None:
        if self._buffer:
            self._destination.write(bytes(self._buffer))
            self._buffer.clear()
