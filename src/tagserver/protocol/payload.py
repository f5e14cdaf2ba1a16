"""Exact-size reads of raw file content from the request stream."""
from __future__ import annotations

from typing import BinaryIO

from tagserver.protocol.errors import TruncatedPayload

# Largest single read; at most this much is allocated ahead of the data.
READ_CHUNK_SIZE: int = 65536


def read_exact(stream: BinaryIO, size: int) -> bytes:
    """Read exactly ``size`` bytes from ``stream``.

    Short reads are retried until the full amount has arrived, so this
    works on pipes as well as on buffered files.  Content is never split
    on line terminators.

    Parameters
    ----------
    stream:
        Binary stream positioned at the first payload byte.  It must be
        the same buffered object the request line was read from.
    size:
        Number of bytes to read.

    Returns
    -------
    bytes
        Exactly ``size`` bytes.

    Raises
    ------
    TruncatedPayload
        If the stream ends before ``size`` bytes have been read.
    """
    if size == 0:
        return b""

    buf = bytearray()
    while len(buf) < size:
        chunk = stream.read(min(size - len(buf), READ_CHUNK_SIZE))
        if not chunk:
            raise TruncatedPayload(expected=size, received=len(buf))
        buf.extend(chunk)
    return bytes(buf)
