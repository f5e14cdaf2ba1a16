"""Tag protocol module.

Exports the message types, the JSON line codec, the payload reader, the
output sink, and the fatal session error types.
"""
from __future__ import annotations

from tagserver.protocol.codec import decode_request, encode, encode_record, encode_request
from tagserver.protocol.errors import (
    AnalyzerFailure,
    MalformedRequest,
    SessionError,
    TruncatedPayload,
    UnknownCommand,
)
from tagserver.protocol.messages import (
    REQUEST_KINDS,
    Completed,
    GenerateTags,
    Program,
    Reply,
    Request,
)
from tagserver.protocol.payload import read_exact
from tagserver.protocol.sink import OutputSink

__all__ = [
    "decode_request",
    "encode",
    "encode_record",
    "encode_request",
    "read_exact",
    "OutputSink",
    "GenerateTags",
    "Program",
    "Completed",
    "Request",
    "Reply",
    "REQUEST_KINDS",
    "SessionError",
    "MalformedRequest",
    "UnknownCommand",
    "TruncatedPayload",
    "AnalyzerFailure",
]
