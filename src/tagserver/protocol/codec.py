"""JSON line codec for the tag protocol.

Every message occupies exactly one line.  ``json.dumps`` escapes control
characters inside strings, so an encoded message never contains a raw
newline; the terminator is added by the caller that writes the line.

Usage
-----
::

    from tagserver.protocol.codec import decode_request, encode
    from tagserver.protocol.messages import Completed

    request = decode_request('{"GenerateTags":{"filename":"a.go","size":11}}')
    line = encode(Completed(command=request.COMMAND))
"""
from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any

from tagserver.protocol.errors import MalformedRequest, UnknownCommand
from tagserver.protocol.messages import REQUEST_KINDS, Reply, Request

_SEPARATORS = (",", ":")


def decode_request(line: str) -> Request:
    """Decode one request line into a ``Request`` variant.

    Parameters
    ----------
    line:
        A single line of input.  A trailing ``\\n`` or ``\\r\\n`` is
        ignored.

    Returns
    -------
    Request
        The decoded request.

    Raises
    ------
    MalformedRequest
        If the line is not JSON, is not a single-key object wrapping an
        object, or its fields do not match the named variant.
    UnknownCommand
        If the line is well formed but names a variant this server does
        not know.
    """
    text = line.rstrip("\r\n")
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise MalformedRequest(f"invalid JSON ({exc.msg})", text) from exc

    if not isinstance(data, dict) or len(data) != 1:
        raise MalformedRequest("expected an object with exactly one variant key", text)

    ((tag, fields),) = data.items()
    if not isinstance(fields, dict):
        raise MalformedRequest(f"fields of {tag!r} must be an object", text)

    kind = REQUEST_KINDS.get(tag)
    if kind is None:
        raise UnknownCommand(tag)

    try:
        return kind.from_fields(fields)
    except ValueError as exc:
        raise MalformedRequest(f"{tag}: {exc}", text) from exc


def encode_request(request: Request) -> str:
    """Encode a request the way a peer sends it (without the newline)."""
    fields = {"filename": request.filename, "size": request.size}
    return json.dumps({request.TAG: fields}, separators=_SEPARATORS)


def encode(message: Reply) -> str:
    """Encode a reply or the program announcement as one line of text."""
    return json.dumps({message.TAG: message.to_fields()}, separators=_SEPARATORS)


def encode_record(record: Any) -> str:
    """Encode one analyzer output record as one line of text.

    Strings are taken as already encoded and passed through verbatim.
    Mappings are dumped as JSON objects; any other object must provide a
    ``to_dict()`` method.

    Raises
    ------
    ValueError
        If a pre-encoded string spans more than one line.
    TypeError
        If the record has no JSON representation.
    """
    if isinstance(record, str):
        if "\n" in record or "\r" in record:
            raise ValueError("pre-encoded record must not contain line breaks")
        return record
    if isinstance(record, Mapping):
        return json.dumps(dict(record), separators=_SEPARATORS)
    to_dict = getattr(record, "to_dict", None)
    if to_dict is None:
        raise TypeError(f"Cannot encode record of type {type(record).__name__}")
    return json.dumps(to_dict(), separators=_SEPARATORS)
