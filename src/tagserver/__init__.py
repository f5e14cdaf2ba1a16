"""tagserver — a ctags-compatible tag server speaking JSON lines over stdio.

Public API
----------
The stable public surface is everything exported from this module.
Anything inside submodules not re-exported here is considered private
and may change without notice.

Protocol
--------
On startup the server writes one announcement line and a blank line::

    {"Program":{"name":"SCIP Ctags","version":"5.9.0"}}

Each request is one line followed immediately by ``size`` raw bytes of
file content::

    {"GenerateTags":{"filename":"a.go","size":12}}
    package main

The server answers with zero or more tag lines and one completion line,
then flushes::

    {"_type":"tag","name":"main","path":"a.go","language":"Go","line":1,"kind":"package","pattern":"/^package main$/"}
    {"Completed":{"command":"generate-tags"}}

Example
-------
::

    import tagserver

    for tag in tagserver.generate_tags("a.go", b"package main"):
        print(tag.name, tag.kind)

    # Serve on stdin/stdout and return the exit status
    status = tagserver.serve()
"""
from __future__ import annotations

from collections.abc import Iterator
from typing import TYPE_CHECKING

from tagserver.protocol.errors import (
    AnalyzerFailure,
    MalformedRequest,
    SessionError,
    TruncatedPayload,
    UnknownCommand,
)

__version__: str = "0.1.0"

if TYPE_CHECKING:
    from tagserver.analyzers.base import Analyzer, Tag
    from tagserver.config import ServerConfig


def generate_tags(filename: str, content: bytes) -> Iterator["Tag"]:
    """Generate tags for one file using the built-in analyzers.

    Parameters
    ----------
    filename:
        File name; its extension selects the language.
    content:
        Raw file content.

    Returns
    -------
    Iterator[Tag]
        Tags in source order.  Empty for unsupported languages.
    """
    from tagserver.analyzers import ExtensionDispatcher

    return ExtensionDispatcher().analyze(filename, content)


def serve(
    config: "ServerConfig | None" = None,
    analyzer: "Analyzer | None" = None,
) -> int:
    """Serve the tag protocol on stdin/stdout until end of input.

    Parameters
    ----------
    config:
        Server settings; defaults are used when omitted.
    analyzer:
        Replaces the built-in extension dispatcher when given.

    Returns
    -------
    int
        0 after a clean end of input, otherwise the exit code of the
        ``SessionError`` that ended the session.
    """
    from tagserver.server import serve as _serve

    return _serve(config=config, analyzer=analyzer)


__all__ = [
    "__version__",
    "generate_tags",
    "serve",
    "SessionError",
    "MalformedRequest",
    "UnknownCommand",
    "TruncatedPayload",
    "AnalyzerFailure",
]
