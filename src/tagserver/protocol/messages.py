"""Message definitions for the tag protocol.

Requests and replies are closed sets of frozen dataclasses.  Each
variant carries a ``TAG`` class attribute holding the name it is
externally tagged with on the wire, e.g.::

    {"GenerateTags": {"filename": "a.go", "size": 11}}

New request kinds are added by defining another variant and listing it
in ``REQUEST_KINDS``; the codec and session dispatch on that table.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar, Final, Union

# Largest size a peer can declare: the range of an unsigned 64-bit length.
MAX_PAYLOAD_SIZE: Final[int] = 2**64 - 1


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class GenerateTags:
    """Request to generate tags for one file.

    Parameters
    ----------
    filename:
        Path of the file as known to the peer.  Only used for language
        detection and for the ``path`` of emitted tags.
    size:
        Exact number of raw content bytes that follow the request line.
    """

    TAG: ClassVar[str] = "GenerateTags"
    COMMAND: ClassVar[str] = "generate-tags"

    filename: str
    size: int

    @property
    def payload_size(self) -> int | None:
        """Number of raw bytes following the request line, or ``None`` if none do."""
        return self.size

    @classmethod
    def from_fields(cls, fields: dict[str, Any]) -> "GenerateTags":
        """Build the request from its decoded wire fields.

        Raises
        ------
        ValueError
            If a field is missing, unexpected, or of the wrong type.
        """
        expected = {"filename", "size"}
        missing = expected - fields.keys()
        if missing:
            raise ValueError(f"missing field(s): {', '.join(sorted(missing))}")
        extra = fields.keys() - expected
        if extra:
            raise ValueError(f"unexpected field(s): {', '.join(sorted(extra))}")

        filename = fields["filename"]
        size = fields["size"]
        if not isinstance(filename, str):
            raise ValueError("'filename' must be a string")
        # bool is an int subclass; reject it explicitly.
        if isinstance(size, bool) or not isinstance(size, int):
            raise ValueError("'size' must be an unsigned integer")
        if size < 0:
            raise ValueError("'size' must not be negative")
        if size > MAX_PAYLOAD_SIZE:
            raise ValueError(f"'size' must not exceed {MAX_PAYLOAD_SIZE}")
        return cls(filename=filename, size=size)


Request = Union[GenerateTags]

REQUEST_KINDS: Final[dict[str, type[GenerateTags]]] = {
    GenerateTags.TAG: GenerateTags,
}


# ---------------------------------------------------------------------------
# Replies
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Program:
    """Startup announcement naming the server and its version."""

    TAG: ClassVar[str] = "Program"

    name: str
    version: str

    def to_fields(self) -> dict[str, Any]:
        return {"name": self.name, "version": self.version}


@dataclass(frozen=True, slots=True)
class Completed:
    """Acknowledgment that every record for a request has been written.

    Parameters
    ----------
    command:
        Canonical name of the request kind just processed, e.g.
        ``"generate-tags"``.
    """

    TAG: ClassVar[str] = "Completed"

    command: str

    def to_fields(self) -> dict[str, Any]:
        return {"command": self.command}


Reply = Union[Program, Completed]
