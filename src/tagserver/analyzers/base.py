"""Analyzer interfaces and the tag record type.

The session only depends on the ``Analyzer`` protocol: anything with an
``analyze(filename, content)`` method returning an iterable of records
can drive it.  Language support is built from ``LanguageAnalyzer``
subclasses, which produce ``Tag`` records in universal-ctags JSON form.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from typing import Any, ClassVar, Protocol, runtime_checkable


@runtime_checkable
class Analyzer(Protocol):
    """Capability interface for turning file content into output records."""

    def analyze(self, filename: str, content: bytes) -> Iterable[Any]: ...


@dataclass(frozen=True, slots=True)
class Tag:
    """A single symbol definition found in a source file.

    Parameters
    ----------
    name:
        The symbol name.
    path:
        File path the symbol was found in, as given by the request.
    language:
        Display name of the language, e.g. ``"Go"``.
    line:
        1-based line number of the definition.
    kind:
        ctags kind name, e.g. ``"func"`` or ``"class"``.
    pattern:
        ctags search pattern for the definition line.
    scope:
        Name of the enclosing definition, if any.
    scope_kind:
        Kind of the enclosing definition, if any.
    signature:
        Parameter list for callables, if any.
    """

    name: str
    path: str
    language: str
    line: int
    kind: str
    pattern: str
    scope: str | None = field(default=None)
    scope_kind: str | None = field(default=None)
    signature: str | None = field(default=None)

    def to_dict(self) -> dict[str, Any]:
        """Return the universal-ctags JSON representation of this tag."""
        data: dict[str, Any] = {
            "_type": "tag",
            "name": self.name,
            "path": self.path,
            "language": self.language,
            "line": self.line,
            "kind": self.kind,
            "pattern": self.pattern,
        }
        if self.scope is not None:
            data["scope"] = self.scope
        if self.scope_kind is not None:
            data["scopeKind"] = self.scope_kind
        if self.signature is not None:
            data["signature"] = self.signature
        return data


def make_pattern(source_line: str) -> str:
    """Build a ctags ``/^...$/`` search pattern for one source line."""
    escaped = source_line.rstrip("\r\n").replace("\\", "\\\\").replace("/", "\\/")
    return f"/^{escaped}$/"


class LanguageAnalyzer(ABC):
    """Base class for per-language tag generators.

    Subclasses set ``language`` and ``extensions`` and implement
    ``tags``.  Instances are stateless and may be reused across
    requests.
    """

    language: ClassVar[str] = ""
    extensions: ClassVar[tuple[str, ...]] = ()

    @abstractmethod
    def tags(self, filename: str, content: bytes) -> Iterator[Tag]:
        """Yield the tags defined in ``content`` in source order."""

    def analyze(self, filename: str, content: bytes) -> Iterator[Tag]:
        return self.tags(filename, content)


class SourceLines:
    """Source text indexed by 1-based line number."""

    __slots__ = ("_lines",)

    def __init__(self, text: str) -> None:
        # str.splitlines() also breaks on form feeds and other separators
        # that neither language counts as a line end.
        self._lines = text.split("\n")

    def __getitem__(self, line: int) -> str:
        if 1 <= line <= len(self._lines):
            return self._lines[line - 1]
        return ""

    def pattern(self, line: int) -> str:
        return make_pattern(self[line])
