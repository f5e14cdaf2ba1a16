"""Extension-based dispatch to language analyzers.

``ExtensionDispatcher`` is the ``Analyzer`` the server runs with by
default.  It picks a ``LanguageAnalyzer`` from the file name's extension;
files in languages nobody handles produce no tags.
"""
from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from pathlib import PurePosixPath

from tagserver.analyzers.base import LanguageAnalyzer, Tag
from tagserver.analyzers.registry import AnalyzerRegistry, default_registry

logger = logging.getLogger(__name__)


class ExtensionDispatcher:
    """Route each file to the analyzer registered for its extension.

    Parameters
    ----------
    registry:
        Registry to resolve analyzer names against.
    extensions:
        Extra extension-to-analyzer mappings, applied on top of the
        extensions each registered analyzer declares.  Keys are matched
        case-insensitively and may omit the leading dot.

    Raises
    ------
    AnalyzerNotFoundError
        If ``extensions`` names an analyzer that is not registered.
    """

    def __init__(
        self,
        registry: AnalyzerRegistry | None = None,
        extensions: Mapping[str, str] | None = None,
    ) -> None:
        self._registry = registry if registry is not None else default_registry
        mapping = self._registry.default_extensions()
        for ext, name in (extensions or {}).items():
            mapping[_normalize(ext)] = name
        for name in set(mapping.values()):
            self._registry.get(name)
        self._extensions = mapping

    @property
    def extensions(self) -> dict[str, str]:
        """The effective extension-to-analyzer mapping."""
        return dict(self._extensions)

    def analyzer_for(self, filename: str) -> LanguageAnalyzer | None:
        """Return the analyzer that handles ``filename``, if any."""
        name = self._extensions.get(PurePosixPath(filename).suffix.lower())
        if name is None:
            return None
        return self._registry.create(name)

    def analyze(self, filename: str, content: bytes) -> Iterator[Tag]:
        analyzer = self.analyzer_for(filename)
        if analyzer is None:
            logger.debug("No analyzer for %s; emitting no tags", filename)
            return iter(())
        return analyzer.tags(filename, content)


def _normalize(ext: str) -> str:
    ext = ext.lower()
    return ext if ext.startswith(".") else f".{ext}"
