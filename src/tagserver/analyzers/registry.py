"""Registry of language analyzers.

Built-in analyzers register themselves with the ``register`` decorator
at import time.  Third-party packages add languages by declaring
entry-points in their own ``pyproject.toml`` under the
"tagserver.analyzers" group.

Example
-------
Register an analyzer with the decorator::

    from tagserver.analyzers.base import LanguageAnalyzer
    from tagserver.analyzers.registry import default_registry

    @default_registry.register("rust")
    class RustAnalyzer(LanguageAnalyzer):
        language = "Rust"
        extensions = (".rs",)

        def tags(self, filename, content):
            ...

Load installed analyzers via entry-points::

    default_registry.load_entrypoints()

Retrieve an analyzer by name::

    analyzer = default_registry.create("rust")
"""
from __future__ import annotations

import importlib.metadata
import logging
from collections.abc import Callable

from tagserver.analyzers.base import LanguageAnalyzer

logger = logging.getLogger(__name__)

ENTRYPOINT_GROUP: str = "tagserver.analyzers"


class AnalyzerNotFoundError(KeyError):
    """Raised when a requested analyzer name is not registered."""

    def __init__(self, name: str) -> None:
        self.analyzer_name = name
        super().__init__(
            f"Analyzer {name!r} is not registered. "
            "Check that the package providing it is installed and its "
            f"entry-points are declared under {ENTRYPOINT_GROUP!r}."
        )


class AnalyzerAlreadyRegisteredError(ValueError):
    """Raised when attempting to register a name that already exists."""

    def __init__(self, name: str) -> None:
        self.analyzer_name = name
        super().__init__(
            f"Analyzer {name!r} is already registered. "
            "Use a unique name or deregister the existing entry first."
        )


class AnalyzerRegistry:
    """Name-keyed registry of ``LanguageAnalyzer`` classes.

    Instances are created lazily by ``create`` and cached, since
    analyzers hold no per-file state.
    """

    def __init__(self) -> None:
        self._classes: dict[str, type[LanguageAnalyzer]] = {}
        self._instances: dict[str, LanguageAnalyzer] = {}

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register(self, name: str) -> Callable[[type[LanguageAnalyzer]], type[LanguageAnalyzer]]:
        """Return a class decorator that registers the decorated analyzer.

        Raises
        ------
        AnalyzerAlreadyRegisteredError
            If ``name`` is already in use.
        TypeError
            If the decorated class does not subclass ``LanguageAnalyzer``.
        """

        def decorator(cls: type[LanguageAnalyzer]) -> type[LanguageAnalyzer]:
            self.register_class(name, cls)
            return cls

        return decorator

    def register_class(self, name: str, cls: type[LanguageAnalyzer]) -> None:
        """Register an analyzer class without the decorator syntax."""
        if name in self._classes:
            raise AnalyzerAlreadyRegisteredError(name)
        if not (isinstance(cls, type) and issubclass(cls, LanguageAnalyzer)):
            raise TypeError(
                f"Cannot register {cls!r} under {name!r}: "
                "it must be a subclass of LanguageAnalyzer."
            )
        self._classes[name] = cls
        logger.debug("Registered analyzer %r -> %s", name, cls.__qualname__)

    def deregister(self, name: str) -> None:
        """Remove an analyzer from the registry.

        Raises
        ------
        AnalyzerNotFoundError
            If ``name`` is not currently registered.
        """
        if name not in self._classes:
            raise AnalyzerNotFoundError(name)
        del self._classes[name]
        self._instances.pop(name, None)
        logger.debug("Deregistered analyzer %r", name)

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def get(self, name: str) -> type[LanguageAnalyzer]:
        """Return the class registered under ``name``."""
        try:
            return self._classes[name]
        except KeyError:
            raise AnalyzerNotFoundError(name) from None

    def create(self, name: str) -> LanguageAnalyzer:
        """Return the shared instance of the analyzer registered as ``name``."""
        instance = self._instances.get(name)
        if instance is None:
            instance = self.get(name)()
            self._instances[name] = instance
        return instance

    def list_analyzers(self) -> list[str]:
        """Return all registered analyzer names in alphabetical order."""
        return sorted(self._classes)

    def default_extensions(self) -> dict[str, str]:
        """Map every extension declared by a registered analyzer to its name.

        When two analyzers claim the same extension the one registered
        first wins.
        """
        mapping: dict[str, str] = {}
        for name, cls in self._classes.items():
            for ext in cls.extensions:
                mapping.setdefault(ext.lower(), name)
        return mapping

    def __contains__(self, name: object) -> bool:
        return name in self._classes

    def __len__(self) -> int:
        return len(self._classes)

    def __repr__(self) -> str:
        return f"AnalyzerRegistry(analyzers={self.list_analyzers()})"

    # ------------------------------------------------------------------
    # Entry-point loading
    # ------------------------------------------------------------------

    def load_entrypoints(self, group: str = ENTRYPOINT_GROUP) -> None:
        """Discover and register analyzers declared as package entry-points.

        Entry-points whose name is already registered are skipped, which
        makes repeated calls idempotent.  An entry-point that fails to
        import or is not a ``LanguageAnalyzer`` subclass is logged and
        skipped.

        Example
        -------
        In a downstream package's ``pyproject.toml``::

            [project.entry-points."tagserver.analyzers"]
            rust = "my_package.rust:RustAnalyzer"
        """
        for ep in importlib.metadata.entry_points(group=group):
            if ep.name in self._classes:
                logger.debug("Entry-point %r already registered; skipping.", ep.name)
                continue
            try:
                cls = ep.load()
            except Exception:
                logger.exception(
                    "Failed to load entry-point %r from group %r; skipping.",
                    ep.name,
                    group,
                )
                continue
            try:
                self.register_class(ep.name, cls)
            except (AnalyzerAlreadyRegisteredError, TypeError):
                logger.warning(
                    "Entry-point %r loaded but could not be registered; skipping.",
                    ep.name,
                )


default_registry = AnalyzerRegistry()
