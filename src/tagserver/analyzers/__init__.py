"""Analyzer subsystem.

Importing this package registers the built-in Python and Go analyzers
with ``default_registry``.  Additional languages register through
``importlib.metadata`` entry-points under the "tagserver.analyzers"
group.

Example
-------
Declare an analyzer in pyproject.toml:

.. code-block:: toml

    [project.entry-points."tagserver.analyzers"]
    rust = "my_package.rust:RustAnalyzer"
"""
from __future__ import annotations

from tagserver.analyzers.base import Analyzer, LanguageAnalyzer, Tag, make_pattern
from tagserver.analyzers.dispatch import ExtensionDispatcher
from tagserver.analyzers.go.tagger import GoAnalyzer
from tagserver.analyzers.python import PythonAnalyzer
from tagserver.analyzers.registry import (
    AnalyzerAlreadyRegisteredError,
    AnalyzerNotFoundError,
    AnalyzerRegistry,
    default_registry,
)

__all__ = [
    "Analyzer",
    "LanguageAnalyzer",
    "Tag",
    "make_pattern",
    "ExtensionDispatcher",
    "GoAnalyzer",
    "PythonAnalyzer",
    "AnalyzerRegistry",
    "AnalyzerNotFoundError",
    "AnalyzerAlreadyRegisteredError",
    "default_registry",
]
