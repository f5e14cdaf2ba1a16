"""Command-line interface for tagserver."""
from __future__ import annotations

from tagserver.cli.main import cli

__all__ = ["cli"]
