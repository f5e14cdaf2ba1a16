"""Server configuration.

Configuration is optional: every setting has a default that matches the
behaviour peers expect from a ctags-compatible server.  A YAML file may
override any subset of settings::

    program_name: SCIP Ctags
    program_version: 5.9.0
    log_level: DEBUG
    sink_buffer_size: 65536
    load_entrypoints: false
    extensions:
      .pyw: python
      tmpl: go
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

import yaml

from tagserver.protocol.sink import DEFAULT_BUFFER_SIZE

DEFAULT_PROGRAM_NAME: str = "SCIP Ctags"
DEFAULT_PROGRAM_VERSION: str = "5.9.0"

_LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


class ConfigError(ValueError):
    """Raised when a configuration file cannot be loaded or is invalid."""


@dataclass(frozen=True)
class ServerConfig:
    """Settings for one server process.

    Parameters
    ----------
    program_name:
        Name sent in the startup announcement.
    program_version:
        Version sent in the startup announcement.  Informational only.
    log_level:
        Threshold for diagnostic logging on stderr.
    sink_buffer_size:
        Output bytes buffered before they are handed to stdout.
    extensions:
        Extension-to-analyzer overrides applied on top of the defaults.
    load_entrypoints:
        Whether to load third-party analyzers from entry-points.
    """

    program_name: str = DEFAULT_PROGRAM_NAME
    program_version: str = DEFAULT_PROGRAM_VERSION
    log_level: str = "WARNING"
    sink_buffer_size: int = DEFAULT_BUFFER_SIZE
    extensions: dict[str, str] = field(default_factory=dict)
    load_entrypoints: bool = True

    @property
    def log_level_number(self) -> int:
        return logging.getLevelName(self.log_level)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ServerConfig":
        """Build a config from a parsed mapping, validating every key.

        Raises
        ------
        ConfigError
            On unknown keys or values of the wrong type.
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError(f"Unknown configuration key(s): {', '.join(unknown)}")

        for key in ("program_name", "program_version", "log_level"):
            if key in data and not isinstance(data[key], str):
                raise ConfigError(f"{key!r} must be a string")
        if "log_level" in data:
            level = data["log_level"].upper()
            if level not in _LOG_LEVELS:
                raise ConfigError(
                    f"'log_level' must be one of {', '.join(_LOG_LEVELS)}, got {data['log_level']!r}"
                )
            data = {**data, "log_level": level}
        if "sink_buffer_size" in data:
            size = data["sink_buffer_size"]
            if isinstance(size, bool) or not isinstance(size, int) or size <= 0:
                raise ConfigError("'sink_buffer_size' must be a positive integer")
        if "load_entrypoints" in data and not isinstance(data["load_entrypoints"], bool):
            raise ConfigError("'load_entrypoints' must be true or false")
        if "extensions" in data:
            exts = data["extensions"]
            if not isinstance(exts, dict) or not all(
                isinstance(k, str) and isinstance(v, str) for k, v in exts.items()
            ):
                raise ConfigError("'extensions' must map extension strings to analyzer names")
            data = {**data, "extensions": dict(exts)}

        return cls(**data)

    def with_overrides(self, **overrides: Any) -> "ServerConfig":
        """Return a copy with the non-``None`` overrides applied."""
        current = {f.name: getattr(self, f.name) for f in fields(self)}
        current.update({k: v for k, v in overrides.items() if v is not None})
        return ServerConfig.from_dict(current)


def load_config(path: str | Path | None = None) -> ServerConfig:
    """Load configuration from a YAML file, or return the defaults.

    Parameters
    ----------
    path:
        Path to a YAML file.  ``None`` returns the default configuration.

    Raises
    ------
    ConfigError
        If the file cannot be read, is not valid YAML, is not a mapping,
        or fails validation.
    """
    if path is None:
        return ServerConfig()

    try:
        text = Path(path).read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Cannot read configuration file {path}: {exc}") from exc

    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {path}: {exc}") from exc

    if data is None:
        return ServerConfig()
    if not isinstance(data, dict):
        raise ConfigError(f"Configuration in {path} must be a mapping")
    return ServerConfig.from_dict(data)
