"""Process-level wiring: build the analyzer stack and run a session."""
from __future__ import annotations

import logging
import sys
from typing import BinaryIO

from tagserver.analyzers import ExtensionDispatcher, default_registry
from tagserver.analyzers.base import Analyzer
from tagserver.config import ServerConfig
from tagserver.protocol.messages import Program
from tagserver.protocol.sink import OutputSink
from tagserver.session.session import Session, SessionResult

logger = logging.getLogger(__name__)


def build_analyzer(config: ServerConfig) -> ExtensionDispatcher:
    """Create the extension dispatcher described by ``config``.

    Raises
    ------
    AnalyzerNotFoundError
        If ``config.extensions`` names an analyzer that is not registered.
    """
    if config.load_entrypoints:
        default_registry.load_entrypoints()
    return ExtensionDispatcher(default_registry, config.extensions)


def run_session(
    source: BinaryIO,
    destination: BinaryIO,
    config: ServerConfig | None = None,
    analyzer: Analyzer | None = None,
) -> SessionResult:
    """Run one session over the given streams and return its result."""
    config = config if config is not None else ServerConfig()
    if analyzer is None:
        analyzer = build_analyzer(config)
    session = Session(
        analyzer=analyzer,
        source=source,
        sink=OutputSink(destination, buffer_size=config.sink_buffer_size),
        announcement=Program(name=config.program_name, version=config.program_version),
    )
    logger.debug("Starting %s %s", config.program_name, config.program_version)
    return session.run()


def serve(
    config: ServerConfig | None = None,
    analyzer: Analyzer | None = None,
    source: BinaryIO | None = None,
    destination: BinaryIO | None = None,
) -> int:
    """Serve the tag protocol, by default on the process's stdin/stdout.

    Returns
    -------
    int
        The exit status for the process.
    """
    result = run_session(
        source if source is not None else sys.stdin.buffer,
        destination if destination is not None else sys.stdout.buffer,
        config=config,
        analyzer=analyzer,
    )
    return result.exit_code
