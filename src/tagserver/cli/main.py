"""CLI entry point for tagserver.

Invoked as::

    tagserver [OPTIONS] COMMAND [ARGS]...

or, during development::

    python -m tagserver

Commands
--------
serve       Speak the tag protocol on stdin/stdout
tags        Print the tags of a local file
analyzers   List registered analyzers and the extensions they handle
version     Show version information

``serve`` owns stdout for the protocol; all diagnostics, including log
records, go to stderr.
"""
from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING

import click
import yaml
from rich.console import Console
from rich.logging import RichHandler
from rich.syntax import Syntax
from rich.table import Table

if TYPE_CHECKING:
    from tagserver.analyzers.dispatch import ExtensionDispatcher
    from tagserver.config import ServerConfig

console = Console()
err_console = Console(stderr=True)

_LOG_LEVEL_CHOICE = click.Choice(
    ["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"], case_sensitive=False
)


def _configure_logging(level: str) -> None:
    """Send ``tagserver`` log records to stderr through Rich."""
    package_logger = logging.getLogger("tagserver")
    for handler in list(package_logger.handlers):
        if isinstance(handler, RichHandler):
            package_logger.removeHandler(handler)
    handler = RichHandler(console=err_console, show_path=False, rich_tracebacks=True)
    handler.setFormatter(logging.Formatter("%(message)s"))
    package_logger.addHandler(handler)
    package_logger.setLevel(level.upper())


def _load_config_or_exit(
    path: str | None,
    log_level: str | None = None,
    load_entrypoints: bool | None = None,
) -> "ServerConfig":
    """Load configuration, printing the error and exiting on failure."""
    from tagserver.config import ConfigError, load_config

    try:
        config = load_config(path)
        return config.with_overrides(log_level=log_level, load_entrypoints=load_entrypoints)
    except ConfigError as exc:
        err_console.print(f"[red]Configuration error:[/red] {exc}")
        sys.exit(1)


def _build_analyzer_or_exit(config: "ServerConfig") -> "ExtensionDispatcher":
    """Build the analyzer stack, printing the error and exiting on failure."""
    from tagserver.analyzers import AnalyzerNotFoundError
    from tagserver.server import build_analyzer

    try:
        return build_analyzer(config)
    except AnalyzerNotFoundError as exc:
        err_console.print(f"[red]Configuration error:[/red] {exc.args[0]}")
        sys.exit(1)


def _read_content(path: str) -> bytes:
    """Read a file's raw bytes, exiting on error."""
    try:
        return Path(path).read_bytes()
    except FileNotFoundError:
        err_console.print(f"[red]Error:[/red] File not found: {path}")
        sys.exit(1)
    except OSError as exc:
        err_console.print(f"[red]Error:[/red] Cannot read {path}: {exc}")
        sys.exit(1)


_config_option = click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False),
    envvar="TAGSERVER_CONFIG",
    default=None,
    help="YAML configuration file (env: TAGSERVER_CONFIG)",
)


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(package_name="tagserver")
def cli() -> None:
    """ctags-compatible tag server speaking a JSON line protocol on stdio."""


# ---------------------------------------------------------------------------
# serve command
# ---------------------------------------------------------------------------


@cli.command(name="serve")
@_config_option
@click.option("--log-level", type=_LOG_LEVEL_CHOICE, default=None, help="Override the log level")
@click.option(
    "--no-entrypoints",
    is_flag=True,
    default=False,
    help="Do not load third-party analyzers from entry-points",
)
def serve_command(config_path: str | None, log_level: str | None, no_entrypoints: bool) -> None:
    """Serve tag requests on stdin/stdout until end of input.

    The exit status is 0 after a clean end of input and non-zero after a
    malformed request, an unknown command, a truncated payload, or an
    analyzer failure.
    """
    from tagserver.server import run_session

    config = _load_config_or_exit(
        config_path,
        log_level=log_level,
        load_entrypoints=False if no_entrypoints else None,
    )
    _configure_logging(config.log_level)
    analyzer = _build_analyzer_or_exit(config)

    result = run_session(
        click.get_binary_stream("stdin"),
        click.get_binary_stream("stdout"),
        config=config,
        analyzer=analyzer,
    )
    sys.exit(result.exit_code)


# ---------------------------------------------------------------------------
# tags command
# ---------------------------------------------------------------------------


@cli.command(name="tags")
@click.argument("file", type=click.Path(exists=False))
@_config_option
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["json", "yaml", "table"], case_sensitive=False),
    default="json",
    help="Output format: JSON lines, a YAML list, or a table",
)
def tags_command(file: str, config_path: str | None, output_format: str) -> None:
    """Print the tags found in a local file.

    FILE is the path of the source file to analyze.  The language is
    chosen from its extension, as it is for ``serve``.
    """
    config = _load_config_or_exit(config_path)
    _configure_logging(config.log_level)
    analyzer = _build_analyzer_or_exit(config)
    content = _read_content(file)

    tags = [tag.to_dict() for tag in analyzer.analyze(file, content)]
    output_format = output_format.lower()

    if output_format == "json":
        for tag in tags:
            click.echo(json.dumps(tag, separators=(",", ":")))
    elif output_format == "yaml":
        text = yaml.safe_dump(tags, default_flow_style=False, sort_keys=False, allow_unicode=True)
        console.print(Syntax(text, "yaml"))
    else:
        table = Table(title=f"Tags: {file}")
        table.add_column("Line", justify="right")
        table.add_column("Kind", style="bold")
        table.add_column("Name")
        table.add_column("Scope")
        table.add_column("Signature", style="dim")
        for tag in tags:
            table.add_row(
                str(tag["line"]),
                tag["kind"],
                tag["name"],
                tag.get("scope", ""),
                tag.get("signature", ""),
            )
        console.print(table)
        console.print(f"\n[bold]{len(tags)}[/bold] tag(s)")


# ---------------------------------------------------------------------------
# analyzers command
# ---------------------------------------------------------------------------


@cli.command(name="analyzers")
@_config_option
def analyzers_command(config_path: str | None) -> None:
    """List registered analyzers and the extensions routed to them."""
    from tagserver.analyzers import default_registry

    config = _load_config_or_exit(config_path)
    dispatcher = _build_analyzer_or_exit(config)

    by_analyzer: dict[str, list[str]] = {}
    for ext, name in sorted(dispatcher.extensions.items()):
        by_analyzer.setdefault(name, []).append(ext)

    table = Table(title="Registered analyzers")
    table.add_column("Name", style="bold")
    table.add_column("Language")
    table.add_column("Extensions")
    for name in default_registry.list_analyzers():
        cls = default_registry.get(name)
        table.add_row(name, cls.language, ", ".join(by_analyzer.get(name, [])))
    console.print(table)


# ---------------------------------------------------------------------------
# version command
# ---------------------------------------------------------------------------


@cli.command(name="version")
def version_command() -> None:
    """Show detailed version information."""
    from tagserver import __version__
    from tagserver.config import DEFAULT_PROGRAM_NAME, DEFAULT_PROGRAM_VERSION

    table = Table(show_header=False, box=None)
    table.add_row("[bold]tagserver[/bold]", f"v{__version__}")
    table.add_row("Announces", f"{DEFAULT_PROGRAM_NAME} {DEFAULT_PROGRAM_VERSION}")
    table.add_row("Python", f"{sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}")
    table.add_row("Platform", sys.platform)
    console.print(table)


if __name__ == "__main__":
    cli()
