"""Shared utilities for CLI commands."""

from pathlib import Path
from typing import Annotated, Any, NoReturn

import typer
from rich.console import Console

from notes_sync.config import Config, load_config, set_config
from notes_sync.exceptions import NotesSyncError
from notes_sync.utils.logging import configure_logging, get_logger

# Shared console for all commands
console = Console()

ConfigOption = Annotated[
    Path | None,
    typer.Option("--config", help="Path to config.yaml", exists=True, dir_okay=False),
]
LogLevelOption = Annotated[
    str | None,
    typer.Option("--log-level", help="Log level (DEBUG, INFO, WARNING, ERROR)"),
]
VerboseOption = Annotated[
    bool,
    typer.Option("--verbose", "-v", help="Show all log messages on terminal"),
]


def get_config_and_logger(
    config_path: Path | None = None,
    log_level: str | None = None,
    verbose: bool = False,
) -> tuple[Config, Any]:
    """Load configuration and logger (dependency injection helper).

    Args:
        config_path: Optional path to config file
        log_level: Overrides the configured log level when given
        verbose: Show debug messages on the terminal

    Returns:
        Tuple of (Config, Logger)
    """
    config = load_config(config_path)
    set_config(config)

    configure_logging(
        log_level or config.log_level,
        log_dir=config.log_dir,
        verbose=verbose,
    )
    return config, get_logger("cli")


def build_remote(config: Config) -> Any:
    """Remote adapter for the configured notes API (not yet connected)."""
    from notes_sync.remote.http_client import HttpRemoteNotes

    return HttpRemoteNotes(
        config.remote_url,
        api_token=config.remote_token,
        timeout=config.remote_timeout,
    )


def exit_with_error(error: NotesSyncError, logger: Any) -> NoReturn:
    """Report a tool error on the console and exit with status 1."""
    logger.error("command_failed", error_type=type(error).__name__, **error.to_dict())
    console.print(f"\n[bold red]Error:[/bold red] {error.message}")
    if error.suggestion:
        console.print(f"[yellow]{error.suggestion}[/yellow]")
    raise typer.Exit(code=1)
