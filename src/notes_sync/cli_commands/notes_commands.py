"""Collection commands: list remote notes and sync the notes directory."""

from __future__ import annotations

import json
import time
from enum import Enum
from typing import Annotated

import typer
from rich.table import Table

from ..exceptions import NotesSyncError
from .shared import (
    ConfigOption,
    LogLevelOption,
    VerboseOption,
    build_remote,
    console,
    exit_with_error,
    get_config_and_logger,
)
from .sync_handler import run_sync


class OutputFormat(str, Enum):
    TEXT = "text"
    JSON = "json"


def register(app: typer.Typer) -> None:
    """Register collection commands on the given Typer app."""

    @app.command(name="list")
    def list_notes(
        published: Annotated[
            bool, typer.Option("--published", help="Only published notes")
        ] = False,
        tag: Annotated[
            str | None, typer.Option("--tag", help="Only notes carrying this tag")
        ] = None,
        date: Annotated[
            str | None, typer.Option("--date", help="Only notes with exactly this date")
        ] = None,
        output_format: Annotated[
            OutputFormat, typer.Option("--format", "-f", help="Output format")
        ] = OutputFormat.TEXT,
        refresh: Annotated[
            bool, typer.Option("--refresh", help="Ignore the metadata cache")
        ] = False,
        config_path: ConfigOption = None,
        log_level: LogLevelOption = None,
        verbose: VerboseOption = False,
    ) -> None:
        """List notes in the remote store."""
        from ..remote.metadata_cache import MetadataCache, filter_notes, list_notes_cached

        config, logger = get_config_and_logger(config_path, log_level, verbose=verbose)
        cache = MetadataCache(config.get_cache_file(), ttl_seconds=config.cache_ttl_seconds)

        try:
            notes = list_notes_cached(build_remote(config), cache, refresh=refresh)
        except NotesSyncError as e:
            exit_with_error(e, logger)

        notes = filter_notes(notes, published=published, tag=tag, date=date)
        logger.debug("notes_listed", count=len(notes), published=published, tag=tag, date=date)

        if output_format is OutputFormat.JSON:
            typer.echo(json.dumps([note.to_dict() for note in notes], indent=2))
            return

        if not notes:
            console.print("[yellow]No notes found.[/yellow]")
            return

        table = Table(title="Notes", show_header=True, header_style="bold magenta")
        table.add_column("ID", style="dim")
        table.add_column("Title", style="cyan")
        table.add_column("Date")
        table.add_column("Tags")
        table.add_column("Published")
        for note in notes:
            table.add_row(
                note.id,
                note.title,
                note.date,
                ", ".join(str(t) for t in note.tags),
                "yes" if note.published else "no",
            )
        console.print(table)

    @app.command()
    def sync(
        confirm_each: Annotated[
            bool | None,
            typer.Option(
                "--confirm-each/--yes-each",
                help="Confirm every note creation individually (default from config)",
            ),
        ] = None,
        no_git_check: Annotated[
            bool,
            typer.Option("--no-git-check", help="Skip the uncommitted changes check"),
        ] = False,
        config_path: ConfigOption = None,
        log_level: LogLevelOption = None,
        verbose: VerboseOption = False,
    ) -> None:
        """Reconcile the notes directory with the remote store."""
        start_time = time.time()
        config, logger = get_config_and_logger(config_path, log_level, verbose=verbose)

        logger.info(
            "cli_command_started",
            command="sync",
            confirm_each=confirm_each,
            git_check=not no_git_check,
            config_path=str(config_path) if config_path else None,
        )

        try:
            run_sync(
                config=config,
                logger=logger,
                confirm_each=config.confirm_each if confirm_each is None else confirm_each,
                git_check=config.git_check and not no_git_check,
            )
        except NotesSyncError as e:
            logger.info(
                "cli_command_completed",
                command="sync",
                duration=round(time.time() - start_time, 2),
                success=False,
            )
            exit_with_error(e, logger)

        logger.info(
            "cli_command_completed",
            command="sync",
            duration=round(time.time() - start_time, 2),
            success=True,
        )
