"""Single-note commands: view and open."""

from __future__ import annotations

from typing import Annotated

import typer
from rich.markdown import Markdown

from ..exceptions import NotesSyncError, RemoteStoreError
from .shared import (
    ConfigOption,
    LogLevelOption,
    VerboseOption,
    build_remote,
    console,
    exit_with_error,
    get_config_and_logger,
)


def register(app: typer.Typer) -> None:
    """Register single-note commands on the given Typer app."""

    @app.command()
    def view(
        note_id: Annotated[str, typer.Argument(help="Remote note id")],
        raw: Annotated[
            bool, typer.Option("--raw", help="Print markdown source instead of rendering it")
        ] = False,
        config_path: ConfigOption = None,
        log_level: LogLevelOption = None,
        verbose: VerboseOption = False,
    ) -> None:
        """Print a remote note as markdown."""
        config, logger = get_config_and_logger(config_path, log_level, verbose=verbose)

        try:
            with build_remote(config) as remote:
                note = remote.get_note_by_id(note_id)
            if note is None:
                msg = f"Note not found: {note_id}"
                raise RemoteStoreError(
                    msg, suggestion="Run `notes list` to see available ids."
                )
        except NotesSyncError as e:
            exit_with_error(e, logger)

        text = f"# {note.title}\n\n{note.content}"
        if raw:
            typer.echo(text)
        else:
            console.print(Markdown(text))

    @app.command(name="open")
    def open_note(
        note_id: Annotated[str, typer.Argument(help="Remote note id")],
        config_path: ConfigOption = None,
        log_level: LogLevelOption = None,
        verbose: VerboseOption = False,
    ) -> None:
        """Open a note in the remote store's web interface."""
        config, logger = get_config_and_logger(config_path, log_level, verbose=verbose)
        url = config.get_note_url(note_id)
        logger.info("opening_note", id=note_id, url=url)
        typer.launch(url)
