"""Command-line interface for notes-sync."""

from __future__ import annotations

import typer

from .cli_commands import note_commands, notes_commands

app = typer.Typer(
    name="notes-sync",
    help="Keep a directory of markdown notes in sync with a remote note store.",
    no_args_is_help=True,
)

notes_app = typer.Typer(help="Commands over the whole note collection", no_args_is_help=True)
note_app = typer.Typer(help="Commands for a single remote note", no_args_is_help=True)

app.add_typer(notes_app, name="notes")
app.add_typer(note_app, name="note")

notes_commands.register(notes_app)
note_commands.register(note_app)


def cli() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    cli()
