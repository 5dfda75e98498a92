"""CLI command modules for notes-sync.

This package contains modular command handlers for the CLI.
Implemented modules:
- shared.py: Common utilities (config/logger loading, console, remote factory)
- notes_commands.py: Collection commands (list, sync)
- note_commands.py: Single-note commands (view, open)
- sync_handler.py: Sync command implementation
"""

from .shared import console, get_config_and_logger
from .sync_handler import run_sync

__all__ = [
    "console",
    "get_config_and_logger",
    "run_sync",
]
