"""Sync command implementation logic."""

from typing import Any

from rich.table import Table

from ..config import Config
from ..exceptions import SyncAborted
from ..notes.local_store import LocalNoteStore
from ..remote.metadata_cache import MetadataCache
from ..sync.decisions import ConsoleDecisionSource
from ..sync.orchestrator import SyncOrchestrator, SyncReport
from ..sync.vcs import GitVersionControl, NoVersionControl
from .shared import build_remote, console


def run_sync(
    config: Config,
    logger: Any,
    confirm_each: bool = True,
    git_check: bool = True,
) -> SyncReport:
    """Execute the sync operation.

    Args:
        config: Configuration object
        logger: Logger instance
        confirm_each: Confirm every note creation individually
        git_check: Require a clean notes directory before and after conflicts

    Raises:
        NotesSyncError: On configuration, remote or VCS failures, or when
            the user exits at a prompt
    """
    notes_dir = config.require_notes_dir()
    logger.info("sync_started", path=str(notes_dir), git_check=git_check)

    vcs = GitVersionControl(config.vcs_tool) if git_check else NoVersionControl()
    orchestrator = SyncOrchestrator(
        store=LocalNoteStore(notes_dir),
        remote=build_remote(config),
        decisions=ConsoleDecisionSource(console),
        vcs=vcs,
        confirm_each=confirm_each,
        commit_message=config.commit_message,
    )

    try:
        with orchestrator.remote:
            report = orchestrator.run()
    except SyncAborted:
        _display_sync_results(orchestrator.report)
        raise
    finally:
        _invalidate_listing_cache(config, orchestrator.report, logger)

    _display_sync_results(report)
    return report


def _invalidate_listing_cache(config: Config, report: SyncReport, logger: Any) -> None:
    # Cached listings predate notes this run created or pushed
    if report.created or report.recreated or report.pushed:
        MetadataCache(config.get_cache_file()).clear()
        logger.debug("metadata_cache_cleared", path=str(config.get_cache_file()))


def _display_sync_results(report: SyncReport) -> None:
    table = Table(title="Sync Results", show_header=True, header_style="bold magenta")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green")

    for key, value in report.to_dict().items():
        if key == "skipped_ids":
            value = ", ".join(value) if value else "-"
        table.add_row(key, str(value))

    console.print()
    console.print(table)
