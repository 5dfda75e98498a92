"""Interactive sync between the notes directory and the remote store.

The run is a small state machine::

    GIT_PRECHECK -> ENSURE_TRACKED -> DOWNLOAD -> CONFLICT_SURFACE
        -> CONFLICT_REVIEW -> DONE

Every phase takes a fresh scan of the directory and a fresh remote listing,
so a decision made in one phase is visible to the next. Every choice is
requested from the decision source, and an exit answer raises SyncAborted.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from notes_sync.domain.interfaces.decision_source import IDecisionSource
from notes_sync.domain.interfaces.remote_notes import IRemoteNotes
from notes_sync.domain.interfaces.vcs import IVersionControl
from notes_sync.exceptions import SyncAborted
from notes_sync.models import SyncUnit
from notes_sync.notes.local_store import LocalNoteStore
from notes_sync.sync.reconciler import classify, find_conflicts, local_only, remote_only
from notes_sync.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_COMMIT_MESSAGE = "notes: snapshot before sync"


class SyncState(str, Enum):
    GIT_PRECHECK = "git_precheck"
    ENSURE_TRACKED = "ensure_tracked"
    DOWNLOAD = "download"
    CONFLICT_SURFACE = "conflict_surface"
    CONFLICT_REVIEW = "conflict_review"
    DONE = "done"


class DirtyTreeChoice(str, Enum):
    COMMIT = "commit"
    EXTERNAL_TOOL = "externalTool"
    RECHECK = "recheck"
    EXIT = "exit"


class MissingRemoteChoice(str, Enum):
    RECREATE = "recreate"
    DELETE = "delete"
    SKIP = "skip"


class DuplicateChoice(str, Enum):
    DELETE_FIRST = "delete-first"
    DELETE_SECOND = "delete-second"
    EXIT = "exit"


class ReviewChoice(str, Enum):
    RECHECK = "recheck"
    EXIT = "exit"


# Options offered while the tree is dirty during conflict review
_REVIEW_DIRTY_OPTIONS = [
    DirtyTreeChoice.EXTERNAL_TOOL.value,
    DirtyTreeChoice.RECHECK.value,
    DirtyTreeChoice.EXIT.value,
]


@dataclass
class SyncReport:
    """What a sync run did."""

    created: int = 0
    recreated: int = 0
    downloaded: int = 0
    deleted: int = 0
    conflicts_surfaced: int = 0
    pushed: int = 0
    skipped: int = 0
    skipped_ids: list[str] = field(default_factory=list)
    final_state: SyncState = SyncState.GIT_PRECHECK
    aborted: bool = False

    def to_dict(self) -> dict[str, object]:
        return {
            "created": self.created,
            "recreated": self.recreated,
            "downloaded": self.downloaded,
            "deleted": self.deleted,
            "conflicts_surfaced": self.conflicts_surfaced,
            "pushed": self.pushed,
            "skipped": self.skipped,
            "skipped_ids": list(self.skipped_ids),
            "final_state": self.final_state.value,
            "aborted": self.aborted,
        }


class SyncOrchestrator:
    """Drive one interactive sync run.

    The remote must already be connected: the caller owns its lifecycle
    (``with remote: orchestrator.run()``).
    """

    def __init__(
        self,
        store: LocalNoteStore,
        remote: IRemoteNotes,
        decisions: IDecisionSource,
        vcs: IVersionControl,
        confirm_each: bool = True,
        commit_message: str = DEFAULT_COMMIT_MESSAGE,
    ):
        self.store = store
        self.remote = remote
        self.decisions = decisions
        self.vcs = vcs
        self.confirm_each = confirm_each
        self.commit_message = commit_message
        self.report = SyncReport()

        self._handlers = {
            SyncState.GIT_PRECHECK: self._git_precheck,
            SyncState.ENSURE_TRACKED: self._ensure_tracked,
            SyncState.DOWNLOAD: self._download,
            SyncState.CONFLICT_SURFACE: self._conflict_surface,
            SyncState.CONFLICT_REVIEW: self._conflict_review,
        }

    @property
    def notes_dir(self) -> Path:
        return self.store.notes_dir

    def run(self) -> SyncReport:
        """Run every phase until DONE or until the user exits.

        Raises:
            SyncAborted: If the user chose to exit
            RemoteStoreError: If the remote store fails mid-run
        """
        self.report = SyncReport()
        state = SyncState.GIT_PRECHECK
        logger.info("sync_started", path=str(self.notes_dir))

        try:
            while state is not SyncState.DONE:
                self.report.final_state = state
                logger.debug("sync_phase_started", phase=state.value)
                state = self._handlers[state]()
        except SyncAborted as e:
            self.report.aborted = True
            self.report.final_state = SyncState(e.state)
            logger.warning("sync_aborted", phase=e.state)
            raise

        self.report.final_state = SyncState.DONE
        self._done()
        return self.report

    def _classify(self) -> list[SyncUnit]:
        files = self.store.scan()
        local_notes = self.store.resolved_notes(files)
        return classify(local_notes, self.remote.get_all_notes())

    def _git_precheck(self) -> SyncState:
        options = [choice.value for choice in DirtyTreeChoice]
        while self.vcs.has_uncommitted_changes(self.notes_dir):
            logger.warning(
                "uncommitted_changes",
                path=str(self.notes_dir),
                status=self.vcs.short_status(self.notes_dir),
            )
            choice = DirtyTreeChoice(
                self.decisions.pick_one("Notes directory has uncommitted changes", options)
            )
            if choice is DirtyTreeChoice.COMMIT:
                self.vcs.commit_all(self.notes_dir, self.commit_message)
            elif choice is DirtyTreeChoice.EXTERNAL_TOOL:
                self.vcs.open_interactive_tool(self.notes_dir)
            elif choice is DirtyTreeChoice.EXIT:
                raise SyncAborted(SyncState.GIT_PRECHECK.value)
        return SyncState.ENSURE_TRACKED

    def _ensure_tracked(self) -> SyncState:
        self._resolve_duplicates()

        files = self.store.scan()
        for path in self.store.invalid_files(files):
            logger.warning("note_file_invalid", path=str(path))

        self._create_untracked()
        self._handle_missing_remote()
        return SyncState.DOWNLOAD

    def _resolve_duplicates(self) -> None:
        options = [choice.value for choice in DuplicateChoice]
        while duplicates := self.store.duplicate_ids(self.store.scan()):
            note_id, paths = next(iter(duplicates.items()))
            first, second = paths[0], paths[1]
            logger.warning(
                "duplicate_note_id", id=note_id, first=str(first), second=str(second)
            )
            choice = DuplicateChoice(
                self.decisions.pick_one(
                    f"Note {note_id} is tracked by {first.name} and {second.name}", options
                )
            )
            if choice is DuplicateChoice.EXIT:
                raise SyncAborted(SyncState.ENSURE_TRACKED.value)
            target = first if choice is DuplicateChoice.DELETE_FIRST else second
            self.store.delete(target)
            self.report.deleted += 1

    def _create_untracked(self) -> None:
        creatable = self.store.creatable_notes(self.store.scan())
        if not creatable:
            logger.info("no_notes_to_create")
            return

        logger.info(
            "notes_to_create", count=len(creatable), titles=[note.title for _, note in creatable]
        )
        if not self.decisions.confirm(f"Create {len(creatable)} notes remotely?"):
            logger.info("note_creation_declined", count=len(creatable))
            self.report.skipped += len(creatable)
            return

        for path, note in creatable:
            if self.confirm_each and not self.decisions.confirm(f"Create note {note.title}?"):
                logger.info("note_creation_skipped", path=str(path), title=note.title)
                self.report.skipped += 1
                continue
            record = self.remote.create_note(note)
            self.store.write(record, path=path)
            self.report.created += 1
            logger.info("note_created", path=str(path), id=record.id, title=record.title)

    def _handle_missing_remote(self) -> None:
        missing = local_only(self._classify())
        if not missing:
            logger.info("no_notes_missing_remotely")
            return

        logger.warning("notes_missing_remotely", count=len(missing))
        options = [choice.value for choice in MissingRemoteChoice]
        for unit in missing:
            path = unit.local_path
            note = unit.local_note
            if path is None or note is None:
                continue
            logger.info("note_missing_remotely", id=unit.id, title=note.title, path=str(path))
            choice = MissingRemoteChoice(
                self.decisions.pick_one(f"Note {note.title} no longer exists remotely", options)
            )
            if choice is MissingRemoteChoice.RECREATE:
                record = self.remote.create_note(note.to_creatable())
                self.store.write(record, path=path)
                self.report.recreated += 1
                logger.info("note_recreated", path=str(path), old_id=unit.id, id=record.id)
            elif choice is MissingRemoteChoice.DELETE and self.decisions.confirm(
                f"Delete local file {path.name}?"
            ):
                self.store.delete(path)
                self.report.deleted += 1
            else:
                logger.info("note_missing_remotely_skipped", id=unit.id, path=str(path))
                self.report.skipped += 1
                self.report.skipped_ids.append(unit.id)

    def _download(self) -> SyncState:
        to_download = remote_only(self._classify())
        if not to_download:
            logger.info("no_notes_to_download")
            return SyncState.CONFLICT_SURFACE

        logger.info(
            "notes_to_download", count=len(to_download), titles=[unit.title for unit in to_download]
        )
        if not self.decisions.confirm(f"Download {len(to_download)} notes?"):
            logger.info("download_declined", count=len(to_download))
            self.report.skipped += len(to_download)
            return SyncState.CONFLICT_SURFACE

        for unit in to_download:
            if unit.remote_note is None:
                continue
            written = self.store.write(
                unit.remote_note, confirm_overwrite=True, decisions=self.decisions
            )
            if written is None:
                self.report.skipped += 1
            else:
                self.report.downloaded += 1
        return SyncState.CONFLICT_SURFACE

    def _conflict_surface(self) -> SyncState:
        conflicts = find_conflicts(self._classify())
        if not conflicts:
            logger.info("no_conflicts_found")
            return SyncState.DONE

        logger.warning("conflicts_found", count=len(conflicts))
        for unit in conflicts:
            if unit.remote_note is None or unit.local_path is None:
                continue
            self.store.write(unit.remote_note, path=unit.local_path)
            self.report.conflicts_surfaced += 1
            logger.info(
                "conflict_surfaced",
                path=str(unit.local_path),
                id=unit.id,
                title=unit.title,
                fields=unit.field_diffs,
            )
        return SyncState.CONFLICT_REVIEW

    def _conflict_review(self) -> SyncState:
        while True:
            if not self.vcs.detects_changes:
                choice = ReviewChoice(
                    self.decisions.pick_one(
                        "Conflicting notes now hold the remote version; edit them, then recheck",
                        [choice.value for choice in ReviewChoice],
                    )
                )
                if choice is ReviewChoice.EXIT:
                    raise SyncAborted(SyncState.CONFLICT_REVIEW.value)

            while self.vcs.has_uncommitted_changes(self.notes_dir):
                logger.info(
                    "review_changes_pending",
                    path=str(self.notes_dir),
                    status=self.vcs.short_status(self.notes_dir),
                )
                choice = DirtyTreeChoice(
                    self.decisions.pick_one(
                        "Review the surfaced conflicts, then commit", _REVIEW_DIRTY_OPTIONS
                    )
                )
                if choice is DirtyTreeChoice.EXTERNAL_TOOL:
                    self.vcs.open_interactive_tool(self.notes_dir)
                elif choice is DirtyTreeChoice.EXIT:
                    raise SyncAborted(SyncState.CONFLICT_REVIEW.value)

            conflicts = find_conflicts(self._classify())
            if not conflicts:
                logger.info("conflicts_resolved")
                return SyncState.DONE

            pushed = 0
            for unit in conflicts:
                if unit.local_note is None or unit.local_path is None:
                    continue
                logger.info("conflict_remains", id=unit.id, title=unit.title, fields=unit.field_diffs)
                if not self.decisions.confirm(f"Push local version of {unit.title}?"):
                    logger.info("push_skipped", id=unit.id, title=unit.title)
                    self.report.skipped += 1
                    continue
                self.remote.update_note(unit.id, unit.local_note)
                refreshed = self.remote.get_note_by_id(unit.id)
                if refreshed is not None:
                    self.store.write(refreshed, path=unit.local_path)
                pushed += 1
                self.report.pushed += 1
                logger.info("note_pushed", path=str(unit.local_path), id=unit.id)

            # Declined pushes stay open; the next pass reclassifies from scratch
            if pushed or not self.vcs.detects_changes:
                continue

            choice = ReviewChoice(
                self.decisions.pick_one(
                    "No changes were pushed", [choice.value for choice in ReviewChoice]
                )
            )
            if choice is ReviewChoice.EXIT:
                raise SyncAborted(SyncState.CONFLICT_REVIEW.value)

    def _done(self) -> None:
        logger.info("sync_completed", **self.report.to_dict())
