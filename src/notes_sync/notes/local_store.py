"""Local notes directory: scanning, resolving and writing note files."""

from __future__ import annotations

from collections import defaultdict
from datetime import datetime, timezone
from pathlib import Path

from notes_sync.domain.interfaces.decision_source import IDecisionSource
from notes_sync.exceptions import LocalStoreError, NotesDirectoryError
from notes_sync.models import CORE_KEYS, CreatableNote, LocalNoteFile, NoteRecord
from notes_sync.notes.filenames import NOTE_EXTENSION, generate_safe_filename
from notes_sync.notes.frontmatter import decode, encode
from notes_sync.utils.io import write_text_atomic
from notes_sync.utils.logging import get_logger

logger = get_logger(__name__)


def _format_mtime(mtime: float) -> str:
    """Format a file modification time the way the remote store writes dates."""
    moment = datetime.fromtimestamp(mtime, tz=timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"


class LocalNoteStore:
    """Index of the markdown notes in one directory.

    Only immediate children ending in ``.md`` are considered. Every call
    re-reads the directory; nothing is cached between calls.
    """

    def __init__(self, notes_dir: Path):
        self.notes_dir = notes_dir

    def list_note_paths(self) -> list[Path]:
        """List note files in the directory.

        Raises:
            NotesDirectoryError: If the directory cannot be listed
        """
        try:
            entries = sorted(self.notes_dir.iterdir(), key=lambda p: p.name)
        except OSError as e:
            logger.error("notes_dir_unreadable", path=str(self.notes_dir), error=str(e))
            msg = f"Cannot list notes directory {self.notes_dir}: {e}"
            raise NotesDirectoryError(
                msg,
                suggestion="Check that notes_dir exists and is readable.",
                context={"path": str(self.notes_dir)},
            ) from e

        return [
            entry
            for entry in entries
            if entry.name.lower().endswith(NOTE_EXTENSION) and entry.is_file()
        ]

    def read(self, path: Path) -> LocalNoteFile:
        """Read and decode one note file."""
        text = path.read_text(encoding="utf-8")
        frontmatter, body = decode(text)
        return LocalNoteFile(
            path=path, frontmatter=frontmatter, body=body, mtime=path.stat().st_mtime
        )

    def scan(self) -> list[LocalNoteFile]:
        """Read every note file; unreadable files are logged and skipped."""
        files: list[LocalNoteFile] = []
        for path in self.list_note_paths():
            try:
                files.append(self.read(path))
            except (OSError, UnicodeDecodeError) as e:
                logger.warning("note_file_unreadable", path=str(path), error=str(e))
        logger.debug("notes_dir_scanned", path=str(self.notes_dir), files=len(files))
        return files

    def resolve(self, file: LocalNoteFile) -> NoteRecord | None:
        """Resolve a tracked file into a note comparable with remote records.

        Requires an id, a creation timestamp (``createdAt`` or ``date``) and
        ``updatedAt``. The title falls back to the filename stem.
        """
        frontmatter = file.frontmatter
        if frontmatter is None:
            logger.debug("note_has_no_frontmatter", path=str(file.path))
            return None

        note_id = file.note_id
        if note_id is None:
            return None

        created_at = frontmatter.get("createdAt") or frontmatter.get("date")
        if not created_at:
            logger.warning("note_unresolvable", path=str(file.path), id=note_id, missing="createdAt")
            return None

        updated_at = frontmatter.get("updatedAt")
        if not updated_at:
            logger.warning("note_unresolvable", path=str(file.path), id=note_id, missing="updatedAt")
            return None

        title = frontmatter.get("title") or file.stem
        tags = frontmatter.get("tags")

        return NoteRecord(
            id=note_id,
            title=str(title),
            content=file.body,
            date=str(frontmatter.get("date") or created_at),
            created_at=frontmatter.get("createdAt"),
            updated_at=updated_at,
            tags=list(tags) if isinstance(tags, list) else [],
            published=bool(frontmatter.get("published", False)),
            extra={
                key: value
                for key, value in frontmatter.items()
                if key not in CORE_KEYS and key != "content"
            },
        )

    def extract_creatable(self, file: LocalNoteFile) -> CreatableNote | None:
        """Build a creatable note from a file that has no id yet."""
        frontmatter = file.frontmatter or {}
        if file.note_id is not None:
            return None

        title = frontmatter.get("title")
        if not isinstance(title, str) or not title:
            title = file.stem
        if not title:
            logger.warning("note_has_no_title", path=str(file.path))
            return None

        note_date = frontmatter.get("date")
        if not isinstance(note_date, str) or not note_date:
            note_date = _format_mtime(file.mtime)

        tags = frontmatter.get("tags")
        return CreatableNote(
            title=title,
            content=file.body,
            date=note_date,
            tags=list(tags) if isinstance(tags, list) else [],
        )

    def resolved_notes(self, files: list[LocalNoteFile]) -> list[tuple[Path, NoteRecord]]:
        """Tracked notes in scan order."""
        resolved = []
        for file in files:
            note = self.resolve(file)
            if note is not None:
                resolved.append((file.path, note))
        return resolved

    def creatable_notes(
        self, files: list[LocalNoteFile]
    ) -> list[tuple[Path, CreatableNote]]:
        """Untracked notes that can be created remotely."""
        creatable = []
        for file in files:
            note = self.extract_creatable(file)
            if note is not None:
                creatable.append((file.path, note))
        return creatable

    def invalid_files(self, files: list[LocalNoteFile]) -> list[Path]:
        """Files that carry an id but cannot be resolved. They are never deleted."""
        return [
            file.path
            for file in files
            if file.note_id is not None and self.resolve(file) is None
        ]

    def duplicate_ids(self, files: list[LocalNoteFile]) -> dict[str, list[Path]]:
        """Ids tracked by more than one file."""
        by_id: dict[str, list[Path]] = defaultdict(list)
        for file in files:
            if file.note_id is not None:
                by_id[file.note_id].append(file.path)
        return {note_id: paths for note_id, paths in by_id.items() if len(paths) > 1}

    def find_path_for_id(self, note_id: str) -> Path | None:
        for file in self.scan():
            if file.note_id == note_id:
                return file.path
        return None

    def existing_names(self) -> set[str]:
        """Lower-cased names of every entry in the directory."""
        try:
            return {entry.name.lower() for entry in self.notes_dir.iterdir()}
        except OSError as e:
            msg = f"Cannot list notes directory {self.notes_dir}: {e}"
            raise NotesDirectoryError(msg, context={"path": str(self.notes_dir)}) from e

    def write(
        self,
        note: NoteRecord,
        path: Path | None = None,
        confirm_overwrite: bool = False,
        decisions: IDecisionSource | None = None,
    ) -> Path | None:
        """
        Write a note to disk.

        Args:
            note: Note to serialize
            path: Target file. Defaults to the file already tracking the id,
                else a new collision-free name derived from the title.
            confirm_overwrite: Ask before replacing an existing file
            decisions: Decision source used for the overwrite question

        Returns:
            The written path, or None if the user declined the overwrite

        Raises:
            LocalStoreError: If ``path`` is given while another file tracks the id
        """
        existing = self.find_path_for_id(note.id)
        if existing is not None and path is not None and existing != path:
            msg = f"Note {note.id} is already tracked by {existing}"
            raise LocalStoreError(
                msg, context={"id": note.id, "path": str(path), "existing": str(existing)}
            )

        if path is None:
            if existing is not None:
                logger.info("note_already_local", id=note.id, path=str(existing))
                path = existing
            else:
                filename = generate_safe_filename(note.title, note.id, self.existing_names())
                path = self.notes_dir / filename

        if confirm_overwrite and path.exists():
            if decisions is None:
                msg = "Overwrite confirmation requested without a decision source"
                raise LocalStoreError(msg, context={"path": str(path)})
            if not decisions.confirm(f"Note already exists locally at {path}, overwrite?"):
                logger.info("note_write_skipped", path=str(path), id=note.id, title=note.title)
                return None

        write_text_atomic(path, encode(note))
        logger.info("note_saved", path=str(path), id=note.id, title=note.title)
        return path

    def delete(self, path: Path) -> None:
        path.unlink()
        logger.info("note_file_deleted", path=str(path))
