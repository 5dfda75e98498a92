"""Pytest configuration and fixtures for the test suite."""

from pathlib import Path

import pytest

from notes_sync.models import NoteRecord
from notes_sync.notes.local_store import LocalNoteStore


@pytest.fixture
def notes_dir(tmp_path: Path) -> Path:
    """Provide an empty notes directory."""
    directory = tmp_path / "notes"
    directory.mkdir()
    return directory


@pytest.fixture
def store(notes_dir: Path) -> LocalNoteStore:
    """Provide a local store over the notes directory."""
    return LocalNoteStore(notes_dir)


@pytest.fixture
def sample_record() -> NoteRecord:
    """Provide a fully populated remote note."""
    return NoteRecord(
        id="abc123",
        title="Weekly Review",
        content="# Weekly Review\n\n- shipped the sync tool\n",
        date="2024-01-15T10:00:00.000Z",
        created_at="2024-01-15T10:00:00.000Z",
        updated_at="2024-01-16T08:30:00.000Z",
        tags=["review", "weekly"],
        published=False,
    )

