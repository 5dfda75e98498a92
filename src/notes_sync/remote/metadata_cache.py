"""Disposable JSON cache in front of the remote metadata listing."""

import json
import time
from pathlib import Path
from typing import Any

from notes_sync.domain.interfaces.remote_notes import IRemoteNotes
from notes_sync.models import NoteMetadata
from notes_sync.utils.io import write_text_atomic
from notes_sync.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_TTL_SECONDS = 300.0


class MetadataCache:
    """TTL cache of note metadata stored as ``{"timestamp", "notes"}`` JSON.

    The timestamp is in epoch milliseconds. The file is only an optimization
    for listings: any read or write problem is logged and treated as a miss,
    and the sync engine never consults it.
    """

    def __init__(self, cache_file: Path, ttl_seconds: float = DEFAULT_TTL_SECONDS):
        self.cache_file = cache_file
        self._ttl_ms = ttl_seconds * 1000

    @staticmethod
    def _now_ms() -> int:
        return int(time.time() * 1000)

    def load(self) -> list[NoteMetadata] | None:
        """Cached notes if present and fresh, else None."""
        if not self.cache_file.exists():
            return None

        try:
            data: Any = json.loads(self.cache_file.read_text(encoding="utf-8"))
            timestamp = float(data["timestamp"])
            raw_notes = data["notes"]
            if self._now_ms() - timestamp > self._ttl_ms:
                logger.debug("metadata_cache_expired", path=str(self.cache_file))
                return None
            return [NoteMetadata.from_dict(item) for item in raw_notes]
        except (OSError, ValueError, KeyError, TypeError, AttributeError) as e:
            logger.warning("metadata_cache_unreadable", path=str(self.cache_file), error=str(e))
            return None

    def store(self, notes: list[NoteMetadata]) -> None:
        payload = {
            "timestamp": self._now_ms(),
            "notes": [note.to_dict() for note in notes],
        }
        try:
            write_text_atomic(self.cache_file, json.dumps(payload, indent=2))
        except OSError as e:
            logger.warning("metadata_cache_write_failed", path=str(self.cache_file), error=str(e))

    def clear(self) -> None:
        """Drop the cache file; the next listing goes to the remote."""
        self.cache_file.unlink(missing_ok=True)


def list_notes_cached(
    remote: IRemoteNotes, cache: MetadataCache, refresh: bool = False
) -> list[NoteMetadata]:
    """Read-through listing: serve from cache when fresh, else fetch and store."""
    if refresh:
        cache.clear()
    else:
        cached = cache.load()
        if cached is not None:
            logger.debug("metadata_cache_hit", count=len(cached))
            return cached

    with remote:
        notes = remote.get_all_notes_metadata()
    cache.store(notes)
    return notes


def filter_notes(
    notes: list[NoteMetadata],
    published: bool = False,
    tag: str | None = None,
    date: str | None = None,
) -> list[NoteMetadata]:
    """Keep notes matching every given filter."""
    filtered = list(notes)
    if published:
        filtered = [note for note in filtered if note.published]
    if tag:
        filtered = [note for note in filtered if tag in note.tags]
    if date:
        filtered = [note for note in filtered if note.date == date]
    return filtered
