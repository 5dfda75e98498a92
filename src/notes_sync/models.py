"""Data models for the sync service."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

# Wire keys with a typed home on NoteRecord; everything else lands in `extra`
CORE_KEYS = ("id", "title", "date", "createdAt", "updatedAt", "tags", "published")
CONTENT_KEY = "content"
# Keys the remote store may send that never belong in a note file
DROPPED_KEYS = ("_id", "googleDocContent")


@dataclass
class NoteRecord:
    """A note as the remote store knows it.

    Local files that carry an id, a creation timestamp and ``updatedAt``
    resolve into the same shape so both sides can be compared field by field.
    """

    id: str
    title: str
    content: str = ""
    date: str = ""
    created_at: str | None = None
    updated_at: str | None = None
    tags: list[Any] = field(default_factory=list)
    published: bool = False
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> NoteRecord:
        """Build a record from a wire/frontmatter mapping (camelCase keys)."""
        extra = {
            key: value
            for key, value in data.items()
            if key not in CORE_KEYS and key != CONTENT_KEY and key not in DROPPED_KEYS
        }
        tags = data.get("tags")
        return cls(
            id=str(data["id"]),
            title=str(data.get("title") or ""),
            content=str(data.get(CONTENT_KEY) or ""),
            date=str(data.get("date") or ""),
            created_at=data.get("createdAt"),
            updated_at=data.get("updatedAt"),
            tags=list(tags) if isinstance(tags, list) else [],
            published=bool(data.get("published", False)),
            extra=extra,
        )

    def to_dict(self, include_content: bool = True) -> dict[str, Any]:
        """Serialize with a stable key order: core keys, then extras."""
        data: dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "date": self.date,
        }
        if self.created_at is not None:
            data["createdAt"] = self.created_at
        if self.updated_at is not None:
            data["updatedAt"] = self.updated_at
        data["tags"] = list(self.tags)
        data["published"] = self.published
        for key, value in self.extra.items():
            data.setdefault(key, value)
        if include_content:
            data[CONTENT_KEY] = self.content
        return data

    def comparable_fields(self) -> dict[str, Any]:
        """Scalar fields checked by strict equality during reconciliation."""
        data = self.to_dict(include_content=False)
        for key in ("id", "title", "date", "tags"):
            data.pop(key, None)
        return data

    def to_creatable(self) -> CreatableNote:
        return CreatableNote(
            title=self.title, content=self.content, date=self.date, tags=list(self.tags)
        )


@dataclass
class NoteMetadata:
    """Lightweight projection of a remote note, without its body."""

    id: str
    title: str
    date: str = ""
    tags: list[Any] = field(default_factory=list)
    published: bool = False
    updated_at: str | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> NoteMetadata:
        tags = data.get("tags")
        return cls(
            id=str(data["id"]),
            title=str(data.get("title") or ""),
            date=str(data.get("date") or ""),
            tags=list(tags) if isinstance(tags, list) else [],
            published=bool(data.get("published", False)),
            updated_at=data.get("updatedAt"),
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "date": self.date,
            "tags": list(self.tags),
            "published": self.published,
        }
        if self.updated_at is not None:
            data["updatedAt"] = self.updated_at
        return data


@dataclass
class CreatableNote:
    """A local note the remote store has not assigned an id to yet."""

    title: str
    content: str
    date: str
    tags: list[Any] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "content": self.content,
            "date": self.date,
            "tags": list(self.tags),
        }


@dataclass
class LocalNoteFile:
    """A markdown file from the notes directory, split into frontmatter and body."""

    path: Path
    frontmatter: dict[str, Any] | None
    body: str
    mtime: float = 0.0

    @property
    def stem(self) -> str:
        return self.path.stem

    @property
    def note_id(self) -> str | None:
        """The tracked id, or None for untracked files."""
        if not self.frontmatter:
            return None
        value = self.frontmatter.get("id")
        if value is None or value == "":
            return None
        return str(value)


class SyncUnitKind(str, Enum):
    """How an id relates to the two sides."""

    LOCAL_ONLY = "local_only"
    REMOTE_ONLY = "remote_only"
    MATCHED = "matched"


@dataclass
class SyncUnit:
    """Per-id pairing of a local note and a remote record."""

    id: str
    kind: SyncUnitKind
    local_path: Path | None = None
    local_note: NoteRecord | None = None
    remote_note: NoteRecord | None = None
    field_diffs: list[str] = field(default_factory=list)

    @property
    def is_conflict(self) -> bool:
        return self.kind is SyncUnitKind.MATCHED and bool(self.field_diffs)

    @property
    def title(self) -> str:
        note = self.remote_note or self.local_note
        return note.title if note else ""
