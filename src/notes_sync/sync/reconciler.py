"""Three-way classification of local notes against remote records.

Everything here is a pure function of its inputs: no I/O, no caching. The
orchestrator calls ``classify`` again after every step that may have changed
either side, so a classification never outlives the snapshot it came from.
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Sequence
from pathlib import Path
from typing import Any

from notes_sync.models import NoteRecord, SyncUnit, SyncUnitKind

# Compared first and with their own rules; every other key is compared by ==
_SPECIAL_FIELDS = ("title", "date", "content", "tags")
# Identity, and the timestamp the store rewrites on every update
_IGNORED_FIELDS = ("id", "updatedAt")


def _serialize_tags(tags: Any) -> str:
    # Order-sensitive on purpose: ["a", "b"] and ["b", "a"] differ
    return json.dumps(tags if tags is not None else [], sort_keys=True, default=str)


def field_diffs(local: NoteRecord, remote: NoteRecord) -> list[str]:
    """
    Names of the fields whose values differ between the two sides.

    ``title``, ``date`` and ``content`` are compared verbatim (the local
    content is the file body without its frontmatter). ``tags`` are compared
    as ordered sequences. Every other field present on either side, except
    ``id`` and the store-maintained ``updatedAt``, is compared by strict
    equality with a missing field read as None.
    """
    diffs: list[str] = []

    if local.title != remote.title:
        diffs.append("title")
    if local.date != remote.date:
        diffs.append("date")
    if local.content != remote.content:
        diffs.append("content")
    if _serialize_tags(local.tags) != _serialize_tags(remote.tags):
        diffs.append("tags")

    local_fields = local.comparable_fields()
    remote_fields = remote.comparable_fields()
    keys = list(local_fields)
    keys.extend(key for key in remote_fields if key not in local_fields)

    for key in keys:
        if key in _SPECIAL_FIELDS or key in _IGNORED_FIELDS:
            continue
        if local_fields.get(key) != remote_fields.get(key):
            diffs.append(key)

    return diffs


def classify(
    local_notes: Sequence[tuple[Path, NoteRecord]],
    remote_notes: Iterable[NoteRecord],
) -> list[SyncUnit]:
    """
    Pair local and remote notes by id.

    Args:
        local_notes: Resolved local notes as ``(path, note)`` in scan order
        remote_notes: Remote records

    Returns:
        One unit per id: local ids first in scan order, then remote-only ids
        in remote order. When several files share an id the first one is used.
    """
    remote_by_id: dict[str, NoteRecord] = {}
    for remote in remote_notes:
        remote_by_id.setdefault(remote.id, remote)

    units: list[SyncUnit] = []
    seen: set[str] = set()

    for path, local in local_notes:
        if local.id in seen:
            continue
        seen.add(local.id)

        remote = remote_by_id.get(local.id)
        if remote is None:
            units.append(
                SyncUnit(
                    id=local.id,
                    kind=SyncUnitKind.LOCAL_ONLY,
                    local_path=path,
                    local_note=local,
                )
            )
            continue

        units.append(
            SyncUnit(
                id=local.id,
                kind=SyncUnitKind.MATCHED,
                local_path=path,
                local_note=local,
                remote_note=remote,
                field_diffs=field_diffs(local, remote),
            )
        )

    for note_id, remote in remote_by_id.items():
        if note_id not in seen:
            units.append(SyncUnit(id=note_id, kind=SyncUnitKind.REMOTE_ONLY, remote_note=remote))

    return units


def local_only(units: Iterable[SyncUnit]) -> list[SyncUnit]:
    return [unit for unit in units if unit.kind is SyncUnitKind.LOCAL_ONLY]


def remote_only(units: Iterable[SyncUnit]) -> list[SyncUnit]:
    return [unit for unit in units if unit.kind is SyncUnitKind.REMOTE_ONLY]


def find_conflicts(units: Iterable[SyncUnit]) -> list[SyncUnit]:
    """Matched units with at least one differing field."""
    return [unit for unit in units if unit.is_conflict]
