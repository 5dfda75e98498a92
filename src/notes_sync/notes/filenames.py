"""Safe filename generation with collision resolution."""

import re
from collections.abc import Collection

from notes_sync.utils.logging import get_logger

logger = get_logger(__name__)

NOTE_EXTENSION = ".md"


def sanitize_title(title: str) -> str:
    """Lower-case a title and reduce it to ``[a-z0-9_.-]`` with single hyphens."""
    safe = re.sub(r"[^a-z0-9_.\-]+", "-", title.lower())
    safe = re.sub(r"-+", "-", safe)
    return safe.strip("-")


def generate_safe_filename(
    title: str,
    note_id: str,
    existing_names: Collection[str],
    extension: str = NOTE_EXTENSION,
) -> str:
    """
    Generate a filename for a note that does not clash with existing files.

    Args:
        title: Note title
        note_id: Note id, used when the title sanitizes to nothing
        existing_names: Names already present in the directory
        extension: File extension including the dot

    Returns:
        A name not present (case-insensitively) in ``existing_names``
    """
    taken = {name.lower() for name in existing_names}
    base = sanitize_title(title) or sanitize_title(note_id) or "note"

    candidate = f"{base}{extension}"
    counter = 1
    while candidate.lower() in taken:
        candidate = f"{base}_{counter}{extension}"
        counter += 1

    if counter > 1:
        logger.debug("filename_collision_resolved", title=title, filename=candidate)
    return candidate
