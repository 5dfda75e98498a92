"""YAML frontmatter decoding and encoding for note files."""

from __future__ import annotations

from io import StringIO
from typing import Any

from ruamel.yaml import YAML
from ruamel.yaml.comments import CommentedMap
from ruamel.yaml.constructor import SafeConstructor
from ruamel.yaml.error import YAMLError

from notes_sync.models import NoteRecord
from notes_sync.utils.logging import get_logger

logger = get_logger(__name__)

DELIMITER = "---"


class _VerbatimTimestampConstructor(SafeConstructor):
    """Safe constructor that keeps YAML timestamps as the text written."""


_VerbatimTimestampConstructor.add_constructor(
    "tag:yaml.org,2002:timestamp", _VerbatimTimestampConstructor.construct_yaml_str
)

# Safe loader: plain dicts and lists, no custom tags
_loader = YAML(typ="safe", pure=True)
_loader.Constructor = _VerbatimTimestampConstructor

# Round-trip dumper keeps key order and quotes strings that would
# otherwise resolve to another type (dates, booleans, numbers)
_dumper = YAML()
_dumper.default_flow_style = False
_dumper.width = 4096
_dumper.allow_unicode = True
_dumper.indent(mapping=2, sequence=4, offset=2)


def _find_block_end(lines: list[str]) -> int | None:
    """Index of the closing delimiter line, or None if there is no block."""
    if not lines or lines[0].strip() != DELIMITER:
        return None
    for index in range(1, len(lines)):
        if lines[index].strip() == DELIMITER:
            return index
    return None


def decode(text: str) -> tuple[dict[str, Any] | None, str]:
    """
    Split note text into its frontmatter mapping and body.

    The block is recognised only when the first line is the delimiter; it
    ends at the next delimiter line. Without a closing delimiter the whole
    text is the body. A block that fails to parse, or parses to something
    other than a mapping, yields None for the frontmatter.

    Args:
        text: Full file content

    Returns:
        Tuple of (frontmatter or None, body)
    """
    lines = text.split("\n")
    end = _find_block_end(lines)
    if end is None:
        return None, text

    raw = "\n".join(lines[1:end])
    body = "\n".join(lines[end + 1 :])

    try:
        parsed = _loader.load(raw)
    except YAMLError as e:
        logger.debug("frontmatter_parse_failed", error=str(e))
        return None, body

    if not isinstance(parsed, dict):
        return None, body

    return parsed, body


def dump_mapping(data: dict[str, Any]) -> str:
    """Serialize a mapping as block-style YAML, preserving key order."""
    output = StringIO()
    _dumper.dump(CommentedMap(data.items()), output)
    return output.getvalue()


def encode(note: NoteRecord) -> str:
    """
    Serialize a note as a frontmatter block followed by its raw body.

    Every field except ``content`` goes into the block. The body is written
    verbatim so that ``decode(encode(note))`` returns ``note.content``.
    """
    frontmatter_text = dump_mapping(note.to_dict(include_content=False))
    return "\n".join([DELIMITER, frontmatter_text.strip(), DELIMITER, note.content])
