"""Tests for frontmatter decoding and encoding."""

import pytest

from notes_sync.models import NoteRecord
from notes_sync.notes.frontmatter import decode, encode


class TestDecode:
    """Splitting note text into frontmatter and body."""

    def test_decodes_mapping_and_body(self) -> None:
        text = "---\nid: n1\ntitle: Hello\ntags:\n  - a\n---\nBody line\n"

        frontmatter, body = decode(text)

        assert frontmatter == {"id": "n1", "title": "Hello", "tags": ["a"]}
        assert body == "Body line\n"

    def test_text_without_frontmatter_is_all_body(self) -> None:
        text = "Just some notes\n---\nnot: frontmatter\n"

        assert decode(text) == (None, text)

    def test_unclosed_delimiter_keeps_full_text(self) -> None:
        text = "---\ntitle: Draft\nno closing line here"

        frontmatter, body = decode(text)

        assert frontmatter is None
        assert body == text

    def test_non_mapping_block_yields_none(self) -> None:
        frontmatter, body = decode("---\n- one\n- two\n---\nBody")

        assert frontmatter is None
        assert body == "Body"

    def test_invalid_yaml_yields_none(self) -> None:
        frontmatter, body = decode("---\ntitle: [unclosed\n---\nBody")

        assert frontmatter is None
        assert body == "Body"

    def test_empty_block_yields_none(self) -> None:
        frontmatter, body = decode("---\n---\nBody")

        assert frontmatter is None
        assert body == "Body"

    def test_delimiters_are_matched_after_trimming(self) -> None:
        frontmatter, body = decode("---  \ntitle: Padded\n  ---\nBody")

        assert frontmatter == {"title": "Padded"}
        assert body == "Body"

    def test_body_keeps_later_delimiter_lines(self) -> None:
        frontmatter, body = decode("---\ntitle: T\n---\nabove\n---\nbelow")

        assert frontmatter == {"title": "T"}
        assert body == "above\n---\nbelow"

    def test_yaml_timestamps_keep_their_text(self) -> None:
        text = (
            "---\n"
            "date: 2024-01-10T09:00:00.000Z\n"
            "createdAt: 2024-01-15 10:00:00\n"
            "updatedAt: 2024-01-15\n"
            "---\n"
        )

        frontmatter, _ = decode(text)

        assert frontmatter == {
            "date": "2024-01-10T09:00:00.000Z",
            "createdAt": "2024-01-15 10:00:00",
            "updatedAt": "2024-01-15",
        }


class TestEncode:
    """Serializing notes as frontmatter plus body."""

    def test_layout(self, sample_record) -> None:
        text = encode(sample_record)
        lines = text.split("\n")

        assert lines[0] == "---"
        assert lines[1] == "id: abc123"
        assert text.endswith("---\n" + sample_record.content)
        assert "content:" not in text

    def test_round_trip(self, sample_record) -> None:
        frontmatter, body = decode(encode(sample_record))

        assert body == sample_record.content
        assert frontmatter == sample_record.to_dict(include_content=False)

    @pytest.mark.parametrize(
        "content",
        ["", "\nleading blank line", "trailing newlines\n\n", "line\n---\nafter rule"],
    )
    def test_round_trip_preserves_content(self, content) -> None:
        note = NoteRecord(id="n1", title="T", content=content, date="2024-01-01")

        _, body = decode(encode(note))

        assert body == content

    def test_string_values_that_look_typed_stay_strings(self) -> None:
        note = NoteRecord(
            id="123",
            title="true",
            date="2024-01-15T10:00:00.000Z",
            extra={"version": "1.0"},
        )

        frontmatter, _ = decode(encode(note))

        assert frontmatter is not None
        assert frontmatter["id"] == "123"
        assert frontmatter["title"] == "true"
        assert frontmatter["date"] == "2024-01-15T10:00:00.000Z"
        assert frontmatter["version"] == "1.0"

    def test_extra_fields_follow_core_fields(self) -> None:
        note = NoteRecord(
            id="n1",
            title="T",
            date="2024-01-01",
            extra={"source": "import", "priority": 2},
        )

        frontmatter, _ = decode(encode(note))

        assert frontmatter is not None
        assert list(frontmatter) == ["id", "title", "date", "tags", "published", "source", "priority"]
        assert frontmatter["priority"] == 2
