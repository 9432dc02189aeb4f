"""Tests for the note and metadata models."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from sapphire_notes.models.schema import (
    MetadataDocument,
    MetadataEntry,
    Note,
    NoteMetadata,
)


class TestNoteMetadata:
    """Tests for NoteMetadata defaults and validation."""

    def test_defaults_follow_config(self, test_config, monkeypatch):
        monkeypatch.setattr(test_config, "default_font_family", "Calibri")
        monkeypatch.setattr(test_config, "default_font_size", 21)

        metadata = NoteMetadata()

        assert metadata.font_family == "Calibri"
        assert metadata.font_size == 21
        assert metadata.cursor_position == 0

    @pytest.mark.parametrize(
        "kwargs",
        [{"font_size": 0}, {"cursor_position": -1}, {"font_family": " "}],
    )
    def test_rejects_invalid_values(self, kwargs):
        with pytest.raises(ValidationError):
            NoteMetadata(**kwargs)

    def test_entry_round_trip(self):
        metadata = NoteMetadata(font_family="Roboto", font_size=13, cursor_position=9)

        entry = MetadataEntry.from_metadata("n", metadata)

        assert entry.name == "n"
        assert entry.to_metadata() == metadata


class TestNote:
    """Tests for the Note model."""

    def test_metadata_is_shared_not_copied(self):
        metadata = NoteMetadata()

        note = Note(name="n", file_path=Path("n.txt"), metadata=metadata)
        metadata.font_size = 33

        assert note.metadata is metadata
        assert note.metadata.font_size == 33

    def test_defaults(self):
        note = Note(name="n", file_path="n.txt")

        assert note.text == ""
        assert note.is_dirty is False
        assert note.file_path == Path("n.txt")
        assert str(note) == "n"


class TestMetadataDocument:
    """Tests for the persisted document shape."""

    def test_count_must_match_entries(self):
        with pytest.raises(ValidationError):
            MetadataDocument(count=1, notes=[])

    def test_names_must_be_unique(self):
        entry = MetadataEntry(name="x", font_size=12, font_family="Arial", cursor_position=0)

        with pytest.raises(ValidationError):
            MetadataDocument(count=2, notes=[entry, entry])
