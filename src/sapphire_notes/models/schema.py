"""Data models for Sapphire Notes."""

from pathlib import Path
from typing import List

from pydantic import BaseModel, Field, field_validator, model_validator

from sapphire_notes.config import config

# Version 1 had no cursor_position; version 2 makes it mandatory.
METADATA_SCHEMA_VERSION = 2
LEGACY_SCHEMA_VERSION = 1


class NoteMetadata(BaseModel):
    """Per-note display preferences."""

    font_family: str = Field(default_factory=lambda: config.default_font_family)
    font_size: int = Field(default_factory=lambda: config.default_font_size, gt=0)
    cursor_position: int = Field(default=0, ge=0)

    @field_validator("font_family")
    @classmethod
    def validate_font_family(cls, v: str) -> str:
        """Reject blank font names."""
        if not v.strip():
            raise ValueError("font_family cannot be empty")
        return v


class Note(BaseModel):
    """A plain-text note backed by a single ``.txt`` file.

    ``metadata`` is shared with the metadata store entry for ``name``, so
    font changes made through the store are visible on the note.
    ``is_dirty`` is owned by the caller (typically a UI layer); the
    persistence layer only reads it.
    """

    name: str
    file_path: Path
    text: str = ""
    metadata: NoteMetadata = Field(default_factory=NoteMetadata)
    is_dirty: bool = False

    def __str__(self) -> str:
        return self.name


class MetadataEntry(BaseModel):
    """One persisted record of the metadata store."""

    name: str = Field(..., min_length=1)
    font_size: int = Field(..., gt=0)
    font_family: str = Field(..., min_length=1)
    cursor_position: int = Field(..., ge=0)

    @classmethod
    def from_metadata(cls, name: str, metadata: NoteMetadata) -> "MetadataEntry":
        return cls(
            name=name,
            font_size=metadata.font_size,
            font_family=metadata.font_family,
            cursor_position=metadata.cursor_position,
        )

    def to_metadata(self) -> NoteMetadata:
        return NoteMetadata(
            font_family=self.font_family,
            font_size=self.font_size,
            cursor_position=self.cursor_position,
        )


class MetadataDocument(BaseModel):
    """The whole persisted metadata store: a count followed by its entries."""

    version: int = METADATA_SCHEMA_VERSION
    count: int = Field(..., ge=0)
    notes: List[MetadataEntry] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_consistency(self) -> "MetadataDocument":
        if self.count != len(self.notes):
            raise ValueError(
                f"count is {self.count} but {len(self.notes)} entries are present"
            )
        names = [entry.name for entry in self.notes]
        if len(set(names)) != len(names):
            raise ValueError("duplicate note names in metadata store")
        return self
