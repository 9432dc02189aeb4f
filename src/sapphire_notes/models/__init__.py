"""Data models for Sapphire Notes."""

from sapphire_notes.models.schema import (
    METADATA_SCHEMA_VERSION,
    MetadataDocument,
    MetadataEntry,
    Note,
    NoteMetadata,
)

__all__ = [
    "METADATA_SCHEMA_VERSION",
    "MetadataDocument",
    "MetadataEntry",
    "Note",
    "NoteMetadata",
]
