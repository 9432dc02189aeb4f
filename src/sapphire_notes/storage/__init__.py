"""Storage layer for Sapphire Notes."""

from sapphire_notes.storage.directory_migrator import DirectoryMigrator, MigrationResult
from sapphire_notes.storage.metadata_store import MetadataStore

__all__ = [
    "DirectoryMigrator",
    "MetadataStore",
    "MigrationResult",
]
