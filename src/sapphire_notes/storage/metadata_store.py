"""Sidecar store for per-note display metadata."""

import logging
import os
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, Set, Union

import yaml
from pydantic import ValidationError as PydanticValidationError

from sapphire_notes.exceptions import (
    ErrorCode,
    MetadataCorruptionError,
    StorageError,
)
from sapphire_notes.models.schema import (
    LEGACY_SCHEMA_VERSION,
    METADATA_SCHEMA_VERSION,
    MetadataDocument,
    MetadataEntry,
    NoteMetadata,
)

logger = logging.getLogger(__name__)


class MetadataStore:
    """Keyed collection of ``name -> NoteMetadata``, persisted as a whole.

    The store is loaded once at startup with :meth:`load_or_create` and
    rewritten wholesale by every :meth:`save`. Entries keep insertion order,
    so saving twice without a mutation in between produces identical bytes.

    The mutating accessors only touch memory; callers decide when to
    :meth:`save`.
    """

    def __init__(self, path: Union[str, Path]):
        """Initialize the store.

        Args:
            path: Location of the YAML store file. It should live outside
                  the notes directory.
        """
        self.path = Path(path)
        self._entries: Dict[str, NoteMetadata] = {}

    # =========================================================================
    # Persistence
    # =========================================================================

    def load_or_create(self) -> None:
        """Load the store from disk, creating an empty one if it is missing.

        Raises:
            MetadataCorruptionError: If the file exists but cannot be parsed
                or fails schema validation.
            StorageError: If the file exists but cannot be read.
        """
        if not self.path.exists():
            logger.info(f"No metadata store at {self.path}, creating an empty one")
            self._entries = {}
            self.save()
            return

        try:
            raw = self.path.read_text(encoding="utf-8")
        except OSError as e:
            raise StorageError(
                "Failed to read metadata store",
                operation="load",
                path=str(self.path),
                code=ErrorCode.STORAGE_READ_FAILED,
                original_error=e,
            ) from e

        document = self._parse(raw)
        self._entries = {entry.name: entry.to_metadata() for entry in document.notes}
        logger.debug(f"Loaded {len(self._entries)} metadata entries from {self.path}")

    def _parse(self, raw: str) -> MetadataDocument:
        try:
            data = yaml.safe_load(raw)
        except yaml.YAMLError as e:
            raise MetadataCorruptionError(
                "Metadata store is not valid YAML",
                path=str(self.path),
                original_error=e,
            ) from e

        if not isinstance(data, dict):
            raise MetadataCorruptionError(
                "Metadata store must contain a mapping", path=str(self.path)
            )

        version = data.get("version", LEGACY_SCHEMA_VERSION)
        if version == LEGACY_SCHEMA_VERSION:
            data = self._migrate_legacy(data)
        elif version != METADATA_SCHEMA_VERSION:
            raise MetadataCorruptionError(
                f"Unsupported metadata store version: {version!r}",
                path=str(self.path),
            )

        try:
            return MetadataDocument.model_validate(data)
        except PydanticValidationError as e:
            raise MetadataCorruptionError(
                "Metadata store failed validation",
                path=str(self.path),
                original_error=e,
            ) from e

    def _migrate_legacy(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Upgrade a version 1 document, which had no cursor positions."""
        logger.info(f"Migrating legacy metadata store {self.path.name}")
        notes = data.get("notes") or []
        migrated = []
        for entry in notes:
            if isinstance(entry, dict):
                entry = {"cursor_position": 0, **entry}
            migrated.append(entry)
        return {**data, "version": METADATA_SCHEMA_VERSION, "notes": migrated}

    def save(self) -> None:
        """Serialise the entire mapping, replacing the previous file.

        The file is written to a temporary sibling first and then moved into
        place, so a failed write never leaves a truncated store behind.

        Raises:
            StorageError: If the file cannot be written.
        """
        document = MetadataDocument(
            version=METADATA_SCHEMA_VERSION,
            count=len(self._entries),
            notes=[
                MetadataEntry.from_metadata(name, metadata)
                for name, metadata in self._entries.items()
            ],
        )
        content = yaml.safe_dump(
            document.model_dump(mode="json"),
            sort_keys=False,
            allow_unicode=True,
            default_flow_style=False,
        )

        temp_file = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(temp_file, "w", encoding="utf-8", newline="\n") as f:
                f.write(content)
            os.replace(temp_file, self.path)
        except OSError as e:
            raise StorageError(
                "Failed to write metadata store",
                operation="save",
                path=str(self.path),
                code=ErrorCode.STORAGE_WRITE_FAILED,
                original_error=e,
            ) from e

    # =========================================================================
    # Entry access
    # =========================================================================

    def add(self, name: str, metadata: NoteMetadata) -> None:
        """Register ``metadata`` under ``name``, replacing any existing entry."""
        self._entries[name] = metadata

    def remove(self, name: str) -> None:
        """Drop the entry for ``name``. Missing names are ignored."""
        self._entries.pop(name, None)

    def contains(self, name: str) -> bool:
        return name in self._entries

    def get(self, name: str) -> NoteMetadata:
        """Return the metadata for ``name``.

        Raises:
            KeyError: If there is no entry for ``name``.
        """
        return self._entries[name]

    def clear(self) -> None:
        self._entries.clear()

    def count(self) -> int:
        return len(self._entries)

    def names(self) -> Set[str]:
        return set(self._entries)

    def remove_missing(self, valid_names: Iterable[str]) -> int:
        """Prune entries whose name is not in ``valid_names``.

        Args:
            valid_names: Names of the notes that currently exist on disk.

        Returns:
            Number of entries removed.
        """
        valid = set(valid_names)
        stale = [name for name in self._entries if name not in valid]
        for name in stale:
            del self._entries[name]
        if stale:
            logger.info(f"Removed {len(stale)} stale metadata entries")
        return len(stale)

    # =========================================================================
    # "All notes share one font" helpers
    # =========================================================================

    def get_distinct_fonts(self) -> Set[str]:
        return {metadata.font_family for metadata in self._entries.values()}

    def get_distinct_font_sizes(self) -> Set[int]:
        return {metadata.font_size for metadata in self._entries.values()}

    def set_font_for_all(self, font: str) -> None:
        """Set every entry's font family in memory. Call :meth:`save` after."""
        if not font.strip():
            raise ValueError("font cannot be empty")
        for metadata in self._entries.values():
            metadata.font_family = font

    def set_font_size_for_all(self, font_size: int) -> None:
        """Set every entry's font size in memory. Call :meth:`save` after."""
        if font_size < 1:
            raise ValueError("font_size must be >= 1")
        for metadata in self._entries.values():
            metadata.font_size = font_size

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)
