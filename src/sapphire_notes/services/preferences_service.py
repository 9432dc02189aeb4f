"""User preferences, including the configurable notes directory."""

import json
import logging
import os
from pathlib import Path
from typing import TYPE_CHECKING, Optional, Union

from pydantic import BaseModel, Field, ValidationError, field_validator

from sapphire_notes.config import config
from sapphire_notes.exceptions import (
    ConfigurationError,
    ErrorCode,
    StorageError,
)
from sapphire_notes.storage.directory_migrator import MigrationResult

if TYPE_CHECKING:
    from sapphire_notes.services.notes_service import NotesService

logger = logging.getLogger(__name__)


class Preferences(BaseModel):
    """Preferences read by the persistence layer on every operation."""

    notes_directory: str = Field(default_factory=lambda: str(config.notes_dir))

    @field_validator("notes_directory")
    @classmethod
    def validate_notes_directory(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("notes_directory cannot be empty")
        return v


class PreferencesService:
    """Loads and saves :class:`Preferences` as a JSON file."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self.preferences = Preferences()

    def load(self) -> Preferences:
        """Load preferences from disk, keeping defaults if the file is missing.

        The returned object is the one held by this service, so collaborators
        that keep a reference observe later changes.

        Raises:
            ConfigurationError: If the file exists but is not valid.
        """
        if not self.path.exists():
            logger.info(f"No preferences at {self.path}, using defaults")
            return self.preferences

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
            loaded = Preferences.model_validate(data)
        except (json.JSONDecodeError, ValidationError) as e:
            raise ConfigurationError(
                f"Invalid preferences file {self.path.name}: {e}",
                config_key="preferences",
                code=ErrorCode.PREFERENCES_INVALID,
            ) from e

        self.preferences.notes_directory = loaded.notes_directory
        return self.preferences

    def save(self) -> None:
        """Write preferences atomically."""
        temp_file = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(temp_file, "w", encoding="utf-8") as f:
                f.write(self.preferences.model_dump_json(indent=2))
            os.replace(temp_file, self.path)
        except OSError as e:
            raise StorageError(
                "Failed to write preferences",
                operation="save",
                path=str(self.path),
                code=ErrorCode.STORAGE_WRITE_FAILED,
                original_error=e,
            ) from e

    def change_notes_directory(
        self, new_directory: Union[str, Path], notes_service: "NotesService"
    ) -> Optional[MigrationResult]:
        """Point preferences at ``new_directory`` and migrate existing notes.

        The preference is saved only after every note has moved. If the move
        fails, the in-memory preference is restored to ``old_directory`` and
        the saved file is left untouched; files already moved stay in
        ``new_directory``.

        Returns:
            The migration result, or None when the directory did not change.
        """
        new_directory = str(Path(new_directory).expanduser())
        old_directory = self.preferences.notes_directory
        if Path(old_directory).expanduser() == Path(new_directory):
            return None

        self.preferences.notes_directory = new_directory
        try:
            result = notes_service.move_all(old_directory)
        except (OSError, ConfigurationError):
            self.preferences.notes_directory = old_directory
            raise

        self.save()
        logger.info(f"Notes directory changed from {old_directory} to {new_directory}")
        return result
