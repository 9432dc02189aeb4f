"""Configuration module for Sapphire Notes."""

import logging
import os
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, model_validator

# Load environment variables from the project root .env file.
# Anchored to __file__ so it works regardless of the process CWD.
_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
load_dotenv(_PROJECT_ROOT / ".env")

# User-level config: lives alongside the metadata store and preferences
_USER_ENV = Path.home() / ".sapphire-notes" / ".env"
load_dotenv(_USER_ENV)


logger = logging.getLogger(__name__)

APPLICATION_NAME = "Sapphire Notes"
ARCHIVE_DIRECTORY_NAME = "archive"
NOTE_EXTENSION = ".txt"

DEFAULT_FONT_FAMILY = "Arial"
DEFAULT_FONT_SIZE = 15

AVAILABLE_FONTS: List[str] = [
    "Arial",
    "Calibri",
    "Consolas",
    "Open Sans",
    "Roboto",
    "Verdana",
]
# 10..40 in steps of one, then 50..100 in steps of ten
AVAILABLE_FONT_SIZES: List[int] = list(range(10, 41)) + list(range(50, 101, 10))


class NotesConfig(BaseModel):
    """Configuration for the notes application."""

    # Application data directory: metadata store, preferences, logs
    data_dir: Path = Field(
        default_factory=lambda: Path(
            os.getenv("SAPPHIRE_NOTES_DATA_DIR", str(Path.home() / ".sapphire-notes"))
        )
    )
    # Default notes directory, used until the user picks another one.
    # Falls back to <data_dir>/notes when unset.
    notes_dir: Optional[Path] = Field(
        default_factory=lambda: (
            Path(os.getenv("SAPPHIRE_NOTES_DIR"))
            if os.getenv("SAPPHIRE_NOTES_DIR")
            else None
        )
    )
    default_font_family: str = Field(
        default_factory=lambda: os.getenv(
            "SAPPHIRE_NOTES_DEFAULT_FONT", DEFAULT_FONT_FAMILY
        )
    )
    default_font_size: int = Field(
        default_factory=lambda: int(
            os.getenv("SAPPHIRE_NOTES_DEFAULT_FONT_SIZE", str(DEFAULT_FONT_SIZE))
        )
    )
    log_level: str = Field(
        default_factory=lambda: os.getenv("SAPPHIRE_NOTES_LOG_LEVEL", "INFO").upper()
    )

    metadata_file_name: str = Field(default="notes-metadata.yaml")
    preferences_file_name: str = Field(default="preferences.json")

    @model_validator(mode="after")
    def _validate_defaults(self) -> "NotesConfig":
        """Validate font defaults and fill in the notes directory."""
        if not self.default_font_family.strip():
            raise ValueError("default_font_family must not be empty")
        if self.default_font_size < 1:
            raise ValueError("default_font_size must be >= 1")
        if self.default_font_size not in AVAILABLE_FONT_SIZES:
            logger.warning(
                "Default font size %d is not one of the selectable sizes",
                self.default_font_size,
            )
        if self.notes_dir is None:
            self.notes_dir = self.data_dir / "notes"
        return self

    def get_absolute_path(self, path: Path) -> Path:
        """Convert a relative path to an absolute path based on data_dir."""
        path = Path(path).expanduser()
        if path.is_absolute():
            return path
        return self.data_dir / path

    def get_metadata_path(self) -> Path:
        """Get the absolute path of the note metadata store file."""
        return self.get_absolute_path(Path(self.metadata_file_name))

    def get_preferences_path(self) -> Path:
        """Get the absolute path of the user preferences file."""
        return self.get_absolute_path(Path(self.preferences_file_name))

    def get_log_dir(self) -> Path:
        """Get the directory that holds rotated log files."""
        return self.get_absolute_path(Path("logs"))


# Create a global config instance
config = NotesConfig()
