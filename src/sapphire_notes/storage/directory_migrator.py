"""Moves a whole notes directory, archive included, to a new location."""

import logging
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import List, Union

from sapphire_notes.config import ARCHIVE_DIRECTORY_NAME, NOTE_EXTENSION
from sapphire_notes.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


@dataclass
class MigrationResult:
    """Outcome of a directory migration."""

    moved_notes: int = 0
    moved_archived: int = 0
    removed_old_archive: bool = False


def _note_files(directory: Path) -> List[Path]:
    return sorted(p for p in directory.glob(f"*{NOTE_EXTENSION}") if p.is_file())


def _move_into(files: List[Path], destination_dir: Path) -> int:
    for file_path in files:
        target = destination_dir / file_path.name
        if target.exists():
            raise FileExistsError(f"Cannot move {file_path.name}: {target} already exists")
        shutil.move(str(file_path), str(target))
    return len(files)


class DirectoryMigrator:
    """Relocates note files when the preferred notes directory changes.

    Only ``*.txt`` files are moved. Existing files at the destination are
    never overwritten; a clash raises :class:`FileExistsError` and leaves the
    remaining files in place.
    """

    def migrate(
        self, old_directory: Union[str, Path], new_directory: Union[str, Path]
    ) -> MigrationResult:
        """Move notes and archived notes from ``old_directory`` to ``new_directory``.

        Args:
            old_directory: The previously configured notes directory.
            new_directory: The newly configured notes directory.

        Returns:
            Counts of what was moved.

        Raises:
            ConfigurationError: If ``new_directory`` is inside the old archive folder.
            FileExistsError: If a destination file already exists.
        """
        old_dir = Path(old_directory)
        new_dir = Path(new_directory)
        result = MigrationResult()

        if not old_dir.is_dir():
            logger.warning(f"Old notes directory {old_dir} does not exist, nothing to move")
            return result
        if new_dir.exists() and old_dir.resolve() == new_dir.resolve():
            logger.debug("Old and new notes directories are the same, nothing to move")
            return result

        old_archive = old_dir / ARCHIVE_DIRECTORY_NAME
        if new_dir.resolve().is_relative_to(old_archive.resolve()):
            raise ConfigurationError(
                f"Cannot move notes into their own archive folder {old_archive}",
                config_key="notes_directory",
            )

        new_dir.mkdir(parents=True, exist_ok=True)
        result.moved_notes = _move_into(_note_files(old_dir), new_dir)

        if not old_archive.is_dir():
            self._log(old_dir, new_dir, result)
            return result

        archived = _note_files(old_archive)
        if not archived:
            self._log(old_dir, new_dir, result)
            return result

        new_archive = new_dir / ARCHIVE_DIRECTORY_NAME
        new_archive.mkdir(exist_ok=True)
        result.moved_archived = _move_into(archived, new_archive)

        if any(old_archive.iterdir()):
            logger.warning(
                f"Kept {old_archive}: it still contains files that are not notes"
            )
        else:
            old_archive.rmdir()
            result.removed_old_archive = True

        self._log(old_dir, new_dir, result)
        return result

    @staticmethod
    def _log(old_dir: Path, new_dir: Path, result: MigrationResult) -> None:
        logger.info(
            f"Moved {result.moved_notes} notes and {result.moved_archived} archived "
            f"notes from {old_dir} to {new_dir}"
        )
