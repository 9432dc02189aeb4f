"""Service layer for note persistence.

Notes are plain ``.txt`` files in the preferred notes directory. Display
metadata lives in a :class:`MetadataStore` that is reconciled against the
directory whenever notes are loaded.
"""

import logging
import shutil
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Union

from pydantic import ValidationError

from sapphire_notes.config import ARCHIVE_DIRECTORY_NAME, NOTE_EXTENSION, config
from sapphire_notes.exceptions import InvalidNoteMetadataError, InvalidNoteNameError
from sapphire_notes.models.schema import Note, NoteMetadata
from sapphire_notes.observability import traced
from sapphire_notes.services.preferences_service import Preferences
from sapphire_notes.storage.directory_migrator import DirectoryMigrator, MigrationResult
from sapphire_notes.storage.metadata_store import MetadataStore
from sapphire_notes.utils import casefold_name, next_available_name

logger = logging.getLogger(__name__)

SAMPLE_NOTES = (
    ("sample note 1", "Since you don't have any notes yet we've created a few for you."),
    ("sample note 2", "Another sample note."),
)

# Characters that would make a note name escape the notes directory
_FORBIDDEN_NAME_CHARS = ("/", "\\", "\0")


def _read_text(path: Path) -> str:
    """Read a note file, replacing bytes that are not valid UTF-8."""
    with open(path, "rb") as f:
        raw = f.read()
    try:
        return raw.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        logger.warning(f"{path.name} is not valid UTF-8, replacing undecodable bytes: {e}")
        return raw.decode("utf-8-sig", errors="replace")


def _write_text(path: Path, text: str) -> None:
    with open(path, "w", encoding="utf-8", newline="") as f:
        f.write(text)


class NotesService:
    """Create, rename, archive, delete, save and load notes.

    The notes directory is read from ``preferences`` on every call, so a
    directory change made through the preferences is picked up immediately.
    File-system errors are not caught here; they propagate to the caller.
    """

    def __init__(
        self,
        metadata_store: MetadataStore,
        preferences: Preferences,
        migrator: Optional[DirectoryMigrator] = None,
    ):
        self.metadata_store = metadata_store
        self.preferences = preferences
        self._migrator = migrator or DirectoryMigrator()

    @property
    def notes_dir(self) -> Path:
        return Path(self.preferences.notes_directory).expanduser()

    @property
    def archive_dir(self) -> Path:
        return self.notes_dir / ARCHIVE_DIRECTORY_NAME

    def _path_for(self, name: str) -> Path:
        return self.notes_dir / f"{name}{NOTE_EXTENSION}"

    # =========================================================================
    # Name validation
    # =========================================================================

    @staticmethod
    def _clean_name(name: str) -> str:
        """Trim ``name`` and reject names that cannot be a file name."""
        name = name.strip()
        if not name:
            raise InvalidNoteNameError(
                "Name is required.", reason=InvalidNoteNameError.EMPTY
            )
        if name in (".", "..") or any(c in name for c in _FORBIDDEN_NAME_CHARS):
            raise InvalidNoteNameError(
                "Name cannot contain path separators.",
                name=name,
                reason=InvalidNoteNameError.INVALID,
            )
        return name

    def _exists(self, name: str) -> bool:
        """Whether a note file with ``name`` exists, ignoring case."""
        if not self.notes_dir.is_dir():
            return False
        wanted = casefold_name(name)
        return any(
            casefold_name(p.stem) == wanted
            for p in self.notes_dir.glob(f"*{NOTE_EXTENSION}")
        )

    def _duplicate_error(self, name: str) -> InvalidNoteNameError:
        return InvalidNoteNameError(
            "A note with the same name already exists.",
            name=name,
            reason=InvalidNoteNameError.DUPLICATE,
        )

    # =========================================================================
    # CRUD
    # =========================================================================

    @traced("create")
    def create(self, name: str, font_family: str, font_size: int) -> Note:
        """Create an empty note and register its metadata.

        Raises:
            InvalidNoteNameError: If the trimmed name is empty or taken.
            InvalidNoteMetadataError: If the font family or size is invalid.
        """
        name = self._clean_name(name)
        if self._exists(name):
            raise self._duplicate_error(name)
        try:
            metadata = NoteMetadata(font_family=font_family, font_size=font_size)
        except ValidationError as e:
            raise InvalidNoteMetadataError(
                f"Invalid font settings for note '{name}': {e.errors()[0]['msg']}",
                name=name,
            ) from e

        path = self._path_for(name)
        path.parent.mkdir(parents=True, exist_ok=True)
        # "x" refuses to clobber a file that appeared since the check
        with open(path, "x", encoding="utf-8"):
            pass

        note = Note(
            name=name,
            file_path=path,
            text="",
            metadata=metadata,
        )
        self.metadata_store.add(note.name, note.metadata)
        self.metadata_store.save()

        logger.info(f"Created note '{name}'")
        return note

    @traced("update")
    def update(self, new_name: str, note: Note) -> Note:
        """Rename ``note`` to ``new_name``, moving its file and metadata.

        An identical name is a no-op. A name that differs only in case is a
        case-only rename and is not treated as a collision with itself.

        Raises:
            InvalidNoteNameError: If the trimmed name is empty or taken.
        """
        new_name = self._clean_name(new_name)
        if new_name == note.name:
            return note

        same_note = casefold_name(new_name) == casefold_name(note.name)
        if not same_note and self._exists(new_name):
            raise self._duplicate_error(new_name)

        self.metadata_store.remove(note.name)
        self.metadata_store.add(new_name, note.metadata)
        self.metadata_store.save()

        new_path = self._path_for(new_name)
        note.file_path.rename(new_path)

        logger.info(f"Renamed note '{note.name}' to '{new_name}'")
        note.name = new_name
        note.file_path = new_path
        return note

    @traced("archive")
    def archive(self, note: Note) -> Path:
        """Move the note's file into the archive folder and forget its metadata.

        Returns:
            Where the file ended up. The name is disambiguated when an
            archived note with the same file name already exists.
        """
        self.archive_dir.mkdir(parents=True, exist_ok=True)

        archive_path = next_available_name(self.archive_dir / note.file_path.name)
        shutil.move(str(note.file_path), str(archive_path))

        self.metadata_store.remove(note.name)
        self.metadata_store.save()

        logger.info(f"Archived note '{note.name}' to {archive_path.name}")
        return archive_path

    @traced("delete")
    def delete(self, note: Note) -> None:
        note.file_path.unlink()

        self.metadata_store.remove(note.name)
        self.metadata_store.save()

        logger.info(f"Deleted note '{note.name}'")

    # =========================================================================
    # Bulk save / load
    # =========================================================================

    @traced("save_all")
    def save_all(self, notes: Iterable[Note]) -> None:
        """Rewrite every note's file, whether or not it is dirty."""
        for note in notes:
            _write_text(note.file_path, note.text)

    @traced("save_dirty_with_metadata")
    def save_dirty_with_metadata(self, notes: Iterable[Note]) -> None:
        """Rebuild the metadata store from ``notes`` and write dirty notes.

        The store is always persisted; only files flagged ``is_dirty`` are
        rewritten.
        """
        self.metadata_store.clear()

        written = 0
        for note in notes:
            if note.is_dirty:
                _write_text(note.file_path, note.text)
                written += 1
            self.metadata_store.add(note.name, note.metadata)

        self.metadata_store.save()
        logger.debug(f"Saved {written} dirty notes and {len(self.metadata_store)} metadata entries")

    @traced("load_all")
    def load_all(self) -> List[Note]:
        """Load every note and reconcile the metadata store with the directory.

        On first run (no directory, or no notes in it) a pair of sample notes
        is created instead. Notes are returned most recently modified first;
        ties are ordered by name.
        """
        self.metadata_store.load_or_create()

        notes_dir = self.notes_dir
        if not notes_dir.exists():
            notes_dir.mkdir(parents=True)
            return self._create_sample_notes()

        text_files = sorted(
            p for p in notes_dir.glob(f"*{NOTE_EXTENSION}") if p.is_file()
        )
        if not text_files:
            return self._create_sample_notes()

        notes: List[Note] = []
        modified: Dict[str, int] = {}
        for file_path in text_files:
            name = file_path.stem
            contents = _read_text(file_path)

            if self.metadata_store.contains(name):
                metadata = self.metadata_store.get(name)
            else:
                logger.debug(f"No metadata for '{name}', using defaults")
                metadata = NoteMetadata()
                self.metadata_store.add(name, metadata)

            notes.append(
                Note(name=name, file_path=file_path, text=contents, metadata=metadata)
            )
            modified[name] = file_path.stat().st_mtime_ns

        if len(notes) != self.metadata_store.count():
            self.metadata_store.remove_missing(note.name for note in notes)

        self.metadata_store.save()

        notes.sort(key=lambda n: (-modified[n.name], casefold_name(n.name), n.name))
        return notes

    def _create_sample_notes(self) -> List[Note]:
        self.metadata_store.clear()

        notes = []
        for name, text in SAMPLE_NOTES:
            path = self._path_for(name)
            _write_text(path, text)
            note = Note(name=name, file_path=path, text=text, metadata=NoteMetadata())
            self.metadata_store.add(note.name, note.metadata)
            notes.append(note)

        self.metadata_store.save()
        logger.info(f"Created {len(notes)} sample notes in {self.notes_dir}")
        return notes

    @traced("move_all")
    def move_all(self, old_directory: Union[str, Path]) -> MigrationResult:
        """Move notes (and archived notes) from ``old_directory`` to the current one."""
        return self._migrator.migrate(old_directory, self.notes_dir)

    # =========================================================================
    # Shared font helpers
    # =========================================================================

    def get_font_that_all_notes_use(self) -> Optional[str]:
        """The font shared by every note, the default when there are none, else None."""
        fonts = self.metadata_store.get_distinct_fonts()
        if not fonts:
            return config.default_font_family
        if len(fonts) == 1:
            return next(iter(fonts))
        return None

    def get_font_size_that_all_notes_use(self) -> Optional[int]:
        sizes = self.metadata_store.get_distinct_font_sizes()
        if not sizes:
            return config.default_font_size
        if len(sizes) == 1:
            return next(iter(sizes))
        return None

    def set_font_for_all(self, font: str) -> None:
        self.metadata_store.set_font_for_all(font)

    def set_font_size_for_all(self, font_size: int) -> None:
        self.metadata_store.set_font_size_for_all(font_size)
