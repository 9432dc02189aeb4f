#!/usr/bin/env python
"""Command-line entry point for Sapphire Notes."""
import argparse
import logging
import os
import sys
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from sapphire_notes import __version__
from sapphire_notes.config import AVAILABLE_FONT_SIZES, AVAILABLE_FONTS, config
from sapphire_notes.exceptions import NoteNotFoundError, SapphireNotesError
from sapphire_notes.models.schema import Note
from sapphire_notes.observability import configure_logging, metrics
from sapphire_notes.services.notes_service import NotesService
from sapphire_notes.services.preferences_service import PreferencesService
from sapphire_notes.storage.metadata_store import MetadataStore

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="sapphire-notes", description="Plain-text notes with per-note fonts"
    )
    parser.add_argument("--version", action="version", version=__version__)
    parser.add_argument(
        "--data-dir",
        help="Directory for the metadata store, preferences and logs",
        type=str,
        default=os.environ.get("SAPPHIRE_NOTES_DATA_DIR"),
    )
    parser.add_argument(
        "--notes-dir",
        help="Use this notes directory for this run instead of the preferred one",
        type=str,
        default=None,
    )
    parser.add_argument(
        "--log-level",
        help="Logging level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default=None,
    )

    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("list", help="List notes, most recently modified first")

    show = sub.add_parser("show", help="Print a note's text")
    show.add_argument("name")

    create = sub.add_parser("create", help="Create an empty note")
    create.add_argument("name")
    create.add_argument("--font", default=None, help="Font family")
    create.add_argument("--size", type=int, default=None, help="Font size")

    rename = sub.add_parser("rename", help="Rename a note")
    rename.add_argument("name")
    rename.add_argument("new_name")

    write = sub.add_parser("write", help="Replace a note's text")
    write.add_argument("name")
    write.add_argument("text")

    archive = sub.add_parser("archive", help="Move a note to the archive folder")
    archive.add_argument("name")

    delete = sub.add_parser("delete", help="Delete a note")
    delete.add_argument("name")

    sub.add_parser("fonts", help="Show the font and size shared by all notes")

    set_font = sub.add_parser("set-font", help="Use one font for all notes")
    set_font.add_argument("font", choices=AVAILABLE_FONTS)

    set_size = sub.add_parser("set-font-size", help="Use one font size for all notes")
    set_size.add_argument("size", type=int, choices=AVAILABLE_FONT_SIZES)

    move = sub.add_parser("move-dir", help="Change the notes directory and move notes")
    move.add_argument("directory")

    return parser.parse_args(argv)


def update_config(args: argparse.Namespace) -> None:
    """Update the global config with command line arguments."""
    if args.data_dir:
        config.data_dir = Path(args.data_dir).expanduser()
        if not os.getenv("SAPPHIRE_NOTES_DIR"):
            config.notes_dir = config.data_dir / "notes"
    if args.log_level:
        config.log_level = args.log_level


def find_note(notes: List[Note], name: str) -> Note:
    """Find a note by exact name, falling back to a case-insensitive match."""
    for note in notes:
        if note.name == name:
            return note
    wanted = name.casefold()
    for note in notes:
        if note.name.casefold() == wanted:
            return note
    raise NoteNotFoundError(name)


def build_services(args: argparse.Namespace) -> Tuple[NotesService, PreferencesService]:
    """Wire the preferences, the metadata store and the notes service."""
    preferences_service = PreferencesService(config.get_preferences_path())
    preferences = preferences_service.load()
    if args.notes_dir:
        preferences.notes_directory = str(Path(args.notes_dir).expanduser())

    store = MetadataStore(config.get_metadata_path())
    return NotesService(store, preferences), preferences_service


# =============================================================================
# Commands
# =============================================================================


def cmd_list(service: NotesService, args: argparse.Namespace, _prefs) -> int:
    for note in service.load_all():
        print(f"{note.name}\t{note.metadata.font_family}\t{note.metadata.font_size}")
    return 0


def cmd_show(service: NotesService, args: argparse.Namespace, _prefs) -> int:
    note = find_note(service.load_all(), args.name)
    print(note.text)
    return 0


def cmd_create(service: NotesService, args: argparse.Namespace, _prefs) -> int:
    # Loading first makes sure the store is reconciled before it is rewritten
    service.load_all()
    note = service.create(
        args.name,
        args.font or config.default_font_family,
        args.size or config.default_font_size,
    )
    print(f"Created {note.file_path}")
    return 0


def cmd_rename(service: NotesService, args: argparse.Namespace, _prefs) -> int:
    note = find_note(service.load_all(), args.name)
    service.update(args.new_name, note)
    print(f"Renamed to {note.name}")
    return 0


def cmd_write(service: NotesService, args: argparse.Namespace, _prefs) -> int:
    notes = service.load_all()
    note = find_note(notes, args.name)
    note.text = args.text
    note.is_dirty = True
    service.save_dirty_with_metadata(notes)
    return 0


def cmd_archive(service: NotesService, args: argparse.Namespace, _prefs) -> int:
    note = find_note(service.load_all(), args.name)
    path = service.archive(note)
    print(f"Archived to {path}")
    return 0


def cmd_delete(service: NotesService, args: argparse.Namespace, _prefs) -> int:
    note = find_note(service.load_all(), args.name)
    service.delete(note)
    print(f"Deleted {note.name}")
    return 0


def cmd_fonts(service: NotesService, args: argparse.Namespace, _prefs) -> int:
    service.load_all()
    font = service.get_font_that_all_notes_use()
    size = service.get_font_size_that_all_notes_use()
    print(f"font: {font if font is not None else 'mixed'}")
    print(f"size: {size if size is not None else 'mixed'}")
    return 0


def cmd_set_font(service: NotesService, args: argparse.Namespace, _prefs) -> int:
    service.load_all()
    service.set_font_for_all(args.font)
    service.metadata_store.save()
    return 0


def cmd_set_font_size(service: NotesService, args: argparse.Namespace, _prefs) -> int:
    service.load_all()
    service.set_font_size_for_all(args.size)
    service.metadata_store.save()
    return 0


def cmd_move_dir(
    service: NotesService, args: argparse.Namespace, prefs: PreferencesService
) -> int:
    result = prefs.change_notes_directory(args.directory, service)
    if result is None:
        print("Notes directory unchanged")
    else:
        print(
            f"Moved {result.moved_notes} notes and "
            f"{result.moved_archived} archived notes to {service.notes_dir}"
        )
    return 0


COMMANDS: Dict[str, Callable[..., int]] = {
    "list": cmd_list,
    "show": cmd_show,
    "create": cmd_create,
    "rename": cmd_rename,
    "write": cmd_write,
    "archive": cmd_archive,
    "delete": cmd_delete,
    "fonts": cmd_fonts,
    "set-font": cmd_set_font,
    "set-font-size": cmd_set_font_size,
    "move-dir": cmd_move_dir,
}


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run one Sapphire Notes command."""
    args = parse_args(argv)
    update_config(args)

    log_level = getattr(logging, config.log_level.upper(), logging.INFO)
    try:
        configure_logging(config.get_log_dir(), level=log_level, console=True)
    except OSError as e:
        # Fall back to basic console logging if file logging fails
        logging.basicConfig(level=log_level)
        logger.warning(f"Failed to configure file logging: {e}")

    try:
        service, preferences_service = build_services(args)
        return COMMANDS[args.command](service, args, preferences_service)
    except SapphireNotesError as e:
        logger.error(f"{args.command} failed: {e}")
        print(f"error: {e.message}", file=sys.stderr)
        return 1
    finally:
        metrics.save_metrics(config.get_absolute_path(Path("metrics.json")))


if __name__ == "__main__":
    sys.exit(main())
