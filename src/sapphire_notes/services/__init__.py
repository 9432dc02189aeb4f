"""Service layer for Sapphire Notes."""

from sapphire_notes.services.notes_service import NotesService
from sapphire_notes.services.preferences_service import Preferences, PreferencesService

__all__ = [
    "NotesService",
    "Preferences",
    "PreferencesService",
]
