"""Tests for the exception hierarchy and its serialization."""

from sapphire_notes.exceptions import (
    ConfigurationError,
    ErrorCode,
    InvalidNoteMetadataError,
    InvalidNoteNameError,
    MetadataCorruptionError,
    NoteNotFoundError,
    SapphireNotesError,
    StorageError,
)


class TestExceptionHierarchy:
    """Tests for error codes, details and string forms."""

    def test_base_exception_to_dict(self):
        exc = SapphireNotesError(
            "Test error", code=ErrorCode.CONFIG_INVALID, details={"key": "value"}
        )

        assert exc.to_dict() == {
            "error": "SapphireNotesError",
            "code": ErrorCode.CONFIG_INVALID.value,
            "code_name": "CONFIG_INVALID",
            "message": "Test error",
            "details": {"key": "value"},
        }
        assert str(exc) == "[CONFIG_INVALID] Test error (key=value)"

    def test_invalid_name_codes(self):
        empty = InvalidNoteNameError("Name is required.")
        duplicate = InvalidNoteNameError(
            "Taken", name="todo", reason=InvalidNoteNameError.DUPLICATE
        )
        invalid = InvalidNoteNameError(
            "Bad", name="a/b", reason=InvalidNoteNameError.INVALID
        )

        assert empty.code == ErrorCode.NOTE_NAME_REQUIRED
        assert empty.details == {"reason": "empty"}
        assert duplicate.code == ErrorCode.NOTE_ALREADY_EXISTS
        assert duplicate.details["name"] == "todo"
        assert invalid.code == ErrorCode.NOTE_NAME_INVALID
        assert isinstance(duplicate, SapphireNotesError)

    def test_invalid_metadata(self):
        exc = InvalidNoteMetadataError("Bad size", name="todo")

        assert exc.code == ErrorCode.NOTE_METADATA_INVALID
        assert exc.details == {"name": "todo"}
        assert isinstance(exc, SapphireNotesError)

    def test_note_not_found(self):
        exc = NoteNotFoundError("missing")

        assert exc.name == "missing"
        assert exc.code == ErrorCode.NOTE_NOT_FOUND
        assert "missing" in str(exc)

    def test_storage_error_only_exposes_file_name(self):
        exc = StorageError(
            "Write failed",
            operation="save",
            path="/home/user/private/notes-metadata.yaml",
            original_error=OSError("disk full"),
        )

        assert exc.details["path_hint"] == "notes-metadata.yaml"
        assert "private" not in str(exc)
        assert exc.details["original_error"] == "disk full"

    def test_metadata_corruption_is_storage_error(self):
        cause = ValueError("bad count")
        exc = MetadataCorruptionError("Corrupt", path="C:\\data\\meta.yaml", original_error=cause)

        assert isinstance(exc, StorageError)
        assert exc.code == ErrorCode.METADATA_CORRUPTED
        assert exc.operation == "load"
        assert exc.details["path_hint"] == "meta.yaml"
        assert exc.original_error is cause

    def test_configuration_error(self):
        exc = ConfigurationError("Bad prefs", config_key="notes_directory")

        assert exc.config_key == "notes_directory"
        assert exc.to_dict()["details"] == {"config_key": "notes_directory"}
