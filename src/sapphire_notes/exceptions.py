"""Custom exceptions for Sapphire Notes.

Provides a structured exception hierarchy with error codes and
machine-readable error information for callers such as a UI layer.
"""
from enum import Enum
from typing import Any, Dict, Optional


class ErrorCode(Enum):
    """Error codes for machine-readable error identification."""

    # Note errors (1xxx)
    NOTE_NAME_REQUIRED = 1001
    NOTE_ALREADY_EXISTS = 1002
    NOTE_NOT_FOUND = 1003
    NOTE_NAME_INVALID = 1004
    NOTE_METADATA_INVALID = 1005

    # Storage errors (4xxx)
    STORAGE_READ_FAILED = 4001
    STORAGE_WRITE_FAILED = 4002
    METADATA_CORRUPTED = 4005

    # Configuration errors (6xxx)
    CONFIG_INVALID = 6001
    PREFERENCES_INVALID = 6002


class SapphireNotesError(Exception):
    """Base exception for all Sapphire Notes errors.

    Attributes:
        message: Human-readable error message
        code: Machine-readable error code
        details: Additional context about the error
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.CONFIG_INVALID,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to a dictionary for serialization."""
        return {
            "error": self.__class__.__name__,
            "code": self.code.value,
            "code_name": self.code.name,
            "message": self.message,
            "details": self.details,
        }

    def __str__(self) -> str:
        if self.details:
            detail_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"[{self.code.name}] {self.message} ({detail_str})"
        return f"[{self.code.name}] {self.message}"


class InvalidNoteNameError(SapphireNotesError):
    """Raised when a note name is empty, unusable as a file name, or taken.

    Attributes:
        name: The (trimmed) name that was rejected
        reason: ``"empty"``, ``"invalid"`` or ``"duplicate"``
    """

    EMPTY = "empty"
    INVALID = "invalid"
    DUPLICATE = "duplicate"

    _CODES = {
        EMPTY: ErrorCode.NOTE_NAME_REQUIRED,
        INVALID: ErrorCode.NOTE_NAME_INVALID,
        DUPLICATE: ErrorCode.NOTE_ALREADY_EXISTS,
    }

    def __init__(self, message: str, name: str = "", reason: str = EMPTY):
        code = self._CODES.get(reason, ErrorCode.NOTE_NAME_INVALID)
        details: Dict[str, Any] = {"reason": reason}
        if name:
            details["name"] = name[:100]
        super().__init__(message, code=code, details=details)
        self.name = name
        self.reason = reason


class InvalidNoteMetadataError(SapphireNotesError):
    """Raised when a note is given a font family or size that cannot be stored."""

    def __init__(self, message: str, name: str = ""):
        details: Dict[str, Any] = {}
        if name:
            details["name"] = name[:100]
        super().__init__(message, code=ErrorCode.NOTE_METADATA_INVALID, details=details)
        self.name = name


class NoteNotFoundError(SapphireNotesError):
    """Raised when a caller looks up a note name that is not loaded."""

    def __init__(self, name: str, message: Optional[str] = None):
        super().__init__(
            message or f"Note '{name}' not found",
            code=ErrorCode.NOTE_NOT_FOUND,
            details={"name": name},
        )
        self.name = name


class StorageError(SapphireNotesError):
    """Raised when the metadata store or preferences cannot be persisted."""

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        path: Optional[str] = None,
        code: ErrorCode = ErrorCode.STORAGE_READ_FAILED,
        original_error: Optional[Exception] = None,
    ):
        details: Dict[str, Any] = {}
        if operation:
            details["operation"] = operation
        if path:
            # Only the file name, not the full path
            details["path_hint"] = path.replace("\\", "/").split("/")[-1]
        if original_error:
            details["original_error"] = str(original_error)[:200]

        super().__init__(message, code=code, details=details)
        self.operation = operation
        self.path = path
        self.original_error = original_error


class MetadataCorruptionError(StorageError):
    """Raised when the metadata store file cannot be parsed or validated.

    This is fatal at startup: resetting the store would silently discard
    every note's display customization.
    """

    def __init__(
        self,
        message: str,
        path: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ):
        super().__init__(
            message,
            operation="load",
            path=path,
            code=ErrorCode.METADATA_CORRUPTED,
            original_error=original_error,
        )


class ConfigurationError(SapphireNotesError):
    """Raised for configuration and preferences errors."""

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        code: ErrorCode = ErrorCode.CONFIG_INVALID,
    ):
        details: Dict[str, Any] = {}
        if config_key:
            details["config_key"] = config_key

        super().__init__(message, code=code, details=details)
        self.config_key = config_key
