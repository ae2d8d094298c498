"""
Custom Exceptions.

Application-specific exception classes for consistent error handling.
Reference-not-found during a mutation is deliberately NOT an exception:
repository mutators are no-ops for ids another window already removed.
"""


class ApplicationError(Exception):
    """Base exception for all application errors."""

    def __init__(self, message: str, code: str = "SYS_INTERNAL_ERROR") -> None:
        self.message = message
        self.code = code
        super().__init__(self.message)


class NotFoundError(ApplicationError):
    """Raised when a note is looked up explicitly and cannot be found."""

    def __init__(self, message: str = "Note not found") -> None:
        super().__init__(message, code="RES_NOT_FOUND")


class ValidationError(ApplicationError):
    """Raised when validation fails."""

    def __init__(
        self,
        message: str = "Validation failed",
        details: dict | None = None,
        code: str = "VAL_VALIDATION_ERROR",
    ) -> None:
        self.details = details or {}
        super().__init__(message, code=code)


class InvalidReminderError(ValidationError):
    """Raised when reminder input cannot be parsed into an instant."""

    def __init__(self, message: str = "Invalid date", details: dict | None = None) -> None:
        super().__init__(message, details=details, code="VAL_INVALID_REMINDER")


class IncorrectPasswordError(ApplicationError):
    """Raised when a locked note is presented with the wrong password."""

    def __init__(self, message: str = "Incorrect password") -> None:
        super().__init__(message, code="AUTH_INCORRECT_PASSWORD")


class CaptureDeniedError(ApplicationError):
    """Raised when the audio capture device is unavailable or permission is denied."""

    def __init__(self, message: str = "Microphone access denied") -> None:
        super().__init__(message, code="DEV_CAPTURE_DENIED")


class StorageError(ApplicationError):
    """Raised when the note collection cannot be written."""

    def __init__(self, message: str = "Storage error") -> None:
        super().__init__(message, code="SYS_STORAGE_ERROR")


class NoteLockedError(ApplicationError):
    """Raised when locked content is edited without going through the lock guard."""

    def __init__(self, message: str = "Note is locked") -> None:
        super().__init__(message, code="AUTHZ_NOTE_LOCKED")
