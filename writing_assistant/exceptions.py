"""
Exception hierarchy for the Writing Assistant.
"""


class ComposerError(Exception):
    """Base class for all writing assistant errors."""


class InvalidNoteError(ComposerError):
    """Raised when a note operation receives unusable input (e.g. empty content)."""


class AIServiceError(ComposerError):
    """Raised when the AI boundary reports a failure or returns an unusable payload."""

    def __init__(self, message: str, status_code: int = 500):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class StorageError(ComposerError):
    """Raised when a key-value storage backend cannot persist a value."""
