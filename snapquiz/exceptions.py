"""Error taxonomy shared by services and mapped to HTTP responses in main."""

from typing import Optional


class SnapQuizError(Exception):
    """Base class for all application errors."""


class ValidationError(SnapQuizError):
    """Malformed input, rejected before any write happens."""


class NotFound(SnapQuizError):
    """The requested attempt, test, question or user does not exist."""


class PersistenceError(SnapQuizError):
    """A storage failure inside a transaction; the transaction was rolled back."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause


class GenerationError(SnapQuizError):
    """The completion API failed or returned an unusable test payload."""


class InvalidSelection(PersistenceError):
    """The database rejected a selected option that does not belong to its question."""
