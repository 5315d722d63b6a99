"""Error types raised by Study Recall."""

from __future__ import annotations


class StudyRecallError(Exception):
    """Base class for all Study Recall errors."""


class ConfigurationError(StudyRecallError):
    """Invalid or missing configuration (backend credentials, chunking, dimensions)."""


class PersistenceError(StudyRecallError):
    """A backend read or write failed.

    ``operation`` names the backend call that failed so callers can decide
    whether to retry; ``retryable`` is False when retrying cannot help
    (e.g. a rejected request).
    """

    def __init__(self, operation: str, detail: str, retryable: bool = True) -> None:
        super().__init__(f"{operation} failed: {detail}")
        self.operation = operation
        self.detail = detail
        self.retryable = retryable


__all__ = ["StudyRecallError", "ConfigurationError", "PersistenceError"]
