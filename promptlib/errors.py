"""Error hierarchy for promptlib."""

from typing import Optional


class PromptLibError(Exception):
    """Base for all promptlib errors."""

    pass


class StorageError(PromptLibError):
    """Raised when a call to the hosted database fails or returns no row.

    ``code`` carries the database error code when the backend reported one
    (``23505`` for a unique violation).
    """

    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.code = code


class NotFoundError(PromptLibError):
    """Raised when a requested record does not exist (or is not visible to the user)."""

    pass


class ImportSourceError(PromptLibError):
    """Raised when an import source cannot be read or decoded.

    The CSV pipeline converts this into a zero-progress result instead of
    raising; the JSON importer raises it before any write happens.
    """

    pass


class ValidationError(PromptLibError, ValueError):
    """Raised for invalid user input (bad rating, empty content, ...)."""

    pass
