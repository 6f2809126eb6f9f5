from __future__ import annotations


class CatalogError(Exception):
    """Base exception for catalog errors."""


class StorageError(CatalogError, OSError):
    """The storage file could not be opened, created or written."""


class ParseError(CatalogError, ValueError):
    """A line of the storage file could not be decoded into a Book."""

    def __init__(self, message: str, field: str | None = None, line: str | None = None) -> None:
        super().__init__(message)
        self.field = field
        self.line = line


class ValidationError(CatalogError, ValueError):
    """A new book breaks one of the creation-time rules."""


class DuplicateISBNError(CatalogError, ValueError):
    """Adding a book whose ISBN is already in the catalog (only when duplicates are rejected)."""


class BookNotFoundError(CatalogError, LookupError):
    """Requested ISBN does not exist in the catalog."""


class AlreadyBorrowedError(CatalogError):
    """Trying to borrow a book that is already borrowed."""


class NotBorrowedError(CatalogError):
    """Trying to return a book that was not borrowed."""


class RecordIndexError(CatalogError, IndexError):
    """Position outside the current catalog."""
