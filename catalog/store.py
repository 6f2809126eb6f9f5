"""In-memory book store mirrored to a flat text file.

The whole file is read on load and rewritten on every flush; there is no
locking, so only one process may use a data file at a time.
"""
from __future__ import annotations

import logging
import os
from typing import Iterator, List, Optional

from catalog.book import Book
from catalog.errors import ParseError, RecordIndexError, StorageError
from catalog.serializer import decode, encode

logger = logging.getLogger(__name__)

ENCODING = "utf-8"


class BookStore:
    """Ordered collection of books, owned by a single data file."""

    def __init__(self, books: Optional[List[Book]] = None) -> None:
        self._books: List[Book] = list(books or [])

    # ------------------------- Persistence ------------------------- #
    @classmethod
    def load(cls, path: str) -> "BookStore":
        """Read every decodable line of ``path`` into a new store.

        A missing file is created empty. Lines that fail to decode are
        logged and skipped.
        """
        store = cls()
        if not os.path.exists(path):
            logger.warning("Missing %s. Creating a new one...", path)
            try:
                with open(path, "w", encoding=ENCODING):
                    pass
            except OSError as e:
                raise StorageError(f"Could not create {path}: {e}") from e
            return store

        try:
            with open(path, "r", encoding=ENCODING, newline="") as f:
                for line_number, line in enumerate(f, 1):
                    if not line.strip():
                        continue
                    try:
                        store.insert(decode(line))
                    except ParseError as e:
                        logger.warning("Skipping line %d of %s: %s", line_number, path, e)
        except (OSError, UnicodeDecodeError) as e:
            raise StorageError(f"Could not read {path}: {e}") from e

        logger.info("Loaded %d book(s) from %s", len(store), path)
        return store

    def flush(self, path: str) -> None:
        """Truncate ``path`` and write every book, one line each, in store order."""
        try:
            with open(path, "w", encoding=ENCODING, newline="\n") as f:
                for book in self._books:
                    f.write(encode(book) + "\n")
        except OSError as e:
            raise StorageError(f"Unable to open '{path}' for writing: {e}") from e
        logger.debug("Flushed %d book(s) to %s", len(self._books), path)

    # ------------------------- Mutation ------------------------- #
    def insert(self, book: Book) -> None:
        self._books.append(book)

    def remove_at(self, index: int) -> Book:
        if not 0 <= index < len(self._books):
            raise RecordIndexError(f"Invalid book index: {index}")
        return self._books.pop(index)

    # ------------------------- Access ------------------------- #
    @property
    def books(self) -> List[Book]:
        return list(self._books)

    def __len__(self) -> int:
        return len(self._books)

    def __iter__(self) -> Iterator[Book]:
        return iter(self._books)

    def __getitem__(self, index: int) -> Book:
        return self._books[index]
