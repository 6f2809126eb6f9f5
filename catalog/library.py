import logging
from datetime import datetime
from typing import List, Optional, Dict, Any

from catalog.book import Book
from catalog.errors import (
    AlreadyBorrowedError,
    BookNotFoundError,
    DuplicateISBNError,
    NotBorrowedError,
)
from catalog.serializer import format_borrow_date
from catalog.store import BookStore
from config import settings
from utils.validators import BookValidator

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now()


class Library:
    """Manages the catalog of books and its flat-file persistence.

    Every mutation rewrites the whole data file, so each one costs O(n)
    in the size of the catalog.
    """

    def __init__(self, data_file: Optional[str] = None, reject_duplicate_isbn: Optional[bool] = None) -> None:
        self.data_file = data_file or settings.data_file
        if reject_duplicate_isbn is None:
            reject_duplicate_isbn = settings.reject_duplicate_isbn
        self.reject_duplicate_isbn = reject_duplicate_isbn
        self.store = BookStore.load(self.data_file)

    # ------------------------- Queries ------------------------- #
    def list_books(self) -> List[Book]:
        return self.store.books

    def find_by_isbn(self, isbn: str) -> Optional[Book]:
        """Return the first book whose ISBN matches exactly, or None."""
        for book in self.store:
            if book.isbn == isbn:
                return book
        return None

    def find_by_title(self, query: str) -> List[Book]:
        """Case-insensitive substring search over titles, in catalog order."""
        needle = query.lower()
        return [book for book in self.store if needle in book.title.lower()]

    def list_borrowed(self) -> List[Book]:
        return [book for book in self.store if book.borrowed]

    def index_of(self, book: Book) -> int:
        """Current position of this exact record object in the catalog."""
        for index, candidate in enumerate(self.store):
            if candidate is book:
                return index
        raise BookNotFoundError(f"Book with ISBN {book.isbn} is no longer in the catalog.")

    def get_statistics(self) -> Dict[str, Any]:
        total_books = len(self.store)
        borrowed_books = len(self.list_borrowed())
        return {
            "total_books": total_books,
            "borrowed_books": borrowed_books,
            "available_books": total_books - borrowed_books,
        }

    # ------------------------- Mutations ------------------------- #
    def add_book(self, book: Book) -> Book:
        """Validate and append a new book, always starting as not borrowed."""
        book.strip_text()
        BookValidator.validate_new_book(book, _now().date())
        if self.reject_duplicate_isbn and self.find_by_isbn(book.isbn):
            raise DuplicateISBNError(f"Book with ISBN {book.isbn} already exists.")

        book.mark_returned()
        self.store.insert(book)
        logger.info("Added book %s (%s)", book.isbn, book.title)
        self._flush()
        return book

    def borrow_book(self, isbn: str) -> Book:
        book = self._require(isbn)
        if book.borrowed:
            raise AlreadyBorrowedError("This book is already borrowed.")

        book.mark_borrowed(format_borrow_date(_now()))
        logger.info("Borrowed book %s on %s", book.isbn, book.borrow_date)
        self._flush()
        return book

    def return_book(self, isbn: str) -> Book:
        book = self._require(isbn)
        if not book.borrowed:
            raise NotBorrowedError("This book was not borrowed.")

        book.mark_returned()
        logger.info("Returned book %s", book.isbn)
        self._flush()
        return book

    def delete_book(self, index: int) -> Book:
        """Remove the book at ``index``; later books move up one position."""
        book = self.store.remove_at(index)
        logger.info("Deleted book %s at position %d", book.isbn, index)
        self._flush()
        return book

    # ------------------------- Persistence ------------------------- #
    def reload(self) -> None:
        self.store = BookStore.load(self.data_file)

    def _flush(self) -> None:
        # The in-memory change stays applied even when the write fails.
        self.store.flush(self.data_file)

    def _require(self, isbn: str) -> Book:
        book = self.find_by_isbn(isbn)
        if book is None:
            raise BookNotFoundError(f"Book with ISBN {isbn} not found.")
        return book
