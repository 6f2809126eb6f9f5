from datetime import date
from typing import Optional

from catalog.book import (
    Book,
    ISBN_LENGTH,
    MAX_AUTHORS_LENGTH,
    MAX_GENRE_LENGTH,
    MAX_TITLE_LENGTH,
)
from catalog.errors import ValidationError

FORBIDDEN_CHARACTERS = ("|", "\n", "\r")


class ISBNValidator:
    """ISBN-13 validator for catalog records.
    Note: only the shape is checked (13 ASCII digits), not the checksum.
    """

    @staticmethod
    def is_valid_isbn(isbn: Optional[str]) -> bool:
        if not isbn or len(isbn) != ISBN_LENGTH:
            return False
        return all(ch in "0123456789" for ch in isbn)

    @staticmethod
    def describe_error(isbn: Optional[str]) -> Optional[str]:
        """Human-readable reason an ISBN is rejected, or None when it is fine."""
        length = len(isbn or "")
        if length < ISBN_LENGTH:
            return f"ISBN must contain exactly {ISBN_LENGTH} digits! Too few digits."
        if length > ISBN_LENGTH:
            return f"ISBN must contain exactly {ISBN_LENGTH} digits! Too many digits."
        if not ISBNValidator.is_valid_isbn(isbn):
            return "ISBN may contain digits only."
        return None


class TextValidator:
    """Length and character checks for free-text fields."""

    @staticmethod
    def has_forbidden_characters(text: Optional[str]) -> bool:
        if text is None:
            return False
        return any(ch in text for ch in FORBIDDEN_CHARACTERS)

    @staticmethod
    def fits(text: Optional[str], max_length: int) -> bool:
        return len(text or "") <= max_length

    @staticmethod
    def validate_title(title: Optional[str]) -> bool:
        if title is None or not title.strip():
            return False
        return TextValidator.fits(title, MAX_TITLE_LENGTH) and not TextValidator.has_forbidden_characters(title)

    @staticmethod
    def validate_authors(authors: Optional[str]) -> bool:
        # empty fields do not survive a save and reload
        if authors is None or not authors.strip():
            return False
        return TextValidator.fits(authors, MAX_AUTHORS_LENGTH) and not TextValidator.has_forbidden_characters(authors)

    @staticmethod
    def validate_genre(genre: Optional[str]) -> bool:
        if genre is None or not genre.strip():
            return False
        return TextValidator.fits(genre, MAX_GENRE_LENGTH) and not TextValidator.has_forbidden_characters(genre)


class BookValidator:
    """Creation-time rules for a new catalog record."""

    @staticmethod
    def validate_year(year: int, today: Optional[date] = None) -> bool:
        current_year = (today or date.today()).year
        return year <= current_year

    @staticmethod
    def validate_new_book(book: Book, today: Optional[date] = None) -> None:
        """Raise ValidationError describing the first rule the book breaks."""
        isbn_error = ISBNValidator.describe_error(book.isbn)
        if isbn_error:
            raise ValidationError(isbn_error)
        if TextValidator.has_forbidden_characters(book.title) or not book.title:
            raise ValidationError("Title must be non-empty and may not contain '|' or line breaks.")
        if not TextValidator.fits(book.title, MAX_TITLE_LENGTH):
            raise ValidationError(f"Title of the book is longer than the maximum of {MAX_TITLE_LENGTH} characters.")
        if not TextValidator.validate_authors(book.authors):
            raise ValidationError(f"Authors must be non-empty, at most {MAX_AUTHORS_LENGTH} characters, with no '|' or line breaks.")
        if not BookValidator.validate_year(book.year, today):
            raise ValidationError("Year of publication can't be later than the current year.")
        if not TextValidator.validate_genre(book.genre):
            raise ValidationError(f"Genre must be non-empty, at most {MAX_GENRE_LENGTH} characters, with no '|' or line breaks.")
