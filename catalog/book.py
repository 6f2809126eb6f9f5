from __future__ import annotations

ISBN_LENGTH = 13
MAX_TITLE_LENGTH = 50
MAX_AUTHORS_LENGTH = 200
MAX_GENRE_LENGTH = 100

NOT_BORROWED_DATE = "-"
BORROW_DATE_FORMAT = "%d-%m-%Y"


class Book:
    """Represents a single book record in the catalog."""

    def __init__(self, isbn: str, title: str, authors: str, year: int, genre: str,
                 borrowed: bool = False, borrow_date: str = NOT_BORROWED_DATE) -> None:
        self.isbn = isbn
        self.title = title
        self.authors = authors
        self.year = year
        self.genre = genre
        # borrowed and borrow_date always change together
        self.borrowed = borrowed
        self.borrow_date = borrow_date

    def __str__(self) -> str:
        return f"{self.title} by {self.authors} (ISBN: {self.isbn})"

    def __repr__(self) -> str:
        return (f"Book(isbn={self.isbn!r}, title={self.title!r}, authors={self.authors!r}, "
                f"year={self.year!r}, genre={self.genre!r}, borrowed={self.borrowed!r}, "
                f"borrow_date={self.borrow_date!r})")

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Book):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def strip_text(self) -> None:
        """Trim surrounding whitespace from the text fields of a new record."""
        self.isbn = self.isbn.strip()
        self.title = self.title.strip()
        self.authors = self.authors.strip()
        self.genre = self.genre.strip()

    def mark_borrowed(self, date: str) -> None:
        self.borrowed = True
        self.borrow_date = date

    def mark_returned(self) -> None:
        self.borrowed = False
        self.borrow_date = NOT_BORROWED_DATE

    def to_dict(self) -> dict:
        return {
            "isbn": self.isbn,
            "title": self.title,
            "authors": self.authors,
            "year": self.year,
            "genre": self.genre,
            "borrowed": self.borrowed,
            "borrow_date": self.borrow_date,
        }

    @staticmethod
    def from_dict(data: dict) -> "Book":
        return Book(
            isbn=data["isbn"],
            title=data["title"],
            authors=data.get("authors", ""),
            year=int(data["year"]),
            genre=data.get("genre", ""),
            borrowed=bool(data.get("borrowed", False)),
            borrow_date=data.get("borrow_date") or NOT_BORROWED_DATE,
        )
