"""Line codec for the catalog storage file.

Each book is one line: ``isbn|title|authors|year|genre|borrowed|borrow_date``.
There is no header and no escaping, so no field may contain ``|`` or a newline.
"""
from __future__ import annotations

import re
from datetime import datetime

from catalog.book import (
    Book,
    BORROW_DATE_FORMAT,
    ISBN_LENGTH,
    MAX_AUTHORS_LENGTH,
    MAX_GENRE_LENGTH,
    MAX_TITLE_LENGTH,
    NOT_BORROWED_DATE,
)
from catalog.errors import ParseError

FIELD_SEPARATOR = "|"
FIELD_ORDER = ("isbn", "title", "authors", "year", "genre", "borrowed", "borrow_date")

# Widths of the original fixed-size fields; longer values are cut on decode.
_FIELD_WIDTHS = {
    "isbn": ISBN_LENGTH + 1,
    "title": MAX_TITLE_LENGTH,
    "authors": MAX_AUTHORS_LENGTH,
    "genre": MAX_GENRE_LENGTH,
    "borrowed": 5,
    "borrow_date": 10,
}

# Only the form the catalog itself writes, so a year survives a reload unchanged
_YEAR_PATTERN = re.compile(r"-?(0|[1-9][0-9]*)")

_BOOL_TEXT = {True: "true", False: "false"}
_TEXT_BOOL = {"true": True, "false": False}


def encode(book: Book) -> str:
    """Serialize a book to one storage line, without the line terminator."""
    return FIELD_SEPARATOR.join([
        book.isbn,
        book.title,
        book.authors,
        str(book.year),
        book.genre,
        _BOOL_TEXT[bool(book.borrowed)],
        book.borrow_date,
    ])


def decode(line: str) -> Book:
    """Parse one storage line into a Book.

    Consecutive separators collapse into one, so an empty field shifts the
    following ones and the line ends up short. Raises ParseError naming the
    first missing or malformed field.
    """
    raw = line.rstrip("\r\n")
    tokens = [token for token in raw.split(FIELD_SEPARATOR) if token]

    values = {}
    for position, name in enumerate(FIELD_ORDER):
        if position >= len(tokens):
            raise ParseError(f"Missing {name.replace('_', ' ')} in line: {raw}", field=name, line=raw)
        value = tokens[position]
        width = _FIELD_WIDTHS.get(name)
        values[name] = value[:width] if width else value

    if not _YEAR_PATTERN.fullmatch(values["year"]):
        raise ParseError(f"Invalid year {values['year']!r} in line: {raw}", field="year", line=raw)
    year = int(values["year"])

    borrowed = _TEXT_BOOL.get(values["borrowed"])
    if borrowed is None:
        raise ParseError(f"Invalid borrowed status {values['borrowed']!r} in line: {raw}",
                         field="borrowed", line=raw)

    borrow_date = values["borrow_date"]
    if borrowed != is_borrow_date(borrow_date):
        raise ParseError(f"Borrow date {borrow_date!r} does not match borrowed status in line: {raw}",
                         field="borrow_date", line=raw)

    return Book(
        isbn=values["isbn"],
        title=values["title"],
        authors=values["authors"],
        year=year,
        genre=values["genre"],
        borrowed=borrowed,
        borrow_date=borrow_date,
    )


def is_borrow_date(value: str) -> bool:
    """True for a well-formed DD-MM-YYYY date, False for the '-' sentinel or garbage."""
    if value == NOT_BORROWED_DATE or len(value) != 10:
        return False
    try:
        datetime.strptime(value, BORROW_DATE_FORMAT)
    except ValueError:
        return False
    return True


def format_borrow_date(moment: datetime) -> str:
    return moment.strftime(BORROW_DATE_FORMAT)
