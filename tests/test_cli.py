import json

from typer.testing import CliRunner

import catalog.library
from catalog.book import Book
from catalog.library import Library
from main import app

runner = CliRunner()

DUNE = ["--isbn", "1234567890123", "--title", "Dune", "--authors", "Frank Herbert",
        "--year", "1965", "--genre", "SciFi"]


def invoke(data_file, *args, **kwargs):
    return runner.invoke(app, ["--data-file", data_file, *args], **kwargs)


def seed(data_file, *books):
    lib = Library(data_file=data_file)
    for book in books:
        lib.add_book(book)
    return lib


def test_list_no_books(data_file):
    result = invoke(data_file, "list")
    assert result.exit_code == 0
    assert "No books in library." in result.stdout


def test_add_then_find_by_isbn(data_file):
    result = invoke(data_file, "add", *DUNE)
    assert result.exit_code == 0
    assert "Book added successfully!" in result.stdout

    result = invoke(data_file, "find-isbn", "1234567890123")
    assert result.exit_code == 0
    assert "Title: Dune" in result.stdout
    assert "Borrowed: false" in result.stdout
    assert "Date: -" in result.stdout


def test_add_invalid_isbn(data_file):
    args = list(DUNE)
    args[1] = "12345"
    result = invoke(data_file, "add", *args)
    assert result.exit_code == 1
    assert "Too few digits" in result.stdout
    assert Library(data_file=data_file).list_books() == []


def test_find_isbn_not_found(data_file):
    result = invoke(data_file, "find-isbn", "0000000000000")
    assert result.exit_code == 1
    assert "Book with ISBN 0000000000000 not found." in result.stdout


def test_find_title(data_file):
    seed(data_file,
         Book("1111111111111", "Clean Code", "Robert C. Martin", 2008, "Programming"),
         Book("2222222222222", "Refactoring", "Martin Fowler", 1999, "Programming"))

    result = invoke(data_file, "find-title", "code")
    assert result.exit_code == 0
    assert "1. Clean Code (ISBN: 1111111111111)" in result.stdout
    assert "Refactoring" not in result.stdout

    result = invoke(data_file, "find-title", "z")
    assert "No books found with title containing: z" in result.stdout


def test_borrow_return_cycle(data_file, monkeypatch):
    monkeypatch.setattr(catalog.library, "_now", lambda: catalog.library.datetime(2024, 3, 5))
    seed(data_file, Book("1234567890123", "Dune", "Frank Herbert", 1965, "SciFi"))

    result = invoke(data_file, "borrow", "1234567890123")
    assert result.exit_code == 0
    assert "Book 'Dune' has been borrowed successfully!" in result.stdout

    result = invoke(data_file, "borrow", "1234567890123")
    assert result.exit_code == 1
    assert "already borrowed" in result.stdout

    result = invoke(data_file, "borrowed")
    assert "Borrowed on: 05-03-2024" in result.stdout

    result = invoke(data_file, "return", "1234567890123")
    assert result.exit_code == 0
    assert "has been returned successfully!" in result.stdout

    result = invoke(data_file, "return", "1234567890123")
    assert result.exit_code == 1
    assert "This book was not borrowed." in result.stdout


def test_borrowed_empty(data_file):
    result = invoke(data_file, "borrowed")
    assert "No books are currently borrowed." in result.stdout


def test_delete_with_confirmation_flag(data_file):
    seed(data_file,
         Book("1111111111111", "A", "Author", 2000, "Genre"),
         Book("2222222222222", "B", "Author", 2000, "Genre"))

    result = invoke(data_file, "delete", "1111111111111", "--yes")
    assert result.exit_code == 0
    assert "Book deleted successfully!" in result.stdout
    assert [b.isbn for b in Library(data_file=data_file).list_books()] == ["2222222222222"]


def test_delete_cancelled(data_file):
    seed(data_file, Book("1111111111111", "A", "Author", 2000, "Genre"))
    result = invoke(data_file, "delete", "1111111111111", input="n\n")
    assert "Deletion cancelled." in result.stdout
    assert len(Library(data_file=data_file).list_books()) == 1


def test_json_output(data_file):
    seed(data_file, Book("1234567890123", "Dune", "Frank Herbert", 1965, "SciFi"))
    result = runner.invoke(app, ["--output", "json", "--data-file", data_file, "list"])
    assert result.exit_code == 0
    payload = json.loads(result.stdout.strip().splitlines()[-1])
    assert payload[0]["isbn"] == "1234567890123"
    assert payload[0]["borrowed"] is False


def test_stats(data_file):
    seed(data_file, Book("1234567890123", "Dune", "Frank Herbert", 1965, "SciFi"))
    result = invoke(data_file, "stats")
    assert "Total Books: 1" in result.stdout
    assert "Borrowed: 0" in result.stdout


def test_unloadable_catalog_exits_with_1(tmp_path):
    result = invoke(str(tmp_path / "no-such-dir" / "books.db"), "list")
    assert result.exit_code == 1
    assert "Could not load the database" in result.stdout


def test_menu_add_book(data_file):
    keystrokes = "\n".join(["2", "1234567890123", "Dune", "Frank Herbert", "1965", "SciFi", "4"]) + "\n"
    result = invoke(data_file, "menu", input=keystrokes)
    assert result.exit_code == 0
    assert "Book added successfully!" in result.stdout
    assert "Have a nice day!" in result.stdout
    with open(data_file, encoding="utf-8") as f:
        assert f.read() == "1234567890123|Dune|Frank Herbert|1965|SciFi|false|-\n"


def test_menu_add_retries_bad_isbn(data_file):
    keystrokes = "\n".join(["2", "123", "1234567890123", "Dune", "Frank Herbert", "1965", "SciFi", "4"]) + "\n"
    result = invoke(data_file, "menu", input=keystrokes)
    assert result.exit_code == 0
    assert "Too few digits" in result.stdout
    assert Library(data_file=data_file).find_by_isbn("1234567890123") is not None


def test_menu_find_by_isbn_and_borrow(data_file):
    seed(data_file, Book("1234567890123", "Dune", "Frank Herbert", 1965, "SciFi"))
    # find a book, by ISBN, borrow it, back to main, end
    keystrokes = "\n".join(["1", "2", "1234567890123", "1", "4", "4"]) + "\n"
    result = invoke(data_file, "menu", input=keystrokes)
    assert result.exit_code == 0
    assert "has been borrowed successfully!" in result.stdout
    assert Library(data_file=data_file).find_by_isbn("1234567890123").borrowed is True


def test_menu_find_by_title_and_delete(data_file):
    seed(data_file,
         Book("1111111111111", "Clean Code", "Robert C. Martin", 2008, "Programming"),
         Book("2222222222222", "Refactoring", "Martin Fowler", 1999, "Programming"))
    # find a book, by title "code", pick 1, delete, confirm, back to main, end
    keystrokes = "\n".join(["1", "1", "code", "1", "2", "y", "4", "4"]) + "\n"
    result = invoke(data_file, "menu", input=keystrokes)
    assert result.exit_code == 0
    assert "Book deleted successfully!" in result.stdout
    assert [b.title for b in Library(data_file=data_file).list_books()] == ["Refactoring"]


def test_menu_return_not_borrowed(data_file):
    seed(data_file, Book("1234567890123", "Dune", "Frank Herbert", 1965, "SciFi"))
    keystrokes = "\n".join(["3", "1234567890123", "4"]) + "\n"
    result = invoke(data_file, "menu", input=keystrokes)
    assert result.exit_code == 0
    assert "This book was not borrowed." in result.stdout
