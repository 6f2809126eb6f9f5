import os
import json
from typing import List, Any, Dict
from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich.markup import escape

# Environment variable to control CLI output mode
# Allowed values: 'plain' (default), 'json', 'rich'
OUTPUT_MODE_ENV = "LIB_CLI_OUTPUT"

_console = Console()


def set_output_mode(mode: str) -> None:
    mode = (mode or "").lower().strip()
    if mode in {"plain", "json", "rich"}:
        os.environ[OUTPUT_MODE_ENV] = mode


def get_output_mode() -> str:
    return os.environ.get(OUTPUT_MODE_ENV, "plain").lower()


def _borrowed_text(book: Any) -> str:
    return "true" if book.borrowed else "false"


def print_list_result(books: List[Any], empty_message: str = "No books in library.") -> None:
    """Print a list of books in the current output mode.
    - plain: numbered 'N. Title (ISBN: ...)' lines, or the empty message
    - json: JSON array of book dicts
    - rich: Rich table
    """
    mode = get_output_mode()

    if not books:
        if mode == "json":
            print("[]")
        else:
            print(empty_message)
        return

    if mode == "json":
        print(json.dumps([b.to_dict() for b in books], ensure_ascii=False))
    elif mode == "rich":
        table = Table(title="📚 Books", show_lines=True, header_style="bold cyan")
        table.add_column("#", style="dim", justify="right")
        table.add_column("ISBN", style="magenta", no_wrap=True)
        table.add_column("Title", style="white")
        table.add_column("Author(s)", style="white")
        table.add_column("Year", justify="right")
        table.add_column("Borrowed on", style="yellow")
        for position, b in enumerate(books, 1):
            table.add_row(str(position), b.isbn, escape(b.title), escape(b.authors), str(b.year), b.borrow_date)
        _console.print(table)
    else:
        for position, b in enumerate(books, 1):
            print(f"{position}. {b.title} (ISBN: {b.isbn})")


def print_book_details(book: Any) -> None:
    """Print every field of one book in the current output mode."""
    mode = get_output_mode()

    if mode == "json":
        print(json.dumps(book.to_dict(), ensure_ascii=False))
    elif mode == "rich":
        _console.print(Panel.fit(
            f"[bold]ISBN:[/] {book.isbn}\n"
            f"[bold]Title:[/] {escape(book.title)}\n"
            f"[bold]Authors:[/] {escape(book.authors)}\n"
            f"[bold]Year:[/] {book.year}\n"
            f"[bold]Genre:[/] {escape(book.genre)}\n"
            f"[bold]Borrowed:[/] {_borrowed_text(book)}\n"
            f"[bold]Date:[/] {book.borrow_date}",
            title="🔍 Book found",
            border_style="green"
        ))
    else:
        print(f"ISBN: {book.isbn}")
        print(f"Title: {book.title}")
        print(f"Authors: {book.authors}")
        print(f"Year: {book.year}")
        print(f"Genre: {book.genre}")
        print(f"Borrowed: {_borrowed_text(book)}")
        print(f"Date: {book.borrow_date}")


def print_borrowed_result(books: List[Any]) -> None:
    """Print the borrowed books with their borrow dates."""
    mode = get_output_mode()

    if mode == "json" or not books:
        print_list_result(books, empty_message="No books are currently borrowed.")
    elif mode == "rich":
        print_list_result(books)
    else:
        for b in books:
            print(f"ISBN: {b.isbn}")
            print(f"Title: {b.title}")
            print(f"Author(s): {b.authors}")
            print(f"Borrowed on: {b.borrow_date}")
            print()


def print_stats_result(stats: Dict[str, Any]) -> None:
    """Print catalog statistics in the current output mode."""
    mode = get_output_mode()

    total = stats.get("total_books", 0)
    borrowed = stats.get("borrowed_books", 0)
    available = stats.get("available_books", 0)

    if mode == "json":
        print(json.dumps({"total_books": total, "borrowed_books": borrowed, "available_books": available},
                         ensure_ascii=False))
    elif mode == "rich":
        content = (f"[bold]Total Books:[/] {total}\n"
                   f"[bold]Borrowed:[/] {borrowed}\n"
                   f"[bold]Available:[/] {available}")
        _console.print(Panel.fit(content, title="📊 Stats", border_style="blue"))
    else:
        print(f"Total Books: {total}")
        print(f"Borrowed: {borrowed}")
        print(f"Available: {available}")
