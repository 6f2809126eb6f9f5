import sys
import logging
from typing import Optional

from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich.prompt import Confirm, IntPrompt, Prompt
from rich.markup import escape
from rich.logging import RichHandler
from rich import box
import typer

from catalog.book import Book
from catalog.errors import CatalogError, StorageError
from catalog.library import Library
from config import settings
from utils.ui_helpers import (
    set_output_mode,
    print_list_result,
    print_book_details,
    print_borrowed_result,
    print_stats_result,
)
from utils.validators import BookValidator, ISBNValidator, TextValidator

APP_NAME = settings.app_name

console = Console()
logger = logging.getLogger(__name__)


def configure_logging(level: Optional[str] = None) -> None:
    logging.basicConfig(
        level=(level or settings.log_level),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=True)],
    )


# Library instance shared by the commands of one process
class LibraryManager:
    _instance: Optional[Library] = None
    _data_file: Optional[str] = None

    @classmethod
    def use_data_file(cls, data_file: Optional[str]) -> None:
        cls._data_file = data_file

    @classmethod
    def get_instance(cls) -> Library:
        """Get or create the Library, reloading when the data file changes.

        Raises StorageError or MemoryError when the catalog cannot be loaded.
        """
        data_file = cls._data_file or settings.data_file
        if cls._instance is None or cls._instance.data_file != data_file:
            cls._instance = Library(data_file=data_file)
            logger.debug("Library loaded from %s", data_file)
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        cls._instance = None
        cls._data_file = None


def _load_library_or_exit() -> Library:
    try:
        return LibraryManager.get_instance()
    except (StorageError, MemoryError) as e:
        print(f"Error: Could not load the database. Exiting... ({e})")
        raise typer.Exit(code=1)


# --- Typer CLI application ---
app = typer.Typer(help="Library catalog CLI", invoke_without_command=True)


@app.callback(invoke_without_command=True)
def _global_options(
    ctx: typer.Context,
    output: Optional[str] = typer.Option(
        None,
        "--output",
        "-o",
        help="Output format: plain | json | rich (default: plain)",
    ),
    data_file: Optional[str] = typer.Option(
        None,
        "--data-file",
        "-f",
        help="Catalog file (default: LIBRARY_DATA_FILE or books.db)",
    ),
):
    """Global options for the CLI (output mode, data file)."""
    configure_logging()
    if output:
        set_output_mode(output)
    LibraryManager.use_data_file(data_file)
    if ctx.invoked_subcommand is None:
        raise typer.Exit(code=run_menu())


@app.command("list")
def cli_list():
    """List every book in catalog order."""
    lib = _load_library_or_exit()
    print_list_result(lib.list_books())


@app.command("find-isbn")
def cli_find_isbn(isbn: str):
    """Find a book by its exact ISBN-13 and show its details."""
    lib = _load_library_or_exit()
    book = lib.find_by_isbn(isbn)
    if not book:
        print(f"Book with ISBN {isbn} not found.")
        raise typer.Exit(code=1)
    print_book_details(book)


@app.command("find-title")
def cli_find_title(query: str = typer.Argument(..., help="Part of the title, any case")):
    """Find books whose title contains QUERY."""
    lib = _load_library_or_exit()
    books = lib.find_by_title(query)
    print_list_result(books, empty_message=f"No books found with title containing: {query}")


@app.command("borrowed")
def cli_borrowed():
    """Show the books that are currently borrowed."""
    lib = _load_library_or_exit()
    print_borrowed_result(lib.list_borrowed())


@app.command("add")
def cli_add(
    isbn: str = typer.Option(..., "--isbn", help="ISBN-13, digits only"),
    title: str = typer.Option(..., "--title", help="Title, up to 50 characters"),
    authors: str = typer.Option(..., "--authors", help="Author(s), separated by commas"),
    year: int = typer.Option(..., "--year", help="Year of publication"),
    genre: str = typer.Option(..., "--genre", help="Genre(s), separated by commas"),
):
    """Add a new book; it starts as not borrowed."""
    lib = _load_library_or_exit()
    book = Book(isbn=isbn, title=title, authors=authors, year=year, genre=genre)
    _run_mutation(lambda: lib.add_book(book), "Book added successfully!")


@app.command("borrow")
def cli_borrow(isbn: str):
    """Mark a book as borrowed today."""
    lib = _load_library_or_exit()
    _run_mutation(lambda: lib.borrow_book(isbn), "Book '{title}' has been borrowed successfully!")


@app.command("return")
def cli_return(isbn: str):
    """Mark a borrowed book as returned."""
    lib = _load_library_or_exit()
    _run_mutation(lambda: lib.return_book(isbn), "Book '{title}' has been returned successfully!")


@app.command("delete")
def cli_delete(
    isbn: str,
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
):
    """Delete the first book with this ISBN."""
    lib = _load_library_or_exit()
    book = lib.find_by_isbn(isbn)
    if not book:
        print(f"Book with ISBN {isbn} not found.")
        raise typer.Exit(code=1)
    if not yes and not typer.confirm(f"Delete '{book.title}'?", default=False):
        print("Deletion cancelled.")
        return
    _run_mutation(lambda: lib.delete_book(lib.index_of(book)), "Book deleted successfully!")


@app.command("stats")
def cli_stats():
    """Show catalog statistics."""
    lib = _load_library_or_exit()
    print_stats_result(lib.get_statistics())


@app.command("menu")
def cli_menu():
    """Start the interactive menu."""
    raise typer.Exit(code=run_menu())


def _run_mutation(operation, success_message: str) -> None:
    """Run a mutating library call for a one-shot command and report the outcome."""
    try:
        book = operation()
    except StorageError as e:
        # The change is kept in memory only.
        print(f"Warning: changes could not be saved: {e}")
        raise typer.Exit(code=1)
    except CatalogError as e:
        print(f"Error: {e}")
        raise typer.Exit(code=1)
    print(success_message.format(title=book.title))


# ------------------------- Interactive menu ------------------------- #
def _report_mutation(operation, success_message: str) -> bool:
    """Run a mutating library call from the menu; never raises domain errors."""
    try:
        book = operation()
    except StorageError as e:
        console.print(f"[bold yellow]Warning:[/] changes could not be saved: {escape(str(e))}")
        return False
    except CatalogError as e:
        console.print(f"[bold red]Error:[/] {escape(str(e))}")
        return False
    console.print(f"[green]{escape(success_message.format(title=book.title))}[/]")
    return True


def render_menu(title: str, items) -> None:
    table = Table.grid(padding=(0, 2))
    table.add_column(justify="right", style="bold cyan", width=4)
    table.add_column(justify="left", style="white")
    for key, label, icon in items:
        table.add_row(f"[reverse]{key}[/]", f"{icon} {label}")

    console.print(Panel(
        table,
        title=title,
        border_style="cyan",
        box=box.HEAVY,
        padding=(1, 2),
    ))


def _prompt_valid(label: str, check, error: str) -> str:
    while True:
        value = Prompt.ask(label, default="", show_default=False).strip("\r\n")
        if check(value):
            return value
        console.print(f"[bold red]Error:[/] {error}")


def add_book_interactive(lib: Library) -> None:
    """Ask for each field until it is valid, then add the book."""
    console.print("[bold]Adding a new book:[/]")
    while True:
        isbn = Prompt.ask("Enter ISBN (13 digits)", default="", show_default=False).strip()
        problem = ISBNValidator.describe_error(isbn)
        if not problem:
            break
        console.print(f"[bold red]Error:[/] {problem}")

    title = _prompt_valid("Enter book title", TextValidator.validate_title,
                          "Title must be 1-50 characters without '|'.")
    authors = _prompt_valid("Enter author(s) (separated by commas)", TextValidator.validate_authors,
                            "Author(s) must be 1-200 characters without '|'.")
    while True:
        year = IntPrompt.ask("Enter year of publication")
        if BookValidator.validate_year(year):
            break
        console.print("[bold red]Error:[/] A year you've entered can't be later than the current year! Try again.")
    genre = _prompt_valid("Enter genre(s) (also separated by commas)", TextValidator.validate_genre,
                          "Genre(s) must be 1-100 characters without '|'.")

    book = Book(isbn=isbn, title=title, authors=authors, year=year, genre=genre)
    _report_mutation(lambda: lib.add_book(book), "Book added successfully!")


def return_book_interactive(lib: Library) -> None:
    isbn = Prompt.ask("Enter the ISBN of the book to return", default="", show_default=False).strip()
    _report_mutation(lambda: lib.return_book(isbn), "Book '{title}' has been returned successfully!")


def book_actions(lib: Library, book: Book) -> bool:
    """Offer borrow/delete for one book. Returns True to go back to the main menu."""
    render_menu("What would you like to do with this book?", [
        ("1", "Borrow the book", "📖"),
        ("2", "Delete the book", "🗑️"),
        ("3", "Back to search menu", "🔎"),
        ("4", "Back to main menu", "🏠"),
    ])
    action = Prompt.ask("Choose what you want to do next", choices=["1", "2", "3", "4"], default="3")

    if action == "1":
        # borrow by ISBN value, not by a remembered position
        _report_mutation(lambda: lib.borrow_book(book.isbn), "Book '{title}' has been borrowed successfully!")
    elif action == "2":
        if Confirm.ask(f"🗑️ Delete '{escape(book.title)}'?", default=False):
            _report_mutation(lambda: lib.delete_book(lib.index_of(book)), "Book deleted successfully!")
        else:
            console.print("[blue]Deletion cancelled.[/]")
    elif action == "4":
        console.print("Returning to main menu...")
        return True
    else:
        console.print("Returning to search menu...")
    return False


def find_by_title_interactive(lib: Library) -> bool:
    query = Prompt.ask("Please enter a title of the book", default="", show_default=False).strip("\r\n")
    books = lib.find_by_title(query)
    if not books:
        console.print(f"[yellow]No books found with title containing: {escape(query)}[/]")
        return False

    console.print("Books found:")
    for position, book in enumerate(books, 1):
        console.print(f"{position}. {escape(book.title)} (ISBN: {book.isbn})")

    choice = IntPrompt.ask("Choose a book by index (0 to cancel)", default=0)
    if choice < 1 or choice > len(books):
        console.print("Returning to search menu...")
        return False

    selected = books[choice - 1]
    console.print(f"You selected: [bold]{escape(selected.title)}[/] (ISBN: {selected.isbn})")
    return book_actions(lib, selected)


def find_by_isbn_interactive(lib: Library) -> bool:
    isbn = Prompt.ask("Enter ISBN to search", default="", show_default=False).strip()
    book = lib.find_by_isbn(isbn)
    if not book:
        console.print(f"[yellow]Book with ISBN {escape(isbn)} not found.[/]")
        return False
    print_book_details(book)
    return book_actions(lib, book)


def show_borrowed_interactive(lib: Library) -> None:
    console.print("[bold]Books currently borrowed:[/]")
    print_borrowed_result(lib.list_borrowed())


def search_menu(lib: Library) -> None:
    while True:
        render_menu("Search menu", [
            ("1", "Find the book by its title", "🔤"),
            ("2", "Find by the ISBN-13", "🔢"),
            ("3", "Show the borrowed books", "📖"),
            ("4", "Return back to main menu", "🏠"),
        ])
        choice = Prompt.ask("Make your choice", choices=["1", "2", "3", "4"], default="4")

        exit_to_main = False
        if choice == "1":
            exit_to_main = find_by_title_interactive(lib)
        elif choice == "2":
            exit_to_main = find_by_isbn_interactive(lib)
        elif choice == "3":
            show_borrowed_interactive(lib)
        else:
            console.print("Going back to the main menu...")
            return
        if exit_to_main:
            return


def run_menu() -> int:
    """Interactive menu for the library catalog. Returns the process exit code."""
    console.print("Loading database...")
    try:
        lib = LibraryManager.get_instance()
    except (StorageError, MemoryError) as e:
        console.print(f"[bold red]Error: Could not load the database. Exiting...[/] {escape(str(e))}")
        return 1

    console.print(f"Database loaded successfully. Total books: {len(lib.list_books())}")

    while True:
        render_menu(APP_NAME, [
            ("1", "Find a book", "🔎"),
            ("2", "Add a book", "➕"),
            ("3", "Return a book", "↩️"),
            ("4", "End the program", "🚪"),
        ])
        choice = Prompt.ask("Make your choice", choices=["1", "2", "3", "4"], default="4")

        if choice == "1":
            search_menu(lib)
        elif choice == "2":
            add_book_interactive(lib)
        elif choice == "3":
            return_book_interactive(lib)
        else:
            console.print("[green]Program was ended. Have a nice day![/]")
            return 0
        print()  # blank line between operations


if __name__ == "__main__":
    if len(sys.argv) > 1:
        app()
    else:
        configure_logging()
        sys.exit(run_menu())
