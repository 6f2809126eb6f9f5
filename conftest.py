import pytest

from catalog.library import Library
from main import LibraryManager
from utils.ui_helpers import OUTPUT_MODE_ENV


@pytest.fixture(autouse=True)
def plain_output(monkeypatch):
    # The CLI writes the output mode to os.environ; setenv restores it afterwards
    monkeypatch.setenv(OUTPUT_MODE_ENV, "plain")
    LibraryManager.reset()
    yield
    LibraryManager.reset()


@pytest.fixture
def data_file(tmp_path):
    # Each test gets its own catalog file
    return str(tmp_path / "books.db")


@pytest.fixture
def lib(data_file):
    return Library(data_file=data_file)
