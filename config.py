import os
from dataclasses import dataclass
from dotenv import load_dotenv

load_dotenv()


def _env_flag(name: str, default: str = "False") -> bool:
    return os.getenv(name, default).lower() in ("true", "1", "yes")


@dataclass
class Settings:
    # Storage settings
    data_file: str = os.getenv("LIBRARY_DATA_FILE", "books.db")

    # Catalog rules
    # The catalog historically accepts duplicate ISBNs; lookups return the first match.
    reject_duplicate_isbn: bool = _env_flag("LIBRARY_REJECT_DUPLICATE_ISBN")

    # Logging settings
    log_level: str = os.getenv("LIBRARY_LOG_LEVEL", "WARNING").upper()

    # Application settings
    app_name: str = os.getenv("APP_NAME", "Library Catalog")
    app_version: str = os.getenv("APP_VERSION", "1.0.0")


settings = Settings()
