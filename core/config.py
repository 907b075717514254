# core/config.py
import os
from dataclasses import dataclass, field
from typing import Optional

def _env_int(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, str(default)))
    except ValueError:
        return default

def _env_float(name: str, default: float) -> float:
    try:
        return float(os.getenv(name, str(default)))
    except ValueError:
        return default

@dataclass
class Settings:
    # Storage
    database_url: str = field(default_factory=lambda: os.getenv("DATABASE_URL", "sqlite:///reading_board.db"))
    library_key: str = field(default_factory=lambda: os.getenv("LIBRARY_KEY", "default"))
    storage_quota_bytes: int = field(default_factory=lambda: _env_int("STORAGE_QUOTA_BYTES", 5 * 1024 * 1024))

    # Google Books
    google_books_api_key: Optional[str] = field(default_factory=lambda: os.getenv("GOOGLE_BOOKS_API_KEY") or None)
    google_books_base_url: str = field(
        default_factory=lambda: os.getenv("GOOGLE_BOOKS_BASE_URL", "https://www.googleapis.com/books/v1/volumes")
    )
    google_books_max_results: int = field(default_factory=lambda: _env_int("GOOGLE_BOOKS_MAX_RESULTS", 12))
    google_books_timeout: float = field(default_factory=lambda: _env_float("GOOGLE_BOOKS_TIMEOUT", 10.0))
    google_books_language: str = field(default_factory=lambda: os.getenv("GOOGLE_BOOKS_LANGUAGE", "en"))
    search_cache_seconds: int = field(default_factory=lambda: _env_int("SEARCH_CACHE_SECONDS", 300))

    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "WARNING").upper())

    @classmethod
    def from_env(cls) -> "Settings":
        """Read a fresh copy of the environment."""
        return cls()

settings = Settings()
