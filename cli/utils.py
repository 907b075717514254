import logging
import sys
import click
from dataclasses import dataclass
from typing import Iterable, Optional

from core.config import settings
from core.models.book import BookRecord, COLUMN_IDS, COLUMN_TITLES
from core.models.results import StoreResult
from core.sa.database import Database
from core.sa.repositories import SqlSnapshotRepository, SqlSettingsRepository
from core.search.cache import TTLCache
from core.search.google_books import GoogleBooksClient
from core.services.library_service import LibraryService
from core.store.library_store import LibraryStore

COLUMN_CHOICE = click.Choice(list(COLUMN_IDS))

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

def setup_logging(verbose: bool = False) -> None:
    """Send log records to stderr; --verbose shows everything down to DEBUG."""
    level = logging.DEBUG if verbose else getattr(logging, settings.log_level, logging.WARNING)
    root = logging.getLogger()
    handler = next((h for h in root.handlers if getattr(h, '_reading_board', False)), None)
    if handler is None:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._reading_board = True
        root.addHandler(handler)
    else:
        handler.setStream(sys.stderr)
    root.setLevel(level)

@dataclass
class AppContext:
    """Everything a command needs, built once per invocation"""
    database: Database
    store: LibraryStore
    service: LibraryService

def build_app(database_url: Optional[str] = None, library_key: Optional[str] = None) -> AppContext:
    database = Database(database_url)
    database.init_db()
    store = LibraryStore(SqlSnapshotRepository(database, key=library_key))
    search = GoogleBooksClient(cache=TTLCache(settings.search_cache_seconds))
    service = LibraryService(store, search, SqlSettingsRepository(database, key=library_key))
    return AppContext(database=database, store=store, service=service)

def format_book(book: BookRecord, column: Optional[str] = None) -> str:
    """One line per book: id, title, authors, rating and progress when reading."""
    line = (click.style(book.id, fg='cyan') + "  " +
            click.style(book.title, bold=True) + " - " + ", ".join(book.authors))
    if book.rating:
        line += "  " + click.style("*" * book.rating, fg='yellow')
    if book.status == "reading" and book.progress:
        line += click.style(f"  {book.progress}%", fg='blue')
    if column:
        line += click.style(f"  [{COLUMN_TITLES.get(column, column)}]", fg='magenta')
    return line

def print_column(column_id: str, books: Iterable[BookRecord]) -> None:
    books = list(books)
    click.echo(click.style(f"\n{COLUMN_TITLES[column_id]} ", fg='blue') +
               click.style(f"({len(books)})", fg='cyan'))
    if not books:
        click.echo(click.style("  (empty)", fg='white', dim=True))
    for book in books:
        click.echo("  " + format_book(book))

def report(result: StoreResult, success_message: str) -> None:
    """Print the outcome of an operation; failures exit with status 1."""
    if result:
        click.echo(click.style(success_message, fg='green'))
        return
    if result.quota_exceeded:
        click.echo(click.style("Storage is full. Delete some books and try again.", fg='yellow'), err=True)
    raise click.ClickException(result.message or "Operation failed")
