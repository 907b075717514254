import click
from typing import Optional

from core.models.book import COLUMN_IDS, COLUMN_TITLES
from ..utils import COLUMN_CHOICE, format_book, print_column, report

@click.command(name='list')
@click.option('--column', type=COLUMN_CHOICE, default=None, help='Only show one column')
@click.pass_obj
def list_books(app, column: Optional[str]):
    """Show the books in each column, in board order."""
    columns = [column] if column else COLUMN_IDS
    for column_id in columns:
        print_column(column_id, app.store.list_column(column_id))

@click.command()
@click.argument('external_id')
@click.option('--column', type=COLUMN_CHOICE, default='to-read', help='Column to add the book to')
@click.pass_obj
def add(app, external_id: str, column: str):
    """Add a book to the library by its Google Books id.

    Example:
        reading-board add zyTCAlFPjgYC --column reading
    """
    result = app.service.add_by_external_id(external_id, column)
    report(result, f'Book added to "{COLUMN_TITLES[column]}"')

@click.command()
@click.argument('query')
@click.option('--limit', type=int, default=None, help='Maximum number of results')
@click.pass_obj
def lookup(app, query: str, limit: Optional[int]):
    """Search Google Books for QUERY."""
    options = {'maxResults': limit} if limit else {}
    results = app.service.search.search(query, **options)
    if not results:
        click.echo(click.style("No books found", fg='yellow'))
        return
    for book in results:
        marker = click.style(" (in library)", fg='green') if app.store.contains(book.id) else ""
        click.echo(format_book(book) + marker)

@click.command()
@click.argument('book_id')
@click.argument('to_column', type=COLUMN_CHOICE)
@click.option('--from', 'from_column', type=COLUMN_CHOICE, default=None,
              help='Column the book is in (default: wherever it is)')
@click.pass_obj
def move(app, book_id: str, to_column: str, from_column: Optional[str]):
    """Move BOOK_ID to TO_COLUMN."""
    source = from_column or app.store.column_of(book_id)
    if source is None:
        raise click.ClickException(f"Book {book_id} not found")
    result = app.store.move_book(book_id, source, to_column)
    report(result, f'Book moved to "{COLUMN_TITLES[to_column]}"')

@click.command()
@click.argument('book_id')
@click.option('--rating', type=click.IntRange(0, 5), default=None, help='Rating from 0 to 5')
@click.option('--comment', default=None, help='Personal comment')
@click.option('--progress', type=click.IntRange(0, 100), default=None, help='Reading progress in percent')
@click.option('--status', type=COLUMN_CHOICE, default=None, help='Move the book to this column')
@click.pass_obj
def update(app, book_id: str, rating, comment, progress, status):
    """Change the rating, comment, progress or status of BOOK_ID."""
    if rating is None and comment is None and progress is None and status is None:
        raise click.UsageError("Nothing to update; pass --rating, --comment, --progress or --status")
    result = app.service.apply_book_update(book_id, rating=rating, comment=comment,
                                           progress=progress, status=status)
    report(result, "Book updated")

@click.command()
@click.argument('book_id')
@click.option('--column', type=COLUMN_CHOICE, default=None, help='Only delete from this column')
@click.option('--yes', is_flag=True, help='Do not ask for confirmation')
@click.pass_obj
def delete(app, book_id: str, column: Optional[str], yes: bool):
    """Remove BOOK_ID from the library."""
    if not yes:
        click.confirm(f"Delete {book_id}?", abort=True)
    result = app.store.delete_book(book_id, column)
    report(result, "Book deleted")

@click.command()
@click.argument('query', required=False, default='')
@click.pass_obj
def search(app, query: str):
    """Search your library by title, author, description or category."""
    hits = app.service.search_library(query)
    if not hits:
        click.echo(click.style("No matching books", fg='yellow'))
        return
    for hit in hits:
        click.echo(format_book(hit.record, hit.column))
