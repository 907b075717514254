# cli/main.py
import click
from .utils import build_app, setup_logging
from .commands.books import list_books, add, lookup, move, update, delete, search
from .commands.library import stats, export_library, import_library, reset, settings_command

@click.group()
@click.option('--database-url', envvar='DATABASE_URL', default=None,
              help='SQLAlchemy URL of the library database')
@click.option('--library', 'library_key', envvar='LIBRARY_KEY', default=None,
              help='Name of the stored library to use')
@click.option('--verbose/--no-verbose', default=False, help='Show debug logging')
@click.pass_context
def cli(ctx, database_url, library_key, verbose):
    """Reading Board - track books across to-read, reading, read and favorites"""
    setup_logging(verbose)
    app = build_app(database_url, library_key)
    ctx.obj = app
    ctx.call_on_close(app.database.dispose)

cli.add_command(list_books)
cli.add_command(add)
cli.add_command(lookup)
cli.add_command(move)
cli.add_command(update)
cli.add_command(delete)
cli.add_command(search)
cli.add_command(stats)
cli.add_command(export_library)
cli.add_command(import_library)
cli.add_command(reset)
cli.add_command(settings_command)

def main():
    """Entry point for the CLI"""
    cli()

if __name__ == '__main__':
    main()
