import click
import json
from typing import Tuple

from core.models.book import COLUMN_IDS
from ..utils import report

@click.command()
@click.pass_obj
def stats(app):
    """Show counts per column, ratings, top authors and categories."""
    library_stats = app.store.get_stats()
    click.echo(click.style("\nLibrary: ", fg='blue') +
               click.style(f"{library_stats.total_books} books", fg='cyan'))
    for column_id in COLUMN_IDS:
        column = library_stats.columns[column_id]
        click.echo(f"  {column.title}: " + click.style(str(column.count), fg='cyan'))

    click.echo(click.style("\nRatings:", fg='blue'))
    for stars, count in library_stats.ratings.items():
        click.echo(f"  {'*' * stars:<5} {count}")

    for label, table in (("Authors", library_stats.authors), ("Categories", library_stats.categories)):
        if not table:
            continue
        click.echo(click.style(f"\nTop {label.lower()}:", fg='blue'))
        for name, count in sorted(table.items(), key=lambda item: (-item[1], item[0]))[:5]:
            click.echo(f"  {name}: {count}")

    if library_stats.oldest_book:
        click.echo(click.style("\nFirst added: ", fg='blue') + library_stats.oldest_book)
        click.echo(click.style("Last added: ", fg='blue') + library_stats.newest_book)

@click.command(name='export')
@click.argument('output', type=click.File('w'), default='-')
@click.pass_obj
def export_library(app, output):
    """Write the library, settings and stats as JSON to OUTPUT (default: stdout)."""
    json.dump(app.service.export_data(), output, indent=2, ensure_ascii=False)
    output.write("\n")

@click.command(name='import')
@click.argument('source', type=click.File('r'))
@click.option('--yes', is_flag=True, help='Do not ask for confirmation')
@click.pass_obj
def import_library(app, source, yes: bool):
    """Replace the library with the contents of an export file."""
    try:
        data = json.load(source)
    except ValueError as e:
        raise click.ClickException(f"Not a valid export file: {e}")
    if not yes:
        click.confirm("This replaces your whole library. Continue?", abort=True)
    result = app.service.import_data(data)
    report(result, f"Imported {app.store.total_books()} books")

@click.command()
@click.option('--yes', is_flag=True, help='Do not ask for confirmation')
@click.pass_obj
def reset(app, yes: bool):
    """Delete every book and forget all settings."""
    if not yes:
        click.confirm("Delete all books and settings?", abort=True)
    report(app.service.reset(), "Library reset")

def _parse_setting(value: str) -> Tuple[str, object]:
    if '=' not in value:
        raise click.BadParameter(f"Expected KEY=VALUE, got {value!r}")
    key, raw = value.split('=', 1)
    try:
        parsed = json.loads(raw)
    except ValueError:
        parsed = raw
    return key.strip(), parsed

@click.command(name='settings')
@click.option('--set', 'assignments', multiple=True, metavar='KEY=VALUE',
              help='Change a setting, e.g. --set theme=dark --set booksPerColumn=30')
@click.pass_obj
def settings_command(app, assignments: Tuple[str, ...]):
    """Show or change display settings."""
    if assignments:
        values = dict(_parse_setting(value) for value in assignments)
        report(app.service.save_settings(values), "Settings saved")
    for key, value in app.service.get_settings().to_dict().items():
        click.echo(click.style(f"{key}: ", fg='blue') + click.style(json.dumps(value), fg='cyan'))
