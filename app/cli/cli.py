"""
Main CLI application using Typer.

Entry point: python -m app.cli
CLI Name: tagstats-admin
"""
import typer

from app import __version__ as app_version

app = typer.Typer(
    name="tagstats-admin",
    help="Tag Stats Admin CLI - trigger imports and inspect cached tag rankings",
)

@app.command()
def version():
    """Show CLI version information."""
    typer.echo(f"Tag Stats CLI version {app_version}")

# Register command groups
from app.cli.commands import tags
app.add_typer(tags.app, name="tags")
