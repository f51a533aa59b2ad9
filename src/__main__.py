"""Main entry point for the CMS to static site migration tool."""

import click

from src.cli.db_health import db_health
from src.cli.migrate import migrate


@click.group()
def cli() -> None:
    """Migrate CMS articles into a static site content tree."""


cli.add_command(migrate)
cli.add_command(db_health, name="db-health")


if __name__ == "__main__":
    cli()
