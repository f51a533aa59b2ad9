"""CLI command for checking the CMS content store before a migration."""

import os

import click
import structlog
from dotenv import load_dotenv

from src.repositories.content_repository import DEFAULT_TABLE_PREFIX, ContentRepository

load_dotenv()
logger = structlog.get_logger(__name__)


@click.command()
@click.option(
    "--database-url",
    type=str,
    default=None,
    help="SQLAlchemy URL of the CMS database (default: $DATABASE_URL)",
)
@click.option(
    "--table-prefix",
    type=str,
    default=None,
    help="Prefix of the CMS tables (default: $TABLE_PREFIX or tcc_)",
)
def db_health(database_url: str | None, table_prefix: str | None) -> None:
    """Check that the content store is reachable and report what would be migrated."""
    click.echo("=" * 80)
    click.echo("CMS Content Store Health Check")
    click.echo("=" * 80)
    click.echo()

    db_url = database_url or os.getenv("DATABASE_URL")
    prefix = table_prefix or os.getenv("TABLE_PREFIX", DEFAULT_TABLE_PREFIX)
    if not db_url:
        click.echo("  Status: ERROR")
        click.echo("  Error: DATABASE_URL environment variable is not set")
        raise SystemExit(1)

    try:
        with ContentRepository.connect(db_url, prefix) as repository:
            article_count = repository.count_publishable_articles()
            tag_count = len(repository.fetch_tag_associations())
    except Exception as e:
        click.echo("  Status: ERROR")
        click.echo(f"  Error: {e}")
        logger.error("content_store_health_check_failed", error=str(e))
        raise SystemExit(1) from e

    click.echo("  Status: OK")
    click.echo(f"  Table Prefix: {prefix}")
    click.echo(f"  Publishable Articles: {article_count:,}")
    click.echo(f"  Tag Associations: {tag_count:,}")
    click.echo()


if __name__ == "__main__":
    db_health()
