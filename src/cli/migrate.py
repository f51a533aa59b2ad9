"""CLI command for migrating CMS articles into a static site tree."""

from pathlib import Path
from typing import TYPE_CHECKING

import click
import structlog
from dotenv import load_dotenv

from src.migration.content_safety import FlaggedContentPolicy, KeywordContentScreener
from src.migration.pipeline import MigrationPipeline
from src.migration.renderer import DocumentRenderer
from src.repositories.content_repository import ContentRepository
from src.utils.config import FLAGGED_POLICIES, Config
from src.utils.exceptions import ConfigurationError, MigrationError
from src.utils.logger import configure_logging

# Load environment variables from .env file
load_dotenv()

if TYPE_CHECKING:
    from src.migration.pipeline import MigrationStatistics

logger = structlog.get_logger(__name__)


def _display_configuration(config: Config, dry_run: bool) -> None:
    """Display migration configuration to user."""
    click.echo(f"Output Path: {config.output_path}")
    click.echo(f"Table Prefix: {config.table_prefix}")
    click.echo(f"Template: {config.template_name}")
    click.echo(f"Extension: .{config.output_extension}")
    click.echo(f"Flagged Content Policy: {config.flagged_policy}")
    click.echo(f"Dry Run: {dry_run}")
    click.echo()


def _display_summary(stats: "MigrationStatistics", dry_run: bool) -> None:
    """Display migration summary."""
    click.echo()
    click.echo("=" * 80)
    click.echo("Migration Complete!" if not dry_run else "Dry Run Complete!")
    click.echo("=" * 80)
    click.echo(f"  Articles Loaded: {stats.articles_loaded}")
    click.echo(f"  Articles Written: {stats.articles_written}")
    click.echo(f"  Articles Flagged: {stats.articles_flagged}")
    click.echo(f"  Articles Skipped: {stats.articles_skipped}")
    click.echo(f"  Articles Failed: {stats.articles_failed}")
    click.echo(f"  Links Rewritten: {stats.links_rewritten}")
    click.echo(f"  Tag Associations: {stats.tag_associations}")
    click.echo(f"  Duration: {int(stats.duration_seconds)}s")
    click.echo()


@click.command()
@click.option(
    "--database-url",
    type=str,
    default=None,
    help="SQLAlchemy URL of the CMS database (default: $DATABASE_URL)",
)
@click.option(
    "--output-path",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Root directory for generated content (default: $OUTPUT_PATH or output)",
)
@click.option(
    "--table-prefix",
    type=str,
    default=None,
    help="Prefix of the CMS tables (default: $TABLE_PREFIX or tcc_)",
)
@click.option(
    "--template",
    "template_name",
    type=str,
    default=None,
    help="Template file name (default: $TEMPLATE_NAME or default_page.toml.j2)",
)
@click.option(
    "--template-dir",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=None,
    help="Directory to load templates from (default: bundled templates)",
)
@click.option(
    "--extension",
    type=str,
    default=None,
    help="Output file extension (default: $OUTPUT_EXTENSION or md)",
)
@click.option(
    "--flagged-policy",
    type=click.Choice(FLAGGED_POLICIES, case_sensitive=False),
    default=None,
    help="What to do with articles the content screen flags (default: annotate)",
)
@click.option(
    "--dry-run",
    is_flag=True,
    help="Render every article without writing files",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default=None,
    help="Logging level (default: $LOG_LEVEL or INFO)",
)
def migrate(  # noqa: PLR0913
    database_url: str | None,
    output_path: Path | None,
    table_prefix: str | None,
    template_name: str | None,
    template_dir: Path | None,
    extension: str | None,
    flagged_policy: str | None,
    dry_run: bool,
    log_level: str | None,
) -> None:
    """Migrate CMS articles into static-site markdown files.

    Loads every article outside the uncategorised category, rewrites
    internal index.php article links into path-based URLs, and writes one
    document per article to <output-path>/<category>/<id>-<alias>.<ext>.

    Examples:

        \b
        # Migrate using settings from .env
        poetry run migrate

        \b
        # Migrate a local MySQL dump into a Hugo content directory
        poetry run migrate --database-url mysql+pymysql://user:pw@localhost/joomla \\
            --output-path site/content

        \b
        # Check what would be written without touching the filesystem
        poetry run migrate --dry-run --flagged-policy skip
    """
    try:
        config = Config(
            database_url=database_url,
            output_path=str(output_path) if output_path else None,
            table_prefix=table_prefix,
            template_name=template_name,
            template_dir=str(template_dir) if template_dir else None,
            output_extension=extension,
            flagged_policy=flagged_policy,
            log_level=log_level,
        )
    except ConfigurationError as e:
        click.echo(f"  Configuration error: {e}", err=True)
        raise click.Abort() from e

    configure_logging(config.log_level)

    click.echo("=" * 80)
    click.echo("CMS to Static Site Migration")
    click.echo("=" * 80)
    click.echo()

    _display_configuration(config, dry_run)

    try:
        renderer = DocumentRenderer(
            template_dir=config.template_dir,
            template_name=config.template_name,
        )
    except MigrationError as e:
        click.echo(f"  Failed to load template: {e}", err=True)
        raise click.Abort() from e

    click.echo("Starting migration...")
    click.echo()

    try:
        with ContentRepository.connect(config.database_url, config.table_prefix) as repository:
            pipeline = MigrationPipeline(
                store=repository,
                renderer=renderer,
                output_path=config.output_path,
                screener=KeywordContentScreener(),
                policy=FlaggedContentPolicy(config.flagged_policy),
                extension=config.output_extension,
                dry_run=dry_run,
            )
            stats = pipeline.run()

        _display_summary(stats, dry_run)

    except KeyboardInterrupt:
        click.echo()
        click.echo("  Migration interrupted by user", err=True)
        raise click.Abort() from None

    except Exception as e:
        click.echo()
        click.echo(f"  Migration failed: {e}", err=True)
        retryable = isinstance(e, MigrationError) and e.is_retryable
        if retryable:
            click.echo("  The content store was unavailable; the run can be retried.", err=True)
        logger.error("migration_aborted", error=str(e), retryable=retryable, exc_info=True)
        raise click.Abort() from e


if __name__ == "__main__":
    migrate()
