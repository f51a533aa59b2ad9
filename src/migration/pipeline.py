"""Migration pipeline orchestration from content store to static site tree."""

import time
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any

import structlog
from tqdm import tqdm

from src.migration.content_safety import (
    ContentScreener,
    FlaggedContentPolicy,
    NullContentScreener,
)
from src.migration.link_resolver import LinkResolver
from src.migration.output_paths import build_output_path
from src.migration.renderer import DocumentRenderer
from src.migration.tag_index import TagIndex
from src.models.article import Article, OutputDocument
from src.repositories.content_repository import ContentStore
from src.utils.exceptions import MigrationError


class PipelineState(str, Enum):
    """Lifecycle of a migration run."""

    NOT_STARTED = "not_started"
    LOADING = "loading"
    PROCESSING = "processing"
    DONE = "done"
    FAILED = "failed"


@dataclass
class MigrationStatistics:
    """Statistics for one migration run.

    Attributes:
        articles_loaded: Number of publishable articles loaded from the store
        articles_written: Number of documents written (or rendered in dry-run mode)
        articles_skipped: Number of flagged articles skipped by policy
        articles_flagged: Number of articles the content screen flagged
        articles_failed: Number of articles that failed processing
        links_rewritten: Number of internal links rewritten
        tag_associations: Number of tag associations loaded
        start_time: Start time as unix timestamp
        end_time: End time as unix timestamp
        duration_seconds: Total processing duration
    """

    articles_loaded: int = 0
    articles_written: int = 0
    articles_skipped: int = 0
    articles_flagged: int = 0
    articles_failed: int = 0
    links_rewritten: int = 0
    tag_associations: int = 0
    start_time: float = 0.0
    end_time: float = 0.0
    duration_seconds: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        """Convert statistics to dictionary for JSON serialization."""
        return {
            "articles_loaded": self.articles_loaded,
            "articles_written": self.articles_written,
            "articles_skipped": self.articles_skipped,
            "articles_flagged": self.articles_flagged,
            "articles_failed": self.articles_failed,
            "links_rewritten": self.links_rewritten,
            "tag_associations": self.tag_associations,
            "duration_seconds": int(self.duration_seconds),
            "start_time": time.strftime("%Y-%m-%d %H:%M:%S", time.localtime(self.start_time)),
            "end_time": time.strftime("%Y-%m-%d %H:%M:%S", time.localtime(self.end_time)),
        }


class MigrationPipeline:
    """Orchestrates a full migration run.

    Processes the content store through:
    1. Load tag associations and publishable articles (fatal on failure)
    2. For each article: screen content, build the output path, look up tags,
       rewrite internal links in intro + body, render and write the document

    Per-article failures are logged and counted; the run continues with the
    next article. Every run processes the full article set and overwrites
    existing output files.
    """

    def __init__(
        self,
        store: ContentStore,
        renderer: DocumentRenderer,
        output_path: str | Path,
        screener: ContentScreener | None = None,
        policy: FlaggedContentPolicy = FlaggedContentPolicy.ANNOTATE,
        extension: str = "md",
        dry_run: bool = False,
        show_progress: bool = True,
    ) -> None:
        """Initialize migration pipeline.

        Args:
            store: Content store to read articles, tags and link targets from
            renderer: Renderer used to produce output documents
            output_path: Root directory of the generated site content
            screener: Content-safety screen (default: never flags)
            policy: What to do with flagged articles
            extension: Output file extension
            dry_run: If True, render documents without writing files
            show_progress: Show a tqdm progress bar while processing
        """
        self.logger = structlog.get_logger(__name__)

        self.store = store
        self.renderer = renderer
        self.output_path = Path(output_path)
        self.screener = screener or NullContentScreener()
        self.policy = FlaggedContentPolicy(policy)
        self.extension = extension
        self.dry_run = dry_run
        self.show_progress = show_progress

        self.resolver = LinkResolver(store.fetch_link_target)
        self.tag_index = TagIndex()
        self.state = PipelineState.NOT_STARTED
        self.stats = MigrationStatistics()

    def run(self) -> MigrationStatistics:
        """Run the migration over every publishable article.

        Returns:
            MigrationStatistics with processing counts

        Raises:
            MigrationError: If loading fails; no article is processed in that case
        """
        self.logger.info(
            "migration_started",
            output_path=str(self.output_path),
            policy=self.policy.value,
            dry_run=self.dry_run,
        )

        self.stats = MigrationStatistics()
        self.stats.start_time = time.time()
        self.resolver.rewrites = 0

        articles = self._load()

        self.state = PipelineState.PROCESSING
        for article in tqdm(
            articles,
            desc="Migrating articles",
            unit="article",
            disable=not self.show_progress,
        ):
            self._process_article(article)

        self.stats.links_rewritten = self.resolver.rewrites
        self.stats.end_time = time.time()
        self.stats.duration_seconds = self.stats.end_time - self.stats.start_time
        self.state = PipelineState.DONE

        self.logger.info("migration_completed", **self.stats.to_dict())
        return self.stats

    def _load(self) -> list[Article]:
        """Load the tag index and the article set.

        Raises:
            MigrationError: If either query fails or any row is malformed
        """
        self.state = PipelineState.LOADING
        try:
            self.tag_index = TagIndex.load(self.store)
            articles = self.store.fetch_publishable_articles()
        except Exception as e:
            self.state = PipelineState.FAILED
            self.logger.error(
                "migration_failed",
                error=str(e),
                error_type=type(e).__name__,
                exc_info=True,
            )
            if isinstance(e, MigrationError):
                raise
            raise MigrationError(f"Failed to load content: {e}") from e

        self.stats.tag_associations = self.tag_index.association_count
        self.stats.articles_loaded = len(articles)
        self.logger.info("articles_loaded", count=len(articles))
        return articles

    def _process_article(self, article: Article) -> None:
        """Migrate a single article, isolating any failure to that article."""
        log = self.logger.bind(article_id=article.id, title=article.title)
        try:
            log.info("processing_article", category=article.category)

            draft = False
            screening = self.screener.screen(article)
            if screening.flagged:
                self.stats.articles_flagged += 1
                log.warning(
                    "article_flagged",
                    policy=self.policy.value,
                    reasons=screening.reasons,
                )
                if self.policy is FlaggedContentPolicy.SKIP:
                    self.stats.articles_skipped += 1
                    return
                draft = self.policy is FlaggedContentPolicy.ANNOTATE

            document = self.build_document(article, draft=draft)

            if self.dry_run:
                self.renderer.render(document)
            else:
                self.renderer.write(document)

            self.stats.articles_written += 1
            log.debug("article_written", path=str(document.path), dry_run=self.dry_run)

        except Exception as e:
            self.stats.articles_failed += 1
            log.error(
                "article_failed",
                error=str(e),
                error_type=type(e).__name__,
                exc_info=True,
            )

    def build_document(self, article: Article, draft: bool = False) -> OutputDocument:
        """Assemble the output document for an article.

        Links are resolved on the combined intro and body text.

        Args:
            article: Article to migrate
            draft: Whether to mark the document as unpublished

        Returns:
            OutputDocument ready to render

        Raises:
            OutputPathError: If the output path cannot be built
            LinkResolutionError: If an internal link cannot be resolved
        """
        path = build_output_path(self.output_path, article, self.extension)
        return OutputDocument(
            article=article,
            tags=self.tag_index.tags_for(article.id),
            body=self.resolver.resolve(article.combined_text),
            path=path,
            draft=draft,
        )
