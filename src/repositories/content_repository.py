"""Repository for read-only queries against the CMS content store."""

import re
from abc import ABC, abstractmethod
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import date, datetime
from typing import Any

import structlog
from sqlalchemy import create_engine, text
from sqlalchemy.engine import Connection
from sqlalchemy.exc import DBAPIError, OperationalError, SQLAlchemyError

from src.models.article import UNCATEGORISED, Article, LinkTarget, TagAssociation
from src.utils.exceptions import ContentLoadError, ContentStoreError

logger = structlog.get_logger(__name__)

ARTICLE_TYPE_ALIAS = "com_content.article"
DEFAULT_TABLE_PREFIX = "tcc_"
TABLE_PREFIX_PATTERN = re.compile(r"[A-Za-z0-9_]*")


def parse_created(value: Any) -> date:
    """Convert a created column value into a date.

    Args:
        value: Raw column value (datetime, date, or ISO string depending on driver)

    Returns:
        Creation date

    Raises:
        ValueError: If the value cannot be interpreted as a date
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        # Raises on MySQL zero dates such as "0000-00-00 00:00:00"
        return datetime.fromisoformat(value.strip()).date()
    raise ValueError(f"Unsupported date value: {value!r}")


def is_transient(error: SQLAlchemyError) -> bool:
    """Whether a query failed because the connection dropped mid-run."""
    return isinstance(error, DBAPIError) and error.connection_invalidated


class ContentStore(ABC):
    """Read-only content store capability used by the migration pipeline."""

    @abstractmethod
    def fetch_publishable_articles(self) -> list[Article]:
        """Return every article outside the uncategorised category."""

    @abstractmethod
    def fetch_tag_associations(self) -> list[TagAssociation]:
        """Return all article tag assignments in store order."""

    @abstractmethod
    def fetch_link_target(self, article_id: int) -> LinkTarget | None:
        """Return the link target for one article, or None if it does not exist."""


class ContentRepository(ContentStore):
    """Query surface over a Joomla-style content schema.

    Exposes the three read-only queries the migration needs: all publishable
    articles, all article tag associations, and the link target for a single
    article id. Table names are built from a configurable prefix.
    """

    def __init__(self, connection: Connection, table_prefix: str = DEFAULT_TABLE_PREFIX) -> None:
        """Initialize repository with an open connection.

        Args:
            connection: SQLAlchemy connection to the content store
            table_prefix: Prefix shared by all CMS tables (e.g., "tcc_")
        """
        if not TABLE_PREFIX_PATTERN.fullmatch(table_prefix):
            raise ValueError(f"Invalid table prefix: {table_prefix!r}")
        self.connection = connection
        self.table_prefix = table_prefix

    @classmethod
    @contextmanager
    def connect(
        cls, database_url: str, table_prefix: str = DEFAULT_TABLE_PREFIX
    ) -> Iterator["ContentRepository"]:
        """Open the content store for the duration of a run.

        Args:
            database_url: SQLAlchemy database URL
            table_prefix: Prefix shared by all CMS tables

        Yields:
            ContentRepository bound to a live connection

        Raises:
            ContentStoreError: If the store cannot be reached (marked retryable when
                the failure is operational, e.g. the server refused the connection)
        """
        try:
            engine = create_engine(database_url)
        except (SQLAlchemyError, ValueError) as e:
            raise ContentStoreError(f"Invalid database URL: {e}") from e

        try:
            try:
                connection = engine.connect()
            except SQLAlchemyError as e:
                raise ContentStoreError(
                    f"Failed to connect to content store: {e}",
                    is_retryable=isinstance(e, OperationalError),
                ) from e

            with connection:
                yield cls(connection, table_prefix=table_prefix)
        finally:
            engine.dispose()

    def _table(self, name: str) -> str:
        return f"{self.table_prefix}{name}"

    def _execute(self, sql: str, **params: Any) -> list[Any]:
        try:
            result = self.connection.execute(text(sql), params)
            return list(result.mappings().all())
        except SQLAlchemyError as e:
            raise ContentStoreError(
                f"Content store query failed: {e}", is_retryable=is_transient(e)
            ) from e

    def fetch_publishable_articles(self) -> list[Article]:
        """Retrieve every article outside the uncategorised category.

        Returns:
            Articles ordered by content id

        Raises:
            ContentStoreError: If the query fails
            ContentLoadError: If any row cannot be mapped to an Article
        """
        sql = f"""
            SELECT c.id AS id, u.username AS username, c.created AS created,
                   c.introtext AS intro, c.`fulltext` AS full_text, d.path AS path,
                   c.title AS title, c.alias AS alias
            FROM {self._table("content")} c
            JOIN {self._table("users")} u ON c.created_by = u.id
            JOIN {self._table("categories")} d ON d.id = c.catid
            WHERE d.path <> :excluded
            ORDER BY c.id
        """
        rows = self._execute(sql, excluded=UNCATEGORISED)

        articles = []
        for row in rows:
            try:
                created = parse_created(row["created"])
                article = Article(
                    id=int(row["id"]),
                    author=row["username"] or "",
                    created=created,
                    intro=row["intro"] or "",
                    body=row["full_text"] or "",
                    category=row["path"],
                    title=row["title"] or "",
                    alias=row["alias"] or "",
                )
            except (TypeError, ValueError) as e:
                raise ContentLoadError(f"Content row {row['id']} is malformed: {e}") from e
            articles.append(article)

        logger.info("articles_fetched", count=len(articles))
        return articles

    def fetch_tag_associations(self) -> list[TagAssociation]:
        """Retrieve all tag assignments for articles.

        Returns:
            TagAssociation records in store order
        """
        sql = f"""
            SELECT m.content_item_id AS id, t.title AS name
            FROM {self._table("tags")} t
            JOIN {self._table("contentitem_tag_map")} m ON t.id = m.tag_id
            WHERE m.type_alias = :type_alias
        """
        rows = self._execute(sql, type_alias=ARTICLE_TYPE_ALIAS)
        return [TagAssociation(article_id=int(row["id"]), tag_name=row["name"]) for row in rows]

    def fetch_link_target(self, article_id: int) -> LinkTarget | None:
        """Look up the category path and alias of a single article.

        A target in the uncategorised category is still returned, with a
        warning, since its page is not part of the migrated site.

        Args:
            article_id: Content item identifier

        Returns:
            LinkTarget if the article exists, None otherwise
        """
        sql = f"""
            SELECT c.alias AS alias, d.path AS path
            FROM {self._table("content")} c
            JOIN {self._table("categories")} d ON c.catid = d.id
            WHERE c.id = :article_id
        """
        rows = self._execute(sql, article_id=article_id)
        if not rows:
            return None
        row = rows[0]
        if row["path"] == UNCATEGORISED:
            logger.warning(
                "link_target_not_migrated", target_id=article_id, category=row["path"]
            )
        return LinkTarget(article_id=article_id, category=row["path"], alias=row["alias"])

    def count_publishable_articles(self) -> int:
        """Count articles outside the uncategorised category."""
        sql = f"""
            SELECT COUNT(*) AS total
            FROM {self._table("content")} c
            JOIN {self._table("categories")} d ON d.id = c.catid
            WHERE d.path <> :excluded
        """
        return int(self._execute(sql, excluded=UNCATEGORISED)[0]["total"])
