"""Pytest configuration and shared fixtures."""

from collections.abc import Callable, Iterator
from datetime import date
from pathlib import Path
from typing import Any

import pytest
from sqlalchemy import create_engine, text

from src.models.article import Article, LinkTarget, TagAssociation
from src.repositories.content_repository import ContentRepository, ContentStore

SCHEMA = [
    "CREATE TABLE tcc_users (id INTEGER PRIMARY KEY, username TEXT NOT NULL)",
    "CREATE TABLE tcc_categories (id INTEGER PRIMARY KEY, path TEXT NOT NULL)",
    """CREATE TABLE tcc_content (
        id INTEGER PRIMARY KEY,
        created_by INTEGER NOT NULL,
        created TEXT,
        introtext TEXT,
        `fulltext` TEXT,
        catid INTEGER NOT NULL,
        title TEXT,
        alias TEXT
    )""",
    "CREATE TABLE tcc_tags (id INTEGER PRIMARY KEY, title TEXT NOT NULL)",
    """CREATE TABLE tcc_contentitem_tag_map (
        type_alias TEXT NOT NULL,
        content_item_id INTEGER NOT NULL,
        tag_id INTEGER NOT NULL
    )""",
]

LINK_TO_7 = "index.php?option=com_content&amp;view=article&amp;id=7&amp;catid=2&amp;Itemid=101"


class FakeContentStore(ContentStore):
    """In-memory content store that records link lookups."""

    def __init__(
        self,
        articles: list[Article] | None = None,
        tags: list[TagAssociation] | None = None,
        fail_on_load: Exception | None = None,
    ) -> None:
        self.articles = articles or []
        self.tags = tags or []
        self.fail_on_load = fail_on_load
        self.lookups: list[int] = []

    def fetch_publishable_articles(self) -> list[Article]:
        if self.fail_on_load is not None:
            raise self.fail_on_load
        return list(self.articles)

    def fetch_tag_associations(self) -> list[TagAssociation]:
        return list(self.tags)

    def fetch_link_target(self, article_id: int) -> LinkTarget | None:
        self.lookups.append(article_id)
        for article in self.articles:
            if article.id == article_id:
                return LinkTarget(article_id=article.id, category=article.category, alias=article.alias)
        return None


def make_article(**overrides: Any) -> Article:
    """Build an Article with sensible defaults."""
    fields: dict[str, Any] = {
        "id": 42,
        "author": "admin",
        "created": date(2019, 3, 14),
        "intro": "<p>Intro text</p>",
        "body": "<p>Body text</p>",
        "category": "news/world",
        "title": "Hello World",
        "alias": "hello-world",
    }
    fields.update(overrides)
    return Article(**fields)


@pytest.fixture
def article_factory() -> Callable[..., Article]:
    """Return a factory for Article instances."""
    return make_article


@pytest.fixture
def fake_store_class() -> type[FakeContentStore]:
    """Return the in-memory content store class."""
    return FakeContentStore


@pytest.fixture
def content_db_url(tmp_path: Path) -> str:
    """Create a SQLite CMS database with a small article set.

    Articles:
        7  blog/b-article, tagged "python" then "hugo"
        42 news/world/hello-world, links to 7 twice
        50 uncategorised/lost-post (excluded from migration)
        60 blog/no-tags
    """
    db_path = tmp_path / "cms.db"
    url = f"sqlite:///{db_path}"
    engine = create_engine(url)
    with engine.begin() as conn:
        for statement in SCHEMA:
            conn.execute(text(statement))

        conn.execute(
            text("INSERT INTO tcc_users (id, username) VALUES (1, 'admin'), (2, 'editor')")
        )
        conn.execute(
            text(
                "INSERT INTO tcc_categories (id, path) VALUES "
                "(1, 'uncategorised'), (2, 'blog'), (3, 'news/world')"
            )
        )
        conn.execute(
            text(
                "INSERT INTO tcc_content "
                "(id, created_by, created, introtext, `fulltext`, catid, title, alias) "
                "VALUES (:id, :created_by, :created, :intro, :full, :catid, :title, :alias)"
            ),
            [
                {
                    "id": 7,
                    "created_by": 2,
                    "created": "2018-06-01 09:30:00",
                    "intro": "<p>B intro</p>",
                    "full": "<p>B body</p>",
                    "catid": 2,
                    "title": "B Article",
                    "alias": "b-article",
                },
                {
                    "id": 42,
                    "created_by": 1,
                    "created": "2019-03-14 12:00:00",
                    "intro": f'<p>See <a href="{LINK_TO_7}">B</a></p>',
                    "full": f'<p>Again <a href="{LINK_TO_7}">B</a></p>',
                    "catid": 3,
                    "title": "Hello World",
                    "alias": "hello-world",
                },
                {
                    "id": 50,
                    "created_by": 1,
                    "created": "2017-01-01 00:00:00",
                    "intro": "Lost",
                    "full": "",
                    "catid": 1,
                    "title": "Lost Post",
                    "alias": "lost-post",
                },
                {
                    "id": 60,
                    "created_by": 2,
                    "created": "2020-12-24 18:00:00",
                    "intro": "No tags here",
                    "full": None,
                    "catid": 2,
                    "title": "No Tags",
                    "alias": "no-tags",
                },
            ],
        )
        conn.execute(
            text("INSERT INTO tcc_tags (id, title) VALUES (1, 'python'), (2, 'hugo'), (3, 'ignored')")
        )
        conn.execute(
            text(
                "INSERT INTO tcc_contentitem_tag_map (type_alias, content_item_id, tag_id) VALUES "
                "('com_content.article', 7, 1), "
                "('com_content.article', 7, 2), "
                "('com_content.category', 7, 3), "
                "('com_content.article', 42, 2)"
            )
        )
    engine.dispose()
    return url


@pytest.fixture
def content_repository(content_db_url: str) -> Iterator[ContentRepository]:
    """Open a ContentRepository on the SQLite CMS database."""
    with ContentRepository.connect(content_db_url) as repository:
        yield repository
