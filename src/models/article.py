"""Data models for articles migrated out of the content store."""

from dataclasses import dataclass, field
from datetime import date
from pathlib import Path

UNCATEGORISED = "uncategorised"


@dataclass(frozen=True)
class Article:
    """Read-only snapshot of a publishable content item.

    Attributes:
        id: Content item identifier
        author: Username of the creating user
        created: Creation date
        intro: Summary text shown before the fold
        body: Full article text
        category: Category path (e.g., "news/world")
        title: Article title
        alias: URL-safe slug, unique within the category
    """

    id: int
    author: str
    created: date
    intro: str
    body: str
    category: str
    title: str
    alias: str

    def __post_init__(self) -> None:
        """Validate article data after initialization.

        Raises:
            ValueError: If any required field is invalid
        """
        if self.id <= 0:
            raise ValueError(f"Article id must be positive, got {self.id}")
        if self.category == UNCATEGORISED:
            raise ValueError(f"Article {self.id} is uncategorised")

    @property
    def combined_text(self) -> str:
        """Intro and full text joined the way they are published."""
        return f"{self.intro}\n{self.body}"


@dataclass(frozen=True)
class TagAssociation:
    """A single (article, tag) pair from the tag map."""

    article_id: int
    tag_name: str


@dataclass(frozen=True)
class LinkTarget:
    """Category path and alias of an article referenced by an internal link."""

    article_id: int
    category: str
    alias: str

    @property
    def url(self) -> str:
        """Site-relative URL of the target article."""
        return f"/{self.category}/{self.article_id}-{self.alias}"


@dataclass
class ScreeningResult:
    """Outcome of a content-safety check.

    Attributes:
        flagged: Whether the article tripped any rule
        reasons: Human-readable description of each rule that matched
    """

    flagged: bool = False
    reasons: list[str] = field(default_factory=list)


@dataclass
class OutputDocument:
    """Everything needed to render one article to disk.

    Attributes:
        article: Source article
        tags: Tag names in store order
        body: Intro plus full text with internal links rewritten
        path: Target file path
        draft: Whether the document should be marked as unpublished
        content: Rendered text, set once the template has run
    """

    article: Article
    tags: list[str]
    body: str
    path: Path
    draft: bool = False
    content: str | None = None
