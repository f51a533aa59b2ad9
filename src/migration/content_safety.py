"""Content-safety screening applied to each article before rendering."""

import re
from abc import ABC, abstractmethod
from enum import Enum

import structlog

from src.models.article import Article, ScreeningResult

logger = structlog.get_logger(__name__)

DEFAULT_UNSAFE_PATTERNS = [
    r"<script\b",
    r"<iframe\b",
    r"javascript:",
    r"\bonerror\s*=",
    r"\bonload\s*=",
]


class FlaggedContentPolicy(str, Enum):
    """What the pipeline does with an article the screener flags."""

    WARN = "warn"  # log and publish unchanged
    SKIP = "skip"  # log and do not write the article
    ANNOTATE = "annotate"  # write the article marked as draft


class ContentScreener(ABC):
    """Abstract base class for content-safety checks."""

    @abstractmethod
    def screen(self, article: Article) -> ScreeningResult:
        """Check an article for unsafe content.

        Args:
            article: Article to check

        Returns:
            ScreeningResult describing any matched rules
        """


class NullContentScreener(ContentScreener):
    """Screener that never flags anything."""

    def screen(self, article: Article) -> ScreeningResult:
        return ScreeningResult()


class KeywordContentScreener(ContentScreener):
    """Flag articles whose text matches any of a set of regular expressions.

    The title, intro and full text are checked case-insensitively. The default
    rules catch markup that would execute script once published as static HTML.
    """

    def __init__(self, patterns: list[str] | None = None) -> None:
        """Initialize screener.

        Args:
            patterns: Regular expressions to flag (default: DEFAULT_UNSAFE_PATTERNS)
        """
        self.patterns = [
            re.compile(pattern, re.IGNORECASE)
            for pattern in (patterns if patterns is not None else DEFAULT_UNSAFE_PATTERNS)
        ]

    def screen(self, article: Article) -> ScreeningResult:
        """Check title, intro and body against every configured pattern."""
        fields = {"title": article.title, "intro": article.intro, "body": article.body}
        reasons = []
        for pattern in self.patterns:
            for name, value in fields.items():
                if pattern.search(value):
                    reasons.append(f"{name} matches {pattern.pattern!r}")

        if reasons:
            logger.debug("content_screen_matched", article_id=article.id, reasons=reasons)
        return ScreeningResult(flagged=bool(reasons), reasons=reasons)
