"""Domain models for the migration tool."""

from src.models.article import (
    UNCATEGORISED,
    Article,
    LinkTarget,
    OutputDocument,
    ScreeningResult,
    TagAssociation,
)

__all__ = [
    "UNCATEGORISED",
    "Article",
    "LinkTarget",
    "OutputDocument",
    "ScreeningResult",
    "TagAssociation",
]
