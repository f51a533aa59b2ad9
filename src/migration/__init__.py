"""Migration module turning CMS content into a static site tree."""

from src.migration.content_safety import (
    ContentScreener,
    FlaggedContentPolicy,
    KeywordContentScreener,
    NullContentScreener,
)
from src.migration.link_resolver import LinkResolver
from src.migration.pipeline import MigrationPipeline, MigrationStatistics, PipelineState
from src.migration.renderer import DocumentRenderer
from src.migration.tag_index import TagIndex

__all__ = [
    "ContentScreener",
    "DocumentRenderer",
    "FlaggedContentPolicy",
    "KeywordContentScreener",
    "LinkResolver",
    "MigrationPipeline",
    "MigrationStatistics",
    "NullContentScreener",
    "PipelineState",
    "TagIndex",
]
