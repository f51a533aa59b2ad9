"""Article-to-tags index built once per migration run."""

import structlog

from src.models.article import TagAssociation
from src.repositories.content_repository import ContentStore

logger = structlog.get_logger(__name__)


class TagIndex:
    """Mapping from article id to its tag names, in store order.

    The index is read-only once built and is shared by every article
    processed in a run.

    Example:
        >>> index = TagIndex.load(repository)
        >>> index.tags_for(42)
        ['python', 'hugo']
    """

    def __init__(self, associations: list[TagAssociation] | None = None) -> None:
        """Group tag associations by article id.

        Args:
            associations: TagAssociation records in store order
        """
        self._tags: dict[int, list[str]] = {}
        self.association_count = 0
        for association in associations or []:
            self._tags.setdefault(association.article_id, []).append(association.tag_name)
            self.association_count += 1

    @classmethod
    def load(cls, store: ContentStore) -> "TagIndex":
        """Build the index from the content store.

        Args:
            store: Content store to query

        Returns:
            Populated TagIndex

        Raises:
            ContentStoreError: If the store cannot be queried
        """
        index = cls(store.fetch_tag_associations())
        logger.info(
            "tags_loaded",
            associations=index.association_count,
            articles_tagged=len(index._tags),
        )
        return index

    def tags_for(self, article_id: int) -> list[str]:
        """Return the tag names of an article (empty list if untagged)."""
        return list(self._tags.get(article_id, []))

    def __len__(self) -> int:
        return len(self._tags)
