"""Rewrite legacy internal article links into path-based URLs."""

import re
from collections.abc import Callable

import structlog

from src.models.article import LinkTarget
from src.utils.exceptions import DanglingLinkError, LinkResolutionError

logger = structlog.get_logger(__name__)

# index.php?option=com_content&amp;view=article&amp;id=7&amp;catid=3&amp;Itemid=101
# Separators match any single character so "?", "&" and ";" variants are all accepted.
INTERNAL_LINK_PATTERN = re.compile(
    r"index\.php.option=com_content.amp.view=article"
    r".amp.id=(?P<article_id>\d+)"
    r".amp.catid=(?P<category_id>\d+)"
    r".amp.Itemid=(?P<item_id>\d+)"
)

LinkLookup = Callable[[int], LinkTarget | None]


class LinkResolver:
    """Replace internal link patterns in body text with canonical URLs.

    Each pass finds the first remaining pattern, looks up the referenced
    article, and replaces every literal occurrence of the matched text before
    re-scanning from the start. Every pass removes one distinct matched
    string and introduces none, so resolution finishes after as many
    lookups as there are distinct patterns in the text.
    """

    def __init__(self, lookup: LinkLookup) -> None:
        """Initialize resolver.

        Args:
            lookup: Callable returning the LinkTarget for an article id, or None
        """
        self.lookup = lookup
        self.rewrites = 0
        self.logger = logger.bind(component="link_resolver")

    def resolve(self, text: str) -> str:
        """Rewrite every internal link pattern in the text.

        Args:
            text: Raw article text

        Returns:
            Text with all internal link patterns replaced by site-relative URLs

        Raises:
            DanglingLinkError: If a referenced article does not exist
            LinkResolutionError: If a replacement URL itself contains an internal link
        """
        match = INTERNAL_LINK_PATTERN.search(text)
        while match is not None:
            matched = match.group(0)
            article_id = int(match.group("article_id"))

            target = self.lookup(article_id)
            if target is None:
                raise DanglingLinkError(article_id)

            url = target.url
            if INTERNAL_LINK_PATTERN.search(url):
                raise LinkResolutionError(
                    f"Replacement URL {url!r} for article {article_id} contains an internal link"
                )

            text = text.replace(matched, url)
            self.rewrites += 1
            self.logger.info("link_rewritten", target_id=article_id, url=url)

            match = INTERNAL_LINK_PATTERN.search(text)

        return text
