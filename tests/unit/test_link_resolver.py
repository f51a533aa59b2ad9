"""Unit tests for internal link rewriting."""

import pytest

from src.migration.link_resolver import INTERNAL_LINK_PATTERN, LinkResolver
from src.models.article import LinkTarget
from src.utils.exceptions import DanglingLinkError, LinkResolutionError


def link(article_id: int, category_id: int = 2, item_id: int = 101) -> str:
    """Build a legacy internal link as it appears in stored HTML."""
    return (
        f"index.php?option=com_content&amp;view=article&amp;id={article_id}"
        f"&amp;catid={category_id}&amp;Itemid={item_id}"
    )


class RecordingLookup:
    """Link lookup that records every article id it is asked for."""

    def __init__(self, targets: dict[int, LinkTarget]) -> None:
        self.targets = targets
        self.calls: list[int] = []

    def __call__(self, article_id: int) -> LinkTarget | None:
        self.calls.append(article_id)
        return self.targets.get(article_id)


@pytest.fixture
def lookup() -> RecordingLookup:
    """Lookup knowing articles 7 and 9."""
    return RecordingLookup(
        {
            7: LinkTarget(article_id=7, category="blog", alias="b-article"),
            9: LinkTarget(article_id=9, category="news/world", alias="ninth"),
        }
    )


class TestInternalLinkPattern:
    """Test the recognised link syntax."""

    def test_matches_escaped_ampersands(self) -> None:
        """Test that the HTML-escaped form is matched with all three ids."""
        match = INTERNAL_LINK_PATTERN.search(f'<a href="{link(7, 3, 55)}">x</a>')

        assert match is not None
        assert match.group("article_id") == "7"
        assert match.group("category_id") == "3"
        assert match.group("item_id") == "55"

    def test_separators_accept_any_character(self) -> None:
        """Test that single-character separator variants are accepted."""
        text = "index.php/option=com_content;amp;view=article;amp;id=7;amp;catid=2;amp;Itemid=1"

        assert INTERNAL_LINK_PATTERN.search(text) is not None

    def test_item_id_is_consumed(self) -> None:
        """Test that the whole pattern including Itemid is part of the match."""
        text = f"{link(7, 2, 12345)}#anchor"

        match = INTERNAL_LINK_PATTERN.search(text)

        assert match is not None
        assert match.group(0).endswith("Itemid=12345")

    def test_missing_ids_do_not_match(self) -> None:
        """Test that a pattern without numeric ids is left alone."""
        text = "index.php?option=com_content&amp;view=article&amp;id=&amp;catid=2&amp;Itemid=1"

        assert INTERNAL_LINK_PATTERN.search(text) is None


class TestLinkResolver:
    """Test LinkResolver.resolve."""

    def test_rewrites_single_link(self, lookup: RecordingLookup) -> None:
        """Test that a link is replaced by the target's path URL."""
        resolver = LinkResolver(lookup)

        result = resolver.resolve(f'<a href="{link(7)}">B</a>')

        assert result == '<a href="/blog/7-b-article">B</a>'
        assert lookup.calls == [7]
        assert resolver.rewrites == 1

    def test_no_links_performs_no_lookups(self, lookup: RecordingLookup) -> None:
        """Test that text without patterns is returned unchanged without lookups."""
        resolver = LinkResolver(lookup)
        text = "<p>Nothing to see here</p>"

        assert resolver.resolve(text) == text
        assert lookup.calls == []

    def test_resolving_twice_is_a_no_op(self, lookup: RecordingLookup) -> None:
        """Test that an already-resolved body is returned unchanged."""
        resolver = LinkResolver(lookup)
        resolved = resolver.resolve(f"{link(7)} and {link(9)}")
        lookup.calls.clear()

        assert resolver.resolve(resolved) == resolved
        assert lookup.calls == []

    def test_duplicate_occurrences_replaced_in_one_step(self, lookup: RecordingLookup) -> None:
        """Test that repeated identical links need only one lookup."""
        resolver = LinkResolver(lookup)

        result = resolver.resolve(f"first {link(7)} second {link(7)} third {link(7)}")

        assert result == "first /blog/7-b-article second /blog/7-b-article third /blog/7-b-article"
        assert lookup.calls == [7]

    def test_distinct_links_take_one_lookup_each(self, lookup: RecordingLookup) -> None:
        """Test that N distinct patterns are resolved in exactly N lookups."""
        resolver = LinkResolver(lookup)
        text = f"{link(7)} {link(9)} {link(7, item_id=5)} {link(9)}"

        result = resolver.resolve(text)

        assert INTERNAL_LINK_PATTERN.search(result) is None
        assert lookup.calls == [7, 9, 7]
        assert result == "/blog/7-b-article /news/world/9-ninth /blog/7-b-article /news/world/9-ninth"

    def test_dangling_reference_raises(self, lookup: RecordingLookup) -> None:
        """Test that a link to a missing article fails loudly."""
        resolver = LinkResolver(lookup)

        with pytest.raises(DanglingLinkError) as exc_info:
            resolver.resolve(f"{link(7)} {link(404)}")

        assert exc_info.value.article_id == 404
        assert isinstance(exc_info.value, LinkResolutionError)

    def test_replacement_that_rematches_raises(self) -> None:
        """Test that a URL containing the matched text cannot loop forever."""
        matched = link(3)
        resolver = LinkResolver(
            lambda article_id: LinkTarget(article_id=article_id, category=matched, alias="x")
        )

        with pytest.raises(LinkResolutionError):
            resolver.resolve(matched)

    def test_targets_linking_to_each_other_raise(self) -> None:
        """Test that URLs which introduce other link patterns are rejected."""
        targets = {
            3: LinkTarget(article_id=3, category=f"c{link(4)}", alias="three"),
            4: LinkTarget(article_id=4, category=f"c{link(3)}", alias="four"),
        }
        lookup = RecordingLookup(targets)
        resolver = LinkResolver(lookup)

        with pytest.raises(LinkResolutionError):
            resolver.resolve(link(3))

        assert lookup.calls == [3]
        assert resolver.rewrites == 0
