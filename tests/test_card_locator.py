"""Unit tests for CardLocator."""
from processor.card_locator import CardLocator


class TestCardLocator:
    """Test cases for CardLocator class."""

    def test_returns_innermost_matching_ancestor(self, make_document):
        """Test that ascent stops at the first container, not the outermost."""
        document = make_document("""
            <div class="event-listing">
                <div class="card" id="inner">
                    <div class="body"><a href="/event/a/1/">A</a></div>
                </div>
            </div>
        """)
        link = document.select_one('a')

        card = CardLocator().locate(link)

        assert card['id'] == 'inner'

    def test_matches_class_case_insensitively(self, make_document):
        """Test that class markers are matched regardless of case."""
        document = make_document(
            '<section class="SearchResult"><span><a href="/event/a/1/">A</a></span></section>'
        )

        card = CardLocator().locate(document.select_one('a'))

        assert card.name == 'section'

    def test_matches_article_tag(self, make_document):
        """Test that an article element is a container without any class."""
        document = make_document(
            '<article><div><p><a href="/event/a/1/">A</a></p></div></article>'
        )

        card = CardLocator().locate(document.select_one('a'))

        assert card.name == 'article'

    def test_depth_limit_returns_deepest_element(self, make_document):
        """Test graceful degradation when no container is within reach."""
        html = '<a href="/event/a/1/">A</a>'
        for level in range(12):
            html = f'<div id="d{level}">{html}</div>'
        document = make_document(f'<div class="card">{html}</div>')

        card = CardLocator(max_depth=10).locate(document.select_one('a'))

        # d0 is the direct parent of the link; ten levels up is d9
        assert card['id'] == 'd9'

    def test_reaching_root_returns_last_element(self, make_document):
        """Test that running out of parents does not fail."""
        document = make_document('<a href="/event/a/1/">A</a>')
        link = document.select_one('a')

        card = CardLocator(max_depth=50).locate(link)

        assert card is not None
        assert card.select_one('a') is link

    def test_is_card_container(self, make_document):
        """Test the container predicate directly."""
        document = make_document("""
            <div class="grid-item" id="a"></div>
            <div class="wrapper" id="b"></div>
            <li class="listing-row" id="c"></li>
            <div id="d"></div>
        """)
        locator = CardLocator()

        assert locator.is_card_container(document.select_one('#a'))
        assert not locator.is_card_container(document.select_one('#b'))
        assert locator.is_card_container(document.select_one('#c'))
        assert not locator.is_card_container(document.select_one('#d'))
