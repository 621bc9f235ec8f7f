"""Unit tests for EventsScraper."""
from datetime import datetime
from unittest.mock import Mock

import pytest

from processor.html_utils import parse_page
from processor.models import ScrapeResult
from scraper.events_scraper import EventsScraper


def listing_page(cards, last_page=None):
    """Build listing page markup from (slug, id, title) tuples."""
    pager = ''
    if last_page is not None:
        pager = (
            '<ul class="pager"><li class="arrow arrow-next arrow-double">'
            f'<a href="?page={last_page}&amp;endDate=11/18/2026">&raquo;</a></li></ul>'
        )
    body = ''.join(
        f'<div class="card"><a href="/event/{slug}/{event_id}/">{title}</a></div>'
        for slug, event_id, title in cards
    )
    return f'<html><body><div class="results">{body}</div>{pager}</body></html>'


class FakePageSource:
    """Serves canned listing pages by page number."""

    def __init__(self, pages):
        self.pages = pages
        self.requested = []

    def fetch_and_parse(self, url, page_number):
        self.requested.append(url)
        return parse_page(self.pages[page_number], url)


NOW = datetime(2026, 10, 19, 12, 0, 0)


class TestEventsScraper:
    """Test cases for EventsScraper class."""

    def test_scrapes_every_page(self, settings):
        """Test that the page count from page 1 bounds the loop."""
        source = FakePageSource({
            1: listing_page([('jazz-night', 101, 'Jazz Night')], last_page=3),
            2: listing_page([('art-walk', 202, 'Art Walk')], last_page=9),
            3: listing_page([('parade', 303, 'Holiday Parade')]),
        })
        scraper = EventsScraper(settings, source)

        events = scraper.scrape_events(set(), now=NOW)

        assert [event.id for event in events] == [101, 202, 303]
        assert source.requested == [
            "https://www.visitraleigh.com/events/?page=1&endDate=11/18/2026",
            "https://www.visitraleigh.com/events/?page=2&endDate=11/18/2026",
            "https://www.visitraleigh.com/events/?page=3&endDate=11/18/2026",
        ]

    def test_missing_pagination_uses_default_page_count(self, settings):
        """Test that the default page count applies without a pager."""
        pages = {n: listing_page([('e', n, f'Event {n}')]) for n in range(1, 11)}
        source = FakePageSource(pages)

        events = EventsScraper(settings, source).scrape_events(set(), now=NOW)

        assert len(source.requested) == settings.default_num_pages
        assert len(events) == 10

    def test_skips_known_events(self, settings):
        """Test that identity keys from the existing feed are not re-added."""
        source = FakePageSource({
            1: listing_page(
                [('jazz-night', 101, 'Jazz Night'), ('art-walk', 202, 'Art Walk')],
                last_page=1
            ),
        })
        existing = {"https://www.visitraleigh.com/event/jazz-night/101/"}

        events = EventsScraper(settings, source).scrape_events(existing, now=NOW)

        assert [event.id for event in events] == [202]
        assert "https://www.visitraleigh.com/event/art-walk/202/" in existing

    def test_same_event_on_two_pages_is_added_once(self, settings):
        """Test cross-page deduplication through the identity set."""
        source = FakePageSource({
            1: listing_page([('jazz-night', 101, 'Jazz Night')], last_page=2),
            2: listing_page([('jazz-night', 101, 'Jazz Night Again')]),
        })

        events = EventsScraper(settings, source).scrape_events(set(), now=NOW)

        assert len(events) == 1
        assert events[0].title == "Jazz Night"

    def test_untitled_cards_are_skipped(self, settings):
        """Test that a card without a title does not stop the page."""
        source = FakePageSource({
            1: listing_page(
                [('x', 1, ''), ('art-walk', 202, 'Art Walk')],
                last_page=1
            ),
        })

        events = EventsScraper(settings, source).scrape_events(set(), now=NOW)

        assert [event.id for event in events] == [202]

    def test_page_load_failure_aborts_run(self, settings):
        """Test that a failing page propagates instead of being skipped."""
        source = Mock()
        source.fetch_and_parse.side_effect = TimeoutError("page did not render")

        with pytest.raises(TimeoutError):
            EventsScraper(settings, source).scrape_events(set(), now=NOW)

    def test_scrape_all_pages_reports_progress(self, settings):
        """Test the accumulator counters after a run."""
        source = FakePageSource({
            1: listing_page([('a', 1, 'Event A')], last_page=2),
            2: listing_page([('a', 1, 'Event A'), ('b', 2, 'Event B')]),
        })
        result = ScrapeResult(identity_keys=set())

        EventsScraper(settings, source).scrape_all_pages(result, now=NOW)

        assert result.pages_scraped == 2
        assert result.duplicates == 1
        assert [event.id for event in result.new_events] == [1, 2]
