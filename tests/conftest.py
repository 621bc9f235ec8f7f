"""Shared fixtures for harvester tests."""
import pytest

from processor.html_utils import parse_page
from settings import ScraperSettings

LISTING_URL = "https://www.visitraleigh.com/events/?page=1&endDate=11/18/2026"


@pytest.fixture
def settings():
    """Default site settings."""
    return ScraperSettings()


@pytest.fixture
def make_document():
    """Parse markup as if it had been loaded from the listing URL."""
    def _make(html, url=LISTING_URL):
        return parse_page(html, url)
    return _make


@pytest.fixture
def make_card(make_document):
    """Parse markup and return its first element matching a selector."""
    def _make(html, selector='.card'):
        return make_document(html).select_one(selector)
    return _make
