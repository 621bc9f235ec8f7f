"""Discovers event links on listing pages."""
import logging
from typing import List, Pattern

from bs4 import BeautifulSoup
from bs4.element import Tag

from processor.html_utils import absolute_url

logger = logging.getLogger(__name__)


class LinkDiscoverer:
    """Finds unique, well-formed event links on a single listing page."""

    LINK_SELECTOR = "a[href*='/event/']"

    def __init__(self, event_url_pattern: Pattern, host_filter: str):
        """
        Initialize the discoverer.

        Args:
            event_url_pattern: Regex a valid event URL must contain a match of
            host_filter: Substring every event URL must contain
                (e.g. "visitraleigh.com/event/")
        """
        self.event_url_pattern = event_url_pattern
        self.host_filter = host_filter

    def discover(self, document: BeautifulSoup) -> List[Tag]:
        """
        Discover event links on a page, in document order.

        Deduplication is per page only.

        Args:
            document: Parsed listing page

        Returns:
            Anchor elements with distinct, valid event URLs
        """
        candidates = document.select(self.LINK_SELECTOR)
        logger.debug(f"Found {len(candidates)} links containing '/event/'")

        event_links = []
        seen_urls = set()

        for link in candidates:
            href = absolute_url(link, 'href')
            if self._should_keep(href, seen_urls):
                seen_urls.add(href)
                event_links.append(link)
                logger.debug(f"Discovered event link: {href}")

        logger.info(f"Discovered {len(event_links)} unique event links on page")
        return event_links

    def _should_keep(self, href: str, seen_urls: set) -> bool:
        if href in seen_urls:
            return False

        if self.host_filter not in href:
            logger.debug(f"Skipping link (wrong host): {href}")
            return False

        if not self.event_url_pattern.search(href):
            logger.debug(f"Skipping link (pattern mismatch): {href}")
            return False

        return True
