"""Resolves the number of listing pages from pagination controls."""
import logging
from typing import Optional, Pattern

from bs4 import BeautifulSoup

logger = logging.getLogger(__name__)


class PaginationResolver:
    """Reads the total page count from the "last page" navigation link."""

    def __init__(
        self,
        last_page_link_selector: str,
        num_pages_pattern: Pattern,
        default_num_pages: int
    ):
        """
        Initialize the resolver.

        Args:
            last_page_link_selector: CSS selector of the last page control
            num_pages_pattern: Regex whose first group captures the page number
            default_num_pages: Page count used when it cannot be determined
        """
        self.last_page_link_selector = last_page_link_selector
        self.num_pages_pattern = num_pages_pattern
        self.default_num_pages = default_num_pages

    def get_num_pages(self, document: BeautifulSoup) -> int:
        """
        Determine the number of listing pages.

        Args:
            document: Parsed first listing page

        Returns:
            Page count, or the default if it cannot be determined
        """
        href = self._last_page_href(document)
        if href is None:
            logger.debug(
                f"No last page link found, using default: {self.default_num_pages}"
            )
            return self.default_num_pages

        match = self.num_pages_pattern.search(href)
        if not match:
            logger.debug(f"No page parameter found in href: {href}")
            return self.default_num_pages

        try:
            num_pages = int(match.group(1))
        except (IndexError, TypeError, ValueError) as e:
            logger.error(f"Failed to parse page number from {href}: {e}")
            return self.default_num_pages

        logger.debug(f"Extracted {num_pages} pages from pagination")
        return num_pages

    def _last_page_href(self, document: BeautifulSoup) -> Optional[str]:
        control = document.select_one(self.last_page_link_selector)
        if control is None:
            return None

        first_child = control.find(True, recursive=False)
        if first_child is None:
            return None

        href = first_child.get('href')
        return href or None
