"""Scraper for the Visit Raleigh paginated events listing."""
import logging
from datetime import datetime
from typing import List, Optional, Set

from bs4 import BeautifulSoup

from processor.event_assembler import EventAssembler
from processor.models import EventRecord, ScrapeResult
from scraper.link_discoverer import LinkDiscoverer
from scraper.pagination import PaginationResolver
from settings import ScraperSettings

logger = logging.getLogger(__name__)


class EventsScraper:
    """
    Walks every listing page and collects events not seen before.

    The page source is any object with a
    ``fetch_and_parse(url, page_number) -> BeautifulSoup`` method;
    in production that is ``scraper.page_loader.PageLoader``.
    """

    def __init__(
        self,
        settings: ScraperSettings,
        page_source,
        assembler: Optional[EventAssembler] = None
    ):
        self.settings = settings
        self.page_source = page_source
        self.assembler = assembler or EventAssembler(debug_mode=settings.debug_mode)
        self.pagination = PaginationResolver(
            settings.last_page_link_selector,
            settings.num_pages_pattern,
            settings.default_num_pages
        )
        self.link_discoverer = LinkDiscoverer(
            settings.event_url_pattern,
            settings.event_host_filter
        )

    def scrape_events(
        self,
        existing_keys: Set[str],
        now: Optional[datetime] = None
    ) -> List[EventRecord]:
        """
        Scrape new events from every listing page.

        Args:
            existing_keys: Identity keys already in the feed; grown in place
                as new events are found
            now: Reference time for the listing date range

        Returns:
            Newly discovered events in discovery order

        Raises:
            Exception: Any page load failure, which aborts the run
        """
        logger.info(f"Starting event scraping from {self.settings.base_url}")
        result = ScrapeResult(identity_keys=existing_keys)

        try:
            self.scrape_all_pages(result, now)
        except Exception as e:
            logger.error(f"Error during scraping: {e}", exc_info=True)
            raise

        logger.info(
            f"Successfully scraped {len(result.new_events)} new events "
            f"across {result.pages_scraped} pages "
            f"({result.duplicates} already known)"
        )
        return result.new_events

    def scrape_all_pages(
        self,
        result: ScrapeResult,
        now: Optional[datetime] = None
    ) -> ScrapeResult:
        """
        Load listing pages until the page count read from page 1 is exhausted.

        Args:
            result: Accumulator receiving new events
            now: Reference time for the listing date range

        Returns:
            The same accumulator
        """
        end_date = self.settings.end_date(now)
        page = 1
        num_pages = 1

        while page <= num_pages:
            url = self.settings.page_url(page, end_date)
            logger.info(f"Scraping page {page}: {url}")

            document = self.page_source.fetch_and_parse(url, page)

            if page == 1:
                num_pages = self.pagination.get_num_pages(document)
                logger.info(f"Found {num_pages} pages to scrape")

            self.scrape_page(document, result)
            result.pages_scraped += 1
            logger.info(
                f"Scraped {len(result.new_events)} new events so far "
                f"(page {page} of {num_pages})"
            )
            page += 1

        return result

    def scrape_page(self, document: BeautifulSoup, result: ScrapeResult) -> None:
        """Assemble the events linked from one page into the accumulator."""
        for link in self.link_discoverer.discover(document):
            event = self.assembler.assemble(link)
            if event is None:
                continue

            if result.offer(event):
                logger.info(f"Found new event: {event.title}")
            else:
                logger.info(f"Found existing event: {event.title}")
