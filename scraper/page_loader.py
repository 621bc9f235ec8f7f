"""Headless browser page loading for the JavaScript-rendered listings."""
import logging
from pathlib import Path
from typing import Optional

from bs4 import BeautifulSoup
from playwright.sync_api import Browser, Playwright, sync_playwright

from processor.html_utils import parse_page
from settings import ScraperSettings

logger = logging.getLogger(__name__)


class BrowserManager:
    """Owns the lifecycle of a headless Chromium instance."""

    LAUNCH_ARGS = [
        '--no-sandbox',
        '--disable-dev-shm-usage',
        '--disable-gpu',
    ]

    def __init__(self, user_agent: str, viewport: dict):
        self.user_agent = user_agent
        self.viewport = viewport
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._context = None

    def new_page(self):
        """Open a page in the shared browser context, launching it if needed."""
        if self._context is None:
            logger.info("Launching headless Chromium")
            self._playwright = sync_playwright().start()
            try:
                self._browser = self._playwright.chromium.launch(
                    headless=True,
                    args=self.LAUNCH_ARGS
                )
            except Exception:
                self._playwright.stop()
                self._playwright = None
                raise
            self._context = self._browser.new_context(
                user_agent=self.user_agent,
                viewport=self.viewport
            )
            logger.info("Headless Chromium launched")
        return self._context.new_page()

    def quit(self) -> None:
        """Close the browser and stop Playwright. Safe to call repeatedly."""
        if self._browser is not None:
            logger.info("Shutting down headless Chromium")
            self._browser.close()
            self._browser = None
            self._context = None
        if self._playwright is not None:
            self._playwright.stop()
            self._playwright = None

    def __enter__(self) -> "BrowserManager":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.quit()


class PageLoader:
    """Loads a listing page in the browser and parses the rendered markup."""

    DEBUG_PAGE_PATH = Path('debug-page.html')

    def __init__(
        self,
        browser: BrowserManager,
        ready_selector: str,
        timeout: float,
        debug_mode: bool = False
    ):
        """
        Initialize the page loader.

        Args:
            browser: Browser used for navigation
            ready_selector: CSS selector whose presence means the page rendered
            timeout: Maximum wait for the ready selector, in seconds
            debug_mode: Save the first page's markup to debug-page.html
        """
        self.browser = browser
        self.ready_selector = ready_selector
        self.timeout = timeout
        self.debug_mode = debug_mode
        self._page = None

    @classmethod
    def from_settings(cls, settings: ScraperSettings) -> "PageLoader":
        browser = BrowserManager(settings.user_agent, settings.viewport)
        return cls(
            browser,
            ready_selector=settings.last_page_link_selector,
            timeout=settings.page_load_timeout,
            debug_mode=settings.debug_mode
        )

    def fetch_and_parse(self, url: str, page_number: int) -> BeautifulSoup:
        """
        Navigate to a URL, wait until it renders and parse the result.

        Args:
            url: Listing page URL
            page_number: Page number, used for debug output

        Returns:
            Parsed document

        Raises:
            playwright.sync_api.Error: If navigation or the wait fails
        """
        if self._page is None:
            self._page = self.browser.new_page()

        timeout_ms = self.timeout * 1000
        logger.debug(f"Loading page: {url}")
        self._page.goto(url, timeout=timeout_ms)
        self._page.wait_for_selector(
            self.ready_selector,
            state='attached',
            timeout=timeout_ms
        )

        page_source = self._page.content()
        self._save_debug_page(page_source, page_number)
        return parse_page(page_source, url)

    def close(self) -> None:
        self._page = None
        self.browser.quit()

    def _save_debug_page(self, page_source: str, page_number: int) -> None:
        if not self.debug_mode or page_number != 1:
            return
        self.DEBUG_PAGE_PATH.write_text(page_source, encoding='utf-8')
        logger.debug(
            f"Page source saved to {self.DEBUG_PAGE_PATH} "
            f"({len(page_source)} characters)"
        )
