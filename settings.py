"""Scraper settings for the Visit Raleigh events directory."""
import logging
import os
import re
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional, Pattern

logger = logging.getLogger(__name__)


@dataclass
class ScraperSettings:
    """Site constants and environment-driven options for one harvest run."""

    base_url: str = "https://www.visitraleigh.com/events/"
    debug_mode: bool = False
    default_num_pages: int = 10
    days_into_future: int = 30
    drop_events_older_than_days: int = 30
    last_page_link_selector: str = "li.arrow.arrow-next.arrow-double"
    num_pages_pattern: Pattern = re.compile(r"(?:^|[?&])page=(\d+)")
    event_url_pattern: Pattern = re.compile(r"/event/[^/]+/\d+/?$")
    event_host_filter: str = "visitraleigh.com/event/"
    page_load_timeout: float = 10.0
    user_agent: str = (
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
        "AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/120.0.0.0 Safari/537.36"
    )
    window_size: str = "1920,1080"
    log_level: str = "INFO"

    channel_title: str = "Visit Raleigh Events"
    channel_description: str = "Events from Visit Raleigh"

    @classmethod
    def from_env(cls) -> "ScraperSettings":
        """
        Build settings from environment variables.

        Invalid numeric values are logged and replaced by the defaults.
        """
        defaults = cls()
        return cls(
            debug_mode=_env_bool('DEBUG_MODE', defaults.debug_mode),
            days_into_future=_env_int('DAYS_INTO_FUTURE', defaults.days_into_future),
            drop_events_older_than_days=_env_int(
                'DROP_EVENTS_OLDER_THAN_DAYS',
                defaults.drop_events_older_than_days
            ),
            page_load_timeout=float(_env_int(
                'PAGE_LOAD_TIMEOUT_SECONDS',
                int(defaults.page_load_timeout)
            )),
            log_level=os.environ.get('LOG_LEVEL', defaults.log_level)
        )

    @property
    def viewport(self) -> dict:
        """Window size as a Playwright viewport mapping."""
        width, height = self.window_size.split(',')
        return {'width': int(width), 'height': int(height)}

    def end_date(self, now: Optional[datetime] = None) -> str:
        """Last day of the listing date range, formatted MM/DD/YYYY."""
        now = now or datetime.now()
        return (now + timedelta(days=self.days_into_future)).strftime('%m/%d/%Y')

    def page_url(self, page: int, end_date: str) -> str:
        """URL of one listing page."""
        return f"{self.base_url}?page={page}&endDate={end_date}"


def _env_int(name: str, default: int) -> int:
    value = os.environ.get(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        logger.warning(f"Invalid {name} value: {value}, using default of {default}")
        return default


def _env_bool(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')
