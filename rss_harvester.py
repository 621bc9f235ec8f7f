"""Command line entry point for the Visit Raleigh events RSS harvester."""
import json
import logging
import time
from pathlib import Path
from typing import Optional

import typer

from processor.models import ChannelMetadata
from scraper.events_scraper import EventsScraper
from scraper.page_loader import PageLoader
from settings import ScraperSettings
from storage.rss_feed_manager import RssFeedManager

logger = logging.getLogger(__name__)

# Attributes every LogRecord carries; anything else came in through ``extra``
_RESERVED_RECORD_ATTRS = set(vars(logging.makeLogRecord({}))) | {'message', 'asctime'}


class JsonFormatter(logging.Formatter):
    """Custom JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_data = {
            'timestamp': self.formatTime(record),
            'level': record.levelname,
            'message': record.getMessage(),
            'logger': record.name
        }

        for key, value in vars(record).items():
            if key not in _RESERVED_RECORD_ATTRS:
                log_data[key] = value

        if record.exc_info:
            log_data['exception'] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


def setup_logging(log_level: str = 'INFO') -> None:
    """
    Configure logging with JSON formatter.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
    """
    root_logger = logging.getLogger()

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter())
    root_logger.addHandler(handler)

    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))


def run(
    rss_file: Path,
    settings: ScraperSettings,
    page_loader: Optional[PageLoader] = None
) -> int:
    """
    Harvest new events and update the RSS feed.

    Args:
        rss_file: Feed file to read and rewrite
        settings: Scraper settings
        page_loader: Page source, a headless browser loader by default

    Returns:
        Process exit status: 0 on success, 1 on failure
    """
    start_time = time.time()
    page_loader = page_loader or PageLoader.from_settings(settings)
    scraper = EventsScraper(settings, page_loader)
    feed_manager = RssFeedManager(settings.drop_events_older_than_days)

    logger.info(
        "Starting Raleigh events harvester",
        extra={
            'rss_file': str(rss_file),
            'days_into_future': settings.days_into_future,
            'drop_events_older_than_days': settings.drop_events_older_than_days
        }
    )

    try:
        logger.info("Phase 1: Loading existing feed")
        existing_keys = feed_manager.load_identity_keys(rss_file)

        logger.info(f"Phase 2: Scraping events from {settings.base_url}")
        new_events = scraper.scrape_events(existing_keys)

        logger.info("Phase 3: Generating RSS feed")
        stats = feed_manager.reconcile(
            rss_file,
            new_events,
            ChannelMetadata(
                title=settings.channel_title,
                link=settings.base_url,
                description=settings.channel_description
            )
        )
    except Exception as e:
        logger.error(
            f"Error generating RSS feed: {e}",
            extra={
                'error_type': type(e).__name__,
                'duration_seconds': round(time.time() - start_time, 2)
            },
            exc_info=True
        )
        return 1
    finally:
        page_loader.close()

    logger.info(
        f"Successfully generated RSS feed with {len(new_events)} new events",
        extra={
            'duration_seconds': round(time.time() - start_time, 2),
            'events_added': stats.added,
            'events_kept': stats.kept,
            'events_dropped': stats.dropped,
            'events_total': stats.total
        }
    )
    return 0


app = typer.Typer(
    name='rss-harvester',
    help='Harvest Visit Raleigh events into an RSS feed',
    add_completion=False,
)


@app.command()
def harvest(
    rss_file: Path = typer.Argument(
        ...,
        help='RSS feed file to update (created if missing)',
        dir_okay=False,
    ),
) -> None:
    """Scrape new events and merge them into RSS_FILE."""
    settings = ScraperSettings.from_env()
    setup_logging(settings.log_level)
    raise typer.Exit(code=run(rss_file, settings))


if __name__ == '__main__':
    app()
