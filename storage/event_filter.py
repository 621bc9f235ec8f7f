"""Age filtering and statistics for RSS feed items."""
import logging
from datetime import datetime, timedelta, timezone
from email.utils import parsedate_to_datetime
from typing import Optional, Sequence

from lxml import etree

logger = logging.getLogger(__name__)


class EventFilter:
    """Drops feed items published more than a given number of days ago."""

    def __init__(self, drop_events_older_than_days: int):
        """
        Initialize the filter.

        Args:
            drop_events_older_than_days: Items published this many days ago
                or earlier are dropped
        """
        self.drop_events_older_than_days = drop_events_older_than_days

    def cutoff(self, now: datetime) -> datetime:
        return now - timedelta(days=self.drop_events_older_than_days)

    def should_keep(self, item: etree._Element, now: Optional[datetime] = None) -> bool:
        """
        Decide whether a feed item is recent enough to keep.

        Items without a parseable pubDate are always kept. An item published
        exactly at the cutoff is dropped.

        Args:
            item: RSS ``<item>`` element
            now: Reference time, defaults to the current time

        Returns:
            True to keep the item, False to drop it
        """
        pub_date = self.extract_pub_date(item)
        if pub_date is None:
            return True

        now = now or datetime.now(timezone.utc)
        return pub_date > self.cutoff(now)

    def extract_pub_date(self, item: etree._Element) -> Optional[datetime]:
        """
        Parse the RFC-1123 pubDate of an item.

        Returns:
            Timezone-aware publication date, or None if missing or invalid
        """
        pub_date_element = item.find('pubDate')
        if pub_date_element is None or not pub_date_element.text:
            return None

        text = pub_date_element.text.strip()
        try:
            pub_date = parsedate_to_datetime(text)
        except (TypeError, ValueError) as e:
            logger.debug(f"Failed to parse pubDate '{text}': {e}")
            return None

        if pub_date.tzinfo is None:
            # "-0000" means UTC with no local zone information
            pub_date = pub_date.replace(tzinfo=timezone.utc)
        return pub_date

    def find_last_pub_date(self, items: Sequence[etree._Element]) -> Optional[datetime]:
        """Publication date of the last item, which is the oldest one."""
        if not items:
            return None
        return self.extract_pub_date(items[-1])

    def age_in_days(self, pub_date: datetime, now: datetime) -> int:
        return (now - pub_date).days

    def log_feed_statistics(
        self,
        total_events: int,
        dropped_events: int,
        oldest_date: Optional[datetime],
        now: datetime
    ) -> None:
        """Log item totals, dropped count and the age of the oldest item."""
        if total_events == 0:
            logger.info("RSS feed contains 0 events")
        elif oldest_date is not None:
            logger.info(
                f"RSS feed contains {total_events} total events, "
                f"oldest entry is {self.age_in_days(oldest_date, now)} days old"
            )
        else:
            logger.info(f"RSS feed contains {total_events} total events")

        if dropped_events > 0:
            logger.info(
                f"Dropped {dropped_events} old events "
                f"(older than {self.drop_events_older_than_days} days)"
            )
