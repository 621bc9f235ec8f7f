"""RSS 2.0 feed storage: the feed file is the only persisted state."""
import logging
from datetime import datetime, timezone
from email.utils import format_datetime
from pathlib import Path
from typing import List, Optional, Set, Tuple, Union

from lxml import etree

from processor.models import ChannelMetadata, EventRecord, FeedStatistics
from storage.event_filter import EventFilter

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


class FeedError(Exception):
    """Raised when the persisted feed cannot be parsed."""

    def __init__(self, path: PathLike, cause: Exception):
        self.path = str(path)
        super().__init__(f"Unable to parse RSS feed {self.path}: {cause}")


class RssFeedManager:
    """Loads identities from and writes the incrementally updated RSS feed."""

    ENCLOSURE_TYPE = 'image/jpeg'

    def __init__(self, drop_events_older_than_days: int):
        """
        Initialize the feed manager.

        Args:
            drop_events_older_than_days: Age threshold for carried-forward items
        """
        self.event_filter = EventFilter(drop_events_older_than_days)

    @staticmethod
    def _secure_parser() -> etree.XMLParser:
        # No DTDs, entities or network access for a file we did not write by hand
        return etree.XMLParser(
            resolve_entities=False,
            no_network=True,
            load_dtd=False,
            remove_blank_text=True
        )

    def _parse_feed(self, feed_path: Path) -> etree._ElementTree:
        try:
            return etree.parse(str(feed_path), self._secure_parser())
        except etree.XMLSyntaxError as e:
            logger.error(f"Malformed RSS feed at {feed_path}: {e}")
            raise FeedError(feed_path, e) from e

    def load_identity_keys(self, feed_path: PathLike) -> Set[str]:
        """
        Load the GUIDs of every item in an existing feed.

        Args:
            feed_path: Path of the RSS file

        Returns:
            Set of GUIDs, empty if the file does not exist yet

        Raises:
            FeedError: If the file exists but is not well-formed XML
        """
        feed_path = Path(feed_path)
        if not feed_path.exists():
            logger.info(f"No existing RSS feed found at: {feed_path}")
            return set()

        tree = self._parse_feed(feed_path)
        guids = {guid.text for guid in tree.iter('guid') if guid.text}

        logger.info(f"Loaded {len(guids)} existing event GUIDs from feed")
        return guids

    def reconcile(
        self,
        feed_path: PathLike,
        new_events: List[EventRecord],
        channel_metadata: ChannelMetadata,
        now: Optional[datetime] = None
    ) -> FeedStatistics:
        """
        Merge new events with the existing feed and write the result.

        New events come first, sorted by ID descending, all stamped with the
        same publication date. Items of the existing feed follow unchanged,
        except those older than the drop threshold, which are removed.

        Args:
            feed_path: Path of the RSS file, read and then overwritten
            new_events: Events not yet in the feed
            channel_metadata: Channel title, link and description
            now: Reference time for timestamps and the age filter

        Returns:
            FeedStatistics for the written feed
        """
        feed_path = Path(feed_path)
        now = now or datetime.now(timezone.utc).astimezone()
        timestamp = format_datetime(now)

        logger.info(f"Generating RSS feed with {len(new_events)} new events")

        rss = etree.Element('rss', version='2.0')
        channel = etree.SubElement(rss, 'channel')
        self._add_element(channel, 'title', channel_metadata.title)
        self._add_element(channel, 'link', channel_metadata.link)
        self._add_element(channel, 'description', channel_metadata.description)
        self._add_element(channel, 'language', channel_metadata.language)
        self._add_element(channel, 'lastBuildDate', timestamp)

        # sorted() is stable, so discovery order breaks ID ties
        for event in sorted(new_events, key=lambda e: e.id, reverse=True):
            self._add_event_item(channel, event, timestamp)

        kept, dropped = self._import_existing_items(feed_path, channel, now)

        items = channel.findall('item')
        oldest_date = self.event_filter.find_last_pub_date(items)
        self.event_filter.log_feed_statistics(len(items), dropped, oldest_date, now)

        self._write_feed(rss, feed_path)

        return FeedStatistics(
            total=len(items),
            added=len(new_events),
            kept=kept,
            dropped=dropped,
            oldest_age_days=(
                self.event_filter.age_in_days(oldest_date, now)
                if oldest_date is not None else None
            )
        )

    def _import_existing_items(
        self,
        feed_path: Path,
        channel: etree._Element,
        now: datetime
    ) -> Tuple[int, int]:
        """
        Copy the items of the old feed into the new channel.

        Returns:
            Tuple of (kept count, dropped count)
        """
        if not feed_path.exists():
            return 0, 0

        old_items = list(self._parse_feed(feed_path).iter('item'))
        logger.info(f"Importing {len(old_items)} existing events from feed")

        kept = 0
        dropped = 0
        for item in old_items:
            if not self.event_filter.should_keep(item, now):
                dropped += 1
                continue

            self._strip_whitespace_text(item)
            channel.append(item)
            kept += 1

        return kept, dropped

    def _add_event_item(
        self,
        channel: etree._Element,
        event: EventRecord,
        timestamp: str
    ) -> None:
        item = etree.SubElement(channel, 'item')
        self._add_element(item, 'title', event.title)
        self._add_element(item, 'link', event.link)
        self._add_element(item, 'description', event.description)
        self._add_element(item, 'guid', event.identity_key)
        self._add_element(item, 'pubDate', timestamp)

        if event.image_url:
            etree.SubElement(
                item,
                'enclosure',
                url=event.image_url,
                type=self.ENCLOSURE_TYPE
            )

    @staticmethod
    def _add_element(parent: etree._Element, tag: str, text: str) -> None:
        element = etree.SubElement(parent, tag)
        element.text = text

    @staticmethod
    def _strip_whitespace_text(item: etree._Element) -> None:
        """Remove whitespace-only text so the item re-indents cleanly."""
        for element in item.iter():
            if element.text is not None and not element.text.strip():
                element.text = None
            if element.tail is not None and not element.tail.strip():
                element.tail = None

    def _write_feed(self, rss: etree._Element, feed_path: Path) -> None:
        etree.ElementTree(rss).write(
            str(feed_path),
            pretty_print=True,
            xml_declaration=True,
            encoding='UTF-8'
        )
        logger.info(f"RSS feed written to: {feed_path}")
