"""Data models for event harvesting."""
from dataclasses import dataclass, field
from typing import List, Optional, Set


@dataclass(frozen=True)
class EventRecord:
    """Event assembled from a listing page card."""
    id: int
    identity_key: str
    title: str
    description: str
    link: str
    image_url: str
    raw_date_text: str


@dataclass
class ScrapeResult:
    """Accumulated state of a single scrape run."""
    identity_keys: Set[str]
    new_events: List[EventRecord] = field(default_factory=list)
    duplicates: int = 0
    pages_scraped: int = 0

    def offer(self, event: EventRecord) -> bool:
        """
        Add an event unless its identity key is already known.

        Returns:
            True if the event was new, False if it was a duplicate
        """
        if event.identity_key in self.identity_keys:
            self.duplicates += 1
            return False
        self.identity_keys.add(event.identity_key)
        self.new_events.append(event)
        return True


@dataclass
class FeedStatistics:
    """Result of a feed reconciliation."""
    total: int
    added: int
    kept: int
    dropped: int
    oldest_age_days: Optional[int]


@dataclass
class ChannelMetadata:
    """RSS channel description."""
    title: str
    link: str
    description: str
    language: str = 'en-us'
