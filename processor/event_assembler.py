"""Assembles event records from listing page links."""
import logging
from typing import Optional

from bs4.element import Tag

from processor.card_locator import CardLocator
from processor.field_extractors import (
    DateExtractor,
    DescriptionExtractor,
    ImageExtractor,
    TitleExtractor,
)
from processor.html_utils import absolute_url
from processor.models import EventRecord

logger = logging.getLogger(__name__)


class EventAssembler:
    """Builds an EventRecord from an event link and its surrounding card."""

    INVALID_ID = -1

    def __init__(self, debug_mode: bool = False):
        """
        Initialize the assembler with the default card locator and extractors.

        Args:
            debug_mode: Log every parsed link and title
        """
        self.debug_mode = debug_mode
        self.card_locator = CardLocator()
        self.title_extractor = TitleExtractor()
        self.date_extractor = DateExtractor()
        self.description_extractor = DescriptionExtractor()
        self.image_extractor = ImageExtractor()

    def assemble(self, link: Tag) -> Optional[EventRecord]:
        """
        Parse an event from its link element.

        Any failure while assembling skips the event; a partial record is
        never returned.

        Args:
            link: Anchor element pointing at the event page

        Returns:
            EventRecord, or None if the card has no usable title or parsing fails
        """
        try:
            event_url = absolute_url(link, 'href')
            self._log_debug(f"Parsing link: {event_url}")

            event_id = self.extract_event_id(event_url)
            card = self.card_locator.locate(link)

            title = self.title_extractor.extract(card)
            if title is None:
                logger.debug(f"Skipping event with no valid title: {event_url}")
                return None
            self._log_debug(f"Title: {title}")

            date_text = self.date_extractor.extract(card)
            description = self.description_extractor.extract(card)
            image_url = self.image_extractor.extract(card)

            full_title = self.build_full_title(title, date_text)

            event = EventRecord(
                id=event_id,
                identity_key=event_url,
                title=full_title,
                description=description,
                link=event_url,
                image_url=image_url,
                raw_date_text=date_text
            )
            logger.debug(f"Successfully parsed event: {full_title}")
            return event

        except Exception as e:
            self._log_debug(f"Error parsing link: {e}")
            return None

    def extract_event_id(self, event_url: str) -> int:
        """
        Extract the numeric event ID from the last path segment of a URL.

        Example: ``/event/music-festival/12345/`` gives ``12345``.

        Returns:
            Event ID, or -1 if the last segment is not an integer
        """
        segments = [segment for segment in event_url.split('/') if segment]
        last_segment = segments[-1]
        try:
            return int(last_segment)
        except ValueError:
            logger.error(f"Unable to parse event ID as int: {last_segment}")
            return self.INVALID_ID

    @staticmethod
    def build_full_title(title: str, date_text: str) -> str:
        """Append the date in parentheses when one was found."""
        if date_text:
            return f"{title} ({date_text})"
        return title

    def _log_debug(self, message: str) -> None:
        if self.debug_mode:
            logger.debug(message)
