"""Field extractors for event cards.

Each extractor runs an ordered list of strategies over a card element and
stops at the first one that yields a usable value. The listing markup is
not under our control, so every strategy tolerates missing elements.
"""
import logging
from typing import Callable, List, Optional

from bs4.element import Tag

from processor.html_utils import absolute_url, clean_text, element_text

logger = logging.getLogger(__name__)

Strategy = Callable[[Tag], Optional[str]]

EVENT_LINK_SELECTOR = "a[href*='/event/']"


class TitleExtractor:
    """Extracts event titles using fallback strategies."""

    MIN_TITLE_LENGTH = 3

    def __init__(self):
        self.strategies: List[Strategy] = [
            self._from_headings,
            self._from_title_class,
            self._from_event_links,
            self._from_image_alt,
            self._from_aria_label,
        ]

    def extract(self, card: Tag) -> Optional[str]:
        """
        Extract the title from an event card.

        Args:
            card: Event card container element

        Returns:
            Title text, or None if no strategy produced a valid title
        """
        for strategy in self.strategies:
            title = strategy(card)
            if title is not None and len(title) >= self.MIN_TITLE_LENGTH:
                logger.debug(f"Extracted title via {strategy.__name__}: {title}")
                return title

        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                f"Could not extract title from event card: {str(card)[:300]}"
            )
        return None

    def _from_headings(self, card: Tag) -> Optional[str]:
        heading = card.select_one('h1, h2, h3, h4, h5, h6')
        return element_text(heading) if heading is not None else None

    def _from_title_class(self, card: Tag) -> Optional[str]:
        element = card.select_one("[class*='title' i], [class*='name' i]")
        return element_text(element) if element is not None else None

    def _from_event_links(self, card: Tag) -> Optional[str]:
        # Icon-only links have no text; keep looking past them
        for link in card.select(EVENT_LINK_SELECTOR):
            text = element_text(link)
            if len(text) > self.MIN_TITLE_LENGTH:
                return text
        return None

    def _from_image_alt(self, card: Tag) -> Optional[str]:
        image = card.select_one('img[alt]')
        if image is None:
            return None
        alt = clean_text(image['alt']).strip()
        return alt if len(alt) > self.MIN_TITLE_LENGTH else None

    def _from_aria_label(self, card: Tag) -> Optional[str]:
        for link in card.select('a[aria-label]'):
            label = clean_text(link['aria-label']).strip()
            if len(label) > self.MIN_TITLE_LENGTH:
                return label
        return None


class DateExtractor:
    """Extracts the human-readable date text of an event."""

    SELECTOR = "time, [class*='date' i]"

    def extract(self, card: Tag) -> str:
        """Return the trimmed date text, or empty string if none is shown."""
        element = card.select_one(self.SELECTOR)
        if element is None:
            logger.debug("No date found in event card")
            return ''
        date_text = element_text(element)
        logger.debug(f"Extracted date: {date_text}")
        return date_text


class DescriptionExtractor:
    """
    Extracts event descriptions.

    The structured ``block-meta`` section is preferred. Generic description
    elements are only consulted when that section yields nothing at all.
    """

    BLOCK_META_SELECTOR = "div.block-meta, [class*='block-meta']"
    LINE_BREAK = '<br/>'

    # (selector, followed by a space)
    META_FIELDS = [
        ("[class*='dateInfo'], [class*='date-info']", True),
        ("[class*='times'], time", True),
        ("[class*='location']", True),
        ("[class*='region']", False),
    ]

    FALLBACK_SELECTOR = "p, [class*='description'], [class*='excerpt']"

    def __init__(self):
        self.strategies: List[Strategy] = [
            self._from_block_meta,
            self._from_fallback,
        ]

    def extract(self, card: Tag) -> str:
        """
        Extract the description from an event card.

        Args:
            card: Event card container element

        Returns:
            Description text, or empty string if not found
        """
        for strategy in self.strategies:
            description = strategy(card)
            if description:
                logger.debug(f"Extracted description ({len(description)} chars)")
                return description

        logger.debug("No description found in event card")
        return ''

    def _from_block_meta(self, card: Tag) -> Optional[str]:
        block_meta = card.select_one(self.BLOCK_META_SELECTOR)
        if block_meta is None:
            return None

        parts = []
        for selector, trailing_space in self.META_FIELDS:
            element = block_meta.select_one(selector)
            if element is None:
                continue
            text = element_text(element)
            if not text:
                continue
            parts.append(self.LINE_BREAK + text)
            if trailing_space:
                parts.append(' ')

        return ''.join(parts).strip()

    def _from_fallback(self, card: Tag) -> Optional[str]:
        element = card.select_one(self.FALLBACK_SELECTOR)
        return element_text(element) if element is not None else None


class ImageExtractor:
    """Extracts the event image URL, skipping icons and logos."""

    MIN_IMAGE_URL_LENGTH = 20
    REJECTED_MARKERS = ('icon', 'logo')

    def extract(self, card: Tag) -> str:
        """
        Extract the absolute URL of the first image in the card.

        Only the first image is considered. URLs containing ``icon`` or
        ``logo`` (case-sensitive) or no longer than 20 characters are
        rejected.

        Returns:
            Image URL, or empty string if missing or rejected
        """
        image = card.select_one('img[src]')
        if image is None:
            logger.debug("No image found in event card")
            return ''

        src = absolute_url(image, 'src')
        if any(marker in src for marker in self.REJECTED_MARKERS):
            logger.debug(f"Filtered out image URL (icon/logo): {src}")
            return ''
        if len(src) <= self.MIN_IMAGE_URL_LENGTH:
            logger.debug(f"Filtered out image URL (too short): {src}")
            return ''

        logger.debug(f"Extracted image URL: {src}")
        return src
