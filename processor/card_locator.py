"""Locates the card element that holds an event's displayed details."""
import logging

from bs4.element import Tag

from processor.html_utils import class_name

logger = logging.getLogger(__name__)


class CardLocator:
    """Walks up from an event link to the smallest enclosing event card."""

    CONTAINER_CLASS_MARKERS = ('event', 'card', 'result', 'listing', 'item')
    CONTAINER_TAG = 'article'
    MAX_DEPTH = 10

    def __init__(self, max_depth: int = MAX_DEPTH):
        self.max_depth = max_depth

    def locate(self, link: Tag) -> Tag:
        """
        Find the event card container for a link element.

        The first ancestor that looks like a container wins. When none is
        found within ``max_depth`` levels, the last element reached is used.

        Args:
            link: Anchor element of the event

        Returns:
            Card container element
        """
        current = link

        for depth in range(self.max_depth):
            parent = current.parent
            if parent is None:
                logger.debug(f"Reached root element after {depth} levels")
                break

            if self.is_card_container(parent):
                logger.debug(
                    f"Found event card container: <{parent.name}> "
                    f"with class '{class_name(parent)}'"
                )
                return parent

            current = parent

        logger.debug(f"No event card container found, using <{current.name}>")
        return current

    def is_card_container(self, element: Tag) -> bool:
        """Whether an element's class or tag marks it as an event card."""
        classes = class_name(element).lower()
        if any(marker in classes for marker in self.CONTAINER_CLASS_MARKERS):
            return True
        return (element.name or '').lower() == self.CONTAINER_TAG
