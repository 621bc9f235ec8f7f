"""Helpers over parsed listing pages."""
import re
from urllib.parse import urljoin

from bs4 import BeautifulSoup
from bs4.element import Tag

XML_ILLEGAL_CHARS = re.compile(r'[\x00-\x08\x0b\x0c\x0e-\x1f]')


def parse_page(html_content: str, url: str) -> BeautifulSoup:
    """
    Parse page markup and record the page URL as the document base.

    The base URL is stored as a ``<base href>`` tag so that relative
    ``href``/``src`` values can be resolved from any element later on.

    Args:
        html_content: Raw page markup
        url: URL the markup was loaded from

    Returns:
        Parsed document
    """
    soup = BeautifulSoup(html_content, 'html.parser')
    base = soup.find('base', href=True)
    if base is not None:
        base['href'] = urljoin(url, base['href'])
        return soup

    base = soup.new_tag('base', href=url)
    container = soup.head or soup.html or soup
    container.insert(0, base)
    return soup


def document_base_url(element: Tag) -> str:
    """Base URL of the document an element belongs to."""
    root = element
    while root.parent is not None:
        root = root.parent
    base = root.find('base', href=True)
    return base['href'] if base is not None else ''


def absolute_url(element: Tag, attribute: str) -> str:
    """
    Resolve a URL-valued attribute against the document base.

    Returns:
        Absolute URL, or empty string if the attribute is missing or empty
    """
    value = clean_text(element.get(attribute) or '').strip()
    if not value:
        return ''
    return urljoin(document_base_url(element), value)


def clean_text(value: str) -> str:
    """Remove control characters that cannot appear in XML."""
    return XML_ILLEGAL_CHARS.sub('', value)


def element_text(element: Tag) -> str:
    """Element text with runs of whitespace collapsed to single spaces."""
    return ' '.join(clean_text(element.get_text()).split())


def class_name(element: Tag) -> str:
    """Class attribute of an element as a single string."""
    classes = element.get('class') or []
    if isinstance(classes, str):
        return classes
    return ' '.join(classes)
