"""Main content selection from fetched wiki pages."""

import logging
from collections.abc import Callable

from bs4 import BeautifulSoup, Tag

from wiki_mirror.errors import NoPageFound

logger = logging.getLogger(__name__)

# MediaWiki wraps the rendered article body in this element
CONTENT_SELECTOR = ".mw-parser-output"

MAX_SUGGESTIONS = 5

Recommender = Callable[[str], list[str]]


def parse_html(html: str) -> BeautifulSoup:
    """Parse a full page or fragment with lxml."""
    return BeautifulSoup(html, "lxml")


def get_page_content(document: BeautifulSoup | Tag) -> Tag | None:
    """Return the page's main content region, if any."""
    return document.select_one(CONTENT_SELECTOR)


def require_page_content(
    title: str,
    document: BeautifulSoup | Tag,
    recommendations: Recommender | None = None,
) -> Tag:
    """Like ``get_page_content`` but raise ``NoPageFound`` when missing.

    Args:
        title: Page title, used for the error and for looking up suggestions.
        document: Parsed page.
        recommendations: Called with ``title`` to produce similar page titles.
    """
    content = get_page_content(document)
    if content is not None:
        return content

    suggestions: list[str] = []
    if recommendations is not None:
        suggestions = recommendations(title)[:MAX_SUGGESTIONS]
    logger.debug("No %s region in page '%s'", CONTENT_SELECTOR, title)
    raise NoPageFound(title, suggestions)
