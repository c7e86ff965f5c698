"""Render wiki page content as plain text, Markdown or HTML."""

from bs4 import BeautifulSoup, Tag

from wiki_mirror.config import PageFormat
from wiki_mirror.converter.html import convert_page_to_html
from wiki_mirror.converter.markdown import MarkdownConverter, convert_page_to_markdown
from wiki_mirror.converter.plain_text import (
    convert_page_to_plain_text,
    format_children_as_plain_text,
)
from wiki_mirror.extractor.main_content import Recommender, require_page_content


def format_content(
    content: Tag, title: str, page_format: PageFormat, show_urls: bool = False
) -> str:
    """Render an already selected content region."""
    if page_format == PageFormat.PLAIN_TEXT:
        return convert_page_to_plain_text(content, show_urls)
    if page_format == PageFormat.MARKDOWN:
        return convert_page_to_markdown(content, title)
    if page_format == PageFormat.HTML:
        return convert_page_to_html(content, title)
    raise ValueError(f"Unknown page format: {page_format}")


def render_page(
    title: str,
    document: BeautifulSoup | Tag,
    page_format: PageFormat,
    show_urls: bool = False,
    recommendations: Recommender | None = None,
) -> str:
    """Render a fetched wiki page.

    Raises:
        NoPageFound: The document has no main content region. Its
            ``suggestions`` come from ``recommendations`` (at most five).
    """
    content = require_page_content(title, document, recommendations)
    return format_content(content, title, page_format, show_urls)


__all__ = [
    "MarkdownConverter",
    "convert_page_to_html",
    "convert_page_to_markdown",
    "convert_page_to_plain_text",
    "format_children_as_plain_text",
    "format_content",
    "render_page",
]
