"""HTML fragment output."""

from bs4 import Tag


def convert_page_to_html(content: Tag, title: str) -> str:
    """Wrap the content region's inner HTML under an ``<h1>`` title."""
    return f"<h1>{title}</h1>\n{content.decode_contents()}"
