"""HTML to plain text conversion."""

from bs4 import NavigableString, Tag
from bs4.element import Comment, Declaration, Doctype, ProcessingInstruction

# Width every table cell is padded to
COLUMN_WIDTH = 25
COLUMN_SEPARATOR = " | "

_TABLE_TAGS = frozenset({"tbody", "thead", "tfoot", "td", "th"})
_DROPPED_TAGS = frozenset({"script", "style", "noscript"})
_NON_TEXT_STRINGS = (Comment, Declaration, Doctype, ProcessingInstruction)


def convert_page_to_plain_text(content: Tag, show_urls: bool = False) -> str:
    """Render a page's content region as plain text.

    Tags are dropped and only text nodes are kept. Links keep their text and,
    with ``show_urls``, are followed by the target in brackets:
    ``Neovim[https://wiki.archlinux.org/title/Neovim]``. Table rows become
    fixed-width columns separated by ``" | "``.
    """
    return format_children_as_plain_text(content, show_urls)


def format_children_as_plain_text(node: Tag, show_urls: bool = False) -> str:
    return "".join(_format_node(child, show_urls) for child in node.children)


def _format_node(node, show_urls: bool) -> str:
    if isinstance(node, NavigableString):
        if isinstance(node, _NON_TEXT_STRINGS):
            return ""
        return str(node)
    if not isinstance(node, Tag):
        return ""

    name = node.name
    if name in _DROPPED_TAGS:
        return ""
    if name == "a":
        text = format_children_as_plain_text(node, show_urls)
        if show_urls:
            return _wrap_text_in_url(text, _href(node))
        return text
    if name == "tr":
        return _format_row(node, show_urls)
    if name in _TABLE_TAGS:
        return "".join(_format_table_node(child, show_urls) for child in node.children)
    return format_children_as_plain_text(node, show_urls)


def _format_table_node(node, show_urls: bool) -> str:
    """Render a node that sits inside a table structure."""
    if isinstance(node, NavigableString) and not isinstance(node, _NON_TEXT_STRINGS):
        return str(node).rstrip()
    if isinstance(node, Tag) and node.name == "tr":
        return _format_row(node, show_urls)
    return _format_node(node, show_urls)


def _format_row(row: Tag, show_urls: bool) -> str:
    cells = []
    for child in row.children:
        text = _format_table_node(child, show_urls).strip()
        if text:
            cells.append(f"{text:<{COLUMN_WIDTH}}")
    return COLUMN_SEPARATOR.join(cells) + "\n"


def _href(node: Tag) -> str:
    href = node.get("href", "")
    if isinstance(href, list):
        href = " ".join(href)
    return href or ""


def _wrap_text_in_url(text: str, url: str) -> str:
    return f"{text}[{url}]"
