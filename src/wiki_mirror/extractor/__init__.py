"""Content extraction from wiki pages."""

from wiki_mirror.extractor.main_content import (
    CONTENT_SELECTOR,
    get_page_content,
    parse_html,
    require_page_content,
)

__all__ = [
    "CONTENT_SELECTOR",
    "get_page_content",
    "parse_html",
    "require_page_content",
]
