"""Read a single page, going through the on-disk cache."""

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from functools import partial

from wiki_mirror.cache import PageCache
from wiki_mirror.config import PageFormat
from wiki_mirror.converter import render_page
from wiki_mirror.errors import NetworkError, ParsingError, WikiIOError
from wiki_mirror.fetcher.http_fetcher import WikiClient
from wiki_mirror.search import get_top_pages

logger = logging.getLogger(__name__)

# Errors that fall back to a stale cache entry; NoPageFound is not one of them
_FALLBACK_ERRORS = (NetworkError, ParsingError)


@dataclass
class PageRead:
    """Rendered page and where it came from."""

    content: str
    from_cache: bool = False
    stale: bool = False


async def read_page(
    title: str,
    page_format: PageFormat,
    client: WikiClient,
    cache: PageCache | None = None,
    show_urls: bool = False,
    lang: str | None = None,
    page_names: Sequence[str] | None = None,
) -> PageRead:
    """Return a rendered page, fetching it only if the cache has no fresh copy.

    When the fetch fails with a network or parsing error and the cache holds
    any copy of the page, even a stale one, that copy is returned and a
    warning is logged instead of raising.

    Args:
        page_names: Known page titles, used to suggest alternatives when the
            fetched page has no content.
    """
    lookup = await cache.lookup(title, page_format) if cache else None
    if lookup is not None and lookup.fresh and lookup.content is not None:
        return PageRead(content=lookup.content, from_cache=True)

    recommendations = (
        partial(_recommend, page_names=page_names) if page_names else None
    )

    try:
        document = await client.fetch_page(title, lang)
    except _FALLBACK_ERRORS as e:
        if lookup is not None and lookup.content is not None:
            logger.warning(
                "Failed to fetch '%s' (%s), showing cached copy from %s",
                title, e, lookup.path,
            )
            return PageRead(content=lookup.content, from_cache=True, stale=True)
        raise

    content = render_page(title, document, page_format, show_urls, recommendations)

    if cache is not None:
        try:
            await cache.store(title, page_format, content)
        except (WikiIOError, OSError) as e:
            logger.warning("Failed to cache page '%s': %s", title, e)

    return PageRead(content=content)


def _recommend(title: str, page_names: Sequence[str]) -> list[str]:
    return get_top_pages(title, 5, page_names)
