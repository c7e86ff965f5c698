"""Fetching pages and metadata from the wiki."""

from wiki_mirror.fetcher.base import BaseFetcher, PageSource
from wiki_mirror.fetcher.http_fetcher import WikiClient

__all__ = [
    "BaseFetcher",
    "PageSource",
    "WikiClient",
]
