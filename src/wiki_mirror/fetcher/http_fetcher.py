"""HTTP client for the MediaWiki APIs."""

import json
import logging
from urllib.parse import quote

import httpx
from bs4 import BeautifulSoup

from wiki_mirror.config import FetcherConfig
from wiki_mirror.errors import NetworkError, NoPageFound, ParsingError
from wiki_mirror.extractor.main_content import parse_html
from wiki_mirror.fetcher.base import BaseFetcher
from wiki_mirror.search import open_search_is_page_exact_match, open_search_to_page_names
from wiki_mirror.utils.html import update_relative_urls

logger = logging.getLogger(__name__)

# Maintenance categories that say nothing about a page's topic
BLOCK_LISTED_CATEGORY_PREFIXES = (
    "Pages flagged with",
    "Sections flagged with",
    "Pages or sections flagged with",
    "Pages where template include size is exceeded",
    "Pages with broken package links",
    "Pages with broken section links",
    "Pages with missing package links",
    "Pages with missing section links",
    "Pages with dead links",
)


def is_blocked_category(category: str) -> bool:
    return category.startswith(BLOCK_LISTED_CATEGORY_PREFIXES)


def strip_category_prefix(title: str) -> str:
    _, sep, rest = title.partition("Category:")
    return rest if sep else title


class WikiClient(BaseFetcher):
    """Fetch pages, search results and page metadata from a MediaWiki site."""

    def __init__(
        self,
        config: FetcherConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        super().__init__(config or FetcherConfig())
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def base_url(self) -> str:
        return self.config.base_url.rstrip("/")

    @property
    def api_url(self) -> str:
        return f"{self.base_url}/api.php"

    async def __aenter__(self):
        """Initialize HTTP client."""
        self._client = httpx.AsyncClient(
            headers={"User-Agent": self.config.user_agent},
            follow_redirects=True,
            timeout=self.config.timeout_ms / 1000,
            transport=self._transport,
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Clean up HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def fetch(self, url: str, params: dict | None = None) -> httpx.Response:
        """Fetch a URL via HTTP."""
        if not self._client:
            raise RuntimeError("Client not initialized. Use 'async with' context manager.")
        return await self._client.get(url, params=params)

    async def _get_json(self, url: str, params: dict | None = None):
        body = await self.get_text(url, params)
        try:
            return json.loads(body)
        except json.JSONDecodeError as e:
            raise ParsingError(f"invalid JSON from {url}: {e}") from e

    async def fetch_open_search(self, search: str, lang: str | None = None, limit: int = 5) -> list:
        """Run an ``action=opensearch`` query and return the raw response."""
        data = await self._get_json(
            self.api_url,
            {
                "action": "opensearch",
                "format": "json",
                "uselang": lang or self.config.lang,
                "limit": limit,
                "search": search,
            },
        )
        if not isinstance(data, list):
            raise ParsingError("open search response should be a JSON array")
        return data

    async def fetch_page(self, title: str, lang: str | None = None) -> BeautifulSoup:
        """Fetch a page by title, suggesting similar titles if it doesn't exist.

        Raises:
            NoPageFound: The top search hit is not an exact match.
        """
        search_result = await self.fetch_open_search(title, lang, 5)
        if not open_search_is_page_exact_match(title, search_result):
            raise NoPageFound(title, open_search_to_page_names(search_result))
        return await self.fetch_page_without_recommendations(title)

    async def fetch_page_without_recommendations(self, title: str) -> BeautifulSoup:
        """Fetch a page's rendered HTML by its exact title."""
        url = f"{self.base_url}/rest.php/v1/page/{quote(title, safe='')}/html"
        try:
            body = await self.get_text(url)
        except NetworkError as e:
            if e.status_code == 404:
                raise NoPageFound(title) from e
            raise
        return parse_html(update_relative_urls(body, self.base_url))

    async def fetch_all_pages(self) -> dict[str, list[str]]:
        """Fetch every page title together with the categories it belongs to.

        Follows the API's ``continue`` tokens until exhausted; category lists of
        a page that arrive across several batches are merged.
        """
        params = {
            "action": "query",
            "generator": "allpages",
            "prop": "categories",
            "format": "json",
            "gaplimit": "max",
            "cllimit": "max",
        }
        pages: dict[str, set[str]] = {}
        continue_token: dict = {}

        while True:
            data = await self._get_json(self.api_url, {**params, **continue_token})
            if not isinstance(data, dict):
                raise ParsingError("page metadata response should be a JSON object")

            batch = data.get("query", {}).get("pages", {})
            if isinstance(batch, dict):
                batch = batch.values()
            for page in batch:
                title = page.get("title")
                if not title:
                    continue
                categories = pages.setdefault(title, set())
                for category in page.get("categories") or []:
                    name = strip_category_prefix(str(category.get("title", "")))
                    if name and not is_blocked_category(name):
                        categories.add(name)

            logger.info("Fetched metadata for %d pages so far", len(pages))
            if "continue" not in data:
                break
            continue_token = data["continue"]

        return {title: sorted(cats) for title, cats in pages.items()}
