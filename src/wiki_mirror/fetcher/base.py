"""Base class for wiki fetchers."""

import asyncio
import logging
import random
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Protocol

import httpx
from bs4 import BeautifulSoup

from wiki_mirror.config import FetcherConfig
from wiki_mirror.errors import NetworkError

logger = logging.getLogger(__name__)

_MAX_RETRY_DELAY = 60.0  # Never sleep longer than this on a single retry


class PageSource(Protocol):
    """What the mirror pipeline needs from a wiki client."""

    async def fetch_page_without_recommendations(self, title: str) -> BeautifulSoup:
        ...


def parse_retry_after(header_value: str | None) -> float | None:
    """Parse a Retry-After header value into seconds.

    Supports both delta-seconds (e.g. "120") and HTTP-date formats.
    Returns None if the header is missing or unparseable.
    """
    if not header_value:
        return None
    try:
        return max(0.0, float(header_value))
    except ValueError:
        pass
    try:
        dt = parsedate_to_datetime(header_value)
    except (TypeError, ValueError):
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return max(0.0, (dt - datetime.now(timezone.utc)).total_seconds())


def is_retryable_status(status_code: int) -> bool:
    """Rate limits and server errors (MediaWiki's maxlag answers with 503)."""
    return status_code == 429 or status_code >= 500


class BaseFetcher(ABC):
    """GET requests against the wiki with backoff on transient failures."""

    def __init__(self, config: FetcherConfig):
        self.config = config

    @abstractmethod
    async def fetch(self, url: str, params: dict | None = None) -> httpx.Response:
        """Send a single GET request.

        Raises:
            httpx.HTTPError: The request never got an answer.
        """

    def _retry_delay(self, attempt: int, retry_after: float | None) -> float:
        delay = self.config.retry_base_delay * (2 ** attempt) + random.uniform(0, 0.5)
        if retry_after is not None:
            delay = max(delay, retry_after)
        return min(delay, _MAX_RETRY_DELAY)

    async def get_text(self, url: str, params: dict | None = None) -> str:
        """GET a URL and return the response body.

        Rate limits, server errors and transport errors are retried up to
        ``max_retries`` times.

        Raises:
            NetworkError: Any other status, or the last failure once retries
                run out. Carries the HTTP status, 0 for transport errors.
        """
        attempt = 0
        while True:
            retry_after = None
            try:
                response = await self.fetch(url, params)
            except httpx.HTTPError as e:
                error = NetworkError(f"{url}: {str(e) or type(e).__name__}")
            else:
                if response.is_success:
                    return response.text
                error = NetworkError(
                    f"HTTP {response.status_code} for {response.url}",
                    status_code=response.status_code,
                )
                if not is_retryable_status(response.status_code):
                    raise error
                if response.status_code == 429:
                    retry_after = parse_retry_after(response.headers.get("retry-after"))

            if attempt >= self.config.max_retries:
                raise error
            delay = self._retry_delay(attempt, retry_after)
            attempt += 1
            logger.debug("Retrying %s in %.1fs (attempt %d): %s", url, delay, attempt, error)
            await asyncio.sleep(delay)

    @abstractmethod
    async def __aenter__(self):
        pass

    @abstractmethod
    async def __aexit__(self, exc_type, exc_val, exc_tb):
        pass
