"""Pytest configuration and shared fixtures."""

from pathlib import Path

import pytest
from bs4 import BeautifulSoup
from rich.progress import Progress

from wiki_mirror.errors import NetworkError
from wiki_mirror.extractor import parse_html


def article_html(body: str) -> str:
    """Wrap ``body`` in the wiki's content region."""
    return f'<html><body><div class="mw-parser-output">{body}</div></body></html>'


class FakeWikiClient:
    """In-memory page source for the mirror pipeline.

    Pages in ``failing`` raise ``NetworkError``; pages in ``empty`` come back
    without a content region.
    """

    def __init__(self, failing: set[str] | None = None, empty: set[str] | None = None):
        self.failing = failing or set()
        self.empty = empty or set()
        self.requested: list[str] = []

    async def fetch_page_without_recommendations(self, title: str) -> BeautifulSoup:
        self.requested.append(title)
        if title in self.failing:
            raise NetworkError(f"HTTP 503 for {title}", status_code=503)
        if title in self.empty:
            return parse_html("<html><body><p>nothing here</p></body></html>")
        return parse_html(article_html(f"<p>Article about {title}</p>"))


@pytest.fixture
def fake_client() -> FakeWikiClient:
    """Return a client that serves every page."""
    return FakeWikiClient()


@pytest.fixture
def progress() -> Progress:
    """Return a progress display that renders nothing."""
    return Progress(disable=True)


@pytest.fixture
def destination(tmp_path: Path) -> Path:
    """Return a not yet existing mirror destination."""
    return tmp_path / "wiki"


@pytest.fixture
def log_dir(tmp_path: Path) -> Path:
    """Return the directory failure logs go to."""
    return tmp_path / "logs"
