"""Open search response handling and fuzzy page suggestions."""

from collections.abc import Sequence
from difflib import SequenceMatcher

from pydantic import BaseModel

from wiki_mirror.errors import ApiResponseIssue, InvalidApiResponse

# Open search returns [term, [titles], [descriptions], [urls]]
OpenSearchResponse = Sequence[object]


class OpenSearchItem(BaseModel):
    """A page title and its URL from an open search query."""

    title: str
    url: str


def _nth_array(search_result: OpenSearchResponse, index: int) -> list[str]:
    if len(search_result) <= index:
        raise InvalidApiResponse(ApiResponseIssue.MISSING_ELEMENT, index)
    item = search_result[index]
    if not isinstance(item, list):
        raise InvalidApiResponse(ApiResponseIssue.NOT_AN_ARRAY, index)
    return [str(v) for v in item]


def open_search_to_page_names(search_result: OpenSearchResponse) -> list[str]:
    return _nth_array(search_result, 1)


def open_search_to_page_url_pairs(search_result: OpenSearchResponse) -> list[OpenSearchItem]:
    """Pair up titles and URLs of an open search response.

    Raises:
        InvalidApiResponse: Element 1 or 3 is missing or not an array, or
            the two arrays differ in length.
    """
    names = _nth_array(search_result, 1)
    urls = _nth_array(search_result, 3)
    if len(names) != len(urls):
        raise InvalidApiResponse(ApiResponseIssue.LENGTH_MISMATCH)
    return [OpenSearchItem(title=name, url=url) for name, url in zip(names, urls)]


def format_open_search_table(items: Sequence[OpenSearchItem]) -> str:
    """Two-column PAGE | URL table, one row per search hit."""
    rows = [f"{'PAGE':20} | URL"]
    rows.extend(f"{item.title:20} | {item.url}" for item in items)
    return "\n".join(rows)


def open_search_is_page_exact_match(page: str, search_result: OpenSearchResponse) -> bool:
    """Whether the top search result is exactly ``page``."""
    names = _nth_array(search_result, 1)
    return bool(names) and names[0] == page


def get_top_pages(search: str, amount: int, pages: Sequence[str]) -> list[str]:
    """Return the ``amount`` page titles most similar to ``search``."""
    needle = search.lower()
    ranked = sorted(
        pages,
        key=lambda page: SequenceMatcher(None, needle, page.lower()).ratio(),
        reverse=True,
    )
    return list(ranked[:amount])
