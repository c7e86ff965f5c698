"""Category tree construction and listing."""

import json
import logging
import re
from collections.abc import Collection, Iterable, Mapping
from pathlib import Path

from wiki_mirror.errors import ParsingError, WikiIOError

logger = logging.getLogger(__name__)

WikiTree = dict[str, list[str]]

UNCATEGORIZED_KEY = "Uncategorized"
UNCATEGORIZED_BUCKET_SIZE = 500

_BUCKET_NAME = re.compile(rf"{UNCATEGORIZED_KEY} #\d+")


def uncategorized_bucket_name(index: int) -> str:
    return f"{UNCATEGORIZED_KEY} #{index}"


def is_uncategorized_bucket(category: str) -> bool:
    return _BUCKET_NAME.fullmatch(category) is not None


def build_category_tree(
    page_to_categories: Mapping[str, Iterable[str]],
    bucket_size: int = UNCATEGORIZED_BUCKET_SIZE,
) -> WikiTree:
    """Invert a page -> categories map into a category -> pages map.

    Pages without any category are sorted and split into buckets of
    ``bucket_size`` named ``"Uncategorized #1"``, ``"Uncategorized #2"``, ...
    Bucket numbers already taken by a real category of the same name are
    skipped. Page lists are sorted and free of duplicates.
    """
    if bucket_size < 1:
        raise ValueError("bucket_size must be at least 1")

    tree: dict[str, set[str]] = {}
    uncategorized: set[str] = set()

    for page, categories in page_to_categories.items():
        categories = list(categories)
        if not categories:
            uncategorized.add(page)
            continue
        for category in categories:
            tree.setdefault(category, set()).add(page)

    result: WikiTree = {category: sorted(pages) for category, pages in tree.items()}

    ordered = sorted(uncategorized)
    n = 0
    for start in range(0, len(ordered), bucket_size):
        n += 1
        while uncategorized_bucket_name(n) in tree:
            n += 1
        result[uncategorized_bucket_name(n)] = ordered[start : start + bucket_size]

    logger.debug(
        "Built category tree: %d categories, %d uncategorized pages",
        len(result),
        len(ordered),
    )
    return result


def total_page_count(wiki_tree: Mapping[str, list[str]]) -> int:
    return sum(len(pages) for pages in wiki_tree.values())


def format_page_tree(
    wiki_tree: Mapping[str, list[str]],
    categories: list[str] | None = None,
    flatten: bool = False,
) -> str:
    """Return a print-ready listing of pages.

    Tree format (``flatten=False``), ordered by category then page::

        Xfce:
        ───┤Thunar
        ───┤Xfwm

    Flat format: unique page names, sorted, one per line.
    """
    selected = [
        (cat, pages)
        for cat, pages in wiki_tree.items()
        if not categories or cat in categories
    ]

    if flatten:
        unique = {page for _cat, pages in selected for page in pages}
        return "\n".join(sorted(unique))

    blocks = []
    for cat, pages in sorted(selected):
        listing = "\n".join(f"───┤{page}" for page in sorted(pages))
        blocks.append(f"{cat}:\n{listing}")
    return "\n\n".join(blocks)


def format_categories(
    wiki_tree: Mapping[str, list[str]],
    real_categories: Collection[str] = (),
) -> str:
    """Sorted category names, without the synthetic uncategorized buckets.

    Names in ``real_categories`` are always listed, even when they look like
    a bucket name.
    """
    names = sorted(
        cat
        for cat in wiki_tree
        if cat in real_categories or not is_uncategorized_bucket(cat)
    )
    return "\n".join(names)


def save_metadata(page_to_categories: Mapping[str, list[str]], path: Path) -> Path:
    """Persist the page -> categories map as JSON."""
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(
            json.dumps(dict(page_to_categories), indent=2, ensure_ascii=False, sort_keys=True),
            encoding="utf-8",
        )
    except OSError as e:
        raise WikiIOError(f"failed to write metadata to '{path}': {e}") from e
    return path


def load_metadata(path: Path) -> dict[str, list[str]]:
    """Load a page -> categories map written by ``save_metadata``."""
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise WikiIOError(f"failed to read metadata from '{path}': {e}") from e
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ParsingError(f"invalid metadata file '{path}': {e}") from e
    if not isinstance(data, dict):
        raise ParsingError(f"invalid metadata file '{path}': expected an object")
    return {str(page): [str(c) for c in cats or []] for page, cats in data.items()}


def real_category_names(page_to_categories: Mapping[str, Iterable[str]]) -> set[str]:
    """Every category some page is tagged with."""
    return {category for categories in page_to_categories.values() for category in categories}
