"""Split a category tree into chunks of similar page counts."""

from collections.abc import Mapping

Chunk = list[tuple[str, list[str]]]


def chunk_page_count(chunk: Chunk) -> int:
    return sum(len(pages) for _cat, pages in chunk)


def distribute(wiki_tree: Mapping[str, list[str]], chunk_count: int) -> list[Chunk]:
    """Greedily assign categories to ``chunk_count`` chunks.

    Categories are visited in name order; each goes to the chunk with the
    fewest pages so far, the lowest index winning ties. Pages within a
    category are sorted. Empty categories are dropped. The result always has ``chunk_count`` entries, some possibly
    empty. Chunk totals differ by at most the largest category size.
    """
    if chunk_count < 1:
        raise ValueError("chunk_count must be at least 1")

    chunks: list[Chunk] = [[] for _ in range(chunk_count)]
    totals = [0] * chunk_count

    for category in sorted(wiki_tree):
        pages = wiki_tree[category]
        if not pages:
            continue
        target = min(range(chunk_count), key=lambda i: (totals[i], i))
        chunks[target].append((category, sorted(pages)))
        totals[target] += len(pages)

    return chunks
