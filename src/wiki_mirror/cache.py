"""On-disk cache for pages read one at a time."""

import logging
import time
from dataclasses import dataclass
from pathlib import Path

import aiofiles  # type: ignore[import-untyped]

from wiki_mirror.config import CACHE_TTL_SECONDS, PageFormat
from wiki_mirror.errors import WikiIOError
from wiki_mirror.utils.filename import page_path

logger = logging.getLogger(__name__)


def page_cache_exists(
    cache_location: Path,
    disable_invalidation: bool = False,
    now: float | None = None,
    ttl_seconds: int = CACHE_TTL_SECONDS,
) -> bool:
    """Check whether a cache file exists and is still fresh.

    A file older than ``ttl_seconds`` (14 days by default) counts as stale
    unless ``disable_invalidation`` is set.
    """
    if not cache_location.exists():
        return False
    if disable_invalidation:
        return True

    now = time.time() if now is None else now
    try:
        modified = cache_location.stat().st_mtime
    except OSError as e:
        raise WikiIOError(f"failed to stat '{cache_location}': {e}") from e
    return now - modified < ttl_seconds


@dataclass
class CacheLookup:
    """Result of looking up a page in the cache."""

    path: Path
    content: str | None
    fresh: bool

    @property
    def exists(self) -> bool:
        return self.content is not None


class PageCache:
    """Maps ``(title, format)`` to a file under ``cache_dir``."""

    def __init__(
        self,
        cache_dir: Path,
        disable_invalidation: bool = False,
        ttl_seconds: int = CACHE_TTL_SECONDS,
    ):
        self.cache_dir = Path(cache_dir)
        self.disable_invalidation = disable_invalidation
        self.ttl_seconds = ttl_seconds

    def path(self, title: str, page_format: PageFormat) -> Path:
        return page_path(title, page_format, self.cache_dir)

    def is_fresh(self, path: Path, now: float | None = None) -> bool:
        return page_cache_exists(
            path, self.disable_invalidation, now=now, ttl_seconds=self.ttl_seconds
        )

    async def read(self, path: Path) -> str:
        try:
            async with aiofiles.open(path, encoding="utf-8") as f:
                return await f.read()
        except (OSError, UnicodeDecodeError) as e:
            raise WikiIOError(f"failed to read cache file '{path}': {e}") from e

    async def write(self, path: Path, content: str) -> None:
        """Overwrite a cache file. The cache directory must already exist."""
        try:
            async with aiofiles.open(path, "w", encoding="utf-8") as f:
                await f.write(content)
        except OSError as e:
            raise WikiIOError(f"failed to write cache file '{path}': {e}") from e

    async def lookup(self, title: str, page_format: PageFormat) -> CacheLookup:
        """Return cached content (stale or not) and whether it is fresh.

        An entry that can't be read counts as missing and is overwritten by
        the next ``store``.
        """
        path = self.path(title, page_format)
        if not path.exists():
            return CacheLookup(path=path, content=None, fresh=False)
        try:
            fresh = self.is_fresh(path)
            content = await self.read(path)
        except WikiIOError as e:
            logger.warning("Ignoring cached copy of '%s': %s", title, e)
            return CacheLookup(path=path, content=None, fresh=False)
        logger.debug("Cache hit for '%s' (%s): fresh=%s", title, path, fresh)
        return CacheLookup(path=path, content=content, fresh=fresh)

    async def store(self, title: str, page_format: PageFormat, content: str) -> Path:
        self.cache_dir.mkdir(parents=True, exist_ok=True)
        path = self.path(title, page_format)
        await self.write(path, content)
        return path
