"""Download, render and write the pages of one chunk."""

import logging
from pathlib import Path

from rich.progress import Progress, TaskID

from wiki_mirror.config import PageFormat
from wiki_mirror.converter import render_page
from wiki_mirror.errors import WikiIOError
from wiki_mirror.fetcher.base import PageSource
from wiki_mirror.mirror.distributor import Chunk
from wiki_mirror.models import ChunkResult, FetchFailure
from wiki_mirror.output.local_wiki import create_dir_if_not_exists, write_page
from wiki_mirror.utils.filename import page_path, to_save_file_name

logger = logging.getLogger(__name__)

_LABEL_WIDTH = 18


def _progress_label(category: str) -> str:
    if len(category) <= _LABEL_WIDTH:
        return f'fetching pages in "{category}"'
    return f'fetching pages in "{category[:_LABEL_WIDTH - 3]}..."'


class MirrorWorker:
    """Process one chunk to completion, recording failures instead of raising.

    A failure to fetch, render or write one page never stops the other pages
    or categories of the chunk. If a category directory cannot be created,
    every page of that category is recorded as failed and the worker moves
    on to the next category.
    """

    def __init__(
        self,
        client: PageSource,
        destination: Path,
        page_format: PageFormat,
        progress: Progress,
        category_task: TaskID | None = None,
        override_existing: bool = False,
        show_urls: bool = False,
    ):
        self.client = client
        self.destination = Path(destination)
        self.page_format = page_format
        self.progress = progress
        self.category_task = category_task
        self.override_existing = override_existing
        self.show_urls = show_urls

    async def run(self, chunk: Chunk) -> ChunkResult:
        result = ChunkResult()
        for category, pages in chunk:
            await self._process_category(category, pages, result)
        return result

    async def _process_category(
        self, category: str, pages: list[str], result: ChunkResult
    ) -> None:
        task_id = self.progress.add_task(_progress_label(category), total=len(pages))
        try:
            cat_dir = self.destination / to_save_file_name(category)
            try:
                create_dir_if_not_exists(cat_dir)
            except WikiIOError as e:
                logger.warning("Skipping category '%s': %s", category, e)
                result.attempted += len(pages)
                result.failures.extend(
                    FetchFailure.from_exception(title, e) for title in pages
                )
                return

            for title in pages:
                await self._process_page(title, cat_dir, result)
                self.progress.advance(task_id)
        finally:
            self.progress.update(task_id, visible=False)
            if self.category_task is not None:
                self.progress.advance(self.category_task)

    async def _process_page(self, title: str, cat_dir: Path, result: ChunkResult) -> None:
        path = page_path(title, self.page_format, cat_dir)
        if not self.override_existing and path.exists():
            result.skipped += 1
            return

        result.attempted += 1
        try:
            document = await self.client.fetch_page_without_recommendations(title)
            content = render_page(title, document, self.page_format, self.show_urls)
            await write_page(path, content)
        except Exception as e:
            logger.debug("Failed to mirror page '%s'", title, exc_info=True)
            result.failures.append(FetchFailure.from_exception(title, e))
            return
        result.succeeded += 1
