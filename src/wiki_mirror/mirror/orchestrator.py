"""Coordinates a concurrent mirror run over a category tree."""

import asyncio
import logging
import time
from collections.abc import Mapping
from pathlib import Path

from rich.console import Console
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeElapsedColumn,
)

from wiki_mirror.categories import total_page_count
from wiki_mirror.config import FetcherConfig, MirrorConfig, PageFormat
from wiki_mirror.errors import CoordinationError, WikiIOError
from wiki_mirror.fetcher.base import PageSource
from wiki_mirror.fetcher.http_fetcher import WikiClient
from wiki_mirror.mirror.distributor import Chunk, chunk_page_count, distribute
from wiki_mirror.mirror.worker import MirrorWorker
from wiki_mirror.models import ChunkResult, CrashedChunk, MirrorReport
from wiki_mirror.output.local_wiki import write_failure_log

logger = logging.getLogger(__name__)


class MirrorOrchestrator:
    """Spawns one worker per chunk, awaits them all and merges the results."""

    def __init__(
        self,
        config: MirrorConfig,
        client: PageSource,
        log_dir: Path,
        console: Console | None = None,
    ):
        self.config = config
        self.client = client
        self.log_dir = Path(log_dir)
        self.console = console or Console()

    async def run(self, wiki_tree: Mapping[str, list[str]]) -> MirrorReport:
        """Mirror every page of ``wiki_tree`` below the destination directory.

        Page failures end up in the report and the failure log. A worker task
        that raises is reported in ``crashed_chunks``; the other chunks still
        finish and are merged.

        Raises:
            CoordinationError: The destination directory cannot be used.
        """
        self._prepare_destination()

        tree = {cat: pages for cat, pages in wiki_tree.items() if pages}
        report = MirrorReport(total_pages=total_page_count(tree))
        start = time.monotonic()

        if not self.config.hide_progress:
            self.console.print(
                f"downloading {report.total_pages} pages as {self.config.format.value}\n"
            )

        chunks = distribute(tree, self.config.workers)
        logger.debug(
            "Distributed %d categories over %d chunks: %s",
            len(tree),
            len(chunks),
            [chunk_page_count(c) for c in chunks],
        )

        progress = Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description:<40}"),
            BarColumn(),
            MofNCompleteColumn(),
            TimeElapsedColumn(),
            console=self.console,
            disable=self.config.hide_progress,
        )

        with progress:
            category_task = progress.add_task("fetching categories", total=len(tree))
            jobs = [(i, chunk) for i, chunk in enumerate(chunks) if chunk]
            tasks = [
                asyncio.create_task(self._run_chunk(chunk, progress, category_task))
                for _i, chunk in jobs
            ]
            results = await asyncio.gather(*tasks, return_exceptions=True)

        # Merge in chunk order so the failure list is deterministic
        for (index, chunk), result in zip(jobs, results):
            if isinstance(result, ChunkResult):
                report.merge(result)
            else:
                report.crashed_chunks.append(self._crashed(index, chunk, result))

        if report.failures:
            try:
                report.log_path = await write_failure_log(report.failures, self.log_dir)
            except WikiIOError as e:
                logger.warning("Could not write failure log: %s", e)

        logger.info(
            "Mirror finished in %.1fs: %d attempted, %d succeeded, %d failed",
            time.monotonic() - start,
            report.attempted,
            report.succeeded,
            report.failed,
        )
        if not self.config.hide_progress:
            self._print_summary(report)
        return report

    def _prepare_destination(self) -> None:
        destination = self.config.destination
        if self.config.require_fresh_dir and destination.exists():
            raise CoordinationError(f"destination '{destination}' already exists")
        try:
            destination.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise CoordinationError(
                f"failed to create destination '{destination}': {e}"
            ) from e

    async def _run_chunk(self, chunk: Chunk, progress: Progress, category_task) -> ChunkResult:
        worker = MirrorWorker(
            self.client,
            self.config.destination,
            self.config.format,
            progress,
            category_task=category_task,
            override_existing=self.config.override_existing,
            show_urls=self.config.show_urls,
        )
        return await worker.run(chunk)

    @staticmethod
    def _crashed(index: int, chunk: Chunk, error: BaseException) -> CrashedChunk:
        logger.error(
            "Worker for chunk %d crashed, some pages might be missing: %s",
            index,
            error,
            exc_info=error,
        )
        return CrashedChunk(
            index=index,
            categories=[cat for cat, _pages in chunk],
            page_count=chunk_page_count(chunk),
            error=str(error) or type(error).__name__,
        )

    def _print_summary(self, report: MirrorReport) -> None:
        self.console.print()
        self.console.print(f"  Pages attempted: {report.attempted}")
        self.console.print(f"  Succeeded:       [green]{report.succeeded}[/green]")
        if report.skipped:
            self.console.print(f"  Already present: [dim]{report.skipped}[/dim]")
        failed_style = "red" if report.failed else "green"
        self.console.print(f"  Failed:          [{failed_style}]{report.failed}[/{failed_style}]")
        if report.log_path:
            self.console.print(f"[yellow]Error log written to {report.log_path}[/yellow]")
        for crashed in report.crashed_chunks:
            self.console.print(
                f"[red]ERROR: a worker crashed, up to {crashed.page_count} pages"
                f" might be missing: {crashed.error}[/red]"
            )
        self.console.print(
            f"[green]Saved local copy of the wiki to {self.config.destination}[/green]"
        )


async def mirror(
    wiki_tree: Mapping[str, list[str]],
    page_format: PageFormat,
    destination: Path,
    log_dir: Path,
    workers: int | None = None,
    override_existing: bool = False,
    show_urls: bool = False,
    hide_progress: bool = False,
    require_fresh_dir: bool = False,
    client: PageSource | None = None,
    fetcher_config: FetcherConfig | None = None,
    console: Console | None = None,
) -> MirrorReport:
    """Mirror ``wiki_tree`` to ``destination`` and return the report.

    A ``WikiClient`` is opened for the duration of the run unless ``client``
    is given.
    """
    options: dict = {
        "format": page_format,
        "destination": Path(destination),
        "override_existing": override_existing,
        "show_urls": show_urls,
        "hide_progress": hide_progress,
        "require_fresh_dir": require_fresh_dir,
    }
    if workers is not None:
        options["workers"] = workers
    config = MirrorConfig(**options)

    if client is not None:
        return await MirrorOrchestrator(config, client, log_dir, console).run(wiki_tree)

    async with WikiClient(fetcher_config) as wiki_client:
        return await MirrorOrchestrator(config, wiki_client, log_dir, console).run(wiki_tree)
