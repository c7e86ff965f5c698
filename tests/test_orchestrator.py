"""Tests for a complete mirror run."""

import io
from pathlib import Path

import pytest
from rich.console import Console

from conftest import FakeWikiClient
from wiki_mirror.config import MirrorConfig, PageFormat
from wiki_mirror.errors import CoordinationError
from wiki_mirror.mirror import MirrorOrchestrator, mirror
from wiki_mirror.output import FAILURE_LOG_NAME

WIKI_TREE = {
    "Editors": ["Vim", "Emacs"],
    "Uncategorized #1": ["RandomPage"],
}


def _quiet_console() -> Console:
    return Console(quiet=True)


class TestMirror:
    """Test mirroring a category tree end to end."""

    @pytest.mark.asyncio
    async def test_mirror_plain_text(
        self, fake_client: FakeWikiClient, destination: Path, log_dir: Path
    ) -> None:
        """Test every page is written as plain text without extension."""
        report = await mirror(
            WIKI_TREE,
            PageFormat.PLAIN_TEXT,
            destination,
            log_dir,
            workers=2,
            hide_progress=True,
            client=fake_client,
            console=_quiet_console(),
        )

        assert report.total_pages == 3
        assert report.attempted == 3
        assert report.succeeded == 3
        assert report.failed == 0
        assert not report.crashed
        assert report.log_path is None
        assert (destination / "Editors" / "Vim").read_text(encoding="utf-8") == "Article about Vim"
        assert (destination / "Editors" / "Emacs").exists()
        assert (destination / "Uncategorized #1" / "RandomPage").exists()
        assert sorted(fake_client.requested) == ["Emacs", "RandomPage", "Vim"]

    @pytest.mark.asyncio
    async def test_pages_fetched_in_sorted_order(
        self, fake_client: FakeWikiClient, destination: Path, log_dir: Path
    ) -> None:
        """Test a single worker fetches categories and their pages sorted."""
        await mirror(
            WIKI_TREE,
            PageFormat.MARKDOWN,
            destination,
            log_dir,
            workers=1,
            hide_progress=True,
            client=fake_client,
            console=_quiet_console(),
        )

        assert fake_client.requested == ["Emacs", "Vim", "RandomPage"]

    @pytest.mark.asyncio
    async def test_failures_logged(self, destination: Path, log_dir: Path) -> None:
        """Test failed pages end up in the failure log."""
        client = FakeWikiClient(failing={"Emacs"})

        report = await mirror(
            WIKI_TREE,
            PageFormat.MARKDOWN,
            destination,
            log_dir,
            workers=2,
            hide_progress=True,
            client=client,
            console=_quiet_console(),
        )

        assert report.succeeded == 2
        assert [f.title for f in report.failures] == ["Emacs"]
        assert report.log_path == log_dir / FAILURE_LOG_NAME
        log = report.log_path.read_text(encoding="utf-8")
        assert log.startswith("failed to fetch page 'Emacs'\nREASON: ")
        assert "HTTP 503" in log
        assert (destination / "Editors" / "Vim.md").exists()

    @pytest.mark.asyncio
    async def test_summary_always_lists_failed(
        self, fake_client: FakeWikiClient, destination: Path, log_dir: Path
    ) -> None:
        """Test the summary shows attempted, succeeded and failed even with no failures."""
        output = io.StringIO()

        await mirror(
            WIKI_TREE,
            PageFormat.MARKDOWN,
            destination,
            log_dir,
            workers=2,
            client=fake_client,
            console=Console(file=output, width=120),
        )

        summary = output.getvalue()
        assert "Pages attempted: 3" in summary
        assert "Succeeded:       3" in summary
        assert "Failed:          0" in summary

    @pytest.mark.asyncio
    async def test_more_workers_than_categories(
        self, fake_client: FakeWikiClient, destination: Path, log_dir: Path
    ) -> None:
        """Test surplus workers are harmless."""
        report = await mirror(
            WIKI_TREE,
            PageFormat.HTML,
            destination,
            log_dir,
            workers=8,
            hide_progress=True,
            client=fake_client,
            console=_quiet_console(),
        )

        assert report.succeeded == 3
        assert (destination / "Editors" / "Vim.html").read_text(encoding="utf-8").startswith(
            "<h1>Vim</h1>\n"
        )

    @pytest.mark.asyncio
    async def test_empty_tree(
        self, fake_client: FakeWikiClient, destination: Path, log_dir: Path
    ) -> None:
        """Test an empty tree creates the destination and nothing else."""
        report = await mirror(
            {"Empty": []},
            PageFormat.MARKDOWN,
            destination,
            log_dir,
            workers=2,
            hide_progress=True,
            client=fake_client,
            console=_quiet_console(),
        )

        assert report.total_pages == 0
        assert report.attempted == 0
        assert destination.is_dir()
        assert list(destination.iterdir()) == []

    @pytest.mark.asyncio
    async def test_second_run_skips_existing(
        self, fake_client: FakeWikiClient, destination: Path, log_dir: Path
    ) -> None:
        """Test pages from a previous run are kept."""
        options = dict(workers=2, hide_progress=True, client=fake_client, console=_quiet_console())
        await mirror(WIKI_TREE, PageFormat.MARKDOWN, destination, log_dir, **options)

        report = await mirror(WIKI_TREE, PageFormat.MARKDOWN, destination, log_dir, **options)

        assert report.skipped == 3
        assert report.attempted == 0

    @pytest.mark.asyncio
    async def test_require_fresh_dir(
        self, fake_client: FakeWikiClient, destination: Path, log_dir: Path
    ) -> None:
        """Test an existing destination is refused when a fresh one is required."""
        destination.mkdir()

        with pytest.raises(CoordinationError):
            await mirror(
                WIKI_TREE,
                PageFormat.MARKDOWN,
                destination,
                log_dir,
                hide_progress=True,
                require_fresh_dir=True,
                client=fake_client,
                console=_quiet_console(),
            )

        assert fake_client.requested == []

    @pytest.mark.asyncio
    async def test_destination_is_a_file(
        self, fake_client: FakeWikiClient, destination: Path, log_dir: Path
    ) -> None:
        """Test a file at the destination aborts the run."""
        destination.write_text("not a directory", encoding="utf-8")

        with pytest.raises(CoordinationError):
            await mirror(
                WIKI_TREE,
                PageFormat.MARKDOWN,
                destination,
                log_dir,
                hide_progress=True,
                client=fake_client,
                console=_quiet_console(),
            )


class CrashingOrchestrator(MirrorOrchestrator):
    """Crashes the worker of any chunk holding the "Editors" category."""

    async def _run_chunk(self, chunk, progress, category_task):
        if any(cat == "Editors" for cat, _pages in chunk):
            raise RuntimeError("worker blew up")
        return await super()._run_chunk(chunk, progress, category_task)


class TestCrashedWorker:
    """Test a worker task that raises."""

    @pytest.mark.asyncio
    async def test_other_chunks_still_finish(self, destination: Path, log_dir: Path) -> None:
        """Test a crashed chunk is reported and the others are merged."""
        config = MirrorConfig(
            format=PageFormat.MARKDOWN,
            destination=destination,
            workers=2,
            hide_progress=True,
        )
        orchestrator = CrashingOrchestrator(
            config, FakeWikiClient(), log_dir, _quiet_console()
        )

        report = await orchestrator.run(WIKI_TREE)

        assert report.crashed
        assert len(report.crashed_chunks) == 1
        crashed = report.crashed_chunks[0]
        assert crashed.categories == ["Editors"]
        assert crashed.page_count == 2
        assert crashed.error == "worker blew up"
        assert report.succeeded == 1
        assert (destination / "Uncategorized #1" / "RandomPage.md").exists()
