"""Command-line interface for wiki-mirror."""

import asyncio
import logging
import tomllib
from pathlib import Path
from typing import List, Optional

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler

from wiki_mirror import __version__
from wiki_mirror.cache import PageCache
from wiki_mirror.categories import (
    build_category_tree,
    format_categories,
    format_page_tree,
    load_metadata,
    real_category_names,
    save_metadata,
)
from wiki_mirror.config import AppConfig, AppDirs, PageFormat
from wiki_mirror.errors import NoPageFound, WikiError
from wiki_mirror.fetcher import WikiClient
from wiki_mirror.mirror import mirror
from wiki_mirror.reader import read_page
from wiki_mirror.search import format_open_search_table, open_search_to_page_url_pairs

app = typer.Typer(
    name="wiki-mirror",
    help="Read and mirror wiki pages as plain text, Markdown or HTML.",
    rich_markup_mode="rich",
    no_args_is_help=True,
)

console = Console()
err_console = Console(stderr=True)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=verbose)],
        force=True,
    )


def version_callback(value: bool):
    if value:
        console.print(f"wiki-mirror version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        exists=True,
        dir_okay=False,
        help="TOML config file",
    ),
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable debug logging",
    ),
):
    """Read the wiki from the terminal or keep a local copy of it."""
    try:
        settings = AppConfig.from_toml(config) if config else AppConfig()
    except (OSError, tomllib.TOMLDecodeError, ValidationError) as e:
        err_console.print(f"[red]Invalid config file {config}: {e}[/red]")
        raise typer.Exit(1)
    _configure_logging(verbose or settings.verbose)
    ctx.obj = settings


def _load_metadata(dirs: AppDirs) -> dict[str, list[str]]:
    if not dirs.metadata_path.exists():
        err_console.print(
            f"[red]No page metadata at {dirs.metadata_path}. Run 'wiki-mirror sync-wiki' first.[/red]"
        )
        raise typer.Exit(1)
    try:
        return load_metadata(dirs.metadata_path)
    except WikiError as e:
        err_console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)


def _load_wiki_tree(dirs: AppDirs) -> dict[str, list[str]]:
    return build_category_tree(_load_metadata(dirs))


@app.command("read-page")
def read_page_command(
    ctx: typer.Context,
    page: str = typer.Argument(..., help="Title of the page to read"),
    page_format: Optional[PageFormat] = typer.Option(
        None,
        "--format",
        "-f",
        help="Output format [default: plain-text]",
    ),
    show_urls: Optional[bool] = typer.Option(
        None,
        "--show-urls/--hide-urls",
        "-s",
        help="Show link targets in plain text output",
    ),
    ignore_cache: bool = typer.Option(
        False,
        "--ignore-cache",
        "-i",
        help="Always fetch the page, don't read or write the cache",
    ),
    disable_cache_invalidation: bool = typer.Option(
        False,
        "--disable-cache-invalidation",
        "-d",
        help="Use cached pages regardless of their age",
    ),
    lang: Optional[str] = typer.Option(None, "--lang", "-l", help="Language of the wiki"),
):
    """
    Read a page from the wiki.

    Pages are cached for 14 days. If the page does not exist, similar page
    titles are printed to stderr and the command exits with status 2.
    """
    settings: AppConfig = ctx.obj
    dirs = settings.dirs
    fetcher_config = settings.fetcher
    if page_format is None:
        page_format = settings.mirror.format
    if show_urls is None:
        show_urls = settings.mirror.show_urls
    if lang:
        fetcher_config = fetcher_config.model_copy(update={"lang": lang})
    cache = None if ignore_cache else PageCache(
        dirs.cache_dir,
        disable_invalidation=disable_cache_invalidation or settings.cache.disable_invalidation,
        ttl_seconds=settings.cache.ttl_seconds,
    )
    page_names = None
    if dirs.metadata_path.exists():
        try:
            page_names = sorted(load_metadata(dirs.metadata_path))
        except WikiError as e:
            logging.getLogger(__name__).warning("Ignoring page metadata: %s", e)

    async def run() -> str:
        async with WikiClient(fetcher_config) as client:
            result = await read_page(
                page, page_format, client, cache,
                show_urls=show_urls, lang=fetcher_config.lang, page_names=page_names,
            )
            return result.content

    try:
        content = asyncio.run(run())
    except NoPageFound as e:
        err_console.print("\n".join(e.suggestions) or f"no page found for '{page}'")
        raise typer.Exit(2)
    except WikiError as e:
        err_console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    typer.echo(content)


@app.command("search")
def search(
    ctx: typer.Context,
    query: str = typer.Argument(..., help="Text to look for in page titles"),
    lang: Optional[str] = typer.Option(None, "--lang", "-l", help="Language of the wiki"),
    limit: int = typer.Option(
        10, "--limit", "-L", min=1, max=500, help="Maximum number of results"
    ),
    json_output: bool = typer.Option(False, "--json", "-j", help="Print results as JSON"),
):
    """Search the wiki for pages by title."""
    settings: AppConfig = ctx.obj

    async def run():
        async with WikiClient(settings.fetcher) as client:
            response = await client.fetch_open_search(query, lang, limit)
        return open_search_to_page_url_pairs(response)

    try:
        items = asyncio.run(run())
    except WikiError as e:
        err_console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    if json_output:
        console.print_json(data=[item.model_dump() for item in items])
    else:
        typer.echo(format_open_search_table(items))


@app.command("sync-wiki")
def sync_wiki(
    ctx: typer.Context,
    print_: bool = typer.Option(
        False,
        "--print",
        "-p",
        help="Print the metadata instead of saving it",
    ),
    hide_progress: bool = typer.Option(False, "--hide-progress", "-H", help="No spinner"),
):
    """Download the list of pages and their categories."""
    settings: AppConfig = ctx.obj

    async def run() -> dict[str, list[str]]:
        async with WikiClient(settings.fetcher) as client:
            return await client.fetch_all_pages()

    try:
        if hide_progress:
            metadata = asyncio.run(run())
        else:
            with console.status("Fetching page metadata..."):
                metadata = asyncio.run(run())
    except WikiError as e:
        err_console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    if print_:
        console.print_json(data=metadata)
        return

    try:
        path = save_metadata(metadata, settings.dirs.metadata_path)
    except WikiError as e:
        err_console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)
    if not hide_progress:
        console.print(f"[green]Saved metadata for {len(metadata)} pages to {path}[/green]")


@app.command("list-pages")
def list_pages(
    ctx: typer.Context,
    flatten: bool = typer.Option(False, "--flatten", "-f", help="Don't group by category"),
    category: Optional[List[str]] = typer.Option(
        None,
        "--category",
        "-c",
        help="Only list pages of these categories",
    ),
):
    """List pages from the downloaded metadata."""
    tree = _load_wiki_tree(ctx.obj.dirs)
    typer.echo(format_page_tree(tree, category, flatten))


@app.command("list-categories")
def list_categories(ctx: typer.Context):
    """List categories from the downloaded metadata."""
    metadata = _load_metadata(ctx.obj.dirs)
    tree = build_category_tree(metadata)
    typer.echo(format_categories(tree, real_category_names(metadata)))


@app.command("local-wiki")
def local_wiki(
    ctx: typer.Context,
    location: Path = typer.Argument(..., help="Directory to write the pages to"),
    page_format: Optional[PageFormat] = typer.Option(
        None,
        "--format",
        "-f",
        help="Output format [default: plain-text]",
    ),
    workers: Optional[int] = typer.Option(
        None,
        "--workers",
        "-w",
        min=1,
        help="Number of concurrent workers [default: number of CPU cores]",
    ),
    override: Optional[bool] = typer.Option(
        None,
        "--override/--no-override",
        "-o",
        help="Overwrite pages that already exist",
    ),
    show_urls: Optional[bool] = typer.Option(
        None, "--show-urls/--hide-urls", "-s", help="Keep link targets"
    ),
    hide_progress: Optional[bool] = typer.Option(
        None, "--hide-progress/--show-progress", "-H", help="No progress bars"
    ),
    require_fresh_dir: Optional[bool] = typer.Option(
        None,
        "--require-fresh-dir/--allow-existing-dir",
        help="Fail if the location already exists",
    ),
):
    """
    Download every page of the wiki into LOCATION.

    Pages are written to LOCATION/<category>/<page>. Pages that fail are
    listed in an error log; they don't change the exit status.
    """
    settings: AppConfig = ctx.obj
    dirs = settings.dirs
    defaults = settings.mirror
    tree = _load_wiki_tree(dirs)

    try:
        report = asyncio.run(
            mirror(
                tree,
                defaults.format if page_format is None else page_format,
                location,
                dirs.log_dir,
                workers=workers or defaults.workers,
                override_existing=defaults.override_existing if override is None else override,
                show_urls=defaults.show_urls if show_urls is None else show_urls,
                hide_progress=defaults.hide_progress if hide_progress is None else hide_progress,
                require_fresh_dir=(
                    defaults.require_fresh_dir if require_fresh_dir is None else require_fresh_dir
                ),
                fetcher_config=settings.fetcher,
                console=console,
            )
        )
    except KeyboardInterrupt:
        err_console.print("\n[yellow]Download cancelled.[/yellow]")
        raise typer.Exit(130)
    except WikiError as e:
        err_console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    if report.crashed:
        raise typer.Exit(1)


@app.command("info")
def info(ctx: typer.Context):
    """Show where cached pages, metadata and logs are stored."""
    dirs = ctx.obj.dirs
    console.print(f"cache directory: {dirs.cache_dir}")
    console.print(f"data directory:  {dirs.data_dir}")
    console.print(f"log directory:   {dirs.log_dir}")


if __name__ == "__main__":
    app()
