"""Writers for the on-disk mirror and its failure log."""

from pathlib import Path

import aiofiles  # type: ignore[import-untyped]

from wiki_mirror.errors import WikiIOError
from wiki_mirror.models import FetchFailure

FAILURE_LOG_NAME = "mirror-errors.log"


def create_dir_if_not_exists(path: Path) -> None:
    """Create a single directory; an existing one is not an error."""
    try:
        path.mkdir(exist_ok=True)
    except FileExistsError as e:
        # exist_ok only covers directories, not files in the way
        raise WikiIOError(f"'{path}' exists and is not a directory") from e
    except OSError as e:
        raise WikiIOError(f"failed to create directory '{path}': {e}") from e


async def write_page(path: Path, content: str) -> None:
    """Write one rendered page, replacing any previous copy."""
    async with aiofiles.open(path, "w", encoding="utf-8") as f:
        await f.write(content)


def format_failure_log(failures: list[FetchFailure]) -> str:
    return "\n\n".join(
        f"failed to fetch page '{failure.title}'\nREASON: {failure.error}"
        for failure in failures
    )


async def write_failure_log(failures: list[FetchFailure], log_dir: Path) -> Path:
    """Write all page failures of a mirror run to ``log_dir``."""
    try:
        log_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise WikiIOError(f"failed to create log directory '{log_dir}': {e}") from e

    path = log_dir / FAILURE_LOG_NAME
    try:
        async with aiofiles.open(path, "w", encoding="utf-8") as f:
            await f.write(format_failure_log(failures))
    except OSError as e:
        raise WikiIOError(f"failed to write failure log '{path}': {e}") from e
    return path
