"""Result models of a mirror run."""

from pathlib import Path

from pydantic import BaseModel, Field


class FetchFailure(BaseModel):
    """A page that could not be fetched, rendered or written."""

    title: str
    error: str
    error_type: str = ""

    @classmethod
    def from_exception(cls, title: str, exc: BaseException) -> "FetchFailure":
        return cls(title=title, error=str(exc) or type(exc).__name__, error_type=type(exc).__name__)


class ChunkResult(BaseModel):
    """What one mirror worker did with its chunk."""

    attempted: int = 0
    succeeded: int = 0
    skipped: int = 0
    failures: list[FetchFailure] = Field(default_factory=list)

    @property
    def failed(self) -> int:
        return len(self.failures)


class CrashedChunk(BaseModel):
    """A worker task that raised instead of returning its results."""

    index: int
    categories: list[str]
    page_count: int
    error: str


class MirrorReport(BaseModel):
    """Aggregate outcome of a mirror run."""

    total_pages: int = 0
    attempted: int = 0
    succeeded: int = 0
    skipped: int = 0
    failures: list[FetchFailure] = Field(default_factory=list)
    crashed_chunks: list[CrashedChunk] = Field(default_factory=list)
    log_path: Path | None = None

    @property
    def failed(self) -> int:
        return len(self.failures)

    @property
    def crashed(self) -> bool:
        return bool(self.crashed_chunks)

    def merge(self, result: ChunkResult) -> None:
        self.attempted += result.attempted
        self.succeeded += result.succeeded
        self.skipped += result.skipped
        self.failures.extend(result.failures)
