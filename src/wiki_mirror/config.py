"""Configuration management with Pydantic models."""

import os
import tomllib
from enum import Enum
from pathlib import Path

import typer
from pydantic import BaseModel, Field

APP_NAME = "wiki-mirror"

CACHE_TTL_SECONDS = 1_209_600  # 14 days


class PageFormat(str, Enum):
    """Output format of a rendered page."""

    PLAIN_TEXT = "plain-text"
    MARKDOWN = "markdown"
    HTML = "html"

    @property
    def extension(self) -> str:
        return _EXTENSIONS[self]


_EXTENSIONS: dict[PageFormat, str] = {
    PageFormat.PLAIN_TEXT: "",
    PageFormat.MARKDOWN: "md",
    PageFormat.HTML: "html",
}


def default_worker_count() -> int:
    """Number of CPU cores, never less than one."""
    return max(os.cpu_count() or 1, 1)


class FetcherConfig(BaseModel):
    """Configuration for talking to the wiki."""

    base_url: str = "https://wiki.archlinux.org"
    lang: str = "en"
    timeout_ms: int = Field(default=30000, ge=1000, le=120000)
    user_agent: str = "WikiMirror/0.1 (+https://github.com/wiki-mirror)"
    max_retries: int = Field(default=3, ge=0, le=10)
    retry_base_delay: float = Field(default=1.0, ge=0.0, le=30.0)


class MirrorConfig(BaseModel):
    """Configuration for a bulk mirror run."""

    format: PageFormat = PageFormat.PLAIN_TEXT
    destination: Path = Path("./wiki")
    workers: int = Field(default_factory=default_worker_count, ge=1)
    override_existing: bool = False
    show_urls: bool = False
    hide_progress: bool = False
    require_fresh_dir: bool = False


class CacheConfig(BaseModel):
    """Configuration for the single-page cache."""

    disable_invalidation: bool = False
    ttl_seconds: int = Field(default=CACHE_TTL_SECONDS, ge=0)


class AppDirs(BaseModel):
    """Directories used for cached pages, metadata and logs."""

    cache_dir: Path
    data_dir: Path
    log_dir: Path

    @classmethod
    def default(cls) -> "AppDirs":
        """Resolve the per-user application directory once."""
        root = Path(typer.get_app_dir(APP_NAME))
        data_dir = root / "data"
        return cls(
            cache_dir=root / "cache",
            data_dir=data_dir,
            log_dir=data_dir / "logs",
        )

    @property
    def metadata_path(self) -> Path:
        return self.data_dir / "pages.json"


class AppConfig(BaseModel):
    """Main application configuration."""

    dirs: AppDirs = Field(default_factory=lambda: AppDirs.default())
    fetcher: FetcherConfig = Field(default_factory=FetcherConfig)
    mirror: MirrorConfig = Field(default_factory=MirrorConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    verbose: bool = False

    @classmethod
    def from_toml(cls, path: Path) -> "AppConfig":
        """Load config from a TOML file."""
        with open(path, "rb") as f:
            data = tomllib.load(f)
        return cls.model_validate(data)

