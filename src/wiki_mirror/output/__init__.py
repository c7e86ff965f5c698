"""Output writers for mirrored pages."""

from wiki_mirror.output.local_wiki import (
    FAILURE_LOG_NAME,
    create_dir_if_not_exists,
    format_failure_log,
    write_failure_log,
    write_page,
)

__all__ = [
    "FAILURE_LOG_NAME",
    "create_dir_if_not_exists",
    "format_failure_log",
    "write_failure_log",
    "write_page",
]
