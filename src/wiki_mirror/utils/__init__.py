"""Utility functions and classes."""

from wiki_mirror.utils.filename import page_path, to_save_file_name
from wiki_mirror.utils.html import update_relative_urls

__all__ = [
    "page_path",
    "to_save_file_name",
    "update_relative_urls",
]
