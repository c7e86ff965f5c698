"""Filesystem-safe names for page titles and categories."""

import hashlib
from pathlib import Path

from wiki_mirror.config import PageFormat

# Bytes, leaves room for an extension and a digest suffix below the usual
# 255 byte limit of common filesystems.
MAX_NAME_BYTES = 200

_RESERVED = set('%/\\:*?"<>|')


def _encode_char(char: str) -> str:
    return "".join(f"%{b:02X}" for b in char.encode("utf-8"))


def to_save_file_name(name: str) -> str:
    """Percent-encode characters that are unsafe in a file name.

    Distinct names map to distinct file names as long as the encoded name
    fits in ``MAX_NAME_BYTES``. The empty name becomes a lone ``%``. Longer
    names are cut and suffixed with a digest of the full name, so two names
    that share a long prefix can in principle collide.
    """
    encoded = "".join(
        _encode_char(c) if c in _RESERVED or ord(c) < 0x20 or ord(c) == 0x7F else c
        for c in name
    )
    if encoded.startswith("."):
        encoded = "%2E" + encoded[1:]
    if not encoded:
        # A lone "%" is never produced for a non-empty name
        encoded = "%"

    raw = encoded.encode("utf-8")
    if len(raw) <= MAX_NAME_BYTES:
        return encoded

    digest = hashlib.sha1(name.encode("utf-8")).hexdigest()[:12]
    head = raw[: MAX_NAME_BYTES - len(digest) - 1].decode("utf-8", errors="ignore")
    # Never cut an escape sequence in half
    cut = head.rfind("%")
    if cut != -1 and cut > len(head) - 3:
        head = head[:cut]
    return f"{head}~{digest}"


def page_path(title: str, page_format: PageFormat, parent_dir: Path) -> Path:
    """Path of a rendered page below ``parent_dir``."""
    name = to_save_file_name(title)
    if page_format.extension:
        name = f"{name}.{page_format.extension}"
    return parent_dir / name
