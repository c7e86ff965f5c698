"""URL helpers for fetched wiki HTML."""

import re
from urllib.parse import urlparse

# Root-relative hrefs only; protocol-relative ("//host/...") links are left alone
_ROOT_RELATIVE_HREF = re.compile(r'href="/(?!/)')


def site_root(url: str) -> str:
    """Scheme and host of a URL, e.g. ``https://wiki.archlinux.org``."""
    parsed = urlparse(url)
    return f"{parsed.scheme}://{parsed.netloc}"


def update_relative_urls(html: str, base_url: str) -> str:
    """Rewrite root-relative links to absolute ones.

    ``/title/Neovim`` becomes ``https://wiki.archlinux.org/title/Neovim``.
    """
    root = site_root(base_url)
    return _ROOT_RELATIVE_HREF.sub(lambda _m: f'href="{root}/', html)
