"""Byte fetching and display helpers."""

from __future__ import annotations

import urllib.parse
import urllib.request
from pathlib import Path

USER_AGENT = "pluginkit/0.1"
MAX_DOWNLOAD_BYTES = 64 * 1024 * 1024  # 64MB

_SIZE_UNITS = ("KB", "MB", "GB", "TB")


def download(url: str, timeout: float = 30) -> bytes:
    """Fetch *url* and return the raw body.

    Plain paths and ``file://`` URLs are read from disk. Network, HTTP and
    filesystem errors propagate to the caller unchanged. Remote bodies larger
    than ``MAX_DOWNLOAD_BYTES`` raise ``OSError`` instead of being cut short.
    """
    parsed = urllib.parse.urlparse(url)
    if parsed.scheme == "file":
        return Path(urllib.request.url2pathname(parsed.path)).read_bytes()
    if "://" not in url:
        return Path(url).expanduser().read_bytes()

    req = urllib.request.Request(url, headers={"User-Agent": USER_AGENT})
    with urllib.request.urlopen(req, timeout=timeout) as resp:
        body = resp.read(MAX_DOWNLOAD_BYTES + 1)
    if len(body) > MAX_DOWNLOAD_BYTES:
        raise OSError(f"download exceeds {human_size(MAX_DOWNLOAD_BYTES)}: {url}")
    return body


def human_size(size: int) -> str:
    """Format a byte count, e.g. ``500B`` or ``2.0KB``."""
    if abs(size) < 1024:
        return f"{size}B"
    value = size / 1024
    for unit in _SIZE_UNITS[:-1]:
        if abs(value) < 1024:
            return f"{value:.1f}{unit}"
        value /= 1024
    return f"{value:.1f}{_SIZE_UNITS[-1]}"


def short_path(p: Path) -> str:
    """Abbreviate the home directory to ``~`` for display."""
    home = Path.home()
    if p == home:
        return "~"
    if home in p.parents:
        return "~/" + p.relative_to(home).as_posix()
    return str(p)
