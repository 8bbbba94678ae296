"""Plugin catalog: parse catalog.json into AvailablePlugin entries.

A catalog is a JSON document of the form::

    {"name": "official", "plugins": [{"name": "...", "version": "...", ...}]}

It is read from a URL, a ``file://`` URL, or a plain path.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any

from pluginkit.core.utils import download

from .models import AvailablePlugin, CatalogError

if TYPE_CHECKING:
    from pluginkit.core.config import Config

logger = logging.getLogger(__name__)


def _field(entry: dict, *keys: str) -> str:
    for key in keys:
        val = entry.get(key)
        if isinstance(val, str) and val:
            return val
    return ""


def parse_catalog(data: Any, root: Path) -> list[AvailablePlugin]:
    """Build AvailablePlugin entries from a decoded catalog document."""
    if not isinstance(data, dict):
        raise CatalogError("catalog must be a JSON object")
    entries = data.get("plugins", [])
    if not isinstance(entries, list):
        raise CatalogError("catalog 'plugins' must be a list")

    plugins: list[AvailablePlugin] = []
    seen: set[str] = set()
    for entry in entries:
        if not isinstance(entry, dict):
            continue
        name = _field(entry, "name")
        if not name:
            continue
        if name in seen:
            logger.debug("skipping duplicate catalog entry %s", name)
            continue
        seen.add(name)
        plugins.append(
            AvailablePlugin(
                name=name,
                version=str(entry.get("version", "") or ""),
                homepage=_field(entry, "homepage"),
                short_description=_field(entry, "short_description", "shortDescription"),
                description=_field(entry, "description"),
                icon_url=_field(entry, "icon_url", "icon") or None,
                download_url=_field(entry, "download_url", "url"),
                root=root,
            )
        )
    return plugins


def load_catalog(config: Config) -> list[AvailablePlugin]:
    """Fetch and parse the configured catalog. No catalog configured -> []."""
    if not config.catalog_url:
        return []
    logger.debug("fetching catalog %s", config.catalog_url)
    raw = download(config.catalog_url)
    try:
        data = json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise CatalogError(f"invalid catalog {config.catalog_url}: {e}") from e
    return parse_catalog(data, config.install_root)
