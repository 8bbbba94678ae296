"""Installed plugin scanner: load_installed, list_installed."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import TYPE_CHECKING

from .models import MANIFEST_NAME, InstalledPlugin

if TYPE_CHECKING:
    from pluginkit.core.config import Config

logger = logging.getLogger(__name__)


def _read_manifest(path: Path) -> dict:
    if not path.exists():
        return {}
    try:
        data = json.loads(path.read_text())
    except (json.JSONDecodeError, OSError) as e:
        logger.warning("ignoring unreadable manifest %s: %s", path, e)
        return {}
    return data if isinstance(data, dict) else {}


def load_installed(root: Path, name: str) -> InstalledPlugin | None:
    """Load the plugin installed at ``root/name``, or None if absent."""
    plugin_dir = root / name
    if not plugin_dir.is_dir():
        return None
    manifest = _read_manifest(plugin_dir / MANIFEST_NAME)
    declared = manifest.get("name")
    if declared and declared != name:
        # the directory name is what the install path is derived from
        logger.debug("manifest name %r differs from directory %r", declared, name)
    version = manifest.get("version", "")
    return InstalledPlugin(name=name, version=str(version) if version else "", root=root)


def list_installed(config: Config) -> list[InstalledPlugin]:
    root = config.install_root
    plugins: list[InstalledPlugin] = []
    if not root.is_dir():
        return plugins
    for d in sorted(root.iterdir()):
        if not d.is_dir() or d.name.startswith("."):
            continue
        p = load_installed(root, d.name)
        if p is not None:
            plugins.append(p)
    return plugins
