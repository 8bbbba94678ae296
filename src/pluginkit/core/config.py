"""Configuration: env, paths, catalog."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv


@dataclass
class Config:
    global_dir: Path = field(default_factory=lambda: Path.home() / ".pluginkit")
    plugin_dir: Path | None = None  # explicit override; None = global_dir/plugins
    catalog_url: str = ""
    verbose: bool = False

    @property
    def install_root(self) -> Path:
        if self.plugin_dir is not None:
            return self.plugin_dir
        return self.global_dir / "plugins"

    @property
    def settings_path(self) -> Path:
        return self.global_dir / "settings.json"


def _read_settings(path: Path) -> dict:
    if not path.exists():
        return {}
    try:
        data = json.loads(path.read_text())
    except (json.JSONDecodeError, OSError):
        return {}
    return data if isinstance(data, dict) else {}


def _apply_settings(config: Config, path: Path) -> None:
    """Apply a single settings.json file to config."""
    data = _read_settings(path)
    if plugin_dir := data.get("pluginDir"):
        config.plugin_dir = Path(plugin_dir).expanduser()
    if catalog_url := data.get("catalogUrl"):
        config.catalog_url = catalog_url


def load_config(
    plugin_dir: str | Path | None = None,
    catalog_url: str | None = None,
    verbose: bool = False,
) -> Config:
    """Load config with priority: CLI args > env > .env > settings.json > defaults."""
    load_dotenv()

    config = Config()
    config.verbose = verbose

    _apply_settings(config, config.settings_path)

    if env_dir := os.getenv("PLUGINKIT_PLUGIN_DIR"):
        config.plugin_dir = Path(env_dir).expanduser()
    if env_catalog := os.getenv("PLUGINKIT_CATALOG_URL"):
        config.catalog_url = env_catalog

    if plugin_dir:
        config.plugin_dir = Path(plugin_dir).expanduser()
    if catalog_url:
        config.catalog_url = catalog_url

    return config
