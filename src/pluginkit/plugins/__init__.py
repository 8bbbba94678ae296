"""Plugins: installed/available facets, merged records, lifecycle management."""

from .catalog import load_catalog, parse_catalog
from .lifecycle import find_plugin, install_archive, list_plugins, merge_plugins
from .loader import list_installed, load_installed
from .models import (
    AvailablePlugin,
    CatalogError,
    InstalledPlugin,
    NotAvailableError,
    NotInstalledError,
    PluginError,
)
from .record import ICON_NAMES, PluginRecord

__all__ = [
    "ICON_NAMES",
    "AvailablePlugin",
    "CatalogError",
    "InstalledPlugin",
    "NotAvailableError",
    "NotInstalledError",
    "PluginError",
    "PluginRecord",
    "find_plugin",
    "install_archive",
    "list_installed",
    "list_plugins",
    "load_catalog",
    "load_installed",
    "merge_plugins",
    "parse_catalog",
]
