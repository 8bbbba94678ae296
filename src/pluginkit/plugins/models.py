"""Plugin facets: InstalledPlugin, AvailablePlugin, and plugin errors."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

MANIFEST_NAME = "plugin.json"


class PluginError(Exception):
    """A lifecycle operation was refused or could not complete."""


class NotAvailableError(PluginError):
    def __init__(self, name: str | None = None):
        super().__init__(f"not an available plugin: {name}" if name else "not an available plugin")
        self.name = name


class NotInstalledError(PluginError):
    def __init__(self, name: str | None = None):
        super().__init__(f"not an installed plugin: {name}" if name else "not an installed plugin")
        self.name = name


class CatalogError(PluginError):
    """The catalog document could not be read or decoded."""


@dataclass
class InstalledPlugin:
    """A plugin directory found under the install root."""

    name: str
    version: str = ""
    root: Path = Path(".")

    @property
    def path(self) -> Path:
        return self.root / self.name


@dataclass
class AvailablePlugin:
    """A catalog entry describing a downloadable plugin package."""

    name: str
    version: str = ""
    homepage: str = ""
    short_description: str = ""
    description: str = ""
    icon_url: str | None = None
    download_url: str = ""
    root: Path = Path(".")  # install root the package unpacks into

    def download(self) -> InstalledPlugin:
        """Fetch the package archive and unpack it to ``root/name``."""
        from pluginkit.core.utils import download

        from .lifecycle import install_archive

        if not self.download_url:
            raise PluginError(f"no download url for plugin: {self.name}")
        data = download(self.download_url)
        return install_archive(data, self.root, self.name, self.version)
