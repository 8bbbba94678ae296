"""PluginRecord: one plugin seen through its installed and catalog facets."""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

from pluginkit.core.utils import download

from .models import AvailablePlugin, InstalledPlugin, NotAvailableError, NotInstalledError

logger = logging.getLogger(__name__)

# Possible icon names, in order of preference
ICON_NAMES = ("icon@2x.png", "icon@2x.jpg", "icon.png", "icon.jpg")


class PluginRecord:
    """A plugin that is installed, available from the catalog, or both.

    The two facets are expected to describe the same plugin; their names are
    not cross-checked. Only ``download()`` and ``remove()`` mutate a record.
    """

    def __init__(
        self,
        installed: InstalledPlugin | None = None,
        available: AvailablePlugin | None = None,
    ):
        if installed is None and available is None:
            raise ValueError("a plugin record needs an installed or an available facet")
        self.installed = installed
        self.available = available

    def __repr__(self) -> str:
        return f"PluginRecord(installed={self.installed!r}, available={self.available!r})"

    def is_installed(self) -> bool:
        return self.installed is not None

    def is_available(self) -> bool:
        return self.available is not None

    def name(self) -> str:
        """Return the installed name, falling back to the catalog name.

        A record with neither facet only exists after ``remove()`` on an
        installed-only record; asking it for a name is a caller bug.
        """
        name = self._known_name()
        if name is not None:
            return name
        raise RuntimeError("plugin record is neither installed nor available")

    def _known_name(self) -> str | None:
        if self.installed is not None:
            return self.installed.name
        return self.available.name if self.available is not None else None

    def path(self) -> Path | None:
        """Return the install directory, if installed."""
        if self.installed is None:
            return None
        return self.installed.path

    def homepage(self) -> str | None:
        return self.available.homepage if self.available is not None else None

    def short_description(self) -> str | None:
        return self.available.short_description if self.available is not None else None

    def description(self) -> str | None:
        return self.available.description if self.available is not None else None

    def versions(self) -> tuple[str | None, str | None]:
        """Return the (installed, available) versions, if known."""
        return (
            self.installed.version if self.installed is not None else None,
            self.available.version if self.available is not None else None,
        )

    def retrieve_icon(self) -> bytes | None:
        """Return icon bytes from the install directory or the catalog icon url."""
        if self.installed is not None:
            for icon_name in ICON_NAMES:
                icon_path = self.installed.path / icon_name
                if icon_path.exists():
                    try:
                        return icon_path.read_bytes()
                    except OSError as e:
                        logger.debug("unreadable icon %s: %s", icon_path, e)
                        return None
        if self.available is not None and self.available.icon_url:
            try:
                return download(self.available.icon_url)
            except Exception as e:
                logger.debug("icon fetch failed for %s: %s", self.available.name, e)
                return None
        return None

    def download(self) -> None:
        """Download and install the plugin to ``<install root>/<name>``."""
        if self.available is None:
            raise NotAvailableError(self._known_name())
        self.installed = self.available.download()

    def remove(self) -> None:
        """Delete the install directory and drop the installed facet."""
        path = self.path()
        if path is None:
            raise NotInstalledError(self._known_name())
        logger.info("Removing %s", path)
        shutil.rmtree(path)
        self.installed = None
