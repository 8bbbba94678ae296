"""Plugin lifecycle: unpack archives, merge facets into records, look up plugins."""

from __future__ import annotations

import io
import json
import shutil
import tempfile
import zipfile
from pathlib import Path
from typing import TYPE_CHECKING

from .catalog import load_catalog
from .loader import list_installed, load_installed
from .models import MANIFEST_NAME, AvailablePlugin, InstalledPlugin, PluginError
from .record import PluginRecord

if TYPE_CHECKING:
    from pluginkit.core.config import Config


def _check_members(zf: zipfile.ZipFile, dest: Path) -> None:
    base = dest.resolve()
    for member in zf.namelist():
        target = (base / member).resolve()
        if base not in target.parents and target != base:
            raise PluginError(f"archive member escapes install directory: {member!r}")


def _package_root(extracted: Path) -> Path:
    """Strip a single top-level directory (``name-1.0/...``) if there is one."""
    children = list(extracted.iterdir())
    if len(children) == 1 and children[0].is_dir():
        return children[0]
    return extracted


def install_archive(data: bytes, root: Path, name: str, version: str = "") -> InstalledPlugin:
    """Unpack a zip archive to ``root/name``, replacing any previous install."""
    if not name or name in (".", "..") or Path(name).name != name:
        raise PluginError(f"invalid plugin name: {name!r}")
    root.mkdir(parents=True, exist_ok=True)
    dest = root / name
    # dot-prefixed so a half-finished install is never listed as a plugin
    with tempfile.TemporaryDirectory(prefix=f".{name}-", dir=root) as tmp:
        extracted = Path(tmp) / "extracted"
        extracted.mkdir()
        with zipfile.ZipFile(io.BytesIO(data)) as zf:
            _check_members(zf, extracted)
            zf.extractall(extracted)
        # macOS resource forks are never part of a plugin
        shutil.rmtree(extracted / "__MACOSX", ignore_errors=True)
        source = _package_root(extracted)
        if dest.exists():
            shutil.rmtree(dest)
        shutil.move(str(source), str(dest))

    manifest = dest / MANIFEST_NAME
    if not manifest.exists():
        manifest.write_text(json.dumps({"name": name, "version": version}, indent=2) + "\n")
    installed = load_installed(root, name)
    if installed is None:
        raise PluginError(f"install of {name} did not produce {dest}")
    return installed


def merge_plugins(
    installed: list[InstalledPlugin],
    available: list[AvailablePlugin],
) -> list[PluginRecord]:
    """Pair installed and catalog facets by name, sorted by name."""
    by_name: dict[str, dict] = {}
    for i in installed:
        by_name.setdefault(i.name, {})["installed"] = i
    for a in available:
        by_name.setdefault(a.name, {})["available"] = a
    return [PluginRecord(**by_name[name]) for name in sorted(by_name)]


def list_plugins(config: Config) -> list[PluginRecord]:
    return merge_plugins(list_installed(config), load_catalog(config))


def find_plugin(config: Config, name: str) -> PluginRecord | None:
    for record in list_plugins(config):
        if record.name() == name:
            return record
    return None
