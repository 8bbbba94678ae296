"""Tests for lifecycle: archive install, facet merging, plugin lookup."""

import io
import json
import zipfile
from unittest.mock import patch

import pytest

from pluginkit.core.config import Config
from pluginkit.plugins import (
    AvailablePlugin,
    InstalledPlugin,
    PluginError,
    find_plugin,
    install_archive,
    list_plugins,
    merge_plugins,
)


def _zip(files: dict[str, str]) -> bytes:
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w") as zf:
        for name, content in files.items():
            zf.writestr(name, content)
    return buf.getvalue()


def _write_catalog(path, plugins):
    path.write_text(json.dumps({"name": "test", "plugins": plugins}))
    return str(path)


class TestInstallArchive:
    def test_strips_single_top_level_dir(self, tmp_path):
        data = _zip({"weather-1.2/main.py": "x", "weather-1.2/icon.png": "png"})
        inst = install_archive(data, tmp_path, "weather", "1.2")
        assert inst.path == tmp_path / "weather"
        assert (tmp_path / "weather" / "main.py").exists()
        assert (tmp_path / "weather" / "icon.png").exists()

    def test_flat_archive(self, tmp_path):
        data = _zip({"main.py": "x", "README": "hi"})
        install_archive(data, tmp_path, "weather")
        assert (tmp_path / "weather" / "main.py").exists()
        assert (tmp_path / "weather" / "README").exists()

    def test_drops_macosx_from_flat_archive(self, tmp_path):
        data = _zip({"main.py": "x", "__MACOSX/._main.py": "fork"})
        install_archive(data, tmp_path, "weather")
        assert (tmp_path / "weather" / "main.py").exists()
        assert not (tmp_path / "weather" / "__MACOSX").exists()

    def test_drops_macosx_beside_top_level_dir(self, tmp_path):
        data = _zip({"weather-1.2/main.py": "x", "__MACOSX/weather-1.2/._main.py": "fork"})
        install_archive(data, tmp_path, "weather")
        assert sorted(p.name for p in (tmp_path / "weather").iterdir()) == ["main.py", "plugin.json"]

    def test_writes_manifest_when_missing(self, tmp_path):
        inst = install_archive(_zip({"main.py": "x"}), tmp_path, "weather", "1.2")
        manifest = json.loads((tmp_path / "weather" / "plugin.json").read_text())
        assert manifest == {"name": "weather", "version": "1.2"}
        assert inst.version == "1.2"

    def test_keeps_archive_manifest(self, tmp_path):
        data = _zip({"plugin.json": json.dumps({"name": "weather", "version": "1.3-beta"})})
        inst = install_archive(data, tmp_path, "weather", "1.2")
        assert inst.version == "1.3-beta"

    def test_replaces_existing_install(self, tmp_path):
        (tmp_path / "weather").mkdir()
        (tmp_path / "weather" / "old.txt").write_text("old")
        install_archive(_zip({"new.txt": "new"}), tmp_path, "weather")
        assert not (tmp_path / "weather" / "old.txt").exists()
        assert (tmp_path / "weather" / "new.txt").exists()

    def test_creates_root(self, tmp_path):
        root = tmp_path / "does" / "not" / "exist"
        install_archive(_zip({"a": "a"}), root, "weather")
        assert (root / "weather" / "a").exists()

    def test_no_leftover_temp_dirs(self, tmp_path):
        install_archive(_zip({"a": "a"}), tmp_path, "weather")
        assert sorted(p.name for p in tmp_path.iterdir()) == ["weather"]

    def test_bad_archive_keeps_existing_install(self, tmp_path):
        (tmp_path / "weather").mkdir()
        (tmp_path / "weather" / "keep.txt").write_text("keep")
        with pytest.raises(zipfile.BadZipFile):
            install_archive(b"not a zip", tmp_path, "weather")
        assert (tmp_path / "weather" / "keep.txt").exists()

    def test_rejects_path_traversal(self, tmp_path):
        root = tmp_path / "plugins"
        with pytest.raises(PluginError, match="escapes"):
            install_archive(_zip({"../evil.txt": "x"}), root, "weather")
        assert not (tmp_path / "evil.txt").exists()

    @pytest.mark.parametrize("name", ["", "..", "a/b"])
    def test_rejects_bad_names(self, tmp_path, name):
        with pytest.raises(PluginError, match="invalid plugin name"):
            install_archive(_zip({"a": "a"}), tmp_path, name)


class TestAvailableDownload:
    def test_fetches_download_url(self, tmp_path):
        a = AvailablePlugin(name="weather", version="1.0", download_url="https://x/w.zip", root=tmp_path)
        with patch("pluginkit.core.utils.download", return_value=_zip({"a": "a"})) as dl:
            inst = a.download()
        dl.assert_called_once_with("https://x/w.zip")
        assert inst == InstalledPlugin(name="weather", version="1.0", root=tmp_path)

    def test_missing_download_url(self, tmp_path):
        a = AvailablePlugin(name="weather", root=tmp_path)
        with pytest.raises(PluginError, match="no download url"):
            a.download()


class TestMergePlugins:
    def test_pairs_by_name(self, tmp_path):
        installed = [InstalledPlugin(name="b", version="1", root=tmp_path)]
        available = [
            AvailablePlugin(name="a", version="1", root=tmp_path),
            AvailablePlugin(name="b", version="2", root=tmp_path),
        ]
        records = merge_plugins(installed, available)
        assert [r.name() for r in records] == ["a", "b"]
        assert records[0].versions() == (None, "1")
        assert records[1].versions() == ("1", "2")

    def test_installed_only_entries_kept(self, tmp_path):
        records = merge_plugins([InstalledPlugin(name="manual", root=tmp_path)], [])
        assert len(records) == 1
        assert records[0].is_installed()
        assert not records[0].is_available()

    def test_empty(self):
        assert merge_plugins([], []) == []


class TestListAndFind:
    def test_list_merges_disk_and_catalog(self, tmp_path):
        root = tmp_path / "plugins"
        (root / "clock").mkdir(parents=True)
        (root / "manual").mkdir()
        catalog = _write_catalog(
            tmp_path / "catalog.json",
            [{"name": "clock", "version": "2"}, {"name": "weather", "version": "1"}],
        )
        config = Config(global_dir=tmp_path, plugin_dir=root, catalog_url=catalog)
        records = list_plugins(config)
        by_name = {r.name(): r for r in records}
        assert sorted(by_name) == ["clock", "manual", "weather"]
        assert by_name["clock"].is_installed() and by_name["clock"].is_available()
        assert not by_name["manual"].is_available()
        assert not by_name["weather"].is_installed()

    def test_find_plugin(self, tmp_path):
        catalog = _write_catalog(tmp_path / "catalog.json", [{"name": "clock"}])
        config = Config(global_dir=tmp_path, plugin_dir=tmp_path / "plugins", catalog_url=catalog)
        assert find_plugin(config, "clock").is_available()
        assert find_plugin(config, "missing") is None

    def test_catalog_entries_install_into_config_root(self, tmp_path):
        root = tmp_path / "plugins"
        catalog = _write_catalog(
            tmp_path / "catalog.json",
            [{"name": "clock", "version": "2", "download_url": "https://x/clock.zip"}],
        )
        config = Config(global_dir=tmp_path, plugin_dir=root, catalog_url=catalog)
        record = find_plugin(config, "clock")
        with patch("pluginkit.core.utils.download", return_value=_zip({"a": "a"})):
            record.download()
        assert record.path() == root / "clock"
        assert find_plugin(config, "clock").versions() == ("2", "2")
