from pathlib import Path

import pytest

from nxmodfetch.exceptions import ConfigError, LocalDataNotFoundError
from nxmodfetch.services.local_titles import (
    LocalTitles,
    find_portable_dirs,
    get_dirs,
    read_lines,
)


def test_get_dirs_linux_uses_xdg(monkeypatch, tmp_path):
    monkeypatch.setenv("XDG_CACHE_HOME", str(tmp_path / "c"))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "cfg"))
    monkeypatch.delenv("XDG_DATA_HOME", raising=False)
    monkeypatch.setattr(Path, "home", classmethod(lambda cls: tmp_path / "home"))

    dirs = get_dirs("suyu", platform="linux")

    assert dirs.cache_dir == tmp_path / "c" / "suyu"
    assert dirs.config_dir == tmp_path / "cfg" / "suyu"
    assert dirs.data_dir == tmp_path / "home" / ".local" / "share" / "suyu"


def test_get_dirs_macos_uses_home_layout(monkeypatch, tmp_path):
    monkeypatch.setattr(Path, "home", classmethod(lambda cls: tmp_path))

    dirs = get_dirs("yuzu", platform="darwin")

    assert dirs.cache_dir == tmp_path / ".cache" / "yuzu"
    assert dirs.config_dir == tmp_path / ".config" / "yuzu"
    assert dirs.data_dir == tmp_path / ".local" / "share" / "yuzu"


def test_get_dirs_windows_uses_appdata(monkeypatch, tmp_path):
    monkeypatch.setenv("APPDATA", str(tmp_path / "Roaming"))
    monkeypatch.setenv("LOCALAPPDATA", str(tmp_path / "Local"))

    dirs = get_dirs("eden", platform="win32")

    assert dirs.cache_dir == tmp_path / "Local" / "eden"
    assert dirs.config_dir == tmp_path / "Roaming" / "eden"
    assert dirs.data_dir == tmp_path / "Roaming" / "eden"


def test_find_portable_dirs(tmp_path):
    assert find_portable_dirs(tmp_path) is None

    (tmp_path / "user" / "config").mkdir(parents=True)
    (tmp_path / "user" / "config" / "qt-config.ini").write_text("")

    dirs = find_portable_dirs(tmp_path)
    assert dirs.data_dir == tmp_path / "user"
    assert dirs.cache_dir == tmp_path / "user" / "cache"
    assert dirs.config_dir == tmp_path / "user" / "config"


def test_read_lines_strips_newlines(tmp_path):
    path = tmp_path / "a.txt"
    path.write_bytes(b"one\r\ntwo\n")

    assert list(read_lines(path)) == ["one", "two"]


def test_ensure_installed_lists_expected_paths(emulator_dirs, tmp_path):
    LocalTitles(emulator_dirs).ensure_installed()

    missing = LocalTitles(type(emulator_dirs)(tmp_path / "x", tmp_path / "y", tmp_path / "z"))
    with pytest.raises(LocalDataNotFoundError) as exc_info:
        missing.ensure_installed()
    assert exc_info.value.context == {
        "data": str(tmp_path / "z"),
        "config": str(tmp_path / "y"),
    }


def test_load_directory_from_config(emulator_dirs, tmp_path):
    assert LocalTitles(emulator_dirs).get_load_directory() == tmp_path / "load"


def test_empty_load_directory_defaults_to_nand(emulator_dirs):
    emulator_dirs.config_file.write_text("load_directory=\n")

    local = LocalTitles(emulator_dirs)

    assert local.get_load_directory() == emulator_dirs.data_dir / "nand"


def test_missing_load_directory_key_is_config_error(emulator_dirs):
    emulator_dirs.config_file.write_text("[UI]\nfoo=bar\n")

    with pytest.raises(ConfigError):
        LocalTitles(emulator_dirs).get_load_directory()


def test_unreadable_config_file(emulator_dirs):
    emulator_dirs.config_file.unlink()

    with pytest.raises(LocalDataNotFoundError):
        LocalTitles(emulator_dirs).get_load_directory()


def test_title_version_from_pv_file(emulator_dirs):
    game_list = emulator_dirs.cache_dir / "game_list"
    (game_list / "0100ABCD00000000.pv.txt").write_text("Mods\nUpdate (1.2.0)\nDLC\n")
    (game_list / "0100EEEE00000000.pv.txt").write_text("Mods\n")
    local = LocalTitles(emulator_dirs)

    assert local.get_title_version("0100ABCD00000000") == "1.2.0"
    assert local.get_title_version("0100EEEE00000000") is None
    assert local.get_title_version("0100FFFF00000000") is None


def test_list_title_ids_only_directories(emulator_dirs, tmp_path):
    load = tmp_path / "load"
    (load / "0100EEEE00000000").mkdir()
    (load / "0100ABCD00000000").mkdir()
    (load / "notes.txt").write_text("")

    assert LocalTitles(emulator_dirs).list_title_ids() == [
        "0100ABCD00000000",
        "0100EEEE00000000",
    ]


def test_list_title_ids_missing_load_directory(emulator_dirs, tmp_path):
    emulator_dirs.config_file.write_text(f"load_directory={tmp_path / 'nowhere'}\n")

    with pytest.raises(LocalDataNotFoundError):
        LocalTitles(emulator_dirs).list_title_ids()
