"""Pytest configuration for nxmodfetch tests."""
import asyncio
from pathlib import Path

import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer


def serve(app: web.Application, func):
    """Start ``app`` on a local port, await ``func(server)`` and return its result."""

    async def runner():
        async with TestServer(app) as server:
            return await func(server)

    return asyncio.run(runner())


def tree_item(path, kind="blob", size=12):
    item = {
        "path": path,
        "mode": "100644" if kind == "blob" else "040000",
        "type": kind,
        "sha": "0" * 40,
        "url": f"https://api.github.com/repos/o/r/git/blobs/{path}",
    }
    if kind == "blob":
        item["size"] = size
    return item


@pytest.fixture
def tree_body():
    return {
        "sha": "abc123",
        "url": "https://api.github.com/repos/o/r/git/trees/abc123",
        "truncated": False,
        "tree": [
            tree_item("README.md"),
            tree_item("mods", kind="tree"),
            tree_item("mods/Zelda/[0100ABCD00000000]/1.0.0/romfs/file.bin"),
            tree_item("mods/Zelda/[0100ABCD00000000]/x.x.x/60fps/exefs/main.pchtxt"),
            tree_item("mods/Mario/[0100EEEE00000000]/1.2.0/Hd Mod/romfs/a.bin"),
        ],
    }


@pytest.fixture
def emulator_dirs(tmp_path: Path):
    """A fake yuzu install: config with load_directory, cache with version files."""
    from nxmodfetch.services import EmulatorDirs

    dirs = EmulatorDirs(
        cache_dir=tmp_path / "cache" / "yuzu",
        config_dir=tmp_path / "config" / "yuzu",
        data_dir=tmp_path / "data" / "yuzu",
    )
    for d in (dirs.cache_dir / "game_list", dirs.config_dir, dirs.data_dir):
        d.mkdir(parents=True)
    load_dir = tmp_path / "load"
    load_dir.mkdir()
    dirs.config_file.write_text(f"[Data%20Storage]\nload_directory={load_dir}\n")
    return dirs
