from aiohttp import web

from conftest import serve
from nxmodfetch.models import AppConfig
from nxmodfetch.orchestrator import ModDownloaderOrchestrator
from nxmodfetch.services import GitHubClient

ZELDA = "0100ABCD00000000"
MARIO = "0100EEEE00000000"


def repo_app(tree_body, raw_requests):
    async def tree(request):
        return web.json_response(tree_body)

    async def raw(request):
        raw_requests.append(request.match_info["tail"])
        return web.Response(body=b"mod data")

    app = web.Application()
    app.router.add_get("/api/repos/{owner}/{name}/git/trees/{branch}", tree)
    app.router.add_get("/raw/{tail:.+}", raw)
    return app


def test_read_and_download(tree_body, emulator_dirs, tmp_path):
    load = tmp_path / "load"
    for title_id in (ZELDA, MARIO, "0100FFFF00000000"):
        (load / title_id).mkdir()
    (emulator_dirs.cache_dir / "game_list" / f"{MARIO}.pv.txt").write_text("Update (1.2.0)\n")
    raw_requests = []

    async def run(server):
        client = GitHubClient(
            api_url=str(server.make_url("/api")),
            raw_url=str(server.make_url("/raw")),
        )
        config = AppConfig(repository="o/r")
        async with ModDownloaderOrchestrator(config, dirs=emulator_dirs, client=client) as orch:
            games = await orch.read_game_titles()
            report = await orch.download_mods(games)
        return games, report

    games, report = serve(repo_app(tree_body, raw_requests), run)

    assert [(g.title_id, g.title_name, g.title_version) for g in games] == [
        (ZELDA, "Zelda", None),
        (MARIO, "Mario", "1.2.0"),
    ]
    assert [e.mod_relative_path for e in games[0].mod_download_entries] == [
        "romfs/file.bin",
        "60fps/exefs/main.pchtxt",
    ]
    assert games[1].mod_download_entries[0].download_url.endswith(
        "/raw/o/r/refs/heads/master/mods/Mario/[0100EEEE00000000]/1.2.0/Hd Mod/romfs/a.bin"
    )

    assert len(report.completed) == 3
    assert (load / ZELDA / "romfs" / "file.bin").read_bytes() == b"mod data"
    assert (load / ZELDA / "60fps" / "exefs" / "main.pchtxt").exists()
    assert (load / MARIO / "Hd Mod" / "romfs" / "a.bin").exists()
    assert "o/r/refs/heads/master/mods/Mario/[0100EEEE00000000]/1.2.0/Hd Mod/romfs/a.bin" in raw_requests


def test_updated_title_has_no_base_version_mods(tree_body, emulator_dirs, tmp_path):
    (tmp_path / "load" / ZELDA).mkdir()
    (emulator_dirs.cache_dir / "game_list" / f"{ZELDA}.pv.txt").write_text("Update (2.0.0)\n")
    raw_requests = []

    async def run(server):
        client = GitHubClient(api_url=str(server.make_url("/api")))
        async with ModDownloaderOrchestrator(
            AppConfig(repository="o/r"), dirs=emulator_dirs, client=client
        ) as orch:
            return await orch.read_game_titles()

    games = serve(repo_app(tree_body, raw_requests), run)

    assert [e.mod_relative_path for e in games[0].mod_download_entries] == [
        "60fps/exefs/main.pchtxt"
    ]
