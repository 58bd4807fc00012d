"""
CLI 模块

交互式命令行：选择模拟器与模组仓库，列出匹配结果，确认后下载。
"""

import asyncio
import json
from pathlib import Path
from typing import Optional, Sequence

import click
import toml
import yaml
from loguru import logger

from nxmodfetch import __version__
from nxmodfetch.exceptions import (
    ConfigParseError,
    DownloadError,
    LocalDataNotFoundError,
    NxModFetchError,
)
from nxmodfetch.logger import setup_logger
from nxmodfetch.models import EMULATORS, REPOSITORIES, AppConfig, Game
from nxmodfetch.orchestrator import ModDownloaderOrchestrator, find_portable


def load_config(config_path: str) -> dict:
    """加载配置文件（toml / json / yaml）"""
    path = Path(config_path)
    suffix = path.suffix.lower()

    try:
        if suffix == ".toml":
            data = toml.load(config_path)
        elif suffix == ".json":
            data = json.loads(path.read_text(encoding="utf-8"))
        elif suffix in (".yaml", ".yml"):
            data = yaml.safe_load(path.read_text(encoding="utf-8"))
        else:
            raise ConfigParseError(f"不支持的配置文件格式: {suffix}")
    except (toml.TomlDecodeError, json.JSONDecodeError, yaml.YAMLError) as e:
        raise ConfigParseError(
            f"配置文件解析失败: {e}", context={"path": config_path}
        ) from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigParseError("配置文件顶层必须是键值表", context={"path": config_path})
    return data


def choose(title: str, items: Sequence[str]) -> str:
    """显示编号菜单并读取选择，默认第一项"""
    click.echo()
    click.echo(f":: {title}:")
    for i, item in enumerate(items, start=1):
        click.echo(f"  {i}) {item}")

    choice = click.prompt(
        "Enter a number",
        default=1,
        type=click.IntRange(1, len(items)),
    )
    return items[choice - 1]


def print_games(games: Sequence[Game]):
    click.echo("Found mods for the following games:")
    for i, game in enumerate(games, start=1):
        click.echo(f"  {i}) {game.title_name}: {len(game.mod_names)} mods")


async def run_async(
    config: AppConfig,
    ask_repository: bool,
    assume_yes: bool,
    dry_run: bool,
):
    """异步运行"""
    if find_portable(config) is None and not config.emulator:
        config = config.merge(emulator=choose("Select emulator", EMULATORS))

    if ask_repository:
        config = config.merge(repository=choose("Select repository", REPOSITORIES))

    async with ModDownloaderOrchestrator(config) as orchestrator:
        games = await orchestrator.read_game_titles()

        click.echo()
        if not games:
            click.echo("No mod installation folders found on this system.")
            return

        games = [game for game in games if game.mod_download_entries]
        if not games:
            click.echo("No mods available for any installed game.")
            return

        print_games(games)

        if dry_run:
            logger.info("[干运行模式] 跳过下载")
            return

        click.echo()
        if not assume_yes and not click.confirm("Proceed with download?", default=True):
            click.echo("Operation canceled.")
            return

        await orchestrator.download_mods(games)
        click.echo("Operation successful.")


@click.command()
@click.option(
    "-c",
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False),
    help="配置文件 (.toml/.json/.yaml)",
)
@click.option("-e", "--emulator", type=click.Choice(EMULATORS), help="模拟器")
@click.option("-r", "--repo", "repository", help="模组仓库 (owner/name)")
@click.option("--branch", help="仓库分支")
@click.option("-j", "--max-concurrent", type=click.IntRange(min=1), help="最大并发下载数")
@click.option("--timeout", type=click.FloatRange(min=0, min_open=True), help="单个文件超时（秒）")
@click.option("--portable-dir", type=click.Path(file_okay=False), help="便携版所在目录")
@click.option("-y", "--yes", "assume_yes", is_flag=True, help="不询问直接下载")
@click.option("--dry-run", is_flag=True, help="只列出匹配结果，不下载")
@click.option("--debug", is_flag=True, help="启用调试模式")
@click.option("--log-file", type=click.Path(dir_okay=False), help="同时写入日志文件")
@click.version_option(version=__version__)
def main(
    config_path: Optional[str],
    emulator: Optional[str],
    repository: Optional[str],
    branch: Optional[str],
    max_concurrent: Optional[int],
    timeout: Optional[float],
    portable_dir: Optional[str],
    assume_yes: bool,
    dry_run: bool,
    debug: bool,
    log_file: Optional[str],
):
    """nxmodfetch - Switch 模拟器模组下载工具"""
    setup_logger(level="DEBUG" if debug else None, log_file=log_file)
    click.echo("=== Mod Downloader ===")

    try:
        file_config = load_config(config_path) if config_path else {}
        config = AppConfig.from_dict(file_config).merge(
            emulator=emulator,
            repository=repository,
            branch=branch,
            max_concurrent=max_concurrent,
            timeout=timeout,
            portable_dir=portable_dir,
        )
        ask_repository = repository is None and "repository" not in file_config

        asyncio.run(run_async(config, ask_repository, assume_yes, dry_run))

    except LocalDataNotFoundError as e:
        logger.error(str(e))
        for name, path in e.context.items():
            click.echo(f"  {name}: {path}", err=True)
        raise click.ClickException(e.message)
    except DownloadError as e:
        for failure in e.context.get("failures", []):
            click.echo(f"  {failure['path']}: {failure['error']}", err=True)
        raise click.ClickException(e.message)
    except NxModFetchError as e:
        logger.error(str(e))
        raise click.ClickException(str(e))


if __name__ == "__main__":
    main()
