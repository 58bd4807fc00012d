"""
主协调器

串联文件树获取、标题匹配和并发下载。
"""

import sys
from pathlib import Path
from typing import List, Optional

from loguru import logger

from nxmodfetch.download import DownloadManager, DownloadReport
from nxmodfetch.exceptions import ConfigError
from nxmodfetch.models import AppConfig, Game
from nxmodfetch.services import (
    EmulatorDirs,
    GitHubClient,
    LocalTitles,
    TitleMatcher,
    find_portable_dirs,
    get_dirs,
)


def find_portable(config: AppConfig) -> Optional[EmulatorDirs]:
    """在配置的 portable_dir 或程序所在目录中查找便携版安装"""
    candidates = []
    if config.portable_dir:
        candidates.append(Path(config.portable_dir))
    candidates.append(Path(sys.argv[0]).resolve().parent)

    for base in candidates:
        dirs = find_portable_dirs(base)
        if dirs is not None:
            return dirs
    return None


def resolve_dirs(config: AppConfig) -> EmulatorDirs:
    """优先便携版，否则按所选模拟器的平台目录"""
    dirs = find_portable(config)
    if dirs is not None:
        return dirs

    if not config.emulator:
        raise ConfigError("未指定模拟器，且未检测到便携版安装")
    return get_dirs(config.emulator)


class ModDownloaderOrchestrator:
    """nxmodfetch 主协调器"""

    def __init__(
        self,
        config: AppConfig,
        dirs: Optional[EmulatorDirs] = None,
        client: Optional[GitHubClient] = None,
    ):
        self.config = config
        self.dirs = dirs or resolve_dirs(config)
        self.local = LocalTitles(self.dirs)
        self.client = client or GitHubClient(branch=config.branch)
        self.matcher = TitleMatcher(self._raw_url)

    def _raw_url(self, path: str) -> str:
        return self.client.raw_url(self.config.repository, path)

    async def read_game_titles(self) -> List[Game]:
        """拉取文件树并与本地标题匹配"""
        self.local.ensure_installed()
        load_dir = self.local.get_load_directory()
        logger.info(f"[本地] 模组加载目录: {load_dir}")

        listing = await self.client.get_tree(self.config.repository)
        title_ids = self.local.list_title_ids()
        logger.info(f"[本地] 发现 {len(title_ids)} 个标题目录")

        games = self.matcher.match(
            listing.entries,
            title_ids,
            self.local.get_title_version,
            load_dir,
        )
        logger.info(f"[匹配] {len(games)} 个本地标题在仓库中有模组")
        return games

    async def download_mods(self, games: List[Game]) -> DownloadReport:
        """下载有匹配文件的游戏的模组，任一文件失败时抛出 DownloadError"""
        games = [game for game in games if game.mod_download_entries]
        manager = DownloadManager(
            max_concurrent=self.config.max_concurrent,
            timeout=self.config.timeout,
        )
        report = await manager.download_all(games)
        logger.success(f"下载完成: {report.summary()}")
        return report

    async def close(self):
        await self.client.close()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
