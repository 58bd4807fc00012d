"""
标题匹配服务

把远程文件树与本地已安装的游戏（标题 ID + 更新版本）对应起来，
得到每个游戏适用的模组文件。
"""

from pathlib import Path
from typing import Callable, Iterable, List, Optional

from loguru import logger

from nxmodfetch.models import Game, ModDownloadEntry, ModPathInfo, RemoteEntry

MOD_SUB_DIRS = ("exefs", "romfs", "cheats")
MOD_BASE_VERSIONS = ("1.0", "1.0.0")
ANY_VERSION = "x.x.x"

VersionLookup = Callable[[str], Optional[str]]
UrlBuilder = Callable[[str], str]


def parse_mod_path(path: str) -> Optional[ModPathInfo]:
    """
    解析 {root}/{title_name}/[{title_id}]/{title_version}/{relative_path...}

    最多切成五段，最后一段保留其中的斜杠。不足五段返回 None。
    """
    parts = path.split("/", 4)
    if len(parts) < 5:
        return None

    _, title_name, title_id, title_version, relative_path = parts
    return ModPathInfo(
        title_name=title_name,
        title_id=title_id.replace("[", "").replace("]", ""),
        title_version=title_version,
        relative_path=relative_path,
    )


def is_mod_file(entry: RemoteEntry) -> bool:
    """文件条目，且路径中间某一段是 exefs/romfs/cheats"""
    if not entry.is_file:
        return False
    segments = entry.path.split("/")[1:-1]
    return any(sub_dir in segments for sub_dir in MOD_SUB_DIRS)


def version_matches(installed: Optional[str], mod_version: str) -> bool:
    """
    判断模组版本是否适用于本地安装的版本

    - 版本完全一致
    - 模组版本为通配符 x.x.x
    - 本地未安装更新，且模组针对基础版本 (1.0 / 1.0.0)
    """
    if installed is not None and installed == mod_version:
        return True
    if mod_version == ANY_VERSION:
        return True
    return installed is None and mod_version in MOD_BASE_VERSIONS


class TitleMatcher:
    """标题匹配器"""

    def __init__(self, url_builder: UrlBuilder):
        self.url_builder = url_builder
        self.dropped = 0

    def filter_entries(
        self, remote_entries: Iterable[RemoteEntry]
    ) -> List[tuple[RemoteEntry, ModPathInfo]]:
        """筛出模组文件并预先解析路径，解析失败的条目计数后丢弃"""
        parsed = []
        dropped = 0
        for entry in remote_entries:
            if not is_mod_file(entry):
                continue
            info = parse_mod_path(entry.path)
            if info is None:
                dropped += 1
                logger.debug(f"[跳过] 无法解析的模组路径: {entry.path}")
                continue
            parsed.append((entry, info))

        self.dropped = dropped
        if dropped:
            logger.info(f"[匹配] 丢弃了 {dropped} 个路径格式不符的条目")
        return parsed

    def match_title(
        self,
        title_id: str,
        title_version: Optional[str],
        entries: List[tuple[RemoteEntry, ModPathInfo]],
        base_load_dir: Path,
    ) -> Optional[Game]:
        """匹配单个标题；远程没有任何该标题的条目时返回 None"""
        title_name = ""
        mod_download_entries = []

        for entry, info in entries:
            if info.title_id != title_id:
                continue

            if not title_name:
                title_name = info.title_name

            if not version_matches(title_version, info.title_version):
                continue

            mod_download_entries.append(
                ModDownloadEntry(
                    download_url=self.url_builder(entry.path),
                    mod_relative_path=info.relative_path,
                )
            )

        if not title_name:
            return None

        return Game(
            title_id=title_id,
            title_name=title_name,
            title_version=title_version,
            mod_data_location=Path(base_load_dir) / title_id,
            mod_download_entries=mod_download_entries,
        )

    def match(
        self,
        remote_entries: Iterable[RemoteEntry],
        local_title_ids: Iterable[str],
        version_lookup: VersionLookup,
        base_load_dir: Path,
    ) -> List[Game]:
        """
        为每个本地标题生成 Game

        结果顺序与 local_title_ids 一致。远程存在该标题但没有版本匹配的文件时，
        仍会返回一个 mod_download_entries 为空的 Game，由调用方过滤。
        """
        entries = self.filter_entries(remote_entries)
        games = []
        seen = set()

        for title_id in local_title_ids:
            if title_id in seen:
                continue
            seen.add(title_id)

            try:
                title_version = version_lookup(title_id)
            except OSError as e:
                logger.warning(f"[跳过] 无法读取 {title_id} 的版本信息: {e}")
                continue

            game = self.match_title(title_id, title_version, entries, base_load_dir)
            if game is None:
                continue

            logger.debug(
                f"[匹配] {game}: {len(game.mod_download_entries)} 个文件适用"
            )
            games.append(game)

        return games
