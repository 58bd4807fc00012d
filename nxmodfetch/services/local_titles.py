"""
本地模拟器数据

定位模拟器的 cache/config/data 目录，读取 qt-config.ini 中的模组加载目录，
以及每个标题已安装的更新版本。
"""

import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, List, Optional

from loguru import logger

from nxmodfetch.exceptions import ConfigError, LocalDataNotFoundError

CONFIG_FILE_NAME = "qt-config.ini"
LOAD_DIRECTORY_KEY = "load_directory="
UPDATE_PREFIX = "Update ("


@dataclass(frozen=True)
class EmulatorDirs:
    """模拟器的三个数据目录"""

    cache_dir: Path
    config_dir: Path
    data_dir: Path

    @property
    def config_file(self) -> Path:
        return self.config_dir / CONFIG_FILE_NAME


def _env_dir(name: str, fallback: Path) -> Path:
    value = os.environ.get(name)
    return Path(value) if value else fallback


def get_dirs(emulator: str, platform: Optional[str] = None) -> EmulatorDirs:
    """按平台惯例返回模拟器的 cache/config/data 目录"""
    platform = platform or sys.platform
    home = Path.home()

    if platform == "darwin":
        cache, config, data = (
            home / ".cache",
            home / ".config",
            home / ".local" / "share",
        )
    elif platform.startswith("win"):
        roaming = _env_dir("APPDATA", home / "AppData" / "Roaming")
        cache = _env_dir("LOCALAPPDATA", home / "AppData" / "Local")
        config = data = roaming
    else:
        cache = _env_dir("XDG_CACHE_HOME", home / ".cache")
        config = _env_dir("XDG_CONFIG_HOME", home / ".config")
        data = _env_dir("XDG_DATA_HOME", home / ".local" / "share")

    return EmulatorDirs(
        cache_dir=cache / emulator,
        config_dir=config / emulator,
        data_dir=data / emulator,
    )


def find_portable_dirs(base: Path) -> Optional[EmulatorDirs]:
    """便携版：base/user/config/qt-config.ini 存在时使用 base/user 作为数据目录"""
    user_dir = Path(base) / "user"
    if not (user_dir / "config" / CONFIG_FILE_NAME).is_file():
        return None

    logger.info(f"[本地] 检测到便携版安装: {user_dir}")
    return EmulatorDirs(
        cache_dir=user_dir / "cache",
        config_dir=user_dir / "config",
        data_dir=user_dir,
    )


def read_lines(path: Path) -> Iterator[str]:
    """逐行读取文本文件（去掉换行符），文件不可读时抛出 OSError"""
    with open(path, encoding="utf-8", errors="replace") as f:
        for line in f:
            yield line.rstrip("\r\n")


class LocalTitles:
    """读取某个模拟器安装的本地标题信息"""

    def __init__(self, dirs: EmulatorDirs):
        self.dirs = dirs
        self._load_directory: Optional[Path] = None

    def ensure_installed(self):
        """data 与 config 目录都必须存在"""
        if self.dirs.data_dir.is_dir() and self.dirs.config_dir.is_dir():
            return
        raise LocalDataNotFoundError(
            "未找到模拟器安装目录",
            context={
                "data": str(self.dirs.data_dir),
                "config": str(self.dirs.config_dir),
            },
        )

    def get_load_directory(self) -> Path:
        """
        模组加载目录

        qt-config.ini 中 load_directory= 为空时使用 <data_dir>/nand。
        """
        if self._load_directory is not None:
            return self._load_directory

        config_file = self.dirs.config_file
        try:
            for line in read_lines(config_file):
                if not line.startswith(LOAD_DIRECTORY_KEY):
                    continue
                value = line[len(LOAD_DIRECTORY_KEY):].strip()
                self._load_directory = Path(value) if value else self.dirs.data_dir / "nand"
                return self._load_directory
        except OSError as e:
            raise LocalDataNotFoundError(
                f"无法读取配置文件: {e}", context={"path": str(config_file)}
            ) from e

        raise ConfigError(
            "配置文件中找不到 load_directory",
            context={"path": str(config_file)},
        )

    def get_title_version(self, title_id: str) -> Optional[str]:
        """
        已安装的更新版本

        读取 <cache>/game_list/<title_id>.pv.txt 中的 "Update (<版本>)" 行，
        文件不存在或没有这一行时返回 None。
        """
        pv_path = self.dirs.cache_dir / "game_list" / f"{title_id}.pv.txt"
        if not pv_path.exists():
            return None

        for line in read_lines(pv_path):
            line = line.strip()
            if line.startswith(UPDATE_PREFIX) and line.endswith(")"):
                return line[len(UPDATE_PREFIX):-1]
        return None

    def list_title_ids(self) -> List[str]:
        """加载目录下的子目录名，即已建立模组目录的标题 ID"""
        load_dir = self.get_load_directory()
        if not load_dir.is_dir():
            raise LocalDataNotFoundError(
                "模组加载目录不存在", context={"load_directory": str(load_dir)}
            )
        return sorted(child.name for child in load_dir.iterdir() if child.is_dir())
