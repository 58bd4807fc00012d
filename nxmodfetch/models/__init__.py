"""
nxmodfetch 数据模型包

包含配置模型、远程文件树模型和游戏模型。
"""

from nxmodfetch.models.config import (
    EMULATORS,
    REPOSITORIES,
    AppConfig,
)
from nxmodfetch.models.listing import (
    EntryKind,
    RemoteEntry,
    RemoteListing,
)
from nxmodfetch.models.game import (
    ModPathInfo,
    ModDownloadEntry,
    Game,
)

__all__ = [
    # 配置模型
    "EMULATORS",
    "REPOSITORIES",
    "AppConfig",
    # 文件树模型
    "EntryKind",
    "RemoteEntry",
    "RemoteListing",
    # 游戏模型
    "ModPathInfo",
    "ModDownloadEntry",
    "Game",
]
