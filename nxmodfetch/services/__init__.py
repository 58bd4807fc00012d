"""
nxmodfetch 服务层

包含业务逻辑服务：GitHub 客户端、标题匹配、本地模拟器数据读取。
"""

from nxmodfetch.services.api_client import GitHubClient
from nxmodfetch.services.title_matcher import TitleMatcher, parse_mod_path, version_matches
from nxmodfetch.services.local_titles import (
    EmulatorDirs,
    LocalTitles,
    find_portable_dirs,
    get_dirs,
)

__all__ = [
    "GitHubClient",
    "TitleMatcher",
    "parse_mod_path",
    "version_matches",
    "EmulatorDirs",
    "LocalTitles",
    "find_portable_dirs",
    "get_dirs",
]
