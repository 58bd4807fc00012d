"""
游戏与模组条目模型
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional


@dataclass(frozen=True)
class ModPathInfo:
    """
    从远程路径解析出的信息。

    路径格式: {root}/{title_name}/[{title_id}]/{title_version}/{relative_path...}
    """

    title_name: str
    title_id: str
    title_version: str
    relative_path: str


@dataclass
class ModDownloadEntry:
    """单个待下载文件"""

    download_url: str
    mod_relative_path: str

    @property
    def mod_name(self) -> str:
        """模组目录名（相对路径的第一段）"""
        return self.mod_relative_path.split("/", 1)[0]


@dataclass
class Game:
    """本地已安装的游戏及其匹配到的模组文件"""

    title_id: str
    title_name: str
    title_version: Optional[str]
    mod_data_location: Path
    mod_download_entries: List[ModDownloadEntry] = field(default_factory=list)

    @property
    def mod_names(self) -> List[str]:
        """去重后的模组名，保持列表顺序"""
        names = []
        for entry in self.mod_download_entries:
            if "/" not in entry.mod_relative_path:
                continue
            if entry.mod_name not in names:
                names.append(entry.mod_name)
        return names

    def destinations(self) -> List[tuple[str, Path]]:
        """(下载地址, 目标路径) 列表"""
        return [
            (entry.download_url, self.mod_data_location / entry.mod_relative_path)
            for entry in self.mod_download_entries
        ]

    def __str__(self) -> str:
        version = self.title_version or "base"
        return f"{self.title_name} [{self.title_id}] ({version})"
