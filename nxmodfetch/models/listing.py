"""
远程文件树模型

对应 GitHub git/trees 接口（recursive=1）返回的扁平文件列表。
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from loguru import logger

from nxmodfetch.exceptions import ListingParseError

TOP_LEVEL_FIELDS = {"sha": str, "url": str, "truncated": bool}


class EntryKind(Enum):
    """文件树条目类型"""

    BLOB = "blob"
    TREE = "tree"


@dataclass(frozen=True)
class RemoteEntry:
    """远程文件树中的一行"""

    path: str
    kind: EntryKind
    sha: str
    size: Optional[int] = None

    @property
    def is_file(self) -> bool:
        return self.kind == EntryKind.BLOB

    @classmethod
    def from_github(cls, data: dict) -> "RemoteEntry":
        """
        由 tree 数组中的单个元素构造条目。

        Raises:
            KeyError, ValueError, TypeError: 元素缺少字段或字段类型不对
        """
        path = data["path"]
        if not isinstance(path, str):
            raise TypeError(f"path 不是字符串: {path!r}")
        size = data.get("size")
        return cls(
            path=path,
            kind=EntryKind(data["type"]),
            sha=str(data.get("sha", "")),
            size=int(size) if size is not None else None,
        )


@dataclass
class RemoteListing:
    """一次完整的文件树拉取结果"""

    sha: str
    url: str
    truncated: bool
    entries: List[RemoteEntry] = field(default_factory=list)
    skipped: int = 0

    @classmethod
    def from_github(cls, data: dict) -> "RemoteListing":
        """
        解析 git/trees 响应体。

        顶层结构错误是致命的，抛出 ListingParseError；
        单个格式错误的条目会被跳过并计数。
        """
        if not isinstance(data, dict):
            raise ListingParseError(
                "文件树响应不是 JSON 对象", context={"type": type(data).__name__}
            )

        tree = data.get("tree")
        if not isinstance(tree, list):
            raise ListingParseError(
                "文件树响应缺少 tree 数组", context={"keys": sorted(data.keys())}
            )

        for key, expected in TOP_LEVEL_FIELDS.items():
            if key in data and not isinstance(data[key], expected):
                raise ListingParseError(
                    f"文件树字段 {key} 类型错误",
                    context={"field": key, "value": repr(data[key])},
                )

        entries = []
        skipped = 0
        for item in tree:
            try:
                entries.append(RemoteEntry.from_github(item))
            except (KeyError, ValueError, TypeError) as e:
                skipped += 1
                logger.debug(f"[跳过] 无法解析的文件树条目 {item!r}: {e}")

        if skipped:
            logger.warning(f"[文件树] 跳过了 {skipped} 个格式错误的条目")

        return cls(
            sha=data.get("sha", ""),
            url=data.get("url", ""),
            truncated=data.get("truncated", False),
            entries=entries,
            skipped=skipped,
        )

    def __len__(self) -> int:
        return len(self.entries)
