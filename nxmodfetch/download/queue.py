"""
下载任务队列

按目标路径去重的 FIFO 队列，供下载工作协程消费。
"""

import asyncio
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class DownloadTask:
    """一个 (下载地址, 目标路径) 对"""

    url: str
    destination: Path

    @property
    def filename(self) -> str:
        return self.destination.name


class DownloadQueue:
    """下载队列"""

    def __init__(self):
        self._queue: asyncio.Queue = asyncio.Queue()
        self._destinations: set[Path] = set()

    def put(self, url: str, destination: Path) -> bool:
        """
        添加任务到队列

        Returns:
            True 如果任务是新添加的，False 如果目标路径已在队列中
        """
        destination = Path(destination)
        if destination in self._destinations:
            return False

        self._destinations.add(destination)
        self._queue.put_nowait(DownloadTask(url=url, destination=destination))
        return True

    async def get(self) -> DownloadTask:
        return await self._queue.get()

    def task_done(self):
        self._queue.task_done()

    async def join(self):
        """等待所有任务完成"""
        await self._queue.join()
