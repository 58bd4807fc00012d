"""
下载管理器

用固定数量的工作协程并发下载所有匹配到的模组文件。
单个文件失败不会中断其他下载，全部结束后统一报告失败项。
"""

import asyncio
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional

import aiofiles
import aiohttp
from loguru import logger

from nxmodfetch.download.queue import DownloadQueue, DownloadTask
from nxmodfetch.exceptions import (
    DownloadError,
    DownloadFileError,
    DownloadNetworkError,
)
from nxmodfetch.models import Game
from nxmodfetch.models.config import DEFAULT_MAX_CONCURRENT

CHUNK_SIZE = 8192


@dataclass
class DownloadStats:
    """下载统计"""

    total: int = 0
    completed: int = 0
    failed: int = 0
    bytes_downloaded: int = 0


@dataclass
class DownloadReport:
    """每个文件的下载结果"""

    completed: List[Path] = field(default_factory=list)
    failed: List[tuple[Path, DownloadError]] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed

    def summary(self) -> str:
        return f"{len(self.completed)} 成功, {len(self.failed)} 失败"


def quote_url(url: str) -> str:
    """仓库路径里常有空格，需编码为 %20"""
    return url.replace(" ", "%20")


def collect_tasks(games: Iterable[Game]) -> List[DownloadTask]:
    """展开所有游戏的模组条目为 (地址, 目标路径) 任务"""
    return [
        DownloadTask(url=url, destination=destination)
        for game in games
        for url, destination in game.destinations()
    ]


class DownloadManager:
    """下载管理器"""

    def __init__(
        self,
        max_concurrent: int = DEFAULT_MAX_CONCURRENT,
        timeout: Optional[float] = None,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        self.max_concurrent = max_concurrent
        self.timeout = timeout
        self.queue = DownloadQueue()
        self.stats = DownloadStats()
        self._session = session
        self._owned_session = session is None
        self._workers: list[asyncio.Task] = []
        self._report = DownloadReport()

    @property
    def session(self) -> aiohttp.ClientSession:
        """获取或创建 aiohttp session，默认不设超时"""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout)
            )
        return self._session

    def enqueue(self, url: str, destination: Path) -> bool:
        """添加下载任务"""
        added = self.queue.put(url, destination)
        if added:
            self.stats.total += 1
            logger.debug(f"[队列] '{destination}' 已加入下载队列")
        else:
            logger.warning(f"[队列] 目标路径重复，已忽略: {destination}")
        return added

    async def download_file(self, task: DownloadTask) -> int:
        """
        下载单个文件，边接收边写入磁盘

        失败时不会删除已写入的部分文件。

        Returns:
            写入的字节数

        Raises:
            DownloadFileError: 目录或文件创建失败、写入失败
            DownloadNetworkError: 传输失败或响应状态不是 200
        """
        url = quote_url(task.url)
        destination = task.destination

        try:
            os.makedirs(destination.parent, exist_ok=True)
        except OSError as e:
            raise DownloadFileError(
                f"无法创建目录: {destination.parent}",
                context={"path": str(destination.parent), "error": str(e)},
            ) from e

        try:
            f = await aiofiles.open(destination, "wb")
        except OSError as e:
            raise DownloadFileError(
                f"无法创建文件: {destination}",
                context={"path": str(destination), "error": str(e)},
            ) from e

        downloaded = 0
        try:
            async with self.session.get(url) as response:
                if response.status != 200:
                    raise DownloadNetworkError(
                        f"HTTP {response.status}: {task.filename}",
                        context={"url": url, "status": response.status},
                    )

                async for chunk in response.content.iter_chunked(CHUNK_SIZE):
                    await f.write(chunk)
                    downloaded += len(chunk)
                    self.stats.bytes_downloaded += len(chunk)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise DownloadNetworkError(
                f"下载失败: {task.filename}: {e}",
                context={"url": url, "error": str(e)},
            ) from e
        except OSError as e:
            raise DownloadFileError(
                f"写入文件失败: {destination}",
                context={"path": str(destination), "error": str(e)},
            ) from e
        finally:
            await f.close()

        return downloaded

    async def _worker(self):
        """下载工作协程"""
        while True:
            task = await self.queue.get()
            try:
                size = await self.download_file(task)
            except DownloadError as e:
                self.stats.failed += 1
                self._report.failed.append((task.destination, e))
                logger.error(f"[错误] {task.destination}: {e}")
            except Exception as e:
                self.stats.failed += 1
                self._report.failed.append(
                    (task.destination, DownloadError(str(e), context={"url": task.url}))
                )
                logger.exception(f"[错误] 下载 '{task.filename}' 时发生意外错误")
            else:
                self.stats.completed += 1
                self._report.completed.append(task.destination)
                logger.success(f"[完成] {task.destination} ({size} 字节)")
            finally:
                self.queue.task_done()

    async def start(self):
        """启动下载工作协程"""
        logger.info(f"[启动] 下载器启动，最大并发数: {self.max_concurrent}")
        self._workers = [
            asyncio.create_task(self._worker(), name=f"downloader-{i}")
            for i in range(self.max_concurrent)
        ]

    async def wait_until_complete(self):
        await self.queue.join()

    async def stop(self):
        """停止工作协程并关闭自己创建的 session"""
        for worker in self._workers:
            worker.cancel()

        if self._workers:
            await asyncio.gather(*self._workers, return_exceptions=True)
            self._workers.clear()

        if self._owned_session and self._session and not self._session.closed:
            await self._session.close()

    async def run(self, tasks: Iterable[DownloadTask]) -> DownloadReport:
        """下载给定的任务，全部结束后返回报告（不抛出单个文件的错误）"""
        self._report = DownloadReport()
        self.stats = DownloadStats()
        self.queue = DownloadQueue()
        for task in tasks:
            self.enqueue(task.url, task.destination)

        await self.start()
        try:
            await self.wait_until_complete()
        finally:
            await self.stop()

        logger.info(f"[统计] {self._report.summary()}")
        return self._report

    async def download_all(self, games: Iterable[Game]) -> DownloadReport:
        """
        下载所有游戏的模组文件

        Raises:
            DownloadError: 至少一个文件失败；context["failures"] 列出全部失败项
        """
        report = await self.run(collect_tasks(games))
        if report.failed:
            _, first_error = report.failed[0]
            raise DownloadError(
                f"{len(report.failed)} 个文件下载失败，首个错误: {first_error}",
                context={
                    "failures": [
                        {"path": str(path), "error": str(error)}
                        for path, error in report.failed
                    ],
                    "completed": len(report.completed),
                },
            )
        return report

    def get_stats(self) -> DownloadStats:
        return self.stats
