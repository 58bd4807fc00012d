"""
nxmodfetch 下载层

包含下载管理和任务队列。
"""

from nxmodfetch.download.manager import DownloadManager, DownloadReport, DownloadStats
from nxmodfetch.download.queue import DownloadQueue, DownloadTask

__all__ = [
    "DownloadManager",
    "DownloadReport",
    "DownloadStats",
    "DownloadQueue",
    "DownloadTask",
]
