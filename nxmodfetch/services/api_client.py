"""
GitHub 客户端

拉取模组仓库的递归文件树，并生成原始文件下载地址。
"""

import asyncio
import json
from typing import Optional

import aiohttp
from loguru import logger

from nxmodfetch import __version__
from nxmodfetch.models import RemoteListing
from nxmodfetch.models.config import DEFAULT_BRANCH
from nxmodfetch.exceptions import (
    APIError,
    APINotFoundError,
    APIRateLimitError,
    ListingParseError,
    NetworkError,
)


GITHUB_API_URL = "https://api.github.com"
GITHUB_RAW_URL = "https://raw.githubusercontent.com"
USER_AGENT = f"nxmodfetch/{__version__}"
HEADERS = {"User-Agent": USER_AGENT, "Accept": "application/vnd.github+json"}


class GitHubClient:
    """GitHub git/trees 客户端"""

    def __init__(
        self,
        session: Optional[aiohttp.ClientSession] = None,
        branch: str = DEFAULT_BRANCH,
        api_url: str = GITHUB_API_URL,
        raw_url: str = GITHUB_RAW_URL,
    ):
        self._session = session
        self._owned_session = session is None
        self.branch = branch
        self.api_url = api_url.rstrip("/")
        self.raw_base_url = raw_url.rstrip("/")

    @property
    def session(self) -> aiohttp.ClientSession:
        """获取或创建 aiohttp session"""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()
        return self._session

    def tree_url(self, repository: str) -> str:
        return f"{self.api_url}/repos/{repository}/git/trees/{self.branch}"

    def raw_url(self, repository: str, path: str) -> str:
        """仓库中某个文件的原始内容地址"""
        return f"{self.raw_base_url}/{repository}/refs/heads/{self.branch}/{path}"

    async def get_tree(self, repository: str) -> RemoteListing:
        """
        获取仓库默认分支的完整递归文件树

        只发送一次请求，不做重试，是否重试由调用方决定。

        Raises:
            NetworkError: 传输层失败
            APINotFoundError: 仓库或分支不存在
            APIRateLimitError: 触发 GitHub 速率限制
            APIError: 其他非 200 响应
            ListingParseError: 响应体不是合法的文件树
        """
        url = self.tree_url(repository)
        logger.info(f"[文件树] 正在获取 {repository}@{self.branch}")

        try:
            async with self.session.get(
                url, params={"recursive": "1"}, headers=HEADERS
            ) as response:
                if response.status == 404:
                    raise APINotFoundError(
                        f"仓库或分支不存在: {repository}@{self.branch}",
                        response=response,
                    )
                if response.status in (403, 429) and (
                    response.headers.get("X-RateLimit-Remaining") == "0"
                    or response.status == 429
                ):
                    raise APIRateLimitError(
                        "GitHub API 速率限制，请稍后重试",
                        context={
                            "reset": response.headers.get("X-RateLimit-Reset"),
                        },
                        response=response,
                    )
                if response.status != 200:
                    raise APIError(
                        f"API 请求失败 (状态码: {response.status})",
                        response=response,
                    )
                body = await response.read()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise NetworkError(
                f"获取文件树失败: {e}", context={"url": url, "error": str(e)}
            ) from e

        try:
            data = json.loads(body)
        except ValueError as e:
            raise ListingParseError(
                f"文件树响应不是合法的 UTF-8 JSON: {e}", context={"url": url}
            ) from e

        listing = RemoteListing.from_github(data)
        if listing.truncated:
            logger.warning(f"[文件树] {repository} 的文件树被截断，部分模组可能缺失")
        logger.debug(f"[文件树] 共 {len(listing)} 个条目")
        return listing

    async def close(self):
        """关闭客户端"""
        if self._owned_session and self._session and not self._session.closed:
            await self._session.close()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
