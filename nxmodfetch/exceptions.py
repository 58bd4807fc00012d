"""
nxmodfetch 统一异常体系

分层的异常结构，带错误代码与上下文信息，便于日志输出和序列化。
"""

from typing import Any, Dict, Optional

import aiohttp


class NxModFetchError(Exception):
    """nxmodfetch 基础异常类"""

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self._get_default_code()
        self.context = context or {}

    def _get_default_code(self) -> str:
        return "E000"

    def to_dict(self) -> Dict[str, Any]:
        """将异常转换为字典格式"""
        return {
            "error": True,
            "code": self.code,
            "message": self.message,
            "context": self.context,
            "type": self.__class__.__name__,
        }

    def __str__(self) -> str:
        if self.code:
            return f"[{self.code}] {self.message}"
        return self.message


class ConfigError(NxModFetchError):
    """配置相关错误"""

    def _get_default_code(self) -> str:
        return "E100"


class ConfigParseError(ConfigError):
    """配置文件解析错误"""

    def _get_default_code(self) -> str:
        return "E101"


class ConfigValidationError(ConfigError):
    """配置验证错误"""

    def _get_default_code(self) -> str:
        return "E102"


class APIError(NxModFetchError):
    """远程仓库 API 相关错误"""

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        response: Optional[aiohttp.ClientResponse] = None,
    ):
        super().__init__(message, code, context)
        self.response = response
        if response is not None:
            self.context["status_code"] = response.status
            self.context["url"] = str(response.url)

    def _get_default_code(self) -> str:
        return "E200"


class NetworkError(APIError):
    """请求文件树时的网络错误（DNS、连接、TLS、超时）"""

    def _get_default_code(self) -> str:
        return "E201"


class ListingParseError(APIError):
    """文件树响应格式错误"""

    def _get_default_code(self) -> str:
        return "E202"


class APINotFoundError(APIError):
    """仓库或分支不存在"""

    def _get_default_code(self) -> str:
        return "E404"


class APIRateLimitError(APIError):
    """API 速率限制"""

    def _get_default_code(self) -> str:
        return "E429"


class DownloadError(NxModFetchError):
    """下载相关错误"""

    def _get_default_code(self) -> str:
        return "E300"


class DownloadNetworkError(DownloadError):
    """下载网络错误"""

    def _get_default_code(self) -> str:
        return "E301"


class DownloadFileError(DownloadError):
    """下载文件操作错误（目录或文件创建失败）"""

    def _get_default_code(self) -> str:
        return "E303"


class LocalDataNotFoundError(NxModFetchError):
    """本地模拟器目录或数据文件不存在"""

    def _get_default_code(self) -> str:
        return "E600"


__all__ = [
    # 基础异常
    "NxModFetchError",
    # 配置异常
    "ConfigError",
    "ConfigParseError",
    "ConfigValidationError",
    # API 异常
    "APIError",
    "NetworkError",
    "ListingParseError",
    "APINotFoundError",
    "APIRateLimitError",
    # 下载异常
    "DownloadError",
    "DownloadNetworkError",
    "DownloadFileError",
    # 本地数据异常
    "LocalDataNotFoundError",
]
