"""
配置模型

运行时配置在启动时构造一次，显式传给协调器，不使用全局状态。
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from nxmodfetch.exceptions import ConfigValidationError

EMULATORS = ("yuzu", "suyu", "eden", "citron", "torzu", "sudachi")

REPOSITORIES = (
    "exefer/switch-port-mods",
    "exefer/switch-pchtxt-mods",
    "exefer/Switch-Ultrawide-Mods",
    "exefer/ue4-emuswitch-60fps",
)

DEFAULT_BRANCH = "master"
DEFAULT_MAX_CONCURRENT = 5


@dataclass
class AppConfig:
    """nxmodfetch 运行配置"""

    emulator: Optional[str] = None
    repository: str = REPOSITORIES[0]
    branch: str = DEFAULT_BRANCH
    max_concurrent: int = DEFAULT_MAX_CONCURRENT
    timeout: Optional[float] = None
    portable_dir: Optional[str] = None

    def __post_init__(self):
        self.validate()

    def validate(self):
        """校验字段，失败时抛出 ConfigValidationError"""
        if self.emulator is not None and self.emulator not in EMULATORS:
            raise ConfigValidationError(
                f"不支持的模拟器: {self.emulator}",
                context={"emulator": self.emulator, "supported": list(EMULATORS)},
            )

        if not isinstance(self.repository, str) or self.repository.count("/") != 1:
            raise ConfigValidationError(
                f"仓库格式应为 owner/name: {self.repository}",
                context={"repository": self.repository},
            )

        if not self.branch:
            raise ConfigValidationError("branch 不能为空")

        if (
            isinstance(self.max_concurrent, bool)
            or not isinstance(self.max_concurrent, int)
            or self.max_concurrent <= 0
        ):
            raise ConfigValidationError(
                "max_concurrent 必须为正整数",
                context={"max_concurrent": self.max_concurrent},
            )

        if self.timeout is not None and self.timeout <= 0:
            raise ConfigValidationError(
                "timeout 必须大于 0", context={"timeout": self.timeout}
            )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AppConfig":
        """从配置文件字典创建，未知键会被拒绝"""
        known = set(cls.__dataclass_fields__)
        unknown = set(data) - known
        if unknown:
            raise ConfigValidationError(
                f"未知的配置项: {', '.join(sorted(unknown))}",
                context={"unknown": sorted(unknown)},
            )
        timeout = data.get("timeout")
        if timeout is not None:
            try:
                timeout = float(timeout)
            except (TypeError, ValueError):
                raise ConfigValidationError(
                    f"timeout 不是数字: {timeout!r}", context={"timeout": timeout}
                )
        return cls(
            emulator=data.get("emulator"),
            repository=data.get("repository", REPOSITORIES[0]),
            branch=data.get("branch", DEFAULT_BRANCH),
            max_concurrent=data.get("max_concurrent", DEFAULT_MAX_CONCURRENT),
            timeout=timeout,
            portable_dir=data.get("portable_dir"),
        )

    def merge(self, **overrides) -> "AppConfig":
        """用非 None 的命令行参数覆盖配置，返回新对象"""
        values = {name: getattr(self, name) for name in self.__dataclass_fields__}
        values.update({k: v for k, v in overrides.items() if v is not None})
        return AppConfig(**values)
