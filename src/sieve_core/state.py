# File: src/sieve_core/state.py
"""
ManageSieve 核心库 - 状态模块

负责定义会话生命周期与服务器能力 (Capabilities) 的数据结构。
本模块不包含业务逻辑，仅作为数据容器供 Session 与协议层共享。
"""

from dataclasses import dataclass, field
from enum import Enum, auto


class SessionStatus(Enum):
    """会话的生命周期状态枚举。

    状态只能单向前进，不可回退:
    INIT -> CAPABILITIES_KNOWN -> AUTHENTICATING -> READY -> CLOSED

    任何一步失败都会直接跳到 CLOSED。
    """

    INIT = auto()
    """初始状态，尚未读取服务器问候。"""

    CAPABILITIES_KNOWN = auto()
    """已解析问候中的能力列表。"""

    AUTHENTICATING = auto()
    """正在进行认证交换。"""

    READY = auto()
    """认证完成，可以执行脚本命令。"""

    CLOSED = auto()
    """已关闭。LOGOUT 完成、认证失败或被主动放弃。"""

    def can_advance_to(self, other: "SessionStatus") -> bool:
        return other.value > self.value


@dataclass(frozen=True)
class Capabilities:
    """服务器在问候中通告的能力。会话建立后不可变。

    Attributes:
        implementation: 服务器实现名称 (仅供展示)。
        sasl_mechanisms: 通告的认证机制集合 (大小写敏感)。
        extensions: 通告的 Sieve 语言扩展集合。
        starttls: 服务器是否支持 STARTTLS 升级。
    """

    implementation: str = ""
    sasl_mechanisms: frozenset[str] = field(default_factory=frozenset)
    extensions: frozenset[str] = field(default_factory=frozenset)
    starttls: bool = False


@dataclass
class SieveState:
    """存储 ManageSieve 会话的易变状态数据。

    Attributes:
        status: 当前生命周期状态。
        capabilities: 问候阶段解析出的能力，之前为 None。
        last_error: 最近一次发生的错误描述，用于 UI 显示。
    """

    status: SessionStatus = SessionStatus.INIT
    capabilities: Capabilities | None = None
    last_error: str = ""

    @property
    def is_ready(self) -> bool:
        return self.status == SessionStatus.READY

    @property
    def is_closed(self) -> bool:
        return self.status == SessionStatus.CLOSED
