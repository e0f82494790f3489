# src/sieve_core/__init__.py
"""
sieve-core v1.0.0
异步 ManageSieve 客户端核心库：列出、获取、上传、激活和删除服务器上的 Sieve 脚本。
"""

# 暴露核心配置
from .config import (
    SieveConfig,
    create_config_from_dict,
    load_config_from_env,
    load_config_from_toml,
)

# 暴露会话引擎
from .core import SieveSession

# 暴露异常体系 (方便上层 try-except)
from .exceptions import (
    AuthError,
    CommandError,
    ConfigError,
    NetworkError,
    ProtocolError,
    ResponseError,
    SieveError,
    StateError,
)
from .protocols import ScriptEntry
from .state import Capabilities, SessionStatus, SieveState

__version__ = "1.0.0"

__all__ = [
    "SieveSession",
    "SieveConfig",
    "SieveState",
    "SessionStatus",
    "Capabilities",
    "ScriptEntry",
    "create_config_from_dict",
    "load_config_from_env",
    "load_config_from_toml",
    "SieveError",
    "ConfigError",
    "NetworkError",
    "ProtocolError",
    "StateError",
    "ResponseError",
    "CommandError",
    "AuthError",
]
