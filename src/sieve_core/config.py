"""
ManageSieve 核心库 - 配置模块

负责配置的加载、解析与强类型转换。
支持从 TOML 文件、环境变量 (含 .env 文件) 或字典中加载配置。
"""

import logging
import os
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

from .exceptions import ConfigError
from .protocols.constants import ANONYMOUS_MECHANISM, SIEVE_PORT

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0


@dataclass(frozen=True)
class SieveConfig:
    """SieveSession 的强类型配置对象。

    所有字段均为只读 (frozen=True)，确保配置在运行时不可变。

    Attributes:
        host: ManageSieve 服务器地址。
        port: 服务器端口 (默认 2000)。
        user: 认证身份 (authcid)，即被校验凭据的用户。
        euser: 授权身份 (authzid)，连接实际代表的用户。为空时等同于 user。
        password: 用户密码。认证结束后会话不再持有它。
        auth_mech: 认证机制名。默认 "ANONYMOUS" 表示不需要凭据。
        timeout: 传输层连接/读取超时秒数，None 表示无限等待。
    """

    host: str
    port: int = SIEVE_PORT
    user: str = ""
    euser: str = ""
    password: str = ""
    auth_mech: str = ANONYMOUS_MECHANISM
    timeout: float | None = DEFAULT_TIMEOUT

    def __post_init__(self) -> None:
        if not self.euser:
            # frozen dataclass 只能通过 object.__setattr__ 补默认值
            object.__setattr__(self, "euser", self.user)

    @property
    def is_anonymous(self) -> bool:
        return self.auth_mech.upper() == ANONYMOUS_MECHANISM

    def __repr__(self) -> str:
        """
        覆盖默认的 repr，隐藏密码字段，防止日志泄露敏感信息。
        """
        return (
            f"<{self.__class__.__name__} "
            f"server={self.host}:{self.port}, "
            f"user='{self.user}', "
            f"euser='{self.euser}', "
            f"password='******', "
            f"auth={self.auth_mech}>"
        )


def create_config_from_dict(raw_data: dict[str, Any]) -> SieveConfig:
    """通用工厂：将字典转换为强类型配置对象。

    负责字段的清洗、默认值注入和类型转换。

    Args:
        raw_data: 原始配置字典 (来自 TOML 或 Env)。

    Returns:
        SieveConfig: 验证并转换后的配置对象。

    Raises:
        ConfigError: 当必要字段缺失或格式错误时抛出。
    """
    try:

        def _req(key: str) -> Any:
            """获取必要字段，缺失则报错"""
            if not raw_data.get(key):
                raise ConfigError(f"配置缺失: 缺少必要字段 '{key}'")
            return raw_data[key]

        def _get(key: str, default: Any) -> Any:
            """获取可选字段，缺失则使用默认值"""
            return raw_data.get(key, default)

        def _to_port(key: str) -> int:
            val = _get(key, SIEVE_PORT)
            try:
                port = int(val)
            except (TypeError, ValueError):
                raise ConfigError(f"端口格式无效 '{key}': {val}")
            if not 0 < port < 65536:
                raise ConfigError(f"端口超出范围 '{key}': {port}")
            return port

        def _to_timeout(key: str) -> float | None:
            val = _get(key, DEFAULT_TIMEOUT)
            if val is None or str(val).strip().lower() in ("", "none"):
                return None
            try:
                return float(val)
            except (TypeError, ValueError):
                raise ConfigError(f"超时格式无效 '{key}': {val}")

        return SieveConfig(
            host=str(_req("host")),
            port=_to_port("port"),
            user=str(_get("user", "")),
            euser=str(_get("euser", "") or ""),
            password=str(_get("password", "")),
            auth_mech=str(_get("auth", ANONYMOUS_MECHANISM)),
            timeout=_to_timeout("timeout"),
        )

    except Exception as e:
        if isinstance(e, ConfigError):
            raise
        raise ConfigError(f"配置生成失败: {e}") from e


def load_config_from_toml(file_path: Path, profile: str = "default") -> SieveConfig:
    """从 TOML 文件加载配置。

    支持多层级查找策略:
    1. [profile.xxx]: 优先查找指定的 profile 块。
    2. [sieve]: 单一配置块。
    3. Root: 兼容根目录直接配置。

    Args:
        file_path: TOML 文件路径。
        profile: 配置预设名。默认为 "default"。

    Returns:
        SieveConfig: 配置对象。

    Raises:
        ConfigError: 文件读取失败或 Profile 不存在。
    """
    if not file_path.exists():
        raise ConfigError(f"配置文件未找到: {file_path}")

    try:
        with open(file_path, "rb") as f:
            data = tomllib.load(f)
    except Exception as e:
        raise ConfigError(f"读取 TOML 失败: {e}") from e

    raw_config = {}

    if "profile" in data:
        if profile not in data["profile"]:
            raise ConfigError(f"未找到预设: [profile.{profile}]")
        raw_config = data["profile"][profile]

    elif "sieve" in data:
        if profile != "default":
            logger.warning(f"配置仅包含 [sieve] 节，忽略 profile='{profile}'。")
        raw_config = data["sieve"]
    else:
        raw_config = data

    return create_config_from_dict(raw_config)


def load_config_from_env(dotenv_path: Path | None = None) -> SieveConfig:
    """从环境变量加载配置。

    自动读取所有以 `SIEVE_` 开头的环境变量，并映射到配置字段。
    例如: `SIEVE_USER` -> `user`。

    Args:
        dotenv_path: 可选的 .env 文件路径。给出时先用 python-dotenv 载入，
            已存在的环境变量不会被覆盖。

    Returns:
        SieveConfig: 配置对象。

    Raises:
        ConfigError: .env 文件不存在，或未检测到任何相关环境变量。
    """
    if dotenv_path is not None:
        if not dotenv_path.exists():
            raise ConfigError(f".env 文件未找到: {dotenv_path}")
        load_dotenv(dotenv_path=dotenv_path, override=False)

    env_map = {
        "host": "HOST",
        "port": "PORT",
        "user": "USER",
        "euser": "EUSER",
        "password": "PASSWORD",
        "auth": "AUTH",
        "timeout": "TIMEOUT",
    }

    raw_data = {}

    for cfg_key, env_suffix in env_map.items():
        val = os.environ.get(f"SIEVE_{env_suffix}")
        if val is not None:
            raw_data[cfg_key] = val

    if not raw_data:
        raise ConfigError("未检测到 SIEVE_ 前缀的环境变量")

    return create_config_from_dict(raw_data)
