# File: src/sieve_core/protocols/mechanisms.py
"""
ManageSieve 认证机制 (SASL Mechanisms)

每种机制是一个 BaseMechanism 子类，在会话建立时按名称选定一次。
子类通过 `name` 类属性自动注册，新增机制只需新增一个子类。
"""

import abc
import base64
import logging
from typing import TYPE_CHECKING

from ..exceptions import AuthError, CommandError
from .commands import quote_name, send_command
from .constants import Command

if TYPE_CHECKING:
    from ..network import NetworkClient

logger = logging.getLogger(__name__)

_REGISTRY: dict[str, type["BaseMechanism"]] = {}


def encode_credential(data: str | bytes) -> str:
    """Base64 编码 (不含换行)。"""
    if isinstance(data, str):
        data = data.encode("utf-8")
    return base64.b64encode(data).decode("ascii")


def build_plain_message(authzid: str, authcid: str, password: str) -> bytes:
    """构建 PLAIN 机制的原始消息: `authzid \\0 authcid \\0 password`。

    Args:
        authzid: 授权身份 (effective user)。
        authcid: 认证身份 (user)。
        password: 密码。

    Returns:
        bytes: 以 NUL 分隔的 UTF-8 字节序列 (尚未 Base64)。
    """
    return b"\x00".join(s.encode("utf-8") for s in (authzid, authcid, password))


class BaseMechanism(abc.ABC):
    """认证机制抽象基类。

    子类实现 authenticate()，在同一条连接上完成全部认证往返。
    服务器拒绝凭据时必须抛出 AuthError。
    """

    name: str = ""

    def __init_subclass__(cls, **kwargs) -> None:
        super().__init_subclass__(**kwargs)
        if cls.name:
            _REGISTRY[cls.name.upper()] = cls

    def __init__(self, net_client: "NetworkClient") -> None:
        self.net_client = net_client
        self.logger = logging.getLogger(self.__class__.__name__)

    @abc.abstractmethod
    async def authenticate(self, authzid: str, authcid: str, password: str) -> None:
        """[Abstract] 执行认证交换。

        Args:
            authzid: 授权身份。
            authcid: 认证身份。
            password: 密码。

        Raises:
            AuthError: 服务器拒绝凭据或机制不可用。
            NetworkError: 传输层失败。
        """
        raise NotImplementedError

    def _rejected(self, e: CommandError) -> AuthError:
        self.logger.error(f"{self.name} 认证被拒绝: {e.message or e.code or ''}")
        return AuthError(f"{self.name} 认证失败: {e.message or '凭据被拒绝'}", self.name)


class PlainMechanism(BaseMechanism):
    """PLAIN: 一次往返，初始响应随 AUTHENTICATE 一并发送。"""

    name = "PLAIN"

    async def authenticate(self, authzid: str, authcid: str, password: str) -> None:
        initial = encode_credential(build_plain_message(authzid, authcid, password))
        args = f"{quote_name(self.name)} {quote_name(initial)}"
        try:
            await send_command(
                self.net_client, Command.AUTHENTICATE, args, sensitive=True
            )
        except CommandError as e:
            raise self._rejected(e) from e


class LoginMechanism(BaseMechanism):
    """LOGIN: 同一连接上的三次发送。

    1. `AUTHENTICATE "LOGIN"`，等待响应。
    2. 引号包裹的 Base64 用户名，发送后不等待响应。
    3. 引号包裹的 Base64 密码，等待最终状态。

    第 2 步不读响应是该客户端一贯的行为，保持不变。
    """

    name = "LOGIN"

    async def authenticate(self, authzid: str, authcid: str, password: str) -> None:
        try:
            await send_command(
                self.net_client, Command.AUTHENTICATE, quote_name(self.name)
            )
            await send_command(
                self.net_client,
                quote_name(encode_credential(authcid)),
                wait_response=False,
                sensitive=True,
            )
            await send_command(
                self.net_client, quote_name(encode_credential(password)), sensitive=True
            )
        except CommandError as e:
            raise self._rejected(e) from e


class UnsupportedMechanism(BaseMechanism):
    """服务器通告了、但本客户端未实现的机制。不产生任何传输活动。"""

    def __init__(self, net_client: "NetworkClient", mechanism: str) -> None:
        super().__init__(net_client)
        self.name = mechanism

    async def authenticate(self, authzid: str, authcid: str, password: str) -> None:
        raise AuthError(f"{self.name} 认证尚未实现", self.name)


def select_mechanism(name: str, net_client: "NetworkClient") -> BaseMechanism:
    """按名称 (大小写不敏感) 选择认证机制。

    Args:
        name: 配置中的机制名。
        net_client: 传输层客户端。

    Returns:
        BaseMechanism: 对应的机制实例；未实现的名称返回 UnsupportedMechanism。
    """
    cls = _REGISTRY.get(name.upper())
    if cls is None:
        return UnsupportedMechanism(net_client, name)
    return cls(net_client)
