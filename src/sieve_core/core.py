# File: src/sieve_core/core.py
"""
ManageSieve 会话引擎 (Session Engine)

职责：
1. 资源组装：State + Network + Config。
2. 会话建立：读取问候 -> 解析能力 -> 认证。
3. 命令面：LISTSCRIPTS / GETSCRIPT / PUTSCRIPT / DELETESCRIPT / SETACTIVE / HAVESPACE。
4. 生命周期：INIT -> CAPABILITIES_KNOWN -> AUTHENTICATING -> READY -> CLOSED。

同一时刻一条连接上只有一条命令在途；每个操作都是"写命令 + 读到终止状态行"的一次往返。
一个会话实例不应被多个任务并发使用。
"""

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable, Iterator
from dataclasses import replace
from typing import Any

from .config import SieveConfig
from .exceptions import (
    AuthError,
    CommandError,
    NetworkError,
    ProtocolError,
    SieveError,
    StateError,
)
from .network import NetworkClient
from .protocols import (
    ScriptEntry,
    encode_literal,
    iter_script_entries,
    parse_capabilities,
    parse_script_body,
    quote_name,
    read_response,
    select_mechanism,
    send_command,
)
from .protocols.constants import Command
from .state import Capabilities, SessionStatus, SieveState

logger = logging.getLogger(__name__)

# 定义回调函数类型别名：支持同步或异步函数
StatusCallback = Callable[[SessionStatus, str], Any | Awaitable[Any]]
ScriptConsumer = Callable[[str, bool], Any | Awaitable[Any]]


class SieveSession:
    """ManageSieve 客户端会话 (Async)。

    用法:
        async with SieveSession(config) as session:
            for name, active in await session.list_scripts():
                ...
            body = await session.get_script("vacation")
    """

    def __init__(
        self,
        config: SieveConfig,
        status_callback: StatusCallback | None = None,
    ) -> None:
        """初始化会话。此时不进行任何网络活动。

        Args:
            config: 会话配置。会话内部保存的副本不含密码。
            status_callback: 初始状态回调。也可以之后用 add_listener 注册。
        """
        # 密码只保存在私有属性中，认证结束后立即丢弃
        self._password: str | None = config.password
        self.config = replace(config, password="")

        self._listeners: list[StatusCallback] = []
        # 持有异步回调任务的强引用，完成后移除
        self._listener_tasks: set[asyncio.Task] = set()
        if status_callback:
            self.add_listener(status_callback)

        self._state = SieveState()
        self.net_client = NetworkClient(self.config)

    # =========================================================================
    # 只读属性
    # =========================================================================

    @property
    def state(self) -> SieveState:
        """获取当前会话状态的只读副本。"""
        return replace(self._state)

    @property
    def status(self) -> SessionStatus:
        return self._state.status

    @property
    def capabilities(self) -> Capabilities:
        if self._state.capabilities is None:
            raise StateError("尚未读取服务器能力")
        return self._state.capabilities

    @property
    def implementation(self) -> str:
        return self.capabilities.implementation

    @property
    def login_mechs(self) -> frozenset[str]:
        return self.capabilities.sasl_mechanisms

    @property
    def extensions(self) -> frozenset[str]:
        return self.capabilities.extensions

    @property
    def supports_tls(self) -> bool:
        """服务器是否通告了 STARTTLS。"""
        return self.capabilities.starttls

    def add_listener(self, callback: StatusCallback) -> None:
        """注册状态变更监听器。"""
        if callback not in self._listeners:
            self._listeners.append(callback)

    def remove_listener(self, callback: StatusCallback) -> None:
        """移除状态变更监听器。"""
        if callback in self._listeners:
            self._listeners.remove(callback)

    # =========================================================================
    # 会话建立
    # =========================================================================

    async def connect(self) -> None:
        """连接服务器、解析能力并完成认证。

        Raises:
            AuthError: 机制未通告、未实现或凭据被拒绝。
            ResponseError: 问候以 NO/BYE 结束。
            NetworkError: 传输层失败。
            StateError: 会话已经建立过。
        """
        if self._state.status != SessionStatus.INIT:
            raise StateError(f"会话已处于 {self._state.status.name}，不能重复连接")

        try:
            await self.net_client.connect()

            greeting = await read_response(self.net_client)
            self._state.capabilities = parse_capabilities(greeting)
            self._update_status(
                SessionStatus.CAPABILITIES_KNOWN,
                f"服务器: {self._state.capabilities.implementation or '未知实现'}",
            )

            await self._authenticate()
            self._update_status(SessionStatus.READY, "会话已就绪")

        except SieveError as e:
            self._state.last_error = str(e)
            await self._abandon(f"会话建立失败: {e}")
            raise

    async def _authenticate(self) -> None:
        """按配置的机制完成认证，结束后无论成败都丢弃密码。"""
        mech = self.config.auth_mech
        try:
            if self.config.is_anonymous:
                logger.info("未配置认证机制，跳过 AUTHENTICATE")
                return

            if mech not in self.capabilities.sasl_mechanisms:
                logger.error(f"服务器未通告 {mech} 机制: {sorted(self.login_mechs)}")
                raise AuthError(f"服务器不允许 {mech} 认证", mech)

            mechanism = select_mechanism(mech, self.net_client)
            self._update_status(SessionStatus.AUTHENTICATING, f"{mech} 认证中...")
            await mechanism.authenticate(
                self.config.euser, self.config.user, self._password or ""
            )
        finally:
            self._password = None

    # =========================================================================
    # 命令面
    # =========================================================================

    async def list_scripts(self) -> Iterator[ScriptEntry]:
        """列出服务器上的脚本。

        Returns:
            Iterator[ScriptEntry]: 一次性的 (name, active) 迭代器。
        """
        self._ensure_ready()
        lines = await self._round_trip(Command.LISTSCRIPTS)
        return iter_script_entries(lines)

    async def each_script(self, consumer: ScriptConsumer) -> None:
        """对每个脚本调用 consumer(name, active)。consumer 可以是协程函数。"""
        for name, active in await self.list_scripts():
            result = consumer(name, active)
            if inspect.isawaitable(result):
                await result

    async def get_script(self, name: str) -> str:
        """获取脚本正文。

        正文按 UTF-8 解码，非法字节被替换为 U+FFFD。需要原始字节时
        请直接使用 read_token 返回的 LiteralToken.payload。
        """
        self._ensure_ready()
        lines = await self._round_trip(Command.GETSCRIPT, quote_name(name))
        return parse_script_body(lines)

    async def put_script(self, name: str, content: str | bytes | None) -> None:
        """上传脚本。content 为空时只发送脚本名。"""
        self._ensure_ready()
        args = quote_name(name).encode("utf-8")
        if content:
            args += b" " + encode_literal(content)
        await self._round_trip(Command.PUTSCRIPT, args)

    async def delete_script(self, name: str) -> None:
        """删除脚本。"""
        self._ensure_ready()
        await self._round_trip(Command.DELETESCRIPT, quote_name(name))

    async def set_active(self, name: str) -> None:
        """将脚本设为激活。"""
        self._ensure_ready()
        await self._round_trip(Command.SETACTIVE, quote_name(name))

    async def have_space(self, name: str, size: int) -> bool:
        """检查服务器是否有空间存放 size 字节的脚本 name。

        服务器拒绝 (任何 NO/BYE) 都转换为 False，不区分"空间不足"
        与其他拒绝原因。传输层错误照常抛出，且会话随之关闭。
        """
        self._ensure_ready()
        try:
            await self._round_trip(Command.HAVESPACE, f"{quote_name(name)} {int(size)}")
        except CommandError as e:
            logger.debug(f"HAVESPACE 被拒绝: {e}")
            return False
        return True

    async def capability(self) -> Capabilities:
        """重新查询服务器能力。

        返回新解析的 Capabilities，会话在连接时获得的能力保持不变。
        """
        self._ensure_ready()
        lines = await self._round_trip(Command.CAPABILITY)
        return parse_capabilities(lines)

    async def logout(self) -> None:
        """发送 LOGOUT 并释放连接。之后任何操作都会失败。"""
        self._ensure_ready()
        try:
            await send_command(self.net_client, Command.LOGOUT)
        except CommandError as e:
            logger.warning(f"LOGOUT 被拒绝: {e}")
            raise
        finally:
            await self._abandon("已注销")

    async def close(self) -> None:
        """不发送 LOGOUT，直接关闭连接。"""
        if self._state.status != SessionStatus.CLOSED:
            await self._abandon("连接已关闭")

    async def __aenter__(self) -> "SieveSession":
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        if self._state.is_ready and exc_type is None:
            await self.logout()
        else:
            await self.close()

    # =========================================================================
    # 内部实现
    # =========================================================================

    async def _round_trip(
        self, command: str, args: str | bytes | None = None
    ) -> list[tuple]:
        """发送命令并读到终止状态行。

        NO/BYE 是干净的响应边界，CommandError 抛出后会话仍可用。
        传输或解析失败时流上可能残留未读数据，会话随即关闭。
        """
        try:
            return await send_command(self.net_client, command, args) or []
        except (NetworkError, ProtocolError) as e:
            self._state.last_error = str(e)
            await self._abandon(f"{command} 往返中断: {e}")
            raise

    def _ensure_ready(self) -> None:
        if self._state.status != SessionStatus.READY:
            raise StateError(f"会话未就绪 (当前状态: {self._state.status.name})")

    async def _abandon(self, msg: str) -> None:
        """关闭传输层并进入 CLOSED。"""
        self._password = None
        await self.net_client.close()
        if self._state.status != SessionStatus.CLOSED:
            self._update_status(SessionStatus.CLOSED, msg)

    def _update_status(self, status: SessionStatus, msg: str) -> None:
        """推进生命周期状态并触发所有回调。状态只能前进。"""
        if not self._state.status.can_advance_to(status):
            raise StateError(
                f"非法的状态回退: {self._state.status.name} -> {status.name}"
            )

        self._state.status = status
        logger.info(f"[{status.name}] {msg}")

        for callback in self._listeners:
            try:
                if inspect.iscoroutinefunction(callback):
                    task = asyncio.create_task(callback(status, msg))  # type: ignore
                    self._listener_tasks.add(task)
                    task.add_done_callback(self._on_listener_done)
                else:
                    loop = asyncio.get_running_loop()
                    loop.call_soon(callback, status, msg)
            except RuntimeError:
                # 应对 loop 尚未运行或已关闭的边缘情况
                pass

    def _on_listener_done(self, task: asyncio.Task) -> None:
        self._listener_tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error(f"状态回调执行失败: {exc!r}")
