# File: src/sieve_core/protocols/commands.py
"""
ManageSieve 命令编码器 (Command Encoder)

负责把命令名与参数序列化为线路字节，并提供"一条命令一次往返"的发送助手。

参数编码有两种:
- 名称引用: 用双引号包裹，用于脚本名和机制名。
- Literal 编码: `{<字节数>+}\\r\\n<内容>`，用于脚本正文等可能包含任意字节的内容。
  `+` 表示非同步 Literal，发送前无需等待服务器提示。
"""

import logging
from typing import TYPE_CHECKING

from ..exceptions import CommandError, ResponseError
from .constants import CRLF, Command
from .response import ResponseData, read_response

if TYPE_CHECKING:
    from ..network import NetworkClient

logger = logging.getLogger(__name__)


def quote_name(name: str) -> str:
    """用双引号包裹名称。

    Args:
        name: 脚本名或机制名。

    Returns:
        str: `"name"` 形式的字符串。
    """
    return f'"{name}"'


def encode_literal(content: str | bytes) -> bytes:
    """将内容编码为非同步 Literal。

    长度按 UTF-8 字节数计算，而不是字符数。

    Args:
        content: 脚本正文。

    Returns:
        bytes: `{N+}\\r\\n<content>`。
    """
    if isinstance(content, str):
        content = content.encode("utf-8")
    return b"{%d+}" % len(content) + CRLF + content


def build_command(command: str, args: str | bytes | None = None) -> bytes:
    """序列化一条命令: `COMMAND[ ARGS]\\r\\n`。

    Args:
        command: 命令名 (LOGIN 认证中也可以是一个裸的引号串)。
        args: 已编码好的参数。

    Returns:
        bytes: 可直接写入传输层的字节流。
    """
    packet = command.encode("utf-8")
    if args:
        if isinstance(args, str):
            args = args.encode("utf-8")
        packet += b" " + args
    return packet + CRLF


async def send_command(
    net_client: "NetworkClient",
    command: str,
    args: str | bytes | None = None,
    wait_response: bool = True,
    sensitive: bool = False,
) -> ResponseData | None:
    """发送一条命令并 (默认) 等待其终止响应。

    Args:
        net_client: 传输层客户端。
        command: 命令名。
        args: 已编码好的参数。
        wait_response: 是否读取响应。只有 LOGIN 认证的用户名步骤为 False。
        sensitive: 为 True 时日志中隐藏参数 (认证载荷)。

    Returns:
        ResponseData | None: 响应数据；wait_response=False 时为 None。

    Raises:
        CommandError: 服务器以 NO/BYE 结束往返。
        NetworkError: 传输层失败。
    """
    packet = build_command(command, args)
    if sensitive:
        # LOGIN 的后两步中命令本身就是凭据
        label = command if command.isalpha() else "******"
        logger.debug(f"C: {label} ******")
    else:
        logger.debug(f"C: {packet.rstrip(CRLF).decode('utf-8', errors='replace')}")

    await net_client.send(packet)

    if not wait_response:
        return None

    try:
        return await read_response(net_client)
    except ResponseError as e:
        if sensitive and not command.isalpha():
            command = Command.AUTHENTICATE
        raise CommandError(command, e.code, e.message) from e
