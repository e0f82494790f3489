# src/sieve_core/network.py
"""
ManageSieve 核心库 - 网络模块 (Network) [Asyncio Edition]

封装 TCP 流的连接、按行读取、精确长度读取、写入和关闭。
该模块屏蔽了底层 Stream 的复杂性，向协议层提供纯粹的 bytes 收发接口。
超时策略完全由这里负责，协议层本身不设超时。
"""

import asyncio
import logging
from typing import Optional

from .config import SieveConfig
from .exceptions import NetworkError

logger = logging.getLogger(__name__)


class NetworkClient:
    """
    封装 asyncio TCP Stream 操作的客户端。
    一个 NetworkClient 只服务于一个会话。
    """

    def __init__(self, config: SieveConfig):
        self.config = config
        self.reader: Optional[asyncio.StreamReader] = None
        self.writer: Optional[asyncio.StreamWriter] = None

    @property
    def is_connected(self) -> bool:
        return self.writer is not None and not self.writer.is_closing()

    async def connect(self) -> None:
        """
        建立 TCP 连接。
        """
        target = (self.config.host, self.config.port)
        try:
            self.reader, self.writer = await asyncio.wait_for(
                asyncio.open_connection(*target), timeout=self.config.timeout
            )
            logger.debug(f"TCP 连接已建立: {target}")
        except asyncio.TimeoutError:
            await self.close()
            raise NetworkError(f"连接超时 {target} ({self.config.timeout}s)") from None
        except OSError as e:
            await self.close()
            raise NetworkError(f"连接失败 {target}: {e}") from e

    def _require_reader(self) -> asyncio.StreamReader:
        if self.reader is None or not self.is_connected:
            raise NetworkError("连接未建立或已关闭")
        return self.reader

    async def readline(self) -> bytes:
        """
        读取一行 (包含行结束符)。

        Raises:
            NetworkError: 超时、连接关闭或读取失败。
        """
        reader = self._require_reader()
        try:
            line = await asyncio.wait_for(reader.readline(), timeout=self.config.timeout)
        except asyncio.TimeoutError:
            raise NetworkError(f"读取超时 ({self.config.timeout}s)") from None
        except (OSError, ValueError) as e:
            # ValueError: 单行超过 StreamReader 缓冲上限
            raise NetworkError(f"读取错误: {e}") from e

        if not line:
            raise NetworkError("连接已被服务器关闭")
        return line

    async def read_exactly(self, size: int) -> bytes:
        """
        精确读取 size 字节 (用于 Literal 块)。

        Raises:
            NetworkError: 超时、数据不足或读取失败。
        """
        reader = self._require_reader()
        try:
            return await asyncio.wait_for(
                reader.readexactly(size), timeout=self.config.timeout
            )
        except asyncio.TimeoutError:
            raise NetworkError(f"读取超时 ({self.config.timeout}s)") from None
        except asyncio.IncompleteReadError as e:
            raise NetworkError(
                f"连接在 Literal 读取中断开 ({len(e.partial)}/{size} 字节)"
            ) from e
        except OSError as e:
            raise NetworkError(f"读取错误: {e}") from e

    async def send(self, data: bytes) -> None:
        """
        写入数据并等待缓冲区排空。
        """
        if self.writer is None or self.writer.is_closing():
            raise NetworkError("连接未建立或已关闭")

        try:
            self.writer.write(data)
            await self.writer.drain()
        except (OSError, RuntimeError) as e:
            raise NetworkError(f"发送失败: {e}") from e

    async def close(self) -> None:
        """关闭连接"""
        if self.writer:
            writer = self.writer
            self.writer = None
            self.reader = None
            writer.close()
            try:
                await writer.wait_closed()
            except OSError as e:
                logger.debug(f"关闭连接时出错 (忽略): {e}")
            logger.debug("TCP 连接已关闭")

    async def __aenter__(self):
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
