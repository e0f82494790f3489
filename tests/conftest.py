# tests/conftest.py
import io
import sys
from pathlib import Path
from unittest.mock import patch

import pytest

# 确保 src 目录在 sys.path 中
src_path = Path(__file__).resolve().parent.parent / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

from sieve_core.config import SieveConfig
from sieve_core.exceptions import NetworkError


class ScriptedNetworkClient:
    """
    [Fake] 内存中的传输层。

    按顺序返回预先写好的服务器字节流，并记录客户端的每一次写入。
    提供与 NetworkClient 相同的 readline / read_exactly / send 接口。
    """

    def __init__(self, server_bytes: bytes = b""):
        self.buffer = io.BytesIO(server_bytes)
        self.writes: list[bytes] = []
        self.connected = False
        self.closed = False
        self.reads = 0

    @property
    def is_connected(self) -> bool:
        return self.connected and not self.closed

    def feed(self, data: bytes) -> None:
        """在缓冲区末尾追加服务器数据 (不影响当前读位置)"""
        pos = self.buffer.tell()
        self.buffer.seek(0, io.SEEK_END)
        self.buffer.write(data)
        self.buffer.seek(pos)

    async def connect(self) -> None:
        self.connected = True

    async def readline(self) -> bytes:
        line = self.buffer.readline()
        if not line:
            raise NetworkError("连接已被服务器关闭")
        self.reads += 1
        return line

    async def read_exactly(self, size: int) -> bytes:
        data = self.buffer.read(size)
        if len(data) < size:
            raise NetworkError("连接在 Literal 读取中断开")
        return data

    async def send(self, data: bytes) -> None:
        if self.closed:
            raise NetworkError("连接未建立或已关闭")
        self.writes.append(data)

    async def close(self) -> None:
        self.closed = True

    @property
    def remaining(self) -> bytes:
        pos = self.buffer.tell()
        rest = self.buffer.read()
        self.buffer.seek(pos)
        return rest


@pytest.fixture
def fake_net():
    """返回一个工厂：fake_net(b"...") -> ScriptedNetworkClient"""
    return ScriptedNetworkClient


@pytest.fixture
def plain_config() -> SieveConfig:
    """
    [Fixture] PLAIN 认证的标准配置。
    """
    return SieveConfig(
        host="sieve.example.com",
        port=4190,
        user="bob",
        euser="admin",
        password="secret",
        auth_mech="PLAIN",
        timeout=5.0,
    )


@pytest.fixture
def make_session(plain_config):
    """
    [Fixture] 构造一个注入了 ScriptedNetworkClient 的 SieveSession。

    用法: session, net = make_session(server_bytes, config=None)
    """
    from sieve_core.core import SieveSession

    patches = []

    def _make(server_bytes: bytes, config: SieveConfig | None = None):
        net = ScriptedNetworkClient(server_bytes)
        p = patch("sieve_core.core.NetworkClient", return_value=net)
        p.start()
        patches.append(p)
        session = SieveSession(config or plain_config)
        return session, net

    yield _make

    for p in patches:
        p.stop()
