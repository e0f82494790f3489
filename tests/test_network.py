# tests/test_network.py
"""
测试 NetworkClient 对 asyncio Stream 的封装与错误转换。
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from sieve_core.config import SieveConfig
from sieve_core.network import NetworkClient, NetworkError


@pytest.fixture
def client():
    return NetworkClient(SieveConfig(host="127.0.0.1", port=4190, timeout=0.5))


def _attach(client: NetworkClient, data: bytes, eof: bool = True) -> MagicMock:
    """给 client 挂上一个预先填充的 StreamReader 和一个 Mock Writer"""
    reader = asyncio.StreamReader()
    reader.feed_data(data)
    if eof:
        reader.feed_eof()

    writer = MagicMock()
    writer.is_closing.return_value = False
    writer.drain = AsyncMock()
    writer.wait_closed = AsyncMock()

    client.reader = reader
    client.writer = writer
    return writer


@pytest.mark.asyncio
async def test_readline_and_read_exactly(client):
    _attach(client, b"{5}\r\nhello\r\nOK\r\n")

    assert await client.readline() == b"{5}\r\n"
    assert await client.read_exactly(7) == b"hello\r\n"
    assert await client.readline() == b"OK\r\n"


@pytest.mark.asyncio
async def test_readline_eof(client):
    _attach(client, b"")
    with pytest.raises(NetworkError, match="关闭"):
        await client.readline()


@pytest.mark.asyncio
async def test_read_exactly_incomplete(client):
    _attach(client, b"abc")
    with pytest.raises(NetworkError, match="Literal"):
        await client.read_exactly(10)


@pytest.mark.asyncio
async def test_readline_timeout(client):
    _attach(client, b"", eof=False)
    with pytest.raises(NetworkError, match="超时"):
        await client.readline()


@pytest.mark.asyncio
async def test_send(client):
    writer = _attach(client, b"")
    await client.send(b"LOGOUT\r\n")

    writer.write.assert_called_once_with(b"LOGOUT\r\n")
    writer.drain.assert_awaited_once()


@pytest.mark.asyncio
async def test_send_failure(client):
    writer = _attach(client, b"")
    writer.drain.side_effect = ConnectionResetError("reset by peer")

    with pytest.raises(NetworkError, match="发送失败"):
        await client.send(b"LOGOUT\r\n")


@pytest.mark.asyncio
async def test_not_connected(client):
    with pytest.raises(NetworkError):
        await client.readline()
    with pytest.raises(NetworkError):
        await client.send(b"x")


@pytest.mark.asyncio
async def test_connect_failure(client, mocker):
    mocker.patch(
        "sieve_core.network.asyncio.open_connection",
        side_effect=ConnectionRefusedError("refused"),
    )
    with pytest.raises(NetworkError, match="连接失败"):
        await client.connect()
    assert client.is_connected is False


@pytest.mark.asyncio
async def test_connect_and_close(client, mocker):
    reader = asyncio.StreamReader()
    writer = MagicMock()
    writer.is_closing.return_value = False
    writer.wait_closed = AsyncMock()
    mocker.patch(
        "sieve_core.network.asyncio.open_connection",
        AsyncMock(return_value=(reader, writer)),
    )

    async with client:
        assert client.is_connected is True

    writer.close.assert_called_once()
    assert client.is_connected is False
