# tests/test_protocol/test_lexer.py
"""
测试响应词法器的分类规则与 Literal 的两阶段读取。
"""

import logging

import pytest

from sieve_core.exceptions import NetworkError, ProtocolError
from sieve_core.protocols import encode_literal
from sieve_core.protocols.lexer import (
    LiteralToken,
    PlainToken,
    QuotedToken,
    StatusToken,
    classify_line,
    read_token,
)

# --- 单行分类 ---


@pytest.mark.parametrize(
    "line, expected",
    [
        ("OK", StatusToken("OK")),
        ('NO "Script not found"', StatusToken("NO", None, '"Script not found"')),
        ('NO (QUOTA) "Too big"', StatusToken("NO", "QUOTA", '"Too big"')),
        ("BYE (TRYLATER)", StatusToken("BYE", "TRYLATER")),
        ('"alpha" "ACTIVE"', QuotedToken("alpha", "ACTIVE")),
        ('"alpha" ACTIVE', QuotedToken("alpha", "ACTIVE")),
        ('"beta" ""', QuotedToken("beta", "")),
        ('"STARTTLS"', QuotedToken("STARTTLS")),
        ('IMPLEMENTATION "Cyrus"', PlainToken('IMPLEMENTATION "Cyrus"')),
        ("NOTIFY mailto", PlainToken("NOTIFY mailto")),
    ],
)
def test_classify_line(line, expected):
    assert classify_line(line) == expected


def test_status_line_wins_over_quoted():
    """状态行带引号消息时不能被当作引号串"""
    token = classify_line('OK "Logout complete"')
    assert isinstance(token, StatusToken)
    assert token.is_ok


@pytest.mark.parametrize("line, size", [("{11}", 11), ("{11+}", 11), ("{0}", 0)])
def test_classify_literal_announcement(line, size):
    assert classify_line(line) == size


# --- 从传输层读取 ---


@pytest.mark.asyncio
async def test_read_token_strips_crlf(fake_net):
    net = fake_net(b'"alpha" "ACTIVE"\r\n')
    token = await read_token(net)
    assert token == QuotedToken("alpha", "ACTIVE")


@pytest.mark.asyncio
async def test_read_literal_uses_exact_read(fake_net):
    """Literal 载荷中的换行和状态行不能被当作行结构"""
    payload = b'line one\r\nOK\r\n"quoted" "pair"'
    net = fake_net(b"{%d}\r\n" % len(payload) + payload + b"\r\nOK\r\n")

    token = await read_token(net)
    assert token == LiteralToken(payload)

    # 之后的流应停在下一行的边界上
    assert await read_token(net) == StatusToken("OK")


@pytest.mark.parametrize(
    "payload",
    [
        b"",
        b"hello world",
        b'require "fileinto";\r\nfileinto "INBOX.spam";\r\n',
        b"{5}\r\nBYE\r\n",
        "邮件过滤 ✓".encode("utf-8"),
        bytes(range(256)),
    ],
)
@pytest.mark.asyncio
async def test_literal_encode_then_read_returns_payload(fake_net, payload):
    net = fake_net(encode_literal(payload) + b"\r\n")
    token = await read_token(net)
    assert isinstance(token, LiteralToken)
    assert token.payload == payload
    assert net.remaining == b""


@pytest.mark.asyncio
async def test_literal_without_trailing_crlf(fake_net):
    net = fake_net(b"{3}\r\nabcXY")
    with pytest.raises(ProtocolError, match="CRLF"):
        await read_token(net)


@pytest.mark.asyncio
async def test_literal_truncated_stream(fake_net):
    net = fake_net(b"{30}\r\nshort\r\n")
    with pytest.raises(NetworkError):
        await read_token(net)


def test_token_data_tuples():
    assert QuotedToken("a", "b").data == ("a", "b")
    assert QuotedToken("a").data == ("a", None)
    assert PlainToken("STARTTLS").data == ("STARTTLS",)
    assert LiteralToken("正文".encode("utf-8")).data == ("正文",)


def test_literal_data_replaces_invalid_utf8():
    """data 视图做替换解码，payload 保留原始字节"""
    token = LiteralToken(b"ok\xff")
    assert token.data == ("ok�",)
    assert token.payload == b"ok\xff"


@pytest.mark.asyncio
async def test_read_token_debug_log(fake_net, caplog):
    net = fake_net(b"{3}\r\nabc\r\n")
    with caplog.at_level(logging.DEBUG, logger="sieve_core.protocols.lexer"):
        await read_token(net)

    assert "S: {3}" in caplog.text
    assert "S: <literal 3 bytes>" in caplog.text
