# tests/test_protocol/test_mechanisms.py
"""
测试 PLAIN / LOGIN 认证交换的线路行为。
"""

import base64

import pytest

from sieve_core.exceptions import AuthError
from sieve_core.protocols import (
    LoginMechanism,
    PlainMechanism,
    UnsupportedMechanism,
    build_plain_message,
    select_mechanism,
)


def _b64(s: str) -> str:
    return base64.b64encode(s.encode()).decode()


def test_plain_message_layout():
    assert build_plain_message("admin", "bob", "secret") == b"admin\x00bob\x00secret"


@pytest.mark.parametrize(
    "name, cls",
    [
        ("PLAIN", PlainMechanism),
        ("plain", PlainMechanism),
        ("Login", LoginMechanism),
        ("CRAM-MD5", UnsupportedMechanism),
    ],
)
def test_select_mechanism(fake_net, name, cls):
    assert isinstance(select_mechanism(name, fake_net()), cls)


@pytest.mark.asyncio
async def test_plain_single_round_trip(fake_net):
    net = fake_net(b"OK\r\n")
    await PlainMechanism(net).authenticate("admin", "bob", "secret")

    expected = base64.b64encode(b"admin\x00bob\x00secret").decode()
    assert net.writes == [f'AUTHENTICATE "PLAIN" "{expected}"\r\n'.encode()]
    assert net.remaining == b""


@pytest.mark.asyncio
async def test_plain_rejected(fake_net):
    net = fake_net(b'NO "Authentication failed"\r\n')

    with pytest.raises(AuthError) as exc:
        await PlainMechanism(net).authenticate("bob", "bob", "wrong")

    assert exc.value.mechanism == "PLAIN"
    assert "secret" not in str(exc.value)


@pytest.mark.asyncio
async def test_login_three_writes_two_waits(fake_net):
    """
    LOGIN: 第 1 步和第 3 步各读取一个终止状态，第 2 步只发送。
    如果第 2 步也读取响应，第 3 步将读到 EOF。
    """
    net = fake_net(b"OK\r\nOK\r\n")
    await LoginMechanism(net).authenticate("admin", "bob", "secret")

    assert net.writes == [
        b'AUTHENTICATE "LOGIN"\r\n',
        f'"{_b64("bob")}"\r\n'.encode(),
        f'"{_b64("secret")}"\r\n'.encode(),
    ]
    assert net.reads == 2
    assert net.remaining == b""


@pytest.mark.asyncio
async def test_login_rejected_on_password(fake_net):
    net = fake_net(b'OK\r\nNO "Bad password"\r\n')

    with pytest.raises(AuthError, match="LOGIN"):
        await LoginMechanism(net).authenticate("bob", "bob", "wrong")

    assert len(net.writes) == 3


@pytest.mark.asyncio
async def test_unsupported_mechanism_does_no_io(fake_net):
    net = fake_net(b"OK\r\n")

    with pytest.raises(AuthError, match="未实现"):
        await select_mechanism("DIGEST-MD5", net).authenticate("a", "b", "c")

    assert net.writes == []
    assert net.reads == 0
