# src/sieve_core/protocols/__init__.py
"""
ManageSieve 协议层 (Protocol Layer)

本包负责响应的词法分析与组装、命令的编码、认证机制与结果整形。

- 不持有 socket，所有 I/O 通过传入的 net_client 完成。
- 不持有会话状态 (State)。
- 不依赖于 core 或 config 层。
"""

from . import constants
from .capabilities import parse_capabilities
from .commands import build_command, encode_literal, quote_name, send_command
from .lexer import (
    LiteralToken,
    PlainToken,
    QuotedToken,
    StatusToken,
    Token,
    classify_line,
    read_token,
)
from .mechanisms import (
    BaseMechanism,
    LoginMechanism,
    PlainMechanism,
    UnsupportedMechanism,
    build_plain_message,
    select_mechanism,
)
from .response import read_response
from .scripts import ScriptEntry, iter_script_entries, parse_script_body

# 公共 API
__all__ = [
    "constants",
    "Token",
    "StatusToken",
    "QuotedToken",
    "LiteralToken",
    "PlainToken",
    "classify_line",
    "read_token",
    "read_response",
    "quote_name",
    "encode_literal",
    "build_command",
    "send_command",
    "parse_capabilities",
    "BaseMechanism",
    "PlainMechanism",
    "LoginMechanism",
    "UnsupportedMechanism",
    "build_plain_message",
    "select_mechanism",
    "ScriptEntry",
    "iter_script_entries",
    "parse_script_body",
]
