# File: src/sieve_core/protocols/lexer.py
"""
ManageSieve 响应词法器 (Response Lexer)

每次从传输层消费一行 (或一个 Literal 块)，并将其归类为以下四种 token 之一:
Status / Quoted / Literal / Plain。

分类顺序是固定的:
1. 状态行必须先于引号串判断，避免 `NO "msg"` 被当成引号串。
2. Literal 声明 `{N}` 命中后必须改为精确读取 N+2 字节，
   因为载荷本身可能包含引号或换行。
"""

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Union

from ..exceptions import ProtocolError
from .constants import CRLF, LITERAL_LINE_RE, QUOTED_LINE_RE, STATUS_LINE_RE, Outcome

if TYPE_CHECKING:
    from ..network import NetworkClient

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StatusToken:
    """终止状态行: OK / NO / BYE。"""

    outcome: str
    code: str | None = None
    message: str | None = None

    @property
    def is_ok(self) -> bool:
        return self.outcome == Outcome.OK


@dataclass(frozen=True)
class QuotedToken:
    """包含一个或两个引号段的行，如 `"name" "ACTIVE"`。"""

    first: str
    second: str | None = None

    @property
    def data(self) -> tuple[str, str | None]:
        return (self.first, self.second)


@dataclass(frozen=True)
class LiteralToken:
    """由 `{N}` 声明、精确读取的二进制安全数据块 (不含结尾 CRLF)。"""

    payload: bytes

    @property
    def data(self) -> tuple[str]:
        return (self.payload.decode("utf-8", errors="replace"),)


@dataclass(frozen=True)
class PlainToken:
    """无法归类的普通行，原样透传。"""

    line: str

    @property
    def data(self) -> tuple[str]:
        return (self.line,)


Token = Union[StatusToken, QuotedToken, LiteralToken, PlainToken]
DataToken = Union[QuotedToken, LiteralToken, PlainToken]


def classify_line(line: str) -> Token | int:
    """对一行文本进行分类。

    Literal 声明无法仅凭一行完成解析，此时返回声明的字节数，
    由调用方负责随后的精确读取。

    Args:
        line: 已去掉行结束符的文本行。

    Returns:
        Token | int: 分类结果，或 Literal 的载荷长度。
    """
    m = STATUS_LINE_RE.match(line)
    if m:
        return StatusToken(*m.groups())

    m = QUOTED_LINE_RE.match(line)
    if m:
        return QuotedToken(*m.groups())

    m = LITERAL_LINE_RE.match(line)
    if m:
        return int(m.group(1))

    return PlainToken(line)


async def read_token(net_client: "NetworkClient") -> Token:
    """从传输层读取并分类下一个 token。

    Args:
        net_client: 传输层客户端，需提供 readline() 与 read_exactly()。

    Returns:
        Token: 分类后的 token。

    Raises:
        NetworkError: 传输层读取失败 (由 net_client 抛出)。
        ProtocolError: Literal 块之后缺少 CRLF。
    """
    raw = await net_client.readline()
    line = raw.rstrip(b"\r\n").decode("utf-8", errors="replace")
    logger.debug(f"S: {line}")

    result = classify_line(line)
    if not isinstance(result, int):
        return result

    # 载荷 + 结尾 CRLF
    block = await net_client.read_exactly(result + len(CRLF))
    if not block.endswith(CRLF):
        raise ProtocolError(f"Literal 块 ({result} 字节) 缺少结尾 CRLF")

    logger.debug(f"S: <literal {result} bytes>")
    return LiteralToken(block[:result])
