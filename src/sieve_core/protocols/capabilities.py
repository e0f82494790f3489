# File: src/sieve_core/protocols/capabilities.py
"""
服务器问候 / CAPABILITY 响应的解析。

每个数据元组按首个关键字解释，未知关键字直接忽略。
"""

import logging

from ..state import Capabilities
from .constants import CapabilityKey
from .response import ResponseData

logger = logging.getLogger(__name__)


def _split_entry(entry: tuple) -> tuple[str, str | None]:
    """把一个数据元组拆成 (关键字, 值)。

    引号串行本身就是两段；普通行 (如 `STARTTLS` 或 `SASL "PLAIN"`)
    只有一段，需要按第一个空白切开并去掉值两侧的引号。
    """
    if len(entry) >= 2:
        return entry[0], entry[1]

    keyword, _, rest = entry[0].strip().partition(" ")
    value = rest.strip().strip('"')
    return keyword.strip('"'), value or None


def parse_capabilities(lines: ResponseData) -> Capabilities:
    """把响应数据解释为服务器能力。

    Args:
        lines: read_response() 返回的数据元组列表。

    Returns:
        Capabilities: 不可变的能力对象。
    """
    implementation = ""
    mechanisms: frozenset[str] = frozenset()
    extensions: frozenset[str] = frozenset()
    starttls = False

    for entry in lines:
        if not entry:
            continue
        keyword, value = _split_entry(entry)
        keyword = keyword.upper()

        if keyword == CapabilityKey.IMPLEMENTATION:
            implementation = value or ""
        elif keyword == CapabilityKey.SASL:
            mechanisms = frozenset((value or "").split())
        elif keyword == CapabilityKey.SIEVE:
            extensions = frozenset((value or "").split())
        elif keyword == CapabilityKey.STARTTLS:
            starttls = True
        else:
            logger.debug(f"忽略未知能力: {keyword}")

    caps = Capabilities(
        implementation=implementation,
        sasl_mechanisms=mechanisms,
        extensions=extensions,
        starttls=starttls,
    )
    logger.debug(
        f"capabilities: impl={caps.implementation!r} "
        f"sasl={sorted(caps.sasl_mechanisms)} starttls={caps.starttls}"
    )
    return caps
