# File: src/sieve_core/protocols/scripts.py
"""
脚本类命令的结果整形 (Result Shaping)

本模块是无状态的，只把响应数据元组转换为调用方需要的类型。
"""

from collections.abc import Iterator
from typing import NamedTuple

from .constants import ACTIVE_MARKER
from .response import ResponseData


class ScriptEntry(NamedTuple):
    """LISTSCRIPTS 中的一项。"""

    name: str
    active: bool


def iter_script_entries(lines: ResponseData) -> Iterator[ScriptEntry]:
    """把 LISTSCRIPTS 响应逐项转换为 ScriptEntry。

    每个元组是 (名称, 状态标记)；状态标记恰好等于 "ACTIVE" 时为激活脚本。
    返回的是一次性生成器，遍历完后需重新发送命令才能再次获取。

    Args:
        lines: read_response() 返回的数据元组列表。

    Yields:
        ScriptEntry: (name, active)。
    """
    for entry in lines:
        if not entry:
            continue
        name = entry[0]
        marker = entry[1] if len(entry) > 1 else None
        yield ScriptEntry(name, marker == ACTIVE_MARKER)


def parse_script_body(lines: ResponseData) -> str:
    """提取 GETSCRIPT 响应中的脚本正文。

    Args:
        lines: read_response() 返回的数据元组列表。

    Returns:
        str: Literal 中的脚本正文；响应为空时返回空字符串。
    """
    if not lines or not lines[0]:
        return ""
    return lines[0][0] or ""
