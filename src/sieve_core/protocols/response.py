# File: src/sieve_core/protocols/response.py
"""
ManageSieve 响应组装器 (Response Assembler)

反复驱动词法器，把非终止 token 的数据按顺序累积，
直到读到终止状态行为止。每次调用恰好消费一个终止状态行。
"""

import logging
from typing import TYPE_CHECKING

from ..exceptions import ResponseError
from .constants import Outcome
from .lexer import StatusToken, read_token

if TYPE_CHECKING:
    from ..network import NetworkClient

logger = logging.getLogger(__name__)

# 每个元素来自一行引号串 / Literal / 普通行
ResponseData = list[tuple]


async def read_response(net_client: "NetworkClient") -> ResponseData:
    """读取一次完整响应。

    Args:
        net_client: 传输层客户端。

    Returns:
        ResponseData: 终止状态行之前的所有数据元组，保持原有顺序。

    Raises:
        ResponseError: 终止状态为 NO 或 BYE。
        NetworkError: 传输层读取失败。
        ProtocolError: 线路数据格式错误。
    """
    response: ResponseData = []

    while True:
        token = await read_token(net_client)

        if not isinstance(token, StatusToken):
            response.append(token.data)
            continue

        if token.is_ok:
            return response

        if token.outcome == Outcome.BYE:
            logger.warning(f"服务器发送 BYE: {token.message or token.code or ''}")
        raise ResponseError(token.outcome, token.code, token.message)
