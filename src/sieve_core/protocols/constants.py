# src/sieve_core/protocols/constants.py
"""
ManageSieve 协议常量表 (Constants)

仅定义协议的结构性常量（命令名、结果标记、行语法）。
不包含任何会话策略，这些应由 Config/Session 注入。
"""

import re

# 原始客户端使用的默认端口
SIEVE_PORT = 2000

CRLF = b"\r\n"

# 未配置认证机制时的哨兵值：不需要凭据，跳过 AUTHENTICATE
ANONYMOUS_MECHANISM = "ANONYMOUS"


# =========================================================================
# 命令 (Client -> Server)
# =========================================================================
class Command:
    """客户端发出的命令名"""

    CAPABILITY = "CAPABILITY"
    LISTSCRIPTS = "LISTSCRIPTS"
    GETSCRIPT = "GETSCRIPT"
    PUTSCRIPT = "PUTSCRIPT"
    DELETESCRIPT = "DELETESCRIPT"
    SETACTIVE = "SETACTIVE"
    HAVESPACE = "HAVESPACE"
    AUTHENTICATE = "AUTHENTICATE"
    LOGOUT = "LOGOUT"


# =========================================================================
# 结果标记 (Server -> Client)
# =========================================================================
class Outcome:
    """终止状态行的结果标记"""

    OK = "OK"
    NO = "NO"
    BYE = "BYE"


# LISTSCRIPTS 中标记当前激活脚本的 token (大小写敏感)
ACTIVE_MARKER = "ACTIVE"


# =========================================================================
# 问候中的能力关键字
# =========================================================================
class CapabilityKey:
    IMPLEMENTATION = "IMPLEMENTATION"
    SASL = "SASL"
    SIEVE = "SIEVE"
    STARTTLS = "STARTTLS"


# =========================================================================
# 行语法 (按优先级尝试)
# =========================================================================
# OK / NO / BYE [(code)] [message]
STATUS_LINE_RE = re.compile(r"^(OK|NO|BYE)(?: \((.*?)\))?(?: (.*))?$")

# "first" 或 "first" "second" (第二段的引号可省略，如 "name" ACTIVE)
QUOTED_LINE_RE = re.compile(r'^"([^"]*)"(?:\s"?([^"]*)"?)?$')

# {N} 或 {N+}
LITERAL_LINE_RE = re.compile(r"^\{(\d+)\+?\}$")
