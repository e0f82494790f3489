# File: src/sieve_core/exceptions.py
"""
ManageSieve 核心库 - 异常体系 (Exceptions)

定义库内统一使用的异常类，以便上层应用（如管理工具/CLI）能进行精细的错误处理。
"""


class SieveError(Exception):
    """sieve-core 所有内部异常的基类。

    上层应用可以通过捕获此异常来处理所有由 sieve-core 抛出的已知错误。
    """

    pass


class ConfigError(SieveError):
    """配置加载或校验失败。

    触发场景:
    1. 缺少必要字段 (如 host)。
    2. 字段格式错误 (如端口不是整数)。
    3. 找不到配置文件或环境变量。
    """

    pass


class NetworkError(SieveError):
    """传输层面的错误 (I/O 级别)。

    触发场景:
    1. TCP 连接建立失败。
    2. 读取超时。
    3. 对端提前关闭连接 (EOF)。
    4. 写入失败。
    """

    pass


class ProtocolError(SieveError):
    """线路数据格式错误。

    例如 Literal 块之后缺少行结束符。
    """

    pass


class StateError(SieveError):
    """状态机错误 (FSM Violation)。

    触发场景:
    1. 会话尚未就绪 (未完成认证) 时执行脚本命令。
    2. 会话已关闭 (LOGOUT 之后) 再次执行命令。
    3. 试图让生命周期状态倒退。
    """

    pass


class ResponseError(SieveError):
    """服务器以 NO 或 BYE 结束了一次往返。

    Attributes:
        status: 结果标记 ("NO" 或 "BYE")。
        code: 括号内的响应代码 (原样保留)，可能为 None。
        message: 状态行尾部的文本 (原样保留)，可能为 None。
    """

    def __init__(
        self, status: str, code: str | None = None, message: str | None = None
    ) -> None:
        self.status = status
        self.code = code
        self.message = message

        text = status
        if code:
            text += f" ({code})"
        if message:
            text += f" {message}"
        super().__init__(text)


class CommandError(SieveError):
    """命令执行失败。

    对 ResponseError 的上层包装，附带失败的命令名。
    原始的 ResponseError 通过 __cause__ 链接。
    """

    def __init__(
        self, command: str, code: str | None = None, message: str | None = None
    ) -> None:
        self.command = command
        self.code = code
        self.message = message

        detail = message or "服务器拒绝"
        if code:
            detail = f"({code}) {detail}"
        super().__init__(f"命令 {command} 失败: {detail}")


class AuthError(SieveError):
    """认证失败 (会话建立阶段的致命错误)。

    触发场景:
    1. 服务器未通告所配置的认证机制。
    2. 服务器通告了该机制，但客户端未实现。
    3. 服务器在认证往返中拒绝了凭据。
    """

    def __init__(self, message: str, mechanism: str | None = None) -> None:
        super().__init__(message)
        self.mechanism = mechanism
