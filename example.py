# example.py
"""
这是一个 SieveSession API 的最小示例。

它演示了如何将 sieve-core 作为一个库导入到你自己的项目中：
列出脚本 -> 检查空间 -> 上传 -> 回读 -> 激活 -> 注销。

运行此示例：
1. 在根目录创建 .env 文件，至少包含 SIEVE_HOST / SIEVE_USER / SIEVE_PASSWORD / SIEVE_AUTH。
2. 确保已安装依赖： pip install -e .
3. 从项目根目录运行： python example.py
"""

import asyncio
import logging
import sys
from pathlib import Path

from sieve_core import (
    AuthError,
    CommandError,
    ConfigError,
    NetworkError,
    SieveSession,
    load_config_from_env,
)

logging.basicConfig(
    level=logging.DEBUG, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger("SieveExample")

SCRIPT_NAME = "foobar"
SCRIPT = """require "fileinto";
if header :contains ["to", "cc"] "ruby-talk@ruby-lang.org" {
  fileinto "Ruby-talk";
}
"""


async def main() -> int:
    """
    程序主入口点。
    """
    env_path = Path(__file__).resolve().parent / ".env"

    try:
        config = load_config_from_env(env_path if env_path.exists() else None)
    except ConfigError as ce:
        logger.error(f"配置错误: {ce}")
        return 1

    try:
        async with SieveSession(config) as session:
            logger.info(f"服务器: {session.implementation} (STARTTLS: {session.supports_tls})")

            for name, active in await session.list_scripts():
                print(f"{name} (active)" if active else name)

            if not await session.have_space(SCRIPT_NAME, len(SCRIPT.encode("utf-8"))):
                logger.error("服务器空间不足，放弃上传")
                return 1

            await session.put_script(SCRIPT_NAME, SCRIPT)
            print(await session.get_script(SCRIPT_NAME))
            await session.set_active(SCRIPT_NAME)

    except AuthError as ae:
        logger.error(f"认证被拒绝: {ae}")
        return 1
    except CommandError as ce:
        logger.error(f"命令失败: {ce}")
        return 1
    except NetworkError as ne:
        logger.error(f"网络错误: {ne}")
        return 1

    logger.info("已注销。")
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
