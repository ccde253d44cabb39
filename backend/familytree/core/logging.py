"""
日志配置
统一使用 loguru，替代零散的 print 输出
"""

import sys
from typing import Optional

from loguru import logger

from .config import settings


def configure_logging(level: Optional[str] = None) -> None:
    """
    安装 stderr 日志输出

    Args:
        level: 日志级别，默认取 settings.LOG_LEVEL
    """
    logger.remove()
    logger.add(
        sys.stderr,
        level=level or settings.LOG_LEVEL,
        format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function} - {message}",
    )
