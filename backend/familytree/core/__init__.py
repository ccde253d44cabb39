"""
核心模块
提供配置与日志
"""

from .config import Settings, PendingChangePolicy, settings, get_settings
from .logging import configure_logging

__all__ = [
    "Settings",
    "PendingChangePolicy",
    "settings",
    "get_settings",
    "configure_logging"
]
