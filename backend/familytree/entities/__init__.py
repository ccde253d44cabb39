"""
实体模块
Repository 返回给调用方的内存对象
"""

from .user import User, SettingsCache

__all__ = [
    "User",
    "SettingsCache"
]
