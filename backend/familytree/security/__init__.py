"""
安全模块
提供密码哈希
"""

from .passwords import PasswordHasher

__all__ = [
    "PasswordHasher"
]
