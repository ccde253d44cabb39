"""
密码哈希
bcrypt 加盐自适应哈希：hash / verify / needs_rehash
"""

import re
from typing import Optional

import bcrypt
from loguru import logger

from familytree.core.config import settings

# bcrypt 只使用密码的前 72 字节
BCRYPT_MAX_PASSWORD_BYTES = 72

# $2b$12$<53 位 salt+hash>
BCRYPT_COST_PATTERN = re.compile(r"^\$2[abxy]?\$(\d{2})\$")


class PasswordHasher:
    """
    bcrypt 密码哈希器

    needs_rehash 通过哈希串中的 cost factor 判断：
    $2b$12$... 中的 12 与当前配置不一致即视为过期
    """

    def __init__(self, rounds: Optional[int] = None):
        self.rounds = rounds or settings.BCRYPT_ROUNDS

    @staticmethod
    def _encode(password: str) -> bytes:
        """编码并截断到 bcrypt 的长度上限"""
        return password.encode("utf-8")[:BCRYPT_MAX_PASSWORD_BYTES]

    def hash(self, password: str) -> str:
        """
        生成密码哈希

        超过 72 字节的密码按 bcrypt 的规则截断

        Args:
            password: 明文密码

        Returns:
            bcrypt 哈希字符串
        """
        salt = bcrypt.gensalt(rounds=self.rounds)
        hashed = bcrypt.hashpw(self._encode(password), salt)
        return hashed.decode("utf-8")

    def verify(self, password: str, password_hash: str) -> bool:
        """
        校验明文密码与哈希是否匹配（bcrypt 内部为常量时间比较）

        无法解析的哈希视为不匹配
        """
        if not password_hash:
            return False
        try:
            return bcrypt.checkpw(self._encode(password), password_hash.encode("utf-8"))
        except ValueError:
            logger.warning("Stored password hash could not be parsed")
            return False

    def needs_rehash(self, password_hash: str) -> bool:
        """哈希的 cost factor 与当前配置不同时返回 True"""
        match = BCRYPT_COST_PATTERN.match(password_hash or "")
        if match is None:
            return True
        return int(match.group(1)) != self.rounds
