"""
核心配置模块
使用 pydantic-settings 从环境变量 / .env 文件读取配置
"""

from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# backend/ 目录，默认 SQLite 文件放在这里
BACKEND_ROOT = Path(__file__).parent.parent.parent


class PendingChangePolicy(str, Enum):
    """删除用户时，如何处理该用户尚未接受的待审核修改"""
    RETAIN = "retain"        # 保持原样（归属仍指向被删除的用户 ID）
    REASSIGN = "reassign"    # 转交给 PENDING_CHANGE_OWNER_ID 指定的账户
    DELETE = "delete"        # 直接丢弃


class Settings(BaseSettings):
    """应用配置，带校验"""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )

    # 数据库
    DATABASE_URL: str = f"sqlite:///{BACKEND_ROOT / 'database.db'}"
    DATABASE_ECHO: bool = False  # 设置为 True 可查看 SQL 语句

    # 密码哈希（bcrypt cost factor）
    BCRYPT_ROUNDS: int = 12

    # wt_user_setting.setting_value 的列宽，超出部分截断
    USER_SETTING_MAX_LENGTH: int = 255

    # 删除用户时的待审核修改处理策略
    PENDING_CHANGE_POLICY: PendingChangePolicy = PendingChangePolicy.RETAIN
    PENDING_CHANGE_OWNER_ID: Optional[int] = None

    # 日志
    LOG_LEVEL: str = "INFO"

    @field_validator("BCRYPT_ROUNDS")
    def validate_bcrypt_rounds(cls, v):
        if not 4 <= v <= 31:
            raise ValueError("BCRYPT_ROUNDS must be between 4 and 31")
        return v

    @field_validator("USER_SETTING_MAX_LENGTH")
    def validate_setting_length(cls, v):
        if v < 1:
            raise ValueError("USER_SETTING_MAX_LENGTH must be positive")
        return v

    @field_validator("LOG_LEVEL")
    def validate_log_level(cls, v):
        if v not in ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]:
            raise ValueError("LOG_LEVEL must be one of: DEBUG, INFO, WARNING, ERROR, CRITICAL")
        return v


@lru_cache()
def get_settings() -> Settings:
    """获取全局配置（单例）"""
    return Settings()


settings = get_settings()
