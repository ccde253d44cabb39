"""
用户域模型 - 用户表与用户设置表
对应 wt_user / wt_user_setting
"""

from typing import Optional

from sqlmodel import SQLModel, Field

from .base import TABLE_PREFIX, TimestampModel

# 哨兵账户：user_id <= 0 的行不是真实用户
# -1 为 "默认用户"，保存默认首页布局
DEFAULT_USER_ID = -1
DEFAULT_USER_NAME = "DEFAULT_USER"


class UserRecord(TimestampModel, table=True):
    """
    用户表
    存储登录名、显示名、邮箱和密码哈希
    """
    __tablename__ = f"{TABLE_PREFIX}user"

    # SQLite 下使用 AUTOINCREMENT：表中只有哨兵行 (-1) 时，新 ID 仍然从 1 开始
    __table_args__ = {"sqlite_autoincrement": True}

    # 主键，自增
    user_id: Optional[int] = Field(default=None, primary_key=True)

    # 登录名，区分大小写，唯一
    user_name: str = Field(max_length=32, unique=True, index=True, nullable=False)

    # 显示名（真实姓名）
    real_name: str = Field(max_length=64, nullable=False)

    # 邮箱，唯一
    # 唯一约束由数据库保证，Repository 不做查重
    email: str = Field(max_length=64, unique=True, index=True, nullable=False)

    # 密码哈希，永远不存明文
    password: str = Field(max_length=128, nullable=False)


class UserSetting(SQLModel, table=True):
    """
    用户设置表
    每个用户的 键 -> 字符串值
    """
    __tablename__ = f"{TABLE_PREFIX}user_setting"

    # 复合主键 (user_id, setting_name)，相当于 REPLACE INTO 的唯一键
    user_id: int = Field(foreign_key=f"{TABLE_PREFIX}user.user_id", primary_key=True)
    setting_name: str = Field(max_length=32, primary_key=True)

    # 超过列宽的值在写入前截断
    setting_value: str = Field(max_length=255, nullable=False)
