"""
基础数据库配置模块
提供所有模型共用的基础类、表名前缀和时间工具
"""

from datetime import datetime, timezone
from typing import Optional

from sqlmodel import SQLModel, Field

# 所有表共用的前缀，与原有 wt_ 数据库保持一致
TABLE_PREFIX = "wt_"


def utc_now() -> datetime:
    """timezone-aware 的当前时间，替代已弃用的 utcnow()"""
    return datetime.now(timezone.utc)


# 全局基础模型，包含创建和更新时间戳
class TimestampModel(SQLModel):
    """时间戳基类，为模型提供 created_at 和 updated_at 字段"""
    created_at: Optional[datetime] = Field(
        default_factory=utc_now,
        nullable=False
    )
    updated_at: Optional[datetime] = Field(
        default_factory=utc_now,
        nullable=False,
        sa_column_kwargs={"onupdate": utc_now}
    )
