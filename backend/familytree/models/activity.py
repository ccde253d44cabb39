"""
站点活动域模型 - 日志、待审核修改、站内消息、登录会话
对应 wt_log / wt_change / wt_message / wt_session
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from sqlmodel import SQLModel, Field

from .base import TABLE_PREFIX, utc_now


class LogType(str, Enum):
    """日志类型"""
    AUTH = "auth"
    CONFIG = "config"
    DEBUG = "debug"
    EDIT = "edit"
    ERROR = "error"
    MEDIA = "media"
    SEARCH = "search"


class ChangeStatus(str, Enum):
    """待审核修改的状态"""
    ACCEPTED = "accepted"
    PENDING = "pending"
    REJECTED = "rejected"


class LogEntry(SQLModel, table=True):
    """
    日志表
    删除用户时保留日志，只把 user_id 置空
    """
    __tablename__ = f"{TABLE_PREFIX}log"

    log_id: Optional[int] = Field(default=None, primary_key=True)
    log_time: datetime = Field(default_factory=utc_now, nullable=False)
    log_type: LogType = Field(nullable=False)
    log_message: str = Field(nullable=False)
    ip_address: str = Field(default="", max_length=40, nullable=False)
    user_id: Optional[int] = Field(default=None, foreign_key=f"{TABLE_PREFIX}user.user_id", index=True)
    gedcom_id: Optional[int] = Field(default=None, foreign_key=f"{TABLE_PREFIX}gedcom.gedcom_id")


class PendingChange(SQLModel, table=True):
    """
    待审核修改表
    user_id 是软引用：删除用户时按 PendingChangePolicy 处理，不加外键
    """
    __tablename__ = f"{TABLE_PREFIX}change"

    change_id: Optional[int] = Field(default=None, primary_key=True)
    change_time: datetime = Field(default_factory=utc_now, nullable=False)
    status: ChangeStatus = Field(default=ChangeStatus.PENDING, nullable=False)
    gedcom_id: int = Field(foreign_key=f"{TABLE_PREFIX}gedcom.gedcom_id", nullable=False)
    xref: str = Field(max_length=20, nullable=False)
    old_gedcom: str = Field(default="", nullable=False)
    new_gedcom: str = Field(default="", nullable=False)
    user_id: int = Field(index=True, nullable=False)


class Message(SQLModel, table=True):
    """
    站内消息表
    user_id 为收件人
    """
    __tablename__ = f"{TABLE_PREFIX}message"

    message_id: Optional[int] = Field(default=None, primary_key=True)
    sender: str = Field(max_length=64, nullable=False)
    ip_address: str = Field(default="", max_length=40, nullable=False)
    user_id: int = Field(foreign_key=f"{TABLE_PREFIX}user.user_id", index=True, nullable=False)
    subject: str = Field(max_length=255, nullable=False)
    body: str = Field(nullable=False)
    created: datetime = Field(default_factory=utc_now, nullable=False)


class UserSession(SQLModel, table=True):
    """
    登录会话表
    有会话记录的用户即为"当前在线"
    """
    __tablename__ = f"{TABLE_PREFIX}session"

    session_id: str = Field(max_length=128, primary_key=True)
    session_time: datetime = Field(default_factory=utc_now, nullable=False)
    user_id: int = Field(index=True, nullable=False)
    ip_address: str = Field(default="", max_length=40, nullable=False)
    session_data: str = Field(default="", nullable=False)
