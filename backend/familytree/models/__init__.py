"""
数据库模型模块
导出所有表模型和枚举类型
"""

# 用户域模型
from .user import UserRecord, UserSetting, DEFAULT_USER_ID, DEFAULT_USER_NAME

# 家谱树域模型
from .tree import Tree, TreeSetting, UserTreeSetting

# 首页布局域模型
from .block import Block, BlockSetting

# 站点活动域模型
from .activity import LogEntry, LogType, PendingChange, ChangeStatus, Message, UserSession

# 基础模型
from .base import TimestampModel, TABLE_PREFIX

# 定义导出的内容
__all__ = [
    # 用户域
    "UserRecord", "UserSetting",
    "DEFAULT_USER_ID", "DEFAULT_USER_NAME",
    # 家谱树域
    "Tree", "TreeSetting", "UserTreeSetting",
    # 首页布局域
    "Block", "BlockSetting",
    # 站点活动域
    "LogEntry", "LogType",
    "PendingChange", "ChangeStatus",
    "Message", "UserSession",
    # 基础模型
    "TimestampModel", "TABLE_PREFIX"
]
