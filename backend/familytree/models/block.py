"""
首页布局域模型 - 模块块与块设置
对应 wt_block / wt_block_setting
"""

from typing import Optional

from sqlmodel import SQLModel, Field

from .base import TABLE_PREFIX


class Block(SQLModel, table=True):
    """
    首页模块块
    user_id 非空时属于某个用户的个人首页，gedcom_id 非空时属于某棵树的首页
    """
    __tablename__ = f"{TABLE_PREFIX}block"

    block_id: Optional[int] = Field(default=None, primary_key=True)
    gedcom_id: Optional[int] = Field(default=None, foreign_key=f"{TABLE_PREFIX}gedcom.gedcom_id")
    user_id: Optional[int] = Field(default=None, foreign_key=f"{TABLE_PREFIX}user.user_id", index=True)
    xref: Optional[str] = Field(default=None, max_length=20)
    location: Optional[str] = Field(default=None, max_length=4)  # main / side
    block_order: int = Field(nullable=False)
    module_name: str = Field(max_length=32, nullable=False)


class BlockSetting(SQLModel, table=True):
    """块设置"""
    __tablename__ = f"{TABLE_PREFIX}block_setting"

    block_id: int = Field(foreign_key=f"{TABLE_PREFIX}block.block_id", primary_key=True)
    setting_name: str = Field(max_length=32, primary_key=True)
    setting_value: str = Field(nullable=False)
