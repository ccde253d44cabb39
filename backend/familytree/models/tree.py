"""
家谱树域模型 - 家谱树、树设置、用户在树中的设置
对应 wt_gedcom / wt_gedcom_setting / wt_user_gedcom_setting
"""

from typing import Optional

from sqlmodel import SQLModel, Field

from .base import TABLE_PREFIX


class Tree(SQLModel, table=True):
    """
    家谱树表
    一个站点可托管多棵家谱树
    """
    __tablename__ = f"{TABLE_PREFIX}gedcom"

    gedcom_id: Optional[int] = Field(default=None, primary_key=True)
    gedcom_name: str = Field(max_length=255, unique=True, nullable=False)
    sort_order: int = Field(default=0, nullable=False)


class TreeSetting(SQLModel, table=True):
    """
    家谱树设置表
    CONTACT_USER_ID / WEBMASTER_USER_ID 的值是用户 ID（软引用，没有外键）
    """
    __tablename__ = f"{TABLE_PREFIX}gedcom_setting"

    gedcom_id: int = Field(foreign_key=f"{TABLE_PREFIX}gedcom.gedcom_id", primary_key=True)
    setting_name: str = Field(max_length=32, primary_key=True)
    setting_value: str = Field(max_length=255, nullable=False)


class UserTreeSetting(SQLModel, table=True):
    """
    用户在某棵家谱树中的设置
    例如 gedcomid：该用户在这棵树中对应的个人记录 XREF
    """
    __tablename__ = f"{TABLE_PREFIX}user_gedcom_setting"

    user_id: int = Field(foreign_key=f"{TABLE_PREFIX}user.user_id", primary_key=True)
    gedcom_id: int = Field(foreign_key=f"{TABLE_PREFIX}gedcom.gedcom_id", primary_key=True)
    setting_name: str = Field(max_length=32, primary_key=True)
    setting_value: str = Field(max_length=255, nullable=False)
