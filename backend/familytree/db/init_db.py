"""
数据库初始化脚本
负责创建数据库表结构和默认（哨兵）账户
"""

import os
from pathlib import Path

from loguru import logger
from sqlmodel import SQLModel, Session, create_engine

from familytree.core.config import settings
from familytree.core.logging import configure_logging
# 导入所有模型，确保表注册到 SQLModel.metadata
from familytree.models import (
    UserRecord, UserSetting,
    Tree, TreeSetting, UserTreeSetting,
    Block, BlockSetting,
    LogEntry, PendingChange, Message, UserSession,
    DEFAULT_USER_ID, DEFAULT_USER_NAME
)


def get_database_url() -> str:
    """
    获取数据库连接 URL
    优先使用 DATABASE_PATH 环境变量（SQLite 文件路径），否则使用配置中的 DATABASE_URL
    """
    db_path = os.environ.get("DATABASE_PATH")
    if not db_path:
        return settings.DATABASE_URL
    # 确保路径是绝对路径
    if not os.path.isabs(db_path):
        # 从 backend 目录解析
        project_root = Path(__file__).parent.parent.parent
        db_path = str(project_root / db_path)
    return f"sqlite:///{db_path}"


def get_engine():
    """
    创建并返回数据库引擎
    """
    database_url = get_database_url()
    connect_args = {}
    if database_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False  # SQLite 特有配置
    return create_engine(
        database_url,
        echo=settings.DATABASE_ECHO,
        connect_args=connect_args
    )


def create_tables(engine) -> None:
    """
    创建所有数据库表
    SQLModel 会自动根据模型创建表结构
    """
    SQLModel.metadata.create_all(engine)
    logger.info(f"Database tables created at {engine.url!r}")


def create_default_user(session: Session) -> UserRecord:
    """
    创建默认用户（user_id = -1）
    它不是真实用户，只用来保存新用户首页的默认布局；
    密码哈希为空字符串，任何密码都无法通过校验。
    如果已存在，则返回现有记录
    """
    result = session.get(UserRecord, DEFAULT_USER_ID)
    if result:
        logger.debug(f"Default user already exists (ID: {result.user_id})")
        return result

    default_user = UserRecord(
        user_id=DEFAULT_USER_ID,
        user_name=DEFAULT_USER_NAME,
        real_name=DEFAULT_USER_NAME,
        email=DEFAULT_USER_NAME,
        password=""
    )
    session.add(default_user)
    session.commit()
    session.refresh(default_user)
    logger.info(f"Created default user (ID: {default_user.user_id})")
    return default_user


def create_default_data(session: Session) -> None:
    """
    创建所有默认数据
    """
    create_default_user(session)


def init_db() -> None:
    """
    完整的数据库初始化流程
    1. 创建数据库引擎
    2. 创建所有表结构
    3. 创建默认数据
    """
    logger.info("Initializing database")

    engine = get_engine()
    create_tables(engine)

    with Session(engine) as session:
        create_default_data(session)

    logger.info("Database initialization completed")


if __name__ == "__main__":
    # 直接运行此脚本时，执行数据库初始化
    configure_logging()
    init_db()
