"""
数据库初始化单元测试
验证数据库表的创建和默认账户的生成
"""

import os

from sqlalchemy import inspect
from sqlmodel import Session, create_engine, select
from unittest.mock import patch

from familytree.db.init_db import (
    create_tables, create_default_user, create_default_data, get_database_url, init_db
)
from familytree.models import UserRecord, DEFAULT_USER_ID
from familytree.repositories.user_repository import UserRepository
from familytree.security.passwords import PasswordHasher


class TestDatabaseInit:
    """测试数据库初始化"""

    def test_create_tables(self):
        """测试创建所有表"""
        engine = create_engine("sqlite:///:memory:", connect_args={"check_same_thread": False})

        create_tables(engine)

        table_names = set(inspect(engine).get_table_names())
        assert {
            "wt_user", "wt_user_setting",
            "wt_gedcom", "wt_gedcom_setting", "wt_user_gedcom_setting",
            "wt_block", "wt_block_setting",
            "wt_log", "wt_change", "wt_message", "wt_session"
        } <= table_names

    def test_create_default_user(self):
        """测试创建默认账户，重复调用返回已存在的记录"""
        engine = create_engine("sqlite:///:memory:", connect_args={"check_same_thread": False})
        create_tables(engine)

        with Session(engine) as session:
            user = create_default_user(session)

            assert user.user_id == DEFAULT_USER_ID
            assert user.user_name == "DEFAULT_USER"

            user2 = create_default_user(session)
            assert user2.user_id == user.user_id
            assert len(session.exec(select(UserRecord)).all()) == 1

    def test_default_user_is_not_a_real_user(self):
        """测试默认账户不计入用户数，也无法登录"""
        engine = create_engine("sqlite:///:memory:", connect_args={"check_same_thread": False})
        create_tables(engine)

        with Session(engine) as session:
            create_default_data(session)
            repository = UserRepository(session, hasher=PasswordHasher(rounds=4))

            default_user = repository.find_by_id(DEFAULT_USER_ID)
            assert default_user is not None
            assert repository.count() == 0
            assert repository.all() == []
            assert repository.check_password(default_user, "") is False

    def test_get_database_url_from_settings(self):
        """测试未设置 DATABASE_PATH 时使用配置"""
        with patch.dict(os.environ, {}, clear=True):
            with patch("familytree.db.init_db.settings") as mock_settings:
                mock_settings.DATABASE_URL = "postgresql://localhost/webtrees"
                assert get_database_url() == "postgresql://localhost/webtrees"

    def test_get_database_url_from_path(self, tmp_path):
        """测试 DATABASE_PATH 指定 SQLite 文件"""
        db_file = tmp_path / "accounts.db"
        with patch.dict(os.environ, {"DATABASE_PATH": str(db_file)}):
            assert get_database_url() == f"sqlite:///{db_file}"

    def test_init_db(self, tmp_path):
        """测试完整初始化流程"""
        db_file = tmp_path / "accounts.db"
        with patch.dict(os.environ, {"DATABASE_PATH": str(db_file)}):
            init_db()
            init_db()

        engine = create_engine(f"sqlite:///{db_file}")
        with Session(engine) as session:
            users = session.exec(select(UserRecord)).all()
            assert [u.user_id for u in users] == [DEFAULT_USER_ID]
