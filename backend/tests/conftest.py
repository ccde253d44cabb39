"""
Pytest 测试配置
提供测试数据库、SQL 语句记录器、Repository 等测试基础设施
"""

import sys
from pathlib import Path
from typing import Generator, List

import pytest
from sqlalchemy import event
from sqlmodel import Session, create_engine

# 添加项目根目录到 sys.path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from familytree.db.init_db import create_tables
from familytree.models import Tree
from familytree.repositories.user_cache import UserCache
from familytree.repositories.user_repository import UserRepository
from familytree.security.passwords import PasswordHasher


class StatementRecorder:
    """
    记录引擎执行的 SQL 语句
    用于断言 "只查一次库" / "没有写库"
    """

    def __init__(self):
        self.statements: List[str] = []

    def __call__(self, conn, cursor, statement, parameters, context, executemany):
        self.statements.append(statement)

    def reset(self) -> None:
        self.statements.clear()

    def _starting_with(self, keyword: str) -> List[str]:
        return [s for s in self.statements if s.lstrip().upper().startswith(keyword)]

    @property
    def selects(self) -> List[str]:
        return self._starting_with("SELECT")

    @property
    def writes(self) -> List[str]:
        return [
            s for s in self.statements
            if s.lstrip().upper().startswith(("INSERT", "UPDATE", "DELETE"))
        ]

    @property
    def updates(self) -> List[str]:
        return self._starting_with("UPDATE")


# ==================== 数据库 Fixtures ====================

@pytest.fixture(scope="function")
def test_db_engine():
    """
    创建测试用的内存数据库引擎
    每个测试函数都会获得一个全新的数据库
    """
    # 使用内存 SQLite 数据库
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False}
    )

    # 创建所有表
    create_tables(engine)

    yield engine

    # 测试结束后自动清理（内存数据库自动销毁）


@pytest.fixture(scope="function")
def test_db_session(test_db_engine) -> Generator[Session, None, None]:
    """
    创建测试用的数据库会话
    """
    with Session(test_db_engine) as session:
        yield session


@pytest.fixture(scope="function")
def recorder(test_db_engine) -> Generator[StatementRecorder, None, None]:
    """
    SQL 语句记录器，挂在 before_cursor_execute 事件上
    """
    statement_recorder = StatementRecorder()
    event.listen(test_db_engine, "before_cursor_execute", statement_recorder)
    yield statement_recorder
    event.remove(test_db_engine, "before_cursor_execute", statement_recorder)


# ==================== Repository Fixtures ====================

@pytest.fixture(scope="function")
def hasher() -> PasswordHasher:
    """
    低 cost factor 的哈希器，加快测试
    """
    return PasswordHasher(rounds=4)


@pytest.fixture(scope="function")
def user_repository(test_db_session: Session, hasher: PasswordHasher) -> UserRepository:
    """
    创建 UserRepository 实例
    """
    return UserRepository(test_db_session, hasher=hasher, cache=UserCache())


# ==================== 测试数据 Fixtures ====================

@pytest.fixture(scope="function")
def test_user(user_repository: UserRepository):
    """
    创建测试用户 alice
    """
    return user_repository.create("alice", "Alice A", "alice@x.test", "pw")


@pytest.fixture(scope="function")
def test_tree(test_db_session: Session) -> Tree:
    """
    创建测试家谱树
    """
    tree = Tree(gedcom_name="royals.ged")
    test_db_session.add(tree)
    test_db_session.commit()
    test_db_session.refresh(tree)
    return tree


# ==================== Pytest 配置 ====================

def pytest_configure(config):
    """
    Pytest 初始化配置
    """
    # 标记测试分类
    config.addinivalue_line(
        "markers", "unit: Unit tests"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests"
    )
    config.addinivalue_line(
        "markers", "slow: Slow running tests"
    )
