"""
配置单元测试
"""

import io
from unittest.mock import patch

import pytest
from loguru import logger
from pydantic import ValidationError

from familytree.core.config import PendingChangePolicy, Settings
from familytree.core.logging import configure_logging


class TestSettings:
    """测试配置默认值与校验"""

    def test_defaults(self, monkeypatch):
        """测试默认配置"""
        for name in [
            "DATABASE_URL", "BCRYPT_ROUNDS", "USER_SETTING_MAX_LENGTH",
            "PENDING_CHANGE_POLICY", "PENDING_CHANGE_OWNER_ID", "LOG_LEVEL"
        ]:
            monkeypatch.delenv(name, raising=False)

        config = Settings(_env_file=None)

        assert config.BCRYPT_ROUNDS == 12
        assert config.USER_SETTING_MAX_LENGTH == 255
        assert config.PENDING_CHANGE_POLICY == PendingChangePolicy.RETAIN
        assert config.PENDING_CHANGE_OWNER_ID is None
        assert config.DATABASE_URL.startswith("sqlite:///")

    def test_reads_environment(self, monkeypatch):
        """测试从环境变量读取"""
        monkeypatch.setenv("PENDING_CHANGE_POLICY", "reassign")
        monkeypatch.setenv("PENDING_CHANGE_OWNER_ID", "7")

        config = Settings(_env_file=None)

        assert config.PENDING_CHANGE_POLICY == PendingChangePolicy.REASSIGN
        assert config.PENDING_CHANGE_OWNER_ID == 7

    def test_invalid_bcrypt_rounds(self):
        """测试 bcrypt rounds 超出范围"""
        with pytest.raises(ValidationError):
            Settings(_env_file=None, BCRYPT_ROUNDS=3)

    def test_invalid_log_level(self):
        """测试非法日志级别"""
        with pytest.raises(ValidationError):
            Settings(_env_file=None, LOG_LEVEL="VERBOSE")

    def test_invalid_policy(self):
        """测试非法的待审核修改策略"""
        with pytest.raises(ValidationError):
            Settings(_env_file=None, PENDING_CHANGE_POLICY="archive")


class TestLogging:
    """测试日志配置"""

    def test_configure_logging_level(self):
        """测试低于配置级别的日志被过滤"""
        buffer = io.StringIO()
        with patch("sys.stderr", buffer):
            configure_logging("WARNING")
            logger.info("hidden message")
            logger.warning("shown message")
        configure_logging()

        output = buffer.getvalue()
        assert "shown message" in output
        assert "hidden message" not in output
