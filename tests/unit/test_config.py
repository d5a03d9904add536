"""
config.config 單元測試
驗證 Config 的設定驗證與匯出。
"""

import pytest

from config.config import Config, ConfigValidationError


class TestConfigValidation:
    """設定值驗證"""

    def test_defaults_are_valid(self, nav_config):
        nav_config.validate()

    def test_non_positive_timeout_raises(self, nav_config):
        nav_config.WAIT_TIMEOUT = 0
        with pytest.raises(ConfigValidationError) as exc_info:
            nav_config.validate()
        assert "WAIT_TIMEOUT" in str(exc_info.value)

    def test_interval_larger_than_timeout_raises(self, nav_config):
        nav_config.WAIT_TIMEOUT = 1
        nav_config.WAIT_INTERVAL = 2
        with pytest.raises(ConfigValidationError) as exc_info:
            nav_config.validate()
        assert "WAIT_INTERVAL" in str(exc_info.value)

    def test_validation_error_has_error_list(self, nav_config):
        nav_config.WAIT_TIMEOUT = -1
        nav_config.WAIT_INTERVAL = -1
        nav_config.PRESS_DURATION = -1
        nav_config.SWIPE_DURATION = -1
        with pytest.raises(ConfigValidationError) as exc_info:
            nav_config.validate()
        assert len(exc_info.value.errors) == 4


class TestConfigExport:
    """as_dict"""

    def test_as_dict_keys(self):
        assert set(Config.as_dict()) == {
            "WAIT_TIMEOUT", "WAIT_INTERVAL", "PRESS_DURATION", "SWIPE_DURATION",
        }

    def test_nav_config_restores_values(self, nav_config):
        """nav_config fixture 結束後會還原（這裡只確認可修改）"""
        nav_config.WAIT_TIMEOUT = 0.5
        assert Config.as_dict()["WAIT_TIMEOUT"] == 0.5
