"""
pytest 全域 fixtures

提供：
- diagnostics fixture：每個測試一份 RecordingSink
- 測試失敗時把導航失敗摘要附加到 log / Allure 報告
- 命令列參數支援 (--wait-timeout)
- 每個測試前清空全域 event bus
- element_factory：建立假的 UI 元素 handle
"""

from unittest.mock import MagicMock, PropertyMock

import pytest

from config.config import Config
from screengraph.diagnostics import RecordingSink
from screengraph.event_bus import event_bus
from utils.allure_helper import attach_diagnostics
from utils.logger import logger


# ── 命令列參數 ──

def pytest_addoption(parser):
    """新增自訂命令列參數"""
    parser.addoption(
        "--wait-timeout",
        action="store",
        default=None,
        type=float,
        help="WaitCondition 最長等待秒數（覆蓋 WAIT_TIMEOUT）",
    )


def pytest_configure(config):
    """pytest 啟動時：套用命令列設定並驗證"""
    timeout = config.getoption("--wait-timeout")
    if timeout is not None:
        Config.WAIT_TIMEOUT = timeout
    Config.validate()


# ── Diagnostics ──

@pytest.fixture
def diagnostics():
    """導航失敗收集器"""
    sink = RecordingSink()
    yield sink
    if sink.failure_count:
        logger.info(sink.summary())


@pytest.fixture
def nav_config():
    """暫時調整 Config，測試結束後還原"""
    saved = Config.as_dict()
    yield Config
    for key, value in saved.items():
        setattr(Config, key, value)


# ── 假元素 ──

@pytest.fixture
def element_factory():
    """
    建立假的 UIElement。

    用法：
        button = element_factory("menu")                 # exists=True
        spinner = element_factory("spinner", exists=False)
    """
    def _make(name: str = "element", exists: bool = True,
              enabled: bool = True, hittable: bool = True) -> MagicMock:
        element = MagicMock(name=name)
        type(element).exists = PropertyMock(return_value=exists)
        type(element).is_enabled = PropertyMock(return_value=enabled)
        type(element).is_hittable = PropertyMock(return_value=hittable)
        element.__str__.return_value = name
        return element
    return _make


# ── 測試生命週期 Hook ──

@pytest.hookimpl(tryfirst=True, hookwrapper=True)
def pytest_runtest_makereport(item, call):
    """測試失敗時：附上導航失敗摘要"""
    outcome = yield
    report = outcome.get_result()

    if report.when == "call" and report.failed:
        sink = item.funcargs.get("diagnostics")
        if sink is not None and sink.failure_count:
            logger.error(f"測試失敗: {item.name}\n{sink.summary()}")
            attach_diagnostics(sink, f"導航失敗: {item.name}")


def pytest_runtest_setup(item):
    """每個測試開始前清空 event bus"""
    event_bus.clear()
