"""
等待工具
提供通用的條件輪詢與 Fluent Wait，導航引擎的 WaitCondition 建立在這之上。

用法：
    from utils.wait_helper import wait_for, FluentWait

    # 簡易等待（逾時拋出 TimeoutError）
    wait_for(lambda: element.exists, timeout=5)

    # Fluent Wait（可鏈式設定）
    (
        FluentWait()
        .timeout(5)
        .polling(0.2)
        .ignoring(StaleElementReferenceException)
        .until(lambda: element.is_hittable)
        .message("設定按鈕無法點擊")
        .wait()
    )
"""

import time
from typing import Callable, TypeVar

from config.config import Config

T = TypeVar("T")


def wait_for(
    condition: Callable[[], T],
    timeout: float | None = None,
    interval: float | None = None,
    message: str = "",
) -> T:
    """
    等待某個條件成立。

    Args:
        condition: 回傳值為 truthy 時視為成立的 callable
        timeout: 最長等待秒數，預設 Config.WAIT_TIMEOUT
        interval: 輪詢間隔秒數，預設 Config.WAIT_INTERVAL
        message: 超時時顯示的錯誤訊息

    Returns:
        condition 的回傳值

    Raises:
        TimeoutError: 超過 timeout 仍未成立
    """
    timeout = Config.WAIT_TIMEOUT if timeout is None else timeout
    interval = Config.WAIT_INTERVAL if interval is None else interval
    end_time = time.monotonic() + timeout
    last_exception = None

    while True:
        try:
            result = condition()
            if result:
                return result
        except Exception as e:
            last_exception = e
        if time.monotonic() >= end_time:
            break
        time.sleep(interval)

    error = message or f"等待逾時 ({timeout}s)"
    if last_exception:
        error += f" | 最後的例外: {last_exception}"
    raise TimeoutError(error)


class FluentWait:
    """
    Fluent Wait — 可鏈式設定的等待器

    比 wait_for() 多了「忽略指定例外」：被忽略的例外視為尚未成立，
    不會出現在逾時訊息中。
    """

    def __init__(self):
        self._timeout: float = Config.WAIT_TIMEOUT
        self._interval: float = Config.WAIT_INTERVAL
        self._condition: Callable | None = None
        self._message: str = ""
        self._ignored: tuple = ()

    def timeout(self, seconds: float) -> "FluentWait":
        """設定最大等待秒數"""
        self._timeout = seconds
        return self

    def polling(self, interval: float) -> "FluentWait":
        """設定輪詢間隔秒數"""
        self._interval = interval
        return self

    def ignoring(self, *exception_types: type) -> "FluentWait":
        """設定要忽略的例外類型"""
        self._ignored = exception_types
        return self

    def message(self, msg: str) -> "FluentWait":
        """設定逾時錯誤訊息"""
        self._message = msg
        return self

    def until(self, condition: Callable[[], T]) -> "FluentWait":
        """設定等待條件"""
        self._condition = condition
        return self

    def wait(self) -> T:
        """執行等待，回傳條件的回傳值"""
        if self._condition is None:
            raise ValueError("必須先呼叫 .until(condition) 設定等待條件")

        ignored = self._ignored

        def _checked():
            try:
                return self._condition()
            except ignored:
                return None

        return wait_for(
            _checked,
            timeout=self._timeout,
            interval=self._interval,
            message=self._message or f"Fluent wait 逾時 ({self._timeout}s)",
        )
