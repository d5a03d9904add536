"""
Wait Condition — 等待 UI 元素達到某個狀態

導航引擎本身不定位元素，只要求元素 handle 提供：
- 狀態查詢: exists / is_enabled / is_hittable
- 手勢: tap / double_tap / type_text / swipe_* / press

逾時不 raise，而是呼叫 timeout handler（通常是往 DiagnosticSink 回報）。
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable

from selenium.common.exceptions import WebDriverException

from utils.logger import logger
from utils.wait_helper import FluentWait


class UIElement(ABC):
    """UI 元素 handle 介面（由外部注入，例如 utils.appium_element.AppiumElement）"""

    @property
    @abstractmethod
    def exists(self) -> bool: ...

    @property
    @abstractmethod
    def is_enabled(self) -> bool: ...

    @property
    @abstractmethod
    def is_hittable(self) -> bool: ...

    @abstractmethod
    def tap(self) -> None: ...

    @abstractmethod
    def double_tap(self) -> None: ...

    @abstractmethod
    def type_text(self, text: str) -> None: ...

    @abstractmethod
    def swipe_left(self) -> None: ...

    @abstractmethod
    def swipe_right(self) -> None: ...

    @abstractmethod
    def swipe_up(self) -> None: ...

    @abstractmethod
    def swipe_down(self) -> None: ...

    @abstractmethod
    def press(self, duration: float) -> None: ...


ElementPredicate = Callable[[UIElement], bool]


# ── 內建 predicate ──

def exists(element: UIElement) -> bool:
    return bool(element.exists)


def not_exists(element: UIElement) -> bool:
    return not element.exists


def enabled(element: UIElement) -> bool:
    return bool(element.is_enabled)


def hittable(element: UIElement) -> bool:
    return bool(element.is_hittable)


def wait_or_timeout(
    element: UIElement,
    predicate: ElementPredicate = exists,
    timeout: float | None = None,
    on_timeout: Callable[[], None] | None = None,
) -> bool:
    """
    阻塞等待 predicate(element) 成立。

    Args:
        element: 要觀察的元素
        predicate: 判斷條件，預設為 exists
        timeout: 最長等待秒數，預設 Config.WAIT_TIMEOUT
        on_timeout: 逾時時同步呼叫

    Returns:
        條件是否在時限內成立

    查詢時的 WebDriverException（元素剛好 stale、畫面切換中）視為尚未成立。
    """
    name = getattr(predicate, "__name__", "predicate")
    waiter = FluentWait().ignoring(WebDriverException)
    if timeout is not None:
        waiter.timeout(timeout)
    try:
        (
            waiter
            .message(f"等待 {name}({element}) 逾時")
            .until(lambda: predicate(element))
            .wait()
        )
        return True
    except TimeoutError as e:
        logger.warning(str(e))
        if on_timeout is not None:
            on_timeout()
        return False


@dataclass
class WaitCondition:
    """進入 screen state 時要等待的條件，帶宣告位置以便回報"""
    element: UIElement
    predicate: ElementPredicate = exists
    file: str = ""
    line: int = 0
    timeout: float | None = None

    def wait(self, on_timeout: Callable[[], None]) -> bool:
        return wait_or_timeout(
            self.element, self.predicate, timeout=self.timeout, on_timeout=on_timeout,
        )
