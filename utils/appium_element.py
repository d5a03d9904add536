"""
Appium 元素 handle
把 (driver, locator) 包成 screengraph.UIElement，讓 graph 可以直接宣告在真機 / 模擬器上。

元素每次操作時才重新查找，不持有 WebElement，畫面切換後不會 stale。

用法：
    from utils.appium_element import AppiumApp

    app = AppiumApp(driver)

    def browser_tab(scene):
        scene.tap(app.by_accessibility_id("TabToolbar.menuButton"), to="BrowserTabMenu")
        scene.type_text("https://example.com\\n", into=app.by_id("url"), to="WebPageLoading")
"""

from appium.webdriver.common.appiumby import AppiumBy
from selenium.common.exceptions import WebDriverException
from selenium.webdriver.common.action_chains import ActionChains

from config.config import Config
from screengraph.wait import UIElement
from utils.logger import logger


class AppiumElement(UIElement):
    """以 locator 延遲查找的 UI 元素"""

    def __init__(self, driver, locator: tuple, description: str = ""):
        self.driver = driver
        self.locator = locator
        self.description = description or f"{locator[0]}={locator[1]}"

    def __repr__(self) -> str:
        return f"AppiumElement({self.description})"

    __str__ = __repr__

    def _find(self):
        return self.driver.find_element(*self.locator)

    # ── 狀態查詢 ──

    @property
    def exists(self) -> bool:
        try:
            return len(self.driver.find_elements(*self.locator)) > 0
        except WebDriverException:
            return False

    @property
    def is_enabled(self) -> bool:
        try:
            return bool(self._find().is_enabled())
        except WebDriverException:
            return False

    @property
    def is_hittable(self) -> bool:
        try:
            element = self._find()
            return bool(element.is_displayed() and element.is_enabled())
        except WebDriverException:
            return False

    # ── 手勢 ──

    def tap(self) -> None:
        logger.info(f"點擊元素: {self.description}")
        self._find().click()

    def double_tap(self) -> None:
        logger.info(f"雙擊元素: {self.description}")
        ActionChains(self.driver).double_click(self._find()).perform()

    def type_text(self, text: str) -> None:
        logger.info(f"輸入文字: '{text}' -> {self.description}")
        self._find().send_keys(text)

    def press(self, duration: float = 1.0) -> None:
        logger.info(f"長按元素: {self.description} ({duration}s)")
        actions = ActionChains(self.driver)
        actions.click_and_hold(self._find()).pause(duration).release().perform()

    def swipe_left(self) -> None:
        self._swipe(0.8, 0.5, 0.2, 0.5)

    def swipe_right(self) -> None:
        self._swipe(0.2, 0.5, 0.8, 0.5)

    def swipe_up(self) -> None:
        self._swipe(0.5, 0.8, 0.5, 0.2)

    def swipe_down(self) -> None:
        self._swipe(0.5, 0.2, 0.5, 0.8)

    def _swipe(self, fx1: float, fy1: float, fx2: float, fy2: float) -> None:
        """在元素範圍內，以相對位置 (0~1) 滑動"""
        rect = self._find().rect
        x, y, w, h = rect["x"], rect["y"], rect["width"], rect["height"]
        start = (x + int(w * fx1), y + int(h * fy1))
        end = (x + int(w * fx2), y + int(h * fy2))
        logger.info(f"滑動 {self.description}: {start} → {end}")
        self.driver.swipe(start[0], start[1], end[0], end[1], Config.SWIPE_DURATION)


class AppiumApp:
    """AppiumElement 工廠，對應 XCUIApplication 的查詢入口"""

    def __init__(self, driver):
        self.driver = driver

    def element(self, by: str, value: str, description: str = "") -> AppiumElement:
        return AppiumElement(self.driver, (by, value), description)

    def by_id(self, resource_id: str) -> AppiumElement:
        return self.element(AppiumBy.ID, resource_id)

    def by_accessibility_id(self, accessibility_id: str) -> AppiumElement:
        return self.element(AppiumBy.ACCESSIBILITY_ID, accessibility_id)

    def by_xpath(self, xpath: str) -> AppiumElement:
        return self.element(AppiumBy.XPATH, xpath)

    def by_class(self, class_name: str) -> AppiumElement:
        return self.element(AppiumBy.CLASS_NAME, class_name)

    def by_text(self, text: str, partial: bool = False) -> AppiumElement:
        if partial:
            xpath = f'//*[contains(@text, "{text}")]'
        else:
            xpath = f'//*[@text="{text}"]'
        return self.element(AppiumBy.XPATH, xpath, description=f"text={text}")
