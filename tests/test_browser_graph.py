"""
瀏覽器 App 導航測試（範例）

用一個會隨點擊切換畫面的假 App，示範整張 graph 的宣告方式：
首次啟動 → 瀏覽頁 → 選單 → 設定，夜間模式切換、貼上 / 輸入網址等 action 串。
換成 utils.appium_element.AppiumApp 就能跑在真機上。
"""

import pytest

from screengraph import (
    DiagnosticKind,
    NavigationFailedError,
    RecordingSink,
    ScreenGraph,
    UIElement,
    UserState,
    not_exists,
)

DEFAULT_URL = "https://example.com"


class FakeBrowserApp:
    """只記得目前畫面、網址與夜間模式的假 App"""

    def __init__(self):
        self.screen = "BrowserTab"
        self.url = "support.mozilla.org"
        self.night_mode = False
        self.taps: list[str] = []

    def show(self, screen):
        self.screen = screen

    def paste(self, url):
        self.url = url


class FakeElement(UIElement):
    def __init__(self, app, name, visible_on=(), on_tap=None, on_type=None):
        self.app = app
        self.name = name
        self.visible_on = set(visible_on)
        self._on_tap = on_tap
        self._on_type = on_type

    def __str__(self):
        return self.name

    @property
    def exists(self):
        return self.app.screen in self.visible_on

    @property
    def is_enabled(self):
        return self.exists

    @property
    def is_hittable(self):
        return self.exists

    def tap(self):
        self.app.taps.append(self.name)
        if self._on_tap:
            self._on_tap()

    def double_tap(self):
        self.tap()

    def type_text(self, text):
        if self._on_type:
            self._on_type(text)

    def press(self, duration):
        pass

    def swipe_left(self):
        pass

    def swipe_right(self):
        pass

    def swipe_up(self):
        pass

    def swipe_down(self):
        pass


class BrowserState(UserState):
    initial_screen_state = "FirstRun"

    def __init__(self):
        super().__init__()
        self.url = None
        self.night_mode = False


def _toggle_night_mode(app):
    app.night_mode = not app.night_mode
    app.show("BrowserTab")


def _type_address(app, text):
    app.url = text.strip()
    app.show("BrowserTab")


def create_browser_graph(app: FakeBrowserApp, sink=None) -> ScreenGraph:
    url_field = FakeElement(app, "url", ["BrowserTab"], on_tap=lambda: app.show("URLBarOpen"))
    address = FakeElement(app, "address", ["URLBarOpen"],
                          on_type=lambda text: _type_address(app, text))
    progress = FakeElement(app, "progress")
    menu_button = FakeElement(app, "TabToolbar.menuButton", ["BrowserTab"],
                              on_tap=lambda: app.show("BrowserTabMenu"))
    context_menu = FakeElement(app, "Context Menu", ["BrowserTabMenu"])
    settings_cell = FakeElement(app, "Settings", ["BrowserTabMenu"],
                                on_tap=lambda: app.show("SettingsScreen"))
    night_mode_cell = FakeElement(app, "menu-NightMode", ["BrowserTabMenu"],
                                  on_tap=lambda: _toggle_night_mode(app))
    cancel = FakeElement(app, "PhotonMenu.cancel", ["BrowserTabMenu"],
                         on_tap=lambda: app.show("BrowserTab"))
    navigation_back = FakeElement(app, "Back", ["SettingsScreen"],
                                  on_tap=lambda: app.show("BrowserTab"))

    graph = ScreenGraph(BrowserState, sink=sink)

    def first_run(scene):
        scene.noop("BrowserTab")
        scene.tap(url_field, to="URLBarOpen")

    def browser_tab(scene):
        scene.on_enter(
            lambda state: setattr(state, "url", app.url),
            element=progress, predicate=not_exists,
        )
        scene.tap(menu_button, to="BrowserTabMenu")
        scene.tap(url_field, to="URLBarOpen")
        scene.gesture_for_action(
            "LoadURLByPasting", "LoadURL",
            recorder=lambda state: app.paste(state.url or DEFAULT_URL),
        )

    def url_bar_open(scene):
        scene.gesture_for_action(
            "LoadURLByTyping", "LoadURL",
            recorder=lambda state: address.type_text(f"{state.url or DEFAULT_URL}\n"),
        )

    def browser_tab_menu(scene):
        scene.dismiss_on_use = True
        scene.on_enter(element=context_menu)
        scene.tap(settings_cell, to="SettingsScreen")
        scene.tap_for_action(
            night_mode_cell, "ToggleNightMode",
            recorder=lambda state: setattr(state, "night_mode", not state.night_mode),
        )
        scene.back_action = cancel.tap

    def settings_screen(scene):
        scene.back_action = navigation_back.tap

    graph.add_screen_state("FirstRun", first_run)
    graph.add_screen_state("BrowserTab", browser_tab)
    graph.add_screen_state("URLBarOpen", url_bar_open)
    graph.add_screen_action("LoadURL", transition_to="BrowserTab")
    graph.add_screen_state("BrowserTabMenu", browser_tab_menu)
    graph.add_screen_state("SettingsScreen", settings_screen)
    return graph


class TestBrowserGraph:
    """瀏覽器 App 導航"""

    @pytest.fixture(autouse=True)
    def fast_wait(self, nav_config):
        nav_config.WAIT_TIMEOUT = 0.2
        nav_config.WAIT_INTERVAL = 0.02

    @pytest.fixture
    def app(self):
        return FakeBrowserApp()

    @pytest.fixture
    def navigator(self, app, diagnostics):
        return create_browser_graph(app, diagnostics).navigator()

    def test_user_state_changes(self, navigator, diagnostics):
        """測試：進入瀏覽頁時從網址列記錄 url"""
        assert navigator.user_state.url is None
        navigator.goto("BrowserTab")
        assert navigator.user_state.url.startswith("support.mozilla.org")
        assert diagnostics.failure_count == 0

    def test_back_stack(self, navigator, app, diagnostics):
        """測試：經過選單到設定，再用返回鍵回到瀏覽頁"""
        navigator.goto("SettingsScreen")
        assert app.screen == "SettingsScreen"

        navigator.goto("BrowserTab")
        assert navigator.screen_state == "BrowserTab"
        assert app.screen == "BrowserTab"
        assert app.taps[-1] == "Back"
        assert diagnostics.failure_count == 0

    def test_simple_toggle_action(self, navigator, app, diagnostics):
        """測試：夜間模式切換"""
        navigator.perform_action("ToggleNightMode")
        assert navigator.user_state.night_mode is True
        assert app.night_mode is True
        assert navigator.screen_state == "BrowserTab"

        navigator.toggle_on(navigator.user_state.night_mode, "ToggleNightMode")
        assert app.night_mode is True
        assert navigator.screen_state == "BrowserTab"

        navigator.toggle_off(navigator.user_state.night_mode, "ToggleNightMode")
        assert navigator.user_state.night_mode is False
        assert app.night_mode is False
        assert navigator.screen_state == "BrowserTab"
        assert diagnostics.failure_count == 0

    def test_load_url_by_pasting(self, navigator, app, diagnostics):
        """測試：貼上網址 action 串"""
        navigator.now_at("BrowserTab")
        navigator.user_state.url = DEFAULT_URL
        navigator.perform_action("LoadURLByPasting")
        assert navigator.screen_state == "BrowserTab"
        assert app.url == DEFAULT_URL
        assert navigator.user_state.url == DEFAULT_URL
        assert diagnostics.failure_count == 0

    def test_load_url_by_typing(self, navigator, app, diagnostics):
        """測試：輸入網址 action 串"""
        navigator.user_state.url = DEFAULT_URL
        navigator.perform_action("LoadURLByTyping")
        assert navigator.screen_state == "BrowserTab"
        assert app.url == DEFAULT_URL
        assert app.taps == ["url"]
        assert diagnostics.failure_count == 0

    def test_goto_shared_action_lands_on_browser(self, navigator, diagnostics):
        """測試：直接 goto 串尾的 LoadURL 也會停在瀏覽頁"""
        navigator.goto("BrowserTab")
        navigator.goto("LoadURL")
        assert navigator.screen_state == "BrowserTab"
        assert diagnostics.failure_count == 0

    def test_out_of_sync_app_reports_missing_element(self, navigator, app, diagnostics):
        """測試：App 實際畫面跟 Navigator 不一致時，回報找不到元素"""
        navigator.goto("BrowserTab")
        app.show("SettingsScreen")

        navigator.goto("BrowserTabMenu")

        failures = diagnostics.of_kind(DiagnosticKind.ELEMENT_TIMEOUT)
        assert failures[0].description == "Cannot find TabToolbar.menuButton"
        assert failures[1].description.startswith("Cannot get from BrowserTab to BrowserTabMenu")
        diagnostics.clear()

    def test_sink_as_context_manager(self, app):
        """測試：with 區塊結束時一次拋出所有導航失敗"""
        graph = create_browser_graph(app)
        with pytest.raises(NavigationFailedError) as exc_info:
            with RecordingSink() as sink:
                navigator = graph.navigator(sink=sink)
                navigator.goto("ReaderMode")
                navigator.goto("SettingsScreen")
        assert len(exc_info.value.failures) == 1
        assert app.screen == "SettingsScreen"
