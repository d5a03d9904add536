"""
Graph 節點

兩種節點：
- ScreenStateNode: App 可以「停留」的畫面，透過 builder 宣告往外的 edge
- ScreenActionNode: 一次性的 App 動作，做完就接著到下一個節點

節點只能由 ScreenGraph 建立，builder 在編譯時被呼叫一次：

    def settings(scene):
        scene.tap(app.by_accessibility_id("Search"), to="SearchSettings")
        scene.swipe_up(app.by_class("XCUIElementTypeTable"), to="SettingsScreen2")
        scene.back_action = navigation_back

    graph.add_screen_state("SettingsScreen", settings)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable

from config.config import Config
from screengraph.diagnostics import DiagnosticKind, DiagnosticSink
from screengraph.user_state import UserState
from screengraph.wait import ElementPredicate, UIElement, WaitCondition, exists, wait_or_timeout
from utils.logger import logger
from utils.source_site import caller_site

if TYPE_CHECKING:
    from screengraph.graph import ScreenGraph

Gesture = Callable[[], None]
Recorder = Callable[[UserState], None]
Guard = Callable[[UserState], bool]
Builder = Callable[["ScreenStateNode"], None]


def _noop() -> None:
    pass


@dataclass
class Edge:
    """從 ScreenStateNode 出發、到 destination 的一條轉場"""
    destination: str
    gesture: Gesture
    element: UIElement | None = None
    file: str = ""
    line: int = 0

    def transition(self, sink: DiagnosticSink, source: str,
                   call_file: str, call_line: int) -> None:
        """
        執行手勢。

        有指定 element 時先等它出現；逾時會回報兩筆失敗
        （宣告位置 + 呼叫位置），但仍然照樣執行手勢。
        """
        if self.element is not None:
            element = self.element

            def _report() -> None:
                sink.record_failure(
                    f"Cannot find {element}", self.file, self.line,
                    kind=DiagnosticKind.ELEMENT_TIMEOUT,
                )
                sink.record_failure(
                    f"Cannot get from {source} to {self.destination}. See {self.file}",
                    call_file, call_line,
                    kind=DiagnosticKind.ELEMENT_TIMEOUT,
                )

            wait_or_timeout(element, exists, on_timeout=_report)
        self.gesture()


class GraphNode:
    """所有節點的共同欄位：名稱與宣告位置"""

    def __init__(self, graph: "ScreenGraph", name: str, file: str, line: int):
        self.graph = graph
        self.name = name
        self.file = file
        self.line = line

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r})"


class ScreenActionNode(GraphNode):
    """一次性的 App 動作，例如「切換夜間模式」、「貼上網址並載入」"""

    def __init__(self, graph: "ScreenGraph", name: str, next_node_name: str | None,
                 file: str, line: int, recorder: Recorder | None = None):
        super().__init__(graph, name, file, line)
        self.next_node_name = next_node_name
        self.recorder = recorder


class ScreenStateNode(GraphNode):
    """
    App 的一個畫面狀態

    builder 裡用 tap / swipe_* / gesture 等方法宣告離開這個畫面的方式。

    屬性：
        back_action: 回到「上一個畫面」的手勢。同一畫面可從多處進入時使用
        dismiss_on_use: 離開後就無法再用 back_action 回來（選單、對話框）
    """

    def __init__(self, graph: "ScreenGraph", name: str, file: str, line: int,
                 builder: Builder):
        super().__init__(graph, name, file, line)
        self.builder = builder
        self.edges: dict[str, Edge] = {}

        self.back_action: Gesture | None = None
        self.dismiss_on_use: bool = False

        self.on_enter_recorder: Recorder | None = None
        self.on_exit_recorder: Recorder | None = None
        self.on_enter_wait_condition: WaitCondition | None = None

        # 只在動態返回邊存在時有值
        self.return_node: str | None = None
        self.back_edge: Edge | None = None

        self._built = False

    @property
    def has_back(self) -> bool:
        return self.back_action is not None

    def _build(self) -> None:
        self._built = True
        self.builder(self)

    def _passes(self, if_: Guard | None) -> bool:
        if if_ is None:
            return True
        return bool(if_(self.graph.build_state))

    def _add_edge(self, destination: str, edge: Edge) -> None:
        if destination in self.edges:
            logger.debug(f"[{self.name}] 覆寫到 {destination} 的 edge")
        self.edges[destination] = edge

    # ── 宣告 edge ──

    def gesture(self, to: str, action: Gesture | None = None, *,
                element: UIElement | None = None, if_: Guard | None = None,
                file: str | None = None, line: int | None = None) -> None:
        """
        宣告：執行 action 之後，會從這個畫面到 `to`。

        Args:
            to: 目的節點名稱
            action: 手勢，None 表示什麼都不用做
            element: 執行前先確認此元素存在
            if_: 編譯期判斷是否宣告這條 edge
        """
        file, line = caller_site(file, line)
        if not self._passes(if_):
            return
        self._add_edge(to, Edge(
            destination=to, gesture=action or _noop,
            element=element, file=file, line=line,
        ))

    def noop(self, to: str, *, if_: Guard | None = None,
             file: str | None = None, line: int | None = None) -> None:
        """不需任何操作就會到 `to`（例如同一畫面的不同抽象）"""
        file, line = caller_site(file, line)
        self.gesture(to, _noop, if_=if_, file=file, line=line)

    def tap(self, element: UIElement, to: str, *, if_: Guard | None = None,
            file: str | None = None, line: int | None = None) -> None:
        """點擊 element 到 `to`"""
        file, line = caller_site(file, line)
        self.gesture(to, element.tap, element=element, if_=if_, file=file, line=line)

    def double_tap(self, element: UIElement, to: str, *, if_: Guard | None = None,
                   file: str | None = None, line: int | None = None) -> None:
        file, line = caller_site(file, line)
        self.gesture(to, element.double_tap, element=element, if_=if_, file=file, line=line)

    def type_text(self, text: str, into: UIElement, to: str, *,
                  if_: Guard | None = None,
                  file: str | None = None, line: int | None = None) -> None:
        """在 into 輸入 text 後到 `to`"""
        file, line = caller_site(file, line)
        self.gesture(to, lambda: into.type_text(text), element=into,
                     if_=if_, file=file, line=line)

    def swipe_left(self, element: UIElement, to: str, *, if_: Guard | None = None,
                   file: str | None = None, line: int | None = None) -> None:
        file, line = caller_site(file, line)
        self.gesture(to, element.swipe_left, element=element, if_=if_, file=file, line=line)

    def swipe_right(self, element: UIElement, to: str, *, if_: Guard | None = None,
                    file: str | None = None, line: int | None = None) -> None:
        file, line = caller_site(file, line)
        self.gesture(to, element.swipe_right, element=element, if_=if_, file=file, line=line)

    def swipe_up(self, element: UIElement, to: str, *, if_: Guard | None = None,
                 file: str | None = None, line: int | None = None) -> None:
        file, line = caller_site(file, line)
        self.gesture(to, element.swipe_up, element=element, if_=if_, file=file, line=line)

    def swipe_down(self, element: UIElement, to: str, *, if_: Guard | None = None,
                   file: str | None = None, line: int | None = None) -> None:
        file, line = caller_site(file, line)
        self.gesture(to, element.swipe_down, element=element, if_=if_, file=file, line=line)

    def press(self, element: UIElement, to: str, *, duration: float | None = None,
              if_: Guard | None = None,
              file: str | None = None, line: int | None = None) -> None:
        """長按 element 到 `to`，duration 預設 Config.PRESS_DURATION"""
        file, line = caller_site(file, line)
        seconds = Config.PRESS_DURATION if duration is None else duration
        self.gesture(to, lambda: element.press(seconds), element=element,
                     if_=if_, file=file, line=line)

    # ── 宣告 action ──

    def tap_for_action(self, element: UIElement, *actions: str,
                       transition_to: str | None = None,
                       recorder: Recorder | None = None,
                       file: str | None = None, line: int | None = None) -> None:
        """
        點擊 element 觸發一串 action。

        actions[0] → actions[1] → … → transition_to，recorder 掛在第一個 action 上。
        """
        file, line = caller_site(file, line)
        if not actions:
            raise ValueError(f"[{self.name}] tap_for_action 至少需要一個 action 名稱")
        self.graph.add_action_chain(list(actions), transition_to, recorder,
                                    file=file, line=line)
        self.tap(element, to=actions[0], file=file, line=line)

    def gesture_for_action(self, *actions: str, element: UIElement | None = None,
                           transition_to: str | None = None,
                           recorder: Recorder | None = None,
                           file: str | None = None, line: int | None = None) -> None:
        """
        宣告一串 action，手勢本身由 recorder 完成（recorder 拿得到 user state）。
        """
        file, line = caller_site(file, line)
        if not actions:
            raise ValueError(f"[{self.name}] gesture_for_action 至少需要一個 action 名稱")
        self.graph.add_action_chain(list(actions), transition_to, recorder,
                                    file=file, line=line)
        self.gesture(actions[0], _noop, element=element, file=file, line=line)

    # ── 生命週期 hook ──

    def on_enter(self, recorder: Recorder | None = None, *,
                 element: UIElement | None = None,
                 predicate: ElementPredicate = exists,
                 file: str | None = None, line: int | None = None) -> None:
        """
        進入此畫面時記錄 user state；給了 element 則先等 predicate 成立。
        """
        file, line = caller_site(file, line)
        if element is not None:
            self.on_enter_wait_for(element, predicate, file=file, line=line)
        if recorder is not None:
            self.on_enter_recorder = recorder

    def on_enter_wait_for(self, element: UIElement,
                          predicate: ElementPredicate = exists, *,
                          if_: Guard | None = None,
                          file: str | None = None, line: int | None = None) -> None:
        """進入此畫面後要等待的條件，逾時回報 Unsuccessfully entered"""
        file, line = caller_site(file, line)
        if not self._passes(if_):
            return
        self.on_enter_wait_condition = WaitCondition(
            element=element, predicate=predicate, file=file, line=line,
        )

    def on_exit(self, recorder: Recorder) -> None:
        """離開此畫面前記錄 user state"""
        self.on_exit_recorder = recorder
