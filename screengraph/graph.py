"""
ScreenGraph — App 畫面與動作的有向圖

為整個 App 建一張共用的「畫面地圖」，每個測試都用它：
測試只要說「去 SettingsScreen」，Navigator 就會找最短路徑並一步步執行，
不用在每個測試裡重複、維護脆弱的導航程式碼。

核心邏輯：
1. add_screen_state / add_screen_action / add_action_chain 宣告節點
2. compile() 只跑一次：先跑完所有 builder（builder 可能再宣告 action），
   再建立 adjacency
3. navigator() 建立 Navigator，從 user state 的 initial_screen_state 出發
4. Navigator 執行期會在 adjacency 上動態加 / 移除返回邊

用法：
    graph = ScreenGraph(BrowserState)

    def home(scene):
        scene.tap(app.by_accessibility_id("menu"), to="Menu")

    graph.add_screen_state("Home", home)
    graph.add_screen_state("Menu", menu)

    nav = graph.navigator()
    nav.goto("Settings")
"""

from __future__ import annotations

from collections import deque
from typing import Sequence

from screengraph.diagnostics import DiagnosticKind, DiagnosticSink, RecordingSink
from screengraph.event_bus import event_bus
from screengraph.exceptions import (
    DeclarationConflictError,
    DeclarationError,
    NoInitialStateError,
    UnknownDestinationError,
)
from screengraph.navigator import Navigator
from screengraph.nodes import Builder, GraphNode, Recorder, ScreenActionNode, ScreenStateNode
from screengraph.user_state import UserState
from utils.logger import logger
from utils.source_site import caller_site


class ScreenGraph:
    """
    畫面地圖

    Args:
        user_state_type: UserState 子類別，每個 Navigator 各建立一份
        sink: 宣告衝突等問題的回報對象，預設 RecordingSink
        strict: True 時宣告衝突除了回報，也直接 raise DeclarationConflictError
    """

    def __init__(self, user_state_type: type[UserState] = UserState,
                 sink: DiagnosticSink | None = None, strict: bool = False):
        self.user_state_type = user_state_type
        self.sink = sink or RecordingSink()
        self.strict = strict

        self._named: dict[str, GraphNode] = {}
        # name → {destination name: None}，dict 保留插入順序讓 BFS 結果穩定
        self._adjacency: dict[str, dict[str, None]] = {}
        self._back_links: dict[str, dict[str, None]] = {}

        self._compiled = False
        self._build_state: UserState | None = None

    # ── 查詢 ──

    @property
    def is_compiled(self) -> bool:
        return self._compiled

    @property
    def names(self) -> list[str]:
        """所有已宣告的節點名稱"""
        return list(self._named)

    @property
    def build_state(self) -> UserState:
        """編譯期給 if_ guard 用的 user state（不屬於任何 Navigator）"""
        if self._build_state is None:
            self._build_state = self.user_state_type()
        return self._build_state

    def node(self, name: str) -> GraphNode | None:
        return self._named.get(name)

    def __contains__(self, name: str) -> bool:
        return name in self._named

    def __len__(self) -> int:
        return len(self._named)

    # ── 宣告 ──

    def add_screen_state(self, name: str, builder: Builder, *,
                         file: str | None = None, line: int | None = None) -> None:
        """
        宣告一個畫面狀態。builder 會在編譯時以節點本身呼叫一次。
        """
        file, line = caller_site(file, line)
        self._check_open(name)

        existing = self._named.get(name)
        if isinstance(existing, ScreenActionNode):
            self._conflict(
                name,
                f"Action {name} conflicts with an identically named screen state",
                existing,
                f"Screen state {name} conflicts with an identically named action",
                file, line,
            )
            return

        self._named[name] = ScreenStateNode(self, name, file, line, builder)
        logger.debug(f"[ScreenGraph] 宣告畫面: {name}")

    def create_scene(self, name: str, builder: Builder, *,
                     file: str | None = None, line: int | None = None) -> None:
        """add_screen_state 的別名"""
        file, line = caller_site(file, line)
        self.add_screen_state(name, builder, file=file, line=line)

    def add_screen_action(self, name: str, transition_to: str | None = None,
                          recorder: Recorder | None = None, *,
                          file: str | None = None, line: int | None = None) -> None:
        """
        宣告（或合併）一個 action 節點。

        同名 action 再次宣告時：目的地必須一致（或其中一方未指定），
        recorder 會串接執行，先宣告的先跑。
        """
        file, line = caller_site(file, line)
        self._add_or_check_action(name, transition_to, recorder, file, line)

    def add_action_chain(self, actions: Sequence[str], final_state: str | None = None,
                         recorder: Recorder | None = None, *,
                         file: str | None = None, line: int | None = None) -> None:
        """
        宣告 actions[0] → actions[1] → … → final_state 的 action 串，
        recorder 只掛在第一個 action。
        """
        file, line = caller_site(file, line)
        for i, name in enumerate(actions):
            next_name = actions[i + 1] if i + 1 < len(actions) else final_state
            self._add_or_check_action(
                name, next_name, recorder if i == 0 else None, file, line,
            )

    def _add_or_check_action(self, name: str, next_name: str | None,
                             recorder: Recorder | None, file: str, line: int) -> None:
        self._check_open(name)

        existing = self._named.get(name)
        if existing is None:
            self._named[name] = ScreenActionNode(self, name, next_name, file, line, recorder)
            logger.debug(f"[ScreenGraph] 宣告 action: {name} → {next_name}")
            return

        if not isinstance(existing, ScreenActionNode):
            self._conflict(
                name,
                f"Screen state {name} conflicts with an identically named action",
                existing,
                f"Action {name} conflicts with an identically named screen state",
                file, line,
            )
            return

        if (existing.next_node_name is not None and next_name is not None
                and existing.next_node_name != next_name):
            self._conflict(
                name,
                f"Action points to {next_name} elsewhere",
                existing,
                f"Action points to {existing.next_node_name} elsewhere",
                file, line,
            )
            return

        merged = existing.recorder
        if existing.recorder is not None and recorder is not None:
            first, second = existing.recorder, recorder

            def merged(user_state: UserState) -> None:
                first(user_state)
                second(user_state)
        elif recorder is not None:
            merged = recorder

        self._named[name] = ScreenActionNode(
            self, name, existing.next_node_name or next_name, file, line, merged,
        )
        logger.debug(f"[ScreenGraph] 合併 action: {name}")

    def _check_open(self, name: str) -> None:
        if self._compiled:
            raise DeclarationError(
                f"ScreenGraph 已編譯，無法再宣告節點: {name}",
                context={"name": name},
            )

    def _conflict(self, name: str, existing_msg: str, existing: GraphNode,
                  new_msg: str, file: str, line: int) -> None:
        """兩個宣告位置都回報，讓人一眼看到兩邊"""
        self.sink.record_failure(
            existing_msg, existing.file, existing.line,
            kind=DiagnosticKind.DECLARATION_CONFLICT,
        )
        self.sink.record_failure(
            new_msg, file, line, kind=DiagnosticKind.DECLARATION_CONFLICT,
        )
        if self.strict:
            raise DeclarationConflictError(name, new_msg)

    # ── 編譯 ──

    def compile(self) -> None:
        """
        建立可導航的有向圖。重複呼叫無作用。

        Raises:
            UnknownDestinationError: edge 或 action 指向未宣告的節點
        """
        if self._compiled:
            return

        # builder 可能再宣告 action（甚至畫面），跑到沒有新節點為止
        while True:
            pending = [
                node for node in self._named.values()
                if isinstance(node, ScreenStateNode) and not node._built
            ]
            if not pending:
                break
            for node in pending:
                node._build()

        adjacency: dict[str, dict[str, None]] = {name: {} for name in self._named}
        for node in self._named.values():
            if isinstance(node, ScreenStateNode):
                for destination, edge in node.edges.items():
                    if destination not in self._named:
                        raise UnknownDestinationError(
                            node.name, destination, edge.file, edge.line,
                        )
                    adjacency[node.name][destination] = None
            elif isinstance(node, ScreenActionNode) and node.next_node_name is not None:
                if node.next_node_name not in self._named:
                    raise UnknownDestinationError(
                        node.name, node.next_node_name, node.file, node.line,
                    )
                adjacency[node.name][node.next_node_name] = None

        self._adjacency = adjacency
        self._back_links = {}
        self._compiled = True

        edge_count = sum(len(v) for v in adjacency.values())
        logger.info(f"[ScreenGraph] 編譯完成: {len(self._named)} 節點, {edge_count} 條 edge")
        event_bus.emit(
            "graph.compiled",
            {"nodes": len(self._named), "edges": edge_count},
            source="screengraph",
        )

    # ── Adjacency ──

    def neighbors(self, name: str) -> list[str]:
        """靜態 edge 加上目前存在的返回邊"""
        result = list(self._adjacency.get(name, {}))
        for destination in self._back_links.get(name, {}):
            if destination not in self._adjacency.get(name, {}):
                result.append(destination)
        return result

    def has_connection(self, source: str, destination: str) -> bool:
        return (destination in self._adjacency.get(source, {})
                or destination in self._back_links.get(source, {}))

    def has_back_link(self, source: str, destination: str) -> bool:
        return destination in self._back_links.get(source, {})

    def add_back_link(self, source: str, destination: str) -> None:
        self._back_links.setdefault(source, {})[destination] = None

    def remove_back_link(self, source: str, destination: str) -> None:
        links = self._back_links.get(source)
        if links is None:
            return
        links.pop(destination, None)
        if not links:
            del self._back_links[source]

    def find_path(self, source: str, target: str) -> list[str] | None:
        """
        BFS 找最短路徑（以 edge 數計）。

        Returns:
            含頭尾的節點名稱列表；source == target 時為 [source]；到不了回傳 None
        """
        if source not in self._named or target not in self._named:
            return None
        if source == target:
            return [source]

        previous: dict[str, str | None] = {source: None}
        queue: deque[str] = deque([source])

        while queue:
            current = queue.popleft()
            for nxt in self.neighbors(current):
                if nxt in previous:
                    continue
                previous[nxt] = current
                if nxt == target:
                    path = [nxt]
                    while previous[path[-1]] is not None:
                        path.append(previous[path[-1]])
                    path.reverse()
                    return path
                queue.append(nxt)

        return None

    # ── Navigator ──

    def navigator(self, starting_at: str | None = None, *,
                  sink: DiagnosticSink | None = None,
                  file: str | None = None, line: int | None = None) -> Navigator:
        """
        建立 Navigator。通常在 fixture / setup 裡呼叫。

        Args:
            starting_at: 起始畫面，預設為 user state 的 initial_screen_state
            sink: 導航失敗的回報對象，預設沿用 graph 的 sink

        Raises:
            NoInitialStateError: 起始節點不是已宣告的畫面狀態
        """
        file, line = caller_site(file, line)
        self.compile()
        sink = sink or self.sink

        user_state = self.user_state_type()
        name = starting_at or user_state.initial_screen_state
        node = self._named.get(name) if name else None
        if not isinstance(node, ScreenStateNode):
            sink.record_failure(
                "The app's initial state couldn't be established.", file, line,
                kind=DiagnosticKind.NO_INITIAL_STATE,
            )
            raise NoInitialStateError(name)

        user_state.initial_screen_state = name
        navigator = Navigator(self, node, user_state, sink)
        logger.info(f"[Navigator] 建立於 {name}")
        event_bus.emit("navigator.created", {"start": name}, source="screengraph")
        return navigator
