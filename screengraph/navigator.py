"""
Navigator — 在 ScreenGraph 上移動

測試裡主要就是 goto：給目的地名稱，Navigator 規劃最短路徑並逐步執行手勢，
沿途觸發 on_enter / on_exit recorder、維護返回邊。
若測試自己直接點了元素讓 App 換了畫面，用 now_at 把 Navigator 同步回來。

導航失敗（找不到節點、沒有路徑、元素逾時）只會回報到 DiagnosticSink，
Navigator 停在最後成功進入的節點，測試可以繼續或自行斷言。
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable, Iterable

from screengraph.diagnostics import DiagnosticKind, DiagnosticSink
from screengraph.event_bus import event_bus
from screengraph.nodes import Edge, GraphNode, ScreenActionNode, ScreenStateNode
from screengraph.user_state import UserState
from utils.logger import logger
from utils.source_site import caller_site

if TYPE_CHECKING:
    from screengraph.graph import ScreenGraph

NodeVisitor = Callable[[str], None]


def _noop_visitor(_: str) -> None:
    pass


class Navigator:
    """
    App 導航器

    由 ScreenGraph.navigator() 建立，不要直接建構。
    """

    def __init__(self, graph: "ScreenGraph", initial: ScreenStateNode,
                 user_state: UserState, sink: DiagnosticSink):
        self._graph = graph
        self._current: GraphNode = initial
        self._return_to_recent_scene: ScreenStateNode = initial
        self.user_state = user_state
        self.sink = sink

    @property
    def screen_state(self) -> str:
        """目前所在節點名稱"""
        return self._current.name

    @property
    def current_node(self) -> GraphNode:
        return self._current

    @property
    def return_to_recent_scene(self) -> str:
        """action 做完、或使用返回手勢時要回到的畫面"""
        return self._return_to_recent_scene.name

    # ── goto ──

    def goto(self, node_name: str, on_visit: NodeVisitor | None = None, *,
             file: str | None = None, line: int | None = None) -> None:
        """
        移動到指定節點。

        Args:
            node_name: 目的節點名稱（畫面或 action）
            on_visit: 每進入一個畫面時呼叫，參數是「剛離開」的節點名稱
        """
        file, line = caller_site(file, line)
        self._goto(node_name, on_visit or _noop_visitor, _noop_visitor, file, line)

    def _goto(self, node_name: str, visitor: NodeVisitor, on_step: NodeVisitor,
              file: str, line: int) -> None:
        """
        goto 本體。on_step 在每次進入節點（畫面或 action）後以該節點名稱呼叫，
        visitor 則只在進入畫面時、以剛離開的節點名稱呼叫。
        """
        if self._graph.node(node_name) is None:
            self.sink.record_failure(
                f"Cannot route to {node_name}, because it doesn't exist",
                file, line, kind=DiagnosticKind.UNKNOWN_TARGET,
            )
            return

        names = self._graph.find_path(self._current.name, node_name)
        if not names:
            self.sink.record_failure(
                f"Cannot route from {self._current.name} to {node_name}",
                file, line, kind=DiagnosticKind.NO_ROUTE,
            )
            return

        path = [self._graph.node(name) for name in names[1:]]

        # 路徑停在 action 上時，沿著 action 串走到畫面（或走不下去）為止
        if path and isinstance(path[-1], ScreenActionNode):
            path += self._follow_actions(path[-1])

        if path:
            logger.info(
                f"[Navigator] 規劃路徑: {self._current.name}"
                + "".join(f" → {n.name}" for n in path)
            )
            event_bus.emit(
                "navigator.goto",
                {"source": self._current.name, "target": node_name,
                 "path": [n.name for n in path]},
                source="navigator",
            )

        for next_node in path:
            self._move_directly_to(next_node, visitor, file, line)
            on_step(next_node.name)

        if isinstance(self._current, ScreenStateNode):
            return

        # 停在 action 上：回到最近的畫面
        self._move_directly_to(self._return_to_recent_scene, visitor, file, line)
        on_step(self._current.name)

    def _follow_actions(self, action: ScreenActionNode) -> list[GraphNode]:
        extras: list[GraphNode] = []
        seen = {action.name}
        while action.next_node_name is not None:
            nxt = self._graph.node(action.next_node_name)
            if nxt is None or nxt.name in seen:
                break
            extras.append(nxt)
            seen.add(nxt.name)
            if not isinstance(nxt, ScreenActionNode):
                break
            action = nxt
        return extras

    def _move_directly_to(self, next_node: GraphNode, visitor: NodeVisitor,
                          file: str, line: int) -> None:
        if isinstance(self._current, ScreenStateNode):
            self._leave_screen(self._current, next_node, file, line)

        if isinstance(next_node, ScreenStateNode):
            self._enter_screen(next_node, visitor)
        elif isinstance(next_node, ScreenActionNode):
            self._enter_action(next_node)

        self._current = next_node

    # ── 離開 / 進入 ──

    def _leave_screen(self, node: ScreenStateNode, next_node: GraphNode,
                      file: str, line: int) -> None:
        if not node.dismiss_on_use:
            self._return_to_recent_scene = node

        if node.on_exit_recorder is not None:
            node.on_exit_recorder(self.user_state)

        going_back = node.back_edge is not None and node.return_node == next_node.name
        edge = node.back_edge if going_back else node.edges.get(next_node.name)
        logger.debug(f"[Navigator] 離開 {node.name} → {next_node.name}")
        event_bus.emit(
            "navigator.leave", {"node": node.name, "to": next_node.name},
            source="navigator",
        )
        if edge is not None:
            edge.transition(self.sink, node.name, file, line)

        if node.has_back and node.return_node == next_node.name:
            # 返回手勢已經用掉了
            node.return_node = None
            node.back_edge = None
            self._graph.remove_back_link(node.name, next_node.name)
            logger.debug(f"[Navigator] 移除返回邊 {node.name} → {next_node.name}")
            event_bus.emit(
                "navigator.back_edge.removed",
                {"node": node.name, "return_to": next_node.name},
                source="navigator",
            )

    def _enter_screen(self, node: ScreenStateNode, visitor: NodeVisitor) -> None:
        condition = node.on_enter_wait_condition
        if condition is not None:
            condition.wait(on_timeout=lambda: self.sink.record_failure(
                f"Unsuccessfully entered {node.name}",
                condition.file, condition.line,
                kind=DiagnosticKind.ENTER_TIMEOUT,
            ))

        if node.on_enter_recorder is not None:
            node.on_enter_recorder(self.user_state)

        back_to = self._return_to_recent_scene
        if node.has_back and node.return_node is None and back_to is not node:
            node.return_node = back_to.name
            node.back_edge = Edge(
                destination=back_to.name, gesture=node.back_action,
                file=node.file, line=node.line,
            )
            self._graph.add_back_link(node.name, back_to.name)
            logger.debug(f"[Navigator] 加入返回邊 {node.name} → {back_to.name}")
            event_bus.emit(
                "navigator.back_edge.added",
                {"node": node.name, "return_to": back_to.name},
                source="navigator",
            )

        logger.debug(f"[Navigator] 進入 {node.name}")
        event_bus.emit(
            "navigator.enter", {"node": node.name, "from": self._current.name},
            source="navigator",
        )
        visitor(self._current.name)

    def _enter_action(self, node: ScreenActionNode) -> None:
        logger.debug(f"[Navigator] 執行 action {node.name}")
        if node.recorder is not None:
            node.recorder(self.user_state)

    # ── Action ──

    def perform_action(self, action_name: str, *,
                       file: str | None = None, line: int | None = None) -> None:
        """
        執行 graph 裡宣告的 action。action 可能改變 user state，
        做完後一定會回到某個畫面。
        """
        file, line = caller_site(file, line)
        if not isinstance(self._graph.node(action_name), ScreenActionNode):
            self.sink.record_failure(
                f"{action_name} is not an action", file, line,
                kind=DiagnosticKind.NOT_AN_ACTION,
            )
            return
        self.goto(action_name, file=file, line=line)

    def toggle_on(self, flag: bool, action: str, *,
                  file: str | None = None, line: int | None = None) -> None:
        """flag 為 False 時才執行 action"""
        file, line = caller_site(file, line)
        if not flag:
            self.perform_action(action, file=file, line=line)

    def toggle_off(self, flag: bool, action: str, *,
                   file: str | None = None, line: int | None = None) -> None:
        """flag 為 True 時才執行 action"""
        file, line = caller_site(file, line)
        self.toggle_on(not flag, action, file=file, line=line)

    # ── 同步 / 巡訪 ──

    def now_at(self, node_name: str, *,
               file: str | None = None, line: int | None = None) -> None:
        """
        強制設定目前位置，不執行任何手勢、不觸發 hook。

        常用代表 graph 少了一個節點，或該畫面應該設 dismiss_on_use。
        """
        file, line = caller_site(file, line)
        node = self._graph.node(node_name)
        if node is None:
            self.sink.record_failure(
                f"Cannot force to unknown {node_name}. Currently at {self._current.name}",
                file, line, kind=DiagnosticKind.UNKNOWN_NODE,
            )
            return
        logger.info(f"[Navigator] 同步位置: {self._current.name} ⇒ {node_name}")
        self._current = node

    def visit_nodes(self, names: Iterable[str], on_first_visit: NodeVisitor, *,
                    file: str | None = None, line: int | None = None) -> None:
        """
        依序走訪 names，每個名稱第一次經過時呼叫 on_first_visit。
        起點與途中經過的節點（包含 action 串中間的 action）都算經過。
        """
        file, line = caller_site(file, line)
        names = list(names)
        desired = set(names)
        visited: set[str] = set()

        def _visitor(visited_name: str) -> None:
            if visited_name in desired and visited_name not in visited:
                on_first_visit(visited_name)
            visited.add(visited_name)

        _visitor(self._current.name)
        for name in names:
            if name in visited:
                continue
            self._goto(name, _noop_visitor, _visitor, file, line)

    def visit_all(self, on_first_visit: NodeVisitor, *,
                  file: str | None = None, line: int | None = None) -> None:
        """
        走訪 graph 所有節點。

        有些節點要看目前 user state 才到得了，到不了的會回報 NO_ROUTE。
        """
        file, line = caller_site(file, line)
        self.visit_nodes(self._graph.names, on_first_visit, file=file, line=line)

    def revert(self, *, file: str | None = None, line: int | None = None) -> None:
        """回到起始畫面（不一定做得到）"""
        file, line = caller_site(file, line)
        initial = self.user_state.initial_screen_state
        if initial:
            self.goto(initial, file=file, line=line)
