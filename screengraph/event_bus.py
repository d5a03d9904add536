"""
Event Bus — 導航事件發佈/訂閱

讓報告、除錯工具在不改 Navigator 的情況下觀察每一步導航。

內建事件：
    graph.compiled              — ScreenGraph 編譯完成 (nodes, edges)
    navigator.created           — Navigator 建立 (start)
    navigator.goto              — 規劃好路徑、開始走 (source, target, path)
    navigator.leave             — 離開節點 (node, to)
    navigator.enter             — 進入節點 (node, from)
    navigator.back_edge.added   — 動態加入返回邊 (node, return_to)
    navigator.back_edge.removed — 返回邊已使用並移除 (node, return_to)
    navigator.failure           — DiagnosticSink 收到失敗 (kind, description, file, line)

用法：
    from screengraph.event_bus import event_bus

    @event_bus.on("navigator.enter")
    def trace(event):
        print(event.data["node"])
"""

from __future__ import annotations

import threading
from collections import defaultdict, deque
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable

from utils.logger import logger


@dataclass
class Event:
    """事件物件"""
    name: str
    data: dict = field(default_factory=dict)
    timestamp: datetime = field(default_factory=datetime.now)
    source: str = ""


class EventBus:
    """
    事件匯流排

    支援：
    - 精確訂閱: bus.on("navigator.enter", handler)
    - 前綴萬用: bus.on("navigator.*", handler)   → 符合 navigator.xxx.yyy
    - 全域監聽: bus.on("*", handler)
    - 優先序:   數字小先執行
    """

    def __init__(self, max_history: int = 500):
        self._handlers: dict[str, list[tuple[int, Callable]]] = defaultdict(list)
        self._history: deque[Event] = deque(maxlen=max_history)
        self._lock = threading.Lock()

    def on(self, event_name: str, handler: Callable | None = None,
           priority: int = 10) -> Callable:
        """訂閱事件。可當 decorator 或直接呼叫。"""
        def _register(fn: Callable) -> Callable:
            with self._lock:
                self._handlers[event_name].append((priority, fn))
                self._handlers[event_name].sort(key=lambda x: x[0])
            return fn

        if handler is not None:
            return _register(handler)
        return _register

    def off(self, event_name: str, handler: Callable | None = None) -> None:
        """取消訂閱。不指定 handler 則移除該事件所有 handler。"""
        with self._lock:
            if handler is None:
                self._handlers.pop(event_name, None)
                return
            remaining = [(p, h) for p, h in self._handlers.get(event_name, []) if h is not handler]
            if remaining:
                self._handlers[event_name] = remaining
            else:
                self._handlers.pop(event_name, None)

    def once(self, event_name: str, handler: Callable,
             priority: int = 10) -> None:
        """訂閱一次性事件，觸發後自動取消"""
        def _wrapper(event: Event):
            self.off(event_name, _wrapper)
            handler(event)
        self.on(event_name, _wrapper, priority)

    @staticmethod
    def _matches(pattern: str, event_name: str) -> bool:
        if pattern == "*" or pattern == event_name:
            return True
        if pattern.endswith(".*"):
            return event_name.startswith(pattern[:-1])
        return False

    def emit(self, event_name: str, data: dict | None = None,
             source: str = "") -> Event:
        """發佈事件。handler 拋出的例外只記 log，不影響導航。"""
        event = Event(name=event_name, data=data or {}, source=source)

        with self._lock:
            self._history.append(event)
            to_call = [
                entry
                for pattern, entries in self._handlers.items()
                if self._matches(pattern, event_name)
                for entry in entries
            ]

        to_call.sort(key=lambda x: x[0])
        for _, handler in to_call:
            try:
                handler(event)
            except Exception as e:
                logger.error(f"Event handler 錯誤 [{event_name}]: {e}")

        return event

    def get_history(self, event_name: str = "",
                    limit: int = 50) -> list[Event]:
        """查詢事件歷史"""
        with self._lock:
            if event_name:
                filtered = [e for e in self._history if e.name == event_name]
            else:
                filtered = list(self._history)
        return filtered[-limit:]

    def clear(self) -> None:
        """清除所有訂閱與歷史"""
        with self._lock:
            self._handlers.clear()
            self._history.clear()

    @property
    def registered_events(self) -> list[str]:
        """列出所有已註冊的事件名稱"""
        with self._lock:
            return list(self._handlers.keys())


# 全域 singleton
event_bus = EventBus()
