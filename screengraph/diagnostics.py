"""
Diagnostic Sink — 導航失敗的收集點

Navigator 在執行期遇到的問題（找不到路、元素等待逾時…）不會 raise，
而是回報到 DiagnosticSink，讓測試繼續往下跑、最後再一次判定成敗。
概念上就是 soft assert：先收集，最後一次判定。

用法：
    from screengraph.diagnostics import RecordingSink

    with RecordingSink() as sink:
        nav = graph.navigator(sink=sink)
        nav.goto("SettingsScreen")
    # 結束 with 時，如果有任何失敗，才一次拋出 NavigationFailedError
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from screengraph.event_bus import event_bus
from screengraph.exceptions import NavigationFailedError
from utils.logger import logger


class DiagnosticKind(Enum):
    """失敗分類"""
    DECLARATION_CONFLICT = "declaration_conflict"
    NO_INITIAL_STATE = "no_initial_state"
    UNKNOWN_TARGET = "unknown_target"
    NO_ROUTE = "no_route"
    NOT_AN_ACTION = "not_an_action"
    UNKNOWN_NODE = "unknown_node"
    ELEMENT_TIMEOUT = "element_timeout"
    ENTER_TIMEOUT = "enter_timeout"
    GENERIC = "generic"


@dataclass
class Diagnostic:
    """單筆失敗紀錄"""
    description: str
    file: str = ""
    line: int = 0
    expected: bool = False
    kind: DiagnosticKind = DiagnosticKind.GENERIC
    timestamp: datetime = field(default_factory=datetime.now)

    def __str__(self) -> str:
        where = f" ({self.file}:{self.line})" if self.file else ""
        return f"[{self.kind.value}] {self.description}{where}"


class DiagnosticSink(ABC):
    """
    失敗回報介面

    實作者只需要 record_failure；Navigator 不會因為回報而停下。
    """

    @abstractmethod
    def record_failure(self, description: str, file: str = "", line: int = 0,
                       expected: bool = False,
                       kind: DiagnosticKind = DiagnosticKind.GENERIC) -> None:
        """記錄一筆失敗"""


class RecordingSink(DiagnosticSink):
    """
    預設 sink：log + 發佈 navigator.failure 事件 + 收集起來

    可以當 context manager 使用，離開時有失敗就 raise NavigationFailedError。
    """

    def __init__(self):
        self._failures: list[Diagnostic] = []

    def record_failure(self, description: str, file: str = "", line: int = 0,
                       expected: bool = False,
                       kind: DiagnosticKind = DiagnosticKind.GENERIC) -> None:
        diagnostic = Diagnostic(
            description=description, file=file, line=line,
            expected=expected, kind=kind,
        )
        self._failures.append(diagnostic)
        logger.error(
            f"[Diagnostic] {diagnostic}",
            extra={"diag_kind": kind.value, "diag_file": file, "diag_line": line},
        )
        event_bus.emit(
            "navigator.failure",
            {"kind": kind.value, "description": description,
             "file": file, "line": line},
            source="diagnostics",
        )

    @property
    def failures(self) -> list[Diagnostic]:
        return list(self._failures)

    @property
    def failure_count(self) -> int:
        return len(self._failures)

    def of_kind(self, kind: DiagnosticKind) -> list[Diagnostic]:
        """只取某一類的失敗"""
        return [d for d in self._failures if d.kind is kind]

    def clear(self) -> None:
        self._failures.clear()

    def summary(self) -> str:
        """多行文字摘要（附加到報告用）"""
        if not self._failures:
            return "Navigation: 0 項失敗"
        lines = [f"Navigation: {len(self._failures)} 項失敗"]
        lines += [f"  {i}. {d}" for i, d in enumerate(self._failures, 1)]
        return "\n".join(lines)

    def raise_if_failed(self) -> None:
        """有失敗就一次拋出全部"""
        if self._failures:
            raise NavigationFailedError(self._failures)

    def __enter__(self) -> "RecordingSink":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        # 測試本身已經拋例外時，不蓋掉原本的錯誤
        if exc_type is None:
            self.raise_if_failed()
