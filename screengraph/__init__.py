"""
screengraph — 整個 App 的 UI 測試導航引擎

統一匯出所有核心元件，方便外部 import。

用法：
    from screengraph import ScreenGraph, UserState, RecordingSink
    from screengraph import exists, not_exists, hittable
    from screengraph import event_bus
"""

from screengraph.diagnostics import Diagnostic, DiagnosticKind, DiagnosticSink, RecordingSink
from screengraph.event_bus import Event, EventBus, event_bus
from screengraph.exceptions import (
    DeclarationConflictError,
    DeclarationError,
    NavigationFailedError,
    NavigatorError,
    NoInitialStateError,
    ScreenGraphError,
    UnknownDestinationError,
)
from screengraph.graph import ScreenGraph
from screengraph.navigator import Navigator
from screengraph.nodes import Edge, GraphNode, ScreenActionNode, ScreenStateNode
from screengraph.user_state import UserState
from screengraph.wait import (
    UIElement,
    WaitCondition,
    enabled,
    exists,
    hittable,
    not_exists,
    wait_or_timeout,
)

__all__ = [
    # Graph / Navigator
    "ScreenGraph",
    "Navigator",
    "UserState",
    "GraphNode",
    "ScreenStateNode",
    "ScreenActionNode",
    "Edge",
    # Waiting
    "UIElement",
    "WaitCondition",
    "wait_or_timeout",
    "exists",
    "not_exists",
    "enabled",
    "hittable",
    # Diagnostics / Events
    "Diagnostic",
    "DiagnosticKind",
    "DiagnosticSink",
    "RecordingSink",
    "Event",
    "EventBus",
    "event_bus",
    # Exceptions
    "ScreenGraphError",
    "DeclarationError",
    "DeclarationConflictError",
    "UnknownDestinationError",
    "NavigatorError",
    "NoInitialStateError",
    "NavigationFailedError",
]
