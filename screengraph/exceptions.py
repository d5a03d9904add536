"""
自訂 Exception 體系

導航引擎的錯誤分兩種：
- 宣告 / 編譯期錯誤（graph 定義本身寫錯）→ 直接 raise，越早越好
- 執行期導航錯誤（找不到路、元素逾時）→ 交給 DiagnosticSink 記錄，不中斷流程

這裡的 Exception 用在前者，以及 sink 最後彙總失敗時。

Exception 樹：
    ScreenGraphError
    ├── DeclarationError
    │   ├── DeclarationConflictError
    │   └── UnknownDestinationError
    ├── NavigatorError
    │   └── NoInitialStateError
    └── NavigationFailedError (同時也是 AssertionError)
"""


class ScreenGraphError(Exception):
    """框架所有例外的基底，catch 這個就能攔截一切框架錯誤"""

    def __init__(self, message: str = "", context: dict | None = None):
        self.context = context or {}
        super().__init__(message)


# ── 宣告 / 編譯 ──

class DeclarationError(ScreenGraphError):
    """Graph 宣告相關錯誤"""


class DeclarationConflictError(DeclarationError):
    """同一個名稱被宣告成不相容的節點"""

    def __init__(self, name: str = "", reason: str = ""):
        msg = f"節點宣告衝突: {name}"
        if reason:
            msg += f" ({reason})"
        super().__init__(msg, context={"name": name})


class UnknownDestinationError(DeclarationError):
    """Edge 或 action 指向一個從未宣告的節點"""

    def __init__(self, source: str = "", destination: str = "",
                 file: str = "", line: int = 0):
        msg = f"Destination scene '{destination}' has not been created anywhere"
        if source:
            msg += f" (from '{source}'"
            msg += f", {file}:{line})" if file else ")"
        super().__init__(
            msg,
            context={"source": source, "destination": destination,
                     "file": file, "line": line},
        )


# ── Navigator ──

class NavigatorError(ScreenGraphError):
    """Navigator 相關錯誤"""


class NoInitialStateError(NavigatorError):
    """無法決定 Navigator 的起始節點"""

    def __init__(self, name: str | None = None):
        msg = "The app's initial state couldn't be established."
        if name:
            msg += f" ('{name}' 不是已宣告的 screen state)"
        super().__init__(msg, context={"name": name})


# ── 彙總 ──

class NavigationFailedError(ScreenGraphError, AssertionError):
    """DiagnosticSink 收集到失敗時的彙總例外，讓 pytest 以斷言失敗呈現"""

    def __init__(self, failures: list):
        self.failures = list(failures)
        summary = f"Navigation: {len(self.failures)} 項失敗\n"
        for i, failure in enumerate(self.failures, 1):
            summary += f"  {i}. {failure}\n"
        super().__init__(summary, context={"count": len(self.failures)})
