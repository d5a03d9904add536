"""
User State — 每個 Navigator 各自一份的 App 狀態紀錄

子類別用 class attribute 指定起始畫面，並在 __init__ 裡加上自己的欄位：

    class BrowserState(UserState):
        initial_screen_state = "FirstRun"

        def __init__(self):
            super().__init__()
            self.url = None
            self.night_mode = False

ScreenGraph 以無參數建構子建立它：每個 Navigator 一份，編譯期另有一份給 if_ guard 判斷。
"""


class UserState:
    """App 狀態基底類別"""

    initial_screen_state: str | None = None

    def __init__(self):
        self.initial_screen_state = type(self).initial_screen_state

    def __repr__(self) -> str:
        fields = ", ".join(f"{k}={v!r}" for k, v in vars(self).items())
        return f"{type(self).__name__}({fields})"
