"""
宣告位置工具
Graph 的宣告與導航呼叫都會記下「是哪一行寫的」，失敗時才能指回測試碼。
"""

import inspect


def caller_site(file: str | None = None, line: int | None = None,
                depth: int = 2) -> tuple[str, int]:
    """
    取得呼叫端的 (檔名, 行號)。

    呼叫端已經明確給了 file/line 時直接沿用。

    Args:
        file: 明確指定的檔名
        line: 明確指定的行號
        depth: 往上追幾層 frame，2 代表「呼叫我的函式」的呼叫者

    Returns:
        (filename, lineno)
    """
    if file is not None and line is not None:
        return file, line

    frame = inspect.currentframe()
    try:
        for _ in range(depth):
            if frame.f_back is None:
                break
            frame = frame.f_back
        return (
            file if file is not None else frame.f_code.co_filename,
            line if line is not None else frame.f_lineno,
        )
    finally:
        del frame
