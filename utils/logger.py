"""
日誌模組
導航引擎統一的 logging 設定，同時輸出到 console 與檔案。

支援：
- Console 輸出（人類可讀格式）
- 檔案輸出（純文字 + 可選 JSON 結構化格式）
- 環境變數控制:
    LOG_LEVEL: console 日誌等級 (預設 INFO)
    LOG_JSON: 設為 "1" 啟用 JSON 結構化日誌檔
    LOG_DIR: 日誌目錄 (預設 Config.REPORT_DIR)
"""

import json
import logging
import os
import sys
from datetime import datetime, timezone
from pathlib import Path

from config.config import Config

LOG_DIR = Path(os.getenv("LOG_DIR", str(Config.REPORT_DIR)))
LOG_DIR.mkdir(parents=True, exist_ok=True)


class JsonFormatter(logging.Formatter):
    """JSON 結構化日誌格式器，每筆導航紀錄一行"""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.fromtimestamp(
                record.created, tz=timezone.utc
            ).isoformat(),
            "level": record.levelname,
            "message": record.getMessage(),
            "logger": record.name,
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }
        # Diagnostic 附帶的宣告位置
        for key in ("diag_kind", "diag_file", "diag_line"):
            if hasattr(record, key):
                log_entry[key] = getattr(record, key)
        if record.exc_info and record.exc_info[1]:
            log_entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_entry, ensure_ascii=False)


def _create_logger() -> logging.Logger:
    _logger = logging.Logger("screengraph")
    _logger.setLevel(logging.DEBUG)

    console_level = getattr(
        logging, os.getenv("LOG_LEVEL", "INFO").upper(), logging.INFO
    )

    fmt = logging.Formatter(
        "[%(asctime)s] %(levelname)-7s %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(console_level)
    console.setFormatter(fmt)
    _logger.addHandler(console)

    file_handler = logging.FileHandler(LOG_DIR / "navigation.log", encoding="utf-8")
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(fmt)
    _logger.addHandler(file_handler)

    if os.getenv("LOG_JSON", "").strip() == "1":
        json_handler = logging.FileHandler(
            LOG_DIR / "navigation.json.log", encoding="utf-8"
        )
        json_handler.setLevel(logging.DEBUG)
        json_handler.setFormatter(JsonFormatter())
        _logger.addHandler(json_handler)

    return _logger


logger = _create_logger()
