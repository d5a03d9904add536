"""
設定管理模組
統一管理導航引擎的等待逾時、手勢時長等設定。
支援透過環境變數覆蓋預設值，方便 CI/CD 整合。
"""

import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent
CONFIG_DIR = Path(__file__).resolve().parent


class ConfigValidationError(Exception):
    """設定值驗證失敗"""

    def __init__(self, errors: list[str]):
        self.errors = errors
        msg = "設定驗證失敗:\n" + "\n".join(f"  - {e}" for e in errors)
        super().__init__(msg)


class Config:
    """框架全域設定"""

    # 等待條件 (秒)
    WAIT_TIMEOUT = float(os.getenv("WAIT_TIMEOUT", "5"))
    WAIT_INTERVAL = float(os.getenv("WAIT_INTERVAL", "0.25"))

    # 手勢
    PRESS_DURATION = float(os.getenv("PRESS_DURATION", "1.0"))
    SWIPE_DURATION = int(os.getenv("SWIPE_DURATION", "800"))

    # 報告
    REPORT_DIR = Path(os.getenv("REPORT_DIR", str(BASE_DIR / "reports")))

    @classmethod
    def validate(cls) -> None:
        """
        驗證目前設定值。

        Raises:
            ConfigValidationError: 任一數值不合理
        """
        errors: list[str] = []

        if cls.WAIT_TIMEOUT <= 0:
            errors.append(f"WAIT_TIMEOUT 必須大於 0: {cls.WAIT_TIMEOUT}")
        if cls.WAIT_INTERVAL <= 0:
            errors.append(f"WAIT_INTERVAL 必須大於 0: {cls.WAIT_INTERVAL}")
        elif cls.WAIT_INTERVAL > cls.WAIT_TIMEOUT:
            errors.append(
                f"WAIT_INTERVAL ({cls.WAIT_INTERVAL}) 不可大於 WAIT_TIMEOUT ({cls.WAIT_TIMEOUT})"
            )
        if cls.PRESS_DURATION < 0:
            errors.append(f"PRESS_DURATION 不可為負數: {cls.PRESS_DURATION}")
        if cls.SWIPE_DURATION < 0:
            errors.append(f"SWIPE_DURATION 不可為負數: {cls.SWIPE_DURATION}")

        if errors:
            raise ConfigValidationError(errors)

    @classmethod
    def as_dict(cls) -> dict:
        """回傳目前設定（debug / 報告用）"""
        return {
            "WAIT_TIMEOUT": cls.WAIT_TIMEOUT,
            "WAIT_INTERVAL": cls.WAIT_INTERVAL,
            "PRESS_DURATION": cls.PRESS_DURATION,
            "SWIPE_DURATION": cls.SWIPE_DURATION,
        }
