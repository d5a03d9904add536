"""
Allure 報告整合輔助
把導航失敗摘要附加到 Allure 報告。
如未安裝 allure-pytest，所有方法會 graceful fallback，不影響測試執行。
"""

from utils.logger import logger

try:
    import allure
    ALLURE_AVAILABLE = True
except ImportError:
    ALLURE_AVAILABLE = False
    logger.debug("allure-pytest 未安裝，Allure 報告功能停用")


def attach_text(text: str, name: str = "log") -> None:
    """將文字附加到 Allure 報告"""
    if ALLURE_AVAILABLE:
        allure.attach(text, name=name, attachment_type=allure.attachment_type.TEXT)


def attach_diagnostics(sink, name: str = "導航失敗") -> bool:
    """
    sink 有失敗紀錄時，把摘要附加到報告。

    Returns:
        是否有附加
    """
    if not sink.failure_count:
        return False
    attach_text(sink.summary(), name=name)
    return ALLURE_AVAILABLE
