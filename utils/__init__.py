from utils.logger import logger
from utils.wait_helper import wait_for, FluentWait
from utils.source_site import caller_site

__all__ = [
    "logger",
    "wait_for",
    "FluentWait",
    "caller_site",
]
