#!filepath: fulfillment_kpi/__init__.py

__version__ = "0.1.0"

from .utils.logger import Logging, logs
from .utils.retry import Retry
from .utils.datetime_utils import DateTimeUtils
from .config.app_config import AppConfig

datetime_utils = DateTimeUtils

# alias
retry = Retry

__all__ = [
    "__version__",
    "logs", "Logging",
    "retry",
    "AppConfig",
    "datetime_utils",
]
