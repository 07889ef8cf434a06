#!filepath: fulfillment_kpi/config/__init__.py
from .app_config import AppConfig
from .api_config import ApiConfig
from .kpi_config import KpiConfig, Metric
from .log_config import LogConfig
from .secret_config import SecretConfig

__all__ = ["AppConfig", "ApiConfig", "KpiConfig", "Metric", "LogConfig", "SecretConfig"]
