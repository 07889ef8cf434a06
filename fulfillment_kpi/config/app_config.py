#!filepath: fulfillment_kpi/config/app_config.py
import yaml
from pydantic import BaseModel, Field
from dotenv import find_dotenv, load_dotenv
import os

from .log_config import LogConfig
from .api_config import ApiConfig
from .kpi_config import KpiConfig
from .secret_config import SecretConfig


def project_root() -> str:
    """
    Project root derived from this file:
    fulfillment_kpi/config/app_config.py -> fulfillment_kpi/config -> fulfillment_kpi -> project_root
    """
    return os.path.abspath(os.path.join(os.path.dirname(__file__), "../../"))


def default_config_path() -> str:
    return os.path.join(os.path.dirname(os.path.abspath(__file__)), "base.yml")


class AppConfig(BaseModel):
    log: LogConfig = Field(default_factory=LogConfig)
    api: ApiConfig = Field(default_factory=ApiConfig)
    kpi: KpiConfig = Field(default_factory=KpiConfig)
    secret: SecretConfig = Field(default_factory=SecretConfig)

    @classmethod
    def load(cls, path: str | None = None) -> "AppConfig":
        """
        Load YAML config + .env
        - defaults to fulfillment_kpi/config/base.yml
        - .env is read from the project root, then the working directory
        - secrets only ever come from the environment, never from YAML
        """
        root = project_root()

        # 1) .env (existing environment variables win)
        load_dotenv(os.path.join(root, ".env"))
        load_dotenv(find_dotenv(usecwd=True))

        # 2) resolve config file
        if path is None:
            path = default_config_path()

        if not os.path.exists(path):
            raise FileNotFoundError(f"Config file not found: {path}")

        # 3) read YAML
        with open(path, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}

        # 4) inject secrets from env
        raw["secret"] = {
            "shop_domain": os.getenv("SHOP_DOMAIN", ""),
            "admin_token": os.getenv("ADMIN_TOKEN", ""),
        }
        return cls(**raw)
