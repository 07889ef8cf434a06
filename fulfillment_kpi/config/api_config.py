#!filepath: fulfillment_kpi/config/api_config.py
from pydantic import BaseModel, Field


class ApiConfig(BaseModel):
    """
    Query boundary settings (Admin GraphQL endpoint).

    Retry only covers transient network failures
    (connection reset / timeout); max_attempts=1 disables it.
    """

    api_version: str = "2025-07"
    timeout: float = Field(default=30.0, gt=0)
    max_attempts: int = Field(default=3, ge=1)
    retry_delay: float = Field(default=1.0, ge=0)
    retry_backoff: float = Field(default=2.0, ge=1)
