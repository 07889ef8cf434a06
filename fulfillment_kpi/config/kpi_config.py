# fulfillment_kpi/config/kpi_config.py
from __future__ import annotations

from enum import Enum
from typing import List

from pydantic import BaseModel, Field, field_validator, model_validator


class Metric(str, Enum):
    MEDIAN = "median"
    AVERAGE = "average"


class KpiConfig(BaseModel):
    """
    Everything the window driver needs, passed in explicitly at construction.

    key_template placeholders:
        {metric}  -> "median" | "average"
        {days}    -> window size in days
    """

    windows: List[int] = Field(default_factory=lambda: [30, 60, 90])
    namespace: str = "kpi"
    key_template: str = "fulfillment_{metric}_hours_{days}d"
    metrics: List[Metric] = Field(default_factory=lambda: [Metric.MEDIAN])
    precision: int = Field(default=2, ge=0, le=6)
    page_size: int = Field(default=250, ge=1, le=250)

    @field_validator("windows")
    @classmethod
    def _check_windows(cls, v: List[int]) -> List[int]:
        if not v:
            raise ValueError("at least one window is required")
        bad = [d for d in v if d <= 0]
        if bad:
            raise ValueError(f"window days must be positive (got {bad})")
        if len(set(v)) != len(v):
            raise ValueError(f"duplicate window days: {v}")
        return v

    @field_validator("metrics")
    @classmethod
    def _check_metrics(cls, v: List[Metric]) -> List[Metric]:
        if not v:
            raise ValueError("at least one metric is required")
        return list(dict.fromkeys(v))

    @field_validator("namespace")
    @classmethod
    def _check_namespace(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("namespace must not be empty")
        return v

    @model_validator(mode="after")
    def _check_key_template(self) -> "KpiConfig":
        keys = []
        for metric in self.metrics:
            for days in self.windows:
                try:
                    keys.append(self.key_for(metric, days))
                except (KeyError, IndexError, AttributeError, ValueError) as e:
                    raise ValueError(
                        f"key_template {self.key_template!r} is not formattable with {{metric}} and {{days}}: {e!r}"
                    ) from e

        # each (metric, window) owns exactly one metafield
        if len(set(keys)) != len(keys):
            raise ValueError(
                f"key_template {self.key_template!r} does not give a distinct key per metric and window: {keys}"
            )
        return self

    # --------------------------------------------------
    def key_for(self, metric: Metric | str, days: int) -> str:
        metric = Metric(metric)
        return self.key_template.format(metric=metric.value, days=days)
