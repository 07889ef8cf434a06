#!filepath: fulfillment_kpi/pipeline/context.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from fulfillment_kpi.engines.statistics_engine import StatsSummary
from fulfillment_kpi.engines.window_scan_engine import StopReason, WindowSpec


@dataclass(frozen=True)
class ScanResult:
    """Output of one window scan; the observation list is dropped after finalize."""

    observations: List[float]
    records_seen: int
    records_with_event: int
    pages: int
    stop_reason: Optional[StopReason]


@dataclass(frozen=True)
class PublishedMetafield:
    owner_id: str
    namespace: str
    key: str
    type: str
    value: str


@dataclass
class WindowContext:
    """
    WindowContext = per-window runtime context

    - built by the pipeline, one per window, never shared
    - steps read / fill it in order: scan -> publish
    - no business logic here
    """

    window: WindowSpec
    owner_id: str
    dry_run: bool = False

    # -------- scan --------
    scan: Optional[ScanResult] = None
    summary: Optional[StatsSummary] = None

    # -------- publish --------
    published: List[PublishedMetafield] = field(default_factory=list)
    skip_reason: Optional[str] = None
