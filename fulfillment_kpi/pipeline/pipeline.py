#!filepath: fulfillment_kpi/pipeline/pipeline.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Iterable, List, Optional, Protocol

from pydantic import ValidationError

from fulfillment_kpi.config.kpi_config import KpiConfig
from fulfillment_kpi.engines.statistics_engine import StatsSummary
from fulfillment_kpi.engines.window_scan_engine import WindowSpec
from fulfillment_kpi.observability.instrumentation import (
    Instrumentation,
    NoOpInstrumentation,
)
from fulfillment_kpi.pipeline.context import PublishedMetafield, ScanResult, WindowContext
from fulfillment_kpi.pipeline.step import PipelineStep
from fulfillment_kpi.utils.datetime_utils import DateTimeUtils
from fulfillment_kpi.utils.errors import ConfigError
from fulfillment_kpi.utils.logger import logs


class OwnerSource(Protocol):
    def shop_id(self) -> str: ...


@dataclass(frozen=True)
class WindowReport:
    days: int
    since: datetime
    records_seen: int
    records_with_event: int
    pages: int
    summary: StatsSummary
    published: List[PublishedMetafield]
    skip_reason: Optional[str] = None

    @classmethod
    def from_context(cls, ctx: WindowContext) -> "WindowReport":
        scan: ScanResult = ctx.scan
        return cls(
            days=ctx.window.days,
            since=ctx.window.since,
            records_seen=scan.records_seen,
            records_with_event=scan.records_with_event,
            pages=scan.pages,
            summary=ctx.summary,
            published=list(ctx.published),
            skip_reason=ctx.skip_reason,
        )


class KpiPipeline:
    """
    KpiPipeline = window driver (scheduler)

    Rules:
    - windows run one after another, each with a fresh WindowContext
    - `now` is captured once per window, before its first page
    - nothing but the window size crosses a window boundary
    - any raised error aborts the whole run (no partial progress resumed)
    """

    def __init__(
        self,
        *,
        kpi: KpiConfig,
        owner: OwnerSource,
        steps: List[PipelineStep],
        inst: Instrumentation | None = None,
        clock: Callable[[], datetime] = DateTimeUtils.utcnow,
        dry_run: bool = False,
    ):
        self.kpi = kpi
        self.owner = owner
        self.steps = steps
        self.inst = inst if inst is not None else NoOpInstrumentation()
        self.clock = clock
        self.dry_run = dry_run

    @logs.catch(msg="kpi run failed")
    def run(self, windows: Iterable[int] | None = None) -> List[WindowReport]:
        days_list = list(self.kpi.windows) if windows is None else self._checked_windows(windows)
        logs.info(f"[Pipeline] ====== START windows={days_list} ======")

        owner_id = self.owner.shop_id()
        logs.info(f"[Pipeline] owner={owner_id}")

        reports = []
        for days in days_list:
            reports.append(self.run_window(days, owner_id))

        self.inst.generate_timeline_report(",".join(f"{d}d" for d in days_list))
        logs.info("[Pipeline] ====== DONE ======")
        return reports

    def _checked_windows(self, windows: Iterable[int]) -> List[int]:
        """explicit windows go through the same checks as configured ones"""
        days_list = list(windows)
        try:
            KpiConfig(**{**self.kpi.model_dump(), "windows": days_list})
        except ValidationError as e:
            raise ConfigError(f"invalid windows {days_list}: {e}") from e
        return days_list

    def run_window(self, days: int, owner_id: str) -> WindowReport:
        ctx = WindowContext(
            window=WindowSpec.starting_now(days, self.clock()),
            owner_id=owner_id,
            dry_run=self.dry_run,
        )

        for step in self.steps:
            ctx = step.run(ctx)

        report = WindowReport.from_context(ctx)
        s = report.summary
        logs.info(
            f"[Pipeline] {days}d n={s.count} median={s.median} average={s.average} "
            f"published={len(report.published)}"
        )
        return report
