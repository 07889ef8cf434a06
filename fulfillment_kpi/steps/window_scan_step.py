# fulfillment_kpi/steps/window_scan_step.py
from __future__ import annotations

from typing import Any, Dict, List, Protocol, Tuple

from fulfillment_kpi.engines.statistics_engine import StreamingStatistics
from fulfillment_kpi.engines.time_delta_engine import TimeDeltaEngine
from fulfillment_kpi.engines.window_scan_engine import WindowScanEngine, WindowSpec
from fulfillment_kpi.pipeline.context import ScanResult, WindowContext
from fulfillment_kpi.pipeline.step import PipelineStep
from fulfillment_kpi.utils.errors import TransportError
from fulfillment_kpi.utils.logger import logs


class OrdersSource(Protocol):
    def orders_page(self, variables: Dict[str, Any]) -> Dict[str, Any]: ...


class WindowScanStep(PipelineStep):
    """
    WindowScanStep (paginated window scanner)

    Semantics:
      upstream : remote orders, newest first, filtered by processed_at >= since
      output   : ctx.scan (counters + observations), ctx.summary

    Loop (one page in memory at a time):
      request page -> engine.accept_page -> fold records -> engine.check_boundary

    Error policy:
      - transport / protocol / malformed page -> raise (no partial result)
      - bad record data                       -> excluded, counted as seen
    """

    stage = "scan"
    MAX_PAGE_SIZE = 250

    def __init__(
        self,
        *,
        source: OrdersSource,
        extractor: TimeDeltaEngine | None = None,
        page_size: int = MAX_PAGE_SIZE,
        precision: int = 2,
        inst=None,
    ) -> None:
        super().__init__(inst=inst)
        if not 1 <= page_size <= self.MAX_PAGE_SIZE:
            raise ValueError(f"page_size must be in 1..{self.MAX_PAGE_SIZE} (got {page_size})")

        self.source = source
        self.extractor = extractor or TimeDeltaEngine()
        self.page_size = page_size
        self.precision = precision

    # --------------------------------------------------
    def run(self, ctx: WindowContext) -> WindowContext:
        with self.timed():
            stats = StreamingStatistics(precision=self.precision)
            ctx.scan = self.scan(ctx.window, stats)
            ctx.summary = stats.finalize()

        label = ctx.window.label
        self.inst.metrics.record(f"records_seen_{label}", ctx.scan.records_seen)
        self.inst.metrics.record(f"records_with_event_{label}", ctx.scan.records_with_event)
        self.inst.metrics.record(f"pages_{label}", ctx.scan.pages)

        logs.info(
            f"[Scan] {label} done | pages={ctx.scan.pages} "
            f"seen={ctx.scan.records_seen} with_fulfillment={ctx.scan.records_with_event} "
            f"stop={ctx.scan.stop_reason.value if ctx.scan.stop_reason else None}"
        )
        return ctx

    # --------------------------------------------------
    def scan(self, window: WindowSpec, stats: StreamingStatistics) -> ScanResult:
        engine = WindowScanEngine(window)
        records_seen = 0
        records_with_event = 0

        logs.info(f"[Scan] {window.label} since={window.search_query()}")

        while not engine.done:
            variables = engine.variables(self.page_size)

            with self.inst.timer(f"scan_{window.label}"):
                edges, has_next_page = self._parse_page(self.source.orders_page(variables))

            engine.accept_page(edges, has_next_page)

            for edge in edges:
                records_seen += 1
                hours = self.extractor.process(edge.get("node") or {})
                if hours is not None:
                    stats.accumulate(hours)
                    records_with_event += 1

            engine.check_boundary()
            logs.debug(
                f"[Scan] {window.label} page={engine.pages} edges={len(edges)} "
                f"has_next={has_next_page} state={engine.state.value}"
            )

        return ScanResult(
            observations=stats.observations,
            records_seen=records_seen,
            records_with_event=records_with_event,
            pages=engine.pages,
            stop_reason=engine.stop_reason,
        )

    # --------------------------------------------------
    @staticmethod
    def _parse_page(orders: Dict[str, Any]) -> Tuple[List[Dict[str, Any]], bool]:
        if not isinstance(orders, dict):
            raise TransportError("orders page is not an object", payload=orders)

        edges = orders.get("edges") or []
        if not isinstance(edges, list) or not all(isinstance(e, dict) for e in edges):
            raise TransportError("orders.edges is not a list of objects", payload=orders)

        page_info = orders.get("pageInfo") or {}
        if not isinstance(page_info, dict):
            raise TransportError("orders.pageInfo is not an object", payload=orders)
        has_next_page = bool(page_info.get("hasNextPage", False))

        # a page that continues must give us a cursor to continue from
        if edges and has_next_page and not edges[-1].get("cursor"):
            raise TransportError("last edge has no cursor but hasNextPage is true", payload=orders)

        return edges, has_next_page
