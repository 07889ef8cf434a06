#!filepath: fulfillment_kpi/engines/window_scan_engine.py
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Mapping, Optional, Sequence

from fulfillment_kpi.utils.datetime_utils import DateTimeUtils


class ScanState(str, Enum):
    FETCHING = "fetching"
    CHECKING_BOUNDARY = "checking-boundary"
    DONE = "done"


class StopReason(str, Enum):
    EMPTY_PAGE = "empty_page"
    BOUNDARY = "boundary"
    EXHAUSTED = "exhausted"


@dataclass(frozen=True)
class WindowSpec:
    """
    Trailing window, fixed at scan start.

    `now` is captured once; every page of the scan is filtered
    against the same `since`.
    """

    days: int
    now: datetime

    def __post_init__(self):
        if self.days <= 0:
            raise ValueError(f"window days must be positive (got {self.days})")
        if self.now.tzinfo is None:
            object.__setattr__(self, "now", self.now.replace(tzinfo=DateTimeUtils.UTC))

    @classmethod
    def starting_now(cls, days: int, now: Optional[datetime] = None) -> "WindowSpec":
        return cls(days=days, now=now or DateTimeUtils.utcnow())

    @property
    def since(self) -> datetime:
        return DateTimeUtils.days_before(self.now, self.days)

    @property
    def label(self) -> str:
        return f"{self.days}d"

    def search_query(self) -> str:
        return f"processed_at:>={DateTimeUtils.to_iso(self.since)}"


@dataclass
class WindowScanEngine:
    """
    Pagination state machine (pure, no I/O).

        FETCHING --accept_page()--> CHECKING_BOUNDARY --check_boundary()--> FETCHING | DONE

    Contract with the caller (WindowScanStep):
      1. accept_page(): register the page, advance the cursor
      2. fold EVERY record of the page into the statistics
      3. check_boundary(): decide whether another page is requested

    Stop rule (first match wins, either criterion alone is enough):
      EMPTY_PAGE : page has no edges (cursor cannot advance)
      BOUNDARY   : oldest record on the page (last edge, newest-first order)
                   is strictly older than `since`; fires even if hasNextPage
      EXHAUSTED  : hasNextPage is false

    An unparseable oldest timestamp never fires BOUNDARY.
    """

    window: WindowSpec
    anchor_field: str = "createdAt"

    state: ScanState = field(default=ScanState.FETCHING, init=False)
    cursor: Optional[str] = field(default=None, init=False)
    pages: int = field(default=0, init=False)
    stop_reason: Optional[StopReason] = field(default=None, init=False)

    _edges: Sequence[Mapping[str, Any]] = field(default=(), init=False, repr=False)
    _has_next_page: bool = field(default=False, init=False, repr=False)

    # --------------------------------------------------
    @property
    def done(self) -> bool:
        return self.state is ScanState.DONE

    def variables(self, page_size: int) -> dict:
        if self.state is not ScanState.FETCHING:
            raise RuntimeError(f"no page to request in state {self.state.value}")
        return {
            "first": page_size,
            "cursor": self.cursor,
            "query": self.window.search_query(),
        }

    # --------------------------------------------------
    def accept_page(
        self,
        edges: Sequence[Mapping[str, Any]],
        has_next_page: bool,
    ) -> None:
        if self.state is not ScanState.FETCHING:
            raise RuntimeError(f"accept_page() in state {self.state.value}")

        self.pages += 1
        self._edges = edges
        self._has_next_page = bool(has_next_page)
        if edges:
            self.cursor = edges[-1].get("cursor")

        self.state = ScanState.CHECKING_BOUNDARY

    def check_boundary(self) -> ScanState:
        if self.state is not ScanState.CHECKING_BOUNDARY:
            raise RuntimeError(f"check_boundary() in state {self.state.value}")

        self.stop_reason = self._stop_reason()
        self._edges = ()
        self.state = ScanState.DONE if self.stop_reason else ScanState.FETCHING
        return self.state

    # --------------------------------------------------
    def oldest_anchor(self) -> Optional[datetime]:
        if not self._edges:
            return None
        node = self._edges[-1].get("node")
        if not isinstance(node, Mapping):
            return None
        return DateTimeUtils.parse_instant(node.get(self.anchor_field))

    def _stop_reason(self) -> Optional[StopReason]:
        if not self._edges:
            return StopReason.EMPTY_PAGE

        oldest = self.oldest_anchor()
        if oldest is not None and oldest < self.window.since:
            return StopReason.BOUNDARY

        if not self._has_next_page:
            return StopReason.EXHAUSTED

        return None
