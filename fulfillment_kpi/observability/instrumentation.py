#!filepath: fulfillment_kpi/observability/instrumentation.py
from __future__ import annotations

import time
from dataclasses import dataclass
from contextlib import contextmanager
from collections import OrderedDict
from typing import Dict

from fulfillment_kpi.observability.metrics import MetricRecorder
from fulfillment_kpi.observability.timeline_reporter import TimelineReporter


@dataclass
class Instrumentation:
    """
    Leaf-only accounting + parent scopes.

    Rules:
    1. the timeline only records leaf timers (record=True)
    2. parent scopes (record=False) define wall-time only, no side effects
    3. repeated leaves with the same name accumulate
    4. no logging on the hot path
    """

    enabled: bool = True

    def __post_init__(self):
        self.metrics = MetricRecorder(enabled=self.enabled)

        # timeline: OrderedDict[leaf_name, elapsed_seconds]
        self.timeline: Dict[str, float] = OrderedDict()

    # ---------------------------------------------------------
    # Context manager timer (single entry point)
    # ---------------------------------------------------------
    def timer(self, name: str, *, record: bool = True):
        """
        Parameters
        ----------
        name : str
            leaf name
        record : bool
            - True  : leaf, written to the timeline
            - False : parent scope, wall-time only
        """
        inst = self

        @contextmanager
        def _ctx():
            if not inst.enabled:
                yield
                return

            start = time.perf_counter()
            try:
                yield
            finally:
                elapsed = time.perf_counter() - start

                if record:
                    inst.timeline[name] = inst.timeline.get(name, 0.0) + elapsed

        return _ctx()

    # ---------------------------------------------------------
    # Timeline output (cold path)
    # ---------------------------------------------------------
    def generate_timeline_report(self, label: str):
        TimelineReporter(self.timeline, label).print()


# -------------------------------------------------------------
# No-op Instrumentation (observability disabled)
# -------------------------------------------------------------
class NoOpInstrumentation:
    """Used when no Instrumentation is injected."""

    def __init__(self):
        self.metrics = MetricRecorder(enabled=False)
        self.timeline: Dict[str, float] = {}

    def timer(self, name: str, *, record: bool = True):
        return _NoOpTimer()

    def generate_timeline_report(self, label: str):
        pass


class _NoOpTimer:
    def __enter__(self):
        pass

    def __exit__(self, exc_type, exc, tb):
        pass
