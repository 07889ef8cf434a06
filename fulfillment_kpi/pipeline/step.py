from __future__ import annotations

from fulfillment_kpi.pipeline.context import WindowContext
from fulfillment_kpi.observability.instrumentation import (
    Instrumentation,
    NoOpInstrumentation,
)


class PipelineStep:
    """
    Pipeline step base class

    Responsibilities:
      1. orchestration (loops / conditional execution) for one window
      2. step-level wall-time scope (parent scope, not recorded)

    Rules:
      - the step itself never enters the timeline
      - leaf timers live inside the step / adapter
      - behaviour never depends on whether inst is present
    """

    stage: str = ''  # e.g. "scan"

    def __init__(self, inst: Instrumentation | None = None):
        self.inst: Instrumentation | NoOpInstrumentation = (
            inst if inst is not None else NoOpInstrumentation()
        )

    @property
    def step_name(self) -> str:
        return self.__class__.__name__

    def timed(self):
        """Step-level parent scope (record=False)."""
        return self.inst.timer(self.step_name, record=False)

    def run(self, ctx: WindowContext) -> WindowContext:
        raise NotImplementedError
