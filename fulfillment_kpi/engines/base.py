#!filepath: fulfillment_kpi/engines/base.py
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Generic, TypeVar, Iterable


InEvent = TypeVar("InEvent")
OutEvent = TypeVar("OutEvent")


class BaseEngine(ABC, Generic[InEvent, OutEvent]):
    """
    Engine base class (atomic engine layer):

    - no I/O (no HTTP / files / sockets)
    - pure "input record -> output value" logic
    - reusable from steps, scripts and tests alike
    """

    @abstractmethod
    def process(self, event: InEvent) -> OutEvent:
        """
        Process a single record (smallest unit of work).
        """
        raise NotImplementedError

    def process_stream(self, events: Iterable[InEvent]) -> Iterable[OutEvent]:
        """
        Process a batch lazily, calling process() once per record.
        Override in subclasses that carry state.
        """
        for ev in events:
            yield self.process(ev)
