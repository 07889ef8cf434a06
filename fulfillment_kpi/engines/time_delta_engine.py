from __future__ import annotations

import math
from typing import Any, Mapping, Optional

from fulfillment_kpi.engines.base import BaseEngine
from fulfillment_kpi.utils.datetime_utils import DateTimeUtils


class TimeDeltaEngine(BaseEngine[Mapping[str, Any], Optional[float]]):
    """
    Order node -> hours from placement to first fulfillment.

    Input (GraphQL order node):
        {
            "createdAt": "2025-11-01T10:00:00Z",
            "fulfillments": [{"createdAt": "2025-11-01T12:00:00Z"}, ...],
        }

    Output:
        float  : finite, >= 0 hours
        None   : no observation
                 - no fulfillments
                 - anchor or any fulfillment timestamp missing / unparseable
                 - node or fulfillment entry is not an object
                 - first fulfillment precedes the order (negative delta)

    Anomalous data is excluded here, never clamped and never raised.
    """

    anchor_field = "createdAt"
    events_field = "fulfillments"
    event_time_field = "createdAt"

    def process(self, event: Mapping[str, Any]) -> Optional[float]:
        if not isinstance(event, Mapping):
            return None

        fulfillments = event.get(self.events_field) or []
        if not fulfillments or not isinstance(fulfillments, list):
            return None

        anchor = DateTimeUtils.parse_instant(event.get(self.anchor_field))
        if anchor is None:
            return None

        times = []
        for f in fulfillments:
            if not isinstance(f, Mapping):
                return None
            ts = DateTimeUtils.parse_instant(f.get(self.event_time_field))
            if ts is None:
                return None
            times.append(ts)

        hours = DateTimeUtils.hours_between(anchor, min(times))
        if not math.isfinite(hours) or hours < 0:
            return None
        return hours
