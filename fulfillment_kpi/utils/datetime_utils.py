#!filepath: fulfillment_kpi/utils/datetime_utils.py
from __future__ import annotations

import math
from datetime import datetime, timedelta, timezone
from typing import Optional, Union


class DateTimeUtils:
    UTC = timezone.utc
    SECONDS_PER_HOUR = 3600.0

    # ================================================================
    # now (UTC, aware)
    # ================================================================
    @classmethod
    def utcnow(cls) -> datetime:
        return datetime.now(cls.UTC)

    # ================================================================
    # ISO-8601 instant -> aware datetime (None when unparseable)
    # ================================================================
    @classmethod
    def parse_instant(cls, value: Union[str, datetime, None]) -> Optional[datetime]:
        """
        Accepted inputs:
            "2025-11-07T09:15:00Z"
            "2025-11-07T09:15:00.040+08:00"
            "2025-11-07T09:15:00"          # naive -> treated as UTC
            datetime (naive -> UTC)

        Anything else (None, "", garbage, wrong type) returns None.
        Timestamps coming from the remote API are data, not input:
        a bad one is excluded, never raised.
        """
        if value is None:
            return None

        if isinstance(value, datetime):
            dt = value
        elif isinstance(value, str):
            s = value.strip()
            if not s:
                return None
            if s.endswith("Z") or s.endswith("z"):
                s = s[:-1] + "+00:00"
            try:
                dt = datetime.fromisoformat(s)
            except (ValueError, OverflowError):
                return None
        else:
            return None

        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=cls.UTC)

        # an offset can push year 1 / year 9999 out of range
        try:
            return dt.astimezone(cls.UTC)
        except (ValueError, OverflowError):
            return None

    # ================================================================
    # aware datetime -> "YYYY-MM-DDTHH:MM:SS.mmmZ"
    # ================================================================
    @classmethod
    def to_iso(cls, dt: datetime) -> str:
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=cls.UTC)
        dt = dt.astimezone(cls.UTC)
        return dt.strftime("%Y-%m-%dT%H:%M:%S.") + f"{dt.microsecond // 1000:03d}Z"

    # ---------------------------------------------------------------
    @classmethod
    def days_before(cls, now: datetime, days: int) -> datetime:
        return now - timedelta(days=days)

    @classmethod
    def hours_between(cls, start: datetime, end: datetime) -> float:
        """end - start in hours (may be negative, NaN-safe for callers)."""
        hours = (end - start).total_seconds() / cls.SECONDS_PER_HOUR
        return hours if math.isfinite(hours) else math.nan
