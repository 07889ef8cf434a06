# fulfillment_kpi/utils/errors.py
from __future__ import annotations

from typing import Any, List, Optional


class UserInputError(RuntimeError):
    """
    Raised for invalid user-provided input (CLI windows, config path, etc).
    Should NOT print traceback.
    """


class KpiError(RuntimeError):
    """
    Base class for fatal run errors.
    Any KpiError aborts the whole run (all windows).
    """


class ConfigError(KpiError):
    """
    Missing / invalid endpoint, credential or KPI settings.
    Raised pre-flight, before any network call.
    """


class TransportError(KpiError):
    """
    Query boundary failure:
      - non-2xx HTTP status
      - non-JSON / malformed payload
      - GraphQL `errors`
      - transient network failure after retries
    """

    def __init__(
        self,
        message: str,
        *,
        status: Optional[int] = None,
        payload: Any = None,
    ) -> None:
        super().__init__(message)
        self.status = status
        self.payload = payload


class PublishError(KpiError):
    """
    The remote side rejected the metafield write (`userErrors`).
    """

    def __init__(self, message: str, *, user_errors: Optional[List[dict]] = None) -> None:
        super().__init__(message)
        self.user_errors = list(user_errors or [])
