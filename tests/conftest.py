# tests/conftest.py
from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

import pytest
from loguru import logger

from fulfillment_kpi.utils.errors import PublishError


NOW = datetime(2026, 10, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def disable_file_logger():
    logger.remove()
    logger.add(lambda msg: None)  # or sys.stderr
    yield


@pytest.fixture
def now() -> datetime:
    return NOW


def iso(dt: datetime) -> str:
    return dt.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def make_order(anchor: datetime, *fulfilled_after_hours: float) -> Dict[str, Any]:
    """GraphQL order node: createdAt + fulfillments[*].createdAt"""
    return {
        "createdAt": iso(anchor),
        "fulfillments": [
            {"createdAt": iso(anchor + timedelta(hours=h))} for h in fulfilled_after_hours
        ],
    }


def make_page(nodes: List[Dict[str, Any]], has_next: bool, prefix: str = "c") -> Dict[str, Any]:
    """GraphQL orders connection"""
    return {
        "edges": [{"cursor": f"{prefix}{i}", "node": n} for i, n in enumerate(nodes)],
        "pageInfo": {"hasNextPage": has_next},
    }


@pytest.fixture
def order():
    return make_order


@pytest.fixture
def page():
    return make_page


class FakeShopify:
    """
    In-memory stand-in for ShopifyAdapter.

    - orders_page(): pops scripted pages, records the variables
    - set_metafields(): upsert into `store` keyed by (ownerId, namespace, key)
    """

    def __init__(
        self,
        pages: Optional[List[Dict[str, Any]]] = None,
        shop: str = "gid://shopify/Shop/1",
        user_errors: Optional[List[dict]] = None,
    ):
        self.pages = list(pages or [])
        self.shop = shop
        self.user_errors = list(user_errors or [])

        self.order_calls: List[Dict[str, Any]] = []
        self.writes: List[List[Dict[str, Any]]] = []
        self.store: Dict[tuple, Dict[str, Any]] = {}
        self.shop_calls = 0

    def shop_id(self) -> str:
        self.shop_calls += 1
        return self.shop

    def orders_page(self, variables: Dict[str, Any]) -> Dict[str, Any]:
        self.order_calls.append(dict(variables))
        if not self.pages:
            raise AssertionError(f"unexpected page request: {variables}")
        return self.pages.pop(0)

    def set_metafields(self, metafields: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        self.writes.append(metafields)
        if self.user_errors:
            raise PublishError("metafieldsSet errors", user_errors=self.user_errors)

        out = []
        for mf in metafields:
            k = (mf["ownerId"], mf["namespace"], mf["key"])
            self.store[k] = {f: mf[f] for f in ("namespace", "key", "type", "value")}
            out.append(dict(self.store[k]))
        return out


@pytest.fixture
def fake_shopify():
    def _make(pages=None, **kwargs) -> FakeShopify:
        return FakeShopify(pages=pages, **kwargs)

    return _make
