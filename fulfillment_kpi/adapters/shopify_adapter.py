from __future__ import annotations

from typing import Any, Dict, List, Optional

import requests

from fulfillment_kpi.adapters.queries import (
    METAFIELDS_SET_MUTATION,
    ORDERS_QUERY,
    SHOP_ID_QUERY,
)
from fulfillment_kpi.config.api_config import ApiConfig
from fulfillment_kpi.config.secret_config import SecretConfig
from fulfillment_kpi.observability.instrumentation import (
    Instrumentation,
    NoOpInstrumentation,
)
from fulfillment_kpi.utils.errors import PublishError, TransportError
from fulfillment_kpi.utils.logger import logs
from fulfillment_kpi.utils.retry import Retry


class ShopifyAdapter:
    """
    Adapter layer (the only place doing network I/O):
    - POST {query, variables} to the Admin GraphQL endpoint
    - bounded retry on transient network failures only
    - every other failure is raised as TransportError, never retried

    Error policy:
      - connection reset / timeout   -> retry, then TransportError
      - non-2xx / non-JSON / errors  -> TransportError (fatal)
      - metafieldsSet userErrors     -> PublishError (fatal)
    """

    TRANSIENT = (requests.ConnectionError, requests.Timeout)

    def __init__(
        self,
        secret: SecretConfig,
        api: ApiConfig | None = None,
        inst: Instrumentation | None = None,
        session: requests.Session | None = None,
    ):
        secret.require()
        self.api = api or ApiConfig()
        self.inst = inst if inst is not None else NoOpInstrumentation()
        self.session = session or requests.Session()

        self.shop_domain = secret.shop_domain.strip()
        self._token = secret.admin_token.strip()

    @property
    def endpoint(self) -> str:
        return f"https://{self.shop_domain}/admin/api/{self.api.api_version}/graphql.json"

    # --------------------------------------------------
    # query boundary: execute(query, variables) -> data
    # --------------------------------------------------
    def execute(
        self,
        query: str,
        variables: Optional[Dict[str, Any]] = None,
        *,
        operation: str = "query",
    ) -> Dict[str, Any]:
        with self.inst.timer(f"graphql_{operation}"):
            try:
                resp = Retry.run(
                    self._post,
                    query,
                    variables or {},
                    exceptions=self.TRANSIENT,
                    max_attempts=self.api.max_attempts,
                    delay=self.api.retry_delay,
                    backoff=self.api.retry_backoff,
                )
            except requests.RequestException as e:
                raise TransportError(f"GraphQL request failed ({operation}): {e}") from e

        self.inst.metrics.incr("graphql_requests")
        return self._unwrap(resp)

    def _post(self, query: str, variables: Dict[str, Any]) -> requests.Response:
        return self.session.post(
            self.endpoint,
            json={"query": query, "variables": variables},
            headers={
                "Content-Type": "application/json",
                "X-Shopify-Access-Token": self._token,
            },
            timeout=self.api.timeout,
        )

    @staticmethod
    def _unwrap(resp: requests.Response) -> Dict[str, Any]:
        try:
            payload = resp.json()
        except ValueError:
            payload = None

        if not resp.ok:
            errors = payload.get("errors", payload) if isinstance(payload, dict) else resp.text
            raise TransportError(
                f"GraphQL HTTP {resp.status_code}: {errors}",
                status=resp.status_code,
                payload=payload,
            )

        if not isinstance(payload, dict):
            raise TransportError(
                f"GraphQL response is not a JSON object (HTTP {resp.status_code})",
                status=resp.status_code,
                payload=resp.text,
            )

        if payload.get("errors"):
            raise TransportError(
                f"GraphQL error: {payload['errors']}",
                status=resp.status_code,
                payload=payload,
            )

        data = payload.get("data")
        if not isinstance(data, dict):
            raise TransportError(
                "GraphQL response has no data",
                status=resp.status_code,
                payload=payload,
            )
        return data

    # --------------------------------------------------
    # operations
    # --------------------------------------------------
    def shop_id(self) -> str:
        data = self.execute(SHOP_ID_QUERY, operation="shop")
        shop_id = (data.get("shop") or {}).get("id")
        if not shop_id:
            raise TransportError("shop id missing from response", payload=data)
        return shop_id

    def orders_page(self, variables: Dict[str, Any]) -> Dict[str, Any]:
        """
        One page of OrdersSince.
        Returns the raw `orders` connection: {edges: [...], pageInfo: {...}}.
        """
        data = self.execute(ORDERS_QUERY, variables, operation="orders")
        orders = data.get("orders")
        if not isinstance(orders, dict):
            raise TransportError("orders connection missing from response", payload=data)
        return orders

    def set_metafields(self, metafields: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """
        metafieldsSet: upsert keyed by (ownerId, namespace, key).
        """
        data = self.execute(
            METAFIELDS_SET_MUTATION,
            {"metafields": metafields},
            operation="metafields_set",
        )
        result = data.get("metafieldsSet")
        if not isinstance(result, dict):
            raise TransportError("metafieldsSet missing from response", payload=data)

        user_errors = result.get("userErrors") or []
        if user_errors:
            messages = "; ".join(
                f"{'.'.join(map(str, e.get('field') or []))}: {e.get('message')}"
                for e in user_errors
            )
            logs.error(f"[Shopify] metafieldsSet rejected: {messages}")
            raise PublishError(
                f"metafieldsSet errors: {messages}",
                user_errors=user_errors,
            )

        return result.get("metafields") or []
