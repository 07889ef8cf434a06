# fulfillment_kpi/steps/publish_step.py
from __future__ import annotations

from typing import Any, Dict, List, Protocol

from fulfillment_kpi.config.kpi_config import KpiConfig, Metric
from fulfillment_kpi.pipeline.context import PublishedMetafield, WindowContext
from fulfillment_kpi.pipeline.step import PipelineStep
from fulfillment_kpi.utils.errors import TransportError
from fulfillment_kpi.utils.logger import logs


class MetafieldSink(Protocol):
    def set_metafields(self, metafields: List[Dict[str, Any]]) -> List[Dict[str, Any]]: ...


class PublishStep(PipelineStep):
    """
    PublishStep (result publisher)

    Semantics:
      upstream : ctx.summary (rounded Decimal values)
      output   : one number_decimal metafield per configured metric,
                 upserted on the owner keyed by (ownerId, namespace, key)

    Rules:
      - empty window    -> skip, not an error
      - dry run         -> log only
      - userErrors      -> PublishError (raised by the sink, never retried)
    """

    stage = "publish"
    value_type = "number_decimal"

    def __init__(self, *, sink: MetafieldSink, kpi: KpiConfig, inst=None) -> None:
        super().__init__(inst=inst)
        self.sink = sink
        self.kpi = kpi

    # --------------------------------------------------
    def run(self, ctx: WindowContext) -> WindowContext:
        label = ctx.window.label
        summary = ctx.summary

        if summary is None or summary.empty:
            ctx.skip_reason = "no data"
            logs.info(f"[Publish] No data for {label} window")
            return ctx

        with self.timed():
            for metric in self.kpi.metrics:
                value = summary.value_of(Metric(metric).value)
                key = self.kpi.key_for(metric, ctx.window.days)

                if ctx.dry_run:
                    logs.info(f"[Publish][DRY-RUN] {self.kpi.namespace}.{key} = {value}")
                    continue

                ctx.published.append(
                    self.publish(ctx.owner_id, self.kpi.namespace, key, str(value))
                )

        if ctx.dry_run:
            ctx.skip_reason = "dry run"
        return ctx

    # --------------------------------------------------
    def publish(self, owner_id: str, namespace: str, key: str, value: str) -> PublishedMetafield:
        """Idempotent upsert of a single metafield."""
        with self.inst.timer(f"publish_{key}"):
            written = self.sink.set_metafields(
                [
                    {
                        "ownerId": owner_id,
                        "namespace": namespace,
                        "key": key,
                        "type": self.value_type,
                        "value": value,
                    }
                ]
            )

        if not written:
            raise TransportError(f"metafieldsSet returned no metafield for {namespace}.{key}")

        mf = written[0]
        logs.info(f"[Publish] Updated {namespace}.{key} -> {mf.get('value')}")
        return PublishedMetafield(
            owner_id=owner_id,
            namespace=mf.get("namespace", namespace),
            key=mf.get("key", key),
            type=mf.get("type", self.value_type),
            value=mf.get("value", value),
        )
