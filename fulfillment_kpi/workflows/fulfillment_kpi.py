#!filepath: fulfillment_kpi/workflows/fulfillment_kpi.py
from __future__ import annotations

from fulfillment_kpi.adapters.shopify_adapter import ShopifyAdapter
from fulfillment_kpi.config.app_config import AppConfig
from fulfillment_kpi.engines.time_delta_engine import TimeDeltaEngine
from fulfillment_kpi.observability.instrumentation import Instrumentation
from fulfillment_kpi.pipeline.pipeline import KpiPipeline
from fulfillment_kpi.steps.publish_step import PublishStep
from fulfillment_kpi.steps.window_scan_step import WindowScanStep
from fulfillment_kpi.utils.logger import Logging


def build_kpi_pipeline(
    cfg: AppConfig | None = None,
    *,
    dry_run: bool = False,
    configure_logging: bool = True,
) -> KpiPipeline:
    """
    Fulfillment KPI pipeline

    Semantic order (per window):
        WindowScan   (orders since now - N days -> hours to first fulfillment)
        → Publish    (median / average -> kpi.* shop metafields)

    Credentials are checked here, before any request is made.
    """

    cfg = cfg or AppConfig.load()
    if configure_logging:
        Logging.from_config(cfg.log)

    inst = Instrumentation()
    shopify = ShopifyAdapter(secret=cfg.secret, api=cfg.api, inst=inst)

    steps = [
        WindowScanStep(
            source=shopify,
            extractor=TimeDeltaEngine(),
            page_size=cfg.kpi.page_size,
            precision=cfg.kpi.precision,
            inst=inst,
        ),
        PublishStep(sink=shopify, kpi=cfg.kpi, inst=inst),
    ]

    return KpiPipeline(
        kpi=cfg.kpi,
        owner=shopify,
        steps=steps,
        inst=inst,
        dry_run=dry_run,
    )
