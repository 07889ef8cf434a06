from datetime import timedelta
from decimal import Decimal

import pytest
from loguru import logger

from fulfillment_kpi.config.app_config import AppConfig
from fulfillment_kpi.config.kpi_config import KpiConfig
from fulfillment_kpi.config.secret_config import SecretConfig
from fulfillment_kpi.pipeline.pipeline import KpiPipeline
from fulfillment_kpi.steps.publish_step import PublishStep
from fulfillment_kpi.steps.window_scan_step import WindowScanStep
from fulfillment_kpi.utils.errors import ConfigError, PublishError, TransportError
from fulfillment_kpi.workflows.fulfillment_kpi import build_kpi_pipeline

SHOP = "gid://shopify/Shop/1"


@pytest.fixture
def make_pipeline(now):
    def _make(shop, kpi=None, dry_run=False, clock=None):
        kpi = kpi or KpiConfig(windows=[30])
        return KpiPipeline(
            kpi=kpi,
            owner=shop,
            steps=[
                WindowScanStep(source=shop, page_size=kpi.page_size, precision=kpi.precision),
                PublishStep(sink=shop, kpi=kpi),
            ],
            clock=clock or (lambda: now),
            dry_run=dry_run,
        )

    return _make


def test_end_to_end_30d(make_pipeline, fake_shopify, order, page, now):
    t0 = now - timedelta(days=3)
    shop = fake_shopify([page([order(t0, 2.0), order(t0, 6.0), order(t0)], False)])

    (report,) = make_pipeline(shop).run()

    assert report.records_seen == 3
    assert report.records_with_event == 2
    assert report.summary.median == Decimal("4.00")
    assert report.summary.average == Decimal("4.00")
    assert len(shop.writes) == 1
    assert shop.store == {
        (SHOP, "kpi", "fulfillment_median_hours_30d"): {
            "namespace": "kpi",
            "key": "fulfillment_median_hours_30d",
            "type": "number_decimal",
            "value": "4.00",
        }
    }


def test_empty_window_never_publishes(make_pipeline, fake_shopify, page):
    shop = fake_shopify([page([], False)])

    (report,) = make_pipeline(shop).run()

    assert report.summary.count == 0
    assert report.summary.median is None
    assert report.skip_reason == "no data"
    assert shop.writes == []


def test_windows_run_in_order_with_own_clock(make_pipeline, fake_shopify, order, page, now):
    ticks = []

    def clock():
        ticks.append(now)
        return now

    t0 = now - timedelta(days=1)
    shop = fake_shopify(
        [
            page([order(t0, 1.0)], False),
            page([order(t0, 3.0)], False),
            page([order(t0, 5.0)], False),
        ]
    )

    reports = make_pipeline(shop, kpi=KpiConfig(), clock=clock).run()

    assert [r.days for r in reports] == [30, 60, 90]
    assert len(ticks) == 3
    assert shop.shop_calls == 1
    assert [c["query"] for c in shop.order_calls] == [
        "processed_at:>=2026-09-01T12:00:00.000Z",
        "processed_at:>=2026-08-02T12:00:00.000Z",
        "processed_at:>=2026-07-03T12:00:00.000Z",
    ]
    assert {k[2]: v["value"] for k, v in shop.store.items()} == {
        "fulfillment_median_hours_30d": "1.00",
        "fulfillment_median_hours_60d": "3.00",
        "fulfillment_median_hours_90d": "5.00",
    }


def test_explicit_windows_override_config(make_pipeline, fake_shopify, order, page, now):
    shop = fake_shopify([page([order(now, 1.0)], False)])

    reports = make_pipeline(shop, kpi=KpiConfig()).run([7])

    assert [r.days for r in reports] == [7]
    assert list(shop.store)[0][2] == "fulfillment_median_hours_7d"


def test_rerun_is_idempotent(make_pipeline, fake_shopify, order, page, now):
    t0 = now - timedelta(days=3)
    pages = lambda: [page([order(t0, 2.0), order(t0, 6.0)], False)]  # noqa: E731

    shop = fake_shopify(pages())
    make_pipeline(shop).run()
    shop.pages = pages()
    make_pipeline(shop).run()

    assert len(shop.writes) == 2
    assert len(shop.store) == 1
    assert shop.store[(SHOP, "kpi", "fulfillment_median_hours_30d")]["value"] == "4.00"


def test_publish_error_aborts_remaining_windows(make_pipeline, fake_shopify, order, page, now):
    shop = fake_shopify(
        [page([order(now, 1.0)], False), page([order(now, 2.0)], False)],
        user_errors=[{"field": ["value"], "message": "bad"}],
    )

    with pytest.raises(PublishError):
        make_pipeline(shop, kpi=KpiConfig(windows=[30, 60])).run()

    assert len(shop.order_calls) == 1


def test_transport_error_aborts_run(make_pipeline, now):
    class Down:
        def shop_id(self):
            raise TransportError("GraphQL HTTP 500", status=500)

    with pytest.raises(TransportError):
        make_pipeline(Down()).run()


def test_failed_run_is_logged(make_pipeline):
    class Down:
        def shop_id(self):
            raise TransportError("GraphQL HTTP 500", status=500)

    captured = []
    sink_id = logger.add(lambda msg: captured.append(str(msg)))
    try:
        with pytest.raises(TransportError):
            make_pipeline(Down()).run()
    finally:
        logger.remove(sink_id)

    assert any("run: kpi run failed" in line for line in captured)


@pytest.mark.parametrize("windows", [[30, 30], [0], []])
def test_invalid_explicit_windows_fail_before_network(make_pipeline, fake_shopify, windows):
    shop = fake_shopify([])

    with pytest.raises(ConfigError):
        make_pipeline(shop).run(windows)

    assert shop.shop_calls == 0
    assert shop.order_calls == []


def test_dry_run(make_pipeline, fake_shopify, order, page, now):
    shop = fake_shopify([page([order(now, 1.0)], False)])

    (report,) = make_pipeline(shop, dry_run=True).run()

    assert report.summary.median == Decimal("1.00")
    assert report.skip_reason == "dry run"
    assert shop.writes == []


# ---------------------------------------------------------------
# workflow builder
# ---------------------------------------------------------------
def test_build_pipeline_from_config():
    cfg = AppConfig(secret=SecretConfig(shop_domain="demo.myshopify.com", admin_token="t"))

    pipeline = build_kpi_pipeline(cfg, configure_logging=False)

    assert isinstance(pipeline, KpiPipeline)
    assert [type(s) for s in pipeline.steps] == [WindowScanStep, PublishStep]
    assert pipeline.steps[0].page_size == 250


def test_build_pipeline_requires_credentials():
    with pytest.raises(ConfigError):
        build_kpi_pipeline(AppConfig(), configure_logging=False)
