from decimal import Decimal

import pytest

from fulfillment_kpi.engines.statistics_engine import (
    StreamingStatistics,
    mean,
    median,
    quantize,
)


@pytest.mark.parametrize(
    "values, expected",
    [
        ([5.0], 5.0),
        ([3.0, 1.0, 2.0], 2.0),
        ([4.0, 1.0, 3.0, 2.0], 2.5),
        ([2.0, 6.0], 4.0),
        ([1.0, 1.0, 1.0, 100.0], 1.0),
    ],
)
def test_median_definition(values, expected):
    assert median(values) == expected


def test_median_empty_is_undefined():
    assert median([]) is None
    assert mean([]) is None


def test_median_does_not_reorder_input():
    values = [3.0, 1.0, 2.0]
    median(values)
    assert values == [3.0, 1.0, 2.0]


def test_quantize_half_up():
    assert quantize(1.005, 2) == Decimal("1.01")
    assert quantize(2.0, 2) == Decimal("2.00")
    assert quantize(2.25, 1) == Decimal("2.3")
    assert quantize(None, 2) is None


def test_finalize_rounds_only_at_the_end():
    """
    rounded per value: 0.00, 0.00, 0.00, 0.01 -> average 0.00
    full precision   : 0.021 / 4 = 0.00525   -> average 0.01
    """
    stats = StreamingStatistics(precision=2)
    for v in (0.004, 0.004, 0.004, 0.009):
        stats.accumulate(v)

    summary = stats.finalize()
    assert summary.count == 4
    assert summary.average == Decimal("0.01")
    assert summary.median == Decimal("0.00")
    assert stats.observations == [0.004, 0.004, 0.004, 0.009]


def test_finalize_empty():
    summary = StreamingStatistics().finalize()

    assert summary.empty
    assert summary.count == 0
    assert summary.median is None
    assert summary.average is None


def test_precision_one_decimal():
    stats = StreamingStatistics(precision=1)
    stats.extend([2.0, 6.0])

    summary = stats.finalize()
    assert str(summary.median) == "4.0"
    assert str(summary.average) == "4.0"
    assert summary.value_of("median") == summary.median


def test_negative_precision_rejected():
    with pytest.raises(ValueError):
        StreamingStatistics(precision=-1)
