import math
import numpy as np
import pytest

from doseengine.types import TimeSeries
from doseengine.dosing import daily_doses
from doseengine.simulate import compute_series
from doseengine.metrics import (
    cmax, tmax, cmin, cavg, auc_trapz, trough_before,
    peak_to_trough_ratio, fluctuation_index,
)
from doseengine.helpers import MS_PER_HOUR


T0 = 1_717_999_200_000


@pytest.fixture
def triangle():
    # hours 0..3 -> 0, 2, 4, 2
    times = T0 + np.arange(4) * MS_PER_HOUR
    return TimeSeries(times_ms=times, values=[0.0, 2.0, 4.0, 2.0])


def test_basic_stats(triangle):
    assert cmax(triangle) == 4.0
    assert tmax(triangle) == T0 + 2 * MS_PER_HOUR
    assert cmin(triangle) == 0.0
    assert cavg(triangle) == 2.0


def test_auc_uses_hours(triangle):
    # trapezoids: 1 + 3 + 3
    assert auc_trapz(triangle) == pytest.approx(7.0)


def test_trough_before(triangle):
    assert trough_before(triangle, T0 + 2 * MS_PER_HOUR) == 2.0
    assert trough_before(triangle, T0 + 2 * MS_PER_HOUR + 1) == 4.0
    assert math.isnan(trough_before(triangle, T0))


def test_ratios_over_full_series_and_last_interval(triangle):
    assert peak_to_trough_ratio(triangle) == float("inf")
    assert peak_to_trough_ratio(triangle, interval_h=2) == pytest.approx(2.0)
    assert fluctuation_index(triangle) == pytest.approx(2.0)
    assert fluctuation_index(triangle, interval_h=2) == pytest.approx(0.75)
    # interval longer than the series falls back to everything
    assert fluctuation_index(triangle, interval_h=10) == pytest.approx(2.0)


def test_daily_dosing_metrics_smoke():
    """
    Smoke test: 30 mg daily for 5 days should give a positive profile with
    finite interval metrics once the curve has built up.
    """
    series = compute_series(daily_doses(30.0, T0, 5), half_life_h=11.0)

    assert cmax(series) > 0.0
    assert auc_trapz(series) > 0.0
    assert T0 <= tmax(series) <= int(series.times_ms[-1])

    ptr = peak_to_trough_ratio(series, interval_h=24)
    fi = fluctuation_index(series, interval_h=24)
    assert np.isfinite(ptr) and ptr > 1.0
    assert np.isfinite(fi) and fi > 0.0

    # accumulation: the trough before the 5th dose beats the one before the 2nd
    assert trough_before(series, T0 + 4 * 24 * MS_PER_HOUR) > trough_before(series, T0 + 24 * MS_PER_HOUR)
