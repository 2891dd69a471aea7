import math

import pytest

from doseengine.calibration import (
    calibrate_rate_constants, elimination_rate, solve_absorption_rate, time_to_peak,
    MIN_HOURS, FALLBACK_OFFSET,
)


HALF_LIFE = 11.0
KE = math.log(2.0) / HALF_LIFE   # 1/KE ~ 15.9 h is the largest reachable Tmax


def test_elimination_rate_from_half_life():
    assert elimination_rate(HALF_LIFE) == pytest.approx(KE)


@pytest.mark.parametrize("half_life", [0.0, -5.0, 0.05])
def test_half_life_clamped_to_floor(half_life):
    rates = calibrate_rate_constants(half_life, 3.5)
    assert rates.elimination == pytest.approx(math.log(2.0) / MIN_HOURS)


@pytest.mark.parametrize("target", [0.0, -3.0, 0.01])
def test_target_clamped_to_floor(target):
    assert calibrate_rate_constants(HALF_LIFE, target) == calibrate_rate_constants(HALF_LIFE, MIN_HOURS)


@pytest.mark.parametrize("target", [0.5, 1.0, 2.0, 3.5, 8.0])
def test_round_trip_hits_target_tmax(target):
    """
    The solved ka should reproduce the requested time-to-peak:
      (ln ka - ln ke) / (ka - ke) == target
    """
    rates = calibrate_rate_constants(HALF_LIFE, target)
    assert rates.elimination == pytest.approx(KE)
    assert rates.absorption > rates.elimination
    assert abs(time_to_peak(rates.elimination, rates.absorption) - target) < 1e-4


@pytest.mark.parametrize("target", [16.0, 20.0, 1000.0])
def test_unreachable_target_uses_fallback(target):
    """
    Tmax can't exceed 1/ke (~15.9 h for an 11 h half-life), so Newton gives up
    and returns ka = ke + 1e-4.
    """
    assert target > 1.0 / KE
    ka = solve_absorption_rate(KE, target)
    assert ka == pytest.approx(KE + FALLBACK_OFFSET, abs=1e-12)


def test_degenerate_half_life_falls_back_without_raising():
    # half-life 0 -> 0.1 h, so 1/ke ~ 0.14 h and 3.5 h is unreachable
    rates = calibrate_rate_constants(0.0, 3.5)
    assert math.isfinite(rates.absorption)
    assert rates.absorption == pytest.approx(rates.elimination + FALLBACK_OFFSET, abs=1e-12)


def test_default_scenario_rates_are_plausible():
    rates = calibrate_rate_constants(HALF_LIFE, 3.5)
    # ka = ln2 / 1 h peaks at ~3.8 h, so 3.5 h needs a slightly faster ka
    assert 0.6 < rates.absorption < 1.0


def test_calibration_is_deterministic():
    assert calibrate_rate_constants(7.5, 2.25) == calibrate_rate_constants(7.5, 2.25)


def test_time_to_peak_limit_at_equal_rates():
    assert time_to_peak(KE, KE) == pytest.approx(1.0 / KE)
    assert time_to_peak(KE, KE + 1e-9) == pytest.approx(1.0 / KE, rel=1e-6)


def test_reachable_target_near_limit_still_falls_back():
    """
    14 h is below 1/ke (~15.9 h) so a root exists, but Newton's start
    ke + 1/14 is already right of it and the first step lands below ke.
    """
    assert 14.0 < 1.0 / KE
    ka = solve_absorption_rate(KE, 14.0)
    assert ka == pytest.approx(KE + FALLBACK_OFFSET, abs=1e-12)
    assert time_to_peak(KE, ka) == pytest.approx(1.0 / KE, rel=1e-3)


def test_target_below_threshold_converges():
    ka = solve_absorption_rate(KE, 13.0)
    assert ka > KE + FALLBACK_OFFSET
    assert abs(time_to_peak(KE, ka) - 13.0) < 1e-4


def test_infinite_half_life_falls_back_without_raising():
    rates = calibrate_rate_constants(float("inf"), 3.5)
    assert rates.elimination == 0.0
    assert rates.absorption == pytest.approx(FALLBACK_OFFSET)


def test_nan_half_life_propagates():
    rates = calibrate_rate_constants(float("nan"), 3.5)
    assert math.isnan(rates.elimination) and math.isnan(rates.absorption)


def test_iteration_limit_returns_last_iterate(monkeypatch):
    """
    With the iteration budget cut to one step the solver stops early and
    hands back that iterate, not the fallback.
    """
    monkeypatch.setattr("doseengine.calibration.MAX_ITERATIONS", 1)
    ka = solve_absorption_rate(KE, 0.5)
    assert ka > KE + 1.0 / 0.5
    assert ka != pytest.approx(KE + FALLBACK_OFFSET)
    assert abs(time_to_peak(KE, ka) - 0.5) > 0.1
