# src/doseengine/metrics.py
import numpy as np

from .types import TimeSeries
from .helpers import MS_PER_HOUR


def cmax(series: TimeSeries) -> float:
    """Global maximum concentration."""
    return float(np.max(series.values))

def tmax(series: TimeSeries) -> int:
    """Timestamp (epoch ms) of the maximum concentration."""
    return int(series.times_ms[int(np.argmax(series.values))])

def cmin(series: TimeSeries) -> float:
    """Global minimum concentration."""
    return float(np.min(series.values))

def cavg(series: TimeSeries) -> float:
    """Average concentration over the simulated window."""
    return float(np.mean(series.values))

def auc_trapz(series: TimeSeries) -> float:
    """Area Under the Curve via the trapezoidal rule (concentration * h)."""
    return float(np.trapezoid(series.values, series.hours))

def trough_before(series: TimeSeries, time_ms: int) -> float:
    """
    Concentration at the last grid point strictly before time_ms, e.g. the
    trough just before a dose. NaN if no grid point precedes it.
    """
    idx = int(np.searchsorted(series.times_ms, time_ms, side="left")) - 1
    if idx < 0:
        return float("nan")
    return float(series.values[idx])

def _last_interval(series: TimeSeries, interval_h: float | None) -> np.ndarray:
    """
    Values in the last interval_h hours of the series; the whole series when
    interval_h is unset or reaches back past the first point.
    """
    if not interval_h or interval_h <= 0:
        return series.values
    cutoff = series.times_ms[-1] - interval_h * MS_PER_HOUR
    if cutoff < series.times_ms[0]:
        return series.values
    return series.values[series.times_ms >= cutoff]

def peak_to_trough_ratio(series: TimeSeries, interval_h: float | None = None) -> float:
    """
    Peak-to-Trough Ratio (PTR) = Cmax / Cmin, over the last interval_h hours
    (or the full series). inf when the trough is 0.
    """
    window = _last_interval(series, interval_h)
    trough = float(window.min())
    return float(window.max()) / trough if trough > 0 else float("inf")

def fluctuation_index(series: TimeSeries, interval_h: float | None = None) -> float:
    """
    Fluctuation Index (FI) = (Cmax - Cmin) / Cavg, over the last interval_h
    hours (or the full series). inf when the average is 0.
    """
    window = _last_interval(series, interval_h)
    mean = float(window.mean())
    return float(np.ptp(window)) / mean if mean != 0.0 else float("inf")
