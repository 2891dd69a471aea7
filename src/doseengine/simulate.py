# src/doseengine/simulate.py
import logging
import math
from typing import Iterable

import numpy as np

from .types import Dose, Regimen, SimulationSettings, TimeSeries
from .calibration import calibrate_rate_constants
from .models.one_compartment import dose_concentration
from .helpers import MS_PER_HOUR

logger = logging.getLogger(__name__)


def build_time_grid(simulation_days: float, time_step_h: float) -> np.ndarray:
    """
    Hour offsets 0, step, 2*step, ... while offset <= simulation_days * 24.

    Offsets are accumulated by repeated addition, so the last point is the
    horizon itself for binary-exact steps (0.5, 0.25) and follows float
    accumulation otherwise (e.g. 0.1). A non-positive or NaN step, or a
    non-finite window, gives an empty grid; an infinite step gives just 0.
    """
    total_h = simulation_days * 24
    if not (time_step_h > 0) or not math.isfinite(total_h):
        return np.zeros(0, dtype=float)

    offsets: list[float] = []
    h = 0.0
    while h <= total_h:
        offsets.append(h)
        h += time_step_h
    return np.asarray(offsets, dtype=float)


def compute_series(doses: Iterable[Dose], half_life_h: float, simulation_days: float = 5,
                   time_step_h: float = 0.5, target_tmax_h: float = 3.5) -> TimeSeries:
    """
    Concentration curve for a dose schedule.

    The grid starts at the earliest dose and spans simulation_days. Each grid
    point is the plain sum of every dose's contribution (superposition);
    doses after a grid point contribute nothing to it.

    Parameters
    ----------
    doses : Regimen or iterable of Dose
        Any order. Not stored or modified.
    half_life_h : float
        Elimination half-life (h). Clamped to a small positive floor.
    simulation_days : float, default 5
    time_step_h : float, default 0.5
    target_tmax_h : float, default 3.5
        Desired time-to-peak of a single dose (h).

    Returns
    -------
    TimeSeries
        Empty if there are no doses or the step is not a positive number.
    """
    # summed in (time, amount) order, whatever order the caller used
    doses = tuple(sorted(doses, key=lambda d: (d.time_ms, d.amount_mg)))
    if not doses:
        return TimeSeries.empty()

    start_ms = doses[0].time_ms
    rates = calibrate_rate_constants(half_life_h, target_tmax_h)
    ke, ka = rates.elimination, rates.absorption

    offsets_h = build_time_grid(simulation_days, time_step_h)
    logger.debug("simulating %d doses on %d points (ke=%.4g, ka=%.4g)",
                 len(doses), offsets_h.size, ke, ka)

    values = np.zeros_like(offsets_h)
    for d in doses:
        # elapsed from the unrounded offset so a dose on a grid point sees exactly 0
        elapsed_h = offsets_h + (start_ms - d.time_ms) / MS_PER_HOUR
        active = elapsed_h >= 0
        if np.any(active):
            values[active] += dose_concentration(elapsed_h[active], d.amount_mg, ke, ka)

    times_ms = start_ms + np.round(offsets_h * MS_PER_HOUR).astype(np.int64)
    return TimeSeries(times_ms=times_ms, values=values)


def run(regimen: Regimen, settings: SimulationSettings = SimulationSettings()) -> TimeSeries:
    """
    High-level wrapper: simulate a regimen with the knobs from a SimulationSettings.
    """
    return compute_series(
        regimen.doses,
        half_life_h=settings.half_life_h,
        simulation_days=settings.simulation_days,
        time_step_h=settings.time_step_h,
        target_tmax_h=settings.target_tmax_h,
    )
