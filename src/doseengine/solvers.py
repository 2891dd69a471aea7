# src/doseengine/solvers.py
from collections import defaultdict
from typing import Iterable

import numpy as np
from scipy.integrate import solve_ivp

from .types import Dose, RateConstants, TimeSeries
from .models.one_compartment import one_compartment_first_order
from .simulate import build_time_grid
from .helpers import MS_PER_HOUR


def integrate_one_compartment(doses: Iterable[Dose], rates: RateConstants,
                              simulation_days: float = 5, time_step_h: float = 0.5,
                              rtol: float = 1e-6, atol: float = 1e-9) -> TimeSeries:
    """
    Numerically integrate the one-compartment model for a dose schedule.

    Same grid as compute_series (anchored at the earliest dose). Each dose is
    an instantaneous jump into the absorption depot at its scheduled time;
    between doses the ODE is integrated with RK45. The central amount is the
    concentration on the closed form's unit-volume scale, so the two should
    agree up to solver tolerance.

    Returns:
      TimeSeries of central amounts (mg) at each grid point
    """
    doses = tuple(doses)
    if not doses:
        return TimeSeries.empty()

    start_ms = min(d.time_ms for d in doses)
    t_grid = build_time_grid(simulation_days, time_step_h)
    if t_grid.size == 0:
        return TimeSeries.empty()
    t_end = float(t_grid[-1])

    # Depot jumps keyed by hours since the first dose; same-time doses add up
    jumps: dict[float, float] = defaultdict(float)
    for d in doses:
        jumps[(d.time_ms - start_ms) / MS_PER_HOUR] += float(d.amount_mg)

    # Segment boundaries: start, every dose inside the window, end
    boundaries = sorted({0.0, t_end} | {h for h in jumps if 0.0 < h < t_end})

    def rhs(t, y):
        return one_compartment_first_order(t, y, rates.absorption, rates.elimination)

    y0 = [0.0, 0.0]
    A_c = np.zeros_like(t_grid)
    for prev, curr in zip(boundaries[:-1], boundaries[1:]):
        y0[0] += jumps.get(prev, 0.0)

        sol = solve_ivp(rhs, t_span=(prev, curr), y0=y0, method="RK45",
                        dense_output=True, rtol=rtol, atol=atol)
        # Grid points on a boundary are written twice; A_c is continuous there
        mask = (t_grid >= prev) & (t_grid <= curr)
        if np.any(mask):
            A_c[mask] = sol.sol(t_grid[mask])[1]

        y0 = [float(sol.y[0, -1]), float(sol.y[1, -1])]

    times_ms = start_ms + np.round(t_grid * MS_PER_HOUR).astype(np.int64)
    return TimeSeries(times_ms=times_ms, values=np.maximum(A_c, 0.0))
