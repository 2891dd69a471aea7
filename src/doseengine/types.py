# src/doseengine/types.py
from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np

# Dose times are absolute (ms since the Unix epoch); model time is in HOURS.


@dataclass(frozen=True)
class Dose:
    """
    A single administration of the drug.

    time_ms   : when the dose is taken, in milliseconds since the epoch
    amount_mg : dose size in milligrams
    """
    time_ms: int
    amount_mg: float


@dataclass(frozen=True)
class Regimen:
    """
    A collection of Dose objects that defines the full schedule.

    Order doesn't matter to the simulator; the builders in dosing.py keep
    it sorted by time so it reads naturally in a list.
    """
    doses: tuple[Dose, ...] = ()

    def __len__(self) -> int:
        return len(self.doses)

    def __iter__(self):
        return iter(self.doses)


@dataclass(frozen=True)
class RateConstants:
    """First-order rate constants (1/h) for the one-compartment model."""
    elimination: float
    absorption: float


@dataclass(frozen=True, eq=False)
class TimeSeries:
    """
    Concentration curve on a fixed time grid.

    times_ms : absolute timestamps (int64 ms), strictly increasing
    values   : summed concentration at each timestamp (relative units, ~mg)
    """
    times_ms: np.ndarray = field(default_factory=lambda: np.zeros(0, dtype=np.int64))
    values: np.ndarray = field(default_factory=lambda: np.zeros(0, dtype=float))

    def __post_init__(self):
        times = np.array(self.times_ms, dtype=np.int64)
        values = np.array(self.values, dtype=float)
        if times.shape != values.shape:
            raise ValueError(f"times_ms and values must align (got {times.shape} vs {values.shape}).")
        times.setflags(write=False)
        values.setflags(write=False)
        object.__setattr__(self, "times_ms", times)
        object.__setattr__(self, "values", values)

    @classmethod
    def empty(cls) -> "TimeSeries":
        return cls()

    def __len__(self) -> int:
        return int(self.times_ms.size)

    @property
    def is_empty(self) -> bool:
        return self.times_ms.size == 0

    @property
    def hours(self) -> np.ndarray:
        """Time since the first grid point, in hours."""
        if self.is_empty:
            return np.zeros(0, dtype=float)
        return (self.times_ms - self.times_ms[0]) / 3_600_000.0


@dataclass(frozen=True)
class SimulationSettings:
    """
    Knobs for one simulation run.

    half_life_h     : elimination half-life (h)
    simulation_days : length of the plotted window, from the first dose
    time_step_h     : grid spacing (h)
    target_tmax_h   : desired time-to-peak of a single dose (h)
    """
    half_life_h: float = 11.0
    simulation_days: float = 5
    time_step_h: float = 0.5
    target_tmax_h: float = 3.5
