# src/doseengine/dosing.py
from __future__ import annotations

from datetime import date, datetime, time
from typing import Sequence, Tuple

from .types import Dose, Regimen
from .helpers import MS_PER_DAY, to_epoch_ms


def parse_time_of_day(text: str) -> time:
    """
    Parse a wall-clock "HH:MM" string (24 h), e.g. "08:00" or "21:30".
    """
    try:
        hours, minutes = (int(part) for part in text.strip().split(":"))
        return time(hour=hours, minute=minutes)
    except ValueError as exc:
        raise ValueError(f"time of day must look like HH:MM (got {text!r}).") from exc


def dose_datetime(day: date, time_of_day: str | time) -> datetime:
    """Local datetime for a calendar day and a clock time."""
    if isinstance(time_of_day, str):
        time_of_day = parse_time_of_day(time_of_day)
    return datetime.combine(day, time_of_day)


def single_dose(amount_mg: float, when: datetime | int) -> Regimen:
    """
    Create a regimen with exactly one dose.
    Examples:
      - 30 mg at datetime(2024, 5, 1, 8, 0)
      - 30 mg at an epoch-ms timestamp
    """
    _validate_positive("amount_mg", amount_mg)
    return Regimen(doses=(Dose(time_ms=_as_epoch_ms(when), amount_mg=float(amount_mg)),))


def daily_doses(amount_mg: float, first: datetime | int, days: int) -> Regimen:
    """
    Same dose at the same clock time every day: 30 mg at 08:00 for 5 days.

    amount_mg : size of each dose, mg
    first     : time of the first dose
    days      : number of doses; consecutive doses are exactly 24 h apart
    """
    _validate_positive("amount_mg", amount_mg)
    _validate_positive_int("days", days)

    start_ms = _as_epoch_ms(first)
    doses = tuple(
        Dose(time_ms=start_ms + i * MS_PER_DAY, amount_mg=float(amount_mg))
        for i in range(days)
    )
    return Regimen(doses=doses)


def combine_regimens(*regimens: Regimen) -> Regimen:
    """
    Merge multiple regimens into one (e.g. an extra dose on top of a daily schedule).
    Doses are concatenated and sorted by time; duplicates are kept.
    """
    all_doses: list[Dose] = []
    for r in regimens:
        all_doses.extend(r.doses)
    return Regimen(doses=tuple(sorted(all_doses, key=lambda d: d.time_ms)))


def remove_dose(regimen: Regimen, time_ms: int) -> Regimen:
    """
    Drop every dose scheduled at time_ms. Unknown times leave the regimen unchanged.
    An empty Regimen() is the "remove all" case.
    """
    return Regimen(doses=tuple(d for d in regimen.doses if d.time_ms != time_ms))


def from_explicit_schedule(entries: Sequence[Tuple[datetime | int, float]]) -> Regimen:
    """
    Build a regimen from manual (when, amount_mg) entries.
    Example: entries=[(datetime(2024, 5, 1, 8), 30), (datetime(2024, 5, 2, 8), 20)]
    """
    doses: list[Dose] = []
    for when, amount_mg in entries:
        _validate_positive("amount_mg", amount_mg)
        doses.append(Dose(time_ms=_as_epoch_ms(when), amount_mg=float(amount_mg)))
    doses.sort(key=lambda d: d.time_ms)
    return Regimen(doses=tuple(doses))


def _as_epoch_ms(when: datetime | int) -> int:
    if isinstance(when, datetime):
        return to_epoch_ms(when)
    return int(when)


# --------------------------
# Small input validators
# --------------------------
def _validate_positive(name: str, x: float) -> None:
    if not (x > 0):
        raise ValueError(f"{name} must be > 0 (got {x}).")

def _validate_positive_int(name: str, x: int) -> None:
    if not (isinstance(x, int) and x > 0):
        raise ValueError(f"{name} must be a positive integer (got {x}).")
