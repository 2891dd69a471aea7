# src/doseengine/calibration.py
"""
Derive the rate constants (ke, ka) of the one-compartment oral model from an
elimination half-life and a desired time-to-peak.

For first-order absorption and elimination the peak of a single dose is at

    Tmax = (ln(ka) - ln(ke)) / (ka - ke)

which has no closed-form inverse in ka, so ka is found with Newton-Raphson.
Tmax is bounded above by 1/ke (the ka -> ke limit). Newton starts at
ke + 1/target; once that start lies right of the root the first step lands
below ke and the solver takes the ka = ke + 1e-4 fallback even though a root
exists. This happens once target * ke passes a threshold between 0.82 and 0.88
(with an 11 h half-life: 13 h converges, 14 h falls back), and always for
target * ke >= 1. A non-positive or non-finite ke also falls back.
"""
import logging
import math

from .types import RateConstants

logger = logging.getLogger(__name__)

MIN_HOURS = 0.1          # floor for half-life and target Tmax
MAX_ITERATIONS = 25
TOLERANCE = 1e-6         # |Tmax(ka) - target| considered converged
FALLBACK_OFFSET = 1e-4   # ka = ke + FALLBACK_OFFSET when Newton gives up


def elimination_rate(half_life_h: float) -> float:
    """ke (1/h) from a half-life, clamped to MIN_HOURS."""
    return math.log(2.0) / max(half_life_h, MIN_HOURS)


def time_to_peak(ke: float, ka: float) -> float:
    """Tmax (h) of a single dose; the ka == ke limit is 1/ke."""
    if ka == ke:
        return 1.0 / ke
    return (math.log(ka) - math.log(ke)) / (ka - ke)


def solve_absorption_rate(ke: float, target_tmax_h: float) -> float:
    """
    Newton-Raphson for ka > ke such that time_to_peak(ke, ka) == target_tmax_h.

    Falls back to ke + FALLBACK_OFFSET (without raising) if the step hits the
    ka == ke singularity, a flat derivative, a non-finite value, or lands at
    or below ke. The fallback is an approximation: its Tmax is ~1/ke, not the
    target.
    If MAX_ITERATIONS run out first, the last iterate is returned as is.
    """
    if not (ke > 0) or not math.isfinite(ke):
        return _fallback(ke, "ke not a positive finite rate", 0)

    target = max(target_tmax_h, MIN_HOURS)
    fallback = ke + FALLBACK_OFFSET
    ka = max(ke + 1.0 / target, fallback)

    for i in range(MAX_ITERATIONS):
        diff = ka - ke
        if diff == 0:
            return _fallback(ke, "ka == ke", i)

        log_ratio = math.log(ka) - math.log(ke)
        f = log_ratio / diff - target
        if abs(f) < TOLERANCE:
            logger.debug("ka=%.6g converged after %d iterations", ka, i)
            return ka

        # d/dka [log_ratio / diff]
        deriv = (diff / ka - log_ratio) / (diff * diff)
        if deriv == 0:
            return _fallback(ke, "zero derivative", i)

        ka_next = ka - f / deriv
        if not math.isfinite(ka_next):
            return _fallback(ke, "non-finite step", i)
        if ka_next <= ke:
            return _fallback(ke, "step at or below ke", i)
        ka = ka_next

    logger.debug("ka=%.6g after %d iterations (not converged)", ka, MAX_ITERATIONS)
    return ka


def _fallback(ke: float, reason: str, iteration: int) -> float:
    logger.debug("ka solve fell back to ke + %g at iteration %d: %s", FALLBACK_OFFSET, iteration, reason)
    return ke + FALLBACK_OFFSET


def calibrate_rate_constants(half_life_h: float, target_tmax_h: float) -> RateConstants:
    """
    Rate constants for the given half-life and time-to-peak.

    Never raises: both inputs are clamped to MIN_HOURS, unreachable targets use
    the fallback ka, and an infinite half-life (ke == 0) falls back to ka = 1e-4.
    """
    ke = elimination_rate(half_life_h)
    ka = solve_absorption_rate(ke, target_tmax_h)
    return RateConstants(elimination=ke, absorption=ka)
