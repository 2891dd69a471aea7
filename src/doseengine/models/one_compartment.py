# src/doseengine/models/one_compartment.py
import numpy as np

# Below this |ka - ke| the ka/(ka - ke) factor is numerically unstable.
DEGENERATE_BAND = 1e-4


def dose_concentration(hours_elapsed, amount_mg: float, ke: float, ka: float):
    """
    Contribution of one oral dose to plasma concentration.

      C(t) = D * ka/(ka - ke) * (exp(-ke t) - exp(-ka t))     for t >= 0
      C(t) = D * ka * t * exp(-ka t)                          if |ka - ke| < 1e-4
      C(t) = 0                                                for t < 0

    Parameters:
      hours_elapsed : time since the dose (h); scalar or array, may be negative
      amount_mg     : dose size (mg)
      ke, ka        : elimination / absorption rate constants (1/h)

    Returns a float for scalar input, otherwise an array of the same shape.
    Units are relative (proportional to mg), not a calibrated mg/L.
    """
    t = np.asarray(hours_elapsed, dtype=float)
    before_dose = t < 0
    # zero out pre-dose times first so exp() never sees large positive arguments
    t_pos = np.where(before_dose, 0.0, t)

    if abs(ka - ke) < DEGENERATE_BAND:
        C = amount_mg * ka * t_pos * np.exp(-ka * t_pos)
    else:
        C = amount_mg * (ka / (ka - ke)) * (np.exp(-ke * t_pos) - np.exp(-ka * t_pos))

    C = np.where(before_dose, 0.0, C)
    if C.ndim == 0:
        return float(C)
    return C


def one_compartment_first_order(t, y, ka, ke):
    """
    One-compartment model with first-order absorption and elimination.
    Two states:
      y[0] = drug in absorption depot (mg)
      y[1] = drug in central compartment (mg)

    Doses enter the depot as instantaneous jumps, applied by the solver
    between integration segments, so there is no forcing term here.
    The closed form above is y[1] for a unit-volume compartment.
    """
    A_gut, A_c = y
    dA_gut_dt = -ka * A_gut
    dA_c_dt = ka * A_gut - ke * A_c
    return [dA_gut_dt, dA_c_dt]
