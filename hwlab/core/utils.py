"""
Utilities: numeric helpers and sanity checks.

Intended to be lightweight (NumPy only).
"""

from __future__ import annotations
import math
import numpy as np


# ===== Numerics ===============================================================

# below this |a*t| the 4-term series of (1 - e^{-x})/x is exact to machine precision
_SERIES_THRESHOLD = 1e-4


def one_minus_exp_over(a: float, t: float) -> float:
    """
    (1 - e^{-a t}) / a, with the limit t when a -> 0.

    For tiny |a t| we use the series t * (1 - x/2 + x^2/6 - x^3/24), x = a t,
    which avoids the cancellation in 1 - e^{-x}.
    """
    x = a * t
    if abs(x) < _SERIES_THRESHOLD:
        return t * (1.0 - 0.5 * x + (x * x) / 6.0 - (x * x * x) / 24.0)
    return -math.expm1(-x) / a


def ou_variance_factor(a: float, t: float) -> float:
    """
    (1 - e^{-2 a t}) / (2 a): variance of an OU process with unit vol after t.
    Equals one_minus_exp_over(2a, t), so tends to t as a -> 0.
    """
    return one_minus_exp_over(2.0 * a, t)


# ===== Sanity checks / assertions ============================================

def assert_finite(name: str, arr) -> None:
    """Raise if any NaN/Inf in arr."""
    arr = np.asarray(arr)
    if not np.isfinite(arr).all():
        raise ValueError(f"{name}: contains NaN/Inf")
