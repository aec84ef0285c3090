# hwlab/rates/termstructure/discount_curve.py
from __future__ import annotations
import math
from typing import Sequence, Tuple, Literal, Optional

import numpy as np

from .base_curve import TermStructure


class DiscountCurve(TermStructure):
    """
    Initial discount curve P(0,t).
    Modes:
      - mode='flat'   : constant zero rate z -> P(0,t)=exp(-z t), f(0,t)=z
      - mode='points' : list of (t_i, P_i), log-linear interpolation of P,
                        hence piecewise-constant instantaneous forwards
    With extrapolate=False a 'points' curve stops at its last pillar and
    lookups past it raise CurveDomainError.
    """
    def __init__(
        self,
        mode: Literal["flat", "points"],
        flat_zero_rate: Optional[float] = None,
        points: Optional[Sequence[Tuple[float, float]]] = None,
        extrapolate: bool = True,
    ):
        self.mode = mode
        self.extrapolate = extrapolate
        if mode == "flat":
            if flat_zero_rate is None:
                raise ValueError("DiscountCurve: flat_zero_rate required for flat curve")
            self.z = float(flat_zero_rate)
            if not math.isfinite(self.z):
                raise ValueError("DiscountCurve: flat_zero_rate must be finite")
            self._t_knots = np.array([0.0])
            self._df_knots = np.array([1.0])
        elif mode == "points":
            if not points:
                raise ValueError("DiscountCurve: points required for points curve")
            pts = np.array(points, dtype=float)
            if pts.ndim != 2 or pts.shape[1] != 2:
                raise ValueError("DiscountCurve: points must be sequence of (t, df)")
            pts = pts[np.argsort(pts[:, 0])]
            if pts[0, 0] < 0:
                raise ValueError("DiscountCurve: negative maturities not allowed")
            if np.any(np.diff(pts[:, 0]) <= 0.0):
                raise ValueError("DiscountCurve: duplicate maturities")
            # add (0,1) if absent
            if pts[0, 0] > 0.0:
                pts = np.vstack([[0.0, 1.0], pts])
            elif abs(pts[0, 1] - 1.0) > 1e-12:
                raise ValueError("DiscountCurve: discount factor at t=0 must be 1")
            if not np.all(pts[:, 1] > 0):
                raise ValueError("DiscountCurve: all discount factors must be > 0")
            if pts.shape[0] < 2:
                raise ValueError("DiscountCurve: at least one pillar with t > 0 is required")
            self.z = None
            self._t_knots = pts[:, 0]
            self._df_knots = pts[:, 1]
            self._log_df = np.log(self._df_knots)
            # forward on segment [t_i, t_{i+1}); the last one is reused past the end
            self._fwd = -np.diff(self._log_df) / np.diff(self._t_knots)
        else:
            raise ValueError("DiscountCurve: mode must be 'flat' or 'points'")

    @classmethod
    def flat(cls, rate: float) -> "DiscountCurve":
        return cls("flat", flat_zero_rate=rate)

    @property
    def max_time(self) -> float:
        if self.mode == "points" and not self.extrapolate:
            return float(self._t_knots[-1])
        return math.inf

    def _segment(self, t: float) -> int:
        """Index i of the segment [t_i, t_{i+1}) containing t (clamped to the last one)."""
        i = int(np.searchsorted(self._t_knots, t, side="right")) - 1
        return min(max(i, 0), self._fwd.size - 1)

    def discount_factor(self, T: float) -> float:
        self.check_time(T)
        if T == 0:
            return 1.0
        if self.mode == "flat":
            return math.exp(-self.z * T)
        i = self._segment(T)
        return math.exp(self._log_df[i] - self._fwd[i] * (T - self._t_knots[i]))

    def inst_forward(self, t: float) -> float:
        self.check_time(t)
        if self.mode == "flat":
            return self.z
        return float(self._fwd[self._segment(t)])

    def zero_rate(self, t: float) -> float:
        if self.mode == "flat":
            self.check_time(t)
            return self.z
        return super().zero_rate(t)

    def __repr__(self) -> str:
        if self.mode == "flat":
            return f"DiscountCurve(flat, z={self.z:.6g})"
        return f"DiscountCurve(points, n={self._t_knots.size}, extrapolate={self.extrapolate})"
