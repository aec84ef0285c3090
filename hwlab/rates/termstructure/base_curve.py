"""
Term structure base interface.

We work in *years*. Implementations must provide:
- discount_factor(T): P(0,T)
- inst_forward(t): instantaneous forward f(0,t) = -d/dt ln P(0,t)

and get for free:
- zero_rate(T): y(0,T) = -ln P(0,T) / T (continuous compounding)

Notes
-----
- A curve is defined on [0, max_time]. Lookups outside raise CurveDomainError.
- At T=0, we define DF(0)=1, and use right limits for zero/forward if needed.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
import math


class CurveDomainError(ValueError):
    """Raised when a curve is asked for a time outside its domain."""


class TermStructure(ABC):
    @property
    def max_time(self) -> float:
        """Last time for which the curve can return data (default: unbounded)."""
        return math.inf

    def check_time(self, t: float) -> None:
        if t < 0.0:
            raise CurveDomainError(f"{type(self).__name__}: t={t} must be >= 0")
        if t > self.max_time:
            raise CurveDomainError(
                f"{type(self).__name__}: t={t} is past max_time={self.max_time}"
            )

    @abstractmethod
    def discount_factor(self, T: float) -> float:
        """P(0,T)."""
        raise NotImplementedError

    @abstractmethod
    def inst_forward(self, t: float) -> float:
        """Instantaneous forward rate f(0,t)."""
        raise NotImplementedError

    def zero_rate(self, T: float) -> float:
        """Zero-coupon continuously-compounded yield y(0,T); right limit f(0,0) at T=0."""
        self.check_time(T)
        if T == 0.0:
            return self.inst_forward(0.0)
        return -math.log(self.discount_factor(T)) / T
