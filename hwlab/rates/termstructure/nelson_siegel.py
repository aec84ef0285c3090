"""
Nelson–Siegel term structure:
    y(0,T) = β0 + β1 * h(T) + β2 * ( h(T) - exp(-T/τ) ),
where h(T) = (1 - exp(-T/τ)) / (T/τ).

We provide:
- zero_rate(T)
- discount_factor(T) = exp(-y(0,T)*T)
- inst_forward(t) = β0 + β1 e^{-t/τ} + β2 (t/τ) e^{-t/τ}

We handle small T carefully (stable limits).
"""

from __future__ import annotations
import math
from dataclasses import dataclass

from .base_curve import TermStructure
from ...core.utils import one_minus_exp_over


@dataclass(frozen=True)
class NelsonSiegel(TermStructure):
    beta0: float
    beta1: float
    beta2: float
    tau: float

    def __post_init__(self) -> None:
        if self.tau <= 0:
            raise ValueError("NelsonSiegel: tau must be > 0")

    def _h(self, T: float) -> float:
        """h(T) = (1 - e^{-T/τ}) / (T/τ), equal to 1 at T=0."""
        if T == 0.0:
            return 1.0
        return one_minus_exp_over(1.0 / self.tau, T) / T

    def zero_rate(self, T: float) -> float:
        self.check_time(T)
        h = self._h(T)
        return self.beta0 + self.beta1 * h + self.beta2 * (h - math.exp(-T / self.tau))

    def discount_factor(self, T: float) -> float:
        self.check_time(T)
        if T == 0.0:
            return 1.0
        return math.exp(-self.zero_rate(T) * T)

    def inst_forward(self, t: float) -> float:
        """
        f(0,t) = d/dt [ y(0,t) * t ], which for Nelson–Siegel collapses to
        β0 + β1 e^{-t/τ} + β2 (t/τ) e^{-t/τ}.
        """
        self.check_time(t)
        x = t / self.tau
        e = math.exp(-x)
        return self.beta0 + self.beta1 * e + self.beta2 * x * e
