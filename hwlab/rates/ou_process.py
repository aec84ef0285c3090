"""
Ornstein–Uhlenbeck process:

    dx_t = -a * x_t dt + sigma dW_t,   x_0 = x0

This is the state variable of Hull–White: r_t = x_t + phi(t). The process is
Gaussian with exact transition moments over a step dt:

    E[x_{t+dt} | x_t = x]   = x e^{-a dt}
    Var[x_{t+dt} | x_t = x] = sigma^2 (1 - e^{-2 a dt}) / (2 a)

The variance does not depend on x, which is what the trinomial tree needs.
"""

from __future__ import annotations
from dataclasses import dataclass
import math

from ..core.utils import ou_variance_factor


@dataclass(frozen=True)
class OrnsteinUhlenbeckProcess:
    a: float          # speed of mean reversion
    sigma: float      # volatility of x
    x0: float = 0.0   # initial state

    def __post_init__(self) -> None:
        if self.a <= 0:
            raise ValueError("OrnsteinUhlenbeckProcess: a must be > 0")
        if self.sigma < 0:
            raise ValueError("OrnsteinUhlenbeckProcess: sigma must be >= 0")

    # ---- SDE coefficients ----------------------------------------------------

    def drift(self, t: float, x: float) -> float:
        return -self.a * x

    def diffusion(self, t: float, x: float) -> float:
        return self.sigma

    # ---- exact Gaussian transition ------------------------------------------

    def expectation(self, t0: float, x0: float, dt: float) -> float:
        return x0 * math.exp(-self.a * dt)

    def variance(self, t0: float, x0: float, dt: float) -> float:
        return self.sigma * self.sigma * ou_variance_factor(self.a, dt)

    def std_deviation(self, t0: float, x0: float, dt: float) -> float:
        return math.sqrt(self.variance(t0, x0, dt))
