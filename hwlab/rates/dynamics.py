"""
Short-rate dynamics of a one-factor model written as a shifted state process:

    r_t = x_t + phi(t)

where x follows the model's diffusion (an Ornstein–Uhlenbeck process for
Hull–White) and phi is the deterministic fitting parameter. The object only
performs the change of variables and carries the process description; it does
not simulate.

A dynamics object is a snapshot: it captures phi and the process built from
the model parameters at creation time. Ask the model for a fresh one after any
parameter or curve change.
"""

from __future__ import annotations
from dataclasses import dataclass

from ..core.parameters import Parameter
from .ou_process import OrnsteinUhlenbeckProcess


@dataclass(frozen=True, eq=False)
class ShortRateDynamics:
    fitting: Parameter
    process: OrnsteinUhlenbeckProcess

    def variable(self, t: float, r: float) -> float:
        """State x corresponding to the short rate r at time t."""
        return r - self.fitting(t)

    def short_rate(self, t: float, x: float) -> float:
        """Short rate r corresponding to the state x at time t."""
        return x + self.fitting(t)
