"""
Hull–White style trinomial tree for a state process with x-independent
transition variance (an Ornstein–Uhlenbeck process in practice).

For each step i -> i+1 on an arbitrary time grid:

    v^2       = Var[x_{i+1} | x_i]
    dx_{i+1}  = v * sqrt(3)
    k         = floor( (E[x_{i+1} | x_i] - x0) / dx_{i+1} + 1/2 )     (centre child)
    e         = E[x_{i+1} | x_i] - (x0 + k dx_{i+1})

and the three children k-1, k, k+1 get the probabilities

    p_down = (1 + e^2/v^2 - e sqrt(3)/v) / 6
    p_mid  = (2 - e^2/v^2) / 3
    p_up   = (1 + e^2/v^2 + e sqrt(3)/v) / 6

which match the conditional mean and variance. Since |e| <= dx/2, all three are
strictly positive. Mean reversion pulls the centre child inwards, so the slices
stop growing once the drift dominates.

Nodes of slice i are indexed 0..size(i)-1 and sit at x0 + (jmin_i + index) dx_i.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import List, Protocol
import math

import numpy as np

from ..core.timegrid import TimeGrid

_SQRT3 = math.sqrt(3.0)


class GaussianProcess(Protocol):
    x0: float

    def expectation(self, t0: float, x0: float, dt: float) -> float:
        ...

    def variance(self, t0: float, x0: float, dt: float) -> float:
        ...


@dataclass(frozen=True, eq=False)
class TrinomialBranching:
    k: np.ndarray        # (n,) centre child j-index on the next slice
    probs: np.ndarray    # (n, 3) probabilities for (down, mid, up)


class TrinomialTree:
    def __init__(
        self,
        grid: TimeGrid,
        x0: float,
        dx: List[float],
        jmin: List[int],
        jmax: List[int],
        branchings: List[TrinomialBranching],
    ) -> None:
        self.grid = grid
        self.x0 = x0
        self._dx = dx
        self._jmin = jmin
        self._jmax = jmax
        self._branchings = branchings

    @classmethod
    def build(cls, process: GaussianProcess, grid: TimeGrid) -> "TrinomialTree":
        x0 = float(process.x0)
        dx: List[float] = [0.0]
        jmin: List[int] = [0]
        jmax: List[int] = [0]
        branchings: List[TrinomialBranching] = []

        for i in range(grid.K):
            t = grid[i]
            dt = grid.dt(i)
            v2 = process.variance(t, 0.0, dt)
            if not v2 > 0.0:
                raise ValueError(f"TrinomialTree: non-positive variance on step {i}")
            v = math.sqrt(v2)
            dx_next = v * _SQRT3

            j = np.arange(jmin[i], jmax[i] + 1)
            x = x0 + j * dx[i]
            m = np.array([process.expectation(t, xi, dt) for xi in x], dtype=float)
            k = np.floor((m - x0) / dx_next + 0.5).astype(int)

            e = m - (x0 + k * dx_next)
            e2 = e * e / v2
            e3 = e * _SQRT3 / v
            probs = np.column_stack((
                (1.0 + e2 - e3) / 6.0,
                (2.0 - e2) / 3.0,
                (1.0 + e2 + e3) / 6.0,
            ))

            branchings.append(TrinomialBranching(k=k, probs=probs))
            dx.append(dx_next)
            jmin.append(int(k.min()) - 1)
            jmax.append(int(k.max()) + 1)

        return cls(grid, x0, dx, jmin, jmax, branchings)

    # ---- geometry ------------------------------------------------------------

    def size(self, i: int) -> int:
        return self._jmax[i] - self._jmin[i] + 1

    def dx(self, i: int) -> float:
        return self._dx[i]

    def underlying(self, i: int, index: int) -> float:
        return self.x0 + (self._jmin[i] + index) * self._dx[i]

    def underlyings(self, i: int) -> np.ndarray:
        return self.x0 + (self._jmin[i] + np.arange(self.size(i))) * self._dx[i]

    # ---- branching -----------------------------------------------------------

    def descendant(self, i: int, index: int, branch: int) -> int:
        return int(self._branchings[i].k[index]) - self._jmin[i + 1] - 1 + branch

    def descendants(self, i: int) -> np.ndarray:
        """(size(i), 3) indices on slice i+1 of the (down, mid, up) children."""
        k = self._branchings[i].k
        return (k - self._jmin[i + 1] - 1)[:, None] + np.arange(3)[None, :]

    def probability(self, i: int, index: int, branch: int) -> float:
        return float(self._branchings[i].probs[index, branch])

    def probabilities(self, i: int) -> np.ndarray:
        return self._branchings[i].probs
