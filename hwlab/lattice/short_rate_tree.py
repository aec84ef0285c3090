"""
Short-rate lattice: a trinomial tree on the state x plus the dynamics mapping
x to the short rate r = x + phi(t).

- discounts(i)     : exp(-r_ij dt_i) for every node j of slice i
- state_prices(i)  : Arrow–Debreu prices Q_ij (value at 0 of 1 paid in node (i,j)),
                     propagated forward lazily and cached
- rollback(...)    : backward induction of node values between two slices

fit_tree_to_curve solves the shift slice by slice so that

    sum_j Q_ij exp(-(x_ij + phi_i) dt_i) = P(0, t_{i+1}),

i.e. the lattice reprices every zero-coupon bond maturing on the grid.
"""

from __future__ import annotations
import logging
import math
from typing import List

import numpy as np

from ..core.parameters import NumericalImpl
from ..core.timegrid import TimeGrid
from ..rates.dynamics import ShortRateDynamics
from .trinomial import TrinomialTree

logger = logging.getLogger(__name__)


class ShortRateTree:
    def __init__(self, tree: TrinomialTree, dynamics: ShortRateDynamics, grid: TimeGrid) -> None:
        self.tree = tree
        self.dynamics = dynamics
        self.grid = grid
        self._state_prices: List[np.ndarray] = [np.array([1.0])]

    def size(self, i: int) -> int:
        return self.tree.size(i)

    def underlyings(self, i: int) -> np.ndarray:
        return self.tree.underlyings(i)

    def short_rates(self, i: int) -> np.ndarray:
        return self.dynamics.short_rate(self.grid[i], self.tree.underlyings(i))

    def discounts(self, i: int) -> np.ndarray:
        return np.exp(-self.short_rates(i) * self.grid.dt(i))

    def discount(self, i: int, index: int) -> float:
        return float(self.discounts(i)[index])

    # ---- forward induction ---------------------------------------------------

    def state_prices(self, i: int) -> np.ndarray:
        while len(self._state_prices) <= i:
            n = len(self._state_prices) - 1
            Q = self._state_prices[n] * self.discounts(n)
            nxt = np.zeros(self.size(n + 1), dtype=float)
            desc = self.tree.descendants(n)
            probs = self.tree.probabilities(n)
            for b in range(3):
                np.add.at(nxt, desc[:, b], Q * probs[:, b])
            self._state_prices.append(nxt)
        return self._state_prices[i]

    # ---- backward induction --------------------------------------------------

    def rollback_step(self, values: np.ndarray, i: int) -> np.ndarray:
        """Values on slice i+1 -> values on slice i."""
        desc = self.tree.descendants(i)
        probs = self.tree.probabilities(i)
        expected = np.sum(probs * values[desc], axis=1)
        return expected * self.discounts(i)

    def rollback(self, values: np.ndarray, from_i: int, to_i: int) -> np.ndarray:
        if to_i > from_i:
            raise ValueError("ShortRateTree.rollback: to_i must be <= from_i")
        values = np.asarray(values, dtype=float)
        if values.shape != (self.size(from_i),):
            raise ValueError(
                f"ShortRateTree.rollback: expected {self.size(from_i)} values, got {values.shape}"
            )
        for i in range(from_i - 1, to_i - 1, -1):
            values = self.rollback_step(values, i)
        return values

    def present_value(self, values: np.ndarray, i: int) -> float:
        """Value at 0 of node values given on slice i."""
        return float(np.dot(self.state_prices(i), values))


def fit_tree_to_curve(lattice: ShortRateTree, impl: NumericalImpl, term_structure) -> None:
    """
    Set impl's value at each grid time t_0..t_{K-1} so the lattice reprices
    P(0, t_{i+1}). The last slice t_K carries the value of t_{K-1}, so short
    rates are defined on every slice.
    """
    impl.reset()
    grid = lattice.grid
    for i in range(grid.K):
        discount_bond = term_structure.discount_factor(grid[i + 1])
        Q = lattice.state_prices(i)
        dt = grid.dt(i)
        x = lattice.underlyings(i)
        value = float(np.dot(Q, np.exp(-x * dt)))
        impl.set(grid[i], math.log(value / discount_bond) / dt)
    impl.set(grid[grid.K], impl.values[-1])
    logger.debug("fit_tree_to_curve: %d slices fitted", grid.K)
