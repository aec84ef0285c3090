"""
Discount factors DF(0, t_k) on a TimeGrid, from the market curve and from a
fitted lattice (sum of state prices on each slice), so the two can be compared.
"""

from __future__ import annotations
from dataclasses import dataclass
import numpy as np

from ..core.timegrid import TimeGrid
from ..core.utils import assert_finite
from ..lattice.short_rate_tree import ShortRateTree
from .termstructure.base_curve import TermStructure
from .termstructure.handle import TermStructureHandle


@dataclass
class DFCurveOnGrid:
    ts: TermStructure | TermStructureHandle
    grid: TimeGrid

    def values(self) -> np.ndarray:
        """
        Return DF array of shape (K+1,), DF[k] = DF(0, t_k).
        """
        df = np.array([self.ts.discount_factor(float(tt)) for tt in self.grid.times], dtype=float)
        assert_finite("DFCurveOnGrid", df)
        return df


def lattice_discount_factors(lattice: ShortRateTree) -> np.ndarray:
    """DF implied by the lattice: sum_j Q_kj for every slice k."""
    return np.array([lattice.state_prices(k).sum() for k in range(lattice.grid.K + 1)], dtype=float)
