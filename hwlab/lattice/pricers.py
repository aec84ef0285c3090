"""
Backward-induction pricers on a fitted short-rate lattice.

Maturities must be grid points (build the grid with
TimeGrid.from_mandatory_times to guarantee it).
"""

from __future__ import annotations
from typing import Literal

import numpy as np

from ..rates.black import OptionType
from .short_rate_tree import ShortRateTree


def price_discount_bond_on_tree(lattice: ShortRateTree, bond_maturity: float) -> float:
    """Value at 0 of 1 paid at bond_maturity."""
    i_s = lattice.grid.index_of_time(bond_maturity)
    values = lattice.rollback(np.ones(lattice.size(i_s)), i_s, 0)
    return float(values[0])


def price_bond_option_on_tree(
    lattice: ShortRateTree,
    option_type: OptionType | str,
    strike: float,
    maturity: float,
    bond_maturity: float,
    exercise: Literal["european", "american"] = "european",
) -> float:
    """
    Option on the zero-coupon bond paying 1 at bond_maturity, exercisable at
    `maturity` (european) or at any grid time up to `maturity` (american).
    """
    if not maturity >= 0:
        raise ValueError("price_bond_option_on_tree: maturity must be >= 0")
    if not bond_maturity > maturity:
        raise ValueError("price_bond_option_on_tree: bond_maturity must be > maturity")
    if not strike > 0:
        raise ValueError("price_bond_option_on_tree: strike must be > 0")
    if exercise not in ("european", "american"):
        raise ValueError(f"price_bond_option_on_tree: unknown exercise {exercise!r}")
    w = OptionType.parse(option_type).value

    grid = lattice.grid
    i_t = grid.index_of_time(maturity)
    i_s = grid.index_of_time(bond_maturity)

    bond = lattice.rollback(np.ones(lattice.size(i_s)), i_s, i_t)
    option = np.maximum(w * (bond - strike), 0.0)

    if exercise == "european":
        return lattice.present_value(option, i_t)

    for i in range(i_t - 1, -1, -1):
        bond = lattice.rollback_step(bond, i)
        option = np.maximum(lattice.rollback_step(option, i), w * (bond - strike))
    return float(option[0])
