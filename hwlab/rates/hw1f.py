"""
Hull–White 1F (extended Vasicek) model:

    dr_t = (theta(t) - a r_t) dt + sigma dW_t,

written as r_t = x_t + phi(t) with x an Ornstein–Uhlenbeck process
(dx = -a x dt + sigma dW, x_0 = 0) and phi the deterministic shift that fits
the initial term structure exactly:

    phi(t) = f(0,t) + 0.5 * [ sigma (1 - e^{-a t}) / a ]^2

We provide:
- HullWhiteFitting : analytic phi(t) as a Parameter (reads the curve through its handle)
- HW1FModel        : owns (a, sigma), keeps phi consistent with them and with the
                     linked curve, and exposes dynamics(), tree(grid) and
                     discount_bond_option(...)
"""

from __future__ import annotations
import logging
from typing import Iterable

import numpy as np

from ..core.parameters import (
    ConstantParameter,
    ModelParameters,
    Parameter,
    ParameterImpl,
    PositiveConstraint,
    TermStructureFittingParameter,
)
from ..core.timegrid import TimeGrid
from ..core.utils import one_minus_exp_over
from ..lattice.short_rate_tree import ShortRateTree, fit_tree_to_curve
from ..lattice.trinomial import TrinomialTree
from .black import OptionType
from .dynamics import ShortRateDynamics
from .ou_process import OrnsteinUhlenbeckProcess
from .termstructure.base_curve import TermStructure
from .termstructure.handle import TermStructureHandle
from .zc_pricer import ZCAnalyticHW

logger = logging.getLogger(__name__)


class HullWhiteImpl(ParameterImpl):
    def __init__(self, term_structure: TermStructureHandle, a: float, sigma: float) -> None:
        self.term_structure = term_structure
        self.a = a
        self.sigma = sigma

    def value(self, params: np.ndarray, t: float) -> float:
        forward = self.term_structure.inst_forward(t)
        temp = self.sigma * one_minus_exp_over(self.a, t)
        return forward + 0.5 * temp * temp


class HullWhiteFitting(TermStructureFittingParameter):
    """Analytic term-structure fitting parameter phi(t)."""

    def __init__(self, term_structure: TermStructureHandle, a: float, sigma: float) -> None:
        super().__init__(HullWhiteImpl(term_structure, a, sigma))


class HW1FModel:
    """
    Hull–White one-factor model fitted to the curve linked in `term_structure`.

    The model is either fitted (phi consistent with a, sigma and the linked
    curve) or stale. Construction, set_params() and any relink of the handle
    make it stale; every pricing or dynamics call re-fits first if needed.
    """

    def __init__(
        self,
        term_structure: TermStructureHandle | TermStructure,
        a: float = 0.1,
        sigma: float = 0.01,
    ) -> None:
        if a <= 0:
            raise ValueError("HW1FModel: a must be > 0")
        if sigma <= 0:
            raise ValueError("HW1FModel: sigma must be > 0")

        if isinstance(term_structure, TermStructureHandle):
            self._term_structure = term_structure
        else:
            self._term_structure = TermStructureHandle(term_structure)

        self._arguments = ModelParameters()
        self._arguments.add("a", ConstantParameter(a, PositiveConstraint()))
        self._arguments.add("sigma", ConstantParameter(sigma, PositiveConstraint()))

        self._phi: Parameter | None = None
        self._fitted = False
        self._fitted_version = -1
        self._term_structure.register_observer(self)

    # ---- parameters ----------------------------------------------------------

    @property
    def a(self) -> float:
        return self._arguments["a"](0.0)

    @property
    def sigma(self) -> float:
        return self._arguments["sigma"](0.0)

    @property
    def term_structure(self) -> TermStructureHandle:
        return self._term_structure

    def params(self) -> np.ndarray:
        """Free parameters as seen by an optimizer: [a, sigma]."""
        return self._arguments.values()

    def constraint_ok(self, values: Iterable[float]) -> bool:
        return self._arguments.constraint_ok(values)

    def set_params(self, values: Iterable[float]) -> None:
        """Optimizer hook: replace [a, sigma]. Leaves the model stale."""
        self._arguments.set_values(values)
        self._mark_stale()

    # ---- fitted / stale --------------------------------------------------------

    @property
    def is_fitted(self) -> bool:
        return self._fitted and self._fitted_version == self._term_structure.version

    def update(self) -> None:
        """Observer callback: the linked curve changed."""
        self._mark_stale()

    def _mark_stale(self) -> None:
        self._fitted = False
        self._phi = None

    def generate_parameters(self) -> None:
        """Rebuild phi from the current a, sigma and linked curve."""
        self._phi = HullWhiteFitting(self._term_structure, self.a, self.sigma)
        self._fitted = True
        self._fitted_version = self._term_structure.version
        logger.debug("HW1FModel fitted: a=%.6g sigma=%.6g curve=%r",
                     self.a, self.sigma, self._term_structure.current)

    def _ensure_fitted(self) -> Parameter:
        if not self.is_fitted:
            self.generate_parameters()
        return self._phi

    def phi(self, t: float) -> float:
        return self._ensure_fitted()(t)

    # ---- public operations -----------------------------------------------------

    def dynamics(self) -> ShortRateDynamics:
        phi = self._ensure_fitted()
        return ShortRateDynamics(phi, OrnsteinUhlenbeckProcess(self.a, self.sigma))

    def tree(self, grid: TimeGrid) -> ShortRateTree:
        """
        Trinomial lattice on `grid` whose discounting reproduces P(0, t_i) at
        every grid time. The shift is re-solved numerically slice by slice on
        the lattice itself, so the fit is exact up to round-off.
        """
        if grid.times[0] != 0.0:
            raise ValueError("HW1FModel.tree: grid must start at t=0")
        self._ensure_fitted()

        phi = TermStructureFittingParameter()
        numeric_dynamics = ShortRateDynamics(phi, OrnsteinUhlenbeckProcess(self.a, self.sigma))
        trinomial = TrinomialTree.build(numeric_dynamics.process, grid)
        lattice = ShortRateTree(trinomial, numeric_dynamics, grid)
        fit_tree_to_curve(lattice, phi.implementation, self._term_structure)

        logger.debug("HW1FModel.tree: %d steps, widest slice %d nodes",
                     grid.K, max(trinomial.size(i) for i in range(grid.K + 1)))
        return lattice

    def analytic(self) -> ZCAnalyticHW:
        """Closed-form kernel bound to the current parameters and curve."""
        self._ensure_fitted()
        return ZCAnalyticHW(self.a, self.sigma, self._term_structure)

    def B(self, t: float, T: float) -> float:
        return self.analytic().B(t, T)

    def A(self, t: float, T: float) -> float:
        return self.analytic().A(t, T)

    def discount_bond(self, t: float, T: float, r_t: float) -> float:
        return self.analytic().discount_bond(t, T, r_t)

    def discount_bond_option(
        self,
        option_type: OptionType | str,
        strike: float,
        maturity: float,
        bond_maturity: float,
    ) -> float:
        return self.analytic().discount_bond_option(option_type, strike, maturity, bond_maturity)

    def __repr__(self) -> str:
        state = "fitted" if self.is_fitted else "stale"
        return f"HW1FModel(a={self.a:.6g}, sigma={self.sigma:.6g}, {state})"
