"""
Analytic zero-coupon kernel under Hull–White 1F:

    P(t,T) = A(t,T) * exp( -B(t,T) * r_t ),

with
  B(t,T) = (1 - e^{-a (T - t)}) / a,
  A(t,T) = P(0,T)/P(0,t) * exp( B(t,T) f(0,t) - (sigma^2 / (4a)) (1 - e^{-2 a t}) B(t,T)^2 ),

where P(0,.) and f(0,.) come from the fitted market curve. Since r_0 = phi(0) = f(0,0)
and A(0,T) = P(0,T) e^{B(0,T) f(0,0)}, the model reproduces the input curve at t=0.

European option on the zero-coupon bond maturing at S, expiring at T <= S:
Black formula with forward P(0,S), strike K P(0,T) and total volatility

  v = sigma * B(T,S) * sqrt( (1 - e^{-2 a T}) / (2 a) ).

Every factor (1 - e^{-a x})/a is evaluated in a form that stays accurate as a -> 0.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Iterable
import math

import numpy as np

from ..core.utils import one_minus_exp_over, ou_variance_factor
from .black import OptionType, black_formula
from .termstructure.base_curve import TermStructure
from .termstructure.handle import TermStructureHandle


@dataclass(frozen=True)
class ZCAnalyticHW:
    a: float
    sigma: float
    ts: TermStructure | TermStructureHandle

    def __post_init__(self) -> None:
        if self.a <= 0:
            raise ValueError("ZCAnalyticHW: a must be > 0")
        if self.sigma <= 0:
            raise ValueError("ZCAnalyticHW: sigma must be > 0")

    # ---- affine coefficients -------------------------------------------------

    def B(self, t: float, T: float) -> float:
        if T < t:
            raise ValueError("B(t,T): requires T >= t")
        return one_minus_exp_over(self.a, T - t)

    def A(self, t: float, T: float) -> float:
        if t < 0:
            raise ValueError("A(t,T): requires t >= 0")
        if T < t:
            raise ValueError("A(t,T): requires T >= t")
        P0t = self.ts.discount_factor(t)
        P0T = self.ts.discount_factor(T)
        f_t = self.ts.inst_forward(t)
        b = self.B(t, T)
        # sigma^2/(4a) (1 - e^{-2at}) = 0.5 sigma^2 (1 - e^{-2at})/(2a)
        conv = 0.5 * self.sigma * self.sigma * ou_variance_factor(self.a, t)
        return (P0T / P0t) * math.exp(b * f_t - conv * b * b)

    # ---- bond prices ---------------------------------------------------------

    def discount_bond(self, t: float, T: float, r_t: float) -> float:
        """Model price at t of the zero-coupon bond maturing at T, given r_t."""
        return self.A(t, T) * math.exp(-self.B(t, T) * r_t)

    def discount_bond_vector(self, t: float, r_t: float, T_list: Iterable[float]) -> np.ndarray:
        T_arr = np.asarray(list(T_list), dtype=float)
        return np.array([self.discount_bond(t, T, r_t) for T in T_arr], dtype=float)

    # ---- options on zero-coupon bonds -----------------------------------------

    def bond_option_volatility(self, maturity: float, bond_maturity: float) -> float:
        """Total standard deviation of ln P(T,S) seen from 0."""
        return (self.sigma * self.B(maturity, bond_maturity)
                * math.sqrt(ou_variance_factor(self.a, maturity)))

    def discount_bond_option(
        self,
        option_type: OptionType | str,
        strike: float,
        maturity: float,
        bond_maturity: float,
    ) -> float:
        """
        Price at 0 of a European option expiring at `maturity` on the
        zero-coupon bond paying 1 at `bond_maturity`.
        """
        if not maturity >= 0:
            raise ValueError("discount_bond_option: maturity must be >= 0")
        if not bond_maturity > maturity:
            raise ValueError("discount_bond_option: bond_maturity must be > maturity")
        if not strike > 0:
            raise ValueError("discount_bond_option: strike must be > 0")
        w = OptionType.parse(option_type).value

        v = self.bond_option_volatility(maturity, bond_maturity)
        F = self.ts.discount_factor(bond_maturity)
        K = self.ts.discount_factor(maturity) * strike
        return black_formula(F, K, v, w)
