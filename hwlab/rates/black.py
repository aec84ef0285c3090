"""
Black formula on a forward price:

    price = w * [ F N(w d1) - K N(w d2) ],
    d1 = ln(F/K)/v + v/2,  d2 = d1 - v,

with w = +1 for a call, -1 for a put, and v the total (not annualized)
standard deviation of ln F. F and K are already discounted values.
"""

from __future__ import annotations
from enum import Enum
import math

from scipy.stats import norm


class OptionType(Enum):
    CALL = 1
    PUT = -1

    @classmethod
    def parse(cls, value: "OptionType | str") -> "OptionType":
        if isinstance(value, OptionType):
            return value
        try:
            return cls[str(value).strip().upper()]
        except KeyError:
            raise ValueError(f"OptionType: unknown option type {value!r}") from None


def black_formula(F: float, K: float, v: float, w: int) -> float:
    if not (F > 0 and K > 0):
        raise ValueError("black_formula: F and K must be > 0")
    if not v >= 0:
        raise ValueError("black_formula: v must be >= 0")
    if v == 0.0:
        return max(w * (F - K), 0.0)
    d1 = math.log(F / K) / v + 0.5 * v
    d2 = d1 - v
    price = w * (F * norm.cdf(w * d1) - K * norm.cdf(w * d2))
    # round-off can push a worthless option a hair below zero
    return max(float(price), 0.0)
