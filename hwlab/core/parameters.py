"""
Model parameters.

A Parameter is a small container of free values ("params") plus an
implementation computing its value at time t:

    value(t) = impl.value(params, t)

Implementations are strategy objects, so a time-dependent fitting scheme can be
swapped without touching the code that reads the parameter.

- ConstantParameter            : one free value, constant in t, with a constraint
- TermStructureFittingParameter: values set per grid time by a numerical fit
- ModelParameters              : ordered set of Parameters owned by a model;
                                 the optimizer-facing view (flat params array)
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Iterable, List, Sequence

import numpy as np


# ===== Constraints ============================================================

class Constraint(ABC):
    @abstractmethod
    def test(self, params: np.ndarray) -> bool:
        """True if every value in params is admissible."""
        raise NotImplementedError


class NoConstraint(Constraint):
    def test(self, params: np.ndarray) -> bool:
        return True


class PositiveConstraint(Constraint):
    def test(self, params: np.ndarray) -> bool:
        return bool(np.all(np.asarray(params, dtype=float) > 0.0))


@dataclass(frozen=True)
class BoundaryConstraint(Constraint):
    low: float
    high: float

    def test(self, params: np.ndarray) -> bool:
        p = np.asarray(params, dtype=float)
        return bool(np.all((p >= self.low) & (p <= self.high)))


# ===== Implementations =======================================================

class ParameterImpl(ABC):
    @abstractmethod
    def value(self, params: np.ndarray, t: float) -> float:
        raise NotImplementedError


class ConstantImpl(ParameterImpl):
    def value(self, params: np.ndarray, t: float) -> float:
        return float(params[0])


class NumericalImpl(ParameterImpl):
    """
    Piecewise values stored at given times, filled one slice at a time by a
    lattice fit. Asking for a time that was not set is an error.
    """

    def __init__(self) -> None:
        self._times: List[float] = []
        self._values: List[float] = []

    def set(self, t: float, x: float) -> None:
        self._times.append(float(t))
        self._values.append(float(x))

    def reset(self) -> None:
        self._times.clear()
        self._values.clear()

    @property
    def times(self) -> Sequence[float]:
        return tuple(self._times)

    @property
    def values(self) -> Sequence[float]:
        return tuple(self._values)

    def value(self, params: np.ndarray, t: float) -> float:
        for ti, xi in zip(self._times, self._values):
            if abs(ti - t) <= 1e-12 * max(1.0, abs(t)):
                return xi
        raise RuntimeError(f"NumericalImpl: fitting parameter not set for t={t}")


# ===== Parameters ============================================================

class Parameter:
    def __init__(self, size: int, impl: ParameterImpl, constraint: Constraint | None = None) -> None:
        self._params = np.zeros(size, dtype=float)
        self._impl = impl
        self._constraint = constraint if constraint is not None else NoConstraint()

    @property
    def params(self) -> np.ndarray:
        return self._params.copy()

    @property
    def size(self) -> int:
        return self._params.size

    @property
    def implementation(self) -> ParameterImpl:
        return self._impl

    @property
    def constraint(self) -> Constraint:
        return self._constraint

    def test_params(self, values: Iterable[float]) -> bool:
        return self._constraint.test(np.asarray(list(values), dtype=float))

    def set_param(self, i: int, x: float) -> None:
        self._params[i] = float(x)

    def __call__(self, t: float) -> float:
        return self._impl.value(self._params, t)


class ConstantParameter(Parameter):
    def __init__(self, value: float, constraint: Constraint | None = None) -> None:
        super().__init__(1, ConstantImpl(), constraint)
        if not self.test_params([value]):
            raise ValueError(f"ConstantParameter: {value} violates {type(self.constraint).__name__}")
        self._params[0] = float(value)


class TermStructureFittingParameter(Parameter):
    """Deterministic shift phi(t) obtained numerically, slice by slice."""

    def __init__(self, impl: ParameterImpl | None = None) -> None:
        super().__init__(0, impl if impl is not None else NumericalImpl(), NoConstraint())


# ===== Model-level container =================================================

@dataclass
class ModelParameters:
    """
    Ordered named parameters of a model. The flat `values()` array is what an
    optimizer sees; `set_values` is its only write access.
    """
    names: List[str] = field(default_factory=list)
    parameters: List[Parameter] = field(default_factory=list)

    def add(self, name: str, parameter: Parameter) -> None:
        if name in self.names:
            raise ValueError(f"ModelParameters: duplicate parameter '{name}'")
        self.names.append(name)
        self.parameters.append(parameter)

    def __getitem__(self, name: str) -> Parameter:
        return self.parameters[self.names.index(name)]

    @property
    def size(self) -> int:
        return sum(p.size for p in self.parameters)

    def values(self) -> np.ndarray:
        if not self.parameters:
            return np.zeros(0, dtype=float)
        return np.concatenate([p.params for p in self.parameters])

    def constraint_ok(self, values: Iterable[float]) -> bool:
        v = np.asarray(list(values), dtype=float)
        if v.size != self.size:
            return False
        k = 0
        for p in self.parameters:
            if not p.test_params(v[k:k + p.size]):
                return False
            k += p.size
        return True

    def set_values(self, values: Iterable[float]) -> None:
        v = np.asarray(list(values), dtype=float)
        if v.size != self.size:
            raise ValueError(f"ModelParameters: expected {self.size} values, got {v.size}")
        if not self.constraint_ok(v):
            raise ValueError(f"ModelParameters: values {v.tolist()} violate constraints")
        k = 0
        for p in self.parameters:
            for i in range(p.size):
                p.set_param(i, v[k])
                k += 1
