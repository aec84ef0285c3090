"""
Time grid utilities.

We represent time in *years*. A grid is any strictly increasing sequence of
non-negative times t_0 < t_1 < ... < t_K. Two builders are provided:

- TimeGrid.uniform(T, dt): t_k = k * dt on [0, T]
- TimeGrid.from_mandatory_times(times, steps): regular steps on [0, max(times)]
  refined so that every mandatory time (option expiry, bond maturity...) is a
  grid point.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Iterable

import numpy as np


@dataclass(frozen=True, eq=False)
class TimeGrid:
    """
    Ordered time grid (years).

    Attributes
    ----------
    times : np.ndarray
        Array of shape (K+1,), strictly increasing, times[0] >= 0.
    """
    times: np.ndarray

    def __post_init__(self) -> None:
        t = np.array(self.times, dtype=float).ravel()
        if t.size < 2:
            raise ValueError("TimeGrid: at least two times are required")
        if t[0] < 0.0:
            raise ValueError("TimeGrid: times must be >= 0")
        if not np.all(np.isfinite(t)):
            raise ValueError("TimeGrid: times must be finite")
        if np.any(np.diff(t) <= 0.0):
            raise ValueError("TimeGrid: times must be strictly increasing")
        t.setflags(write=False)
        object.__setattr__(self, "times", t)

    # ---- builders -------------------------------------------------------------

    @classmethod
    def uniform(cls, T: float, dt: float) -> "TimeGrid":
        """Uniform grid on [0, T] with step dt; T/dt must be (almost) an integer."""
        if T <= 0:
            raise ValueError("TimeGrid: T must be > 0")
        if dt <= 0:
            raise ValueError("TimeGrid: dt must be > 0")
        K_float = T / dt
        K = int(round(K_float))
        if abs(K_float - K) > 1e-10:
            raise ValueError(
                f"TimeGrid: T/dt must be (almost) integer. Got T/dt={K_float:.12f}"
            )
        return cls(np.linspace(0.0, T, K + 1, dtype=float))

    @classmethod
    def from_mandatory_times(cls, times: Iterable[float], steps: int) -> "TimeGrid":
        """
        Grid on [0, max(times)] with about `steps` regular steps, where each
        interval between consecutive mandatory times is split into an integer
        number of equal sub-steps (at least one).
        """
        if steps < 1:
            raise ValueError("TimeGrid: steps must be >= 1")
        mandatory = np.unique(np.asarray(list(times), dtype=float))
        if mandatory.size == 0:
            raise ValueError("TimeGrid: at least one mandatory time is required")
        if mandatory[0] < 0.0:
            raise ValueError("TimeGrid: mandatory times must be >= 0")
        end = float(mandatory[-1])
        if end <= 0.0:
            raise ValueError("TimeGrid: last mandatory time must be > 0")

        dt_max = end / steps
        knots = mandatory if mandatory[0] == 0.0 else np.concatenate(([0.0], mandatory))

        pieces = [np.array([0.0])]
        for t0, t1 in zip(knots[:-1], knots[1:]):
            n = max(1, int(round((t1 - t0) / dt_max)))
            pieces.append(np.linspace(t0, t1, n + 1)[1:])
        return cls(np.concatenate(pieces))

    # ---- accessors ------------------------------------------------------------

    @property
    def K(self) -> int:
        """Number of steps (so there are K+1 time points)."""
        return self.times.size - 1

    @property
    def T(self) -> float:
        """Last time of the grid."""
        return float(self.times[-1])

    def __len__(self) -> int:
        return self.times.size

    def __getitem__(self, i: int) -> float:
        return float(self.times[i])

    def dt(self, i: int) -> float:
        """Length of step i, i.e. t_{i+1} - t_i."""
        if i < 0 or i >= self.K:
            raise IndexError(f"TimeGrid: step {i} out of range [0,{self.K - 1}]")
        return float(self.times[i + 1] - self.times[i])

    def index_of_time(self, t: float, tol: float = 1e-10) -> int:
        """
        Return k such that times[k] == t within tolerance, else raise.
        Useful when aligning option/bond maturities to grid points.
        """
        idx = self.nearest_index(t)
        if abs(self.times[idx] - t) > tol:
            raise ValueError(f"time {t} is not on the grid")
        return idx

    def nearest_index(self, t: float) -> int:
        """Return argmin |times - t| (no requirement that t lies on grid)."""
        return int(np.argmin(np.abs(self.times - t)))
