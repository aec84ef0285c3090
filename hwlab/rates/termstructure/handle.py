"""
Rebindable reference to a term structure.

Models never own the curve: they hold a handle that the application can
relink to another curve at any time. Relinking notifies every registered
observer (a model marks itself stale on notification).
"""

from __future__ import annotations
import logging
import weakref
from typing import Protocol

from .base_curve import TermStructure

logger = logging.getLogger(__name__)


class Observer(Protocol):
    def update(self) -> None:
        ...


class TermStructureHandle:
    def __init__(self, curve: TermStructure | None = None) -> None:
        self._curve = curve
        self._version = 0
        # observers are held weakly: a handle must not keep a dropped model alive
        self._observers: "weakref.WeakSet[Observer]" = weakref.WeakSet()

    # ---- observer plumbing ---------------------------------------------------

    def register_observer(self, observer: Observer) -> None:
        self._observers.add(observer)

    def notify_observers(self) -> None:
        for obs in list(self._observers):
            obs.update()

    # ---- linking -------------------------------------------------------------

    def link_to(self, curve: TermStructure) -> None:
        """Point the handle to `curve` and notify observers."""
        if curve is None:
            raise ValueError("TermStructureHandle: cannot link to None")
        self._curve = curve
        self._version += 1
        logger.debug("term structure handle relinked to %r (version %d)", curve, self._version)
        self.notify_observers()

    @property
    def empty(self) -> bool:
        return self._curve is None

    @property
    def version(self) -> int:
        """Incremented on every relink."""
        return self._version

    @property
    def current(self) -> TermStructure:
        if self._curve is None:
            raise RuntimeError("TermStructureHandle: no term structure linked")
        return self._curve

    # ---- forwarding ----------------------------------------------------------

    def discount_factor(self, T: float) -> float:
        return self.current.discount_factor(T)

    def inst_forward(self, t: float) -> float:
        return self.current.inst_forward(t)

    def zero_rate(self, T: float) -> float:
        return self.current.zero_rate(T)
