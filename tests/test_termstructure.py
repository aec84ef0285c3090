import math

import pytest

from hwlab.rates.termstructure.base_curve import CurveDomainError
from hwlab.rates.termstructure.discount_curve import DiscountCurve
from hwlab.rates.termstructure.handle import TermStructureHandle


def test_flat_curve(flat_curve):
    assert flat_curve.discount_factor(0.0) == 1.0
    assert flat_curve.discount_factor(2.0) == pytest.approx(math.exp(-0.1))
    assert flat_curve.inst_forward(3.0) == 0.05
    assert flat_curve.zero_rate(7.0) == 0.05


def test_points_curve_reprices_pillars_and_has_stepwise_forwards():
    curve = DiscountCurve("points", points=[(1.0, 0.97), (2.0, 0.93), (5.0, 0.82)])
    assert curve.discount_factor(1.0) == pytest.approx(0.97)
    assert curve.discount_factor(2.0) == pytest.approx(0.93)
    assert curve.discount_factor(5.0) == pytest.approx(0.82)
    assert curve.inst_forward(0.5) == pytest.approx(-math.log(0.97))
    assert curve.inst_forward(1.5) == pytest.approx(math.log(0.97 / 0.93))
    # extrapolation keeps the last forward
    assert curve.inst_forward(8.0) == pytest.approx(math.log(0.93 / 0.82) / 3.0)


def test_points_curve_without_extrapolation_has_a_domain():
    curve = DiscountCurve("points", points=[(1.0, 0.97), (2.0, 0.93)], extrapolate=False)
    assert curve.max_time == 2.0
    with pytest.raises(CurveDomainError):
        curve.inst_forward(2.5)
    with pytest.raises(CurveDomainError):
        curve.discount_factor(3.0)


def test_negative_time_is_a_domain_error(flat_curve, ns_curve):
    for curve in (flat_curve, ns_curve):
        with pytest.raises(CurveDomainError):
            curve.inst_forward(-0.1)
        # CurveDomainError is a ValueError
        with pytest.raises(ValueError):
            curve.discount_factor(-1.0)


@pytest.mark.parametrize("t", [0.1, 0.5, 1.0, 3.0, 10.0])
def test_nelson_siegel_forward_is_derivative_of_log_discount(ns_curve, t):
    h = 1e-5
    fd = (math.log(ns_curve.discount_factor(t - h)) - math.log(ns_curve.discount_factor(t + h))) / (2 * h)
    assert ns_curve.inst_forward(t) == pytest.approx(fd, abs=1e-8)


def test_nelson_siegel_short_end(ns_curve):
    assert ns_curve.zero_rate(0.0) == pytest.approx(0.02)
    assert ns_curve.inst_forward(0.0) == pytest.approx(0.02)


class _Counter:
    def __init__(self):
        self.calls = 0

    def update(self):
        self.calls += 1


def test_handle_relink_notifies_observers(flat_curve, ns_curve):
    handle = TermStructureHandle(flat_curve)
    obs = _Counter()
    handle.register_observer(obs)
    v0 = handle.version

    handle.link_to(ns_curve)

    assert obs.calls == 1
    assert handle.version == v0 + 1
    assert handle.current is ns_curve
    assert handle.inst_forward(0.0) == pytest.approx(0.02)
    assert handle.zero_rate(1.0) == pytest.approx(ns_curve.zero_rate(1.0))


def test_empty_handle():
    handle = TermStructureHandle()
    assert handle.empty
    with pytest.raises(RuntimeError):
        handle.discount_factor(1.0)
    with pytest.raises(ValueError):
        handle.link_to(None)


def test_points_curve_needs_a_pillar_after_zero():
    with pytest.raises(ValueError):
        DiscountCurve("points", points=[(0.0, 1.0)])
