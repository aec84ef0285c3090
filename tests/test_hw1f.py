import math

import numpy as np
import pytest

from hwlab.core.timegrid import TimeGrid
from hwlab.rates.hw1f import HW1FModel
from hwlab.rates.termstructure.base_curve import CurveDomainError
from hwlab.rates.termstructure.discount_curve import DiscountCurve
from hwlab.rates.termstructure.handle import TermStructureHandle


def test_phi_closed_form_on_flat_curve(flat_model):
    expected = 0.05 + 0.5 * (0.01 * (1.0 - math.exp(-0.1)) / 0.1) ** 2
    assert flat_model.phi(1.0) == pytest.approx(expected, rel=1e-14)
    assert flat_model.phi(1.0) == pytest.approx(0.050045, abs=1e-6)


def test_short_rate_of_zero_state_is_phi(flat_model):
    dyn = flat_model.dynamics()
    assert dyn.short_rate(1.0, 0.0) == flat_model.phi(1.0)


def test_phi_at_zero_is_the_short_forward(ns_model, ns_curve):
    assert ns_model.phi(0.0) == pytest.approx(ns_curve.inst_forward(0.0))


@pytest.mark.parametrize("t", [0.0, 0.25, 1.0, 5.0, 30.0])
@pytest.mark.parametrize("r", [-0.02, 0.0, 0.013, 0.05, 0.2])
def test_state_and_rate_mappings_are_inverse(ns_model, t, r):
    dyn = ns_model.dynamics()
    assert dyn.short_rate(t, dyn.variable(t, r)) == pytest.approx(r, abs=1e-15)
    assert dyn.variable(t, dyn.short_rate(t, r)) == pytest.approx(r, abs=1e-15)


def test_dynamics_carries_the_ou_process(flat_model):
    proc = flat_model.dynamics().process
    assert (proc.a, proc.sigma, proc.x0) == (0.1, 0.01, 0.0)
    assert proc.variance(0.0, 0.0, 1.0) == pytest.approx(0.01 ** 2 * (1 - math.exp(-0.2)) / 0.2)


@pytest.mark.parametrize("a, sigma", [(0.0, 0.01), (-0.1, 0.01), (0.1, 0.0), (0.1, -0.01)])
def test_non_positive_parameters_are_rejected(flat_curve, a, sigma):
    with pytest.raises(ValueError):
        HW1FModel(flat_curve, a=a, sigma=sigma)


def test_tiny_mean_reversion_tends_to_ho_lee(flat_curve):
    model = HW1FModel(flat_curve, a=1e-12, sigma=0.01)
    t = 2.0
    assert model.phi(t) == pytest.approx(0.05 + 0.5 * (0.01 * t) ** 2, rel=1e-12)


def test_curve_errors_propagate():
    curve = DiscountCurve("points", points=[(1.0, 0.97), (2.0, 0.93)], extrapolate=False)
    model = HW1FModel(curve)
    with pytest.raises(CurveDomainError):
        model.phi(3.0)
    with pytest.raises(CurveDomainError):
        model.dynamics().short_rate(3.0, 0.0)


def test_bare_curve_is_wrapped_in_a_handle(flat_curve):
    model = HW1FModel(flat_curve)
    assert isinstance(model.term_structure, TermStructureHandle)
    assert model.term_structure.current is flat_curve


# ---- fitted / stale ----------------------------------------------------------

def test_model_starts_stale_and_fits_on_demand(flat_model):
    assert not flat_model.is_fitted
    flat_model.dynamics()
    assert flat_model.is_fitted


def test_set_params_makes_model_stale_and_refits(flat_model):
    old_dyn = flat_model.dynamics()
    old_phi = flat_model.phi(2.0)

    flat_model.set_params([0.2, 0.02])

    assert not flat_model.is_fitted
    np.testing.assert_allclose(flat_model.params(), [0.2, 0.02])
    new_phi = flat_model.phi(2.0)
    assert new_phi == pytest.approx(0.05 + 0.5 * (0.02 * (1 - math.exp(-0.4)) / 0.2) ** 2)
    assert new_phi != old_phi
    assert flat_model.dynamics().process.sigma == 0.02
    # snapshot taken before the change keeps the old parameters
    assert old_dyn.process.sigma == 0.01


def test_set_params_rejects_invalid_values(flat_model):
    assert not flat_model.constraint_ok([0.1, -0.01])
    with pytest.raises(ValueError):
        flat_model.set_params([0.1, -0.01])
    np.testing.assert_allclose(flat_model.params(), [0.1, 0.01])


def test_relinking_the_curve_makes_model_stale(flat_model, flat_handle, ns_curve):
    flat_model.generate_parameters()
    assert flat_model.is_fitted

    flat_handle.link_to(ns_curve)

    assert not flat_model.is_fitted
    t = 1.5
    temp = 0.01 * (1 - math.exp(-0.1 * t)) / 0.1
    assert flat_model.phi(t) == pytest.approx(ns_curve.inst_forward(t) + 0.5 * temp * temp)
    assert flat_model.dynamics().short_rate(t, 0.0) == pytest.approx(flat_model.phi(t))


def test_tree_reflects_parameter_changes(flat_model):
    grid = TimeGrid.uniform(T=2.0, dt=0.1)
    before = flat_model.tree(grid)
    rates_before = before.short_rates(5).copy()

    flat_model.set_params([0.1, 0.02])
    after = flat_model.tree(grid)

    assert after.tree.dx(1) == pytest.approx(2.0 * before.tree.dx(1))
    assert not np.allclose(after.short_rates(5)[:rates_before.size], rates_before)


def test_tree_reflects_curve_relink(flat_model, flat_handle):
    grid = TimeGrid.uniform(T=1.0, dt=0.25)
    before = flat_model.tree(grid)
    flat_handle.link_to(DiscountCurve.flat(0.03))
    after = flat_model.tree(grid)
    assert after.short_rates(0)[0] == pytest.approx(before.short_rates(0)[0] - 0.02, abs=1e-6)
