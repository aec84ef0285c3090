import pytest

from hwlab.rates.hw1f import HW1FModel
from hwlab.rates.termstructure.discount_curve import DiscountCurve
from hwlab.rates.termstructure.handle import TermStructureHandle
from hwlab.rates.termstructure.nelson_siegel import NelsonSiegel


@pytest.fixture
def flat_curve():
    return DiscountCurve.flat(0.05)


@pytest.fixture
def ns_curve():
    return NelsonSiegel(beta0=0.03, beta1=-0.01, beta2=-0.02, tau=2.5)


@pytest.fixture
def flat_handle(flat_curve):
    return TermStructureHandle(flat_curve)


@pytest.fixture
def flat_model(flat_handle):
    return HW1FModel(flat_handle, a=0.1, sigma=0.01)


@pytest.fixture
def ns_model(ns_curve):
    return HW1FModel(TermStructureHandle(ns_curve), a=0.1, sigma=0.01)
