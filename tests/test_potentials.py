import numpy as np
import pytest

from primordia.potentials import poly_potential, natural_potential, poly_hubble, set_potential, set_hubble
from primordia.errors import InvalidModel

def _numerical_derivative(f, x, h=1e-5):
    return (f(x+h)-f(x-h))/(2*h)

def test_poly_potential_derivatives():
    pot = poly_potential(V0=1., V1=-0.3, V2=0.2, V3=0.5, V4=-1., phi_pivot=0.1)
    phi = 0.4
    V, dV, ddV = pot(phi)
    assert dV == pytest.approx(_numerical_derivative(lambda x: pot(x)[0], phi), rel=1e-6)
    assert ddV == pytest.approx(_numerical_derivative(lambda x: pot(x)[1], phi), rel=1e-6)
    assert pot(0.1) == (1., -0.3, 0.2)

def test_natural_potential():
    pot = natural_potential(V0=2., V1=3.)
    V, dV, ddV = pot(0.)
    assert V == pytest.approx(4.)
    assert dV == pytest.approx(0.)
    assert ddV == pytest.approx(-2./9.)
    assert pot(1.)[1] < 0

def test_poly_hubble_derivatives():
    hub = poly_hubble(H0=1., H1=-0.1, H2=0.3, H3=0.2, H4=0.1)
    phi = 0.7
    H, dH, ddH, dddH = hub(phi)
    assert dH == pytest.approx(_numerical_derivative(lambda x: hub(x)[0], phi), rel=1e-6)
    assert ddH == pytest.approx(_numerical_derivative(lambda x: hub(x)[1], phi), rel=1e-6)
    assert dddH == pytest.approx(_numerical_derivative(lambda x: hub(x)[2], phi), rel=1e-6)

def test_set_potential_uses_only_known_parameters():
    pot = set_potential('polynomial', V0=2., V1=-1., H0=5., potential='polynomial')
    assert pot.name == 'polynomial'
    assert pot.para['V0'] == 2.
    assert set_hubble('polynomial', H0=5., V0=1.).para['H0'] == 5.

def test_unknown_models():
    with pytest.raises(InvalidModel):
        set_potential('starobinsky')
    with pytest.raises(InvalidModel):
        set_hubble('natural')
