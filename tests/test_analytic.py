import numpy as np
import pytest

from primordia.perturbs import perturbs
from primordia.primordial import primordial, get_lnk_list
from primordia.const import ln10
from primordia.errors import InvalidInput, InvalidModel

k_pivot = 0.05

def _power_law(A, n, k, alpha=0.):
    lnkk = np.log(k/k_pivot)
    return A*np.exp((n-1.)*lnkk+0.5*alpha*lnkk**2)

def _analytic(params=None, **pert_dic):
    pert = perturbs({'k_min':1e-4, 'k_max':1., **pert_dic})
    pm = primordial(pert, {'type':'analytic_Pk', **(params or {})})
    pm.init()
    return pert, pm

def test_lnk_list():
    lnk = get_lnk_list(1e-4, 1., 10)
    assert len(lnk) == 42
    assert lnk[0] == pytest.approx(np.log(1e-4))
    assert np.diff(lnk) == pytest.approx(ln10/10*np.ones(41))
    assert lnk[-1] > np.log(1.)
    with pytest.raises(InvalidInput):
        get_lnk_list(1., 1e-4, 10)
    with pytest.raises(InvalidInput):
        get_lnk_list(0., 1., 10)

def test_interpolated_matches_direct_formula():
    pert, pm = _analytic({'A_s':2e-9, 'n_s':0.96, 'r':0.1})
    for k in (2e-4, 3.3e-3, k_pivot, 0.21, 0.9):
        pk = pm.spectrum_at(pert.index_md_scalars, 'linear', k)
        assert pk[0] == pytest.approx(_power_law(2e-9, 0.96, k), rel=1e-8)

def test_running_is_interpolated_to_spline_accuracy():
    pert, pm = _analytic({'A_s':2e-9, 'n_s':0.96, 'alpha_s':-0.01})
    for k in (1e-3, k_pivot, 0.3):
        pk = pm.spectrum_at(pert.index_md_scalars, 'linear', k)[0]
        assert pk == pytest.approx(_power_law(2e-9, 0.96, k, -0.01), rel=1e-3)

def test_log_and_linear_agree_on_the_grid():
    pert, pm = _analytic({'alpha_s':0.02})
    for lnk in pm.lnk:
        lin = pm.spectrum_at(pert.index_md_scalars, 'linear', np.exp(lnk))[0]
        log = pm.spectrum_at(pert.index_md_scalars, 'logarithmic', lnk)[0]
        assert log == pytest.approx(np.log(lin), rel=1e-12)

def test_tensor_self_consistency():
    pert, pm = _analytic({'A_s':2e-9, 'n_s':0.96, 'r':0.1})
    n_t = -0.0125*(2.-0.0125-0.96)
    alpha_t = 0.0125*(0.0125+0.96-1.)
    assert pm.n_t == pytest.approx(n_t)
    assert pm.alpha_t == pytest.approx(alpha_t)
    pt = pm.spectrum_at(pert.index_md_tensors, 'linear', k_pivot)[0]
    assert pt == pytest.approx(2e-10, rel=1e-6)

def test_explicit_tensor_tilt():
    pert, pm = _analytic({'r':0.2, 'n_t':-0.05, 'alpha_t':0.})
    pt = pm.spectrum_at(pert.index_md_tensors, 'linear', 0.5)[0]
    assert pt == pytest.approx(0.2*pm.A_s*(0.5/k_pivot)**-0.05, rel=1e-8)

def test_cross_correlation():
    params = {'A_s':2e-9, 'n_s':0.96, 'f_cdi':0.3, 'n_cdi':1.1, 'c_ad_cdi':-0.5}
    pert, pm = _analytic(params, has_cdi=True)
    md = pert.index_md_scalars
    for k in (1e-3, k_pivot, 0.4):
        pk = pm.spectrum_at(md, 'linear', k)
        assert pk[0] == pytest.approx(_power_law(2e-9, 0.96, k), rel=1e-8)
        assert pk[2] == pytest.approx(_power_law(2e-9*0.09, 1.1, k), rel=1e-8)
        assert pk[1] == pytest.approx(-0.5*np.sqrt(pk[0]*pk[2]), rel=1e-8)
        assert pm.spectrum_at(md, 'logarithmic', np.log(k))[1] == pytest.approx(-0.5, rel=1e-8)

def test_uncorrelated_pair_is_zero():
    pert, pm = _analytic({'c_ad_bi':0.}, has_bi=True)
    assert pm.spectrum_at(pert.index_md_scalars, 'linear', k_pivot)[1] == 0.
    assert not pm.table.is_non_zero[pert.index_md_scalars][1]

def test_correlation_is_clamped_in_the_table():
    pert, pm = _analytic({'c_ad_cdi':0.9, 'n_ad_cdi':0.5}, has_cdi=True)
    md = pert.index_md_scalars
    corr = pm.table.lnpk[md][:, 1]
    assert np.all(corr <= 1.)
    assert corr[-1] == 1.
    assert corr[0] == pytest.approx(0.9*np.sqrt(np.exp(pm.lnk[0])/k_pivot), rel=1e-10)

def test_correlation_is_clamped_outside_the_table():
    pert, pm = _analytic({'c_ad_cdi':0.9, 'n_ad_cdi':0.5}, has_cdi=True)
    md = pert.index_md_scalars
    assert pm.spectrum_at(md, 'logarithmic', pm.lnk[-1])[1] == pytest.approx(1.)
    assert pm.spectrum_at(md, 'logarithmic', np.log(10.))[1] == 1.
    pk = pm.spectrum_at(md, 'linear', 10.)
    assert pk[1] == pytest.approx(np.sqrt(pk[0]*pk[2]), rel=1e-12)

def test_outside_the_table_uses_the_formula():
    pert, pm = _analytic({'A_s':2e-9, 'n_s':0.96, 'c_ad_cdi':-0.5}, has_cdi=True)
    md = pert.index_md_scalars
    k = 10.
    pk = pm.spectrum_at(md, 'linear', k)
    assert pk[0] == pytest.approx(_power_law(2e-9, 0.96, k), rel=1e-12)
    log = pm.spectrum_at(md, 'logarithmic', np.log(k))
    assert log[0] == pytest.approx(np.log(pk[0]), rel=1e-12)
    assert log[1] == pytest.approx(-0.5, rel=1e-12)

def test_spline_is_continuous_at_knots():
    pert, pm = _analytic({'alpha_s':0.03})
    spline = pm.table.splines[pert.index_md_scalars]
    for lnk in pm.lnk[1:-1]:
        assert spline(lnk-1e-9)[0] == pytest.approx(spline(lnk+1e-9)[0], rel=1e-9)
        assert spline(lnk-1e-9, 1)[0] == pytest.approx(spline(lnk+1e-9, 1)[0], rel=1e-6)
    assert np.all(np.diff(pm.lnk) > 0)

def test_derived_parameters_are_the_input():
    pert, pm = _analytic({'A_s':2.1e-9, 'n_s':0.97, 'alpha_s':-0.002, 'r':0.05})
    assert (pm.A_s, pm.n_s, pm.alpha_s, pm.beta_s, pm.r) == (2.1e-9, 0.97, -0.002, 0., 0.05)

@pytest.mark.parametrize("params", [{'A_s':-1e-9}, {'c_ad_bi':1.5}, {'f_bi':0.}])
def test_invalid_analytic_input(params):
    pert = perturbs(k_min=1e-4, k_max=1., has_bi=True)
    pm = primordial(pert, {'type':'analytic_Pk', **params})
    with pytest.raises(InvalidInput):
        pm.init()

def test_vector_modes_have_no_analytic_form():
    pert = perturbs(k_min=1e-4, k_max=1., has_vectors=True)
    with pytest.raises(InvalidInput):
        primordial(pert).init()

@pytest.mark.parametrize("pert_dic, precision", [({'k_min':-1.}, None), ({'k_max':-1.}, None), ({}, {'k_per_decade':1})])
def test_invalid_sampling(pert_dic, precision):
    pert = perturbs({'k_min':1e-4, 'k_max':1., **pert_dic})
    with pytest.raises(InvalidInput):
        primordial(pert, precision=precision).init()

def test_invalid_pivot():
    with pytest.raises(InvalidInput):
        primordial(perturbs(), {'k_pivot':0.}).init()

def test_bad_queries():
    pert, pm = _analytic()
    with pytest.raises(InvalidInput):
        pm.spectrum_at(pert.index_md_scalars, 'linear', -1.)
    with pytest.raises(InvalidInput):
        pm.spectrum_at(pert.index_md_scalars, 'cubic', 0.1)

def test_unknown_spectrum_type():
    with pytest.raises(InvalidModel):
        primordial(perturbs(), {'type':'two_field'})

def test_unknown_parameter():
    with pytest.raises(InvalidInput):
        primordial(perturbs(), {'type':'analytic_Pk', 'As':2e-9})

def test_no_perturbations_skips_the_module(capsys):
    pert = perturbs(has_scalars=False, has_tensors=False)
    pm = primordial(pert, verbose=1)
    pm.init()
    assert pm.lnk_size == 0
    assert 'Primordial module skipped' in capsys.readouterr().out
    with pytest.raises(InvalidInput):
        pm.spectrum_at(0, 'linear', k_pivot)

def test_free():
    pert, pm = _analytic()
    pm.free()
    assert pm.lnk_size == 0
    with pytest.raises(InvalidInput):
        pm.spectrum_at(pert.index_md_scalars, 'linear', k_pivot)
