import numpy as np
import pytest

from primordia.external import growable_buffer, build_command, run_external_command
from primordia.perturbs import perturbs
from primordia.primordial import primordial
from primordia.errors import ExternalSpectrumError, InvalidInput

A_s, n_s, r, n_t = 2.1e-9, 0.965, 0.05, -0.00625

def _write_table(path, k, tensors=True, header=True):
    pks = A_s*(k/0.05)**(n_s-1.)
    pkt = r*A_s*(k/0.05)**n_t
    with open(path, 'w') as f:
        if header:
            f.write('# k  P_s  P_t\n\n')
        for row in zip(k, pks, pkt):
            f.write(('%.12e %.12e %.12e\n' if tensors else '%.12e %.12e\n') %(row if tensors else row[:2]))
    return path

def test_growable_buffer_doubles():
    buf = growable_buffer(3, size=2)
    for i in range(5):
        buf.append([i, 2*i, 3*i])
    assert buf.capacity == 8
    assert buf.view().shape == (5, 3)
    assert buf.view()[4].tolist() == [4., 8., 12.]

def test_build_command():
    assert build_command('cat pk.dat') == 'cat pk.dat'
    assert build_command('./gen', [1, 2.5, 0, 0, 0, 0, 0, 0, 0, 1e-10]) == './gen 1 2.5 0 0 0 0 0 0 0 1e-10'
    with pytest.raises(ExternalSpectrumError):
        build_command('./gen', [1., 2.])

def test_read_table_with_cat(tmp_path):
    k = np.logspace(-5, 1, 61)
    path = _write_table(tmp_path/'pk.dat', k)
    k_read, pks, pkt = run_external_command(f'cat {path}', k_min=1e-4, k_max=1.)
    assert k_read == pytest.approx(k, rel=1e-10)
    assert pks[0] == pytest.approx(A_s*(1e-5/0.05)**(n_s-1.), rel=1e-10)
    assert len(pkt) == 61

def test_scalars_only(tmp_path):
    k = np.logspace(-5, 1, 61)
    path = _write_table(tmp_path/'pk.dat', k, tensors=False)
    k_read, pks, pkt = run_external_command(f'cat {path}', has_tensors=False)
    assert pkt is None
    with pytest.raises(ExternalSpectrumError):
        run_external_command(f'cat {path}', has_tensors=True)

def test_custom_parameters_reach_the_command(tmp_path):
    script = tmp_path/'gen.sh'
    script.write_text('for k in 1 2 3 4; do echo "$k $1 $2"; done\n')
    k, pks, pkt = run_external_command(f'sh {script}', custom=[5, 6, 0, 0, 0, 0, 0, 0, 0, 0])
    assert k.tolist() == [1., 2., 3., 4.]
    assert pks.tolist() == [5.]*4
    assert pkt.tolist() == [6.]*4

def test_non_ascending_k(tmp_path):
    k = np.logspace(-5, 1, 61)[::-1]
    path = _write_table(tmp_path/'pk.dat', k)
    with pytest.raises(ExternalSpectrumError, match='ascending'):
        run_external_command(f'cat {path}')

def test_insufficient_range(tmp_path):
    k = np.logspace(-3, 1, 41)
    path = _write_table(tmp_path/'pk.dat', k)
    with pytest.raises(ExternalSpectrumError, match='before the minimum'):
        run_external_command(f'cat {path}', k_min=1e-3, k_max=1.)
    with pytest.raises(ExternalSpectrumError, match='after the maximum'):
        run_external_command(f'cat {path}', k_min=1e-2, k_max=9.)

def test_failing_command():
    with pytest.raises(ExternalSpectrumError, match='status'):
        run_external_command('false')

def test_unreadable_line(tmp_path):
    path = tmp_path/'pk.dat'
    path.write_text('1e-3 2e-9 1e-10\none two three\n')
    with pytest.raises(ExternalSpectrumError, match='line 2'):
        run_external_command(f'cat {path}')

def test_non_positive_spectrum(tmp_path):
    path = tmp_path/'pk.dat'
    path.write_text('1e-3 2e-9 1e-10\n1e-2 -2e-9 1e-10\n')
    with pytest.raises(ExternalSpectrumError):
        run_external_command(f'cat {path}')

def test_external_spectrum_and_derived_parameters(tmp_path):
    k = np.logspace(-5, 1, 61)
    path = _write_table(tmp_path/'pk.dat', k)
    pert = perturbs(k_min=1e-4, k_max=1.)
    pm = primordial(pert, {'type':'external_Pk', 'command':f'cat {path}'})
    pm.init()
    assert pm.lnk_size == 61
    assert pm.spectrum_at(pert.index_md_scalars, 'linear', 0.05)[0] == pytest.approx(A_s, rel=1e-8)
    assert pm.A_s == pytest.approx(A_s, rel=1e-8)
    assert pm.n_s == pytest.approx(n_s, rel=1e-8)
    assert pm.alpha_s == pytest.approx(0., abs=1e-8)
    assert pm.r == pytest.approx(r, rel=1e-8)
    assert pm.n_t == pytest.approx(n_t, rel=1e-6)
    with pytest.raises(InvalidInput):
        pm.spectrum_at(pert.index_md_scalars, 'linear', 100.)

def test_external_spectrum_needs_a_command():
    with pytest.raises(InvalidInput):
        primordial(perturbs(), {'type':'external_Pk'})

def test_external_spectrum_refuses_isocurvature(tmp_path):
    pert = perturbs(k_min=1e-4, k_max=1., has_bi=True)
    pm = primordial(pert, {'type':'external_Pk', 'command':'cat nothing'})
    with pytest.raises(InvalidInput):
        pm.init()

def test_running_of_the_running_from_the_table(tmp_path):
    #ln P with a pure cubic term in ln(k/k_pivot), sampled on the finite-difference points
    k = 0.05*10.**(np.arange(-70, 15)/10.)
    x = np.log(k/0.05)
    path = tmp_path/'pk.dat'
    with open(path, 'w') as f:
        for row in zip(k, A_s*np.exp(0.01*x**3/6.), r*A_s*np.ones_like(k)):
            f.write('%.12e %.12e %.12e\n' %row)
    pm = primordial(perturbs(k_min=1e-4, k_max=1.), {'type':'external_Pk', 'command':f'cat {path}'},
                    precision={'k_per_decade':10})
    pm.init()
    assert pm.beta_s == pytest.approx(0.01, rel=1e-5)
    assert pm.alpha_s == pytest.approx(0., abs=1e-8)
    assert pm.n_s == pytest.approx(1.+0.01*(np.log(10.)/10.)**2/6., rel=1e-8)
