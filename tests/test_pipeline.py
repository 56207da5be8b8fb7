import os
import numpy as np
import pytest

pytest.importorskip("mpi4py")

from primordia.pipeline import pipeline, load_pipeline

def test_analytic_run_writes_outputs(tmp_path):
    pipe = pipeline(spectrum={'type':'analytic_Pk', 'A_s':2e-9, 'r':0.1},
                    perturbs_dic={'k_min':1e-4, 'k_max':1.}, path=str(tmp_path)+'/', verbose=0)
    pm = pipe.run()
    assert pipe.path.startswith(str(tmp_path))
    lnk = np.load(pipe.path+'lnk.npy')
    lnpk = np.load(pipe.path+'lnpk_scalars.npy')
    assert lnk.shape == (42,)
    assert lnpk.shape == (42, 1)
    assert np.load(pipe.path+'lnpk_tensors.npy').shape == (42, 1)
    assert os.path.isfile(pipe.path+'primordial_'+pipe.timestamp+'.txt')
    with open(pipe.path+'primordial_'+pipe.timestamp+'.txt') as f:
        assert 'A_s = 2.000000e-09' in f.read()
    assert pm.A_s == 2e-9

    loaded = load_pipeline(pipe.path+'pipe.pkl')
    assert loaded.pm.spectrum_at(0, 'linear', 0.05)[0] == pytest.approx(2e-9, rel=1e-8)

def test_run_without_perturbations(tmp_path):
    pipe = pipeline(perturbs_dic={'has_scalars':False, 'has_tensors':False}, path=str(tmp_path)+'/', verbose=0)
    pm = pipe.run()
    assert pm.lnk_size == 0
    assert not os.path.exists(pipe.path+'lnk.npy')

def test_print_input(tmp_path, capsys):
    pipe = pipeline(spectrum={'type':'inflation_V', 'V0':1e-13}, path=str(tmp_path)+'/', verbose=0)
    pipe.print_input()
    out = capsys.readouterr().out
    assert 'inflation_V' in out
    assert 'V0 = 1e-13' in out
