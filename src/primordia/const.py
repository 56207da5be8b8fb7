import numpy as np

#========================================================================================================
#Numbers used throughout. Inflation is computed in units G=1 (Planck mass M_pl=1), so that H^2 = (8 pi/3) rho.

ln10 = np.log(10.)
eight_pi_by_3 = 8*np.pi/3
four_pi = 4*np.pi
sixteen_pi = 16*np.pi

K_PER_DECADE_MIN = 1.0  #Below this the k sampling is too sparse for a natural spline
BUFFER_INITIAL_SIZE = 100   #Initial number of rows for the external spectrum reader
N_CUSTOM = 10   #Number of custom arguments handed over to an external command

#-------------------------------------------------------------
#Energy injection (cgs, energies in eV)

erfc_fit = (0.278393, 0.230389, 0.000972, 0.078108)   #Abramowitz & Stegun 7.1.27
ann_norm = 10537.4   #rho_crit/h^2 in eV/cm^3 (times c^2)
lam_ad = 0.6**1.5/4.
lam_iso = np.exp(1.5)/4.
deposition_rate = 2e-15   #Coefficient of the non-on-the-spot relaxation equation
deposition_decay = 7.0
n_vbc = 50   #Number of points for the relative-velocity average
#------------------------------------------------------------------------------

#Default precision parameters

precision_default = {'k_per_decade':10,
                     'ratio_min':100.,
                     'ratio_max':1/200.,
                     'phi_ini_maxit':10000,
                     'pt_stepsize':0.01,
                     'bg_stepsize':0.005,
                     'tol_integration':1e-3,
                     'attractor_precision_pivot':1e-3,
                     'attractor_precision_initial':0.1,
                     'attractor_maxit':10,
                     'tol_curvature':1e-3,
                     'aH_ini_target':0.9,
                     'end_dphi':1e-10,
                     'end_logstep':10.,
                     'end_phi_stop_precision':1e-5,
                     'smallest_allowed_variation':np.finfo(float).eps}

#------------------------------------------------------------------------------
#Spectrum related defaults

analytic_default = {'k_pivot':0.05,'A_s':2.215e-9,'n_s':0.9619,'alpha_s':0.,
                    'r':1.,'n_t':'scc','alpha_t':'scc'}

ic_names = ['ad','bi','cdi','nid','niv']
for _ic in ic_names[1:]:
    analytic_default['f_'+_ic] = 1.
    analytic_default['n_'+_ic] = 1.
    analytic_default['alpha_'+_ic] = 0.
for _i in range(len(ic_names)):
    for _j in range(_i+1,len(ic_names)):
        _pair = ic_names[_i]+'_'+ic_names[_j]
        analytic_default['c_'+_pair] = 0.
        analytic_default['n_'+_pair] = 0.
        analytic_default['alpha_'+_pair] = 0.

inflation_default = {'k_pivot':0.05,'potential':'polynomial',
                     'V0':1.25e-13,'V1':-1.12e-14,'V2':-6.95e-14,'V3':0.,'V4':0.,'phi_pivot':0.,
                     'H0':3.69e-6,'H1':-5.84e-7,'H2':0.,'H3':0.,'H4':0.,
                     'phi_end':0.,'ln_aH_ratio':50.}

external_default = {'k_pivot':0.05,'command':None,'custom':[0.]*N_CUSTOM}

perturbs_default = {'k_min':1e-6,'k_max':1.,'has_scalars':True,'has_tensors':True,'has_vectors':False,
                    'has_ad':True,'has_bi':False,'has_cdi':False,'has_nid':False,'has_niv':False}

#------------------------------------------------------------------------------
#Energy injection defaults

injection_default = {'odmh2':0.12,'pann':0.,'pann_halo':0.,'ann_z':600.,'ann_zmax':2500.,'ann_zmin':30.,
                     'ann_var':0.,'ann_z_halo':30.,'Mpbh':1.,'fpbh':0.,'coll_ion':0,'on_the_spot':1}
