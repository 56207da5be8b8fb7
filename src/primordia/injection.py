'''
Rate of energy injection into the plasma by dark matter annihilation and by accreting primordial black holes (PBHs), and its deposition as heat, ionization and excitation.

Units are cgs with energies in eV: rates per unit volume are in eV/cm^3/s, PBH masses in solar masses, temperatures in K and velocities in cm/s. The PBH part assumes best-fit cosmological parameters and neglects Helium.
'''
import numpy as np

from .const import injection_default, erfc_fit, ann_norm, lam_ad, lam_iso, deposition_rate, deposition_decay, n_vbc
from .misc import set_params

class inj_params():
    '''
    Parameters of energy injection.

    Parameters
    ~~~~~~~~~~

    odmh2 : float
        Dark matter density parameter times h^2.

    pann, pann_halo : float
        Annihilation parameter (cm^3/s/GeV) in the smooth background and in haloes.

    ann_z, ann_zmax, ann_zmin, ann_var : float
        Redshift dependence of ``pann``: log-Gaussian of width parameter ``ann_var`` around ``ann_z``, frozen above ``ann_zmax`` and below ``ann_zmin``.

    ann_z_halo : float
        Characteristic redshift of halo formation.

    Mpbh, fpbh : float
        PBH mass (solar masses) and fraction of dark matter in PBHs.

    coll_ion : int
        1 for collisional ionizations near the PBH, 0 for photoionizations.

    on_the_spot : int
        1 to deposit energy as soon as it is injected.
    '''
    def __init__(self,**para):
        self.para = set_params(injection_default, para, 'injection')
        for key, value in self.para.items():
            setattr(self,key,value)
        return None

#========================================================================================================
#Dark matter annihilation (Giesen et al 1209.0247)

def dEdtdV_DM_ann(z,params):
    '''
    Rate of energy injection per unit volume (eV/cm^3/s) by dark matter annihilation in the smooth background and in haloes.
    '''
    var = params.ann_var
    zp1 = z+1.
    zp1_ann = params.ann_z+1.
    zp1_max = params.ann_zmax+1.
    zp1_halo = params.ann_z_halo+1.
    zp1_min = params.ann_zmin+1.

    pann_tot = 0.
    if params.pann>0.:
        if zp1>zp1_max:
            pann_tot = params.pann*np.exp(-var*np.log(zp1_ann/zp1_max)**2)
        elif zp1>zp1_min:
            pann_tot = params.pann*np.exp(var*(-np.log(zp1_ann/zp1_max)**2+np.log(zp1/zp1_max)**2))
        else:
            pann_tot = params.pann*np.exp(var*(-np.log(zp1_ann/zp1_max)**2+np.log(zp1_min/zp1_max)**2))
        pann_tot *= zp1**3

    if params.pann_halo>0.:
        u_min = zp1/zp1_halo
        a1, a2, a3, a4 = erfc_fit
        erfc = (1.+a1*u_min+a2*u_min**2+a3*u_min**3+a4*u_min**4)**-4
        pann_tot += params.pann_halo*erfc

    #(3 H100^2/8 pi G) c^2 in eV/cm^3; pann from cm^3/s/GeV to cm^3/s/eV
    return (ann_norm*params.odmh2)**2*zp1**3*1e-9*pann_tot

dm_annihilation_rate = dEdtdV_DM_ann

#========================================================================================================
#Accreting primordial black holes

def _bondi_speed(xe,Teff):
    return 9.09e3*np.sqrt((1.+xe)*Teff)

def beta_pbh(Mpbh,z,xe,Teff):
    '''Dimensionless Compton drag rate.'''
    a = 1./(1.+z)
    vB = _bondi_speed(xe,Teff)
    tB = 1.33e26*Mpbh/vB**3    #Bondi time in s
    return 7.45e-24*xe/a**4*tB

def gamma_pbh(Mpbh,z,xe,Teff):
    '''Dimensionless Compton cooling rate.'''
    return 3.67e3/(1.+xe)*beta_pbh(Mpbh,z,xe,Teff)

def lambda_pbh(Mpbh,z,xe,Teff):
    '''
    Dimensionless accretion rate. Ricotti (2007) fit for the isothermal case with Compton drag, rescaled by a fit between the adiabatic and isothermal limits without drag.
    '''
    beta = beta_pbh(Mpbh,z,xe,Teff)
    gamma = gamma_pbh(Mpbh,z,xe,Teff)

    lam_ricotti = np.exp(4.5/(3.+beta**0.75))/(np.sqrt(1.+beta)+1.)**2
    lam_nodrag = lam_ad+(lam_iso-lam_ad)*(gamma**2/(88.+gamma**2))**0.22
    return lam_ricotti*lam_nodrag/lam_iso

def Mdot_pbh(Mpbh,z,xe,Teff):
    '''Accretion rate in g/s, for Omega_b h^2 = 0.022.'''
    vB = _bondi_speed(xe,Teff)
    return 9.15e22*Mpbh**2*((1.+z)/vB)**3*lambda_pbh(Mpbh,z,xe,Teff)

def TS_over_me_pbh(Mpbh,z,xe,Teff,coll_ion):
    '''
    Temperature of the flow near the Schwarzschild radius in units of m_e c^2. With ``coll_ion=1`` ionizations are collisional, otherwise photoionizations.
    '''
    gamma = gamma_pbh(Mpbh,z,xe,Teff)
    tau = 1.5/(5.+gamma**(2./3.))    #T/Teff = tau rB/r for r << rB
    YS = 2./(1.+xe)*tau/4.*(1.-2.5*tau)**(1./3.)*1836.
    if coll_ion==1:
        YS *= ((1.+xe)/2.)**8
    return YS/(1.+YS/0.27)**(1./3.)

def eps_over_mdot_pbh(Mpbh,z,xe,Teff,coll_ion):
    '''Radiative efficiency divided by the Eddington-normalised accretion rate.'''
    X = TS_over_me_pbh(Mpbh,z,xe,Teff,coll_ion)

    #Fit to the e-e plus e-p free-free Gaunt factor
    if X<1:
        G = 4./np.pi*np.sqrt(2./np.pi/X)*(1.+5.5*X**1.25)
    else:
        G = 13.5/np.pi*(np.log(2.*X*0.56146+0.08)+4./3.)
    return X/1836./137.*G

def L_pbh(Mpbh,z,xe,Teff,coll_ion):
    '''Luminosity of a single PBH in erg/s.'''
    Mdot = Mdot_pbh(Mpbh,z,xe,Teff)
    mdot = Mdot/(1.4e17*Mpbh)    #Mdot c^2/L_Eddington
    eff = mdot*eps_over_mdot_pbh(Mpbh,z,xe,Teff,coll_ion)
    return eff*Mdot*9e20

def vbc_rms_func(z):
    '''Rough rms baryon-dark matter relative velocity in cm/s.'''
    if z<1e3:
        return 3e6*(1.+z)/1e3
    return 3e6

def L_pbh_av(Mpbh,z,xe,Tgas,coll_ion):
    '''
    PBH luminosity (erg/s) averaged over the distribution of relative velocities, with weight x^2 exp(-1.5 x^2) for x = v/v_rms up to 5 v_rms.
    '''
    vbc_rms = vbc_rms_func(z)
    vbc = np.linspace(0.,5.*vbc_rms,n_vbc)
    x = vbc/vbc_rms
    P_vbc = x**2*np.exp(-1.5*x**2)
    Teff = Tgas+1.21e-8*vbc**2/(1.+xe)

    num = 0.
    for i in range(n_vbc):
        num += L_pbh(Mpbh,z,xe,Teff[i],coll_ion)*P_vbc[i]
    return num/np.sum(P_vbc)

pbh_luminosity = L_pbh_av

def dEdtdV_pbh(fpbh,Mpbh,z,xe,Tgas,coll_ion):
    '''
    Rate of energy injection per unit volume (eV/cm^3/s) by PBHs, for Omega_c h^2 = 0.12. ``xe`` is capped at 1 since Helium is not accounted for.
    '''
    if fpbh>0.:
        xe_used = min(xe,1.)
        return 7.07e-52/Mpbh*(1.+z)**3*fpbh*L_pbh_av(Mpbh,z,xe_used,Tgas,coll_ion)
    return 0.

#========================================================================================================

def dEdtdV_inj(z,xe,Tgas,params):
    '''Total rate of energy injection per unit volume (eV/cm^3/s).'''
    return dEdtdV_DM_ann(z,params)+dEdtdV_pbh(params.fpbh,params.Mpbh,z,xe,Tgas,params.coll_ion)

def update_dEdtdV_dep(z_out,dlna,xe,Tgas,nH,H,params,dEdtdV_dep):
    '''
    Advance the rate of energy deposition per unit volume by one step.

    With ``params.on_the_spot=1`` deposition equals injection. Otherwise the injected photons are assumed to Compton cool at dE/dt = -0.1 n_H c sigma_T E (about right for MeV photons) and the deposition rate relaxes towards the injection rate.

    Arguments
    ---------
    z_out : float
        Redshift at the end of the step.

    dlna : float
        Step in ln a.

    xe, Tgas : float
        Free-electron fraction and gas temperature (K).

    nH, H : float
        Hydrogen number density (cm^-3) and Hubble rate (s^-1).

    params : :class:`inj_params`

    dEdtdV_dep : float
        Deposition rate at the start of the step.

    Returns
    -------
    float
        Deposition rate at ``z_out``.
    '''
    inj = dEdtdV_inj(z_out,xe,Tgas,params)
    if params.on_the_spot==1:
        return inj
    rate = deposition_rate*dlna*nH/H
    return (dEdtdV_dep*np.exp(-deposition_decay*dlna)+rate*inj)/(1.+rate)

deposition_update = update_dEdtdV_dep

def deposition_history(Z,xe,Tgas,nH,H,params,dEdtdV_dep=0.):
    '''
    Deposition rate along a decreasing redshift grid ``Z``. ``xe``, ``Tgas``, ``nH`` and ``H`` are arrays on the same grid; the deposition rate at ``Z[0]`` is ``dEdtdV_dep``.
    '''
    Z = np.asarray(Z,dtype=float)
    dep = np.zeros(len(Z))
    dep[0] = dEdtdV_dep
    for i in range(1,len(Z)):
        dlna = np.log((1.+Z[i-1])/(1.+Z[i]))
        dep[i] = update_dEdtdV_dep(Z[i],dlna,xe[i],Tgas[i],nH[i],H[i],params,dep[i-1])
    return dep

#========================================================================================================
#Fractions of the deposited energy (Chen & Kamionkowski 2004)

def chi_heat(xe):
    return (1.+2.*xe)/3.

def chi_ion(xe):
    return (1.-xe)/3.

def chi_exc(xe):
    return 1.-chi_ion(xe)-chi_heat(xe)
