'''
Single-field inflation. Integrates the background and the Mukhanov-Sasaki equations for scalar and tensor modes and returns ln P(k) for both.

Conventions: conformal time tau, prime = d/dtau, G = 1. The background state is [a, phi, phi'] when the potential is integrated forward, [a, phi] when it is integrated backward along the approximate slow-roll solution, and [a, phi] for a Hubble-function model. The perturbation state appends

    [ksi_re, ksi_im, ksi_re', ksi_im', ah_re, ah_im, ah_re', ah_im']

where ksi = z R is the Mukhanov-Sasaki variable and ah = a h the rescaled tensor amplitude.
'''
import numpy as np
from scipy.optimize import bisect
from tqdm import tqdm

from .const import eight_pi_by_3, four_pi, sixteen_pi, precision_default
from .errors import PrimordialError, InvalidModel, InvalidInput, UnphysicalPotential, SlowRollViolated, AttractorNotFound, NegativeSpectrum
from .integrator import generic_integrator
from .misc import set_params, say
from .potentials import potential_models, hubble_models

class inflation():
    '''
    Inflationary simulator for one potential (``inflation_V``, ``inflation_V_end``) or one Hubble function (``inflation_H``).

    Parameters
    ~~~~~~~~~~

    model : object
        A potential or a Hubble-function model from :mod:`primordia.potentials`.

    spec_type : str, optional
        ``inflation_V`` (default), ``inflation_V_end`` or ``inflation_H``.

    k_pivot : float, optional
        Pivot scale in 1/Mpc. Default ``0.05``.

    phi_pivot : float, optional
        Field value when the pivot scale crosses the Hubble radius. By default the expansion point of the potential; ignored (found) for ``inflation_V_end`` and always 0 for ``inflation_H``.

    phi_end : float, optional
        Field value beyond which inflation is known to end (``inflation_V_end`` only).

    ln_aH_ratio : float, optional
        Number of e-folds of growth of aH between the pivot crossing and the end of inflation (``inflation_V_end`` only).

    precision : dict, optional
        Overrides of :data:`primordia.const.precision_default`.

    verbose : int, optional
        0 for silence, 1 for headlines, 2 for diagnostics.

    Methods
    ~~~~~~~
    '''
    def __init__(self,model,spec_type='inflation_V',k_pivot=0.05,phi_pivot=None,phi_end=0.,ln_aH_ratio=50.,precision=None,verbose=0):

        if spec_type in ('inflation_V','inflation_V_end'):
            if not isinstance(model,tuple(potential_models.values())):
                raise InvalidModel(f"Spectrum type {spec_type} needs a potential, got {type(model).__name__}")
            self.is_V = True
        elif spec_type == 'inflation_H':
            if not isinstance(model,tuple(hubble_models.values())):
                raise InvalidModel(f"Spectrum type {spec_type} needs a Hubble function, got {type(model).__name__}")
            self.is_V = False
        else:
            raise InvalidModel(f"Unknown inflation type: {spec_type}")

        self.model = model
        self.spec_type = spec_type
        self.k_pivot = k_pivot
        self.phi_end = phi_end
        self.ln_aH_ratio = ln_aH_ratio
        self.prec = set_params(precision_default, precision, 'precision')
        self.verbose = verbose

        if self.is_V:
            self.phi_pivot = model.phi_pivot if phi_pivot is None else phi_pivot
        else:
            self.phi_pivot = 0.

        self.phi_stop = None
        self._indices()
        return None

    def _indices(self):
        self.index_in_a = 0
        self.index_in_phi = 1
        index_in = 2
        if self.is_V:
            self.index_in_dphi = index_in
            index_in += 1
        self.in_bg_size = index_in

        self.index_in_ksi_re = index_in
        self.index_in_ksi_im = index_in+1
        self.index_in_dksi_re = index_in+2
        self.index_in_dksi_im = index_in+3
        self.index_in_ah_re = index_in+4
        self.index_in_ah_im = index_in+5
        self.index_in_dah_re = index_in+6
        self.index_in_dah_im = index_in+7
        self.in_size = index_in+8
        return None

    def _bg_size(self,direction):
        if self.is_V and direction=='backward':
            return 2
        return self.in_bg_size

    #========================================================================================================
    #Model evaluation

    def potential(self,phi):
        if not self.is_V:
            raise InvalidModel("This inflation model is given by a Hubble function, not a potential")
        return self.model(phi)

    def hubble(self,phi):
        if self.is_V:
            raise InvalidModel("This inflation model is given by a potential, not a Hubble function")
        return self.model(phi)

    def check_potential(self,phi):
        '''
        Potential and its derivatives at ``phi``, after checking V>0 and dV/dphi<0. The code only deals with a field rolling towards larger values.
        '''
        V, dV, ddV = self.potential(phi)
        if V<=0:
            raise UnphysicalPotential(f"This potential becomes negative at phi={phi:g}, before the end of observable inflation", phi)
        if dV>=0:
            raise UnphysicalPotential(f"At phi={phi:g} we have dV/dphi={dV:g}, but the field must roll towards larger phi (dV/dphi<0)", phi)
        return V, dV, ddV

    def check_hubble(self,phi):
        H, dH, ddH, dddH = self.hubble(phi)
        if H<0:
            raise UnphysicalPotential(f"This Hubble function becomes negative at phi={phi:g}", phi)
        if dH>0:
            raise UnphysicalPotential(f"At phi={phi:g} we have dH/dphi={dH:g}, but the field must roll towards larger phi (dH/dphi<=0)", phi)
        return H, dH, ddH, dddH

    def get_epsilon(self,phi):
        '''
        First slow-roll parameter, :math:`(1/16\\pi)(V'/V)^2` or :math:`(1/4\\pi)(H'/H)^2`.
        '''
        if self.is_V:
            V, dV, ddV = self.potential(phi)
            return (dV/V)**2/sixteen_pi
        H, dH, ddH, dddH = self.hubble(phi)
        return (dH/H)**2/four_pi

    #========================================================================================================
    #Equations of motion

    def derivs(self,tau,y,pipaw):
        '''
        Right-hand side of the background (and, if ``pipaw['N']`` includes them, the perturbation) equations.

        ``pipaw`` is the mode dictionary with keys ``integrate`` ('forward' or 'backward'), ``N`` (length of ``y``) and ``k``. On return it also holds ``aH``, ``zpp_over_z`` and ``app_over_a`` for the state ``y``.
        '''
        dy = np.zeros(pipaw['N'])
        a = y[self.index_in_a]
        a2 = a*a

        if self.is_V:
            V, dV, ddV = self.model(y[self.index_in_phi])
            if pipaw['integrate']=='forward':
                dphi = y[self.index_in_dphi]
                aH = np.sqrt(eight_pi_by_3*(0.5*dphi*dphi+a2*V))
                dy[self.index_in_a] = a*aH
                dy[self.index_in_phi] = dphi
                dy[self.index_in_dphi] = -2.*aH*dphi-a2*dV
                pipaw['zpp_over_z'] = (2*aH*aH - a2*ddV - four_pi*(7.*dphi*dphi+4.*dphi/aH*a2*dV)
                                       + 32.*np.pi**2*dphi**4/aH**2)
                pipaw['app_over_a'] = 2.*aH*aH - four_pi*dphi*dphi
            else:
                #Slow roll: kinetic energy neglected against V, phi'' neglected against 2 aH phi'
                aH = np.sqrt(eight_pi_by_3*a2*V)
                dy[self.index_in_a] = a*aH
                dy[self.index_in_phi] = -a2*dV/3./aH
        else:
            H, dH, ddH, dddH = self.model(y[self.index_in_phi])
            aH = a*H
            dy[self.index_in_a] = a2*H
            dy[self.index_in_phi] = -a*dH/four_pi
            pipaw['zpp_over_z'] = a2*(2.*H*H
                                      - 3./four_pi*H*ddH
                                      + 1./(16.*np.pi**2)*ddH*ddH
                                      + 1./(16.*np.pi**2)*dH*dddH
                                      - 1./(4.*np.pi**2)*dH*dH*ddH/H
                                      + 1./(2.*np.pi)*dH*dH
                                      + 1./(8.*np.pi**2)*dH**4/H**2)
            pipaw['app_over_a'] = 2.*a2*H*H - four_pi*dy[self.index_in_phi]**2
        pipaw['aH'] = aH

        if pipaw['N']<=self.in_bg_size:
            return dy

        k2 = pipaw['k']**2
        for re, im, dre, dim, w2 in ((self.index_in_ksi_re, self.index_in_ksi_im, self.index_in_dksi_re, self.index_in_dksi_im, k2-pipaw['zpp_over_z']),
                                     (self.index_in_ah_re, self.index_in_ah_im, self.index_in_dah_re, self.index_in_dah_im, k2-pipaw['app_over_a'])):
            dy[re] = y[dre]
            dy[im] = y[dim]
            dy[dre] = -w2*y[re]
            dy[dim] = -w2*y[im]
        return dy

    #========================================================================================================
    #Background evolution

    def _bg_step(self,y,dy,aH,direction):
        if direction=='forward' and self.is_V:
            return self.prec['bg_stepsize']*min(1./aH,np.abs(y[self.index_in_dphi]/dy[self.index_in_dphi]))
        sign = 1. if direction=='forward' else -1.
        return sign*self.prec['bg_stepsize']/aH

    def _bg_quantity(self,target,y,dy,aH,dtau):
        if target=='aH':
            return aH+aH*aH*dtau
        elif target=='phi':
            return y[self.index_in_phi]+dy[self.index_in_phi]*dtau
        #-(d2a/dt2)/a in units of a^2
        return (-aH*aH+four_pi*y[self.index_in_dphi]**2)/y[self.index_in_a]**2

    def evolve_background(self,y,target,stop,check_epsilon=True,direction='forward'):
        '''
        Evolve the background from the state ``y`` until ``target`` reaches ``stop``.

        Arguments
        ---------
        y : array
            Initial background state. Only its background components are used.

        target : str
            ``'aH'``, ``'phi'`` or ``'end_inflation'`` (d^2a/dt^2 = 0; ``stop`` is ignored and forward potential integration is required).

        stop : float
            Value of the target quantity to be reached.

        check_epsilon : bool
            Raise :class:`SlowRollViolated` if epsilon crosses 1 on the way.

        direction : str
            ``'forward'`` or ``'backward'`` in time. Backward integration of a potential uses the slow-roll system, so the returned state has no phi'.

        Returns
        -------
        tuple
            The final state and its derivative.
        '''
        if direction not in ('forward','backward'):
            raise InvalidInput(f"Unknown direction: {direction}")
        if target not in ('aH','phi','end_inflation'):
            raise InvalidInput(f"Unknown target: {target}")
        if target=='end_inflation':
            if not (self.is_V and direction=='forward'):
                raise InvalidModel("The end of inflation can only be searched forward in time with a potential")
            stop = 0.

        sign = 1. if direction=='forward' else -1.
        pipaw = {'integrate':direction,'N':self._bg_size(direction),'k':0.}
        y = np.array(y[:pipaw['N']],dtype=float)
        derivs = lambda tau, x: self.derivs(tau,x,pipaw)

        if check_epsilon:
            epsilon = self.get_epsilon(y[self.index_in_phi])

        tau_end = 0.
        dy = derivs(tau_end,y)
        aH = dy[self.index_in_a]/y[self.index_in_a]
        dtau = self._bg_step(y,dy,aH,direction)
        quantity = self._bg_quantity(target,y,dy,aH,dtau)

        while sign*(quantity-stop)<0.:
            if self.is_V:
                self.check_potential(y[self.index_in_phi])
            else:
                self.check_hubble(y[self.index_in_phi])

            tau_start = tau_end
            tau_end = tau_start+dtau
            y = generic_integrator(derivs,tau_start,tau_end,y,self.prec['tol_integration'],self.prec['smallest_allowed_variation'])

            if check_epsilon:
                epsilon_old = epsilon
                epsilon = self.get_epsilon(y[self.index_in_phi])
                if epsilon>1 and epsilon_old<=1:
                    raise SlowRollViolated(y[self.index_in_phi])

            dy = derivs(tau_end,y)
            aH = dy[self.index_in_a]/y[self.index_in_a]
            dtau = self._bg_step(y,dy,aH,direction)
            quantity = self._bg_quantity(target,y,dy,aH,dtau)

        #One last Euler step lands on the target
        if target=='aH':
            dtau = (stop/aH-1.)/aH
        elif target=='phi':
            dtau = (stop-y[self.index_in_phi])/dy[self.index_in_phi]
        else:
            self.check_potential(y[self.index_in_phi])
            dtau = -quantity/(8.*np.pi/y[self.index_in_a]**2*dy[self.index_in_phi]*dy[self.index_in_dphi])

        y[self.index_in_a] += dy[self.index_in_a]*dtau
        y[self.index_in_phi] += dy[self.index_in_phi]*dtau
        if direction=='forward' and self.is_V:
            y[self.index_in_dphi] += dy[self.index_in_dphi]*dtau
        dy = derivs(tau_end,y)
        return y, dy

    def find_attractor(self,phi_0,precision):
        '''
        Find dphi/dt on the inflationary attractor at ``phi_0``.

        Starting from the slow-roll value, the background is integrated up to ``phi_0`` from earlier and earlier field values (roughly half an e-fold further each time) until dphi/dt at ``phi_0`` changes by less than ``precision``.

        Returns
        -------
        tuple
            (H, dphi/dt) at ``phi_0``.
        '''
        V_0, dV_0, ddV_0 = self.check_potential(phi_0)
        dphidt_0new = -dV_0/3./np.sqrt(eight_pi_by_3*V_0)
        dphidt_0old = dphidt_0new/(precision+2.)
        phi = phi_0
        counter = 0

        while np.abs(dphidt_0new/dphidt_0old-1.)>=precision:
            counter += 1
            if counter>=self.prec['attractor_maxit']:
                raise AttractorNotFound(phi_0,precision,counter)
            dphidt_0old = dphidt_0new

            phi = phi+dV_0/V_0/sixteen_pi
            V, dV, ddV = self.check_potential(phi)
            y = np.array([1.,phi,-dV/3./np.sqrt(eight_pi_by_3*V)])
            y, dy = self.evolve_background(y,'phi',phi_0,True,'forward')
            dphidt_0new = y[self.index_in_dphi]/y[self.index_in_a]

        H_0 = np.sqrt(eight_pi_by_3*(0.5*dphidt_0new**2+V_0))
        say(self.verbose,2,f' (attractor found in phi={phi_0:g} with phi\'={dphidt_0new:g}, H={H_0:g})')
        return H_0, dphidt_0new

    #========================================================================================================
    #End of inflation and pivot for inflation_V_end

    def _bracket_epsilon(self,phi_right,value):
        '''
        Walk back from ``phi_right`` in logarithmic steps until epsilon < ``value``; return the bracketing pair.
        '''
        dphi = self.prec['end_dphi']
        epsilon = value
        while epsilon>=value:
            dphi *= self.prec['end_logstep']
            if not np.isfinite(dphi):
                raise InvalidInput(f"Epsilon never drops below {value:g} before phi={phi_right:g}")
            epsilon = self.get_epsilon(phi_right-dphi)
        return phi_right-dphi, phi_right-dphi/self.prec['end_logstep']

    def find_phi_stop(self):
        '''
        Field value at which inflation stops: the epsilon=1 crossing below ``phi_end``, or ``phi_end`` itself (minus a tiny shift) when epsilon is still below 1 there, as in hybrid inflation.
        '''
        dphi = self.prec['end_dphi']
        if self.get_epsilon(self.phi_end-dphi)<1:
            self.phi_stop = self.phi_end-dphi
            self.abrupt_end = True
            say(self.verbose,2,' (inflation takes place till the input value phi_end, like in hybrid inflation)')
        else:
            phi_left, phi_right = self._bracket_epsilon(self.phi_end,1.)
            self.phi_stop = bisect(lambda phi: self.get_epsilon(phi)-1.,phi_left,phi_right,
                                   rtol=self.prec['end_phi_stop_precision'])
            self.abrupt_end = False
            say(self.verbose,2,f' (inflation stops when phi={self.phi_stop:e})')
        return self.phi_stop

    def _aH_growth_to_end(self,phi,dphidt):
        '''aH at the end of inflation over aH at ``phi``, starting on the attractor.'''
        y = np.array([1.,phi,dphidt])
        if self.abrupt_end:
            y, dy = self.evolve_background(y,'phi',self.phi_stop,False,'forward')
        else:
            y, dy = self.evolve_background(y,'end_inflation',0.,False,'forward')
        H = np.sqrt(eight_pi_by_3*(0.5*dphidt**2+self.potential(phi)[0]))
        return dy[self.index_in_a]/y[self.index_in_a]/H

    def find_phi_pivot(self):
        '''
        Field value at which the pivot scale crosses the Hubble radius, given that aH grows by ``exp(ln_aH_ratio)`` between that moment and the end of inflation.
        '''
        self.find_phi_stop()

        #A reference point well inside inflation
        if self.abrupt_end or self.get_epsilon(self.phi_stop)<0.1:
            phi_ref = self.phi_stop
        else:
            phi_left, phi_right = self._bracket_epsilon(self.phi_stop,0.1)
            phi_ref = bisect(lambda phi: self.get_epsilon(phi)-0.1,phi_left,phi_right,
                             rtol=self.prec['end_phi_stop_precision'])
        if phi_ref==self.phi_stop:
            H_ref = np.sqrt(eight_pi_by_3*self.check_potential(phi_ref)[0])
            growth_ref = 1.
        else:
            H_ref, dphidt_ref = self.find_attractor(phi_ref,self.prec['attractor_precision_initial'])
            growth_ref = self._aH_growth_to_end(phi_ref,dphidt_ref)

        #Slow-roll guess, slightly earlier than needed
        y = np.array([1.,phi_ref])
        y, dy = self.evolve_background(y,'aH',H_ref*growth_ref/np.exp(self.ln_aH_ratio)*self.prec['aH_ini_target'],True,'backward')
        phi_try = y[self.index_in_phi]

        counter = 0
        while True:
            counter += 1
            if counter>=self.prec['phi_ini_maxit']:
                raise AttractorNotFound(phi_try,self.prec['attractor_precision_initial'],counter,
                                        f"Could not find {self.ln_aH_ratio:g} e-folds of aH growth before the end of inflation after {counter} iterations")
            H_try, dphidt_try = self.find_attractor(phi_try,self.prec['attractor_precision_initial'])
            growth = self._aH_growth_to_end(phi_try,dphidt_try)
            if np.log(growth)>=self.ln_aH_ratio:
                break
            #Go back by about one e-fold
            V, dV, ddV = self.check_potential(phi_try)
            phi_try = phi_try+dV/V/(8.*np.pi)

        y = np.array([1.,phi_try,dphidt_try])
        y, dy = self.evolve_background(y,'aH',H_try*growth/np.exp(self.ln_aH_ratio),False,'forward')
        self.phi_pivot = y[self.index_in_phi]
        say(self.verbose,2,f' (pivot reached at phi={self.phi_pivot:e})')
        return self.phi_pivot

    #========================================================================================================
    #Spectra

    def solve_inflation(self,lnk,comm=None):
        '''
        Find the initial conditions and compute the scalar and tensor spectra on the grid ``lnk``.

        The pivot is placed at ``phi_pivot`` with a = k_pivot/H_pivot. The routine checks that inflation lasts until k_max is well outside the Hubble radius, finds an initial time at which k_min is well inside it, and then integrates every mode.

        Returns
        -------
        tuple
            ln P_R(k) and ln P_t(k) on ``lnk``.
        '''
        if self.spec_type=='inflation_V_end':
            self.find_phi_pivot()

        if self.is_V:
            say(self.verbose,2,' (search attractor at pivot)')
            H_pivot, dphidt_pivot = self.find_attractor(self.phi_pivot,self.prec['attractor_precision_pivot'])
        else:
            H_pivot = self.check_hubble(self.phi_pivot)[0]
        a_pivot = self.k_pivot/H_pivot
        self.H_pivot, self.a_pivot = H_pivot, a_pivot

        k_min, k_max = np.exp(lnk[0]), np.exp(lnk[-1])

        #Inflation must last until k_max is far outside the Hubble radius
        say(self.verbose,2,f' (check inflation duration after phi_pivot={self.phi_pivot:e})')
        aH_end = k_max/self.prec['ratio_max']
        y = np.array([a_pivot,self.phi_pivot,a_pivot*dphidt_pivot] if self.is_V else [a_pivot,self.phi_pivot])
        self.evolve_background(y,'aH',aH_end,True,'forward')

        #and must have started before k_min was far inside it
        say(self.verbose,2,' (check inflation duration before pivot)')
        aH_ini = k_min/self.prec['ratio_min']
        if self.is_V:
            y = np.array([a_pivot,self.phi_pivot])
            counter = 0
            while True:
                counter += 1
                if counter>=self.prec['phi_ini_maxit']:
                    raise AttractorNotFound(y[self.index_in_phi],self.prec['attractor_precision_initial'],counter,
                                            f"Could not find an initial field value before observable inflation after {counter} iterations; the potential does not allow enough e-folds before the pivot")
                y, dy = self.evolve_background(y,'aH',aH_ini*self.prec['aH_ini_target'],True,'backward')
                phi_try = y[self.index_in_phi]
                H_try, dphidt_try = self.find_attractor(phi_try,self.prec['attractor_precision_initial'])

                #Normalise a so that a=a_pivot at phi_pivot
                y, dy = self.evolve_background(np.array([1.,phi_try,dphidt_try]),'phi',self.phi_pivot,True,'forward')
                a_try = a_pivot/y[self.index_in_a]
                y = np.array([a_try,phi_try])
                if a_try*H_try<=aH_ini:
                    break
            y_ini = np.array([a_try,phi_try,a_try*dphidt_try])
        else:
            y_ini, dy = self.evolve_background(y,'aH',aH_ini,True,'backward')
        self.phi_ini = y_ini[self.index_in_phi]

        say(self.verbose,2,' (compute spectrum)')
        lnpk_scalars, lnpk_tensors = self.spectra(y_ini,lnk,comm)

        y, dy = self.evolve_background(y_ini,'aH',k_min,False,'forward')
        self.phi_min = y[self.index_in_phi]
        y, dy = self.evolve_background(y,'aH',k_max,False,'forward')
        self.phi_max = y[self.index_in_phi]
        say(self.verbose,2,f' (observable power spectrum goes from {self.phi_min:e} to {self.phi_max:e})')
        return lnpk_scalars, lnpk_tensors

    def spectra(self,y_ini,lnk,comm=None):
        '''
        For each k, evolve the background from ``y_ini`` to aH = k/ratio_min and integrate the mode with :meth:`one_k`.

        With an MPI communicator the wavenumbers are dealt round-robin to the ranks and the results gathered on all of them.
        '''
        if comm is None:
            cpu_ind, n_cpu = 0, 1
        else:
            cpu_ind, n_cpu = comm.Get_rank(), comm.Get_size()

        n_k = len(lnk)
        partial = []
        error = None
        pbar = tqdm(total=len(range(cpu_ind,n_k,n_cpu)), desc="Computing spectra", ncols=100, disable=(self.verbose<1 or cpu_ind!=0))
        try:
            for index_k in range(cpu_ind,n_k,n_cpu):
                k = np.exp(lnk[index_k])
                y, dy = self.evolve_background(y_ini,'aH',k/self.prec['ratio_min'],False,'forward')
                curvature, tensor = self.one_k(k,y)
                if not curvature>0.:
                    raise NegativeSpectrum(f"Negative curvature spectrum P={curvature:e} at k={k:e}")
                if not tensor>0.:
                    raise NegativeSpectrum(f"Negative tensor spectrum P={tensor:e} at k={k:e}")
                partial.append((index_k,np.log(curvature),np.log(tensor)))
                pbar.update(1)
        except PrimordialError as err:
            if n_cpu==1:
                raise
            #every rank must still reach allgather
            error = err
        finally:
            pbar.close()

        if n_cpu>1:
            gathered = comm.allgather((partial,error))
            errors = [err for chunk, err in gathered if err is not None]
            if errors:
                raise errors[0]
            partial = [item for chunk, err in gathered for item in chunk]

        lnpk_scalars = np.zeros(n_k)
        lnpk_tensors = np.zeros(n_k)
        for index_k, lnps, lnpt in partial:
            lnpk_scalars[index_k] = lnps
            lnpk_tensors[index_k] = lnpt
        return lnpk_scalars, lnpk_tensors

    def _pt_step(self,k,pipaw):
        #2 pi/max(|ksi''/ksi|^(1/2), k), with |ksi''/ksi| = |k^2 - z''/z|
        return self.prec['pt_stepsize']*2.*np.pi/max(np.sqrt(np.abs(k*k-pipaw['zpp_over_z'])),k)

    def one_k(self,k,y):
        '''
        Integrate one Fourier mode from Bunch-Davies initial conditions until it is far outside the Hubble radius and its curvature power has frozen.

        Arguments
        ---------
        k : float
            Wavenumber in 1/Mpc.

        y : array
            Background state at the starting time.

        Returns
        -------
        tuple
            Curvature power :math:`k^3|\\xi|^2/(2\\pi^2 z^2)` and tensor power :math:`32k^3|ah|^2/(\\pi a^2)`.
        '''
        state = np.zeros(self.in_size)
        state[:self.in_bg_size] = y[:self.in_bg_size]
        for re, dim in ((self.index_in_ksi_re, self.index_in_dksi_im), (self.index_in_ah_re, self.index_in_dah_im)):
            state[re] = 1./np.sqrt(2.*k)
            state[dim] = -k*state[re]

        pipaw = {'integrate':'forward','N':self.in_size,'k':k}
        derivs = lambda tau, x: self.derivs(tau,x,pipaw)

        curvature_new = np.inf
        tau_end = 0.
        dy = derivs(tau_end,state)
        dtau = self._pt_step(k,pipaw)

        while True:
            tau_start = tau_end
            tau_end = tau_start+dtau
            state = generic_integrator(derivs,tau_start,tau_end,state,self.prec['tol_integration'],self.prec['smallest_allowed_variation'])

            dy = derivs(tau_end,state)
            dtau = self._pt_step(k,pipaw)
            a = state[self.index_in_a]
            aH = dy[self.index_in_a]/a

            curvature_old = curvature_new
            z = a*dy[self.index_in_phi]/aH
            ksi2 = state[self.index_in_ksi_re]**2+state[self.index_in_ksi_im]**2
            curvature_new = k**3/2./np.pi**2*ksi2/z**2

            dlnPdN = (curvature_new-curvature_old)/dtau*a/dy[self.index_in_a]/curvature_new
            if k/aH<self.prec['ratio_max'] and np.abs(dlnPdN)<=self.prec['tol_curvature']:
                break

        ah2 = state[self.index_in_ah_re]**2+state[self.index_in_ah_im]**2
        tensor = 32.*k**3/np.pi*ah2/state[self.index_in_a]**2
        return curvature_new, tensor
