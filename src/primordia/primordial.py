'''
The primordial spectrum module. Builds a table of ln P(k) for every mode and pair of initial conditions, either from an analytic parametrisation, from a simulation of inflation, or from an external program, and serves interpolated values through :meth:`primordial.spectrum_at`.

Diagonal entries of the table hold ln P_ii. Off-diagonal entries hold the correlation cos(Delta_ij) = P_ij/sqrt(P_ii P_jj), which is what gets splined; :meth:`spectrum_at` in ``'linear'`` mode converts it back to P_ij.
'''
import numpy as np
from scipy.interpolate import CubicSpline

from .const import ln10, K_PER_DECADE_MIN, precision_default, analytic_default, inflation_default, external_default
from .errors import InvalidModel, InvalidInput
from .external import run_external_command
from .inflation import inflation
from .misc import pack, ic_ic_size, set_params, say
from .potentials import set_potential, set_hubble

def get_lnk_list(k_min,k_max,k_per_decade):
    '''
    Logarithmically spaced ln k from ``k_min`` with ``k_per_decade`` points per decade, extending just beyond ``k_max``.
    '''
    if k_min<=0 or k_max<=k_min:
        raise InvalidInput(f"Inconsistent values of k_min={k_min:e}, k_max={k_max:e}")
    lnk_size = int(np.log(k_max/k_min)/ln10*k_per_decade)+2
    return np.log(k_min)+np.arange(lnk_size)*ln10/k_per_decade


class spectrum_table():
    '''
    ln k samples and, per mode, an array ``lnpk[index_md]`` of shape (lnk_size, ic_ic_size) with a natural cubic spline along ln k.
    '''
    def __init__(self,lnk,ic_size):
        self.lnk = np.asarray(lnk,dtype=float)
        self.lnk_size = len(self.lnk)
        if self.lnk_size<2 or np.any(np.diff(self.lnk)<=0):
            raise InvalidInput("The ln k samples must be at least 2 and strictly increasing")
        self.md_size = len(ic_size)
        self.ic_size = list(ic_size)
        self.ic_ic_size = [ic_ic_size(n) for n in ic_size]
        self.lnpk = [np.zeros((self.lnk_size,n)) for n in self.ic_ic_size]
        self.is_non_zero = [np.zeros(n,dtype=bool) for n in self.ic_ic_size]
        self.splines = [None]*self.md_size
        self.ddlnpk = [None]*self.md_size
        return None

    def build_splines(self):
        for index_md in range(self.md_size):
            if self.ic_ic_size[index_md]==0:
                continue
            self.splines[index_md] = CubicSpline(self.lnk,self.lnpk[index_md],axis=0,bc_type='natural')
            self.ddlnpk[index_md] = self.splines[index_md](self.lnk,2)
        return None

    def interpolate(self,index_md,lnk):
        return self.splines[index_md](lnk)

    def in_range(self,lnk):
        return self.lnk[0]<=lnk<=self.lnk[-1]

#========================================================================================================

class spectrum_source():
    '''
    Behaviour shared by all spectrum types: table construction and interpolation. Subclasses provide :meth:`_build`.
    '''
    spec_type = None

    def __init__(self,pert,k_pivot=0.05,precision=None,verbose=0):
        self.pert = pert
        self.k_pivot = k_pivot
        self.prec = set_params(precision_default, precision, 'precision')
        self.verbose = verbose
        self.table = None
        return None

    def _check_modes(self):
        return None

    def init(self):
        pert = self.pert
        if pert.k_min<=0:
            raise InvalidInput("k_min negative or null")
        if pert.k_max<=0:
            raise InvalidInput("k_max negative or null")
        if self.k_pivot<=0:
            raise InvalidInput("k_pivot negative or null")
        if self.prec['k_per_decade']<=0:
            raise InvalidInput("k_per_decade negative or null")
        if self.prec['k_per_decade']<=K_PER_DECADE_MIN:
            raise InvalidInput(f"k_per_decade = {self.prec['k_per_decade']:e}: you ask for such a sparse sampling of the primordial spectrum that this is probably a mistake")
        self._check_modes()

        lnk = get_lnk_list(pert.k_min,pert.k_max,self.prec['k_per_decade'])
        self.table = self._build(lnk)
        self.table.build_splines()
        return None

    def free(self):
        self.table = None
        return None

    def _direct(self,index_md,k):
        t = self.table
        raise InvalidInput(f"k={k:e} out of range [{np.exp(t.lnk[0]):e} : {np.exp(t.lnk[-1]):e}]")

    def spectrum_at(self,index_md,mode,value):
        '''
        Primordial spectrum of mode ``index_md`` for all pairs of initial conditions.

        Arguments
        ---------
        index_md : int
            Mode index from the :class:`perturbs` object.

        mode : str
            ``'linear'``: ``value`` is k and the output holds P_ij. ``'logarithmic'``: ``value`` is ln k and the output holds ln P_ii on the diagonal and cos(Delta_ij) off it.

        value : float
            k or ln k.

        Returns
        -------
        1D array
            Indexed by :func:`primordia.misc.pack`.
        '''
        if self.table is None:
            raise InvalidInput("The primordial spectrum has not been computed")
        if mode=='linear':
            if value<=0:
                raise InvalidInput(f"k = {value:e}")
            lnk = np.log(value)
        elif mode=='logarithmic':
            lnk = value
        else:
            raise InvalidInput(f"Unknown mode: {mode}")

        t = self.table
        n = t.ic_size[index_md]
        non_zero = t.is_non_zero[index_md]

        if not t.in_range(lnk):
            output = self._direct(index_md,np.exp(lnk))
            diag = np.array([output[pack(i,i,n)] for i in range(n)])
            for i in range(n):
                for j in range(i+1,n):
                    if non_zero[pack(i,j,n)]:
                        norm = np.sqrt(diag[i]*diag[j])
                        corr = np.clip(output[pack(i,j,n)]/norm,-1.,1.)
                        output[pack(i,j,n)] = corr if mode=='logarithmic' else corr*norm
            if mode=='logarithmic':
                for i in range(n):
                    output[pack(i,i,n)] = np.log(diag[i])
            return output

        output = t.interpolate(index_md,lnk)
        if mode=='linear':
            for i in range(n):
                output[pack(i,i,n)] = np.exp(output[pack(i,i,n)])
            for i in range(n):
                for j in range(i+1,n):
                    if non_zero[pack(i,j,n)]:
                        output[pack(i,j,n)] *= np.sqrt(output[pack(i,i,n)]*output[pack(j,j,n)])
                    else:
                        output[pack(i,j,n)] = 0.
        return output


class analytic_spectrum(spectrum_source):
    '''
    :math:`P(k) = A\\exp[(n-1)\\ln(k/k_*) + \\alpha\\ln^2(k/k_*)/2]` for every mode and pair of initial conditions.
    '''
    spec_type = 'analytic_Pk'

    def __init__(self,pert,params=None,precision=None,verbose=0):
        self.para = set_params(analytic_default, params, 'analytic spectrum')
        super().__init__(pert,self.para['k_pivot'],precision,verbose)

        p = self.para
        r_8 = p['r']/8.
        self.A_s, self.n_s, self.alpha_s, self.r = p['A_s'], p['n_s'], p['alpha_s'], p['r']
        self.n_t = -r_8*(2.-r_8-p['n_s']) if p['n_t']=='scc' else p['n_t']
        self.alpha_t = r_8*(r_8+p['n_s']-1.) if p['alpha_t']=='scc' else p['alpha_t']
        self.beta_s = 0.
        return None

    def _analytic_init(self,table):
        '''Amplitude, tilt and running of every pair, mode by mode.'''
        pert, p = self.pert, self.para
        self.amplitude, self.tilt, self.running = [], [], []
        for index_md in range(table.md_size):
            n = table.ic_size[index_md]
            names = pert.ic[index_md]
            amplitude = np.zeros(table.ic_ic_size[index_md])
            tilt = np.zeros_like(amplitude)
            running = np.zeros_like(amplitude)

            for i, name in enumerate(names):
                if name=='ad':
                    one = (self.A_s, self.n_s, self.alpha_s)
                elif name=='ten':
                    one = (self.A_s*self.r, self.n_t+1., self.alpha_t)
                elif name=='vec':
                    raise InvalidInput("There is no analytic parametrisation of vector modes")
                else:
                    one = (self.A_s*p['f_'+name]**2, p['n_'+name], p['alpha_'+name])
                if one[0]<=0:
                    raise InvalidInput(f"Inconsistent input for primordial amplitude: {one[0]:g} for index_md={index_md}, index_ic={i}")
                ii = pack(i,i,n)
                table.is_non_zero[index_md][ii] = True
                amplitude[ii], tilt[ii], running[ii] = one

            for i in range(n):
                for j in range(i+1,n):
                    pair = names[i]+'_'+names[j]
                    c = p['c_'+pair]
                    if c<-1 or c>1:
                        raise InvalidInput(f"Inconsistent input for the {pair} cross-correlation: {c:g}")
                    if c==0:
                        continue
                    ij, ii, jj = pack(i,j,n), pack(i,i,n), pack(j,j,n)
                    table.is_non_zero[index_md][ij] = True
                    amplitude[ij] = np.sqrt(amplitude[ii]*amplitude[jj])*c
                    tilt[ij] = 0.5*(tilt[ii]+tilt[jj])+p['n_'+pair]
                    running[ij] = 0.5*(running[ii]+running[jj])+p['alpha_'+pair]

            self.amplitude.append(amplitude)
            self.tilt.append(tilt)
            self.running.append(running)
        return None

    def analytic_spectrum(self,index_md,index_ic1_ic2,k):
        if not self.table.is_non_zero[index_md][index_ic1_ic2]:
            return 0.*k
        lnkk = np.log(k/self.k_pivot)
        return self.amplitude[index_md][index_ic1_ic2]*np.exp((self.tilt[index_md][index_ic1_ic2]-1.)*lnkk
                                                              +0.5*self.running[index_md][index_ic1_ic2]*lnkk**2)

    def _build(self,lnk):
        table = spectrum_table(lnk,[self.pert.ic_size(md) for md in range(self.pert.md_size)])
        self.table = table
        self._analytic_init(table)
        k = np.exp(lnk)
        for index_md in range(table.md_size):
            n = table.ic_size[index_md]
            for i in range(n):
                table.lnpk[index_md][:,pack(i,i,n)] = np.log(self.analytic_spectrum(index_md,pack(i,i,n),k))
            for i in range(n):
                for j in range(i+1,n):
                    ij = pack(i,j,n)
                    if table.is_non_zero[index_md][ij]:
                        pk1 = self.analytic_spectrum(index_md,pack(i,i,n),k)
                        pk2 = self.analytic_spectrum(index_md,pack(j,j,n),k)
                        #keep the correlation matrix positive definite
                        table.lnpk[index_md][:,ij] = np.clip(self.analytic_spectrum(index_md,ij,k)/np.sqrt(pk1*pk2),-1.,1.)
        return table

    def _direct(self,index_md,k):
        n = self.table.ic_size[index_md]
        output = np.zeros(self.table.ic_ic_size[index_md])
        for i in range(n):
            for j in range(i,n):
                output[pack(i,j,n)] = self.analytic_spectrum(index_md,pack(i,j,n),k)
        return output


class inflation_spectrum(spectrum_source):
    '''
    Spectrum from a simulation of single-field inflation with a given potential or Hubble function.
    '''
    def __init__(self,pert,params=None,spec_type='inflation_V',precision=None,verbose=0,comm=None):
        self.para = set_params(inflation_default, params, 'inflation')
        super().__init__(pert,self.para['k_pivot'],precision,verbose)
        self.spec_type = spec_type
        self.comm = comm

        p = self.para
        if spec_type=='inflation_H':
            model = set_hubble('polynomial',**p)
        else:
            model = set_potential(p['potential'],**p)
        self.simulator = inflation(model,spec_type,k_pivot=p['k_pivot'],phi_pivot=p['phi_pivot'],phi_end=p['phi_end'],
                                   ln_aH_ratio=p['ln_aH_ratio'],precision=precision,verbose=verbose)
        return None

    def __getstate__(self):
        state = self.__dict__.copy()
        state['comm'] = None
        return state

    def _check_modes(self):
        pert = self.pert
        if not pert.has_scalars:
            raise InvalidInput("The inflationary module cannot work if you do not ask for scalar modes")
        if pert.has_vectors:
            raise InvalidInput("The inflationary module cannot work if you ask for vector modes")
        if not pert.has_tensors:
            raise InvalidInput("The inflationary module cannot work if you do not ask for tensor modes")
        if pert.has_isocurvature():
            raise InvalidInput("The inflationary module cannot work if you ask for isocurvature modes")
        if not pert.has_ad:
            raise InvalidInput("The inflationary module only computes adiabatic modes")
        return None

    def _build(self,lnk):
        pert = self.pert
        table = spectrum_table(lnk,[pert.ic_size(md) for md in range(pert.md_size)])
        say(self.verbose,1,' (simulating inflation)')
        lnpk_scalars, lnpk_tensors = self.simulator.solve_inflation(lnk,self.comm)

        ad = pack(pert.index_ic_ad,pert.index_ic_ad,1)
        table.lnpk[pert.index_md_scalars][:,ad] = lnpk_scalars
        table.is_non_zero[pert.index_md_scalars][ad] = True
        table.lnpk[pert.index_md_tensors][:,0] = lnpk_tensors
        table.is_non_zero[pert.index_md_tensors][0] = True
        return table


class external_spectrum(spectrum_source):
    '''
    Spectrum tabulated by an external command; see :func:`primordia.external.run_external_command`.
    '''
    spec_type = 'external_Pk'

    def __init__(self,pert,params=None,precision=None,verbose=0):
        self.para = set_params(external_default, params, 'external spectrum')
        super().__init__(pert,self.para['k_pivot'],precision,verbose)
        if not self.para['command']:
            raise InvalidInput("An external spectrum needs a command")
        return None

    def _check_modes(self):
        pert = self.pert
        if not pert.has_scalars:
            raise InvalidInput("The external Pk module cannot work if you do not ask for scalar modes")
        if pert.has_vectors:
            raise InvalidInput("The external Pk module cannot work if you ask for vector modes")
        if pert.has_isocurvature():
            raise InvalidInput("The external Pk module cannot work if you ask for isocurvature modes")
        if not pert.has_ad:
            raise InvalidInput("The external Pk module only reads adiabatic modes")
        return None

    def _build(self,lnk):
        pert = self.pert
        say(self.verbose,1,' (Pk calculated externally)')
        k, pks, pkt = run_external_command(self.para['command'],self.para['custom'],pert.has_tensors,
                                           pert.k_min,pert.k_max,self.verbose)
        table = spectrum_table(np.log(k),[pert.ic_size(md) for md in range(pert.md_size)])
        table.lnpk[pert.index_md_scalars][:,0] = np.log(pks)
        table.is_non_zero[pert.index_md_scalars][0] = True
        if pert.has_tensors:
            table.lnpk[pert.index_md_tensors][:,0] = np.log(pkt)
            table.is_non_zero[pert.index_md_tensors][0] = True
        return table

#========================================================================================================

def set_source(spec_type,pert,params=None,precision=None,verbose=0,comm=None):
    '''
    The spectrum source for ``spec_type``: ``'analytic_Pk'``, ``'inflation_V'``, ``'inflation_H'``, ``'inflation_V_end'`` or ``'external_Pk'``.
    '''
    if spec_type=='analytic_Pk':
        return analytic_spectrum(pert,params,precision,verbose)
    elif spec_type in ('inflation_V','inflation_H','inflation_V_end'):
        return inflation_spectrum(pert,params,spec_type,precision,verbose,comm)
    elif spec_type=='external_Pk':
        return external_spectrum(pert,params,precision,verbose)
    raise InvalidModel(f"Unknown primordial spectrum type: {spec_type}")


class primordial():
    '''
    Entry point of the module.

    Parameters
    ~~~~~~~~~~

    pert : :class:`primordia.perturbs.perturbs`
        Which modes and which k range are needed.

    spectrum : dict, optional
        ``'type'`` selects the spectrum (default ``'analytic_Pk'``); the other entries are the parameters of that type (see :mod:`primordia.const` for the defaults).

    precision : dict, optional
        Overrides of the precision parameters.

    verbose : int, optional
        Verbosity level.

    comm : MPI communicator, optional
        When given, the k loop of an inflationary simulation is shared among its ranks.

    After :meth:`init`, the attributes ``A_s``, ``n_s``, ``alpha_s``, ``beta_s``, ``r``, ``n_t`` and ``alpha_t`` hold the spectral parameters at the pivot. For non-analytic spectra they are measured from the table by finite differences.

    Methods
    ~~~~~~~
    '''
    def __init__(self,pert,spectrum=None,precision=None,verbose=0,comm=None):
        spectrum = dict(spectrum or {})
        self.spec_type = spectrum.pop('type','analytic_Pk')
        self.pert = pert
        self.verbose = verbose
        self.prec = set_params(precision_default, precision, 'precision')
        self.source = set_source(self.spec_type,pert,spectrum,precision,verbose,comm)
        self.k_pivot = self.source.k_pivot
        self.lnk_size = 0
        self.A_s = self.n_s = self.alpha_s = self.beta_s = None
        self.r = self.n_t = self.alpha_t = None
        return None

    def init(self):
        '''Compute the table of primordial spectra.'''
        if not self.pert.has_perturbations:
            self.lnk_size = 0
            say(self.verbose,1,'No perturbations requested. Primordial module skipped.')
            return None
        say(self.verbose,1,'Computing primordial spectra')

        self.source.init()
        self.lnk_size = self.source.table.lnk_size

        if self.spec_type=='analytic_Pk':
            s = self.source
            self.A_s, self.n_s, self.alpha_s, self.beta_s = s.A_s, s.n_s, s.alpha_s, s.beta_s
            self.r, self.n_t, self.alpha_t = s.r, s.n_t, s.alpha_t
        else:
            self._spectral_parameters()
        return None

    def _spectral_parameters(self):
        pert = self.pert
        dlnk = ln10/self.prec['k_per_decade']
        lnkp = np.log(self.k_pivot)

        if pert.has_scalars:
            ad = pack(pert.index_ic_ad,pert.index_ic_ad,pert.ic_size(pert.index_md_scalars))
            lnpk = [self.spectrum_at(pert.index_md_scalars,'logarithmic',lnkp+i*dlnk)[ad] for i in (-2,-1,0,1,2)]
            self.A_s = np.exp(lnpk[2])
            self.n_s = (lnpk[3]-lnpk[1])/(2.*dlnk)+1.
            self.alpha_s = (lnpk[3]-2.*lnpk[2]+lnpk[1])/dlnk**2
            self.beta_s = (lnpk[4]-2.*lnpk[3]+2.*lnpk[1]-lnpk[0])/(2.*dlnk**3)
            say(self.verbose,1,f' -> A_s={self.A_s:g}  n_s={self.n_s:g}  alpha_s={self.alpha_s:g}')

        if pert.has_tensors:
            lnpk = [self.spectrum_at(pert.index_md_tensors,'logarithmic',lnkp+i*dlnk)[0] for i in (-1,0,1)]
            self.r = np.exp(lnpk[1])/self.A_s
            self.n_t = (lnpk[2]-lnpk[0])/(2.*dlnk)
            self.alpha_t = (lnpk[2]-2.*lnpk[1]+lnpk[0])/dlnk**2
            say(self.verbose,1,f' -> r={self.r:g}  n_t={self.n_t:g}  alpha_t={self.alpha_t:g}')
        return None

    @property
    def table(self):
        return self.source.table

    @property
    def lnk(self):
        return self.source.table.lnk

    def spectrum_at(self,index_md,mode,value):
        '''See :meth:`spectrum_source.spectrum_at`.'''
        return self.source.spectrum_at(index_md,mode,value)

    def free(self):
        self.source.free()
        self.lnk_size = 0
        return None
