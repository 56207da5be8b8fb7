'''
The perturbation context. It tells the primordial module which k range is needed and which modes and initial conditions are switched on.
'''
from .const import perturbs_default, ic_names
from .misc import set_params, ic_ic_size

class perturbs():
    '''
    Use this class to set which perturbations are requested.

    Parameters
    ~~~~~~~~~~

    k_min, k_max : float
        Range of wavenumbers (1/Mpc) for which the primordial spectrum must be available.

    has_scalars, has_tensors, has_vectors : bool
        Which modes are requested.

    has_ad, has_bi, has_cdi, has_nid, has_niv : bool
        Which scalar initial conditions are requested: adiabatic, baryon isocurvature, CDM isocurvature, neutrino density and neutrino velocity isocurvature.

    Indices of modes (``index_md_scalars``, ``index_md_tensors``, ``index_md_vectors``) and of initial conditions within each mode (``index_ic_ad`` etc., ``index_ic_ten``) are set only for what is switched on.
    '''
    def __init__(self,pert_dic=None,**kwargs):
        para = set_params(perturbs_default, {**(pert_dic or {}), **kwargs}, 'perturbation')

        self.k_min = para['k_min']
        self.k_max = para['k_max']
        self.has_scalars = bool(para['has_scalars'])
        self.has_tensors = bool(para['has_tensors'])
        self.has_vectors = bool(para['has_vectors'])
        self.has_perturbations = self.has_scalars or self.has_tensors or self.has_vectors

        self.ic = {}    #Names of the initial conditions per mode, in index order
        self.md_size = 0
        if self.has_scalars:
            self.index_md_scalars = self.md_size
            self.md_size += 1
            names = [name for name in ic_names if para['has_'+name]]
            for index,name in enumerate(names):
                setattr(self,'index_ic_'+name,index)
            self.ic[self.index_md_scalars] = names
        if self.has_tensors:
            self.index_md_tensors = self.md_size
            self.md_size += 1
            self.index_ic_ten = 0
            self.ic[self.index_md_tensors] = ['ten']
        if self.has_vectors:
            self.index_md_vectors = self.md_size
            self.md_size += 1
            self.ic[self.index_md_vectors] = ['vec']

        self.has_ad = self.has_scalars and bool(para['has_ad'])
        self.has_bi = self.has_scalars and bool(para['has_bi'])
        self.has_cdi = self.has_scalars and bool(para['has_cdi'])
        self.has_nid = self.has_scalars and bool(para['has_nid'])
        self.has_niv = self.has_scalars and bool(para['has_niv'])
        return None

    def ic_size(self,index_md):
        return len(self.ic[index_md])

    def ic_ic_size(self,index_md):
        return ic_ic_size(self.ic_size(index_md))

    def has_isocurvature(self):
        return self.has_bi or self.has_cdi or self.has_nid or self.has_niv
