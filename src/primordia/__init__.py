from .perturbs import perturbs
from .primordial import primordial, get_lnk_list
from .injection import inj_params

__all__ = ["perturbs", "primordial", "get_lnk_list", "inj_params"]
