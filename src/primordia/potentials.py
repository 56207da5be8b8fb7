'''
Inflaton models. Use these classes to set your potential V(phi) or, for the Hubble-flow formulation, your H(phi).

All quantities are in units G=1. A potential object returns ``(V, dV, ddV)`` when called with the field value and a Hubble object returns ``(H, dH, ddH, dddH)``.
'''
import inspect
import numpy as np
from .errors import InvalidModel

class poly_potential():
    def __init__(self,V0=1.25e-13,V1=-1.12e-14,V2=-6.95e-14,V3=0.,V4=0.,phi_pivot=0.):
        '''
        Quartic Taylor polynomial around ``phi_pivot``,

        :math:`V = V_0 + V_1\\Delta\\phi + V_2\\Delta\\phi^2/2 + V_3\\Delta\\phi^3/6 + V_4\\Delta\\phi^4/24`, with :math:`\\Delta\\phi=\\phi-\\phi_{\\mathrm{pivot}}`.
        '''
        self.name = 'polynomial'
        self.para = {'V0':V0,'V1':V1,'V2':V2,'V3':V3,'V4':V4,'phi_pivot':phi_pivot}
        self.V0, self.V1, self.V2, self.V3, self.V4 = V0, V1, V2, V3, V4
        self.phi_pivot = phi_pivot
        return None

    def __call__(self,phi):
        dphi = phi-self.phi_pivot
        V = self.V0 + dphi*self.V1 + dphi**2/2*self.V2 + dphi**3/6*self.V3 + dphi**4/24*self.V4
        dV = self.V1 + dphi*self.V2 + dphi**2/2*self.V3 + dphi**3/6*self.V4
        ddV = self.V2 + dphi*self.V3 + dphi**2/2*self.V4
        return V, dV, ddV


class natural_potential():
    def __init__(self,V0=1.,V1=1.):
        '''
        Natural inflation, :math:`V = V_0(1+\\cos(\\phi/V_1))`. Here ``V1`` plays the role of the decay constant f.
        '''
        self.name = 'natural'
        self.para = {'V0':V0,'V1':V1}
        self.V0, self.V1 = V0, V1
        self.phi_pivot = 0.
        return None

    def __call__(self,phi):
        x = phi/self.V1
        V = self.V0*(1.+np.cos(x))
        dV = -self.V0/self.V1*np.sin(x)
        ddV = -self.V0/self.V1**2*np.cos(x)
        return V, dV, ddV


class poly_hubble():
    def __init__(self,H0=3.69e-6,H1=-5.84e-7,H2=0.,H3=0.,H4=0.):
        '''
        Quartic Hubble function :math:`H = H_0 + H_1\\phi + H_2\\phi^2/2 + H_3\\phi^3/6 + H_4\\phi^4/24`.

        The field value at the pivot scale is always 0 in this formulation.
        '''
        self.name = 'polynomial'
        self.para = {'H0':H0,'H1':H1,'H2':H2,'H3':H3,'H4':H4}
        self.H0, self.H1, self.H2, self.H3, self.H4 = H0, H1, H2, H3, H4
        return None

    def __call__(self,phi):
        H = self.H0 + phi*self.H1 + phi**2/2*self.H2 + phi**3/6*self.H3 + phi**4/24*self.H4
        dH = self.H1 + phi*self.H2 + phi**2/2*self.H3 + phi**3/6*self.H4
        ddH = self.H2 + phi*self.H3 + phi**2/2*self.H4
        dddH = self.H3 + phi*self.H4
        return H, dH, ddH, dddH

#--------------------------------------------------------------------------------------------

potential_models = {'polynomial':poly_potential,'natural':natural_potential}
hubble_models = {'polynomial':poly_hubble}

def _pick(models, name, para, what):
    try:
        cls = models[name]
    except KeyError:
        raise InvalidModel(f"Unknown {what} type: {name}") from None
    keys = inspect.signature(cls).parameters
    return cls(**{key:para[key] for key in keys if key in para})

def set_potential(name='polynomial',**para):
    '''
    Return the potential model called ``name`` built from those entries of ``para`` it understands. Raises :class:`InvalidModel` for an unknown name.
    '''
    return _pick(potential_models, name, para, 'potential')

def set_hubble(name='polynomial',**para):
    return _pick(hubble_models, name, para, 'Hubble function')
