import numpy as np
from scipy.integrate import solve_ivp
from .errors import IntegrationFailed, StepTooSmall

def generic_integrator(derivs,tau_start,tau_end,y,tol,smallest_allowed_variation):
    '''
    Advance the state ``y`` from ``tau_start`` to ``tau_end`` with an adaptive Runge-Kutta (Dormand-Prince) integrator.

    Arguments
    ---------
    derivs : callable
        ``derivs(tau, y)`` returning dy/dtau.

    tau_start, tau_end : float
        Conformal time interval. ``tau_end`` may be smaller than ``tau_start``.

    y : 1D array
        State at ``tau_start``.

    tol : float
        Relative tolerance. The absolute tolerance of each component is ``tol*(|y|+|dtau*dy|)`` evaluated at the start, so that components crossing zero are still controlled on the scale of their variation.

    smallest_allowed_variation : float
        Smallest relative step allowed.

    Returns
    -------
    1D array
        State at ``tau_end``.
    '''
    dtau = tau_end-tau_start
    scale = np.abs(tau_start) if tau_start!=0 else np.abs(dtau)
    if np.abs(dtau)<smallest_allowed_variation*scale:
        raise StepTooSmall(f"Integration step dtau = {dtau:e} too small compared to tau = {tau_start:e}")

    dy = derivs(tau_start,y)
    atol = tol*(np.abs(y)+np.abs(dtau*dy))
    atol[atol==0] = np.finfo(float).tiny

    sol = solve_ivp(derivs,(tau_start,tau_end),y,method='RK45',rtol=tol,atol=atol)
    if not sol.success:
        raise IntegrationFailed(f"Integration from tau = {tau_start:e} to {tau_end:e} failed: {sol.message}")
    return sol.y[:,-1]
