'''
Exceptions raised by primordia. Every one of them aborts the computation in progress; nothing is retried and no partially filled table is returned.
'''

class PrimordialError(Exception):
    '''Base class for all errors raised by this package.'''


class InvalidModel(PrimordialError, ValueError):
    '''Unknown potential, Hubble-function or spectrum-type tag, or a model which does not fit the requested spectrum type.'''


class InvalidInput(PrimordialError, ValueError):
    '''Inconsistent or out-of-range configuration, or a wavenumber outside a tabulated spectrum.'''


class UnphysicalPotential(PrimordialError):
    '''
    The potential (or Hubble function) leaves the region where the single-field computation makes sense: V<=0 or dV/dphi>=0, H<0 or dH/dphi>0.
    '''
    def __init__(self, msg, phi=None):
        super().__init__(msg)
        self.phi = phi

    def __reduce__(self):
        return (self.__class__, (str(self), self.phi))


class SlowRollViolated(PrimordialError):
    '''The first slow-roll parameter crossed 1 during an evolution that required inflation to go on.'''
    def __init__(self, phi):
        super().__init__(f"Inflation ended (epsilon crossed 1) at phi = {phi:e}, before the target was reached")
        self.phi = phi

    def __reduce__(self):
        return (self.__class__, (self.phi,))


class AttractorNotFound(PrimordialError):
    '''Fixed-point iteration for the slow-roll attractor, or the search for the initial field value, did not converge.'''
    def __init__(self, phi, precision, counter, msg=None):
        if msg is None:
            msg = f"No attractor found near phi = {phi:e} with relative precision {precision:g} after {counter} iterations"
        super().__init__(msg)
        self.phi = phi
        self.precision = precision
        self.counter = counter

    def __reduce__(self):
        return (self.__class__, (self.phi, self.precision, self.counter, str(self)))


class StepTooSmall(PrimordialError):
    '''The conformal-time step became smaller than the allowed relative variation.'''


class IntegrationFailed(PrimordialError):
    '''The ODE integrator reported that it could not reach the end of the requested interval.'''


class NegativeSpectrum(PrimordialError):
    '''A computed curvature or tensor power spectrum is not positive.'''


class ExternalSpectrumError(PrimordialError):
    '''The external command failed or produced output which cannot be used as a spectrum table.'''
