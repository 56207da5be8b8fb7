'''
Reading a primordial spectrum from an external program. The program writes lines ``k P_s [P_t]`` (k in 1/Mpc, strictly ascending) on its standard output.
'''
import subprocess
import numpy as np

from .const import BUFFER_INITIAL_SIZE, N_CUSTOM
from .errors import ExternalSpectrumError
from .misc import say

class growable_buffer():
    '''
    Row buffer of fixed width whose capacity doubles whenever it is full.
    '''
    def __init__(self,columns,size=BUFFER_INITIAL_SIZE):
        self.data = np.zeros((size,columns))
        self.n = 0
        return None

    @property
    def capacity(self):
        return self.data.shape[0]

    def append(self,row):
        if self.n+1>self.capacity:
            self.data = np.concatenate((self.data,np.zeros_like(self.data)))
        self.data[self.n] = row
        self.n += 1
        return None

    def view(self):
        return self.data[:self.n]


def build_command(command,custom=None):
    '''
    Full command line. A plain ``cat <file>`` is run as it is; every other command gets the custom parameters appended, formatted with ``%g``.
    '''
    if command.startswith('cat '):
        return command
    if custom is None:
        custom = [0.]*N_CUSTOM
    if len(custom)!=N_CUSTOM:
        raise ExternalSpectrumError(f"Exactly {N_CUSTOM} custom parameters are passed to the external command, got {len(custom)}")
    return command+' '+' '.join('%g' %value for value in custom)

def run_external_command(command,custom=None,has_tensors=True,k_min=None,k_max=None,verbose=0):
    '''
    Run the external command and read its spectrum.

    Arguments
    ---------
    command : str
        Shell command producing the table.

    custom : list, optional
        The 10 custom parameters handed to the command.

    has_tensors : bool, optional
        Whether a third column with the tensor spectrum is expected.

    k_min, k_max : float, optional
        The table must contain at least 2 points at or below ``k_min`` and 2 at or above ``k_max``.

    Returns
    -------
    tuple
        Arrays k, P_s and P_t (the last one ``None`` without tensors).
    '''
    full_command = build_command(command,custom)
    say(verbose,1,' -> running: '+full_command)

    n_col = 3 if has_tensors else 2
    table = growable_buffer(n_col)
    with subprocess.Popen(full_command,shell=True,stdout=subprocess.PIPE,text=True) as process:
        for n_line, line in enumerate(process.stdout,start=1):
            fields = line.split()
            if not fields or fields[0].startswith('#'):
                continue
            try:
                row = [float(value) for value in fields[:n_col]]
            except ValueError:
                raise ExternalSpectrumError(f"Could not read line {n_line} of the external spectrum: {line.strip()}") from None
            if len(row)<n_col:
                raise ExternalSpectrumError(f"Line {n_line} of the external spectrum has {len(row)} column(s), {n_col} expected")
            if table.n>0 and row[0]<=table.data[table.n-1,0]:
                raise ExternalSpectrumError("The k's are not strictly sorted in ascending order, as it is required for the calculation of the splines")
            table.append(row)
    if process.returncode!=0:
        raise ExternalSpectrumError(f"The external command '{full_command}' exited with status {process.returncode}. Try running it by hand to check for errors")

    data = table.view()
    if table.n<2:
        raise ExternalSpectrumError(f"The external command returned {table.n} point(s); at least 2 are needed")
    if k_min is not None and data[1,0]>k_min:
        raise ExternalSpectrumError(f"Your table for the primordial spectrum does not have at least 2 points before the minimum value of k: {k_min:e}. The spline interpolation would not be safe")
    if k_max is not None and data[-2,0]<k_max:
        raise ExternalSpectrumError(f"Your table for the primordial spectrum does not have at least 2 points after the maximum value of k: {k_max:e}. The spline interpolation would not be safe")
    if np.any(data<=0):
        raise ExternalSpectrumError("The external spectrum contains non-positive values of k or P(k)")

    k = data[:,0].copy()
    pks = data[:,1].copy()
    pkt = data[:,2].copy() if has_tensors else None
    return k, pks, pkt
