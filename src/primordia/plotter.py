#My own plotting style.

import matplotlib.pyplot as plt
import numpy as np

from .errors import InvalidInput

labels = {'scalars':r'$\mathcal{P}_{\mathcal{R}}$','tensors':r'$\mathcal{P}_{h}$'}

def plotter(k,pk,usetex=True,filename=None):
    '''
    Log-log plot of primordial spectra.

    Arguments
    ---------
    k : 1D array
        Wavenumbers in 1/Mpc.

    pk : 1D array or dict
        One spectrum, or a dictionary of spectra keyed by 'scalars', 'tensors' or any label.

    usetex : bool, optional
        Render the text with LaTeX.

    filename : str, optional
        Save the figure there instead of showing it.

    Returns
    -------
    matplotlib figure
    '''
    plt.rc('text', usetex=usetex)
    plt.rc('font', family='serif')

    fig,ax=plt.subplots(figsize=(8.3,7.5),dpi=300)
    fig.subplots_adjust(left=0.12, bottom=0.07, right=0.88, top=0.97)
    clr=['b','r','limegreen']
    linsty=['-','--',':']
    if type(pk)==dict:
        for i, key in enumerate(pk):
            ax.plot(k,pk[key],color=clr[i%3],ls=linsty[i%3],label=labels.get(key,key))
        ax.legend(fontsize=18,frameon=False)
        ax.set_ylabel(r'$\mathcal{P}(k)$',fontsize=20)
    elif type(pk)==np.ndarray:
        ax.plot(k,pk,'b')
        ax.set_ylabel(labels['scalars'],fontsize=20)
    else:
        raise InvalidInput("Give pk as an array or a dictionary of arrays, eg. {'scalars':pks,'tensors':pkt}")

    ax.set_xscale('log')
    ax.set_yscale('log')
    ax.set_xlabel(r'$k\,(\mathrm{Mpc^{-1}})$',fontsize=20)
    ax.tick_params(axis='both', which='major', length=5, width=1, labelsize=20,direction='in')
    ax.tick_params(axis='both', which='minor', length=3, width=1, direction='in')
    ax.yaxis.set_ticks_position('both')
    ax.xaxis.set_ticks_position('both')
    if filename is None:
        plt.show()
    else:
        fig.savefig(filename)
    return fig
