import numpy as np
from .errors import InvalidInput

def print_banner():
    banner = """\n\033[94m
    ██████╗ ██████╗ ██╗███╗   ███╗ ██████╗ ██████╗ ██████╗ ██╗ █████╗
    ██╔══██╗██╔══██╗██║████╗ ████║██╔═══██╗██╔══██╗██╔══██╗██║██╔══██╗
    ██████╔╝██████╔╝██║██╔████╔██║██║   ██║██████╔╝██║  ██║██║███████║
    ██╔═══╝ ██╔══██╗██║██║╚██╔╝██║██║   ██║██╔══██╗██║  ██║██║██╔══██║
    ██║     ██║  ██║██║██║ ╚═╝ ██║╚██████╔╝██║  ██║██████╔╝██║██║  ██║
    ╚═╝     ╚═╝  ╚═╝╚═╝╚═╝     ╚═╝ ╚═════╝ ╚═╝  ╚═╝╚═════╝ ╚═╝╚═╝  ╚═╝
    \033[00m\n"""
    print(banner)
    return None

def pack(i,j,n):
    '''
    Offset of the unordered pair (i,j) in the packed upper triangle of a symmetric n x n matrix.

    Arguments
    ---------
    i, j : int
        Row and column, 0 <= i,j < n. The result does not depend on their order.
    n : int
        Size of the matrix.

    Returns
    -------
    int
        A number in [0, n(n+1)/2). Diagonal pairs (i,i) come first in each row block.
    '''
    if i>j:
        i,j = j,i
    return j + i*n - i*(i+1)//2

def ic_ic_size(n):
    return n*(n+1)//2

def set_params(default, user, what):
    '''
    Merge the user dictionary on top of the defaults. Keys which have no default are refused.
    '''
    if user is None:
        return dict(default)
    unknown = [key for key in user if key not in default]
    if unknown:
        raise InvalidInput(f"Unknown {what} parameter(s): {', '.join(unknown)}")
    return {**default, **user}

def say(verbose, level, *args):
    '''Print only if the verbosity is at least ``level``.'''
    if verbose>=level:
        print(*args)
    return None
