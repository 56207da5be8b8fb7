import numpy as np
from mpi4py import MPI
from mpi4py.util import pkl5
import time
import os
import pickle
from time import localtime, strftime

from .const import analytic_default, inflation_default, external_default
from .misc import print_banner
from .perturbs import perturbs
from .primordial import primordial

#--------------------------------------------------------------------------------------------

#The following 2 functions are useful if you want to save and load a `pipeline` object.
def save_pipeline(obj, filename):
    '''Saves the class object :class:`pipeline`.

    The object is saved in the folder where all the other outputs of the run are.

    Parameters
    ~~~~~~~~~~

    obj : class
        The class object you want to save.

    filename : str
        A file name only, not the full path. obj will be saved in the ``obj.path`` directory.
    '''
    if MPI.COMM_WORLD.Get_rank()==0:
        if filename[-4:]!='.pkl': filename=filename+'.pkl'
        fullpath = obj.path+filename
        with open(fullpath, 'wb') as outp:
            pickle.dump(obj, outp, pickle.HIGHEST_PROTOCOL)
    return None

def load_pipeline(filename):
    '''To load the class object :class:`pipeline`.

    Parameters
    ~~~~~~~~~~

    filename : str
        Full path of the file written by :func:`save_pipeline()`, with the extension ``.pkl``.

    Returns
    ~~~~~~~

    class object
    '''
    with open(filename, 'rb') as inp:
        obj = pickle.load(inp)
    obj.comm = pkl5.Intracomm(MPI.COMM_WORLD)
    obj.cpu_ind = obj.comm.Get_rank()
    obj.n_cpu = obj.comm.Get_size()
    if obj.cpu_ind==0: print('Loaded the primordia pipeline class object.\n')
    return obj

#--------------------------------------------------------------------------------------------

class pipeline():
    '''
    This class computes the primordial spectra and writes them to disk. The inputs are dictionaries, for example:

    spectrum = {'type':'inflation_V','V0':1.25e-13,'V1':-1.12e-14,'V2':-6.95e-14},
    perturbs_dic = {'k_min':1e-5,'k_max':1.,'has_tensors':True},
    precision = {'k_per_decade':20}

    Parameters
    ~~~~~~~~~~

    spectrum : dictionary, optional
        ``type`` is one of 'analytic_Pk' (default), 'inflation_V', 'inflation_H', 'inflation_V_end' and 'external_Pk'. The remaining entries are the parameters of that type; whatever is not given takes its default value from :mod:`primordia.const`.

    perturbs_dic : dictionary, optional
        Range of wavenumbers and the requested modes and initial conditions. See :class:`primordia.perturbs.perturbs`.

    precision : dictionary, optional
        Precision parameters to override.

    path : str, optional
        Folder in which a new ``output_<timestamp>/`` folder is created. Default ``'primordia_outputs/'``.

    verbose : int, optional
        0 for silence, 1 for the main messages and a progress bar, 2 for details. Default ``1``.

    Under MPI the wavenumbers of an inflationary simulation are shared among the CPUs. Only rank 0 prints and writes.

    Methods
    ~~~~~~~
    '''
    def __init__(self,spectrum=None,perturbs_dic=None,precision=None,path='primordia_outputs/',verbose=1):

        if spectrum is None:
            spectrum = {'type':'analytic_Pk'}
        self.spectrum = {'type':'analytic_Pk',**spectrum}
        self.spec_type = self.spectrum['type']
        self.perturbs_dic = perturbs_dic or {}
        self.precision = precision or {}

        self.comm = pkl5.Intracomm(MPI.COMM_WORLD)
        self.cpu_ind = self.comm.Get_rank()
        self.n_cpu = self.comm.Get_size()
        self.verbose = verbose if self.cpu_ind==0 else 0

        #Create an output folder where all results will be saved.
        self.path=path
        self.timestamp=None
        if self.cpu_ind==0:
            if self.verbose>0: print_banner()
            if os.path.isdir(self.path)==False:
                print('The requested directory does not exist. Creating ',self.path)
                os.makedirs(self.path)

            self.timestamp = strftime("%Y%m%d-%H%M%S", localtime())
            self.path = self.path + 'output_'+self.timestamp+'/'
            os.mkdir(self.path)

            self.formatted_timestamp = self.timestamp[9:11]+':'+self.timestamp[11:13]+':'+self.timestamp[13:15]+' '+self.timestamp[6:8]+'/'+self.timestamp[4:6]+'/'+ self.timestamp[:4]
        self.path, self.timestamp = self.comm.bcast((self.path,self.timestamp),root=0)
        self.pm = None
        return None

    def __getstate__(self):
        state = self.__dict__.copy()
        state['comm'] = None
        return state

    def _given(self):
        '''Spectrum parameters, defaults filled in.'''
        if self.spec_type=='analytic_Pk':
            default = analytic_default
        elif self.spec_type=='external_Pk':
            default = external_default
        else:
            default = inflation_default
        return {key:value for key,value in {**default,**self.spectrum}.items() if key!='type'}

    def _write_summary(self, elapsed_time):
        '''
        Given the elapsed time of the code execution write the main summary of the run.
        '''
        sumfile = self.path+"primordial_"+self.timestamp+".txt"
        with open(sumfile, "w") as myfile:
            myfile.write('\nPRIMORDIA\n')
            myfile.write('\nThis is output_'+self.timestamp)
            myfile.write('\n------------------------------\n')
            myfile.write('\nTime stamp: '+self.formatted_timestamp)
            myfile.write('\n\nExecution time: %.2f seconds' %elapsed_time)
            myfile.write('\n\nSpectrum type: '+self.spec_type)
            myfile.write('\n\nParameters given:\n')
            myfile.write('-----------------')
            for key, value in self._given().items():
                myfile.write('\n{} = {}'.format(key,value))
            myfile.write('\n\nk_min = {}'.format(self.pert.k_min))
            myfile.write('\nk_max = {}'.format(self.pert.k_max))

            pm = self.pm
            if pm.lnk_size>0:
                myfile.write('\n\nNumber of wavenumbers = {}'.format(pm.lnk_size))
                if pm.A_s is not None:
                    myfile.write('\n\nA_s = {:.6e}'.format(pm.A_s))
                    myfile.write('\nn_s = {:.6f}'.format(pm.n_s))
                    myfile.write('\nalpha_s = {:.6e}'.format(pm.alpha_s))
                    myfile.write('\nbeta_s = {:.6e}'.format(pm.beta_s))
                if pm.r is not None:
                    myfile.write('\nr = {:.6e}'.format(pm.r))
                    myfile.write('\nn_t = {:.6e}'.format(pm.n_t))
                    myfile.write('\nalpha_t = {:.6e}'.format(pm.alpha_t))
            else:
                myfile.write('\n\nNo perturbations requested.')
            myfile.write('\n')
        return None

    def print_input(self):
        '''Prints the input parameters you gave.'''
        print('\n\033[93mSpectrum type: '+self.spec_type)
        print('\nParameters given:\n')
        print('-----------------')
        for key, value in self._given().items():
            print('{} = {}'.format(key,value))
        for key, value in self.perturbs_dic.items():
            print('{} = {}'.format(key,value))
        print('\033[00m')
        return None

    def run(self):
        '''
        Computes the primordial spectra. Rank 0 saves ``lnk``, ``lnpk_scalars`` and ``lnpk_tensors`` (``.npy``, one column per pair of initial conditions) and a summary file.

        Returns
        -------
        :class:`primordia.primordial.primordial`
        '''
        st = time.process_time()
        self.pert = perturbs(self.perturbs_dic)
        self.pm = primordial(self.pert,self.spectrum,self.precision,self.verbose,self.comm)
        self.pm.init()
        et = time.process_time()
        elapsed_time = et - st

        if self.cpu_ind==0:
            pm = self.pm
            if pm.lnk_size>0:
                np.save(self.path+'lnk',pm.lnk)
                if self.pert.has_scalars:
                    np.save(self.path+'lnpk_scalars',pm.table.lnpk[self.pert.index_md_scalars])
                if self.pert.has_tensors:
                    np.save(self.path+'lnpk_tensors',pm.table.lnpk[self.pert.index_md_tensors])
                print('\033[32mYour outputs have been saved into folder:',self.path,'\033[00m')

            if self.verbose>0: print('\nExecution time: %.2f seconds' %elapsed_time)
            self._write_summary(elapsed_time=elapsed_time)
            save_pipeline(self,'pipe')
            if self.verbose>0: print('\n\033[94m================ End of PRIMORDIA ================\033[00m\n')
        return self.pm
