'''
Krylov Settings File

Algorithm objects (Lanczos / Arnoldi) double as the settings containers for a computation,
so passing one to exponentiate() fixes every parameter of the run.
'''

from termcolor import cprint

from krylovexp.util import Freezable
from krylovexp import orthonormal

class KrylovSettings(Freezable): # pylint: disable=too-few-public-methods
    'Settings common to the krylov algorithms'

    STDOUT_NONE, STDOUT_NORMAL, STDOUT_VERBOSE, STDOUT_DEBUG = range(4)

    def __init__(self, krylovdim=30, tol=1e-12, maxiter=100, orth=None):
        self.krylovdim = krylovdim # maximum dimension of the krylov subspace (basis vectors kept in memory)
        self.tol = tol # requested accuracy
        self.maxiter = maxiter # maximum number of restarts (outer iterations)

        # orthogonalization algorithm, see orthonormal.py
        self.orth = orthonormal.MGSIR if orth is None else orth

        self.stdout = KrylovSettings.STDOUT_NONE
        self.stdout_colors = [None, "white", "blue", "yellow"] # colors for each level of printing

    def update(self, **kwargs):
        '''assign settings from keyword arguments

        unknown names raise a TypeError (the object is frozen), returns self'''

        for key, value in kwargs.items():
            setattr(self, key, value)

        return self

    def check(self):
        'check that the settings are usable, raising ValueError otherwise'

        if int(self.krylovdim) != self.krylovdim or self.krylovdim < 2:
            raise ValueError("krylovdim should be an integer >= 2, got {}".format(self.krylovdim))

        if not self.tol > 0:
            raise ValueError("tol should be positive, got {}".format(self.tol))

        if int(self.maxiter) != self.maxiter or self.maxiter < 1:
            raise ValueError("maxiter should be an integer >= 1, got {}".format(self.maxiter))

        if not isinstance(self.orth, orthonormal.Orthogonalizer):
            raise ValueError("orth should be an Orthogonalizer, got {}".format(type(self.orth)))

    def print_normal(self, msg):
        'print function for STDOUT_NORMAL and above'

        if self.stdout >= KrylovSettings.STDOUT_NORMAL:
            cprint(msg, self.stdout_colors[KrylovSettings.STDOUT_NORMAL])

    def print_verbose(self, msg):
        'print function for STDOUT_VERBOSE and above'

        if self.stdout >= KrylovSettings.STDOUT_VERBOSE:
            cprint(msg, self.stdout_colors[KrylovSettings.STDOUT_VERBOSE])

    def print_debug(self, msg):
        'print function for STDOUT_DEBUG and above'

        if self.stdout >= KrylovSettings.STDOUT_DEBUG:
            cprint(msg, self.stdout_colors[KrylovSettings.STDOUT_DEBUG])

class Lanczos(KrylovSettings): # pylint: disable=too-few-public-methods
    'Lanczos settings, for real symmetric or complex hermitian operators'

    def __init__(self, krylovdim=30, tol=1e-12, maxiter=100, orth=None, fullreorth=False):
        KrylovSettings.__init__(self, krylovdim, tol, maxiter, orth)

        # orthogonalize each new lanczos vector against the whole basis, not only the last two
        self.fullreorth = fullreorth

        self.freeze_attrs()

    def __repr__(self):
        return "Lanczos(krylovdim={}, tol={}, maxiter={}, orth={}, fullreorth={})".format(
            self.krylovdim, self.tol, self.maxiter, self.orth, self.fullreorth)

class Arnoldi(KrylovSettings): # pylint: disable=too-few-public-methods
    'Arnoldi settings, for general operators'

    def __init__(self, krylovdim=30, tol=1e-12, maxiter=100, orth=None):
        KrylovSettings.__init__(self, krylovdim, tol, maxiter, orth)

        self.freeze_attrs()

    def __repr__(self):
        return "Arnoldi(krylovdim={}, tol={}, maxiter={}, orth={})".format(
            self.krylovdim, self.tol, self.maxiter, self.orth)
