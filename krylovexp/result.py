'''
Result objects returned by the krylov algorithms
'''

from krylovexp.util import Freezable

class ConvergenceInfo(Freezable): # pylint: disable=too-few-public-methods
    'convergence report, returned together with the result vector'

    def __init__(self, converged, residual, normres, numiter, numops, tol=None):
        self.converged = converged # 1 if the requested tolerance was reached, 0 otherwise
        self.residual = residual # None when there is no concept of a residual (matrix exponential)
        self.normres = normres # error estimate (or residual norm)
        self.numiter = numiter # number of outer iterations (restarts)
        self.numops = numops # number of operator applications
        self.tol = tol # tolerance that was actually used, can be larger than the requested one

        self.freeze_attrs()

    def __repr__(self):
        return "ConvergenceInfo(converged={}, residual={}, normres={:.3e}, numiter={}, numops={}, tol={})".format(
            self.converged, self.residual, self.normres, self.numiter, self.numops, self.tol)
