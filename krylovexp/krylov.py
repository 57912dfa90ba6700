'''
Krylov iterations (lanczos and arnoldi)

An iterator holds the operator, the starting vector and the settings. It creates a factorization
with initialize() and then modifies it in place with expand(), shrink() and
initialize_inplace(). Factorization storage is allocated once (up to settings.krylovdim vectors)
and reused after restarts.
'''

import numpy as np

from krylovexp.util import Freezable, matrix_to_string
from krylovexp.timerutil import Timers
from krylovexp.settings import Lanczos, Arnoldi
from krylovexp.factorization import LanczosFactorization, ArnoldiFactorization
from krylovexp.orthonormal import orthogonalize, REORTH_NONE
from krylovexp import linops

def normalize_start_vec(x0):
    'check the starting vector and return a tuple: scaled_vec, original_norm'

    x0 = np.asarray(x0)

    if x0.size == 0:
        raise ValueError("starting vector is empty")

    if not np.all(np.isfinite(x0)):
        raise ValueError("starting vector has non-finite entries")

    norm = linops.norm(x0)

    if norm == 0:
        raise ValueError("starting vector is zero, the krylov subspace is empty")

    return x0 / norm, norm

class KrylovIterator(Freezable):
    'base class with the shared parts of lanczos and arnoldi iterators'

    def __init__(self, operator, x0, settings):
        self.operator = operator
        self.x0 = np.asarray(x0)
        self.settings = settings

        self.num_ops = 0 # number of operator applications

    def apply(self, vec):
        'apply the operator to a vector and count it'

        self.num_ops += 1

        return linops.apply(self.operator, vec)

    def is_exhausted(self, fact):
        '''has the factorization found an invariant subspace?

        if so, the residual is rounding noise and should not be normalized into a new basis vector
        '''

        r = fact.residual()

        return r is None or fact.normres() <= linops.vec_length(r) * linops.real_eps(r.dtype)

    def initialize(self):
        'create a new factorization of dimension 1'

        fact = self.make_factorization()

        return self.initialize_inplace(fact)

    def make_factorization(self):
        'create an empty factorization object'

        raise NotImplementedError("make_factorization() is implemented by subclasses")

    def initialize_inplace(self, fact, x0=None):
        'reset fact to dimension 1 (starting from x0 if given), reusing its memory'

        raise NotImplementedError("initialize_inplace() is implemented by subclasses")

    def expand(self, fact):
        'increase the dimension of the factorization by one'

        raise NotImplementedError("expand() is implemented by subclasses")

    def shrink(self, fact, k):
        'reduce the dimension of the factorization to k'

        raise NotImplementedError("shrink() is implemented by subclasses")

class LanczosIterator(KrylovIterator):
    '''Lanczos iteration (three-term recurrence) for a real symmetric or complex hermitian operator

    keyword arguments are passed to the Lanczos settings constructor if settings is None
    '''

    def __init__(self, operator, x0, settings=None, **kwargs):
        if settings is None:
            settings = Lanczos(**kwargs)
        else:
            assert not kwargs, "pass either settings or keyword arguments, not both"

        assert isinstance(settings, Lanczos), "LanczosIterator needs Lanczos settings, got {}".format(settings)

        KrylovIterator.__init__(self, operator, x0, settings)

        self.freeze_attrs()

    def make_factorization(self):
        fact = LanczosFactorization(self.settings.krylovdim)
        fact.sizehint(self.settings.krylovdim)

        return fact

    def initialize_inplace(self, fact, x0=None):
        assert isinstance(fact, LanczosFactorization)

        if x0 is not None:
            self.x0 = np.asarray(x0)

        v, _ = normalize_start_vec(self.x0)

        basis = fact.basis()
        basis.clear()
        basis.append(v)

        w = self.apply(basis[0])
        r, coeffs = orthogonalize(w, basis, self.settings.orth)

        fact.k = 0
        fact.r = r
        fact.push(coeffs[0].real, linops.norm(r))

        return fact

    def expand(self, fact):
        assert isinstance(fact, LanczosFactorization)

        if self.is_exhausted(fact):
            self.settings.print_debug("lanczos: invariant subspace found at dimension {} (normres = {}), " \
                                      "not expanding".format(fact.k, fact.normres()))
            return fact

        Timers.tic('lanczos expand')

        try:
            alpha, beta = self._lanczos_step(fact)
        finally:
            Timers.toc('lanczos expand')

        self.settings.print_debug("lanczos: expanded to dimension {}, alpha = {}, beta = {}".format(
            fact.k, alpha, beta))

        return fact

    def _lanczos_step(self, fact):
        'append the next lanczos vector and push the new alpha and beta, returns (alpha, beta)'

        orth = self.settings.orth
        basis = fact.basis()
        k = fact.k
        beta_old = fact.normres()

        basis.append(fact.residual() / beta_old)
        v = basis[k]

        w = self.apply(v)

        # three-term recurrence
        w = w - beta_old * basis[k - 1]
        w, alpha = orthogonalize(w, v, orth)

        if orth.reorth != REORTH_NONE:
            w, _ = orthogonalize(w, basis[k - 1], orth)

        if self.settings.fullreorth:
            w, _ = orthogonalize(w, basis, orth)

        beta = linops.norm(w)

        fact.r = w
        fact.push(alpha.real, beta)

        return alpha.real, beta

    def shrink(self, fact, k):
        assert isinstance(fact, LanczosFactorization)

        if k < 1:
            raise ValueError("cannot shrink a factorization to dimension {}".format(k))

        if k >= fact.k:
            return fact

        basis = fact.basis()
        beta = fact.betas[k - 1]

        fact.r = basis[k] * beta # copy
        basis.resize(k)
        fact.k = k
        fact.beta = beta

        self.settings.print_debug("lanczos: shrunk to dimension {}, projected matrix:\n{}".format(
            k, matrix_to_string(fact.rayleighquotient())))

        return fact

class ArnoldiIterator(KrylovIterator):
    '''Arnoldi iteration for a general operator

    keyword arguments are passed to the Arnoldi settings constructor if settings is None
    '''

    def __init__(self, operator, x0, settings=None, **kwargs):
        if settings is None:
            settings = Arnoldi(**kwargs)
        else:
            assert not kwargs, "pass either settings or keyword arguments, not both"

        assert isinstance(settings, Arnoldi), "ArnoldiIterator needs Arnoldi settings, got {}".format(settings)

        KrylovIterator.__init__(self, operator, x0, settings)

        self.freeze_attrs()

    def make_factorization(self):
        fact = ArnoldiFactorization(self.settings.krylovdim)
        fact.sizehint(self.settings.krylovdim)

        return fact

    def initialize_inplace(self, fact, x0=None):
        assert isinstance(fact, ArnoldiFactorization)

        if x0 is not None:
            self.x0 = np.asarray(x0)

        v, _ = normalize_start_vec(self.x0)

        basis = fact.basis()
        basis.clear()
        basis.append(v)

        w = self.apply(basis[0])
        r, coeffs = orthogonalize(w, basis, self.settings.orth)

        fact.k = 0
        fact.r = r
        fact.push(coeffs, linops.norm(r))

        return fact

    def expand(self, fact):
        assert isinstance(fact, ArnoldiFactorization)

        if self.is_exhausted(fact):
            self.settings.print_debug("arnoldi: invariant subspace found at dimension {} (normres = {}), " \
                                      "not expanding".format(fact.k, fact.normres()))
            return fact

        Timers.tic('arnoldi expand')

        try:
            basis = fact.basis()
            k = fact.k

            basis.append(fact.residual() / fact.normres())

            w = self.apply(basis[k])
            w, h_col = orthogonalize(w, basis, self.settings.orth)
            beta = linops.norm(w)

            fact.r = w
            fact.push(h_col, beta)
        finally:
            Timers.toc('arnoldi expand')

        self.settings.print_debug("arnoldi: expanded to dimension {}, beta = {}".format(fact.k, beta))

        return fact

    def shrink(self, fact, k):
        assert isinstance(fact, ArnoldiFactorization)

        if k < 1:
            raise ValueError("cannot shrink a factorization to dimension {}".format(k))

        if k >= fact.k:
            return fact

        basis = fact.basis()
        h_sub = fact.h_mat[k, k - 1]

        fact.r = basis[k] * h_sub
        basis.resize(k)
        fact.k = k
        fact.beta = abs(h_sub)

        return fact
