'''
Krylov factorizations

A krylov factorization of dimension k stores the basis V_k, the small projected matrix B_k,
the residual r and its norm beta, such that

    A @ V_k = V_k @ B_k + r @ e_k^T

Factorizations are plain containers. They are created and modified by the iterators in krylov.py.
'''

import numpy as np

from krylovexp.util import Freezable
from krylovexp.orthonormal import OrthonormalBasis

class KrylovFactorization(Freezable):
    'base class for lanczos and arnoldi factorizations'

    def __init__(self, capacity=0):
        self.k = 0 # current dimension
        self.basis_vecs = OrthonormalBasis(capacity=capacity)
        self.r = None # residual vector
        self.beta = 0.0 # residual norm

    def __len__(self):
        return self.k

    def __iter__(self):
        'allows V, B, r, beta = fact'

        return iter((self.basis(), self.rayleighquotient(), self.residual(), self.normres()))

    def basis(self):
        'get the OrthonormalBasis (not a copy)'

        return self.basis_vecs

    def residual(self):
        'get the residual vector r'

        return self.r

    def normres(self):
        'get the norm of the residual'

        return self.beta

    def rayleighextension(self):
        'get the vector e_k multiplying the residual in the factorization'

        rv = np.zeros(self.k, dtype=float)
        rv[-1] = 1.0

        return rv

    def rayleighquotient(self):
        'get the k x k projected matrix'

        raise NotImplementedError("rayleighquotient() is implemented by subclasses")

    def sizehint(self, capacity):
        'preallocate storage for capacity basis vectors'

        self.basis_vecs.sizehint(capacity)

class LanczosFactorization(KrylovFactorization):
    '''lanczos factorization, the projected matrix is real symmetric tridiagonal

    alphas[:k] is the diagonal, betas[:k-1] is the off-diagonal and betas[k-1] is the residual norm
    '''

    def __init__(self, capacity=0):
        KrylovFactorization.__init__(self, capacity)

        self.alphas = np.zeros(max(capacity, 1), dtype=float)
        self.betas = np.zeros(max(capacity, 1), dtype=float)

        self.freeze_attrs()

    def __repr__(self):
        return "LanczosFactorization(k={}, normres={})".format(self.k, self.beta)

    def sizehint(self, capacity):
        KrylovFactorization.sizehint(self, capacity)

        if capacity > self.alphas.shape[0]:
            self._grow(capacity)

    def _grow(self, capacity):
        'reallocate the tridiagonal storage'

        alphas = np.zeros(capacity, dtype=float)
        betas = np.zeros(capacity, dtype=float)
        alphas[:self.k] = self.alphas[:self.k]
        betas[:self.k] = self.betas[:self.k]
        self.alphas = alphas
        self.betas = betas

    def push(self, alpha, beta):
        'add a new diagonal element alpha and residual norm beta, increasing the dimension by one'

        if self.k == self.alphas.shape[0]:
            self._grow(2 * self.k)

        self.alphas[self.k] = alpha
        self.betas[self.k] = beta
        self.beta = beta
        self.k += 1

    def tridiagonal(self):
        'get (diagonal, off-diagonal) of the projected matrix, as views'

        return self.alphas[:self.k], self.betas[:self.k - 1]

    def rayleighquotient(self):
        diag, offdiag = self.tridiagonal()

        return np.diag(diag) + np.diag(offdiag, 1) + np.diag(offdiag, -1)

class ArnoldiFactorization(KrylovFactorization):
    '''arnoldi factorization, the projected matrix is upper hessenberg

    h_mat[:k, :k] is the projected matrix, h_mat[k, k-1] is the residual norm
    '''

    def __init__(self, capacity=0):
        KrylovFactorization.__init__(self, capacity)

        size = max(capacity, 1)
        self.h_mat = np.zeros((size + 1, size), dtype=float)

        self.freeze_attrs()

    def __repr__(self):
        return "ArnoldiFactorization(k={}, normres={})".format(self.k, self.beta)

    def sizehint(self, capacity):
        KrylovFactorization.sizehint(self, capacity)

        if capacity > self.h_mat.shape[1]:
            self._grow(capacity, self.h_mat.dtype)

    def _grow(self, capacity, dtype):
        'reallocate the hessenberg storage'

        h_mat = np.zeros((capacity + 1, capacity), dtype=dtype)
        h_mat[:self.k + 1, :self.k] = self.h_mat[:self.k + 1, :self.k]
        self.h_mat = h_mat

    def push(self, h_col, beta):
        '''add a new column to the hessenberg matrix, h_col has length k+1 (the new dimension)

        beta is the new residual norm'''

        h_col = np.asarray(h_col)
        assert h_col.shape == (self.k + 1,), "expected column of length {}, got shape {}".format(
            self.k + 1, h_col.shape)

        dtype = np.result_type(self.h_mat.dtype, h_col.dtype)

        if self.k == self.h_mat.shape[1] or dtype != self.h_mat.dtype:
            self._grow(max(2 * self.k, self.h_mat.shape[1]), dtype)

        self.h_mat[:self.k + 1, self.k] = h_col
        self.h_mat[self.k + 1, self.k] = beta
        self.beta = beta
        self.k += 1

    def rayleighquotient(self):
        return self.h_mat[:self.k, :self.k].copy()
