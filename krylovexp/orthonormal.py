'''
Orthonormal bases and Gram-Schmidt orthogonalization

The orthogonalization algorithm is selected by an immutable Orthogonalizer value
(classical or modified Gram-Schmidt, with no / one / iterative reorthogonalization).
'''

import math
from collections import namedtuple

import numpy as np

from krylovexp.util import Freezable

GS_CLASSICAL, GS_MODIFIED = range(2)
REORTH_NONE, REORTH_ONCE, REORTH_ITERATIVE = range(3)

# eta: (iterative only) another pass is done while the norm drops below eta times the norm before the last pass
# max_passes: (iterative only) bound on the number of extra passes
Orthogonalizer = namedtuple('Orthogonalizer', ['method', 'reorth', 'eta', 'max_passes'])

DEFAULT_ETA = 1 / math.sqrt(2)
DEFAULT_MAX_PASSES = 4

CGS = Orthogonalizer(GS_CLASSICAL, REORTH_NONE, None, 0)
MGS = Orthogonalizer(GS_MODIFIED, REORTH_NONE, None, 0)
CGS2 = Orthogonalizer(GS_CLASSICAL, REORTH_ONCE, None, 1)
MGS2 = Orthogonalizer(GS_MODIFIED, REORTH_ONCE, None, 1)
CGSIR = Orthogonalizer(GS_CLASSICAL, REORTH_ITERATIVE, DEFAULT_ETA, DEFAULT_MAX_PASSES)
MGSIR = Orthogonalizer(GS_MODIFIED, REORTH_ITERATIVE, DEFAULT_ETA, DEFAULT_MAX_PASSES)

def cgsir(eta=DEFAULT_ETA, max_passes=DEFAULT_MAX_PASSES):
    'classical gram-schmidt with iterative refinement'

    assert 0 < eta < 1, "eta should be in (0, 1): {}".format(eta)

    return Orthogonalizer(GS_CLASSICAL, REORTH_ITERATIVE, eta, max_passes)

def mgsir(eta=DEFAULT_ETA, max_passes=DEFAULT_MAX_PASSES):
    'modified gram-schmidt with iterative refinement'

    assert 0 < eta < 1, "eta should be in (0, 1): {}".format(eta)

    return Orthogonalizer(GS_MODIFIED, REORTH_ITERATIVE, eta, max_passes)

class OrthonormalBasis(Freezable):
    '''an ordered, growable list of orthonormal vectors

    Vectors are stored as the rows of a preallocated 2-d array, so that truncating and
    clearing the basis does not free memory. Orthonormality is not checked here; it is the
    job of whoever appends (see orthogonalize()).
    '''

    def __init__(self, vectors=None, capacity=0):
        self.data = None # rows are the basis vectors, allocated on the first append
        self.vec_shape = None
        self.count = 0
        self.capacity_hint = capacity

        self.freeze_attrs()

        if vectors is not None:
            for vec in vectors:
                self.append(vec)

    def __len__(self):
        return self.count

    def __getitem__(self, index):
        'get basis vector at index (a view with the original vector shape)'

        if index < 0:
            index += self.count

        if not 0 <= index < self.count:
            raise IndexError("basis index {} out of range for basis of length {}".format(index, self.count))

        return self.data[index].reshape(self.vec_shape)

    def __iter__(self):
        for i in range(self.count):
            yield self.data[i].reshape(self.vec_shape)

    def __repr__(self):
        return "OrthonormalBasis(length={}, capacity={}, vec_shape={})".format(self.count, self.capacity(),
                                                                              self.vec_shape)

    @property
    def dtype(self):
        'dtype of the stored vectors (None if nothing was appended yet)'

        return None if self.data is None else self.data.dtype

    def capacity(self):
        'number of vectors that fit without reallocating'

        return self.capacity_hint if self.data is None else self.data.shape[0]

    def sizehint(self, capacity):
        'preallocate memory for capacity vectors'

        if self.data is None:
            self.capacity_hint = max(self.capacity_hint, capacity)
        elif capacity > self.data.shape[0]:
            self._realloc(capacity, self.data.dtype)

    def _realloc(self, capacity, dtype):
        'allocate bigger (or differently typed) storage, copying the current vectors'

        new_data = np.zeros((capacity, self.data.shape[1]), dtype=dtype)
        new_data[:self.count] = self.data[:self.count]
        self.data = new_data

    def append(self, vec):
        'append a vector (a copy is stored)'

        vec = np.asarray(vec)

        if self.data is None:
            dtype = np.result_type(vec.dtype, float)
            self.data = np.zeros((max(self.capacity_hint, 1), vec.size), dtype=dtype)
            self.vec_shape = vec.shape
        else:
            assert vec.size == self.data.shape[1], "appended vector size {} differs from basis vector size {}".format(
                vec.size, self.data.shape[1])

            if not np.can_cast(vec.dtype, self.data.dtype, casting='same_kind'):
                self._realloc(self.data.shape[0], np.result_type(vec.dtype, self.data.dtype))

            if self.count == self.data.shape[0]:
                self._realloc(2 * self.count, self.data.dtype)

        self.data[self.count] = vec.reshape(-1)
        self.count += 1

    def pop(self):
        'remove and return the last vector'

        if self.count == 0:
            raise IndexError("pop from empty OrthonormalBasis")

        self.count -= 1

        return self.data[self.count].reshape(self.vec_shape).copy()

    def resize(self, count):
        'truncate the basis to the first count vectors'

        assert 0 <= count <= self.count, "cannot resize basis of length {} to {}".format(self.count, count)

        self.count = count

    def clear(self):
        'remove all vectors, keeping the memory'

        self.count = 0

    def matrix(self):
        'get the basis as an n x k matrix (a view), the columns are the vectors'

        assert self.data is not None, "basis is empty"

        return self.data[:self.count].T

    def project(self, vec):
        'get the coefficients <v_i, vec> of vec in the basis'

        return np.conj(self.data[:self.count]) @ np.asarray(vec).reshape(-1)

    def unproject(self, coeffs):
        'get the vector sum_i coeffs[i] * v_i'

        coeffs = np.asarray(coeffs)
        assert coeffs.shape == (self.count,), "expected {} coefficients, got shape {}".format(
            self.count, coeffs.shape)

        return (coeffs @ self.data[:self.count]).reshape(self.vec_shape)

def _basis_cgs_pass(w, basis):
    'one classical gram-schmidt pass, all coefficients from the original vector. w is modified in place'

    coeffs = basis.project(w)
    w -= coeffs @ basis.data[:basis.count]

    return coeffs

def _basis_mgs_pass(w, basis):
    'one modified gram-schmidt pass, w is updated after each projection. w is modified in place'

    coeffs = np.zeros(basis.count, dtype=w.dtype)

    for i in range(basis.count):
        v = basis.data[i]
        c = np.vdot(v, w)
        coeffs[i] = c
        w -= c * v

    return coeffs

def _vector_pass(w, q):
    'orthogonalize against a single unit vector, w is modified in place'

    c = np.vdot(q, w)
    w -= c * q

    return c

_BASIS_PASSES = {GS_CLASSICAL: _basis_cgs_pass, GS_MODIFIED: _basis_mgs_pass}

def orthogonalize(w, target, orth=MGSIR):
    '''orthogonalize vector w against target, which is an OrthonormalBasis or a single unit vector

    returns a tuple: (orthogonalized w, coefficients). The coefficients are an array for a
    basis target and a scalar for a vector target. w may be modified in place.
    '''

    w = np.asarray(w)
    vec_shape = w.shape

    if isinstance(target, OrthonormalBasis):
        if not target:
            return w, np.zeros(0, dtype=np.result_type(w.dtype, float))

        pass_func = _BASIS_PASSES[orth.method]
        target_dtype = target.dtype
    else:
        pass_func = _vector_pass
        target = np.asarray(target).reshape(-1)
        target_dtype = target.dtype

    dtype = np.result_type(w.dtype, target_dtype, float)

    if w.dtype != dtype or not w.flags.c_contiguous:
        w = np.ascontiguousarray(w, dtype=dtype)

    w = w.reshape(-1)

    if orth.reorth == REORTH_ITERATIVE:
        norm_old = float(np.linalg.norm(w))

    coeffs = pass_func(w, target)

    if orth.reorth == REORTH_ONCE:
        coeffs += pass_func(w, target)
    elif orth.reorth == REORTH_ITERATIVE:
        norm_new = float(np.linalg.norm(w))
        eps = float(np.finfo(w.real.dtype).eps)
        passes = 0

        # stop once the norm stabilizes (or w vanishes, being in the span of target)
        while eps * norm_old < norm_new < orth.eta * norm_old and passes < orth.max_passes:
            coeffs += pass_func(w, target)
            passes += 1

            norm_old = norm_new
            norm_new = float(np.linalg.norm(w))

    return w.reshape(vec_shape), coeffs

def orthonormalize(w, target, orth=MGSIR):
    '''orthogonalize w against target and normalize it

    returns (normalized w, norm after orthogonalization, coefficients). If the norm is zero,
    w is returned without scaling.
    '''

    w, coeffs = orthogonalize(w, target, orth)
    beta = float(np.linalg.norm(w))

    if beta > 0:
        w /= beta

    return w, beta, coeffs
