'''
Linear operator and vector helpers

An operator is either matrix-like (anything with a shape supporting the @ operator, such as a
numpy array, a scipy sparse matrix or a scipy LinearOperator), or a callable f(vec) -> vec.
Vectors are numpy arrays of any shape; they are treated as flat vectors for inner products.
'''

import math

import numpy as np
from scipy.sparse import issparse

from krylovexp.timerutil import Timers

def is_matrix_like(operator):
    'is the operator a matrix (applied with @) rather than a plain callable?'

    return hasattr(operator, 'shape') and hasattr(operator, '__matmul__')

def operator_dtype(operator):
    'get the dtype of a matrix-like operator, or None if unknown (callables)'

    rv = None

    if is_matrix_like(operator):
        rv = getattr(operator, 'dtype', None)

    return rv

def apply(operator, vec):
    'apply the operator to a vector, returning a new numpy array with the same shape as vec'

    matrix_like = is_matrix_like(operator)

    if not matrix_like and not callable(operator):
        raise ValueError("operator should be matrix-like or callable, got {}".format(type(operator)))

    Timers.tic('apply')

    try:
        rv = operator @ vec.reshape(-1) if matrix_like else operator(vec)
    finally:
        Timers.toc('apply')

    if issparse(rv):
        rv = rv.toarray()

    rv = np.asarray(rv)

    if np.shares_memory(rv, vec):
        # callers modify the result in place
        rv = rv.copy()

    assert rv.size == vec.size, "operator returned a vector of size {}, expected {}".format(rv.size, vec.size)

    return rv.reshape(vec.shape)

def is_symmetric(mat):
    'is the passed-in square matrix symmetric (exactly)? None if this cannot be checked'

    rv = None

    if issparse(mat):
        rv = mat.shape[0] == mat.shape[1] and (mat != mat.T).nnz == 0
    elif isinstance(mat, np.ndarray):
        rv = mat.ndim == 2 and mat.shape[0] == mat.shape[1] and np.array_equal(mat, mat.T)

    return rv

def is_hermitian(mat):
    'is the passed-in square matrix hermitian (exactly)? None if this cannot be checked'

    rv = None

    if issparse(mat):
        rv = mat.shape[0] == mat.shape[1] and (mat != mat.conj().T).nnz == 0
    elif isinstance(mat, np.ndarray):
        rv = mat.ndim == 2 and mat.shape[0] == mat.shape[1] and np.array_equal(mat, mat.conj().T)

    return rv

def inner(x, y):
    'inner product <x, y>, conjugate-linear in the first argument'

    return np.vdot(x, y)

def norm(x):
    'euclidean norm, always a real float'

    rv = float(np.linalg.norm(x.reshape(-1)))

    if math.isinf(rv) or math.isnan(rv):
        raise RuntimeError("vector norm was not finite: {}".format(rv))

    return rv

def vec_length(x):
    'number of scalar entries in the vector'

    return int(np.size(x))

def real_eps(dtype):
    'machine epsilon of the real type underlying dtype (float64 for integer types)'

    dtype = np.dtype(dtype)

    if not np.issubdtype(dtype, np.inexact):
        dtype = np.dtype(float)

    return float(np.finfo(dtype).eps)
