'''
Utilities for testing
'''

import numpy as np
from scipy.sparse import csr_matrix

def random_symmetric_matrix(dims, seed=0, complex_entries=False):
    '''make a dense random symmetric (or hermitian) matrix

    the spectrum lies roughly in [-sqrt(2), sqrt(2)]'''

    rand = np.random.RandomState(seed)
    mat = rand.randn(dims, dims)

    if complex_entries:
        mat = mat + 1j * rand.randn(dims, dims)
        mat /= np.sqrt(2)

    return (mat + mat.conj().T) / (2 * np.sqrt(dims))

def random_five_diag_sym_matrix(dims, seed=0):
    '''make a random symmetric csr_matrix 5-diagonal matrix

    there are 5 elements per row, for row index n we have:
    q_{n-2} p_{n-1} d_n p_n q_n
    '''

    rand = np.random.RandomState(seed)

    p = rand.rand(dims - 1)
    q = rand.rand(dims - 2)
    d = rand.rand(dims)

    data = []
    indices = []
    indptrs = [0]

    for row in range(dims):
        if row > 1:
            data.append(q[row - 2])
            indices.append(row - 2)

        if row > 0:
            data.append(p[row - 1])
            indices.append(row - 1)

        data.append(d[row])
        indices.append(row)

        if row + 1 < dims:
            data.append(p[row])
            indices.append(row + 1)

        if row + 2 < dims:
            data.append(q[row])
            indices.append(row + 2)

        indptrs.append(len(data))

    return csr_matrix((data, indices, indptrs), shape=(dims, dims))

def random_vector(dims, seed=1, complex_entries=False):
    'make a random unit vector'

    rand = np.random.RandomState(seed)
    rv = rand.randn(dims)

    if complex_entries:
        rv = rv + 1j * rand.randn(dims)

    return rv / np.linalg.norm(rv)

def factorization_error(a_mat, fact):
    'norm of A @ V - V @ B - r @ e_k^T for a krylov factorization'

    v_mat = fact.basis().matrix()
    b_mat = fact.rayleighquotient()
    r = fact.residual().reshape(-1)

    return np.linalg.norm(a_mat @ v_mat - v_mat @ b_mat - np.outer(r, fact.rayleighextension()))

def orthonormality_error(basis):
    'max deviation of the gram matrix of the basis from the identity'

    v_mat = basis.matrix()
    gram = v_mat.conj().T @ v_mat

    return np.max(np.abs(gram - np.identity(gram.shape[0])))

class CountingOperator():
    'callable operator wrapping a matrix, counting the number of applications'

    def __init__(self, mat):
        self.mat = mat
        self.calls = 0

    def __call__(self, vec):
        self.calls += 1

        return self.mat @ vec
