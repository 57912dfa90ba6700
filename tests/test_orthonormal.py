'''
Unit tests for orthonormal bases and gram-schmidt orthogonalization
'''

import numpy as np
import pytest

from krylovexp.orthonormal import OrthonormalBasis, orthogonalize, orthonormalize, cgsir, mgsir
from krylovexp.orthonormal import CGS, MGS, CGS2, MGS2, CGSIR, MGSIR

ALL_ORTH = [CGS, MGS, CGS2, MGS2, CGSIR, MGSIR]
REORTH_ORTH = [CGS2, MGS2, CGSIR, MGSIR]

def make_basis(dims, count, seed=0, complex_entries=False):
    'make an orthonormal basis from the qr decomposition of a random matrix, returns (basis, q_mat)'

    rand = np.random.RandomState(seed)
    mat = rand.randn(dims, count)

    if complex_entries:
        mat = mat + 1j * rand.randn(dims, count)

    q_mat, _ = np.linalg.qr(mat)

    return OrthonormalBasis([q_mat[:, i] for i in range(count)]), q_mat

def test_basis_ops():
    'test append, pop, resize, indexing and iteration'

    basis, q_mat = make_basis(10, 4)

    assert len(basis) == 4
    assert np.allclose(basis.matrix(), q_mat)
    assert np.allclose(basis[-1], q_mat[:, 3])

    for i, vec in enumerate(basis):
        assert np.allclose(vec, q_mat[:, i])

    last = basis.pop()
    assert len(basis) == 3
    assert np.allclose(last, q_mat[:, 3])

    basis.resize(1)
    assert len(basis) == 1
    assert np.allclose(basis[0], q_mat[:, 0])

    with pytest.raises(IndexError):
        _ = basis[1]

    basis.clear()
    assert len(basis) == 0

    with pytest.raises(IndexError):
        basis.pop()

def test_sizehint_reuses_memory():
    'preallocated storage should not be replaced while appending or after clearing'

    basis = OrthonormalBasis(capacity=5)
    assert basis.capacity() == 5

    _, q_mat = make_basis(8, 5)

    basis.append(q_mat[:, 0])
    data = basis.data

    for i in range(1, 5):
        basis.append(q_mat[:, i])

    assert basis.data is data

    basis.clear()
    basis.append(q_mat[:, 2])

    assert basis.data is data
    assert np.allclose(basis[0], q_mat[:, 2])

    # growing past the capacity keeps the old vectors
    basis.sizehint(20)
    assert basis.capacity() == 20
    assert np.allclose(basis[0], q_mat[:, 2])

def test_basis_grows():
    'appending past the capacity reallocates'

    _, q_mat = make_basis(6, 6)
    basis = OrthonormalBasis(capacity=2)

    for i in range(6):
        basis.append(q_mat[:, i])

    assert len(basis) == 6
    assert basis.capacity() >= 6
    assert np.allclose(basis.matrix(), q_mat)

def test_project_unproject():
    'unproject(project(w)) should be the component of w in the span of the basis'

    basis, q_mat = make_basis(10, 4, seed=3)
    coeffs = np.array([1.0, -2.0, 0.5, 3.0])

    w = basis.unproject(coeffs)
    assert np.allclose(w, q_mat @ coeffs)
    assert np.allclose(basis.project(w), coeffs)

def test_basis_vector_shape():
    'vectors keep their shape when stored in the basis'

    vec = np.zeros((2, 3))
    vec[1, 2] = 1.0

    basis = OrthonormalBasis([vec])

    assert basis[0].shape == (2, 3)
    assert basis.matrix().shape == (6, 1)
    assert basis.unproject(np.array([2.0])).shape == (2, 3)

def test_basis_complex_upcast():
    'appending a complex vector to a real basis should convert the storage'

    basis = OrthonormalBasis([np.array([1.0, 0, 0])])
    assert basis.dtype == np.dtype(float)

    basis.append(np.array([0, 1j, 0]))

    assert np.iscomplexobj(basis.data)
    assert np.allclose(basis[0], [1, 0, 0])
    assert np.allclose(basis[1], [0, 1j, 0])

@pytest.mark.parametrize("orth", ALL_ORTH)
def test_orthogonalize_basis(orth):
    'the result should be orthogonal to the basis, and w = w_perp + V @ coeffs'

    basis, _ = make_basis(20, 6, seed=1)
    w = np.random.RandomState(2).randn(20)

    w_perp, coeffs = orthogonalize(w.copy(), basis, orth)

    assert coeffs.shape == (6,)
    assert np.allclose(basis.project(w_perp), 0, atol=1e-12)
    assert np.allclose(w_perp + basis.unproject(coeffs), w)

@pytest.mark.parametrize("orth", REORTH_ORTH)
def test_reorth_nearly_dependent(orth):
    'a vector almost in the span of the basis should still be orthogonalized to working precision'

    basis, q_mat = make_basis(30, 5, seed=4)
    noise = np.random.RandomState(5).randn(30)

    w = q_mat @ np.array([1.0, 2.0, -1.0, 0.5, 3.0]) + 1e-10 * noise

    w_perp, _ = orthogonalize(w, basis, orth)
    norm = np.linalg.norm(w_perp)

    assert norm > 0
    assert np.max(np.abs(basis.project(w_perp))) / norm < 1e-10

def test_ir_vector_in_span():
    'a vector in the span of the basis should vanish, with the exact coefficients'

    basis, q_mat = make_basis(15, 4, seed=6)
    expected = np.array([1.0, -1.0, 2.0, 0.25])

    for orth in [CGSIR, MGSIR, cgsir(0.5, 2), mgsir(0.9)]:
        w_perp, coeffs = orthogonalize(q_mat @ expected, basis, orth)

        assert np.linalg.norm(w_perp) < 1e-12
        assert np.allclose(coeffs, expected)

def test_ir_bad_eta():
    'eta should be in (0, 1)'

    with pytest.raises(AssertionError):
        cgsir(1.5)

    with pytest.raises(AssertionError):
        mgsir(0)

@pytest.mark.parametrize("orth", ALL_ORTH)
def test_orthogonalize_vector(orth):
    'orthogonalize against a single unit vector'

    q = np.array([1.0, 1.0, 0, 0]) / np.sqrt(2)
    w = np.array([3.0, 1.0, 2.0, -1.0])

    w_perp, coeff = orthogonalize(w.copy(), q, orth)

    assert np.isscalar(coeff) or np.ndim(coeff) == 0
    assert abs(coeff - np.dot(q, w)) < 1e-12
    assert abs(np.dot(q, w_perp)) < 1e-12
    assert np.allclose(w_perp, [1.0, -1.0, 2.0, -1.0])

def test_orthogonalize_complex():
    'real vector against a complex basis'

    basis, _ = make_basis(12, 3, seed=7, complex_entries=True)
    w = np.random.RandomState(8).randn(12)

    w_perp, coeffs = orthogonalize(w, basis, MGSIR)

    assert np.iscomplexobj(w_perp)
    assert np.iscomplexobj(coeffs)
    assert np.allclose(basis.project(w_perp), 0, atol=1e-12)
    assert np.allclose(w_perp + basis.unproject(coeffs), w)

def test_orthogonalize_empty_basis():
    'nothing to remove for an empty basis'

    w = np.array([1.0, 2.0, 3.0])
    w_perp, coeffs = orthogonalize(w.copy(), OrthonormalBasis(), CGS)

    assert len(coeffs) == 0
    assert np.allclose(w_perp, w)

def test_orthonormalize():
    'the result should be unit length, and beta the norm after orthogonalization'

    basis, _ = make_basis(10, 3, seed=9)
    w = np.random.RandomState(10).randn(10)

    w_perp, _ = orthogonalize(w.copy(), basis, MGS2)
    w_unit, beta, coeffs = orthonormalize(w.copy(), basis, MGS2)

    assert coeffs.shape == (3,)
    assert abs(beta - np.linalg.norm(w_perp)) < 1e-12
    assert abs(np.linalg.norm(w_unit) - 1) < 1e-12
    assert np.allclose(w_unit * beta, w_perp)

    # zero vector is returned unscaled
    zero, beta, _ = orthonormalize(np.zeros(10), basis, MGS2)

    assert beta == 0
    assert np.all(zero == 0)
