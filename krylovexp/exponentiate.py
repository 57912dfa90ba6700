'''
Action of the matrix exponential, y = exp(t*A) @ x, using restarted lanczos with adaptive time steps

The time interval is split into sub-steps. For each sub-step a lanczos factorization is built
from the current vector, the exponential of the small tridiagonal matrix is computed from its
eigendecomposition, and the step size is reduced until Lubich's a posteriori error estimate is
below the tolerance. The factorization memory is reused after each sub-step.
'''

import math
import warnings

import numpy as np
from scipy.linalg import eigh_tridiagonal

from krylovexp.timerutil import Timers
from krylovexp.settings import KrylovSettings, Lanczos, Arnoldi
from krylovexp.krylov import LanczosIterator
from krylovexp.result import ConvergenceInfo
from krylovexp.util import round_sigdigits
from krylovexp import linops

SAFETY_FACTOR = 0.9 # accepted steps have an error estimate below this fraction of the tolerance

class ToleranceWarning(UserWarning):
    'the requested tolerance is below working precision and was increased'

def problem_dtype(operator, t, x):
    'get the dtype of the computation (floating point, complex if any of the inputs is)'

    dtypes = [np.asarray(x).dtype, np.asarray(t).dtype, np.dtype(float)]
    op_dtype = linops.operator_dtype(operator)

    if op_dtype is not None:
        dtypes.append(np.dtype(op_dtype))

    return np.result_type(*dtypes)

def select_algorithm(operator, x, t=1.0, issymmetric=None, ishermitian=None, **kwargs):
    '''get the algorithm settings object for the operator, Lanczos if it is hermitian, Arnoldi otherwise

    issymmetric / ishermitian are auto-detected for matrix operators and default to False for callables.
    The other keyword arguments are assigned to the returned settings object.
    '''

    is_real = not np.issubdtype(problem_dtype(operator, t, x), np.complexfloating)

    if ishermitian is None:
        if issymmetric is not None:
            ishermitian = bool(issymmetric) and is_real
        elif linops.is_matrix_like(operator):
            ishermitian = bool(linops.is_hermitian(operator))
        else:
            ishermitian = False

    alg = Lanczos() if ishermitian else Arnoldi()

    return alg.update(**kwargs)

def check_time(t):
    'check that the time parameter is a finite scalar'

    if np.ndim(t) != 0:
        raise ValueError("time t should be a scalar, got shape {}".format(np.shape(t)))

    if not np.isfinite(t):
        raise ValueError("time t should be finite, got {}".format(t))

def exponentiate(operator, t, x, alg=None, **kwargs):
    '''compute y = exp(t*A) @ x

    operator is a matrix-like object or a callable applying A to a vector, t is a real or complex
    scalar and x is a numpy array (of any shape). alg is a Lanczos settings object; if None, it is
    created by select_algorithm() using the keyword arguments (krylovdim, tol, maxiter, orth,
    issymmetric, ishermitian, ...).

    returns a tuple (y, info), where info is a ConvergenceInfo. info.normres is an estimate of the
    error and info.converged is 0 if this estimate is not below the requested tolerance
    '''

    if alg is None:
        alg = select_algorithm(operator, x, t, **kwargs)
    elif kwargs:
        raise ValueError("pass either alg or keyword arguments, not both")

    if isinstance(alg, Arnoldi):
        raise NotImplementedError("exponentiate() is only implemented for hermitian operators (Lanczos); " + \
                                  "pass ishermitian=True if the operator is hermitian")

    if not isinstance(alg, Lanczos):
        raise ValueError("alg should be a Lanczos object, got {}".format(type(alg)))

    alg.check()
    check_time(t)

    x = np.asarray(x)

    if x.size == 0 or not np.all(np.isfinite(x)):
        raise ValueError("starting vector x should be non-empty with finite entries")

    beta = linops.norm(x)

    if beta == 0:
        raise ValueError("starting vector x is zero")

    dtype = problem_dtype(operator, t, x)

    if t == 0:
        return x.astype(dtype), ConvergenceInfo(1, None, 0.0, 0, 0, alg.tol)

    return _exponentiate_lanczos(operator, t, x.astype(dtype) / beta, beta, alg)

def _exponentiate_lanczos(operator, t, w, beta, alg):
    'main loop of exponentiate(), w is the normalized starting vector and beta its original norm'

    Timers.tic('exponentiate')

    try:
        w, info = _lanczos_substeps(operator, t, w, beta, alg)
    finally:
        Timers.toc('exponentiate')

    if alg.stdout >= KrylovSettings.STDOUT_VERBOSE and not Timers.stack:
        Timers.print_stats()

    if info.converged == 0:
        alg.print_normal("exponentiate did not reach tolerance {} after {} iterations (error estimate {})".format(
            alg.tol, info.numiter, info.normres))

    return w, info

def _lanczos_substeps(operator, t, w, beta, alg):
    'time-stepping loop with restarts, returns (y, info)'

    krylovdim = alg.krylovdim
    maxiter = alg.maxiter

    iterator = LanczosIterator(operator, w, settings=alg)
    fact = iterator.initialize()

    # applications done when restarting are not reported
    restart_ops = 0

    # time step parameters
    sgn = t / abs(t)
    total_time = tau = float(abs(t))
    dtau = tau

    # tolerance per unit time
    eta = alg.tol / tau
    eta_min = linops.vec_length(w) * linops.real_eps(w.dtype)

    if eta < eta_min:
        eta = eta_min
        msg = "tolerance {} too small for working precision, increasing to {}".format(alg.tol, eta * total_time)
        warnings.warn(msg, ToleranceWarning)
        alg.print_normal("Warning: " + msg)

    totalerr = 0.0
    numiter = 0

    while True:
        numiter += 1
        dtau = tau if numiter == maxiter else min(dtau, tau)

        while fact.normres() > eta and len(fact) < krylovdim:
            k = len(fact)
            fact = iterator.expand(fact)

            if len(fact) == k: # invariant subspace
                break

        k = len(fact)
        normres = fact.normres()
        diag, offdiag = fact.tridiagonal()

        Timers.tic('eigh_tridiagonal')

        try:
            if k == 1:
                evals, evecs = diag.copy(), np.ones((1, 1), dtype=float)
            else:
                evals, evecs = eigh_tridiagonal(diag, offdiag)
        finally:
            Timers.toc('eigh_tridiagonal')

        first_row = np.conj(evecs[0, :])
        last_row = evecs[k - 1, :]

        # largest allowed time step
        while True:
            with np.errstate(over='ignore'):
                eps1 = np.sum(last_row * np.exp(sgn * dtau / 2 * evals) * first_row)
                eps2 = np.sum(last_row * np.exp(sgn * dtau * evals) * first_row)

            err = normres * (2 * abs(eps1) / 3 + abs(eps2) / 6) # Lubich

            if numiter == maxiter or err < SAFETY_FACTOR * eta:
                break

            if math.isfinite(err):
                dtau = round_sigdigits(SAFETY_FACTOR * (eta / err)**(1 / krylovdim) * dtau, 2)
            else:
                dtau /= 2

            assert dtau > 0, "time step underflow in exponentiate"

        # apply the time step
        totalerr += dtau * err

        with np.errstate(over='ignore'):
            coeffs = evecs @ (np.exp(sgn * dtau * evals) * first_row)

        w = fact.basis().unproject(coeffs)
        tau -= dtau

        alg.print_verbose("exponentiate iteration {}: krylov dim {}, step {:.3g}, time left {:.3g}, " \
                          "error estimate {:.3e}".format(numiter, k, dtau, tau, totalerr))

        if tau == 0:
            break

        norm_w = linops.norm(w)
        beta *= norm_w
        w = w / norm_w

        ops_before = iterator.num_ops
        fact = iterator.initialize_inplace(fact, w)
        restart_ops += iterator.num_ops - ops_before

    converged = 1 if totalerr < alg.tol else 0
    numops = iterator.num_ops - restart_ops

    return w * beta, ConvergenceInfo(converged, None, totalerr, numiter, numops, eta * total_time)
