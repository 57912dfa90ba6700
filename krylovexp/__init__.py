'''This file defines which names to import when 'from krylovexp import *' is used'''

from krylovexp.exponentiate import exponentiate, select_algorithm, ToleranceWarning
from krylovexp.settings import KrylovSettings, Lanczos, Arnoldi
from krylovexp.krylov import LanczosIterator, ArnoldiIterator
from krylovexp.factorization import LanczosFactorization, ArnoldiFactorization
from krylovexp.orthonormal import OrthonormalBasis, orthogonalize, orthonormalize
from krylovexp.result import ConvergenceInfo

__all__ = ['exponentiate', 'select_algorithm', 'ToleranceWarning', 'KrylovSettings', 'Lanczos', 'Arnoldi',
           'LanczosIterator', 'ArnoldiIterator', 'LanczosFactorization', 'ArnoldiFactorization',
           'OrthonormalBasis', 'orthogonalize', 'orthonormalize', 'ConvergenceInfo']

__version__ = "0.1.0"
__license__ = "GPLv3"
__status__ = "Prototype"
