"""
Linear Solver
LU factorisation with partial pivoting, factored once and solved for any
number of right-hand sides. The input matrix is never modified.
"""

import logging
import warnings
from typing import Optional

import numpy as np
from scipy.linalg import LinAlgWarning, lu_factor, lu_solve

logger = logging.getLogger(__name__)


class LinearSolver:
    """Factored square system A; solve(b) returns x with A x = b"""

    def __init__(self, lu: np.ndarray, piv: np.ndarray):
        self._lu = lu
        self._piv = piv

    @property
    def size(self) -> int:
        return self._lu.shape[0]

    @classmethod
    def factor(cls, a: np.ndarray, tolerance: float = 1e-12) -> Optional['LinearSolver']:
        """
        Factor a square matrix

        Args:
            a: (n, n) matrix
            tolerance: Pivots smaller than tolerance * max(1, max|A|) count as singular

        Returns:
            LinearSolver, or None if the matrix is numerically singular
        """
        a = np.asarray(a, dtype=float)
        if a.ndim != 2 or a.shape[0] != a.shape[1] or a.shape[0] == 0:
            raise ValueError(f"Expected a non-empty square matrix, got shape {a.shape}")
        if not np.all(np.isfinite(a)):
            return None

        with warnings.catch_warnings():
            warnings.simplefilter('ignore', LinAlgWarning)
            lu, piv = lu_factor(a, check_finite=False)

        threshold = tolerance * max(1.0, float(np.max(np.abs(a))))
        pivots = np.abs(np.diag(lu))
        if np.any(pivots < threshold):
            logger.debug(f"Singular system: smallest pivot {pivots.min():.3e} < {threshold:.3e}")
            return None
        return cls(lu, piv)

    def solve(self, b: np.ndarray) -> np.ndarray:
        b = np.asarray(b, dtype=float)
        if b.shape[0] != self.size:
            raise ValueError(f"Right-hand side has {b.shape[0]} rows, system has {self.size}")
        return lu_solve((self._lu, self._piv), b, check_finite=False)


def solve_linear_system(a: np.ndarray, b: np.ndarray, tolerance: float = 1e-12) -> Optional[np.ndarray]:
    """One-shot solve of A x = b; None if A is singular."""
    solver = LinearSolver.factor(a, tolerance)
    if solver is None:
        return None
    return solver.solve(b)
