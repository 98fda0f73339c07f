# buildframe/kernel/solve.py
"""Linear system solver with boundary conditions and mechanism detection."""

import logging
import warnings
from typing import Callable, Optional, Sequence, Tuple

import numpy as np
from scipy.linalg import LinAlgWarning, get_lapack_funcs, lu_factor, lu_solve

logger = logging.getLogger(__name__)


class MechanismError(RuntimeError):
    """Raised when the structure is not stable / fully supported."""
    pass


class AnalysisCancelled(RuntimeError):
    """Raised when a caller cancels a running solve."""
    pass


def free_dofs(ndof: int, fixed_dofs: Sequence[int]) -> np.ndarray:
    """Sorted DOF indices that are not constrained."""
    fixed = set(int(i) for i in fixed_dofs)
    bad = [i for i in fixed if not 0 <= i < ndof]
    if bad:
        raise IndexError(f"Constrained DOFs {sorted(bad)} outside [0, {ndof})")
    return np.array([i for i in range(ndof) if i not in fixed], dtype=int)


def factorize(
    Kff: np.ndarray,
    cond_limit: float = 1e12,
) -> Tuple[np.ndarray, np.ndarray]:
    """
    LU-factorize a reduced stiffness matrix with partial pivoting.

    Args:
        Kff: Square matrix restricted to free DOFs
        cond_limit: Max (estimated) condition number before raising

    Returns:
        (lu, piv) as returned by ``scipy.linalg.lu_factor``

    Raises:
        MechanismError: On a zero pivot or a condition estimate above
            ``cond_limit``
    """
    # Row-major contiguous copy; the factorization overwrites it
    A = np.array(Kff, dtype=float, order='C', copy=True)
    if not np.all(np.isfinite(A)):
        raise MechanismError("Stiffness matrix contains non-finite entries.")

    with warnings.catch_warnings():
        warnings.simplefilter('ignore', LinAlgWarning)
        lu, piv = lu_factor(A, overwrite_a=True, check_finite=False)

    diag = np.abs(np.diag(lu))
    if np.any(diag == 0.0):
        raise MechanismError(
            "Singular stiffness matrix (zero pivot). Structure is not stable "
            "or not fully supported; check supports and member connectivity."
        )

    # Reciprocal condition estimate in the 1-norm from the LU factors
    gecon, = get_lapack_funcs(('gecon',), (lu,))
    anorm = np.linalg.norm(Kff, 1)
    rcond, info = gecon(lu, anorm, norm='1')
    cond = np.inf if rcond <= 0.0 else 1.0 / rcond
    logger.debug("Reduced system n=%d, cond~%.2e", Kff.shape[0], cond)

    if info != 0 or not np.isfinite(cond) or cond > cond_limit:
        raise MechanismError(
            f"Unstable system (cond={cond:.2e}). Structure is not stable or "
            f"not fully supported. Need cond < {cond_limit:.0e}."
        )
    return lu, piv


def solve_linear(
    K: np.ndarray,
    F: np.ndarray,
    fixed_dofs: Sequence[int],
    cond_limit: float = 1e12,
    cancel: Optional[Callable[[], bool]] = None,
) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Solve K·d = F with fixed boundary conditions via partitioning.

    Constrained DOFs are eliminated: only the free/free block Kff is
    factorized, and the constrained displacements are exactly zero.

    Args:
        K: Global stiffness matrix (ndof x ndof)
        F: Global load vector (ndof,)
        fixed_dofs: Constrained DOF indices (displacement = 0)
        cond_limit: Max condition number before raising MechanismError
        cancel: Optional callable; when it returns True the solve is
            abandoned with AnalysisCancelled

    Returns:
        d: Displacement vector (ndof,)
        R: Reaction vector (ndof,), R = K·d - F
        free: Array of free DOF indices

    Raises:
        MechanismError: If the structure is unstable or ill-conditioned
        AnalysisCancelled: If ``cancel`` fired
    """
    ndof = K.shape[0]
    if K.shape != (ndof, ndof) or F.shape != (ndof,):
        raise ValueError(f"Incompatible shapes K{K.shape}, F{F.shape}")

    free = free_dofs(ndof, fixed_dofs)
    d = np.zeros(ndof, dtype=float)

    if free.size:
        if cancel is not None and cancel():
            raise AnalysisCancelled("Analysis cancelled before factorization")

        Kff = K[np.ix_(free, free)]
        Ff = F[free]
        lu, piv = factorize(Kff, cond_limit)

        if cancel is not None and cancel():
            raise AnalysisCancelled("Analysis cancelled after factorization")

        df = lu_solve((lu, piv), Ff, check_finite=False)
        if not np.all(np.isfinite(df)):
            raise MechanismError("Solve produced non-finite displacements.")
        d[free] = df

    # Reactions at all DOFs (zero at free DOFs up to round-off)
    R = K @ d - F

    return d, R, free
