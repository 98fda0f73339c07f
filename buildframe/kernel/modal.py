# buildframe/kernel/modal.py
"""Modal analysis: lumped mass matrix and natural periods of a 3D frame."""

import logging
from typing import Dict, Optional, Sequence, Tuple

import numpy as np
from scipy.linalg import eigh

from .dof import DOFManager
from .solve import MechanismError, free_dofs

logger = logging.getLogger(__name__)

TRANSLATIONS = (0, 1, 2)


def build_lumped_mass(
    ndof: int,
    element_masses: Sequence[Tuple[int, int, float]],
    dof_manager: DOFManager,
    nodal_masses: Optional[Dict[int, float]] = None,
) -> np.ndarray:
    """
    Build the diagonal lumped mass vector (translational DOFs only).

    Half of each element's mass goes to each end node. Rotational inertia is
    neglected; rotations are condensed out before the eigen solve.

    Args:
        ndof: Total number of DOFs
        element_masses: (node_i, node_j, mass_kg) per element
        dof_manager: DOFManager instance
        nodal_masses: Extra lumped mass per node id (kg), e.g. floor mass

    Returns:
        m: Diagonal of the mass matrix, shape (ndof,)
    """
    m = np.zeros(ndof)

    for ni, nj, mass in element_masses:
        for node_id in (ni, nj):
            for k in TRANSLATIONS:
                m[dof_manager.idx(node_id, k)] += mass / 2.0

    for node_id, mass in (nodal_masses or {}).items():
        for k in TRANSLATIONS:
            m[dof_manager.idx(node_id, k)] += mass

    return m


def condense_rotations(
    K: np.ndarray,
    free: np.ndarray,
    dof_per_node: int = 6,
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Static (Guyan) condensation of free rotational DOFs.

        K_c = K_tt - K_tr · K_rr^-1 · K_rt

    Returns:
        (K_c, t): condensed stiffness and the translational free DOFs it
        refers to
    """
    local = free % dof_per_node
    t = free[local < 3]
    r = free[local >= 3]

    Ktt = K[np.ix_(t, t)]
    if r.size == 0:
        return Ktt, t

    Ktr = K[np.ix_(t, r)]
    Krr = K[np.ix_(r, r)]
    try:
        X = np.linalg.solve(Krr, Ktr.T)
    except np.linalg.LinAlgError as e:
        raise MechanismError(f"Rotational stiffness is singular: {e}")
    Kc = Ktt - Ktr @ X
    # restore exact symmetry lost to round-off
    return 0.5 * (Kc + Kc.T), t


def natural_periods(
    K: np.ndarray,
    m: np.ndarray,
    fixed_dofs: Sequence[int],
    n_modes: int = 3,
    dof_per_node: int = 6,
) -> np.ndarray:
    """
    Natural periods (s), longest first.

    Solves K_c·φ = ω²·M·φ on the condensed translational system.

    Args:
        K: Global stiffness matrix
        m: Lumped mass diagonal from ``build_lumped_mass``
        fixed_dofs: Constrained DOF indices
        n_modes: Number of modes to return
        dof_per_node: DOFs per node

    Raises:
        ValueError: No free translational DOFs or non-positive masses
        MechanismError: Zero or negative eigenvalue (unstable structure)
    """
    free = free_dofs(K.shape[0], fixed_dofs)
    Kc, t = condense_rotations(K, free, dof_per_node)

    if t.size == 0:
        raise ValueError("No free translational DOFs - cannot compute modes")

    mt = m[t]
    if np.any(mt <= 0):
        raise ValueError("Mass matrix has non-positive diagonal entries")

    n_actual = min(n_modes, t.size)
    eigenvalues = eigh(
        Kc, np.diag(mt), eigvals_only=True, subset_by_index=[0, n_actual - 1]
    )

    if eigenvalues[0] <= 0.0:
        raise MechanismError(
            f"Non-positive eigenvalue {eigenvalues[0]:.3e}: structure is unstable"
        )

    omega = np.sqrt(eigenvalues)
    periods = 2.0 * np.pi / omega
    logger.debug("Natural periods: %s", np.array2string(periods, precision=4))
    return periods


def fundamental_period(
    K: np.ndarray,
    m: np.ndarray,
    fixed_dofs: Sequence[int],
    dof_per_node: int = 6,
) -> float:
    """First (longest) natural period in seconds."""
    return float(natural_periods(K, m, fixed_dofs, 1, dof_per_node)[0])
