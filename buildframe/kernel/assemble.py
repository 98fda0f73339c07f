# buildframe/kernel/assemble.py
"""
ASSEMBLY: Global Stiffness Matrix and Load Vector
=================================================

Scatter-add of element contributions into the global system. Assembly does
not care what an element is (beam, column, brace): it only needs the
element's DOF map and its stiffness matrix in global coordinates.

    K = zeros(ndof x ndof)
    for each element:
        for each (a, b) in ke:
            K[map[a], map[b]] += ke[a, b]

The result is dense, symmetric and positive semi-definite. It becomes
positive definite once supports are removed by the solver.
"""

import numpy as np
from typing import List, Sequence, Tuple


def _check_dof_map(ndof: int, dof_map: Sequence[int]) -> np.ndarray:
    idx = np.asarray(dof_map, dtype=int)
    if idx.size and (idx.min() < 0 or idx.max() >= ndof):
        raise IndexError(
            f"DOF map {list(dof_map)} references indices outside [0, {ndof})"
        )
    return idx


def assemble_global_K(
    ndof: int,
    contributions: List[Tuple[Sequence[int], np.ndarray]]
) -> np.ndarray:
    """
    Assemble the global stiffness matrix from element contributions.

    Parameters:
    -----------
    ndof : int
        Total number of DOFs in the system (6 x number of nodes)

    contributions : List[Tuple[Sequence[int], np.ndarray]]
        (dof_map, ke) pairs, one per element. ``ke`` is the element
        stiffness in global coordinates, shape (len(dof_map), len(dof_map)).

    Returns:
    --------
    np.ndarray
        Global stiffness matrix, shape (ndof, ndof)

    Raises:
    -------
    IndexError
        If a DOF map points outside [0, ndof)
    ValueError
        If an element matrix does not match its DOF map
    """
    K = np.zeros((ndof, ndof), dtype=float)

    for dof_map, ke in contributions:
        idx = _check_dof_map(ndof, dof_map)
        n = idx.size
        if ke.shape != (n, n):
            raise ValueError(
                f"Element ke shape {ke.shape} doesn't match dof_map length {n}"
            )
        # np.add.at accumulates repeated indices (e.g. both ends on one node)
        np.add.at(K, np.ix_(idx, idx), ke)

    return K


def assemble_global_F(
    ndof: int,
    contributions: List[Tuple[Sequence[int], np.ndarray]]
) -> np.ndarray:
    """
    Assemble a global load vector from (dof_map, fe) pairs.

    Same scatter-add as ``assemble_global_K`` for vectors.
    """
    F = np.zeros(ndof, dtype=float)

    for dof_map, fe in contributions:
        idx = _check_dof_map(ndof, dof_map)
        if fe.shape != (idx.size,):
            raise ValueError(
                f"Element fe shape {fe.shape} doesn't match dof_map length {idx.size}"
            )
        np.add.at(F, idx, fe)

    return F


def add_nodal_load(
    F: np.ndarray,
    dof_map: Sequence[int],
    load_vector: Sequence[float],
) -> None:
    """
    Add a nodal load to the global load vector (in-place).

    Example:
    --------
    >>> F = np.zeros(12)
    >>> add_nodal_load(F, [6, 7, 8, 9, 10, 11], [0, 0, -1000.0, 0, 0, 0])
    >>> F[8]
    -1000.0
    """
    idx = _check_dof_map(F.shape[0], dof_map)
    F[idx] += np.asarray(load_vector, dtype=float)
