# buildframe/kernel/dof.py
"""
DOF MANAGER: Node-to-Equation Indexing for 3D Frames
====================================================

PURPOSE:
--------
Maps (node_id, local_dof) pairs to rows/columns of the global system.
Every node of a space frame carries six degrees of freedom:

    offset:  0   1   2   3   4   5
    DOF:     ux  uy  uz  rx  ry  rz

Node identifiers are 1-based, so the first DOF of node n lives at
index (n - 1) * 6. The same mapping is used for the constrained-DOF set,
the load vector and the element scatter/gather maps, which keeps every
index inside [0, ndof).

USAGE:
------
    dof = DOFManager()
    dof.idx(node_id=2, local_dof=1)     # -> 7
    dof.element_dof_map([1, 2])         # -> [0, 1, ..., 11]
"""

from dataclasses import dataclass
from typing import Iterable, List


# Names of the six nodal DOFs, in offset order
DOF_NAMES = ('ux', 'uy', 'uz', 'rx', 'ry', 'rz')


@dataclass(frozen=True)
class DOFManager:
    """
    Degree-of-freedom indexing for a model with contiguous node ids.

    Attributes:
    -----------
    dof_per_node : int
        Number of DOFs per node (6 for a 3D frame)
    base : int
        Identifier of the first node (1 for generated building models)

    Examples:
    ---------
    >>> dof = DOFManager()
    >>> dof.idx(1, 0)
    0
    >>> dof.idx(3, 2)
    14
    >>> dof.ndof(4)
    24
    """
    dof_per_node: int = 6
    base: int = 1

    def idx(self, node_id: int, local_dof: int) -> int:
        """Global DOF index for ``local_dof`` (0..dof_per_node-1) of ``node_id``."""
        if not 0 <= local_dof < self.dof_per_node:
            raise IndexError(
                f"Local DOF {local_dof} outside 0..{self.dof_per_node - 1}"
            )
        return self.dof_per_node * (node_id - self.base) + local_dof

    def ndof(self, n_nodes: int) -> int:
        """Total number of DOFs (size of K) for ``n_nodes`` nodes."""
        return self.dof_per_node * n_nodes

    def node_dofs(self, node_id: int) -> List[int]:
        """
        All global DOF indices of one node.

        >>> DOFManager().node_dofs(2)
        [6, 7, 8, 9, 10, 11]
        """
        start = self.dof_per_node * (node_id - self.base)
        return list(range(start, start + self.dof_per_node))

    def element_dof_map(self, node_ids: Iterable[int]) -> List[int]:
        """
        Scatter/gather map for an element connecting ``node_ids``.

        For a two-node frame element this is the 12 global indices
        [i-end ux..rz, j-end ux..rz].

        >>> DOFManager().element_dof_map([1, 3])
        [0, 1, 2, 3, 4, 5, 12, 13, 14, 15, 16, 17]
        """
        result = []
        for node_id in node_ids:
            result.extend(self.node_dofs(node_id))
        return result

    def node_of(self, dof_index: int) -> int:
        """Node id owning a global DOF index."""
        return dof_index // self.dof_per_node + self.base


# Pre-configured manager for 3D frame models
DOF_3D_FRAME = DOFManager(dof_per_node=6, base=1)
