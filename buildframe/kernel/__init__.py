# buildframe/kernel - Dimension-agnostic analysis core
"""
KERNEL: DOF INDEXING, ASSEMBLY AND SOLUTION
===========================================

The kernel knows nothing about beams, columns or buildings. It needs:
- A way to map (node_id, local_dof) -> global_dof_index
- Element stiffness matrices in global coordinates
- The constrained DOF set
- A load vector

Element physics lives in ``buildframe.elements``; model generation in
``buildframe.generative``.
"""

from .dof import DOFManager, DOF_3D_FRAME, DOF_NAMES
from .assemble import assemble_global_K, assemble_global_F, add_nodal_load
from .solve import solve_linear, MechanismError, AnalysisCancelled

__all__ = [
    'DOFManager',
    'DOF_3D_FRAME',
    'DOF_NAMES',
    'assemble_global_K',
    'assemble_global_F',
    'add_nodal_load',
    'solve_linear',
    'MechanismError',
    'AnalysisCancelled',
]
