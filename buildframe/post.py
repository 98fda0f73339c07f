# buildframe/post.py
"""
POSTPROCESSING: Forces, Stresses, Deflections and Drift
=======================================================

Everything here is derived from one solved displacement vector. Result
records are new objects for every run; nothing is cached.

FORCE RECOVERY (per element):
-----------------------------
The 12 end displacements are gathered through the DOF map and rotated
into local axes. Member forces then follow short closed-form relations
(I = max(Iy, Iz)):

    N  = EA·(u_j - u_i)/L
    Vy = 12EI·(v_j - v_i)/L³        Vz = 12EI·(w_j - w_i)/L³
    T  = GJ·(θx_j - θx_i)/L
    My = 6EI·(θy_i + θy_j)/L        Mz = 6EI·(θz_i + θz_j)/L

These are a simplified recovery, not the full k·d product. The complete
end-force vector is available from ``element_end_forces_local``.

INTERACTION POLICY:
-------------------
Utilization and the extreme-fiber distances come from an
``InteractionPolicy``. The default is the additive check

    U = |N|/(f'c·A) + max(|My|, |Mz|)/(f'c·Iy/c_y)

with c = 0.25 m for columns and 0.30 m (y) / 0.15 m (z) otherwise.
Subclass it to plug in a code interaction equation.
"""

import logging
import math
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

import numpy as np

from .elements import frame3d_element_matrices
from .model import Element, ElementType, ModelError, StructuralModel

logger = logging.getLogger(__name__)


class ZeroCapacityError(ValueError):
    """A capacity, section property or limit used as a divisor is zero."""
    pass


@dataclass(frozen=True)
class ForceResult:
    element_id: int
    axial: float        # N (tension +)
    shear_y: float      # N
    shear_z: float      # N
    torsion: float      # N·m
    moment_y: float     # N·m
    moment_z: float     # N·m
    utilization: float  # demand / capacity


@dataclass(frozen=True)
class StressResult:
    element_id: int
    axial: float        # Pa
    bending_y: float    # Pa
    bending_z: float    # Pa
    shear: float        # Pa
    combined: float     # Pa, von Mises-like
    safety_factor: Optional[float]  # None when there is no stress demand


@dataclass(frozen=True)
class DeflectionResult:
    node_id: int
    ux: float
    uy: float
    uz: float
    rx: float
    ry: float
    rz: float
    magnitude: float    # |(ux, uy, uz)|


@dataclass(frozen=True)
class DeflectionCheck:
    node_id: int
    actual: float
    limit: float
    ratio: float
    passed: bool


class InteractionPolicy:
    """
    Additive axial + bending utilization with fixed extreme-fiber distances.

    This is a simplification, not a design-code interaction equation.
    """

    column_fiber = 0.25
    beam_fiber_y = 0.30
    beam_fiber_z = 0.15

    def extreme_fiber(self, element: Element, axis: str) -> float:
        """Distance from neutral axis to extreme fiber (m) for bending about ``axis``."""
        if element.type == ElementType.COLUMN:
            return self.column_fiber
        return self.beam_fiber_y if axis == 'y' else self.beam_fiber_z

    def allowable_stress(self, element: Element) -> float:
        """Compressive strength for columns, yield strength otherwise."""
        if element.type == ElementType.COLUMN:
            return element.material.fc
        return element.material.fy

    def axial_capacity(self, element: Element) -> float:
        return element.material.fc * element.section.area

    def bending_capacity(self, element: Element) -> float:
        return element.material.fc * element.section.Iy / self.extreme_fiber(element, 'y')

    def utilization(self, element: Element, axial: float, moment_y: float, moment_z: float) -> float:
        Pn = self.axial_capacity(element)
        Mn = self.bending_capacity(element)
        if Pn <= 0 or Mn <= 0:
            raise ZeroCapacityError(
                f"Element {element.id}: zero capacity (Pn={Pn}, Mn={Mn})"
            )
        return abs(axial) / Pn + max(abs(moment_y), abs(moment_z)) / Mn


ADDITIVE_INTERACTION = InteractionPolicy()


def element_local_displacements(
    model: StructuralModel, element: Element, d_global: np.ndarray
) -> np.ndarray:
    """The element's 12 end displacements in local axes."""
    dof_map = model.element_dof_map(element)
    _, T = frame3d_element_matrices(model.nodes, element)
    return T @ d_global[dof_map]


def element_end_forces_local(
    model: StructuralModel, element: Element, d_global: np.ndarray
) -> np.ndarray:
    """
    Full end-force vector f = k_local · d_local, shape (12,).

    [N_i, Vy_i, Vz_i, T_i, My_i, Mz_i, N_j, ..., Mz_j] in local axes,
    forces acting on the element ends.
    """
    k_local, T = frame3d_element_matrices(model.nodes, element)
    return k_local @ (T @ d_global[model.element_dof_map(element)])


def element_end_forces(
    model: StructuralModel,
    element: Element,
    d_global: np.ndarray,
    policy: InteractionPolicy = ADDITIVE_INTERACTION,
) -> ForceResult:
    """Member forces and utilization for one element (simplified recovery)."""
    d = element_local_displacements(model, element, d_global)
    L = model.lengths[element.id]
    sec, mat = element.section, element.material
    E = mat.E
    I = max(sec.Iy, sec.Iz)

    axial = E * sec.area * (d[6] - d[0]) / L
    shear_y = 12 * E * I * (d[7] - d[1]) / L ** 3
    shear_z = 12 * E * I * (d[8] - d[2]) / L ** 3
    torsion = mat.G * sec.J * (d[9] - d[3]) / L
    moment_y = 6 * E * I * (d[4] + d[10]) / L
    moment_z = 6 * E * I * (d[5] + d[11]) / L

    return ForceResult(
        element_id=element.id,
        axial=float(axial),
        shear_y=float(shear_y),
        shear_z=float(shear_z),
        torsion=float(torsion),
        moment_y=float(moment_y),
        moment_z=float(moment_z),
        utilization=float(policy.utilization(element, axial, moment_y, moment_z)),
    )


def element_stresses(
    element: Element,
    force: ForceResult,
    policy: InteractionPolicy = ADDITIVE_INTERACTION,
) -> StressResult:
    """
    Stresses from member forces.

        σa = N/A,  σb = M·c/I,  τ = max(|Vy|/Ay, |Vz|/Az)
        σc = sqrt((σa + σby + σbz)² + 3τ²)
        SF = allowable / |σc|
    """
    sec = element.section
    divisors = {
        'area': sec.area, 'Iy': sec.Iy, 'Iz': sec.Iz,
        'shear_y': sec.shear_y, 'shear_z': sec.shear_z,
    }
    zero = [name for name, value in divisors.items() if value <= 0]
    if zero:
        raise ZeroCapacityError(f"Element {element.id}: non-positive section {zero}")

    axial = force.axial / sec.area
    bending_y = abs(force.moment_y) * policy.extreme_fiber(element, 'y') / sec.Iy
    bending_z = abs(force.moment_z) * policy.extreme_fiber(element, 'z') / sec.Iz
    shear = max(abs(force.shear_y) / sec.shear_y, abs(force.shear_z) / sec.shear_z)
    combined = math.sqrt((axial + bending_y + bending_z) ** 2 + 3 * shear ** 2)

    allowable = policy.allowable_stress(element)
    if allowable <= 0:
        raise ZeroCapacityError(f"Element {element.id}: allowable stress is {allowable}")
    safety = allowable / abs(combined) if combined > 0 else None

    return StressResult(
        element_id=element.id,
        axial=axial,
        bending_y=bending_y,
        bending_z=bending_z,
        shear=shear,
        combined=combined,
        safety_factor=safety,
    )


def nodal_deflections(model: StructuralModel, d_global: np.ndarray) -> List[DeflectionResult]:
    """One record per node, from six consecutive entries of the displacement vector."""
    if d_global.shape != (model.ndof,):
        raise ModelError(
            f"Displacement vector has shape {d_global.shape}, expected ({model.ndof},)"
        )
    blocks = d_global.reshape(-1, 6)
    results = []
    for node_id, row in zip(model.nodes, blocks):
        ux, uy, uz, rx, ry, rz = (float(v) for v in row)
        results.append(DeflectionResult(
            node_id=node_id,
            ux=ux, uy=uy, uz=uz, rx=rx, ry=ry, rz=rz,
            magnitude=math.sqrt(ux * ux + uy * uy + uz * uz),
        ))
    return results


def floor_average_displacement(
    model: StructuralModel, d_global: np.ndarray, direction: int = 0
) -> List[float]:
    """Average |horizontal displacement| of every level, lowest first."""
    averages = []
    for ids in model.levels():
        values = [abs(d_global[model.dof_manager.idx(nid, direction)]) for nid in ids]
        averages.append(float(np.mean(values)))
    return averages


def story_drift_ratio(upper: float, lower: float, height: float) -> float:
    """|upper - lower| / height."""
    if height <= 0:
        raise ZeroCapacityError(f"Story height must be positive (got {height})")
    return abs(upper - lower) / height


def drift_ratios(
    model: StructuralModel,
    d_global: np.ndarray,
    floor_height: Optional[float] = None,
    direction: int = 0,
) -> List[float]:
    """
    Inter-story drift ratio for every floor above the base.

    With ``floor_height`` None, each story height is the elevation
    difference between consecutive levels.
    """
    averages = floor_average_displacement(model, d_global, direction)
    if floor_height is None:
        elevations = [model.nodes[ids[0]].z for ids in model.levels()]
        heights = [elevations[f] - elevations[f - 1] for f in range(1, len(elevations))]
    else:
        heights = [floor_height] * (len(averages) - 1)
    return [
        story_drift_ratio(averages[f], averages[f - 1], heights[f - 1])
        for f in range(1, len(averages))
    ]


def check_deflection_limit(
    deflection: DeflectionResult,
    span: float,
    limit_ratio: float = 250.0,
) -> DeflectionCheck:
    """Pass/fail of a node's total displacement against span / limit_ratio."""
    if span <= 0 or limit_ratio <= 0:
        raise ZeroCapacityError(f"Deflection limit needs positive span and ratio (span={span})")
    limit = span / limit_ratio
    actual = deflection.magnitude
    check = DeflectionCheck(
        node_id=deflection.node_id,
        actual=actual,
        limit=limit,
        ratio=actual / limit,
        passed=actual <= limit,
    )
    if not check.passed:
        logger.warning(
            "Node %d deflection %.4g m exceeds limit %.4g m", deflection.node_id, actual, limit
        )
    return check


def compute_reactions(model: StructuralModel, R: np.ndarray) -> Dict[int, Tuple[float, ...]]:
    """Reaction components at restrained DOFs of every supported node (0 where free)."""
    result = {}
    for node in model.nodes.values():
        if not node.is_supported:
            continue
        dofs = model.dof_manager.node_dofs(node.id)
        result[node.id] = tuple(
            float(R[i]) if fixed else 0.0 for i, fixed in zip(dofs, node.supports)
        )
    return result
