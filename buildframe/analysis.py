# buildframe/analysis.py
"""
ANALYSIS PIPELINE
=================

One call runs the whole linear static analysis:

    BuildingParams ──► generate_building ──► StructuralModel
                                                   │
        element stiffness (Tᵀ·k·T) ──► assemble K ◄┘
                                           │
              constrained DOFs, loads ──► solve_linear ──► d, R
                                                           │
        forces, stresses, deflections, drift, periods ◄────┘

Every call builds its own matrices and result records; concurrent calls
on different inputs do not interact.

USAGE:
------
    from buildframe import BuildingParams, run_analysis

    result = run_analysis(BuildingParams(floor_count=5))
    print(result.summary.max_displacement)
    frames = result.to_frames()
"""

import logging
from dataclasses import asdict, dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple, Union

import numpy as np
import pandas as pd

from .config import CONFIG, EngineConfig
from .elements import frame3d_global_stiffness
from .generative.building import BuildingParams, floor_node_masses, generate_building
from .kernel.assemble import assemble_global_K
from .kernel.modal import build_lumped_mass, fundamental_period
from .kernel.solve import AnalysisCancelled, free_dofs, solve_linear
from .loads import empirical_period
from .model import ElementType, StructuralModel
from .post import (
    ADDITIVE_INTERACTION,
    DeflectionCheck,
    DeflectionResult,
    ForceResult,
    InteractionPolicy,
    StressResult,
    check_deflection_limit,
    compute_reactions,
    drift_ratios,
    element_end_forces,
    element_stresses,
    nodal_deflections,
)
from .sections import DEFAULT_SIZING, SizingPolicy

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AnalysisSummary:
    """Headline numbers of one analysis run."""
    max_stress: float
    max_utilization: float
    min_safety_factor: Optional[float]
    max_displacement: float
    max_drift_ratio: float
    deflection_ok: bool
    empirical_period: Optional[float]
    modal_period: Optional[float] = None


@dataclass
class AnalysisResult:
    """Everything produced by ``run_analysis``."""
    model: StructuralModel
    displacements: np.ndarray
    reactions: np.ndarray
    forces: List[ForceResult]
    stresses: List[StressResult]
    deflections: List[DeflectionResult]
    drift_ratios: List[float]
    deflection_checks: List[DeflectionCheck]
    summary: AnalysisSummary
    support_reactions: Dict[int, Tuple[float, ...]] = field(default_factory=dict)
    params: Optional[BuildingParams] = None

    def to_frames(self) -> Dict[str, pd.DataFrame]:
        """
        Result tables keyed by 'forces', 'stresses', 'deflections', 'drift'.

        Element tables are indexed by element id, deflections by node id,
        drift by floor number (1 = first floor above the base).
        """
        forces = pd.DataFrame([asdict(f) for f in self.forces]).set_index('element_id')
        stresses = pd.DataFrame([asdict(s) for s in self.stresses]).set_index('element_id')
        types = {e.id: e.type.value for e in self.model.elements}
        forces.insert(0, 'type', [types[i] for i in forces.index])
        stresses.insert(0, 'type', [types[i] for i in stresses.index])

        deflections = pd.DataFrame([asdict(d) for d in self.deflections]).set_index('node_id')
        drift = pd.DataFrame(
            {'drift_ratio': self.drift_ratios},
            index=pd.Index(range(1, len(self.drift_ratios) + 1), name='floor'),
        )
        return {
            'forces': forces,
            'stresses': stresses,
            'deflections': deflections,
            'drift': drift,
        }

    def validator_payload(self) -> Dict[str, Any]:
        """
        Plain-dict input for an external standards validator.

        Keys: geometry, materials, loads, forces (axial per element),
        moments (max |My|, |Mz| per element), displacements (per node) and
        the headline summary values. Units are SI throughout.
        """
        s = self.summary
        return {
            'geometry': self._geometry(),
            'materials': self._materials(),
            'loads': self._loads(),
            'forces': [
                {'elementId': f.element_id, 'axial': f.axial} for f in self.forces
            ],
            'moments': [
                {'elementId': f.element_id, 'moment': max(abs(f.moment_y), abs(f.moment_z))}
                for f in self.forces
            ],
            'displacements': [
                {'nodeId': d.node_id, 'ux': d.ux, 'uy': d.uy, 'uz': d.uz, 'magnitude': d.magnitude}
                for d in self.deflections
            ],
            'maxStress': s.max_stress,
            'maxUtilization': s.max_utilization,
            'minSafetyFactor': s.min_safety_factor,
            'maxDisplacement': s.max_displacement,
            'maxDriftRatio': s.max_drift_ratio,
            'deflectionOk': s.deflection_ok,
            'fundamentalPeriod': s.modal_period if s.modal_period is not None else s.empirical_period,
        }

    def _geometry(self) -> Dict[str, Any]:
        elevations = [n.z for n in self.model.nodes.values()]
        geometry = {
            'nodeCount': len(self.model.nodes),
            'elementCount': len(self.model.elements),
            'totalHeight': max(elevations) - min(elevations),
        }
        p = self.params
        if p is not None:
            geometry.update({
                'floorCount': int(p.floor_count),
                'floorHeight': p.floor_height,
                'planLength': p.plan_length,
                'planWidth': p.plan_width,
                'baySpacingX': p.bay_spacing_x,
                'baySpacingY': p.bay_spacing_y,
            })
        return geometry

    def _materials(self) -> Dict[str, Any]:
        mat = self.params.material() if self.params is not None else self.model.elements[0].material
        return {'fc': mat.fc, 'fy': mat.fy, 'E': mat.E, 'G': mat.G, 'density': mat.density}

    def _loads(self) -> Dict[str, Any]:
        F = self.model.load_vector()
        loads = {
            'totalFx': float(F[0::6].sum()),
            'totalFy': float(F[1::6].sum()),
            'totalFz': float(F[2::6].sum()),
        }
        p = self.params
        if p is not None:
            loads.update({
                'deadLoad': p.dead_load,
                'liveLoad': p.live_load,
                'windSpeed': p.wind_speed,
                'seismic': dict(p.seismic) if p.seismic else None,
                'deadLoadFactor': p.dead_load_factor,
                'liveLoadFactor': p.live_load_factor,
                'windLoadFactor': p.wind_load_factor,
                'seismicLoadFactor': p.seismic_load_factor,
            })
        return loads


def _resolve_model(
    source: Union[BuildingParams, StructuralModel, Mapping[str, Any]],
    sizing: SizingPolicy,
) -> Tuple[StructuralModel, Optional[BuildingParams]]:
    if isinstance(source, StructuralModel):
        return source, None
    if isinstance(source, Mapping):
        source = BuildingParams.from_dict(source)
    if isinstance(source, BuildingParams):
        return generate_building(source, sizing), source
    raise TypeError(
        f"run_analysis expects BuildingParams, a mapping or a StructuralModel, "
        f"not {type(source).__name__}"
    )


def _modal_period(
    model: StructuralModel,
    K: np.ndarray,
    fixed: List[int],
    params: Optional[BuildingParams],
) -> Optional[float]:
    if any(e.material.density <= 0 for e in model.elements):
        logger.debug("Skipping modal period: element without mass")
        return None
    element_masses = [
        (e.ni, e.nj, e.material.density * e.section.area * model.lengths[e.id])
        for e in model.elements
    ]
    free = free_dofs(model.ndof, fixed)
    if not np.any(free % model.dof_manager.dof_per_node < 3):
        logger.debug("Skipping modal period: no free translational DOFs")
        return None
    nodal = floor_node_masses(params) if params is not None else None
    m = build_lumped_mass(model.ndof, element_masses, model.dof_manager, nodal)
    return fundamental_period(K, m, fixed)


def run_analysis(
    source: Union[BuildingParams, StructuralModel, Mapping[str, Any]],
    config: EngineConfig = CONFIG,
    cancel: Optional[Callable[[], bool]] = None,
    sizing: SizingPolicy = DEFAULT_SIZING,
    policy: InteractionPolicy = ADDITIVE_INTERACTION,
) -> AnalysisResult:
    """
    Run a complete linear static analysis.

    Args:
        source: Building parameters (dataclass or configuration mapping)
            or an already built model
        config: Solver tolerances and serviceability options
        cancel: Optional callable polled between stages; returning True
            abandons the run with AnalysisCancelled
        sizing: Member sizing used when a model is generated
        policy: Utilization and extreme-fiber policy

    Returns:
        AnalysisResult

    Raises:
        ModelError: Invalid parameters or model
        MechanismError: Unstable or insufficiently supported structure
        AnalysisCancelled: ``cancel`` fired
        ZeroCapacityError: A capacity or section property used as a
            divisor is zero
    """
    def check_cancel(stage: str) -> None:
        if cancel is not None and cancel():
            raise AnalysisCancelled(f"Analysis cancelled {stage}")

    model, params = _resolve_model(source, sizing)
    check_cancel("after model generation")

    contributions = [
        (model.element_dof_map(e), frame3d_global_stiffness(model.nodes, e, config.vertical_tol))
        for e in model.elements
    ]
    K = assemble_global_K(model.ndof, contributions)
    F = model.load_vector()
    fixed = model.constrained_dofs()
    check_cancel("after assembly")

    d, R, _ = solve_linear(K, F, fixed, config.cond_limit, cancel)

    forces = [element_end_forces(model, e, d, policy) for e in model.elements]
    stresses = [element_stresses(e, f, policy) for e, f in zip(model.elements, forces)]
    deflections = nodal_deflections(model, d)

    floor_height = params.floor_height if params is not None else None
    drifts = drift_ratios(model, d, floor_height, config.drift_direction)

    if params is not None:
        _, _, sx, sy = params.grid()
        span = max(sx, sy)
    else:
        beams = [model.lengths[e.id] for e in model.elements if e.type == ElementType.BEAM]
        span = max(beams) if beams else max(model.lengths.values())
    checks = [check_deflection_limit(x, span, config.deflection_limit_ratio) for x in deflections]

    elevations = [n.z for n in model.nodes.values()]
    height = max(elevations) - min(elevations)
    Ta = empirical_period(height, config.structural_system) if height > 0 else None
    check_cancel("before modal analysis")
    modal = _modal_period(model, K, fixed, params) if config.compute_modal_period else None

    safety = [s.safety_factor for s in stresses if s.safety_factor is not None]
    summary = AnalysisSummary(
        max_stress=max(abs(s.combined) for s in stresses),
        max_utilization=max(f.utilization for f in forces),
        min_safety_factor=min(safety) if safety else None,
        max_displacement=max(x.magnitude for x in deflections),
        max_drift_ratio=max(drifts) if drifts else 0.0,
        deflection_ok=all(c.passed for c in checks),
        empirical_period=Ta,
        modal_period=modal,
    )

    logger.info(
        "Analysis complete: %d nodes, %d elements, max displacement %.4g m, "
        "max utilization %.3f",
        len(model.nodes), len(model.elements),
        summary.max_displacement, summary.max_utilization,
    )

    return AnalysisResult(
        model=model,
        displacements=d,
        reactions=R,
        forces=forces,
        stresses=stresses,
        deflections=deflections,
        drift_ratios=drifts,
        deflection_checks=checks,
        summary=summary,
        support_reactions=compute_reactions(model, R),
        params=params,
    )
