# buildframe/generative/building.py
"""
BUILDING GENERATOR: Parametric Multi-Storey Frames
==================================================

PURPOSE:
--------
Turn a building description (storeys, plan, bays, materials, loads) into a
``StructuralModel`` ready for analysis.

The generator creates:
1. A grid of nodes at every (floor, ix, iy) combination
2. Columns between each grid point and the one directly above
3. Beams between adjacent grid points along X and along Y, on every
   floor above the foundation
4. Fixed supports (all six DOFs) at floor 0
5. Gravity, and optionally wind and seismic, loads lumped at the nodes

NUMBERING:
----------
Node ids start at 1 and run x fastest, then y, then floor:

    id = floor·(nx+1)·(ny+1) + iy·(nx+1) + ix + 1

Element ids start at 1: all columns, then X beams, then Y beams.

GRID:
-----
The number of bays along X is round(plan_length / bay_spacing_x), at
least one, and the spacing is then adjusted so the grid spans the plan
exactly. Likewise along Y.

LOAD FACTORS:
-------------
Area loads and lateral story forces are multiplied by their factors before
they reach the nodes; all factors default to 1.0 (service loads). Floor
masses and seismic weights always use the unfactored area loads.
"""

import logging
import math
import numbers
from dataclasses import dataclass, fields
from typing import Any, Dict, List, Mapping, Optional, Tuple

import numpy as np

from ..model import (
    Element, ElementType, FIXED, FREE, Material, ModelError, Node, StructuralModel,
)
from ..sections import DEFAULT_SIZING, SizingPolicy
from .. import loads as L

logger = logging.getLogger(__name__)


@dataclass
class BuildingParams:
    """
    Parameters of a regular building frame.

    Geometry:
    ---------
    floor_count : int
        Number of storeys above the foundation
    floor_height : float
        Storey height (m)
    plan_length, plan_width : float
        Plan dimensions along X and Y (m)
    bay_spacing_x, bay_spacing_y : float
        Nominal column spacing along X and Y (m)

    Materials (concrete frame):
    ---------------------------
    concrete_strength : float      f'c (MPa)
    steel_yield : float            fy (MPa)
    concrete_elastic_modulus : float  Ec (MPa)
    poisson_ratio : float
    concrete_density : float       (kg/m³)

    Loads:
    ------
    dead_load, live_load : float
        Area loads (kN/m²)
    wind_speed : float
        Basic wind speed (m/s); 0 disables wind
    seismic : dict, optional
        Spectral parameters (SDS, SD1, R, Ie, TL); None disables seismic
    dead_load_factor, live_load_factor : float
        Factors on the area loads (1.0 = service level; 1.2 / 1.6 gives
        the strength combination)
    wind_load_factor, seismic_load_factor : float
        Factors on the lateral story forces
    """
    floor_count: int = 3
    floor_height: float = 3.5
    plan_length: float = 12.0
    plan_width: float = 12.0
    bay_spacing_x: float = 6.0
    bay_spacing_y: float = 6.0

    concrete_strength: float = 25.0
    steel_yield: float = 400.0
    concrete_elastic_modulus: float = 23500.0
    poisson_ratio: float = 0.2
    concrete_density: float = 2400.0

    dead_load: float = 5.0
    live_load: float = 2.5
    wind_speed: float = 0.0
    seismic: Optional[Dict[str, float]] = None

    dead_load_factor: float = 1.0
    live_load_factor: float = 1.0
    wind_load_factor: float = 1.0
    seismic_load_factor: float = 1.0

    # camelCase keys of the external configuration object
    _ALIASES = {
        'floorCount': 'floor_count',
        'floorHeight': 'floor_height',
        'planLength': 'plan_length',
        'planWidth': 'plan_width',
        'baySpacingX': 'bay_spacing_x',
        'baySpacingY': 'bay_spacing_y',
        'concreteStrength': 'concrete_strength',
        'steelYield': 'steel_yield',
        'concreteElasticModulus': 'concrete_elastic_modulus',
        'poissonRatio': 'poisson_ratio',
        'concreteDensity': 'concrete_density',
        'deadLoad': 'dead_load',
        'liveLoad': 'live_load',
        'windSpeed': 'wind_speed',
        'seismicParameters': 'seismic',
        'deadLoadFactor': 'dead_load_factor',
        'liveLoadFactor': 'live_load_factor',
        'windLoadFactor': 'wind_load_factor',
        'seismicLoadFactor': 'seismic_load_factor',
    }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'BuildingParams':
        """
        Build parameters from a configuration mapping.

        Accepts snake_case field names and the camelCase keys of the
        external configuration object. Unknown keys raise ModelError.
        """
        names = {f.name for f in fields(cls)}
        kwargs = {}
        for key, value in data.items():
            name = cls._ALIASES.get(key, key)
            if name not in names:
                raise ModelError(f"Unknown building parameter '{key}'")
            kwargs[name] = value
        return cls(**kwargs)

    @property
    def total_height(self) -> float:
        return self.floor_count * self.floor_height

    @property
    def floor_area(self) -> float:
        return self.plan_length * self.plan_width

    def grid(self) -> Tuple[int, int, float, float]:
        """(nx, ny, spacing_x, spacing_y) after snapping to the plan."""
        nx = max(1, int(round(self.plan_length / self.bay_spacing_x)))
        ny = max(1, int(round(self.plan_width / self.bay_spacing_y)))
        return nx, ny, self.plan_length / nx, self.plan_width / ny

    def seismic_params(self) -> Optional[L.SeismicParams]:
        if not self.seismic:
            return None
        return L.SeismicParams.from_dict(self.seismic)

    def material(self) -> Material:
        """Concrete material in SI units."""
        E = self.concrete_elastic_modulus * 1e6
        return Material(
            E=E,
            G=E / (2 * (1 + self.poisson_ratio)),
            density=self.concrete_density,
            fy=self.steel_yield * 1e6,
            fc=self.concrete_strength * 1e6,
        )

    def validate(self) -> None:
        """Raise ModelError on any invalid parameter."""
        count = self.floor_count
        if isinstance(count, bool) or not isinstance(count, numbers.Integral) or count < 1:
            raise ModelError(f"floor_count must be a positive integer (got {self.floor_count})")
        positive = {
            'floor_height': self.floor_height,
            'plan_length': self.plan_length,
            'plan_width': self.plan_width,
            'bay_spacing_x': self.bay_spacing_x,
            'bay_spacing_y': self.bay_spacing_y,
            'concrete_strength': self.concrete_strength,
            'steel_yield': self.steel_yield,
            'concrete_elastic_modulus': self.concrete_elastic_modulus,
            'concrete_density': self.concrete_density,
        }
        for name, value in positive.items():
            if not (_is_number(value) and math.isfinite(value) and value > 0):
                raise ModelError(f"{name} must be positive (got {value})")
        if not (_is_number(self.poisson_ratio) and 0.0 <= self.poisson_ratio < 0.5):
            raise ModelError(f"poisson_ratio must be in [0, 0.5) (got {self.poisson_ratio})")
        non_negative = (
            'dead_load', 'live_load', 'wind_speed',
            'dead_load_factor', 'live_load_factor', 'wind_load_factor', 'seismic_load_factor',
        )
        for name in non_negative:
            value = getattr(self, name)
            if not (_is_number(value) and math.isfinite(value) and value >= 0):
                raise ModelError(f"{name} must be non-negative (got {value})")
        self.seismic_params()


def _is_number(value: Any) -> bool:
    return isinstance(value, numbers.Real) and not isinstance(value, bool)


def _node_id(floor: int, ix: int, iy: int, nx: int, ny: int) -> int:
    return floor * (nx + 1) * (ny + 1) + iy * (nx + 1) + ix + 1


def _lateral_forces(params: BuildingParams) -> Tuple[List[float], List[float]]:
    """Factored wind and seismic story forces along +X for floors 1..n."""
    n = int(params.floor_count)
    wind = [0.0] * n
    if params.wind_speed > 0:
        wind = L.wind_story_forces(
            params.wind_speed, params.plan_width, params.floor_height, n
        )

    seismic = [0.0] * n
    sp = params.seismic_params()
    if sp is not None:
        Ta = L.empirical_period(params.total_height)
        weights = [L.floor_seismic_weight(params.dead_load, params.live_load, params.floor_area)] * n
        elevations = [f * params.floor_height for f in range(1, n + 1)]
        seismic = L.seismic_story_forces(sp, Ta, weights, elevations)

    return (
        [params.wind_load_factor * w for w in wind],
        [params.seismic_load_factor * s for s in seismic],
    )


def generate_building(
    params: BuildingParams,
    sizing: SizingPolicy = DEFAULT_SIZING,
) -> StructuralModel:
    """
    Generate a complete building frame model from parameters.

    Parameters:
    -----------
    params : BuildingParams
        Building description
    sizing : SizingPolicy
        Member sizing ratios (defaults reproduce the standard policy)

    Returns:
    --------
    StructuralModel
        Validated model with supports and nodal loads

    Raises:
    -------
    ModelError
        If any parameter is invalid; raised before any element is built

    Example:
    --------
    >>> model = generate_building(BuildingParams(floor_count=2))
    >>> len(model.nodes), len(model.elements)
    (27, 42)
    """
    params.validate()

    nx, ny, sx, sy = params.grid()
    n_floors = int(params.floor_count)
    per_floor = (nx + 1) * (ny + 1)
    material = params.material()

    # Accumulate nodal loads before the (immutable) nodes are created
    node_loads: Dict[int, np.ndarray] = {}
    for floor in range(n_floors + 1):
        for iy in range(ny + 1):
            for ix in range(nx + 1):
                node_loads[_node_id(floor, ix, iy, nx, ny)] = np.zeros(6)

    p_gravity = L.gravity_load_per_node(
        params.dead_load_factor * params.dead_load,
        params.live_load_factor * params.live_load,
        params.floor_area, per_floor,
    )
    wind, seismic = _lateral_forces(params)

    for floor in range(1, n_floors + 1):
        for iy in range(ny + 1):
            for ix in range(nx + 1):
                f = node_loads[_node_id(floor, ix, iy, nx, ny)]
                f[2] -= p_gravity
                f[0] += seismic[floor - 1] / per_floor
                if ix == 0:
                    # windward face at x = 0
                    f[0] += wind[floor - 1] / (ny + 1)

    nodes: Dict[int, Node] = {}
    for floor in range(n_floors + 1):
        for iy in range(ny + 1):
            for ix in range(nx + 1):
                nid = _node_id(floor, ix, iy, nx, ny)
                nodes[nid] = Node(
                    id=nid,
                    x=ix * sx,
                    y=iy * sy,
                    z=floor * params.floor_height,
                    supports=FIXED if floor == 0 else FREE,
                    loads=tuple(float(v) for v in node_loads[nid]),
                )

    column_section = sizing.column_section(params.total_height)
    beam_section = sizing.beam_section(max(sx, sy))

    elements: List[Element] = []

    def add(kind: ElementType, ni: int, nj: int, section) -> None:
        elements.append(Element(
            id=len(elements) + 1, type=kind, ni=ni, nj=nj,
            section=section, material=material,
        ))

    for floor in range(n_floors):
        for iy in range(ny + 1):
            for ix in range(nx + 1):
                add(ElementType.COLUMN,
                    _node_id(floor, ix, iy, nx, ny),
                    _node_id(floor + 1, ix, iy, nx, ny),
                    column_section)

    for floor in range(1, n_floors + 1):
        for iy in range(ny + 1):
            for ix in range(nx):
                add(ElementType.BEAM,
                    _node_id(floor, ix, iy, nx, ny),
                    _node_id(floor, ix + 1, iy, nx, ny),
                    beam_section)

    for floor in range(1, n_floors + 1):
        for iy in range(ny):
            for ix in range(nx + 1):
                add(ElementType.BEAM,
                    _node_id(floor, ix, iy, nx, ny),
                    _node_id(floor, ix, iy + 1, nx, ny),
                    beam_section)

    model = StructuralModel(nodes, elements)
    logger.debug(
        "Generated building: %d floors, %dx%d bays, %d nodes, %d elements",
        n_floors, nx, ny, len(nodes), len(elements),
    )
    return model


def floor_node_masses(params: BuildingParams) -> Dict[int, float]:
    """Lumped floor mass (kg) at every node above the foundation."""
    nx, ny, _, _ = params.grid()
    per_floor = (nx + 1) * (ny + 1)
    m = L.floor_mass_per_node(params.dead_load, params.live_load, params.floor_area, per_floor)
    masses = {}
    for floor in range(1, int(params.floor_count) + 1):
        for iy in range(ny + 1):
            for ix in range(nx + 1):
                masses[_node_id(floor, ix, iy, nx, ny)] = m
    return masses
