# buildframe/loads.py
"""
NODAL LOADS FOR GENERATED BUILDINGS
===================================

All loads reach the model as lumped nodal forces. Three sources:

GRAVITY (tributary area):
    The whole floor load (dead + live) x plan area is shared equally by
    every grid node of that floor, as a downward (-Z) point load. The
    foundation level carries nothing.

WIND (velocity pressure on the windward face):
    qz = 0.613·Kz·Kzt·Kd·Ke·V²            (Pa, V in m/s)
    F_story = qz·Cp·face_width·h_trib      (N)
    h_trib is one storey height, half a storey at the roof.

SEISMIC (equivalent lateral force):
    Cs = SDS / (R/Ie), capped by SD1/(Ta·R/Ie) (or SD1·TL/(Ta²·R/Ie)
    beyond TL), floored by max(0.044·SDS·Ie, 0.01)
    V  = Cs·W,  W = Σ floor weights
    F_x = V·w_x·h_x^k / Σ(w_i·h_i^k),  k = 1 (Ta <= 0.5) .. 2 (Ta >= 2.5)

Units: area loads in kN/m², converted to N here.
"""

from dataclasses import dataclass
from typing import Any, List, Mapping, Sequence

from .model import ModelError

GRAVITY = 9.81  # m/s²

# Exposure factors for the velocity pressure (exposure C, flat terrain)
WIND_KZ = 0.85
WIND_KZT = 1.0
WIND_KD = 0.85
WIND_KE = 1.0
WINDWARD_CP = 0.8

# Empirical period coefficients (Ct, x) per structural system
PERIOD_COEFFICIENTS = {
    'concrete': (0.0466, 0.9),
    'steel': (0.0724, 0.8),
}


def gravity_load_per_node(
    dead_load: float, live_load: float, floor_area: float, nodes_per_floor: int
) -> float:
    """Downward force magnitude (N) at each node of a loaded floor."""
    if nodes_per_floor <= 0:
        raise ModelError("A floor needs at least one node to carry load")
    return (dead_load + live_load) * floor_area * 1000.0 / nodes_per_floor


def wind_velocity_pressure(
    wind_speed: float,
    Kz: float = WIND_KZ,
    Kzt: float = WIND_KZT,
    Kd: float = WIND_KD,
    Ke: float = WIND_KE,
) -> float:
    """Velocity pressure qz (Pa) for a wind speed in m/s."""
    return 0.613 * Kz * Kzt * Kd * Ke * wind_speed ** 2


def wind_story_forces(
    wind_speed: float,
    face_width: float,
    floor_height: float,
    floor_count: int,
    cp: float = WINDWARD_CP,
) -> List[float]:
    """Lateral wind force (N) at floors 1..floor_count."""
    qz = wind_velocity_pressure(wind_speed)
    forces = []
    for floor in range(1, floor_count + 1):
        h_trib = floor_height / 2.0 if floor == floor_count else floor_height
        forces.append(qz * cp * face_width * h_trib)
    return forces


def empirical_period(height: float, structural_system: str = 'concrete') -> float:
    """Approximate fundamental period Ta = Ct·h^x (s)."""
    try:
        Ct, x = PERIOD_COEFFICIENTS[structural_system]
    except KeyError:
        raise ModelError(
            f"Unknown structural system '{structural_system}'. "
            f"Use one of {sorted(PERIOD_COEFFICIENTS)}"
        )
    return Ct * height ** x


@dataclass(frozen=True)
class SeismicParams:
    """
    Design spectral parameters for the equivalent lateral force method.

    sds, sd1 : design spectral accelerations (g) at short period and 1 s
    r        : response modification factor
    importance : importance factor Ie
    tl       : long-period transition period (s)
    """
    sds: float
    sd1: float
    r: float = 8.0
    importance: float = 1.0
    tl: float = 6.0

    _ALIASES = {
        'sds': 'sds', 'SDS': 'sds',
        'sd1': 'sd1', 'SD1': 'sd1',
        'r': 'r', 'R': 'r',
        'importance': 'importance', 'Ie': 'importance', 'ie': 'importance',
        'tl': 'tl', 'TL': 'tl',
    }

    def __post_init__(self):
        if self.sds < 0 or self.sd1 < 0:
            raise ModelError("Spectral accelerations must be non-negative")
        if self.r <= 0 or self.importance <= 0 or self.tl <= 0:
            raise ModelError("R, Ie and TL must be positive")

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'SeismicParams':
        kwargs = {}
        for key, value in data.items():
            name = cls._ALIASES.get(key)
            if name is None:
                raise ModelError(f"Unknown seismic parameter '{key}'")
            kwargs[name] = float(value)
        if 'sds' not in kwargs or 'sd1' not in kwargs:
            raise ModelError("Seismic parameters need both SDS and SD1")
        return cls(**kwargs)


def seismic_response_coefficient(seismic: SeismicParams, Ta: float) -> float:
    """Seismic response coefficient Cs for period Ta."""
    if Ta <= 0:
        raise ModelError(f"Period must be positive (Ta={Ta})")
    r_ie = seismic.r / seismic.importance
    cs = seismic.sds / r_ie
    if Ta <= seismic.tl:
        cs_max = seismic.sd1 / (Ta * r_ie)
    else:
        cs_max = seismic.sd1 * seismic.tl / (Ta * Ta * r_ie)
    cs = min(cs, cs_max)
    cs_min = max(0.044 * seismic.sds * seismic.importance, 0.01)
    return max(cs, cs_min)


def distribution_exponent(Ta: float) -> float:
    """Vertical distribution exponent k."""
    if Ta <= 0.5:
        return 1.0
    if Ta >= 2.5:
        return 2.0
    return 1.0 + (Ta - 0.5) / 2.0


def seismic_story_forces(
    seismic: SeismicParams,
    Ta: float,
    floor_weights: Sequence[float],
    floor_elevations: Sequence[float],
) -> List[float]:
    """
    Lateral seismic force (N) per floor.

    Args:
        seismic: Spectral parameters
        Ta: Fundamental period used for Cs and k (s)
        floor_weights: Seismic weight per floor (N), floors 1..n
        floor_elevations: Height of each floor above the base (m)
    """
    if len(floor_weights) != len(floor_elevations):
        raise ModelError("floor_weights and floor_elevations differ in length")

    base_shear = seismic_response_coefficient(seismic, Ta) * sum(floor_weights)
    k = distribution_exponent(Ta)
    weighted = [w * h ** k for w, h in zip(floor_weights, floor_elevations)]
    total = sum(weighted)
    if total <= 0:
        return [0.0] * len(floor_weights)
    return [base_shear * wh / total for wh in weighted]


def floor_seismic_weight(dead_load: float, live_load: float, floor_area: float) -> float:
    """Seismic weight of one floor (N): dead + 25% live."""
    return (dead_load + 0.25 * live_load) * floor_area * 1000.0


def floor_mass_per_node(
    dead_load: float,
    live_load: float,
    floor_area: float,
    nodes_per_floor: int,
    g: float = GRAVITY,
) -> float:
    """Lumped floor mass (kg) at each node of a floor, for modal analysis."""
    return floor_seismic_weight(dead_load, live_load, floor_area) / g / nodes_per_floor

