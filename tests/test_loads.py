# File: tests/test_loads.py
"""
Test the loads.py module: tributary gravity, wind velocity pressure and
story forces, and the equivalent lateral force procedure.
"""

import numpy as np
import pytest

from buildframe.loads import (
    SeismicParams,
    distribution_exponent,
    empirical_period,
    floor_mass_per_node,
    floor_seismic_weight,
    gravity_load_per_node,
    seismic_response_coefficient,
    seismic_story_forces,
    wind_story_forces,
    wind_velocity_pressure,
)
from buildframe.model import ModelError


def test_gravity_load_per_node():
    # (5 + 2.5) kN/m² x 144 m² = 1080 kN shared by 9 nodes
    assert np.isclose(gravity_load_per_node(5.0, 2.5, 144.0, 9), 120000.0)
    with pytest.raises(ModelError):
        gravity_load_per_node(5.0, 2.5, 144.0, 0)


def test_wind_velocity_pressure():
    """qz = 0.613 · 0.85 · 1.0 · 0.85 · 1.0 · V²"""
    assert np.isclose(wind_velocity_pressure(40.0), 0.613 * 0.85 * 0.85 * 1600.0)
    assert wind_velocity_pressure(0.0) == 0.0


def test_wind_story_forces_roof_takes_half_story():
    forces = wind_story_forces(30.0, face_width=12.0, floor_height=3.5, floor_count=3)
    qz = wind_velocity_pressure(30.0)

    assert len(forces) == 3
    assert np.isclose(forces[0], qz * 0.8 * 12.0 * 3.5)
    assert np.isclose(forces[1], forces[0])
    assert np.isclose(forces[2], forces[0] / 2)
    # total = pressure over the face up to the roof, less the top half storey
    assert np.isclose(sum(forces), qz * 0.8 * 12.0 * 3.5 * 2.5)


def test_empirical_period():
    assert np.isclose(empirical_period(10.5), 0.0466 * 10.5 ** 0.9)
    assert np.isclose(empirical_period(10.5, 'steel'), 0.0724 * 10.5 ** 0.8)
    with pytest.raises(ModelError, match="timber"):
        empirical_period(10.5, 'timber')


@pytest.mark.parametrize("Ta, expected", [
    (0.5, 0.125),               # SDS / R governs
    (1.0, 0.6 / (1.0 * 8.0)),   # SD1 / (Ta·R)
    (8.0, 0.044),               # beyond TL, minimum governs
])
def test_seismic_response_coefficient(Ta, expected):
    seismic = SeismicParams(sds=1.0, sd1=0.6)
    assert np.isclose(seismic_response_coefficient(seismic, Ta), expected)


def test_seismic_response_coefficient_long_period_branch():
    seismic = SeismicParams(sds=1.0, sd1=5.0, tl=4.0)
    Ta = 5.0
    expected = 5.0 * 4.0 / (Ta * Ta * 8.0)
    assert np.isclose(seismic_response_coefficient(seismic, Ta), expected)


def test_distribution_exponent():
    assert distribution_exponent(0.3) == 1.0
    assert distribution_exponent(3.0) == 2.0
    assert np.isclose(distribution_exponent(1.5), 1.5)


def test_seismic_story_forces_sum_to_base_shear():
    seismic = SeismicParams(sds=1.0, sd1=0.6)
    weights = [1000e3, 1000e3, 800e3]
    elevations = [3.5, 7.0, 10.5]
    Ta = empirical_period(10.5)

    forces = seismic_story_forces(seismic, Ta, weights, elevations)
    base_shear = seismic_response_coefficient(seismic, Ta) * sum(weights)

    assert np.isclose(sum(forces), base_shear)
    # k = 1 for a short period: force ∝ w·h
    assert np.isclose(forces[1] / forces[0], 2.0)


def test_seismic_story_forces_length_mismatch():
    with pytest.raises(ModelError):
        seismic_story_forces(SeismicParams(1.0, 0.6), 0.3, [1.0, 2.0], [3.5])


def test_seismic_params_from_dict():
    p = SeismicParams.from_dict({'SDS': 1.0, 'SD1': 0.6, 'R': 5, 'Ie': 1.25})
    assert (p.sds, p.sd1, p.r, p.importance, p.tl) == (1.0, 0.6, 5.0, 1.25, 6.0)

    with pytest.raises(ModelError):
        SeismicParams.from_dict({'SDS': 1.0})
    with pytest.raises(ModelError):
        SeismicParams.from_dict({'SDS': 1.0, 'SD1': 0.6, 'Cd': 5.5})
    with pytest.raises(ModelError):
        SeismicParams(sds=1.0, sd1=0.6, r=0.0)


def test_floor_weight_and_mass():
    W = floor_seismic_weight(5.0, 2.5, 144.0)
    assert np.isclose(W, (5.0 + 0.625) * 144.0 * 1000.0)
    assert np.isclose(floor_mass_per_node(5.0, 2.5, 144.0, 9), W / 9.81 / 9)
