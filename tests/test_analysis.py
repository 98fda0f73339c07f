"""
End-to-end pipeline: run_analysis on generated buildings and hand-built
models.
"""

import numpy as np
import pandas as pd
import pytest

from buildframe import (
    AnalysisCancelled,
    BuildingParams,
    EngineConfig,
    MechanismError,
    ModelError,
    run_analysis,
)
from buildframe.loads import empirical_period, wind_story_forces
from buildframe.model import FIXED, Element, ElementType, Material, Node, Section, StructuralModel


def test_gravity_building_summary():
    result = run_analysis(BuildingParams(floor_count=2))
    s = result.summary

    assert len(result.forces) == len(result.stresses) == 42
    assert len(result.deflections) == 27
    assert len(result.drift_ratios) == 2

    assert s.max_displacement > 0.0
    assert s.max_stress > 0.0
    assert 0.0 < s.max_utilization < 1.0
    assert s.min_safety_factor is not None and s.min_safety_factor > 1.0
    assert np.isclose(s.empirical_period, empirical_period(7.0))
    assert s.modal_period is not None and s.modal_period > 0.0

    # gravity is balanced by the vertical reactions
    total = sum(r[2] for r in result.support_reactions.values())
    assert np.isclose(total, 7.5 * 144.0 * 1000.0 * 2, rtol=1e-8)
    print(f"✓ max displacement {s.max_displacement * 1000:.3f} mm, T1 = {s.modal_period:.3f} s")


def test_wind_building_horizontal_equilibrium():
    params = BuildingParams(floor_count=2, wind_speed=35.0)
    result = run_analysis(params)

    applied = sum(wind_story_forces(35.0, params.plan_width, params.floor_height, 2))
    reaction = sum(r[0] for r in result.support_reactions.values())
    assert np.isclose(reaction, -applied, rtol=1e-8)

    # the building sways along +X
    assert result.summary.max_drift_ratio > 0.0
    roof = [d for d in result.deflections if d.node_id >= 19]
    assert all(d.ux > 0.0 for d in roof)


def test_accepts_configuration_mapping():
    result = run_analysis({'floorCount': 1, 'planLength': 6.0, 'planWidth': 6.0})
    assert len(result.model.nodes) == 8
    assert len(result.model.elements) == 8


def test_to_frames():
    result = run_analysis(BuildingParams(floor_count=2))
    frames = result.to_frames()

    assert set(frames) == {'forces', 'stresses', 'deflections', 'drift'}
    assert isinstance(frames['forces'], pd.DataFrame)
    assert len(frames['forces']) == 42
    assert frames['forces'].index.name == 'element_id'
    assert (frames['forces']['type'] == 'column').sum() == 18
    assert list(frames['deflections'].index) == list(range(1, 28))
    assert list(frames['drift'].index) == [1, 2]


def test_validator_payload():
    params = BuildingParams(floor_count=2, wind_speed=30.0, seismic={'SDS': 1.0, 'SD1': 0.6})
    result = run_analysis(params)
    payload = result.validator_payload()
    assert payload['maxDisplacement'] == result.summary.max_displacement
    assert payload['fundamentalPeriod'] == result.summary.modal_period

    geometry = payload['geometry']
    assert geometry['floorCount'] == 2
    assert geometry['floorHeight'] == 3.5
    assert (geometry['planLength'], geometry['planWidth']) == (12.0, 12.0)
    assert (geometry['baySpacingX'], geometry['baySpacingY']) == (6.0, 6.0)
    assert np.isclose(geometry['totalHeight'], 7.0)

    materials = payload['materials']
    assert np.isclose(materials['fc'], 25e6)
    assert np.isclose(materials['fy'], 400e6)
    assert np.isclose(materials['E'], 23.5e9)
    assert materials['density'] == 2400.0

    loads = payload['loads']
    assert (loads['deadLoad'], loads['liveLoad'], loads['windSpeed']) == (5.0, 2.5, 30.0)
    assert loads['seismic'] == {'SDS': 1.0, 'SD1': 0.6}
    assert loads['totalFx'] > 0.0

    assert len(payload['forces']) == len(payload['moments']) == 42
    assert len(payload['displacements']) == 27
    first = result.forces[0]
    assert payload['forces'][0] == {'elementId': first.element_id, 'axial': first.axial}
    assert payload['moments'][0]['moment'] == max(abs(first.moment_y), abs(first.moment_z))
    roof = payload['displacements'][-1]
    assert roof['nodeId'] == 27
    assert roof['ux'] == result.deflections[-1].ux


def test_validator_payload_for_hand_built_model():
    section = Section(area=0.01, Iy=8e-6, Iz=8e-6, J=1e-6, shear_y=0.008, shear_z=0.008)
    steel = Material(E=210e9, G=81e9, density=7850.0, fy=250e6, fc=250e6)
    model = StructuralModel.from_lists(
        [Node(1, 0.0, 0.0, 0.0, supports=FIXED), Node(2, 3.0, 0.0, 0.0, loads=(0, 0, -1e3, 0, 0, 0))],
        [Element(1, ElementType.BEAM, 1, 2, section, steel)],
    )
    result = run_analysis(model)
    payload = result.validator_payload()
    assert payload['geometry'] == {'nodeCount': 2, 'elementCount': 1, 'totalHeight': 0.0}
    assert payload['materials']['fy'] == 250e6
    assert payload['loads']['totalFz'] == -1e3
    assert 'deadLoad' not in payload['loads']
    f = result.forces[0]
    assert payload['moments'][0]['moment'] == max(abs(f.moment_y), abs(f.moment_z)) > 0.0


def test_modal_period_can_be_disabled():
    config = EngineConfig(compute_modal_period=False)
    result = run_analysis(BuildingParams(floor_count=1), config=config)
    assert result.summary.modal_period is None
    assert result.validator_payload()['fundamentalPeriod'] == result.summary.empirical_period


def test_results_are_independent_between_runs():
    a = run_analysis(BuildingParams(floor_count=2))
    b = run_analysis(BuildingParams(floor_count=2, dead_load=10.0))
    assert a.displacements is not b.displacements
    assert b.summary.max_displacement > a.summary.max_displacement
    again = run_analysis(BuildingParams(floor_count=2))
    np.testing.assert_allclose(a.displacements, again.displacements, rtol=1e-12, atol=1e-15)


def test_cancelled_analysis():
    with pytest.raises(AnalysisCancelled):
        run_analysis(BuildingParams(floor_count=2), cancel=lambda: True)


def test_invalid_parameters_raise_before_solving():
    with pytest.raises(ModelError):
        run_analysis(BuildingParams(floor_height=0.0))


def test_unsupported_model_is_a_mechanism():
    section = Section(area=0.01, Iy=8e-6, Iz=8e-6, J=1e-6, shear_y=0.008, shear_z=0.008)
    steel = Material(E=210e9, G=81e9, density=7850.0, fy=250e6, fc=250e6)
    model = StructuralModel.from_lists(
        [Node(1, 0.0, 0.0, 0.0), Node(2, 0.0, 0.0, 3.0, loads=(1e3, 0, 0, 0, 0, 0))],
        [Element(1, ElementType.COLUMN, 1, 2, section, steel)],
    )
    with pytest.raises(MechanismError):
        run_analysis(model)


def test_rejects_unknown_source_type():
    with pytest.raises(TypeError):
        run_analysis(42)


def test_rotation_only_model_skips_modal_period():
    """
    Both ends pinned in translation and torsion: only the bending
    rotations are free, so there is no lateral mode to report.
    """
    section = Section(area=0.01, Iy=8e-6, Iz=8e-6, J=1e-6, shear_y=0.008, shear_z=0.008)
    steel = Material(E=210e9, G=81e9, density=7850.0, fy=250e6, fc=250e6)
    restraint = (True, True, True, True, False, False)
    model = StructuralModel.from_lists(
        [
            Node(1, 0.0, 0.0, 0.0, supports=restraint, loads=(0, 0, 0, 0, 1000.0, 0)),
            Node(2, 3.0, 0.0, 0.0, supports=restraint),
        ],
        [Element(1, ElementType.BEAM, 1, 2, section, steel)],
    )
    result = run_analysis(model)

    assert result.summary.modal_period is None
    assert result.summary.empirical_period is None
    ry1 = result.displacements[model.dof_manager.idx(1, 4)]
    ry2 = result.displacements[model.dof_manager.idx(2, 4)]
    # loaded end M·L/(3EI), far end rotates back by half
    assert np.isclose(ry1, 1000.0 * 3.0 / (3 * 210e9 * 8e-6))
    assert np.isclose(ry2, -ry1 / 2)
