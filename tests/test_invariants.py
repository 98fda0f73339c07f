import numpy as np
import pytest

from buildframe.elements import (
    frame3d_global_stiffness,
    frame3d_local_stiffness,
    frame3d_rotation,
    frame3d_transform,
)
from buildframe.generative import BuildingParams, generate_building
from buildframe.kernel.assemble import assemble_global_K
from buildframe.kernel.solve import solve_linear
from buildframe.model import (
    Element, ElementType, Material, ModelError, Node, ReferentialError, Section,
    StructuralModel,
)
from buildframe.post import compute_reactions

SECTION = Section(area=0.09, Iy=6.75e-4, Iz=6.75e-4, J=1.1e-3, shear_y=0.075, shear_z=0.075)
CONCRETE = Material(E=23.5e9, G=9.79e9, density=2400.0, fy=400e6, fc=25e6)


def _assemble(model):
    contributions = [
        (model.element_dof_map(e), frame3d_global_stiffness(model.nodes, e))
        for e in model.elements
    ]
    return assemble_global_K(model.ndof, contributions)


def test_stiffness_matrix_symmetry():
    """
    WHAT IS THIS TEST?
    ==================
    The assembled stiffness matrix of a whole building must equal its
    transpose (Maxwell's reciprocal theorem). Every element matrix is
    Tᵀ·k·T with a symmetric k, so any asymmetry means a bug in the
    element terms or in the scatter.
    """
    model = generate_building(BuildingParams(floor_count=2))
    K = _assemble(model)

    assert K.shape == (6 * len(model.nodes), 6 * len(model.nodes))
    np.testing.assert_allclose(K, K.T, rtol=1e-10, atol=1e-3,
                               err_msg="Stiffness matrix is not symmetric!")


DIRECTIONS = [
    (1.0, 0.0, 0.0),
    (0.0, 1.0, 0.0),
    (0.0, 0.0, 1.0),
    (0.0, 0.0, -1.0),
    (1.0, 1.0, 1.0),
    (-2.0, 0.5, 3.0),
]


@pytest.mark.parametrize("direction", DIRECTIONS)
@pytest.mark.parametrize("angle", [0.0, 0.3, np.pi / 2])
def test_rotation_is_orthonormal(direction, angle):
    """r·rᵀ = I and det(r) = +1 for any member direction and roll angle."""
    v = np.asarray(direction) / np.linalg.norm(direction)
    r = frame3d_rotation(*v, angle=angle)

    np.testing.assert_allclose(r @ r.T, np.eye(3), atol=1e-12)
    assert np.isclose(np.linalg.det(r), 1.0)
    np.testing.assert_allclose(r[0], v, atol=1e-12)

    T = frame3d_transform(r)
    np.testing.assert_allclose(T @ T.T, np.eye(12), atol=1e-12)


@pytest.mark.parametrize("direction", DIRECTIONS)
@pytest.mark.parametrize("angle", [0.0, 0.3, np.pi / 2])
def test_element_stiffness_symmetry(direction, angle):
    """Local and global element matrices are symmetric with unequal Iy, Iz."""
    section = Section(area=0.2, Iy=4.2e-3, Iz=2.7e-3, J=3.1e-3, shear_y=0.167, shear_z=0.167)
    length = 4.0 * np.linalg.norm(direction)

    k = frame3d_local_stiffness(CONCRETE.E, CONCRETE.G, section.area,
                                section.Iy, section.Iz, section.J, length)
    np.testing.assert_allclose(k, k.T, rtol=1e-12, atol=0.0)
    assert not np.isclose(k[1, 1], k[2, 2])

    x, y, z = (4.0 * c for c in direction)
    nodes = {1: Node(1, 1.0, 2.0, 0.0), 2: Node(2, 1.0 + x, 2.0 + y, z)}
    element = Element(1, ElementType.BEAM, 1, 2, section, CONCRETE, angle=angle)
    K = frame3d_global_stiffness(nodes, element)

    scale = np.abs(K).max()
    np.testing.assert_allclose(K, K.T, rtol=0.0, atol=1e-12 * scale)
    assert np.all(np.linalg.eigvalsh(K) > -1e-9 * scale)


def test_zero_load_gives_zero_displacement():
    """No load, no movement: every displacement and reaction is exactly zero."""
    model = generate_building(BuildingParams(floor_count=2, dead_load=0.0, live_load=0.0))
    K = _assemble(model)
    F = model.load_vector()
    assert not F.any()

    d, R, _ = solve_linear(K, F, model.constrained_dofs())
    assert not d.any()
    assert np.allclose(R, 0.0)


def test_equilibrium_vertical_forces():
    """
    Newton's first law for the whole building: the vertical support
    reactions add up to the total applied gravity load.
    """
    params = BuildingParams(floor_count=3)
    model = generate_building(params)
    K = _assemble(model)
    F = model.load_vector()
    d, R, _ = solve_linear(K, F, model.constrained_dofs())

    total_gravity = (params.dead_load + params.live_load) * params.floor_area * 1000.0 * 3
    reactions = compute_reactions(model, R)
    total_reaction = sum(r[2] for r in reactions.values())

    assert np.isclose(F[2::6].sum(), -total_gravity, rtol=1e-12)
    assert np.isclose(total_reaction, total_gravity, rtol=1e-8)

    # Free DOFs carry no residual
    free = np.setdiff1d(np.arange(model.ndof), model.constrained_dofs())
    assert np.allclose(R[free], 0.0, atol=1e-6 * total_gravity)


def test_supports_have_zero_displacement():
    model = generate_building(BuildingParams(floor_count=2))
    K = _assemble(model)
    fixed = model.constrained_dofs()
    d, _, _ = solve_linear(K, model.load_vector(), fixed)
    assert np.all(d[fixed] == 0.0)


def test_model_rejects_missing_node():
    nodes = [Node(1, 0.0, 0.0, 0.0), Node(2, 3.0, 0.0, 0.0)]
    elements = [Element(1, ElementType.BEAM, 1, 5, SECTION, CONCRETE)]
    with pytest.raises(ReferentialError):
        StructuralModel.from_lists(nodes, elements)


def test_model_rejects_zero_length_element():
    nodes = [Node(1, 0.0, 0.0, 0.0), Node(2, 0.0, 0.0, 0.0)]
    elements = [Element(1, ElementType.BEAM, 1, 2, SECTION, CONCRETE)]
    with pytest.raises(ModelError, match="zero length"):
        StructuralModel.from_lists(nodes, elements)


def test_model_rejects_gaps_in_node_ids():
    nodes = [Node(1, 0.0, 0.0, 0.0), Node(3, 3.0, 0.0, 0.0)]
    elements = [Element(1, ElementType.BEAM, 1, 3, SECTION, CONCRETE)]
    with pytest.raises(ModelError, match="contiguous"):
        StructuralModel.from_lists(nodes, elements)


def test_model_rejects_empty_model():
    with pytest.raises(ModelError):
        StructuralModel({}, [])


def test_dof_indices_stay_in_range():
    """Constrained DOFs and element maps all fall inside [0, 6n)."""
    model = generate_building(BuildingParams(floor_count=2))
    ndof = model.ndof
    assert ndof == 6 * len(model.nodes)
    assert all(0 <= i < ndof for i in model.constrained_dofs())
    for e in model.elements:
        dof_map = model.element_dof_map(e)
        assert len(dof_map) == 12
        assert all(0 <= i < ndof for i in dof_map)
