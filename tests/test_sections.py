"""
Section properties and member sizing.
"""

import numpy as np
import pytest

from buildframe.model import ModelError
from buildframe.sections import (
    DEFAULT_SIZING, SizingPolicy, rectangular_section, torsional_constant,
)


def test_torsional_constant_square_branch():
    """a/c = 1 uses the 16/3 coefficient."""
    J = torsional_constant(0.3, 0.3)
    expected = 0.3 * 0.3**3 * (16.0 / 3.0 - 3.36 * (1 - 1 / 12))
    assert np.isclose(J, expected, rtol=1e-12)
    assert np.isclose(J, 0.018252, rtol=1e-9)


def test_torsional_constant_slender_branch():
    """a/c = 2 uses the 1/3 coefficient; argument order does not matter."""
    expected = 0.4 * 0.2**3 * (1.0 / 3.0 - 0.21 * 0.5 * (1 - 0.5**4 / 12))
    assert np.isclose(torsional_constant(0.2, 0.4), expected, rtol=1e-12)
    assert np.isclose(torsional_constant(0.4, 0.2), expected, rtol=1e-12)


def test_torsional_constant_branch_boundary_is_inclusive():
    a, c = 1.2, 1.0
    edge = 1 - c**4 / (12 * a**4)
    expected = a * c**3 * (16.0 / 3.0 - 3.36 * (c / a) * edge)
    assert np.isclose(torsional_constant(c, a), expected, rtol=1e-12)


def test_rectangular_section_properties():
    sec = rectangular_section(0.4, 0.5)
    assert np.isclose(sec.area, 0.2)
    assert np.isclose(sec.Iy, 0.4 * 0.5**3 / 12)
    assert np.isclose(sec.Iz, 0.5 * 0.4**3 / 12)
    assert np.isclose(sec.shear_y, 5 / 6 * 0.2)
    assert np.isclose(sec.shear_z, 5 / 6 * 0.2)
    assert sec.J == torsional_constant(0.4, 0.5)


@pytest.mark.parametrize("b, h", [(0.0, 0.5), (0.3, -0.1)])
def test_rectangular_section_rejects_non_positive_dimensions(b, h):
    with pytest.raises(ModelError):
        rectangular_section(b, h)


def test_default_sizing_policy():
    # Short building: minimum column side governs
    assert DEFAULT_SIZING.column_side(10.5) == 0.3
    # Tall building: height / 50
    assert np.isclose(DEFAULT_SIZING.column_side(30.0), 0.6)

    b, h = DEFAULT_SIZING.beam_dimensions(6.0)
    assert np.isclose(b, 0.4)
    assert np.isclose(h, 0.5)


def test_custom_sizing_policy():
    policy = SizingPolicy(min_column_side=0.4, beam_depth_ratio=10.0)
    assert policy.column_side(3.0) == 0.4
    assert np.isclose(policy.beam_dimensions(6.0)[1], 0.6)
