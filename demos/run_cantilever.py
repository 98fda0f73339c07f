# File: demos/run_cantilever.py
"""
DEMO: 3D Cantilever Sanity Check
================================

Solves a single horizontal cantilever with a downward tip load and
compares the tip deflection with the textbook value P·L³/(3EI).
"""

import numpy as np

from buildframe.elements import frame3d_global_stiffness
from buildframe.kernel.assemble import assemble_global_K
from buildframe.kernel.solve import solve_linear
from buildframe.model import (
    Element, ElementType, FIXED, Material, Node, Section, StructuralModel,
)
from buildframe.post import element_end_forces_local


def main():
    print("=" * 70)
    print("DEMO: 3D Cantilever")
    print("=" * 70)
    print()

    L = 3.0
    E = 210e9
    I = 8.0e-6
    P = 1000.0

    section = Section(area=0.01, Iy=I, Iz=2.0e-6, J=1.0e-6, shear_y=0.008, shear_z=0.008)
    steel = Material(E=E, G=81e9, density=7850.0, fy=250e6, fc=250e6)

    model = StructuralModel.from_lists(
        [
            Node(1, 0.0, 0.0, 0.0, supports=FIXED),
            Node(2, L, 0.0, 0.0, loads=(0.0, 0.0, -P, 0.0, 0.0, 0.0)),
        ],
        [Element(1, ElementType.BEAM, 1, 2, section, steel)],
    )

    contributions = [
        (model.element_dof_map(e), frame3d_global_stiffness(model.nodes, e))
        for e in model.elements
    ]
    K = assemble_global_K(model.ndof, contributions)
    d, R, _ = solve_linear(K, model.load_vector(), model.constrained_dofs())

    uz_tip = d[model.dof_manager.idx(2, 2)]
    uz_expected = -P * L**3 / (3 * E * I)

    print(f"Tip deflection (FE):       {uz_tip * 1000:.4f} mm")
    print(f"Tip deflection (analytic): {uz_expected * 1000:.4f} mm")
    print(f"Relative error:            {abs(uz_tip - uz_expected) / abs(uz_expected):.2e}")
    print()

    f = element_end_forces_local(model, model.element(1), d)
    print(f"Root shear:  {f[2] / 1000:.3f} kN   (expected {P / 1000:.3f})")
    print(f"Root moment: {abs(f[4]) / 1000:.3f} kN·m (expected {P * L / 1000:.3f})")
    print(f"Reaction Fz: {R[2] / 1000:.3f} kN")

    assert np.isclose(uz_tip, uz_expected, rtol=1e-9)
    print()
    print("✓ Cantilever matches beam theory")


if __name__ == "__main__":
    main()
