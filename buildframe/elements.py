# buildframe/elements.py
"""
3D FRAME ELEMENT: Stiffness Matrix and Coordinate Transformation
================================================================

PURPOSE:
--------
Computes the 12×12 stiffness matrix of a two-node space-frame member in
global coordinates. All element types (beam, column, brace, slab strip)
share this formulation.

LOCAL STIFFNESS:
----------------
DOF order at each end: [u, v, w, θx, θy, θz] (local axes, x along the
member). Euler-Bernoulli terms only:

    axial       EA/L
    torsion     GJ/L
    bending     12EI/L³, 6EI/L², 4EI/L, 2EI/L
                - local x-y plane (v, θz) uses Iz
                - local x-z plane (w, θy) uses Iy

Shear deformation is not included. Shear areas are carried on the section
for stress recovery only.

TRANSFORMATION:
---------------
Local x is the unit vector from node i to node j, (cx, cy, cz). With
D = sqrt(cx² + cy²) the member's projection on the horizontal plane:

    D > tol (non-vertical):  y0 = (-cy, cx, 0) / D      (horizontal)
                             z0 = x × y0               (points "up")
    D <= tol (vertical):     y0 = (0, 1, 0)
                             z0 = x × y0

The roll angle ψ rotates (y0, z0) about x:

    y = cosψ·y0 + sinψ·z0
    z = -sinψ·y0 + cosψ·z0

r = [x; y; z] is orthonormal. T is block-diagonal with four copies of r,
and ke_global = Tᵀ · k_local · T.
"""

import numpy as np
from typing import Dict, Tuple

from .model import Element, ModelError, Node

# Projected-length tolerance for the vertical-member branch
VERTICAL_TOL = 1e-9


def element_geometry_3d(nodes: Dict[int, Node], element: Element) -> Tuple[float, float, float, float]:
    """
    Length and direction cosines of an element.

    Returns:
    --------
    (L, cx, cy, cz)

    Raises:
    -------
    ModelError
        If the element has zero length
    """
    ni = nodes[element.ni]
    nj = nodes[element.nj]

    dx = nj.x - ni.x
    dy = nj.y - ni.y
    dz = nj.z - ni.z
    L = float(np.sqrt(dx * dx + dy * dy + dz * dz))

    if L <= 0.0:
        raise ModelError(
            f"Element {element.id} has zero length (nodes {element.ni} and "
            f"{element.nj} at ({ni.x}, {ni.y}, {ni.z}))"
        )

    return L, dx / L, dy / L, dz / L


def frame3d_local_stiffness(
    E: float, G: float, A: float, Iy: float, Iz: float, J: float, L: float
) -> np.ndarray:
    """12×12 local stiffness matrix of a 3D Euler-Bernoulli frame member."""
    k = np.zeros((12, 12), dtype=float)

    EA_L = E * A / L
    GJ_L = G * J / L
    L2 = L * L
    L3 = L2 * L

    # axial (u)
    k[0, 0] = k[6, 6] = EA_L
    k[0, 6] = k[6, 0] = -EA_L

    # torsion (θx)
    k[3, 3] = k[9, 9] = GJ_L
    k[3, 9] = k[9, 3] = -GJ_L

    # bending in local x-y plane: v (1, 7), θz (5, 11)
    a, b, c, d = 12 * E * Iz / L3, 6 * E * Iz / L2, 4 * E * Iz / L, 2 * E * Iz / L
    k[1, 1] = k[7, 7] = a
    k[1, 7] = k[7, 1] = -a
    k[1, 5] = k[5, 1] = k[1, 11] = k[11, 1] = b
    k[5, 7] = k[7, 5] = k[7, 11] = k[11, 7] = -b
    k[5, 5] = k[11, 11] = c
    k[5, 11] = k[11, 5] = d

    # bending in local x-z plane: w (2, 8), θy (4, 10)
    a, b, c, d = 12 * E * Iy / L3, 6 * E * Iy / L2, 4 * E * Iy / L, 2 * E * Iy / L
    k[2, 2] = k[8, 8] = a
    k[2, 8] = k[8, 2] = -a
    k[2, 4] = k[4, 2] = k[2, 10] = k[10, 2] = -b
    k[4, 8] = k[8, 4] = k[8, 10] = k[10, 8] = b
    k[4, 4] = k[10, 10] = c
    k[4, 10] = k[10, 4] = d

    return k


def frame3d_rotation(
    cx: float, cy: float, cz: float, angle: float = 0.0, tol: float = VERTICAL_TOL
) -> np.ndarray:
    """3×3 rotation matrix from global to local axes (rows = local x, y, z)."""
    x_axis = np.array([cx, cy, cz], dtype=float)
    D = np.hypot(cx, cy)

    if D > tol:
        y0 = np.array([-cy / D, cx / D, 0.0])
    else:
        # vertical member
        y0 = np.array([0.0, 1.0, 0.0])
    z0 = np.cross(x_axis, y0)

    c, s = np.cos(angle), np.sin(angle)
    y_axis = c * y0 + s * z0
    z_axis = -s * y0 + c * z0

    return np.vstack([x_axis, y_axis, z_axis])


def frame3d_transform(r: np.ndarray) -> np.ndarray:
    """Expand a 3×3 rotation into the 12×12 block-diagonal transformation."""
    return np.kron(np.eye(4), r)


def frame3d_element_matrices(
    nodes: Dict[int, Node], element: Element, tol: float = VERTICAL_TOL
) -> Tuple[np.ndarray, np.ndarray]:
    """(k_local, T) for an element."""
    L, cx, cy, cz = element_geometry_3d(nodes, element)
    sec, mat = element.section, element.material
    k_local = frame3d_local_stiffness(mat.E, mat.G, sec.area, sec.Iy, sec.Iz, sec.J, L)
    T = frame3d_transform(frame3d_rotation(cx, cy, cz, element.angle, tol))
    return k_local, T


def frame3d_global_stiffness(
    nodes: Dict[int, Node], element: Element, tol: float = VERTICAL_TOL
) -> np.ndarray:
    """
    12×12 element stiffness in global coordinates, Tᵀ·k·T.

    DOF order: [ux_i, uy_i, uz_i, rx_i, ry_i, rz_i, ux_j, ..., rz_j]
    """
    k_local, T = frame3d_element_matrices(nodes, element, tol)
    return T.T @ k_local @ T
