# buildframe/model.py
"""
MODEL DEFINITIONS: Nodes, Elements and the Structural Model
===========================================================

PURPOSE:
--------
Plain data structures handed from the model builder to the analysis
pipeline:

- Node:            a point in space with six support flags and a nodal load
- Section:         cross-section properties of a member
- Material:        elastic and strength properties
- Element:         a two-node 3D frame member
- StructuralModel: the validated collection, with its DOF bookkeeping

COORDINATES:
------------
Right-handed global axes, Z up. Plan axes are X and Y. All values SI
(m, N, Pa, kg/m³).

ELEMENT TYPES:
--------------
The type tag (beam, column, brace, slab) is descriptive. Every type is
analysed with the same 12-DOF frame formulation; the tag only selects
default sizing and the extreme-fiber distance used in stress recovery.
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Mapping, Sequence, Tuple

import numpy as np

from .kernel.dof import DOFManager, DOF_3D_FRAME


class ModelError(ValueError):
    """Invalid model input (non-positive geometry, empty model, bad ids)."""
    pass


class ReferentialError(ModelError):
    """An element references a node id that does not exist."""
    pass


class ElementType(str, Enum):
    BEAM = 'beam'
    COLUMN = 'column'
    BRACE = 'brace'
    SLAB = 'slab'


FIXED = (True,) * 6
FREE = (False,) * 6
NO_LOAD = (0.0,) * 6


@dataclass(frozen=True)
class Node:
    """
    A joint of the frame.

    Parameters:
    -----------
    id : int
        Unique positive identifier (1-based, contiguous within a model)
    x, y, z : float
        Position (m); z is vertical
    supports : Tuple[bool, ...]
        Six restraint flags (ux, uy, uz, rx, ry, rz); True = fixed at zero
    loads : Tuple[float, ...]
        Applied load (Fx, Fy, Fz, Mx, My, Mz) in N and N·m
    """
    id: int
    x: float
    y: float
    z: float
    supports: Tuple[bool, ...] = FREE
    loads: Tuple[float, ...] = NO_LOAD

    def __post_init__(self):
        if len(self.supports) != 6:
            raise ModelError(f"Node {self.id}: expected 6 support flags")
        if len(self.loads) != 6:
            raise ModelError(f"Node {self.id}: expected 6 load components")

    @property
    def is_supported(self) -> bool:
        return any(self.supports)


@dataclass(frozen=True)
class Section:
    """Cross-section properties (m², m⁴)."""
    area: float
    Iy: float       # second moment about local y
    Iz: float       # second moment about local z
    J: float        # torsional constant
    shear_y: float  # effective shear area along local y
    shear_z: float  # effective shear area along local z


@dataclass(frozen=True)
class Material:
    """Material properties (Pa, kg/m³)."""
    E: float
    G: float
    density: float
    fy: float       # yield strength
    fc: float       # compressive strength


@dataclass(frozen=True)
class Element:
    """
    A 3D frame element between nodes ``ni`` and ``nj``.

    ``angle`` is the roll of the cross-section about the member axis
    (radians), applied on top of the default local axes.
    """
    id: int
    type: ElementType
    ni: int
    nj: int
    section: Section
    material: Material
    angle: float = 0.0


def _element_length(nodes: Mapping[int, Node], e: Element) -> float:
    a, b = nodes[e.ni], nodes[e.nj]
    return math.sqrt((b.x - a.x) ** 2 + (b.y - a.y) ** 2 + (b.z - a.z) ** 2)


@dataclass
class StructuralModel:
    """
    Validated structural model.

    Construction checks every invariant and fails fast:

    - at least one node and one element (ModelError)
    - node ids unique and contiguous 1..n in insertion order (ModelError)
    - element ids unique, both ends distinct (ModelError)
    - both end nodes exist (ReferentialError)
    - every element has positive length (ModelError)

    Derived data (element lengths, DOF count, constrained DOFs and the load
    vector) is computed once here.
    """
    nodes: Dict[int, Node]
    elements: List[Element]
    dof_manager: DOFManager = DOF_3D_FRAME
    lengths: Dict[int, float] = field(init=False, repr=False)

    def __post_init__(self):
        if not self.nodes:
            raise ModelError("Model has no nodes")
        if not self.elements:
            raise ModelError("Model has no elements")

        base = self.dof_manager.base
        for position, (key, node) in enumerate(self.nodes.items()):
            if key != node.id:
                raise ModelError(f"Node stored under key {key} has id {node.id}")
            if node.id != base + position:
                raise ModelError(
                    f"Node ids must be contiguous from {base}; "
                    f"found {node.id} at position {position}"
                )

        seen = set()
        for e in self.elements:
            if e.id in seen:
                raise ModelError(f"Duplicate element id {e.id}")
            seen.add(e.id)
            missing = [n for n in (e.ni, e.nj) if n not in self.nodes]
            if missing:
                raise ReferentialError(
                    f"Element {e.id} references non-existent node(s) {missing}"
                )
            if e.ni == e.nj:
                raise ModelError(f"Element {e.id} connects node {e.ni} to itself")

        self.lengths = {}
        for e in self.elements:
            L = _element_length(self.nodes, e)
            if not L > 0.0:
                raise ModelError(
                    f"Element {e.id} has zero length (nodes {e.ni} and {e.nj})"
                )
            self.lengths[e.id] = L

    @classmethod
    def from_lists(cls, nodes: Sequence[Node], elements: Sequence[Element]) -> 'StructuralModel':
        node_map = {}
        for n in nodes:
            if n.id in node_map:
                raise ModelError(f"Duplicate node id {n.id}")
            node_map[n.id] = n
        return cls(node_map, list(elements))

    @property
    def ndof(self) -> int:
        return self.dof_manager.ndof(len(self.nodes))

    def element(self, element_id: int) -> Element:
        for e in self.elements:
            if e.id == element_id:
                return e
        raise ReferentialError(f"No element with id {element_id}")

    def element_dof_map(self, e: Element) -> List[int]:
        return self.dof_manager.element_dof_map([e.ni, e.nj])

    def constrained_dofs(self) -> List[int]:
        """Indices of restrained DOFs, in node order."""
        fixed = []
        for index, node in enumerate(self.nodes.values()):
            for k, restrained in enumerate(node.supports):
                if restrained:
                    fixed.append(index * 6 + k)
        return fixed

    def load_vector(self) -> np.ndarray:
        """Global load vector assembled from the nodal loads, in node order."""
        F = np.zeros(self.ndof)
        for index, node in enumerate(self.nodes.values()):
            F[index * 6:index * 6 + 6] = node.loads
        return F

    def levels(self, tol: float = 1e-6) -> List[List[int]]:
        """Node ids grouped by elevation, lowest level first."""
        groups: List[Tuple[float, List[int]]] = []
        for node in sorted(self.nodes.values(), key=lambda n: n.z):
            if groups and abs(node.z - groups[-1][0]) <= tol:
                groups[-1][1].append(node.id)
            else:
                groups.append((node.z, [node.id]))
        return [ids for _, ids in groups]
