# buildframe - Linear-elastic 3D building frame analysis
"""
BUILDFRAME: Parametric Building Frame Analysis
==============================================

This package provides:
- A parametric generator for regular multi-storey concrete frames
- 12-DOF 3D Euler-Bernoulli frame elements
- Direct stiffness assembly and a conditioned linear solve
- Member forces, stresses, deflections, drift and period estimates

ARCHITECTURE:
-------------
    kernel/         Dimension-agnostic core (DOF management, assembly, solve, modal)
    model.py        Node, Element, Section, Material, StructuralModel
    sections.py     Rectangular section properties and member sizing
    elements.py     3D frame stiffness and transformation
    loads.py        Gravity, wind and seismic nodal loads
    post.py         Result derivation
    analysis.py     run_analysis pipeline
    generative/     Building generator
"""

from .analysis import AnalysisResult, AnalysisSummary, run_analysis
from .config import CONFIG, EngineConfig
from .generative import BuildingParams, generate_building
from .kernel import AnalysisCancelled, DOFManager, MechanismError, solve_linear
from .model import (
    Element, ElementType, Material, ModelError, Node, ReferentialError, Section,
    StructuralModel,
)
from .post import InteractionPolicy, ZeroCapacityError

__version__ = "0.1.0"
