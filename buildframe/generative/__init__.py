# buildframe/generative - Parametric model generators
"""
GENERATIVE: Parametric Building Generators
==========================================

Turns a building description into nodes, elements, supports and loads.

USAGE:
------
    from buildframe.generative import generate_building, BuildingParams

    params = BuildingParams(
        floor_count=4, floor_height=3.5,
        plan_length=18.0, plan_width=12.0,
        bay_spacing_x=6.0, bay_spacing_y=6.0,
    )
    model = generate_building(params)
"""

from .building import BuildingParams, generate_building, floor_node_masses

__all__ = ['BuildingParams', 'generate_building', 'floor_node_masses']
