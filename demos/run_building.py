# File: demos/run_building.py
"""
DEMO: Parametric Building Analysis
==================================

Generates a multi-storey concrete frame, runs the full analysis and prints
the summary plus the most utilized members.

    python demos/run_building.py
"""

import logging

from buildframe import BuildingParams, run_analysis


def main():
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    params = BuildingParams(
        floor_count=5,
        floor_height=3.5,
        plan_length=18.0,
        plan_width=12.0,
        bay_spacing_x=6.0,
        bay_spacing_y=6.0,
        wind_speed=35.0,
        seismic={'SDS': 0.8, 'SD1': 0.4, 'R': 8.0},
    )

    print("=" * 70)
    print("DEMO: Parametric Building Analysis")
    print("=" * 70)
    print(f"{params.floor_count} floors x {params.floor_height} m, "
          f"plan {params.plan_length} x {params.plan_width} m")
    print()

    result = run_analysis(params)
    s = result.summary

    print("SUMMARY")
    print("-" * 70)
    print(f"Nodes / elements:      {len(result.model.nodes)} / {len(result.model.elements)}")
    print(f"Max displacement:      {s.max_displacement * 1000:.2f} mm")
    print(f"Max combined stress:   {s.max_stress / 1e6:.2f} MPa")
    print(f"Max utilization:       {s.max_utilization:.3f}")
    if s.min_safety_factor is not None:
        print(f"Min safety factor:     {s.min_safety_factor:.2f}")
    print(f"Max drift ratio:       {s.max_drift_ratio:.5f}")
    print(f"Deflection limits:     {'OK' if s.deflection_ok else 'EXCEEDED'}")
    print(f"Empirical period Ta:   {s.empirical_period:.3f} s")
    if s.modal_period is not None:
        print(f"Modal period T1:       {s.modal_period:.3f} s")
    print()

    frames = result.to_frames()
    print("MOST UTILIZED MEMBERS")
    print("-" * 70)
    top = frames['forces'].sort_values('utilization', ascending=False).head(5)
    print(top[['type', 'axial', 'moment_y', 'moment_z', 'utilization']].to_string())
    print()

    print("STORY DRIFT")
    print("-" * 70)
    print(frames['drift'].to_string())


if __name__ == "__main__":
    main()
