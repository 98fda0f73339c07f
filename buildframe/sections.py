# buildframe/sections.py
"""
SECTION PROPERTIES AND SIZING POLICY
====================================

Generated building models use solid rectangular sections. Sizes are not
input-driven: they follow a simple parametric policy

    column (square) side = max(min_column_side, total_height / column_height_ratio)
    beam width           = span / beam_width_ratio    (span / 15)
    beam depth           = span / beam_depth_ratio    (span / 12)

where span is the larger bay spacing. ``SizingPolicy`` holds the ratios so
a project can swap them without touching the generator.
"""

from dataclasses import dataclass

from .model import ModelError, Section

# Effective shear area factor for solid rectangles
SHEAR_FACTOR = 5.0 / 6.0


def torsional_constant(b: float, h: float) -> float:
    """
    Torsional constant J of a b x h rectangle (m⁴).

    With a = larger side and c = smaller side:

        a/c <= 1.2:  J = a·c³·(16/3 - 3.36·(c/a)·(1 - c⁴/(12·a⁴)))
        a/c >  1.2:  J = a·c³·(1/3  - 0.21·(c/a)·(1 - c⁴/(12·a⁴)))

    The near-square branch uses the 16/3 coefficient of the half-dimension
    form with full dimensions, so it gives a larger J than the slender one.
    """
    if b <= 0 or h <= 0:
        raise ModelError(f"Section dimensions must be positive (b={b}, h={h})")
    a = max(b, h)
    c = min(b, h)
    edge = 1 - c ** 4 / (12 * a ** 4)
    if a / c <= 1.2:
        return a * c ** 3 * (16.0 / 3.0 - 3.36 * c / a * edge)
    return a * c ** 3 * (1.0 / 3.0 - 0.21 * c / a * edge)


def rectangular_section(b: float, h: float) -> Section:
    """
    Properties of a solid b (width) x h (depth) rectangle.

    Iy = b·h³/12 (bending about the width axis), Iz = h·b³/12.
    """
    if b <= 0 or h <= 0:
        raise ModelError(f"Section dimensions must be positive (b={b}, h={h})")
    area = b * h
    return Section(
        area=area,
        Iy=b * h ** 3 / 12.0,
        Iz=h * b ** 3 / 12.0,
        J=torsional_constant(b, h),
        shear_y=SHEAR_FACTOR * area,
        shear_z=SHEAR_FACTOR * area,
    )


@dataclass(frozen=True)
class SizingPolicy:
    """Parametric member sizing used by the building generator."""
    min_column_side: float = 0.3
    column_height_ratio: float = 50.0
    beam_width_ratio: float = 15.0
    beam_depth_ratio: float = 12.0

    def column_side(self, total_height: float) -> float:
        return max(self.min_column_side, total_height / self.column_height_ratio)

    def column_section(self, total_height: float) -> Section:
        side = self.column_side(total_height)
        return rectangular_section(side, side)

    def beam_dimensions(self, span: float):
        """(width, depth) for a beam spanning ``span`` metres."""
        return span / self.beam_width_ratio, span / self.beam_depth_ratio

    def beam_section(self, span: float) -> Section:
        b, h = self.beam_dimensions(span)
        return rectangular_section(b, h)


DEFAULT_SIZING = SizingPolicy()
