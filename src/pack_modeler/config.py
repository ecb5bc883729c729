"""
Pack Modeler Configuration
==========================

Contains configuration settings, physical constants, and default values
for battery pack geometry generation.

All dimensions are in millimeters. The pack scene uses a Y-up frame
(cells stand on the XZ plane); the enclosure and all STL exports use the
Z-up print frame expected by slicers.
"""

import math
from dataclasses import dataclass


# =============================================================================
# Holder / Bracket Geometry
# =============================================================================

# Height of one printed holder frame (mm)
BRACKET_HEIGHT_MM = 8.0

# Interlocking tooth depth (mm) and width divisor (width = outer_width / N)
TOOTH_DEPTH_MM = 1.5
TOOTH_WIDTH_DIVISOR = 2.5

# Allowed oversize of a holder hole relative to the cell diameter (mm)
HOLE_FIT_TOLERANCE_MM = 0.5


# =============================================================================
# Interconnect Geometry
# =============================================================================

# Nickel strip thickness (mm)
STRIP_THICKNESS_MM = 0.5

# Strip width as a fraction of cell diameter
STRIP_WIDTH_FACTOR = 0.75

# Terminal tab size relative to holder width / strip thickness
TERMINAL_WIDTH_FACTOR = 0.5
TERMINAL_THICKNESS_FACTOR = 4.0


# =============================================================================
# Tessellation
# =============================================================================

# Radial segments for cell cylinders
CYLINDER_SEGMENTS = 24

# Radial segments for holder hole cutouts
HOLE_SEGMENTS = 48


# =============================================================================
# Enclosure Defaults
# =============================================================================

DEFAULT_WALL_THICKNESS_MM = 2.0
DEFAULT_TOLERANCE_MM = 0.5

# Lateral gap between the enclosure body and its lid on the build plate (mm)
LID_GAP_MM = 10.0


# =============================================================================
# Drawing / Render Limits
# =============================================================================

# Padding around the 2D layout drawing (mm)
SVG_PADDING_MM = 20.0

# Offset of dimension lines from the pack outline (mm)
DIMENSION_OFFSET_MM = 5.0

# Cell count above which no scene is built
DEFAULT_MAX_CELLS = 5000


# =============================================================================
# Configuration Dataclass
# =============================================================================

@dataclass
class PackModelerConfig:
    """
    Configuration for pack geometry generation.

    Attributes:
    ----------
    bracket_height_mm : float
        Height of a holder frame (mm)

    strip_thickness_mm : float
        Nickel strip thickness (mm)

    strip_width_factor : float
        Strip width as a fraction of cell diameter

    cylinder_segments : int
        Radial segments used for cell cylinders

    hole_segments : int
        Radial segments used for holder cutouts

    lid_gap_mm : float
        Gap between enclosure body and lid on the build plate (mm)

    svg_padding_mm : float
        Padding around the 2D layout drawing (mm)

    max_cells : int
        Render-safety ceiling; larger packs produce no geometry
    """
    bracket_height_mm: float = BRACKET_HEIGHT_MM
    tooth_depth_mm: float = TOOTH_DEPTH_MM
    tooth_width_divisor: float = TOOTH_WIDTH_DIVISOR

    strip_thickness_mm: float = STRIP_THICKNESS_MM
    strip_width_factor: float = STRIP_WIDTH_FACTOR
    terminal_width_factor: float = TERMINAL_WIDTH_FACTOR
    terminal_thickness_factor: float = TERMINAL_THICKNESS_FACTOR

    cylinder_segments: int = CYLINDER_SEGMENTS
    hole_segments: int = HOLE_SEGMENTS

    lid_gap_mm: float = LID_GAP_MM
    svg_padding_mm: float = SVG_PADDING_MM
    dimension_offset_mm: float = DIMENSION_OFFSET_MM

    max_cells: int = DEFAULT_MAX_CELLS

    def validate(self) -> tuple[bool, str]:
        """Validate configuration values."""
        errors = []

        positive = {
            "Bracket height": self.bracket_height_mm,
            "Tooth depth": self.tooth_depth_mm,
            "Tooth width divisor": self.tooth_width_divisor,
            "Strip thickness": self.strip_thickness_mm,
            "Strip width factor": self.strip_width_factor,
            "Terminal width factor": self.terminal_width_factor,
            "Terminal thickness factor": self.terminal_thickness_factor,
        }
        for label, value in positive.items():
            if not math.isfinite(value) or value <= 0:
                errors.append(f"{label} must be positive")

        if self.cylinder_segments < 3:
            errors.append("Cylinder segments must be at least 3")
        if self.hole_segments < 8:
            errors.append("Hole segments must be at least 8")
        if self.lid_gap_mm < 0:
            errors.append("Lid gap cannot be negative")
        if self.svg_padding_mm < 0:
            errors.append("SVG padding cannot be negative")
        if self.max_cells < 1:
            errors.append("Max cells must be at least 1")

        if errors:
            return False, "; ".join(errors)
        return True, ""


DEFAULT_CONFIG = PackModelerConfig()
