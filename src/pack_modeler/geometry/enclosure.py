"""
Enclosure Generator
===================

Derives a printable enclosure from the overall pack dimensions.

The shell is not a boolean solid: it is five separately placed panels
(bottom, front, back, left, right) that butt-join at the corners, plus a
lid placed beside the body so the two print as independent parts. The
result is surface geometry per panel, which is what a slicer needs; it is
not a watertight solid.

Frame: Z up (print bed), centered on the origin, X across the pack width,
Y along the pack length.

Dimensions:
- inner = pack + 2 × tolerance (every axis)
- outer length/width = inner + 2 × wall
- outer height = inner + wall (floor only; the lid is a separate part)
"""

import logging
import math
from dataclasses import dataclass
from typing import Optional, Tuple

from .layout import PackBoundingBox
from .primitives import box_mesh, translation
from ..config import LID_GAP_MM
from ..debugger import debug_step
from ..errors import EnclosureConfigError
from ..models.instances import InstancedMesh

logger = logging.getLogger(__name__)

ENCLOSURE_ROLE = "enclosure"

PANEL_NAMES = ("bottom", "front", "back", "left", "right", "lid")


@dataclass(frozen=True)
class EnclosureSpec:
    """Derived enclosure dimensions (mm)."""
    wall_thickness_mm: float
    tolerance_mm: float
    inner_length_mm: float
    inner_width_mm: float
    inner_height_mm: float
    outer_length_mm: float
    outer_width_mm: float
    outer_height_mm: float
    lid_offset_mm: float

    @property
    def lid_thickness_mm(self) -> float:
        return self.wall_thickness_mm

    def summary(self) -> str:
        """Formatted summary string."""
        return (
            f"Enclosure outer: {self.outer_width_mm:.1f} × "
            f"{self.outer_length_mm:.1f} × {self.outer_height_mm:.1f} mm\n"
            f"  Inner cavity: {self.inner_width_mm:.1f} × "
            f"{self.inner_length_mm:.1f} × {self.inner_height_mm:.1f} mm\n"
            f"  Wall: {self.wall_thickness_mm:.2f} mm, "
            f"Tolerance: {self.tolerance_mm:.2f} mm"
        )


@dataclass(frozen=True)
class EnclosurePanel:
    """One flat panel: a box of the given extents centered at center."""
    name: str
    extents: Tuple[float, float, float]
    center: Tuple[float, float, float]


@dataclass(frozen=True)
class Enclosure:
    """Enclosure dimensions and its six panels."""
    spec: EnclosureSpec
    panels: Tuple[EnclosurePanel, ...]

    def panel(self, name: str) -> EnclosurePanel:
        for panel in self.panels:
            if panel.name == name:
                return panel
        raise KeyError(name)

    def meshes(self) -> Tuple[InstancedMesh, ...]:
        """One single-instance mesh per panel."""
        return tuple(
            InstancedMesh(
                name=f"enclosure_{panel.name}",
                mesh=box_mesh(panel.extents),
                transforms=[translation(*panel.center)],
                role=ENCLOSURE_ROLE,
            )
            for panel in self.panels
        )


def validate_enclosure_parameters(wall_thickness_mm: float, tolerance_mm: float) -> None:
    """
    Reject wall/tolerance values that would give degenerate geometry.

    Raises:
    ------
    EnclosureConfigError
        If wall thickness is not positive or tolerance is negative
    """
    if not math.isfinite(wall_thickness_mm) or wall_thickness_mm <= 0:
        raise EnclosureConfigError(
            f"Wall thickness must be positive, got {wall_thickness_mm}"
        )
    if not math.isfinite(tolerance_mm) or tolerance_mm < 0:
        raise EnclosureConfigError(
            f"Tolerance cannot be negative, got {tolerance_mm}"
        )


def enclosure_spec(
    bounding_box: PackBoundingBox,
    wall_thickness_mm: float,
    tolerance_mm: float,
    lid_gap_mm: float = LID_GAP_MM,
) -> EnclosureSpec:
    """
    Compute enclosure dimensions for a pack.

    Parameters:
    ----------
    bounding_box : PackBoundingBox
        Overall pack dimensions (including holders)

    wall_thickness_mm : float
        Wall, floor and lid thickness (mm)

    tolerance_mm : float
        Clearance on every side of the pack (mm)

    lid_gap_mm : float
        Gap between body and lid on the build plate (mm)

    Returns:
    -------
    EnclosureSpec
    """
    validate_enclosure_parameters(wall_thickness_mm, tolerance_mm)
    if min(bounding_box.as_tuple()) <= 0:
        raise EnclosureConfigError(
            f"Pack dimensions must be positive, got {bounding_box.as_tuple()}"
        )

    inner_length = bounding_box.length_mm + 2.0 * tolerance_mm
    inner_width = bounding_box.width_mm + 2.0 * tolerance_mm
    inner_height = bounding_box.height_mm + 2.0 * tolerance_mm
    outer_length = inner_length + 2.0 * wall_thickness_mm
    outer_width = inner_width + 2.0 * wall_thickness_mm
    outer_height = inner_height + wall_thickness_mm

    debug_step(
        category="Enclosure",
        description="Outer width",
        formula="OW = W + 2*tol + 2*wall",
        variables={"W": bounding_box.width_mm, "tol": tolerance_mm, "wall": wall_thickness_mm},
        result=outer_width,
        result_name="OW",
        result_unit="mm",
    )
    debug_step(
        category="Enclosure",
        description="Outer length",
        formula="OL = L + 2*tol + 2*wall",
        variables={"L": bounding_box.length_mm, "tol": tolerance_mm, "wall": wall_thickness_mm},
        result=outer_length,
        result_name="OL",
        result_unit="mm",
    )
    debug_step(
        category="Enclosure",
        description="Outer height",
        formula="OH = H + 2*tol + wall",
        variables={"H": bounding_box.height_mm, "tol": tolerance_mm, "wall": wall_thickness_mm},
        result=outer_height,
        result_name="OH",
        result_unit="mm",
        comment="Lid is a separate part, so only the floor adds thickness",
    )

    return EnclosureSpec(
        wall_thickness_mm=wall_thickness_mm,
        tolerance_mm=tolerance_mm,
        inner_length_mm=inner_length,
        inner_width_mm=inner_width,
        inner_height_mm=inner_height,
        outer_length_mm=outer_length,
        outer_width_mm=outer_width,
        outer_height_mm=outer_height,
        lid_offset_mm=outer_width + lid_gap_mm,
    )


def generate_enclosure(
    bounding_box: PackBoundingBox,
    wall_thickness_mm: float,
    tolerance_mm: float,
    lid_gap_mm: float = LID_GAP_MM,
) -> Enclosure:
    """
    Build the enclosure panels for a pack.

    Returns:
    -------
    Enclosure
        Spec plus bottom, front, back, left, right and lid panels

    Raises:
    ------
    EnclosureConfigError
        If wall thickness is not positive, tolerance is negative, or the
        pack has no volume
    """
    spec = enclosure_spec(bounding_box, wall_thickness_mm, tolerance_mm, lid_gap_mm)

    wall = spec.wall_thickness_mm
    ow, ol, oh = spec.outer_width_mm, spec.outer_length_mm, spec.outer_height_mm
    il, ih = spec.inner_length_mm, spec.inner_height_mm
    floor_z = -oh / 2.0 + wall / 2.0
    wall_z = wall / 2.0

    panels = (
        EnclosurePanel("bottom", (ow, ol, wall), (0.0, 0.0, floor_z)),
        EnclosurePanel("front", (ow, wall, ih), (0.0, ol / 2.0 - wall / 2.0, wall_z)),
        EnclosurePanel("back", (ow, wall, ih), (0.0, -ol / 2.0 + wall / 2.0, wall_z)),
        EnclosurePanel("left", (wall, il, ih), (-ow / 2.0 + wall / 2.0, 0.0, wall_z)),
        EnclosurePanel("right", (wall, il, ih), (ow / 2.0 - wall / 2.0, 0.0, wall_z)),
        EnclosurePanel("lid", (ow, ol, wall), (spec.lid_offset_mm, 0.0, floor_z)),
    )

    logger.debug(
        "Enclosure %.1f x %.1f x %.1f mm (wall %.2f, tolerance %.2f)",
        ow, ol, oh, wall, spec.tolerance_mm,
    )
    return Enclosure(spec=spec, panels=panels)
