"""
Cell and Holder Specification Models
====================================

Defines the immutable catalog entries for a cylindrical cell family and
the printed holder (bracket) that retains one cell of that family.

Both are frozen dataclasses so they can be shared freely between pack
regenerations and used as cache keys for mesh generation.
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Union

from ..errors import CatalogError


class CellFamily(Enum):
    """Supported cylindrical cell families."""
    C18650 = "18650"
    C21700 = "21700"
    C26650 = "26650"
    C32700 = "32700"

    @classmethod
    def parse(cls, value: Union["CellFamily", str, int]) -> "CellFamily":
        """
        Resolve a family from an enum member or its string value.

        Accepts "18650", "C18650" and 18650.
        """
        if isinstance(value, cls):
            return value
        text = str(value).strip().upper()
        if text.startswith("C"):
            text = text[1:]
        for family in cls:
            if family.value == text:
                return family
        raise CatalogError(f"Unknown cell family: {value!r}")


@dataclass(frozen=True)
class CellSpec:
    """
    Physical dimensions of a cylindrical cell.

    Attributes:
    ----------
    family : CellFamily
        Cell family (e.g., 18650)

    diameter_mm : float
        Outer diameter including wrap (mm)

    height_mm : float
        Overall height including button top (mm)
    """
    family: CellFamily
    diameter_mm: float
    height_mm: float

    @property
    def radius_mm(self) -> float:
        """Cell radius (mm)."""
        return self.diameter_mm / 2.0

    @property
    def volume_ml(self) -> float:
        """Cell volume in mL (cm³)."""
        radius_cm = self.radius_mm / 10.0
        return math.pi * radius_cm ** 2 * (self.height_mm / 10.0)

    def summary(self) -> str:
        """Return a formatted summary string."""
        return (
            f"{self.family.value} cell: "
            f"Ø{self.diameter_mm:.1f} × {self.height_mm:.1f} mm"
        )


@dataclass(frozen=True)
class HolderSpec:
    """
    Printed holder frame for a single cell.

    The frame is a rectangle of outer_width × outer_depth with a circular
    cutout of hole_diameter. Frames tile the pack grid edge to edge, so
    the outer footprint also sets the cell pitch.

    Attributes:
    ----------
    hole_diameter_mm : float
        Cutout diameter (mm)

    outer_width_mm : float
        Frame size along the parallel (X) axis (mm)

    outer_depth_mm : float
        Frame size along the series (Z) axis (mm)
    """
    hole_diameter_mm: float
    outer_width_mm: float
    outer_depth_mm: float

    @property
    def hole_radius_mm(self) -> float:
        """Cutout radius (mm)."""
        return self.hole_diameter_mm / 2.0

    @property
    def can_contain_hole(self) -> bool:
        """Whether the outer footprint is larger than the cutout."""
        return (
            self.hole_diameter_mm > 0
            and self.outer_width_mm > self.hole_diameter_mm
            and self.outer_depth_mm > self.hole_diameter_mm
        )

    def fits_cell(self, cell: CellSpec, tolerance_mm: float) -> bool:
        """Whether the cutout is no larger than the cell plus tolerance."""
        return self.hole_diameter_mm <= cell.diameter_mm + tolerance_mm

    def summary(self) -> str:
        """Return a formatted summary string."""
        return (
            f"Holder: Ø{self.hole_diameter_mm:.1f} hole in "
            f"{self.outer_width_mm:.1f} × {self.outer_depth_mm:.1f} mm frame"
        )
