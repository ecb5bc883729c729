"""
Cell and Holder Catalog
=======================

Fixed table of supported cylindrical cell families and the printed holder
dimensions that go with each of them.

Cell dimensions are measured over the wrap, including the button top.
Holder outer dimensions set the cell pitch: holders tile the pack grid
with zero gap.

The catalog is validated at import time. A family missing from either
table, or a holder that cannot contain its cutout, is a startup-fatal
configuration error.
"""

import logging
from typing import Dict, List, Tuple, Union

from ..config import HOLE_FIT_TOLERANCE_MM
from ..errors import CatalogError
from ..models.cell import CellFamily, CellSpec, HolderSpec

logger = logging.getLogger(__name__)


# =============================================================================
# Cell Dimensions
# =============================================================================

CELL_DIMENSIONS: Dict[CellFamily, CellSpec] = {
    CellFamily.C18650: CellSpec(CellFamily.C18650, diameter_mm=18.5, height_mm=65.2),
    CellFamily.C21700: CellSpec(CellFamily.C21700, diameter_mm=21.2, height_mm=70.3),
    CellFamily.C26650: CellSpec(CellFamily.C26650, diameter_mm=26.2, height_mm=65.4),
    CellFamily.C32700: CellSpec(CellFamily.C32700, diameter_mm=32.3, height_mm=70.5),
}


# =============================================================================
# Holder Dimensions
# =============================================================================

HOLDER_DIMENSIONS: Dict[CellFamily, HolderSpec] = {
    CellFamily.C18650: HolderSpec(hole_diameter_mm=18.4, outer_width_mm=22.4, outer_depth_mm=22.4),
    CellFamily.C21700: HolderSpec(hole_diameter_mm=21.2, outer_width_mm=25.2, outer_depth_mm=25.2),
    CellFamily.C26650: HolderSpec(hole_diameter_mm=26.3, outer_width_mm=30.3, outer_depth_mm=30.3),
    CellFamily.C32700: HolderSpec(hole_diameter_mm=32.5, outer_width_mm=36.5, outer_depth_mm=36.5),
}


# =============================================================================
# Validation
# =============================================================================

def validate_catalog(
    cells: Dict[CellFamily, CellSpec] = CELL_DIMENSIONS,
    holders: Dict[CellFamily, HolderSpec] = HOLDER_DIMENSIONS,
    hole_tolerance_mm: float = HOLE_FIT_TOLERANCE_MM,
) -> None:
    """
    Check that every family has a consistent cell/holder pair.

    Raises:
    ------
    CatalogError
        If a family is missing from either table, or a holder cannot
        contain or is too large for its cell
    """
    errors = []
    for family in CellFamily:
        cell = cells.get(family)
        holder = holders.get(family)
        if cell is None:
            errors.append(f"{family.value}: missing cell dimensions")
        if holder is None:
            errors.append(f"{family.value}: missing holder dimensions")
        if cell is None or holder is None:
            continue
        if cell.family != family:
            errors.append(f"{family.value}: cell entry is tagged {cell.family.value}")
        if cell.diameter_mm <= 0 or cell.height_mm <= 0:
            errors.append(f"{family.value}: cell dimensions must be positive")
        if not holder.can_contain_hole:
            errors.append(f"{family.value}: holder footprint cannot contain its cutout")
        if not holder.fits_cell(cell, hole_tolerance_mm):
            errors.append(
                f"{family.value}: holder hole {holder.hole_diameter_mm} mm exceeds "
                f"cell diameter {cell.diameter_mm} mm + {hole_tolerance_mm} mm"
            )

    if errors:
        raise CatalogError("Invalid cell catalog: " + "; ".join(errors))


validate_catalog()


# =============================================================================
# Catalog Access Functions
# =============================================================================

def get_catalog_entry(family: Union[CellFamily, str]) -> Tuple[CellSpec, HolderSpec]:
    """
    Get the cell and holder specification for a family.

    Parameters:
    ----------
    family : CellFamily or str
        Cell family (e.g., CellFamily.C18650 or "18650")

    Returns:
    -------
    Tuple[CellSpec, HolderSpec]

    Raises:
    ------
    CatalogError
        If the family is unknown
    """
    resolved = CellFamily.parse(family)
    try:
        return CELL_DIMENSIONS[resolved], HOLDER_DIMENSIONS[resolved]
    except KeyError:
        raise CatalogError(f"No catalog entry for cell family {resolved.value}") from None


def get_cell(family: Union[CellFamily, str]) -> CellSpec:
    """Get the cell specification for a family."""
    return get_catalog_entry(family)[0]


def get_holder(family: Union[CellFamily, str]) -> HolderSpec:
    """Get the holder specification for a family."""
    return get_catalog_entry(family)[1]


def list_cell_families() -> List[str]:
    """
    List all supported family names.

    Returns:
    -------
    List[str]
        Family values in catalog order (e.g., ["18650", "21700", ...])
    """
    return [family.value for family in CellFamily]
