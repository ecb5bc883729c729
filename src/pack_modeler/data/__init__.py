"""
Pack Modeler Data Module
========================

Contains the cell/holder catalog and lookup functions.
"""

from .cell_database import (
    CELL_DIMENSIONS,
    HOLDER_DIMENSIONS,
    get_catalog_entry,
    get_cell,
    get_holder,
    list_cell_families,
    validate_catalog,
)

__all__ = [
    "CELL_DIMENSIONS",
    "HOLDER_DIMENSIONS",
    "get_catalog_entry",
    "get_cell",
    "get_holder",
    "list_cell_families",
    "validate_catalog",
]
