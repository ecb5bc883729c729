"""
Pack Modeler Calculations Module
================================

Pure functions for pack sizing.
"""

from .sizing import (
    DEFAULT_CELL_CAPACITY_AH,
    DEFAULT_CELL_VOLTAGE_V,
    PackConfiguration,
    calculate_pack_configuration,
)

__all__ = [
    "DEFAULT_CELL_CAPACITY_AH",
    "DEFAULT_CELL_VOLTAGE_V",
    "PackConfiguration",
    "calculate_pack_configuration",
]
