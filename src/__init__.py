"""
BatteryPackModeler - Main Package
=================================

Tools for designing 3D-printable cylindrical-cell battery packs.

This package provides modules for:
- Pack Modeler (pack_modeler): cell layout, holders, enclosure, STL/SVG export
"""

__version__ = "0.1.0"
