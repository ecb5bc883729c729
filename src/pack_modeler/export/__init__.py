"""
Pack Modeler Export Module
==========================

Binary STL and SVG layout writers.
"""

from .stl import (
    Y_UP_TO_Z_UP,
    flatten_instances,
    serialize_stl,
    triangle_count,
    write_stl,
)
from .svg import LayoutDrawing, project_layout

__all__ = [
    "Y_UP_TO_Z_UP",
    "flatten_instances",
    "serialize_stl",
    "triangle_count",
    "write_stl",
    "LayoutDrawing",
    "project_layout",
]
