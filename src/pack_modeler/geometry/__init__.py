"""
Pack Modeler Geometry Module
============================

Pure functions that turn a cell specification and an S×P topology into
positioned geometry: layout, holders, enclosure and the assembled scene.
"""

from .layout import (
    PackBoundingBox,
    compute_pack_layout,
    negative_terminal_column,
    pack_bounding_box,
    row_plane,
    series_strip_column,
)
from .brackets import BracketSet, generate_brackets
from .enclosure import (
    Enclosure,
    EnclosurePanel,
    EnclosureSpec,
    enclosure_spec,
    generate_enclosure,
)
from .scene import SceneSnapshot, build_scene

__all__ = [
    # Layout
    "PackBoundingBox",
    "compute_pack_layout",
    "negative_terminal_column",
    "pack_bounding_box",
    "row_plane",
    "series_strip_column",
    # Brackets
    "BracketSet",
    "generate_brackets",
    # Enclosure
    "Enclosure",
    "EnclosurePanel",
    "EnclosureSpec",
    "enclosure_spec",
    "generate_enclosure",
    # Scene
    "SceneSnapshot",
    "build_scene",
]
