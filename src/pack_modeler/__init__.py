"""
Battery Pack Modeler Module
===========================

Parametric geometry generator for cylindrical-cell battery packs.
Given a cell family, an S×P topology and enclosure settings, it computes
the placement of every cell, holder, nickel strip and terminal, a
printable enclosure, a binary STL export and a dimensioned SVG layout.

Features:
---------
- Cell/holder catalog (18650, 21700, 26650, 32700)
- Snake-routed series/parallel interconnects
- Interlocking per-cell holder brackets
- Five-panel enclosure with a separate lid
- Binary STL (mm) and SVG (mm) exports
- Pack sizing from a target voltage and capacity

Usage:
------
    from src.pack_modeler import PackModeler, PackParameters

    modeler = PackModeler()
    modeler.rebuild(PackParameters(cell_family="18650", series=4, parallel=2))

    artifact = modeler.export_stl("enclosure")
    modeler.save(artifact, "output")   # output/enclosure_4s2p_18650.stl
"""

from .models.cell import CellFamily, CellSpec, HolderSpec
from .models.pack import ModelType, PackParameters, PackTopology
from .models.instances import InstancedMesh, PackLayout, Polarity, StripKind, StripPlane
from .data.cell_database import get_catalog_entry, list_cell_families
from .config import PackModelerConfig, DEFAULT_CONFIG
from .errors import (
    PackModelerError,
    ConfigurationError,
    InvalidParameterError,
    CatalogError,
    HolderConfigError,
    EnclosureConfigError,
    NoGeometryError,
)
from .geometry.layout import PackBoundingBox, compute_pack_layout, pack_bounding_box
from .geometry.brackets import generate_brackets
from .geometry.enclosure import generate_enclosure
from .geometry.scene import SceneSnapshot, build_scene
from .export.stl import serialize_stl, write_stl
from .export.svg import LayoutDrawing, project_layout
from .calculations.sizing import PackConfiguration, calculate_pack_configuration
from .modeler import ExportArtifact, PackModeler
from .debugger import GeometryDebugger, get_debugger, set_debugger, debug_step
from .debug_trace import trace_pack_geometry

__all__ = [
    # Session
    "PackModeler",
    "ExportArtifact",
    "SceneSnapshot",
    # Models
    "CellFamily",
    "CellSpec",
    "HolderSpec",
    "ModelType",
    "PackParameters",
    "PackTopology",
    "InstancedMesh",
    "PackLayout",
    "Polarity",
    "StripKind",
    "StripPlane",
    # Catalog
    "get_catalog_entry",
    "list_cell_families",
    # Configuration
    "PackModelerConfig",
    "DEFAULT_CONFIG",
    # Errors
    "PackModelerError",
    "ConfigurationError",
    "InvalidParameterError",
    "CatalogError",
    "HolderConfigError",
    "EnclosureConfigError",
    "NoGeometryError",
    # Geometry
    "PackBoundingBox",
    "compute_pack_layout",
    "pack_bounding_box",
    "generate_brackets",
    "generate_enclosure",
    "build_scene",
    # Export
    "serialize_stl",
    "write_stl",
    "LayoutDrawing",
    "project_layout",
    # Sizing
    "PackConfiguration",
    "calculate_pack_configuration",
    # Debugging
    "GeometryDebugger",
    "get_debugger",
    "set_debugger",
    "debug_step",
    "trace_pack_geometry",
]
