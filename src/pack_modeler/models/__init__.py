"""
Pack Modeler Models
===================

Core data models for pack geometry generation.
"""

from .cell import CellFamily, CellSpec, HolderSpec
from .pack import ModelType, PackParameters, PackTopology
from .instances import (
    CellInstance,
    InstancedMesh,
    PackLayout,
    Polarity,
    StripInstance,
    StripKind,
    StripPlane,
    TerminalInstance,
)

__all__ = [
    "CellFamily",
    "CellSpec",
    "HolderSpec",
    "ModelType",
    "PackParameters",
    "PackTopology",
    "CellInstance",
    "InstancedMesh",
    "PackLayout",
    "Polarity",
    "StripInstance",
    "StripKind",
    "StripPlane",
    "TerminalInstance",
]
