"""
Geometry Instance Models
========================

Derived, ephemeral values produced by the layout engine and the mesh
generators. None of them carries identity across regenerations: every
parameter change produces a complete fresh set.

Two representations are used for meshes:

- InstancedMesh: one shared mesh plus an (N, 4, 4) array of transforms.
  This is what the scene holds; it stays compact for packs with thousands
  of cells.
- A flat triangle list with the transforms baked into the vertices. This
  only exists at the export boundary (see export.stl.flatten_instances).
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, Optional, Tuple, Union

import numpy as np
import trimesh

from .cell import CellSpec, HolderSpec
from .pack import PackTopology


Vector3 = Tuple[float, float, float]


class StripKind(Enum):
    """Interconnect strip kinds."""
    PARALLEL = "parallel"   # Spans a whole row at one potential
    SERIES = "series"       # Bridges two adjacent rows at one end


class StripPlane(Enum):
    """Which end of the cells a strip or terminal sits on."""
    TOP = "top"
    BOTTOM = "bottom"


class Polarity(Enum):
    """Pack terminal polarity."""
    POSITIVE = "+"
    NEGATIVE = "-"


@dataclass(frozen=True)
class CellInstance:
    """One cell of the S×P grid; position is the center of the cell base."""
    row: int
    column: int
    position: Vector3
    cell: CellSpec


@dataclass(frozen=True)
class StripInstance:
    """
    One conductive strip segment.

    For parallel strips, row is the row they span and column is None.
    For series strips, row is the boundary index s (between rows s and
    s+1) and column is the end of the row they sit at.
    """
    kind: StripKind
    row: int
    column: Optional[int]
    position: Vector3
    length_mm: float
    plane: StripPlane
    rotation_y: float = 0.0


@dataclass(frozen=True)
class TerminalInstance:
    """Pack output terminal tab."""
    polarity: Polarity
    row: int
    column: int
    position: Vector3
    plane: StripPlane


Instance = Union[CellInstance, StripInstance, TerminalInstance]


@dataclass(frozen=True)
class PackLayout:
    """
    Output of the pack layout engine.

    An empty layout (no cells, is_empty True) is the explicit
    "no geometry" answer for an unbuildable topology; reason says why.
    """
    topology: PackTopology
    cell: Optional[CellSpec]
    holder: Optional[HolderSpec]
    cells: Tuple[CellInstance, ...] = ()
    parallel_strips: Tuple[StripInstance, ...] = ()
    series_strips: Tuple[StripInstance, ...] = ()
    terminals: Tuple[TerminalInstance, ...] = ()
    pack_width_mm: float = 0.0
    pack_length_mm: float = 0.0
    reason: str = ""

    @classmethod
    def empty(
        cls,
        topology: PackTopology,
        reason: str,
        cell: Optional[CellSpec] = None,
        holder: Optional[HolderSpec] = None,
    ) -> "PackLayout":
        """Explicit 'no geometry' result."""
        return cls(topology=topology, cell=cell, holder=holder, reason=reason)

    @property
    def is_empty(self) -> bool:
        """True when there is nothing to render or export."""
        return len(self.cells) == 0

    @property
    def cell_height_mm(self) -> float:
        """Height of the cells in this layout (0 when empty)."""
        return self.cell.height_mm if self.cell is not None and not self.is_empty else 0.0

    @property
    def positive_terminal(self) -> Optional[TerminalInstance]:
        for terminal in self.terminals:
            if terminal.polarity == Polarity.POSITIVE:
                return terminal
        return None

    @property
    def negative_terminal(self) -> Optional[TerminalInstance]:
        for terminal in self.terminals:
            if terminal.polarity == Polarity.NEGATIVE:
                return terminal
        return None

    def instances(self) -> Iterator[Instance]:
        """Yield cells, parallel strips, series strips, then terminals."""
        yield from self.cells
        yield from self.parallel_strips
        yield from self.series_strips
        yield from self.terminals


@dataclass(eq=False)
class InstancedMesh:
    """
    Shared geometry plus per-instance transforms.

    Attributes:
    ----------
    name : str
        Identifier within a scene (e.g., "cells", "bracket_frames")

    mesh : trimesh.Trimesh
        Geometry shared by every instance; never mutated

    transforms : np.ndarray
        (N, 4, 4) homogeneous transforms, read-only

    role : str
        Render/export category ("cell", "bracket", "strip",
        "terminal_positive", "terminal_negative", "enclosure")
    """
    name: str
    mesh: trimesh.Trimesh
    transforms: np.ndarray = field(repr=False)
    role: str = ""

    def __post_init__(self):
        transforms = np.array(self.transforms, dtype=np.float64)
        if transforms.size == 0:
            transforms = transforms.reshape(0, 4, 4)
        if transforms.ndim != 3 or transforms.shape[1:] != (4, 4):
            raise ValueError(
                f"{self.name}: transforms must have shape (N, 4, 4), "
                f"got {transforms.shape}"
            )
        transforms.flags.writeable = False
        self.transforms = transforms

    @property
    def count(self) -> int:
        """Number of instances."""
        return len(self.transforms)

    @property
    def triangle_count(self) -> int:
        """Triangles after expanding every instance."""
        return self.count * len(self.mesh.faces)

    @property
    def is_empty(self) -> bool:
        return self.count == 0 or len(self.mesh.faces) == 0
