"""
Pack Layout Engine
==================

Computes the 3D placement of every cell, interconnect strip and terminal
of an S×P pack.

Frame: Y up, X across the parallel columns, Z along the series rows; the
pack footprint is centered on the origin and cells stand on y = 0.

Interconnect routing ("snake"):
- Each row's parallel strip alternates between the top plane (even rows)
  and the bottom plane (odd rows).
- The series strip joining rows s and s+1 sits at the rightmost column
  when s is even and the leftmost column when s is odd, on the plane of
  row s+1's parallel strip.
- The positive terminal is at row 0, column 0, top plane. The negative
  terminal is at the last row, at the column where the snake ends, on that
  row's plane.

The engine is pure: identical inputs give identical output, and an
unbuildable topology yields an explicit empty layout instead of an error.
"""

import logging
import math
from dataclasses import dataclass
from typing import Optional, Tuple

from ..config import DEFAULT_CONFIG, BRACKET_HEIGHT_MM, PackModelerConfig
from ..debugger import debug_step
from ..models.cell import CellSpec, HolderSpec
from ..models.instances import (
    CellInstance,
    PackLayout,
    Polarity,
    StripInstance,
    StripKind,
    StripPlane,
    TerminalInstance,
)
from ..models.pack import PackTopology

logger = logging.getLogger(__name__)


# =============================================================================
# Snake Rules
# =============================================================================

def row_plane(row: int) -> StripPlane:
    """Plane of a row's parallel strip: top for even rows, bottom for odd."""
    return StripPlane.TOP if row % 2 == 0 else StripPlane.BOTTOM


def series_strip_column(boundary: int, parallel: int) -> int:
    """Column of the series strip between rows boundary and boundary+1."""
    return parallel - 1 if boundary % 2 == 0 else 0


def negative_terminal_column(series: int, parallel: int) -> int:
    """Column where the snake ends on the last row."""
    return parallel - 1 if (series - 1) % 2 == 0 else 0


def plane_height(plane: StripPlane, cell_height_mm: float, strip_thickness_mm: float) -> float:
    """Y coordinate of the strip center on a plane."""
    if plane == StripPlane.TOP:
        return cell_height_mm + strip_thickness_mm / 2.0
    return -strip_thickness_mm / 2.0


# =============================================================================
# Grid Coordinates
# =============================================================================

def column_x(column: int, parallel: int, holder: HolderSpec) -> float:
    """X of a column center; the grid is centered on the origin."""
    pack_width = parallel * holder.outer_width_mm
    return column * holder.outer_width_mm - pack_width / 2.0 + holder.outer_width_mm / 2.0


def row_z(row: int, series: int, holder: HolderSpec) -> float:
    """Z of a row center; the grid is centered on the origin."""
    pack_length = series * holder.outer_depth_mm
    return row * holder.outer_depth_mm - pack_length / 2.0 + holder.outer_depth_mm / 2.0


def boundary_z(boundary: int, series: int, holder: HolderSpec) -> float:
    """Z of the edge shared by rows boundary and boundary+1."""
    return row_z(boundary, series, holder) + holder.outer_depth_mm / 2.0


# =============================================================================
# Layout
# =============================================================================

def compute_pack_layout(
    topology: PackTopology,
    cell: CellSpec,
    holder: HolderSpec,
    config: Optional[PackModelerConfig] = None,
) -> PackLayout:
    """
    Place every cell, strip and terminal of the pack.

    Parameters:
    ----------
    topology : PackTopology
        S×P grid

    cell : CellSpec
        Cell dimensions

    holder : HolderSpec
        Holder dimensions; outer width/depth set the grid pitch

    config : PackModelerConfig, optional
        Strip thickness and cell-count ceiling

    Returns:
    -------
    PackLayout
        Full layout, or an empty layout with a reason when the topology
        has no rows/columns or exceeds the cell-count ceiling
    """
    config = config or DEFAULT_CONFIG
    series, parallel = topology.series, topology.parallel

    if not topology.is_buildable:
        reason = f"Invalid configuration {series}S{parallel}P: series and parallel must be at least 1"
        logger.warning(reason)
        return PackLayout.empty(topology, reason, cell=cell, holder=holder)

    if topology.total_cells > config.max_cells:
        reason = (
            f"Pack too large to build ({topology.total_cells} cells, "
            f"limit {config.max_cells})"
        )
        logger.warning(reason)
        return PackLayout.empty(topology, reason, cell=cell, holder=holder)

    pitch_x = holder.outer_width_mm
    pitch_z = holder.outer_depth_mm
    pack_width = parallel * pitch_x
    pack_length = series * pitch_z
    thickness = config.strip_thickness_mm

    debug_step(
        category="Layout",
        description="Pack width across parallel columns",
        formula="W = P * outer_width",
        variables={"P": parallel, "outer_width": pitch_x},
        result=pack_width,
        result_name="W",
        result_unit="mm",
    )
    debug_step(
        category="Layout",
        description="Pack length along series rows",
        formula="L = S * outer_depth",
        variables={"S": series, "outer_depth": pitch_z},
        result=pack_length,
        result_name="L",
        result_unit="mm",
    )

    cells = tuple(
        CellInstance(
            row=s,
            column=p,
            position=(column_x(p, parallel, holder), 0.0, row_z(s, series, holder)),
            cell=cell,
        )
        for s in range(series)
        for p in range(parallel)
    )

    parallel_strips = tuple(
        StripInstance(
            kind=StripKind.PARALLEL,
            row=s,
            column=None,
            position=(0.0, plane_height(row_plane(s), cell.height_mm, thickness), row_z(s, series, holder)),
            length_mm=pack_width,
            plane=row_plane(s),
        )
        for s in range(series)
    )

    series_strips = []
    for s in range(series - 1):
        column = series_strip_column(s, parallel)
        plane = row_plane(s + 1)
        series_strips.append(StripInstance(
            kind=StripKind.SERIES,
            row=s,
            column=column,
            position=(
                column_x(column, parallel, holder),
                plane_height(plane, cell.height_mm, thickness),
                boundary_z(s, series, holder),
            ),
            length_mm=pitch_x,
            plane=plane,
            rotation_y=math.pi / 2.0,
        ))

    last_row = series - 1
    negative_column = negative_terminal_column(series, parallel)
    negative_plane = row_plane(last_row)
    terminals = (
        TerminalInstance(
            polarity=Polarity.POSITIVE,
            row=0,
            column=0,
            position=(
                column_x(0, parallel, holder),
                plane_height(StripPlane.TOP, cell.height_mm, thickness),
                row_z(0, series, holder),
            ),
            plane=StripPlane.TOP,
        ),
        TerminalInstance(
            polarity=Polarity.NEGATIVE,
            row=last_row,
            column=negative_column,
            position=(
                column_x(negative_column, parallel, holder),
                plane_height(negative_plane, cell.height_mm, thickness),
                row_z(last_row, series, holder),
            ),
            plane=negative_plane,
        ),
    )

    debug_step(
        category="Layout",
        description="Negative terminal column (end of snake)",
        formula="col = P - 1 if (S - 1) even else 0",
        variables={"S": series, "P": parallel},
        result=negative_column,
        result_name="col_neg",
        comment=f"Plane: {negative_plane.value}",
    )

    logger.debug(
        "Layout %s: %d cells, %d parallel strips, %d series strips",
        topology.configuration_string, len(cells), len(parallel_strips), len(series_strips),
    )

    return PackLayout(
        topology=topology,
        cell=cell,
        holder=holder,
        cells=cells,
        parallel_strips=parallel_strips,
        series_strips=tuple(series_strips),
        terminals=terminals,
        pack_width_mm=pack_width,
        pack_length_mm=pack_length,
    )


# =============================================================================
# Bounding Box
# =============================================================================

@dataclass(frozen=True)
class PackBoundingBox:
    """
    Overall pack dimensions used to size the enclosure.

    All dimensions in mm. length runs along the series rows, width across
    the parallel columns.
    """
    length_mm: float
    width_mm: float
    height_mm: float

    @property
    def volume_ml(self) -> float:
        """Bounding box volume (mL)."""
        return self.length_mm * self.width_mm * self.height_mm / 1000.0

    def as_tuple(self) -> Tuple[float, float, float]:
        """Return as (length, width, height)."""
        return (self.length_mm, self.width_mm, self.height_mm)

    def summary(self) -> str:
        """Formatted summary string."""
        return (
            f"Length (Series): {self.length_mm:.1f} mm\n"
            f"Width (Parallel): {self.width_mm:.1f} mm\n"
            f"Height: {self.height_mm:.1f} mm"
        )


def pack_bounding_box(
    topology: PackTopology,
    cell: CellSpec,
    holder: HolderSpec,
    include_brackets: bool = True,
    bracket_height_mm: float = BRACKET_HEIGHT_MM,
) -> PackBoundingBox:
    """
    Overall pack dimensions including holders.

    Height is the cell height plus one bracket height above and below when
    brackets are included.
    """
    height = cell.height_mm
    if include_brackets:
        height += 2.0 * bracket_height_mm
    return PackBoundingBox(
        length_mm=topology.series * holder.outer_depth_mm,
        width_mm=topology.parallel * holder.outer_width_mm,
        height_mm=height,
    )
