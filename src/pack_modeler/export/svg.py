"""
2D Layout Projector
===================

Top-down dimensioned drawing of the pack as SVG (mm units).

Drawing frame: x across the parallel columns, y along the series rows,
origin at the top-left holder corner. Everything is drawn inside a group
shifted by the padding, so the root viewport is exactly
(P·w + 2·padding) × (S·d + 2·padding).
"""

import html
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple, Union

from ..config import DIMENSION_OFFSET_MM, SVG_PADDING_MM
from ..errors import NoGeometryError
from ..models.cell import CellSpec, HolderSpec
from ..models.pack import PackTopology

logger = logging.getLogger(__name__)


SVG_NAMESPACE = "http://www.w3.org/2000/svg"

CELL_FILL = "#888"
CELL_STROKE = "#333"
HOLDER_STROKE = "#ccc"
DIMENSION_COLOR = "blue"


def fmt(value: float) -> str:
    """Compact decimal for SVG attributes (no exponent, no trailing zeros)."""
    text = f"{value:.3f}".rstrip("0").rstrip(".")
    return "0" if text in ("", "-0") else text


@dataclass(frozen=True)
class Circle:
    cx: float
    cy: float
    r: float


@dataclass(frozen=True)
class Rect:
    x: float
    y: float
    width: float
    height: float


@dataclass(frozen=True)
class DimensionLine:
    """Dimension line with arrowheads at both ends and a centered label."""
    start: Tuple[float, float]
    end: Tuple[float, float]
    label: str
    label_position: Tuple[float, float]
    vertical: bool = False


@dataclass
class LayoutDrawing:
    """
    Projected pack layout, ready to serialize.

    Attributes:
    ----------
    pack_width_mm, pack_length_mm : float
        Holder grid extent (W = P·w, L = S·d)

    padding_mm : float
        Margin on every side of the grid

    circles : list of Circle
        One per cell, in drawing coordinates (before padding)

    rects : list of Rect
        One holder outline per cell

    dimensions : list of DimensionLine
        Width and length dimension lines

    description : str
        Optional caption drawn above the grid
    """
    pack_width_mm: float
    pack_length_mm: float
    padding_mm: float = SVG_PADDING_MM
    circles: List[Circle] = field(default_factory=list)
    rects: List[Rect] = field(default_factory=list)
    dimensions: List[DimensionLine] = field(default_factory=list)
    description: str = ""

    @property
    def width_mm(self) -> float:
        """Viewport width including padding."""
        return self.pack_width_mm + 2.0 * self.padding_mm

    @property
    def height_mm(self) -> float:
        """Viewport height including padding."""
        return self.pack_length_mm + 2.0 * self.padding_mm

    def to_svg(self) -> str:
        """Serialize to an SVG document."""
        width, height = fmt(self.width_mm), fmt(self.height_mm)
        lines = [
            f'<svg width="{width}mm" height="{height}mm" '
            f'viewBox="0 0 {width} {height}" xmlns="{SVG_NAMESPACE}">',
            "  <defs>",
            '    <marker id="arrow" viewBox="0 0 10 10" refX="5" refY="5" '
            'markerWidth="3" markerHeight="3" orient="auto-start-reverse">',
            f'      <path d="M 0 0 L 10 5 L 0 10 z" fill="{DIMENSION_COLOR}" />',
            "    </marker>",
            "  </defs>",
            f'  <g transform="translate({fmt(self.padding_mm)}, {fmt(self.padding_mm)})">',
        ]

        for rect in self.rects:
            lines.append(
                f'    <rect x="{fmt(rect.x)}" y="{fmt(rect.y)}" width="{fmt(rect.width)}" '
                f'height="{fmt(rect.height)}" fill="none" stroke="{HOLDER_STROKE}" stroke-width="0.2" />'
            )
        for circle in self.circles:
            lines.append(
                f'    <circle cx="{fmt(circle.cx)}" cy="{fmt(circle.cy)}" r="{fmt(circle.r)}" '
                f'fill="{CELL_FILL}" stroke="{CELL_STROKE}" stroke-width="0.5" />'
            )

        if self.dimensions:
            lines.append(
                f'    <g class="dimensions" stroke="{DIMENSION_COLOR}" stroke-width="0.5" '
                f'fill="{DIMENSION_COLOR}" font-family="sans-serif" font-size="5">'
            )
            for dim in self.dimensions:
                (x1, y1), (x2, y2) = dim.start, dim.end
                lines.append(
                    f'      <path d="M {fmt(x1)} {fmt(y1)} L {fmt(x2)} {fmt(y2)}" '
                    'marker-start="url(#arrow)" marker-end="url(#arrow)" />'
                )
                tx, ty = dim.label_position
                extra = ' text-anchor="middle"'
                if dim.vertical:
                    extra += ' writing-mode="vertical-rl"'
                lines.append(
                    f'      <text x="{fmt(tx)}" y="{fmt(ty)}"{extra} stroke="none">'
                    f"{html.escape(dim.label)}</text>"
                )
            lines.append("    </g>")

        if self.description:
            lines.append(
                f'    <text x="0" y="{fmt(-DIMENSION_OFFSET_MM)}" font-family="sans-serif" '
                f'font-size="4" fill="#333">{html.escape(self.description)}</text>'
            )

        lines.append("  </g>")
        lines.append("</svg>")
        return "\n".join(lines) + "\n"

    def write(self, path: Union[str, Path]) -> Path:
        """Write the SVG document to path."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.to_svg(), encoding="utf-8")
        logger.info("Exported: %s", path)
        return path


def project_layout(
    topology: PackTopology,
    cell: CellSpec,
    holder: HolderSpec,
    padding_mm: float = SVG_PADDING_MM,
    overall_height_mm: Optional[float] = None,
    dimension_offset_mm: float = DIMENSION_OFFSET_MM,
) -> LayoutDrawing:
    """
    Project the pack grid onto a dimensioned top-down drawing.

    Parameters:
    ----------
    topology : PackTopology
        S×P grid; must have at least one row and column

    cell : CellSpec
        Cell dimensions (circle radius)

    holder : HolderSpec
        Holder dimensions (grid pitch)

    padding_mm : float
        Margin around the grid

    overall_height_mm : float, optional
        Pack height to mention in the caption

    dimension_offset_mm : float
        Gap between the grid and its dimension lines

    Returns:
    -------
    LayoutDrawing

    Raises:
    ------
    NoGeometryError
        If the topology has no cells
    """
    if not topology.is_buildable:
        raise NoGeometryError()

    series, parallel = topology.series, topology.parallel
    w, d = holder.outer_width_mm, holder.outer_depth_mm
    pack_width = parallel * w
    pack_length = series * d
    offset = dimension_offset_mm
    # Labels sit a further 7 mm out
    label_offset = offset + 7.0

    drawing = LayoutDrawing(
        pack_width_mm=pack_width,
        pack_length_mm=pack_length,
        padding_mm=padding_mm,
    )
    for s in range(series):
        for p in range(parallel):
            drawing.rects.append(Rect(p * w, s * d, w, d))
            drawing.circles.append(Circle(p * w + w / 2.0, s * d + d / 2.0, cell.diameter_mm / 2.0))

    drawing.dimensions.append(DimensionLine(
        start=(0.0, pack_length + offset),
        end=(pack_width, pack_length + offset),
        label=f"{pack_width:.1f}mm",
        label_position=(pack_width / 2.0, pack_length + label_offset),
    ))
    drawing.dimensions.append(DimensionLine(
        start=(pack_width + offset, 0.0),
        end=(pack_width + offset, pack_length),
        label=f"{pack_length:.1f}mm",
        label_position=(pack_width + label_offset, pack_length / 2.0),
        vertical=True,
    ))

    if overall_height_mm is not None:
        drawing.description = (
            f"{topology.configuration_string} {cell.family.value}, "
            f"height {overall_height_mm:.1f}mm"
        )
    return drawing
