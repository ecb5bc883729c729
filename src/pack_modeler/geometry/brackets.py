"""
Bracket/Holder Generator
========================

Per-cell holder frames and their interlocking teeth.

Each cell gets one frame (outer rectangle with a circular cutout) and two
teeth: one on the right edge and one, turned a quarter about Y, on the top
edge. Frames tile the pack grid edge to edge; the teeth only give the
printed holders something to interlock with and play no part in the
tiling.

All frames of a cell family share one mesh, built once and cached; only
their transforms differ.
"""

import math
from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np

from .primitives import box_mesh, holder_frame_mesh, placement
from ..config import DEFAULT_CONFIG, PackModelerConfig
from ..errors import HolderConfigError
from ..models.cell import HolderSpec
from ..models.instances import InstancedMesh, PackLayout


BRACKET_ROLE = "bracket"


@dataclass(frozen=True)
class BracketSet:
    """Instanced holder geometry for a whole pack."""
    frames: InstancedMesh
    teeth_right: InstancedMesh
    teeth_top: InstancedMesh

    @property
    def count(self) -> int:
        """Number of holders (one per cell)."""
        return self.frames.count

    def meshes(self) -> Tuple[InstancedMesh, ...]:
        return (self.frames, self.teeth_right, self.teeth_top)


def bracket_transforms(
    layout: PackLayout,
    holder: HolderSpec,
    bracket_height_mm: float,
) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Instance transforms for frames, right teeth and top teeth.

    Frames and teeth are centered at half the bracket height so they sit
    on the cell base plane.
    """
    mid = bracket_height_mm / 2.0
    frames, right, top = [], [], []
    for instance in layout.cells:
        x, _, z = instance.position
        frames.append(placement((x, mid, z)))
        right.append(placement((x + holder.outer_width_mm / 2.0, mid, z)))
        top.append(placement((x, mid, z + holder.outer_depth_mm / 2.0), math.pi / 2.0))
    return (
        np.array(frames).reshape(-1, 4, 4),
        np.array(right).reshape(-1, 4, 4),
        np.array(top).reshape(-1, 4, 4),
    )


def generate_brackets(
    layout: PackLayout,
    holder: HolderSpec,
    config: Optional[PackModelerConfig] = None,
) -> BracketSet:
    """
    Build the instanced holder frames and teeth for every cell.

    Parameters:
    ----------
    layout : PackLayout
        Cell placement; an empty layout gives zero instances

    holder : HolderSpec
        Holder dimensions

    config : PackModelerConfig, optional
        Bracket height, tooth size and tessellation

    Returns:
    -------
    BracketSet

    Raises:
    ------
    HolderConfigError
        If the holder footprint cannot contain its cutout
    """
    config = config or DEFAULT_CONFIG
    if not holder.can_contain_hole:
        raise HolderConfigError(
            f"Holder {holder.outer_width_mm} × {holder.outer_depth_mm} mm cannot "
            f"contain a {holder.hole_diameter_mm} mm cutout"
        )

    height = config.bracket_height_mm
    frame = holder_frame_mesh(holder, height, config.hole_segments)
    tooth = box_mesh((
        config.tooth_depth_mm,
        height,
        holder.outer_width_mm / config.tooth_width_divisor,
    ))

    frames, right, top = bracket_transforms(layout, holder, height)
    return BracketSet(
        frames=InstancedMesh("bracket_frames", frame, frames, BRACKET_ROLE),
        teeth_right=InstancedMesh("bracket_teeth_right", tooth, right, BRACKET_ROLE),
        teeth_top=InstancedMesh("bracket_teeth_top", tooth, top, BRACKET_ROLE),
    )
