"""
Mesh Primitives
===============

Shared meshes for the pack scene and the transform helpers used to place
them. Every mesh here is built centered on its own local origin (except
the cell cylinder, whose origin is the center of its base) so that
instance transforms are plain translations and quarter turns.

Meshes returned from the cached builders are shared between instances and
between scene generations; callers must never mutate them.
"""

import math
from functools import lru_cache
from typing import Sequence

import numpy as np
import trimesh
from trimesh import transformations

from ..models.cell import CellSpec, HolderSpec


# =============================================================================
# Transforms
# =============================================================================

def translation(x: float, y: float, z: float) -> np.ndarray:
    """4x4 translation matrix."""
    return transformations.translation_matrix([x, y, z])


def rotation_y(angle: float) -> np.ndarray:
    """4x4 rotation about the Y (up) axis."""
    return transformations.rotation_matrix(angle, [0.0, 1.0, 0.0])


def placement(position: Sequence[float], rotation_y_rad: float = 0.0) -> np.ndarray:
    """Rotate about Y, then translate to position."""
    matrix = translation(*position)
    if rotation_y_rad:
        matrix = matrix @ rotation_y(rotation_y_rad)
    return matrix


# Z-up extrusion/cylinder axis onto the scene's Y-up axis: (x, y, z) -> (x, z, -y)
Z_AXIS_TO_Y_AXIS = transformations.rotation_matrix(-math.pi / 2.0, [1.0, 0.0, 0.0])


# =============================================================================
# Meshes
# =============================================================================

def box_mesh(extents: Sequence[float]) -> trimesh.Trimesh:
    """Axis-aligned box centered on the origin."""
    return trimesh.creation.box(extents=[float(e) for e in extents])


@lru_cache(maxsize=None)
def cell_mesh(cell: CellSpec, segments: int) -> trimesh.Trimesh:
    """
    Cell cylinder standing on the XZ plane.

    The local origin is the center of the cell base, so the cylinder
    spans y = 0 .. cell.height_mm.
    """
    mesh = trimesh.creation.cylinder(
        radius=cell.radius_mm,
        height=cell.height_mm,
        sections=segments,
    )
    mesh.apply_transform(Z_AXIS_TO_Y_AXIS)
    mesh.apply_translation([0.0, cell.height_mm / 2.0, 0.0])
    return mesh


def frame_outline(holder: HolderSpec, segments: int):
    """
    2D ring between the holder cutout and its rectangular outline.

    Both loops are sampled at the same angles; the four corner angles of
    the rectangle are always included so the outer loop is exactly the
    rectangle.

    Returns:
    -------
    Tuple[np.ndarray, np.ndarray]
        (vertices (2n, 2), faces (2n, 3)); vertices 0..n-1 are the hole,
        n..2n-1 the outline
    """
    half_w = holder.outer_width_mm / 2.0
    half_d = holder.outer_depth_mm / 2.0
    corner = math.atan2(half_d, half_w)

    angles = np.concatenate([
        np.linspace(0.0, 2.0 * math.pi, segments, endpoint=False),
        [corner, math.pi - corner, math.pi + corner, 2.0 * math.pi - corner],
    ])
    angles = np.unique(np.round(angles, 12))

    cos = np.cos(angles)
    sin = np.sin(angles)
    hole = holder.hole_radius_mm * np.column_stack([cos, sin])

    # Distance from the center to the rectangle along each ray
    to_side = np.divide(half_w, np.abs(cos), out=np.full_like(cos, np.inf), where=np.abs(cos) > 1e-12)
    to_end = np.divide(half_d, np.abs(sin), out=np.full_like(sin, np.inf), where=np.abs(sin) > 1e-12)
    reach = np.minimum(to_side, to_end)
    outline = np.column_stack([reach * cos, reach * sin])

    n = len(angles)
    i = np.arange(n)
    j = (i + 1) % n
    faces = np.vstack([
        np.column_stack([i, n + i, n + j]),
        np.column_stack([i, n + j, j]),
    ])
    return np.vstack([hole, outline]), faces


@lru_cache(maxsize=None)
def holder_frame_mesh(holder: HolderSpec, height: float, segments: int) -> trimesh.Trimesh:
    """
    Holder frame: rectangle with a circular cutout, extruded along Y.

    Centered on its local origin (spans y = -height/2 .. height/2).
    """
    vertices, faces = frame_outline(holder, segments)
    mesh = trimesh.creation.extrude_triangulation(
        vertices=vertices,
        faces=faces,
        height=height,
    )
    mesh.apply_transform(Z_AXIS_TO_Y_AXIS)
    mesh.apply_translation([0.0, -height / 2.0, 0.0])
    return mesh
