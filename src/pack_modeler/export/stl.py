"""
Mesh Export Serializer
======================

Flattens instanced meshes into a single triangle soup and writes it as
binary STL (mm units).

Binary STL layout (little-endian):
- 80-byte header
- uint32 triangle count
- per triangle, 50 bytes: float32 normal[3], float32 v1[3], v2[3], v3[3],
  uint16 attribute byte count (0)

The triangle soup is only ever built here, at the export boundary; the
scene keeps the instanced form.
"""

import logging
import math
from pathlib import Path
from typing import Iterable, Optional, Union

import numpy as np
import trimesh
from trimesh import transformations

from ..errors import NoGeometryError
from ..models.instances import InstancedMesh

logger = logging.getLogger(__name__)


# Scene frame (Y up) onto the print-bed frame (Z up): (x, y, z) -> (x, -z, y)
Y_UP_TO_Z_UP = transformations.rotation_matrix(math.pi / 2.0, [1.0, 0.0, 0.0])


def bake_instances(instanced: InstancedMesh) -> np.ndarray:
    """
    Expand one instanced mesh into world-space triangles.

    Returns:
    -------
    np.ndarray
        (N * F, 3, 3) triangles, instance-major
    """
    if instanced.is_empty:
        return np.empty((0, 3, 3))

    vertices = np.asarray(instanced.mesh.vertices, dtype=np.float64)
    faces = np.asarray(instanced.mesh.faces)
    transforms = instanced.transforms

    # (N, V, 3): rotate/scale every vertex by every instance, then translate
    world = np.einsum("nij,vj->nvi", transforms[:, :3, :3], vertices)
    world += transforms[:, np.newaxis, :3, 3]
    return world[:, faces].reshape(-1, 3, 3)


def flatten_instances(
    meshes: Iterable[InstancedMesh],
    transform: Optional[np.ndarray] = None,
) -> np.ndarray:
    """
    Bake every instance transform into a flat triangle array.

    Parameters:
    ----------
    meshes : iterable of InstancedMesh
        Meshes to flatten, in order

    transform : np.ndarray, optional
        4x4 transform applied to all triangles after baking

    Returns:
    -------
    np.ndarray
        (T, 3, 3) float64 triangles
    """
    parts = [bake_instances(m) for m in meshes]
    parts = [p for p in parts if len(p)]
    if not parts:
        return np.empty((0, 3, 3))

    triangles = np.concatenate(parts)
    if transform is not None:
        transform = np.asarray(transform, dtype=np.float64)
        triangles = triangles @ transform[:3, :3].T + transform[:3, 3]
    return triangles


def triangle_count(meshes: Iterable[InstancedMesh]) -> int:
    """Triangles the flattened export would contain."""
    return sum(m.triangle_count for m in meshes)


def to_trimesh(triangles: np.ndarray) -> trimesh.Trimesh:
    """Wrap a triangle soup without merging or dropping anything."""
    triangles = np.asarray(triangles, dtype=np.float64).reshape(-1, 3, 3)
    return trimesh.Trimesh(
        vertices=triangles.reshape(-1, 3),
        faces=np.arange(len(triangles) * 3).reshape(-1, 3),
        process=False,
    )


def serialize_stl(
    meshes: Iterable[InstancedMesh],
    transform: Optional[np.ndarray] = None,
) -> bytes:
    """
    Serialize instanced meshes to binary STL.

    Raises:
    ------
    NoGeometryError
        If there are no triangles to write
    """
    triangles = flatten_instances(meshes, transform)
    if len(triangles) == 0:
        raise NoGeometryError()

    data = to_trimesh(triangles).export(file_type="stl")
    logger.debug("Serialized %d triangles (%d bytes)", len(triangles), len(data))
    return data


def write_stl(
    path: Union[str, Path],
    meshes: Iterable[InstancedMesh],
    transform: Optional[np.ndarray] = None,
) -> Path:
    """
    Write binary STL to path.

    The file is only created once serialization has succeeded.
    """
    data = serialize_stl(meshes, transform)
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(data)
    logger.info("Exported: %s", path)
    return path
