"""
Scene Assembly
==============

Builds a complete SceneSnapshot from a PackParameters tuple:
catalog lookup → layout → brackets and enclosure → instanced meshes.

A snapshot is a value: it is built in full, then handed to consumers
(renderer, exporters) and never patched. A new parameter tuple always
produces a new snapshot.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

import numpy as np

from .brackets import BRACKET_ROLE, generate_brackets
from .enclosure import Enclosure, generate_enclosure
from .layout import PackBoundingBox, compute_pack_layout, pack_bounding_box
from .primitives import box_mesh, cell_mesh, placement
from ..config import DEFAULT_CONFIG, PackModelerConfig
from ..data.cell_database import get_catalog_entry
from ..models.instances import InstancedMesh, PackLayout
from ..models.pack import ModelType, PackParameters

logger = logging.getLogger(__name__)


CELL_ROLE = "cell"
STRIP_ROLE = "strip"
POSITIVE_ROLE = "terminal_positive"
NEGATIVE_ROLE = "terminal_negative"


@dataclass(frozen=True, eq=False)
class SceneSnapshot:
    """
    Fully built pack geometry for one parameter tuple.

    Attributes:
    ----------
    parameters : PackParameters
        Inputs this snapshot was built from

    generation : int
        Build counter assigned by the modeler

    layout : PackLayout or None
        Cell/strip/terminal placement

    bounding_box : PackBoundingBox or None
        Overall pack dimensions used for the enclosure

    enclosure : Enclosure or None
        Enclosure panels (None for an empty snapshot)

    meshes : tuple of InstancedMesh
        Pack scene meshes (cells, brackets, strips, terminals)

    enclosure_meshes : tuple of InstancedMesh
        One mesh per enclosure panel

    reason : str
        Why the snapshot is empty, if it is
    """
    parameters: PackParameters
    generation: int = 0
    layout: Optional[PackLayout] = None
    bounding_box: Optional[PackBoundingBox] = None
    enclosure: Optional[Enclosure] = None
    meshes: Tuple[InstancedMesh, ...] = ()
    enclosure_meshes: Tuple[InstancedMesh, ...] = ()
    reason: str = ""

    @classmethod
    def empty(
        cls,
        parameters: PackParameters,
        reason: str,
        generation: int = 0,
        layout: Optional[PackLayout] = None,
    ) -> "SceneSnapshot":
        """Snapshot with no geometry; reason is shown to the user."""
        return cls(parameters=parameters, generation=generation, layout=layout, reason=reason)

    @property
    def is_empty(self) -> bool:
        """True when there is nothing to render or export."""
        return not any(mesh.count for mesh in self.meshes)

    def mesh(self, name: str) -> InstancedMesh:
        """Look up a scene mesh by name."""
        for mesh in self.meshes + self.enclosure_meshes:
            if mesh.name == name:
                return mesh
        raise KeyError(name)

    def visible_meshes(self, show_brackets: Optional[bool] = None) -> Tuple[InstancedMesh, ...]:
        """Pack meshes for rendering, optionally hiding the holders."""
        if show_brackets is None:
            show_brackets = self.parameters.show_brackets
        if show_brackets:
            return self.meshes
        return tuple(m for m in self.meshes if m.role != BRACKET_ROLE)

    def meshes_for(self, model_type: ModelType) -> Tuple[InstancedMesh, ...]:
        """Meshes making up one printable export."""
        if ModelType.parse(model_type) == ModelType.ENCLOSURE:
            return self.enclosure_meshes
        return tuple(m for m in self.meshes if m.role == BRACKET_ROLE)

    def instance_counts(self) -> Dict[str, int]:
        """Instances per scene mesh."""
        return {mesh.name: mesh.count for mesh in self.meshes}


def _transforms(instances) -> np.ndarray:
    matrices = [placement(i.position, getattr(i, "rotation_y", 0.0)) for i in instances]
    return np.array(matrices).reshape(-1, 4, 4)


def build_pack_meshes(
    layout: PackLayout,
    config: Optional[PackModelerConfig] = None,
) -> Tuple[InstancedMesh, ...]:
    """
    Cells, strips and terminals as instanced meshes.

    One shared mesh per distinct mesh type; the layout supplies the
    transforms.
    """
    config = config or DEFAULT_CONFIG
    cell, holder = layout.cell, layout.holder
    thickness = config.strip_thickness_mm
    strip_width = cell.diameter_mm * config.strip_width_factor

    parallel_strip = box_mesh((layout.pack_width_mm, thickness, strip_width))
    series_strip = box_mesh((holder.outer_width_mm, thickness, strip_width))
    terminal = box_mesh((
        holder.outer_width_mm * config.terminal_width_factor,
        thickness * config.terminal_thickness_factor,
        strip_width,
    ))

    positive = layout.positive_terminal
    negative = layout.negative_terminal
    return (
        InstancedMesh("cells", cell_mesh(cell, config.cylinder_segments), _transforms(layout.cells), CELL_ROLE),
        InstancedMesh("parallel_strips", parallel_strip, _transforms(layout.parallel_strips), STRIP_ROLE),
        InstancedMesh("series_strips", series_strip, _transforms(layout.series_strips), STRIP_ROLE),
        InstancedMesh("terminal_positive", terminal, _transforms([positive]), POSITIVE_ROLE),
        InstancedMesh("terminal_negative", terminal, _transforms([negative]), NEGATIVE_ROLE),
    )


def build_scene(
    parameters: PackParameters,
    config: Optional[PackModelerConfig] = None,
    generation: int = 0,
) -> SceneSnapshot:
    """
    Build the full scene for a parameter tuple.

    Parameters:
    ----------
    parameters : PackParameters
        Cell family, topology, enclosure settings

    config : PackModelerConfig, optional
        Geometry constants

    generation : int
        Build counter to stamp on the snapshot

    Returns:
    -------
    SceneSnapshot
        Empty (with a reason) when the topology cannot be built

    Raises:
    ------
    CatalogError
        Unknown cell family
    EnclosureConfigError
        Invalid wall thickness or tolerance
    HolderConfigError
        Holder cannot contain its cutout
    """
    config = config or DEFAULT_CONFIG
    cell, holder = get_catalog_entry(parameters.cell_family)

    layout = compute_pack_layout(parameters.topology, cell, holder, config)
    if layout.is_empty:
        return SceneSnapshot.empty(parameters, layout.reason, generation, layout)

    bounding_box = pack_bounding_box(
        parameters.topology,
        cell,
        holder,
        include_brackets=parameters.show_brackets,
        bracket_height_mm=config.bracket_height_mm,
    )
    enclosure = generate_enclosure(
        bounding_box,
        parameters.wall_thickness_mm,
        parameters.tolerance_mm,
        config.lid_gap_mm,
    )
    brackets = generate_brackets(layout, holder, config)

    pack_meshes = build_pack_meshes(layout, config)
    meshes = pack_meshes[:1] + brackets.meshes() + pack_meshes[1:]

    logger.debug(
        "Built scene generation %d for %s %s",
        generation, parameters.topology.configuration_string, parameters.cell_family.value,
    )
    return SceneSnapshot(
        parameters=parameters,
        generation=generation,
        layout=layout,
        bounding_box=bounding_box,
        enclosure=enclosure,
        meshes=meshes,
        enclosure_meshes=enclosure.meshes(),
    )
