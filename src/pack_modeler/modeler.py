"""
Pack Modeler Session
====================

Holds the latest published SceneSnapshot and turns it into downloadable
artifacts.

Rebuilds are synchronous. The new snapshot is built entirely off to the
side and then swapped in under a lock, so a reader (a render loop, an
export) always sees either the old snapshot or the new one in full.
Published snapshots are never modified; on every exit path of a rebuild
the session drops its reference to the previous generation, which is
freed once the last reader lets go of it.
"""

import itertools
import logging
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from .config import DEFAULT_CONFIG, PackModelerConfig
from .errors import NoGeometryError
from .export.stl import Y_UP_TO_Z_UP, serialize_stl
from .export.svg import LayoutDrawing, project_layout
from .geometry.scene import SceneSnapshot, build_scene
from .models.pack import ModelType, PackParameters

logger = logging.getLogger(__name__)


STL_MEDIA_TYPE = "model/stl"
SVG_MEDIA_TYPE = "image/svg+xml"


def stl_filename(model_type: Union[ModelType, str], parameters: PackParameters) -> str:
    """Download name for an STL export (e.g., 'enclosure_4s2p_18650.stl')."""
    prefix = "brackets" if ModelType.parse(model_type) == ModelType.BRACKET else "enclosure"
    return f"{prefix}_{parameters.file_stem}.stl"


def svg_filename(parameters: PackParameters) -> str:
    """Download name for the layout drawing (e.g., 'pack_4s2p_18650.svg')."""
    return f"pack_{parameters.file_stem}.svg"


@dataclass(frozen=True)
class ExportArtifact:
    """Serialized export ready to hand to the user."""
    filename: str
    data: bytes
    media_type: str

    @property
    def size_bytes(self) -> int:
        return len(self.data)


class PackModeler:
    """
    Battery pack modeling session.

    Usage:
        modeler = PackModeler()
        modeler.rebuild(PackParameters(series=4, parallel=2))
        artifact = modeler.export_stl()
        modeler.save(artifact, "output")
    """

    def __init__(self, config: Optional[PackModelerConfig] = None):
        self.config = config or DEFAULT_CONFIG
        valid, message = self.config.validate()
        if not valid:
            raise ValueError(f"Invalid configuration: {message}")

        self._lock = threading.Lock()
        self._generations = itertools.count(1)
        self._snapshot = SceneSnapshot.empty(PackParameters(), "No pack built yet")

    @property
    def snapshot(self) -> SceneSnapshot:
        """Latest published snapshot. Treat as read-only."""
        with self._lock:
            return self._snapshot

    @property
    def parameters(self) -> PackParameters:
        return self.snapshot.parameters

    def _publish(self, snapshot: SceneSnapshot) -> SceneSnapshot:
        with self._lock:
            previous, self._snapshot = self._snapshot, snapshot
        return previous

    def rebuild(self, parameters: Optional[PackParameters] = None, **changes) -> SceneSnapshot:
        """
        Regenerate the pack from a full parameter tuple.

        Either pass a PackParameters, or keyword changes to apply to the
        current parameters (e.g., rebuild(series=5)).

        Raises:
        ------
        ConfigurationError
            After publishing an empty snapshot that carries the reason
        """
        if parameters is None:
            parameters = self.parameters.with_changes(**changes)
        elif changes:
            parameters = parameters.with_changes(**changes)

        generation = next(self._generations)
        snapshot = None
        try:
            snapshot = build_scene(parameters, self.config, generation)
        except Exception as exc:
            logger.warning("Rebuild %d failed: %s", generation, exc)
            snapshot = SceneSnapshot.empty(parameters, str(exc), generation)
            raise
        finally:
            if snapshot is not None:
                previous = self._publish(snapshot)
                logger.debug("Dropped generation %d", previous.generation)
                del previous

        if snapshot.is_empty:
            logger.warning("No geometry for %s: %s", parameters.topology.configuration_string, snapshot.reason)
        else:
            logger.debug(
                "Published generation %d (%d cells)",
                generation, parameters.topology.total_cells,
            )
        return snapshot

    # =========================================================================
    # Exports
    # =========================================================================

    def export_stl(self, model_type: Optional[Union[ModelType, str]] = None) -> ExportArtifact:
        """
        Serialize the enclosure or the holders of the current pack.

        Parameters:
        ----------
        model_type : ModelType or str, optional
            Defaults to the model type of the current parameters

        Raises:
        ------
        NoGeometryError
            If no pack has been built
        """
        snapshot = self.snapshot
        if snapshot.is_empty:
            raise NoGeometryError()

        model_type = ModelType.parse(model_type or snapshot.parameters.model_type)
        transform = Y_UP_TO_Z_UP if model_type == ModelType.BRACKET else None
        data = serialize_stl(snapshot.meshes_for(model_type), transform)

        filename = stl_filename(model_type, snapshot.parameters)
        logger.info("Prepared %s (%d bytes)", filename, len(data))
        return ExportArtifact(filename, data, STL_MEDIA_TYPE)

    def layout_drawing(self, snapshot: Optional[SceneSnapshot] = None) -> LayoutDrawing:
        """Top-down drawing of the current (or given) snapshot."""
        snapshot = snapshot or self.snapshot
        if snapshot.is_empty:
            raise NoGeometryError()
        layout = snapshot.layout
        return project_layout(
            layout.topology,
            layout.cell,
            layout.holder,
            padding_mm=self.config.svg_padding_mm,
            overall_height_mm=snapshot.bounding_box.height_mm,
            dimension_offset_mm=self.config.dimension_offset_mm,
        )

    def export_svg(self) -> ExportArtifact:
        """
        Serialize the top-down layout drawing.

        Raises:
        ------
        NoGeometryError
            If no pack has been built
        """
        snapshot = self.snapshot
        drawing = self.layout_drawing(snapshot)
        filename = svg_filename(snapshot.parameters)
        logger.info("Prepared %s", filename)
        return ExportArtifact(filename, drawing.to_svg().encode("utf-8"), SVG_MEDIA_TYPE)

    def save(self, artifact: ExportArtifact, directory: Union[str, Path] = ".") -> Path:
        """Write an artifact into directory under its own file name."""
        directory = Path(directory)
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / artifact.filename
        path.write_bytes(artifact.data)
        logger.info("Exported: %s", path)
        return path

    def dimensions_summary(self) -> str:
        """Overall pack dimensions including holders."""
        snapshot = self.snapshot
        if snapshot.is_empty:
            return f"No pack: {snapshot.reason}"
        return "Overall Dimensions (incl. holders)\n" + snapshot.bounding_box.summary()
