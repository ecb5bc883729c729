"""
Pack Modeler Plotting Module
============================

Preview figures for a built pack, drawn with matplotlib.

Plot Types Available:
--------------------
- 3D pack preview (cells, holders, strips and terminals)
- 3D enclosure preview (panels and lid)
- 2D top-down layout with dimension lines

The 3D previews consume a SceneSnapshot as-is; they never modify it.

Usage:
-----
    from src.pack_modeler import PackModeler, PackParameters
    from src.pack_modeler.plotting import PackPlotter

    modeler = PackModeler()
    modeler.rebuild(PackParameters(series=4, parallel=2))
    fig = PackPlotter().plot_pack_3d(modeler.snapshot)
    plt.show()
"""

from typing import Iterable, Optional, Tuple

import numpy as np
import matplotlib.pyplot as plt
from matplotlib.axes import Axes
from matplotlib.figure import Figure
from matplotlib.patches import Circle, Rectangle
from mpl_toolkits.mplot3d.art3d import Poly3DCollection

from .export.stl import Y_UP_TO_Z_UP, flatten_instances
from .export.svg import LayoutDrawing
from .geometry.scene import SceneSnapshot
from .models.instances import InstancedMesh
from .models.pack import ModelType


ROLE_COLORS = {
    "cell": "#0891b2",
    "bracket": "#6b7280",
    "strip": "#c0c0c0",
    "terminal_positive": "#ef4444",
    "terminal_negative": "#3b82f6",
    "enclosure": "#d1d5db",
}


class PackPlotter:
    """
    Battery pack preview plots.

    Example:
    -------
        plotter = PackPlotter()
        fig = plotter.plot_pack_3d(snapshot)
        fig.savefig("pack.png", dpi=150)
    """

    DEFAULT_FIGURE_SIZE = (10, 8)
    DEFAULT_ALPHA = 0.9

    def __init__(self, role_colors: Optional[dict] = None):
        self.role_colors = dict(ROLE_COLORS)
        if role_colors:
            self.role_colors.update(role_colors)

    # =========================================================================
    # Helpers
    # =========================================================================

    def _axes_3d(self, ax: Optional[Axes], figsize) -> Tuple[Figure, Axes]:
        if ax is None:
            fig = plt.figure(figsize=figsize or self.DEFAULT_FIGURE_SIZE)
            ax = fig.add_subplot(111, projection="3d")
        else:
            fig = ax.get_figure()
        return fig, ax

    def _draw_meshes(
        self,
        ax: Axes,
        meshes: Iterable[InstancedMesh],
        transform: Optional[np.ndarray] = None,
    ) -> int:
        """Add one collection per mesh; returns triangles drawn."""
        drawn = 0
        lows, highs = [], []
        for mesh in meshes:
            triangles = flatten_instances([mesh], transform)
            if len(triangles) == 0:
                continue
            collection = Poly3DCollection(
                triangles,
                facecolors=self.role_colors.get(mesh.role, "#999999"),
                edgecolors="none",
                alpha=self.DEFAULT_ALPHA,
            )
            ax.add_collection3d(collection)
            points = triangles.reshape(-1, 3)
            lows.append(points.min(axis=0))
            highs.append(points.max(axis=0))
            drawn += len(triangles)

        if drawn:
            low = np.min(lows, axis=0)
            high = np.max(highs, axis=0)
            # Equal scale on every axis
            center = (low + high) / 2.0
            half = max(float(np.max(high - low)) / 2.0, 1.0)
            ax.set_xlim(center[0] - half, center[0] + half)
            ax.set_ylim(center[1] - half, center[1] + half)
            ax.set_zlim(center[2] - half, center[2] + half)
        return drawn

    @staticmethod
    def _empty_message(ax: Axes, snapshot: SceneSnapshot):
        message = "No pack to display"
        if snapshot.reason:
            message += f"\n{snapshot.reason}"
        ax.text2D(0.5, 0.5, message, transform=ax.transAxes, ha="center", va="center")

    # =========================================================================
    # 3D Previews
    # =========================================================================

    def plot_pack_3d(
        self,
        snapshot: SceneSnapshot,
        ax: Optional[Axes] = None,
        show_brackets: Optional[bool] = None,
        figsize: Optional[Tuple[int, int]] = None,
    ) -> Figure:
        """
        Draw the pack scene.

        Parameters:
        ----------
        snapshot : SceneSnapshot
            Published scene to draw

        ax : Axes, optional
            Existing 3D axes to plot on

        show_brackets : bool, optional
            Override the snapshot's holder visibility

        figsize : tuple, optional
            Figure size (width, height) in inches

        Returns:
        -------
        Figure
            Matplotlib figure object
        """
        fig, ax = self._axes_3d(ax, figsize)

        if snapshot.is_empty:
            self._empty_message(ax, snapshot)
            return fig

        # Scene is Y up; matplotlib draws Z up
        self._draw_meshes(ax, snapshot.visible_meshes(show_brackets), Y_UP_TO_Z_UP)

        parameters = snapshot.parameters
        ax.set_xlabel("Width (mm)")
        ax.set_ylabel("Length (mm)")
        ax.set_zlabel("Height (mm)")
        ax.set_title(
            f"{parameters.topology.configuration_string} "
            f"{parameters.cell_family.value} Pack"
        )
        return fig

    def plot_enclosure_3d(
        self,
        snapshot: SceneSnapshot,
        ax: Optional[Axes] = None,
        figsize: Optional[Tuple[int, int]] = None,
    ) -> Figure:
        """Draw the enclosure panels and lid as exported."""
        fig, ax = self._axes_3d(ax, figsize)

        if snapshot.is_empty:
            self._empty_message(ax, snapshot)
            return fig

        self._draw_meshes(ax, snapshot.meshes_for(ModelType.ENCLOSURE))

        spec = snapshot.enclosure.spec
        ax.set_xlabel("X (mm)")
        ax.set_ylabel("Y (mm)")
        ax.set_zlabel("Z (mm)")
        ax.set_title(
            f"Enclosure {spec.outer_width_mm:.1f} × {spec.outer_length_mm:.1f} × "
            f"{spec.outer_height_mm:.1f} mm"
        )
        return fig

    # =========================================================================
    # 2D Layout
    # =========================================================================

    def plot_layout(
        self,
        drawing: LayoutDrawing,
        ax: Optional[Axes] = None,
        figsize: Optional[Tuple[int, int]] = None,
    ) -> Figure:
        """
        Draw the top-down layout in drawing coordinates (y grows downward).

        Returns:
        -------
        Figure
            Matplotlib figure object
        """
        if ax is None:
            fig, ax = plt.subplots(figsize=figsize or self.DEFAULT_FIGURE_SIZE)
        else:
            fig = ax.get_figure()

        for rect in drawing.rects:
            ax.add_patch(Rectangle(
                (rect.x, rect.y), rect.width, rect.height,
                fill=False, edgecolor="#cccccc", linewidth=0.5,
            ))
        for circle in drawing.circles:
            ax.add_patch(Circle(
                (circle.cx, circle.cy), circle.r,
                facecolor="#888888", edgecolor="#333333", linewidth=0.8,
            ))

        for dim in drawing.dimensions:
            ax.annotate(
                "", xy=dim.end, xytext=dim.start,
                arrowprops=dict(arrowstyle="<->", color="blue", linewidth=0.8),
            )
            ax.text(
                *dim.label_position, dim.label,
                color="blue", ha="center", va="center",
                rotation=270 if dim.vertical else 0,
            )

        pad = drawing.padding_mm
        ax.set_xlim(-pad, drawing.pack_width_mm + pad)
        ax.set_ylim(drawing.pack_length_mm + pad, -pad)
        ax.set_aspect("equal")
        ax.set_xlabel("Width (mm)")
        ax.set_ylabel("Length (mm)")
        ax.set_title(drawing.description or "Pack Layout")
        return fig
