"""
Debug Trace Functions
=====================

Trace every geometry derivation for one pack with detailed output.
"""

from typing import Optional

from .config import DEFAULT_CONFIG, PackModelerConfig
from .data.cell_database import get_catalog_entry
from .debugger import GeometryDebugger, get_debugger, set_debugger
from .export.stl import triangle_count
from .export.svg import project_layout
from .geometry.scene import build_scene
from .models.pack import ModelType, PackParameters


def trace_pack_geometry(
    parameters: PackParameters,
    config: Optional[PackModelerConfig] = None,
) -> GeometryDebugger:
    """
    Trace all pack geometry derivations step by step.

    The layout and enclosure code report their formulas to the active
    debugger; this function installs one for the duration of the build
    and adds the inputs and the derived totals around them.

    Parameters:
    ----------
    parameters : PackParameters
        Pack to trace

    config : PackModelerConfig, optional
        Geometry constants

    Returns:
    -------
    GeometryDebugger
        Debugger with all steps recorded
    """
    config = config or DEFAULT_CONFIG
    debugger = GeometryDebugger()
    cell, holder = get_catalog_entry(parameters.cell_family)
    topology = parameters.topology

    debugger.start(
        cell_family=parameters.cell_family.value,
        configuration=topology.configuration_string,
        wall=f"{parameters.wall_thickness_mm}mm",
        tolerance=f"{parameters.tolerance_mm}mm",
        brackets="shown" if parameters.show_brackets else "hidden",
    )

    # ==========================================================================
    # SECTION 1: INPUT PARAMETERS
    # ==========================================================================
    debugger.start_section("INPUT PARAMETERS")
    debugger.add_input("S", topology.series, description="Series rows")
    debugger.add_input("P", topology.parallel, description="Parallel columns")
    debugger.add_input("D_cell", cell.diameter_mm, "mm", "Cell diameter")
    debugger.add_input("H_cell", cell.height_mm, "mm", "Cell height")
    debugger.add_input("D_hole", holder.hole_diameter_mm, "mm", "Holder hole diameter")
    debugger.add_input("outer_width", holder.outer_width_mm, "mm", "Holder outer width (column pitch)")
    debugger.add_input("outer_depth", holder.outer_depth_mm, "mm", "Holder outer depth (row pitch)")
    debugger.add_input("wall", parameters.wall_thickness_mm, "mm", "Enclosure wall thickness")
    debugger.add_input("tol", parameters.tolerance_mm, "mm", "Enclosure fit tolerance")

    # ==========================================================================
    # SECTION 2: LAYOUT AND ENCLOSURE
    # ==========================================================================
    debugger.start_section("LAYOUT AND ENCLOSURE")

    previous = get_debugger()
    set_debugger(debugger)
    try:
        snapshot = build_scene(parameters, config)
    finally:
        set_debugger(previous)

    if snapshot.is_empty:
        debugger.add_step(
            category="Layout",
            description="No geometry",
            formula="",
            variables={"S": topology.series, "P": topology.parallel},
            result=0,
            result_name="N_cells",
            comment=snapshot.reason,
        )
        debugger.finish()
        return debugger

    bbox = snapshot.bounding_box
    debugger.add_step(
        category="Layout",
        description="Pack height",
        formula="H = H_cell + 2*bracket_height" if parameters.show_brackets else "H = H_cell",
        variables={"H_cell": cell.height_mm, "bracket_height": config.bracket_height_mm},
        result=bbox.height_mm,
        result_name="H",
        result_unit="mm",
    )

    # ==========================================================================
    # SECTION 3: SCENE
    # ==========================================================================
    debugger.start_section("SCENE")
    layout = snapshot.layout
    debugger.add_step(
        category="Scene",
        description="Cells",
        formula="N = S * P",
        variables={"S": topology.series, "P": topology.parallel},
        result=len(layout.cells),
        result_name="N_cells",
    )
    debugger.add_step(
        category="Scene",
        description="Series strips",
        formula="N = S - 1",
        variables={"S": topology.series},
        result=len(layout.series_strips),
        result_name="N_series",
    )
    negative = layout.negative_terminal
    debugger.add_step(
        category="Scene",
        description="Negative terminal",
        formula="",
        variables={},
        result=f"row {negative.row}, column {negative.column}",
        result_name="T_neg",
        comment=f"{negative.plane.value} plane",
    )
    for model_type in ModelType:
        debugger.add_step(
            category="Scene",
            description=f"{model_type.value.capitalize()} export triangles",
            formula="sum(instances * faces)",
            variables={},
            result=triangle_count(snapshot.meshes_for(model_type)),
            result_name=f"T_{model_type.value}",
        )

    # ==========================================================================
    # SECTION 4: DRAWING
    # ==========================================================================
    debugger.start_section("DRAWING")
    drawing = project_layout(topology, cell, holder, padding_mm=config.svg_padding_mm)
    debugger.add_step(
        category="Drawing",
        description="SVG viewport width",
        formula="W_svg = W + 2*pad",
        variables={"W": drawing.pack_width_mm, "pad": drawing.padding_mm},
        result=drawing.width_mm,
        result_name="W_svg",
        result_unit="mm",
    )
    debugger.add_step(
        category="Drawing",
        description="SVG viewport height",
        formula="H_svg = L + 2*pad",
        variables={"L": drawing.pack_length_mm, "pad": drawing.padding_mm},
        result=drawing.height_mm,
        result_name="H_svg",
        result_unit="mm",
    )

    debugger.finish()
    return debugger
