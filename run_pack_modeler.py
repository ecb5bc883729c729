#!/usr/bin/env python3
"""
Battery Pack Modeler Launcher
=============================

Command line front end for the Battery Pack Modeler.

Builds the 3D geometry of a cylindrical-cell battery pack and writes the
printable parts as binary STL, optionally with a dimensioned SVG layout
and a PNG preview.

Features:
- Cell families: 18650, 21700, 26650, 32700
- Any S×P configuration (snake-routed nickel strips)
- Per-cell interlocking holders
- Five-panel enclosure with a separate lid
- Sizing from a target voltage and capacity

Usage:
    python run_pack_modeler.py --cell 18650 --series 4 --parallel 2
    python run_pack_modeler.py --cell 21700 --voltage 36 --capacity 10 --svg
    python run_pack_modeler.py --series 3 --parallel 3 --model bracket --trace

Requirements:
    - Python 3.9+
    - numpy
    - trimesh
    - matplotlib (for --preview)
"""

import argparse
import logging
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent))

from src.pack_modeler import (
    PackModeler,
    PackModelerError,
    PackParameters,
    calculate_pack_configuration,
    list_cell_families,
    trace_pack_geometry,
)
from src.pack_modeler.calculations.sizing import DEFAULT_CELL_CAPACITY_AH, DEFAULT_CELL_VOLTAGE_V
from src.pack_modeler.config import DEFAULT_TOLERANCE_MM, DEFAULT_WALL_THICKNESS_MM

logger = logging.getLogger("pack_modeler")


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Generate 3D-printable battery pack geometry (STL/SVG).")

    p.add_argument("--cell", type=str, default="18650", choices=list_cell_families(),
                   help="Cell family.")
    p.add_argument("--series", "-s", type=int, default=1, help="Cells in series (rows).")
    p.add_argument("--parallel", "-p", type=int, default=1, help="Cells in parallel (columns).")
    p.add_argument("--wall", type=float, default=DEFAULT_WALL_THICKNESS_MM,
                   help="Enclosure wall thickness (mm).")
    p.add_argument("--tolerance", type=float, default=DEFAULT_TOLERANCE_MM,
                   help="Clearance between pack and enclosure (mm).")
    p.add_argument("--no-brackets", action="store_true",
                   help="Leave the holders out of the pack height.")
    p.add_argument("--model", type=str, default="enclosure", choices=["enclosure", "bracket"],
                   help="Which part to export as STL.")
    p.add_argument("--output", "-o", type=str, default="output", help="Output directory.")
    p.add_argument("--svg", action="store_true", help="Also write the top-down SVG layout.")
    p.add_argument("--preview", action="store_true", help="Also write a PNG preview of the pack.")
    p.add_argument("--trace", action="store_true", help="Print a step-by-step geometry trace.")

    # Sizing
    p.add_argument("--voltage", type=float, default=None,
                   help="Target pack voltage (V); overrides --series.")
    p.add_argument("--capacity", type=float, default=None,
                   help="Target pack capacity (Ah); overrides --parallel.")
    p.add_argument("--cell-voltage", type=float, default=DEFAULT_CELL_VOLTAGE_V,
                   help="Nominal cell voltage used for sizing (V).")
    p.add_argument("--cell-capacity", type=float, default=DEFAULT_CELL_CAPACITY_AH,
                   help="Cell capacity used for sizing (Ah).")

    p.add_argument("--verbose", "-v", action="store_true", help="Debug logging.")
    return p


def save_preview(modeler: PackModeler, output_dir: Path) -> Path:
    """Render the pack to a PNG next to the exports."""
    import matplotlib
    matplotlib.use("Agg")
    import matplotlib.pyplot as plt

    from src.pack_modeler.plotting import PackPlotter

    snapshot = modeler.snapshot
    fig = PackPlotter().plot_pack_3d(snapshot)
    path = output_dir / f"pack_{snapshot.parameters.file_stem}.png"
    output_dir.mkdir(parents=True, exist_ok=True)
    fig.savefig(path, dpi=150)
    plt.close(fig)
    logger.info("Exported: %s", path)
    return path


def main(argv=None) -> int:
    """Run the modeler from the command line; returns the exit status."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    series, parallel = args.series, args.parallel
    if (args.voltage is None) != (args.capacity is None):
        parser.error("--voltage and --capacity must be given together")
    if args.voltage is not None:
        configuration = calculate_pack_configuration(
            args.voltage, args.capacity, args.cell_voltage, args.cell_capacity,
        )
        if configuration is None:
            parser.error("voltage, capacity and cell ratings must all be positive")
        print(configuration.summary())
        print()
        series, parallel = configuration.series, configuration.parallel

    output_dir = Path(args.output)

    try:
        parameters = PackParameters(
            cell_family=args.cell,
            series=series,
            parallel=parallel,
            wall_thickness_mm=args.wall,
            tolerance_mm=args.tolerance,
            show_brackets=not args.no_brackets,
            model_type=args.model,
        )

        if args.trace:
            print(trace_pack_geometry(parameters).get_report())

        modeler = PackModeler()
        snapshot = modeler.rebuild(parameters)

        print("=" * 60)
        print(f"Battery Pack Modeler: {parameters.topology.configuration_string} {parameters.cell_family.value}")
        print("=" * 60)
        print(modeler.dimensions_summary())
        if snapshot.enclosure is not None:
            print(snapshot.enclosure.spec.summary())
        print()

        modeler.save(modeler.export_stl(), output_dir)
        if args.svg:
            modeler.save(modeler.export_svg(), output_dir)
        if args.preview:
            save_preview(modeler, output_dir)
    except PackModelerError as exc:
        logger.error("%s", exc)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
