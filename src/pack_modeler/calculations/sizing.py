"""
Pack Sizing Calculations
========================

Works backwards from a target pack voltage and capacity to the S×P
topology that reaches them with a given cell:

- series = ceil(target voltage / cell voltage)
- parallel = ceil(target capacity / cell capacity)
"""

import math
from dataclasses import dataclass
from typing import Optional

from ..models.pack import PackTopology

# Nominal Li-ion cell used when none is given
DEFAULT_CELL_VOLTAGE_V = 3.7
DEFAULT_CELL_CAPACITY_AH = 2.6

# Ratios within this of an integer count as that integer (14.8 V / 3.7 V is 4S)
_RATIO_ROUNDING = 9


@dataclass
class PackConfiguration:
    """Result of a pack sizing calculation."""
    series: int
    parallel: int
    total_cells: int
    actual_voltage_v: float
    actual_capacity_ah: float
    total_energy_wh: float

    @property
    def configuration_string(self) -> str:
        """Configuration string (e.g., '4S2P')."""
        return f"{self.series}S{self.parallel}P"

    def to_topology(self) -> PackTopology:
        return PackTopology(self.series, self.parallel)

    def exceeds_render_limit(self, max_cells: int) -> bool:
        """Whether the pack is too large to build a 3D scene for."""
        return self.total_cells > max_cells

    def summary(self) -> str:
        """Formatted summary string."""
        return (
            f"Configuration: {self.configuration_string} ({self.total_cells} cells)\n"
            f"  Voltage: {self.actual_voltage_v:.1f} V\n"
            f"  Capacity: {self.actual_capacity_ah:.2f} Ah\n"
            f"  Energy: {self.total_energy_wh:.1f} Wh"
        )


def _cells_needed(target: float, per_cell: float) -> int:
    return math.ceil(round(target / per_cell, _RATIO_ROUNDING))


def calculate_pack_configuration(
    desired_voltage_v: float,
    desired_capacity_ah: float,
    cell_voltage_v: float = DEFAULT_CELL_VOLTAGE_V,
    cell_capacity_ah: float = DEFAULT_CELL_CAPACITY_AH,
) -> Optional[PackConfiguration]:
    """
    Smallest S×P pack meeting a voltage and capacity target.

    Parameters:
    ----------
    desired_voltage_v : float
        Target nominal pack voltage (V)

    desired_capacity_ah : float
        Target pack capacity (Ah)

    cell_voltage_v : float
        Nominal cell voltage (V)

    cell_capacity_ah : float
        Cell capacity (Ah)

    Returns:
    -------
    PackConfiguration or None
        None when any input is not a positive number
    """
    inputs = (desired_voltage_v, desired_capacity_ah, cell_voltage_v, cell_capacity_ah)
    if any(not math.isfinite(v) or v <= 0 for v in inputs):
        return None

    series = _cells_needed(desired_voltage_v, cell_voltage_v)
    parallel = _cells_needed(desired_capacity_ah, cell_capacity_ah)

    actual_voltage = series * cell_voltage_v
    actual_capacity = parallel * cell_capacity_ah

    return PackConfiguration(
        series=series,
        parallel=parallel,
        total_cells=series * parallel,
        actual_voltage_v=actual_voltage,
        actual_capacity_ah=actual_capacity,
        total_energy_wh=actual_voltage * actual_capacity,
    )
