"""
Pack Topology and Parameter Models
==================================

PackTopology is the S×P grid the user asks for. PackParameters is the full
parameter tuple consumed from the UI boundary; any change to it triggers a
complete regeneration of the pack geometry.
"""

import math
import numbers
from dataclasses import dataclass, replace
from enum import Enum
from typing import Union

from .cell import CellFamily
from ..config import DEFAULT_TOLERANCE_MM, DEFAULT_WALL_THICKNESS_MM
from ..errors import InvalidParameterError


class ModelType(Enum):
    """Which printable part an STL export contains."""
    ENCLOSURE = "enclosure"
    BRACKET = "bracket"

    @classmethod
    def parse(cls, value: Union["ModelType", str]) -> "ModelType":
        """Resolve a model type from an enum member or its value."""
        if isinstance(value, cls):
            return value
        text = str(value).strip().lower()
        if text in ("bracket", "brackets"):
            return cls.BRACKET
        if text == "enclosure":
            return cls.ENCLOSURE
        raise InvalidParameterError(f"Unknown model type: {value!r}")


def _as_count(name: str, value) -> int:
    """Coerce an integral count, rejecting bools, floats with fractions, etc."""
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise InvalidParameterError(f"{name} must be an integer, got {value!r}")
    if not math.isfinite(value) or int(value) != value:
        raise InvalidParameterError(f"{name} must be an integer, got {value!r}")
    return int(value)


@dataclass(frozen=True)
class PackTopology:
    """
    Series/parallel grid of a battery pack.

    series indexes the rows (interconnect axis); parallel indexes the cells
    wired together at the same potential within one row.

    Zero or negative counts can be represented so that the layout engine
    can answer them with an explicit empty result instead of an error.
    """
    series: int
    parallel: int

    def __post_init__(self):
        object.__setattr__(self, "series", _as_count("Series", self.series))
        object.__setattr__(self, "parallel", _as_count("Parallel", self.parallel))

    @property
    def total_cells(self) -> int:
        """Total number of cells (0 for an unbuildable topology)."""
        if not self.is_buildable:
            return 0
        return self.series * self.parallel

    @property
    def is_buildable(self) -> bool:
        """Whether the grid has at least one row and one column."""
        return self.series >= 1 and self.parallel >= 1

    @property
    def configuration_string(self) -> str:
        """Configuration string (e.g., '4S2P')."""
        return f"{self.series}S{self.parallel}P"


@dataclass(frozen=True)
class PackParameters:
    """
    Complete parameter tuple for one pack regeneration.

    Attributes:
    ----------
    cell_family : CellFamily
        Cell family to look up in the catalog

    series, parallel : int
        Pack topology

    wall_thickness_mm : float
        Enclosure wall and lid thickness (mm)

    tolerance_mm : float
        Clearance between pack and enclosure on every side (mm)

    show_brackets : bool
        Whether holders are part of the pack (affects pack height and
        renderer visibility)

    model_type : ModelType
        Which part the STL export produces
    """
    cell_family: CellFamily = CellFamily.C18650
    series: int = 1
    parallel: int = 1
    wall_thickness_mm: float = DEFAULT_WALL_THICKNESS_MM
    tolerance_mm: float = DEFAULT_TOLERANCE_MM
    show_brackets: bool = True
    model_type: ModelType = ModelType.ENCLOSURE

    def __post_init__(self):
        object.__setattr__(self, "cell_family", CellFamily.parse(self.cell_family))
        object.__setattr__(self, "model_type", ModelType.parse(self.model_type))
        object.__setattr__(self, "series", _as_count("Series", self.series))
        object.__setattr__(self, "parallel", _as_count("Parallel", self.parallel))
        for name in ("wall_thickness_mm", "tolerance_mm"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, numbers.Real):
                raise InvalidParameterError(f"{name} must be a number, got {value!r}")
            object.__setattr__(self, name, float(value))

    @property
    def topology(self) -> PackTopology:
        """The S×P grid of these parameters."""
        return PackTopology(self.series, self.parallel)

    @property
    def file_stem(self) -> str:
        """Topology/family part of export file names (e.g., '4s2p_18650')."""
        return f"{self.series}s{self.parallel}p_{self.cell_family.value}"

    def with_changes(self, **changes) -> "PackParameters":
        """Return a copy with some fields replaced."""
        return replace(self, **changes)
