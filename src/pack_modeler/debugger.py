"""
Geometry Debugger
=================

Records the dimension derivations of a pack build, grouped into report
sections, and prints them as an aligned table of results.

Library code reports steps through debug_step(); nothing is recorded
unless a debugger has been activated with set_debugger().
"""

from dataclasses import dataclass, field
from typing import Any, List, Optional


@dataclass
class GeometryStep:
    """One derived quantity: name = result [unit], from formula(variables)."""
    category: str           # "Layout", "Enclosure", ...
    description: str
    formula: str
    variables: dict
    result: Any
    result_name: str
    result_unit: str = ""
    comment: str = ""

    def value_text(self) -> str:
        value = f"{self.result:.6g}" if isinstance(self.result, float) else str(self.result)
        return f"{value} {self.result_unit}".rstrip()


@dataclass
class GeometrySection:
    title: str
    steps: List[GeometryStep] = field(default_factory=list)


class GeometryDebugger:
    """
    Records geometry derivation steps into sections.

    Steps added before the first start_section() land in an untitled
    section. Usage:

        debugger = GeometryDebugger()
        debugger.start(configuration="4S2P")
        debugger.start_section("LAYOUT")
        debugger.add_step("Layout", "Pack width", "W = P * outer_width",
                          {"P": 2, "outer_width": 22.4}, 44.8, "W", "mm")
        print(debugger.get_report())
    """

    def __init__(self):
        self.sections: List[GeometrySection] = []
        self.metadata: dict = {}
        self.finished = False

    @property
    def steps(self) -> List[GeometryStep]:
        return [step for section in self.sections for step in section.steps]

    def start(self, **metadata):
        """Reset and describe the pack being traced."""
        self.sections = []
        self.metadata = metadata
        self.finished = False

    def finish(self):
        self.finished = True

    def start_section(self, title: str):
        self.sections.append(GeometrySection(title))

    def add_step(
        self,
        category: str,
        description: str,
        formula: str,
        variables: dict,
        result: Any,
        result_name: str,
        result_unit: str = "",
        comment: str = ""
    ):
        if not self.sections:
            self.start_section("")
        self.sections[-1].steps.append(GeometryStep(
            category, description, formula, variables,
            result, result_name, result_unit, comment,
        ))

    def add_input(self, name: str, value: Any, unit: str = "", description: str = ""):
        """Record a given value (no formula)."""
        self.add_step("Input", description or name, "", {}, value, name, unit)

    def get_step_count(self) -> int:
        return sum(len(section.steps) for section in self.sections)

    def find_step_by_result(self, result_name: str) -> Optional[GeometryStep]:
        """Latest step that produced result_name."""
        for step in reversed(self.steps):
            if step.result_name == result_name:
                return step
        return None

    def get_report(self) -> str:
        """
        Format the trace as text.

        Each section is a table with one row per step: result name, value,
        description, then the formula and its inputs on an indented line.
        """
        lines = ["=" * 70, "GEOMETRY DEBUG REPORT", "=" * 70]
        for key, value in self.metadata.items():
            lines.append(f"  {key:<14} {value}")

        steps = self.steps
        name_width = max((len(s.result_name) for s in steps), default=1)
        value_width = max((len(s.value_text()) for s in steps), default=1)

        for section in self.sections:
            if section.title:
                lines.extend(["", f">>> {section.title}", "-" * 70])
            for step in section.steps:
                tag = "" if step.category == "Input" else f"[{step.category}] "
                lines.append(
                    f"  {step.result_name:<{name_width}} = "
                    f"{step.value_text():>{value_width}}   {tag}{step.description}"
                )
                if step.formula:
                    inputs = ", ".join(
                        f"{k}={v:.6g}" if isinstance(v, float) else f"{k}={v}"
                        for k, v in step.variables.items()
                    )
                    lines.append(f"      {step.formula}" + (f"   ({inputs})" if inputs else ""))
                if step.comment:
                    lines.append(f"      // {step.comment}")

        lines.extend(["", "=" * 70, f"{len(steps)} steps" + ("" if self.finished else " (incomplete)")])
        return "\n".join(lines)


# Active debugger; None disables recording
_debugger: Optional[GeometryDebugger] = None


def get_debugger() -> Optional[GeometryDebugger]:
    return _debugger


def set_debugger(debugger: Optional[GeometryDebugger]):
    """Set (or clear, with None) the active debugger."""
    global _debugger
    _debugger = debugger


def debug_step(
    category: str,
    description: str,
    formula: str,
    variables: dict,
    result: Any,
    result_name: str,
    result_unit: str = "",
    comment: str = ""
):
    """Add a step to the active debugger (if any)."""
    if _debugger is not None:
        _debugger.add_step(
            category, description, formula, variables,
            result, result_name, result_unit, comment,
        )
