from __future__ import annotations

from discretectl.sim.artifacts import write_run_artifacts
from discretectl.sim.interfaces import RunMetrics, RunResult
from discretectl.sim.plant import (
    FirstOrderParams,
    FirstOrderPlant,
    FirstOrderState,
    PlantSample,
    step_first_order,
)
from discretectl.sim.runner import ClosedLoopRunner, wire_plant

__all__ = [
    "write_run_artifacts",
    "RunMetrics",
    "RunResult",
    "FirstOrderParams",
    "FirstOrderPlant",
    "FirstOrderState",
    "PlantSample",
    "step_first_order",
    "ClosedLoopRunner",
    "wire_plant",
]
