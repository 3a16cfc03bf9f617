from __future__ import annotations

from dataclasses import dataclass

from discretectl.core.datalog import LogSample
from discretectl.sim.plant import PlantSample


# slots are used to enfore good interface hygiene, disables dynamic attribute creation.
@dataclass(frozen=True, slots=True)
class RunMetrics:
    """
    Run-level metadata and final controller counters.
    """
    scenario_name: str
    controller_name: str
    start_time: str                 # Wall clock, ISO 8601 UTC
    finish_time: str                # Wall clock, ISO 8601 UTC
    sim_start_s: float              # First tick time
    sim_end_s: float                # Last tick time
    total_steps: int                # Ticks issued, including the first
    dt_s: float                     # Simulation step
    sample_period_s: float          # Controller sample period
    update_count: int               # Successful controller cycles
    missed_deadlines: int           # Failed controller cycles


@dataclass(frozen=True, slots=True)
class RunResult:
    """
    Complete results from a closed-loop run.

    This consolidates all outputs to avoid expanding return tuples.

    Attributes:
        metrics: Run-level metadata (timing, counts).
        controller_log: Samples from the controller's log, one per logged
                        cycle. Empty when the controller had logging off.
        plant_trace: One sample per simulation step. None when the run had
                     no plant attached.
    """
    metrics: RunMetrics
    controller_log: list[LogSample]
    plant_trace: list[PlantSample] | None = None
