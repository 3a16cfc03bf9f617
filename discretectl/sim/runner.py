"""
Closed-loop simulation runner.

ClosedLoopRunner is the time authority for a simulation: it generates the
tick times and drives the controller and the plant from them.

Architecture:
```
    ClosedLoopRunner (Time Authority)
        |
        +-- DiscreteController
        |   |-- decides on its own when a cycle is due
        |   |-- reads/writes the plant through its IOInterface
        |
        +-- FirstOrderPlant (optional)
        |   |-- stepped every dt_s with the held actuator input
        |
        v
    RunResult:
        |-- RunMetrics (timing, counters)
        |-- LogSample[] (controller log)
        |-- PlantSample[] (plant trace, optional)
```

Tick times are computed as start_time + k * dt_s rather than by repeated
addition, so the clock does not drift over long runs.

Example usage:
    >>> from discretectl.config import SimConfig
    >>> from discretectl.factory import controller_from_gains
    >>> from discretectl.sim import ClosedLoopRunner, FirstOrderParams, FirstOrderPlant, wire_plant
    >>>
    >>> cfg = SimConfig.from_args(name="example", duration_s=10.0, dt_s=0.01, seed=0, out_dir=None)
    >>> plant = FirstOrderPlant(FirstOrderParams(gain=1.0, time_constant_s=2.0), initial_value=0.0)
    >>> ctrl = controller_from_gains(name="loop", K=2.0, Ti=1.0, Ts=0.1, setpoint=1.0, enable_logging=True)
    >>> wire_plant(ctrl, plant)
    >>> result = ClosedLoopRunner(cfg, ctrl, plant).run()
"""

from __future__ import annotations

import logging
from dataclasses import asdict
from datetime import datetime, timezone
from typing import Optional

from discretectl.config import SimConfig
from discretectl.control.interfaces import IOInterface
from discretectl.core.controller import DiscreteController
from discretectl.scenarios.setpoints import SetpointSchedule
from discretectl.sim.interfaces import RunMetrics, RunResult
from discretectl.sim.plant import FirstOrderPlant, PlantSample

logger = logging.getLogger(__name__)


def wire_plant(
    controller: DiscreteController,
    plant: FirstOrderPlant,
    setpoint_schedule: Optional[SetpointSchedule] = None,
) -> None:
    """
    Connect a controller's I/O capabilities to a plant.

    The process variable is read from plant.measure() and the output goes
    to plant.actuate(). With a setpoint_schedule the setpoint is read from
    it each cycle; without one the controller's current (manual) setpoint
    is used.
    """
    controller.io = IOInterface(
        read_setpoint=setpoint_schedule,
        read_process_variable=plant.measure,
        apply_output=plant.actuate,
    )


class ClosedLoopRunner:
    """
    Drives a controller (and optionally a plant) over simulated time.

    Attributes:
        _cfg: Simulation configuration (name, duration, step, seed).
        _controller: Controller under test. Not reset by the runner; its
                     schedule should start at cfg.start_time.
        _plant: Optional plant stepped after every tick.
    """

    def __init__(
        self,
        config: SimConfig,
        controller: DiscreteController,
        plant: Optional[FirstOrderPlant] = None,
    ) -> None:
        self._cfg = config
        self._controller = controller
        self._plant = plant

    def run(self) -> RunResult:
        """
        Run the simulation.

        For each step k = 0..steps:
        1. t = start_time + k * dt_s
        2. controller.tick(t)
        3. step the plant by dt_s (if configured) and record a trace sample

        Returns:
            RunResult with metrics, controller log samples and plant trace
        """
        start_time = datetime.now(timezone.utc).isoformat()

        cfg = self._cfg
        steps = cfg.steps

        # Plant starts from its initial condition on every run
        plant_trace: list[PlantSample] = []
        if self._plant is not None:
            self._plant.reset()

        logger.info(
            "Running %s: %d steps of %s s, controller %s (Ts=%s)",
            cfg.name, steps + 1, cfg.dt_s, self._controller.name, self._controller.sample_period,
        )

        # ─────────────────────────────────────────────────────────────
        # Main simulation loop
        # ─────────────────────────────────────────────────────────────
        t = cfg.start_time
        for k in range(steps + 1):
            t = cfg.start_time + k * cfg.dt_s
            self._controller.tick(t)

            if self._plant is not None:
                held_input = self._plant.input
                state = self._plant.step(cfg.dt_s)
                plant_trace.append(PlantSample(time=t + cfg.dt_s, value=state.value, input=held_input))

        finish_time = datetime.now(timezone.utc).isoformat()
        metrics = RunMetrics(
            scenario_name=cfg.name,
            controller_name=self._controller.name,
            start_time=start_time,
            finish_time=finish_time,
            sim_start_s=cfg.start_time,
            sim_end_s=t,
            total_steps=steps + 1,
            dt_s=cfg.dt_s,
            sample_period_s=self._controller.sample_period,
            update_count=self._controller.update_count,
            missed_deadlines=self._controller.missed_deadlines,
        )

        # Validate that metrics are serializable (fail-fast check)
        _ = asdict(metrics)

        if metrics.missed_deadlines:
            logger.warning("%s: %d missed deadlines", cfg.name, metrics.missed_deadlines)

        return RunResult(
            metrics=metrics,
            controller_log=self._controller.log.samples(),
            plant_trace=plant_trace if self._plant is not None else None,
        )
