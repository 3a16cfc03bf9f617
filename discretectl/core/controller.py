"""
Discrete controller with autonomous sampling.

DiscreteController wraps a control law and runs it once per sample period
while the caller feeds it time at whatever rate the surrounding
simulation or real-time loop runs:

```
    driving loop (any step dt <= Ts)
        |
        v
    DiscreteController.tick(t)
        |
        +-- TimingState.advance(t)       regression / inactive / waiting / due
        |
        +-- cycle body (only when due)
        |   |-- io.read_setpoint(t)          if present, else manual setpoint
        |   |-- io.read_process_variable()   if present, else manual value
        |   |-- control_law.evaluate(sp, pv, 0.0)
        |   |-- io.apply_output(u)           if present
        |   v
        |   CycleSuccess | CycleFailure
        |
        +-- commit: timing, counters, log   (success only)
        v
    bool: True iff a cycle ran to completion
```

Failures never escape tick(): a raising capability or control law turns
into a CycleFailure, an ERROR log record and one missed deadline. Values
read or computed before the failing stage stay in place (best-effort
partial commit); the schedule is only advanced by a successful cycle, so
the next tick retries immediately.

Example:
    >>> from discretectl import DiscreteController, ControllerConfig
    >>> from discretectl.control import DiscretePID, PIDParams
    >>>
    >>> pid = DiscretePID(PIDParams.from_args(K=1.0, Ti=2.0, Td=0.1, Ts=0.01))
    >>> ctrl = DiscreteController(
    ...     ControllerConfig.from_args(name="temperature", control_law=pid, setpoint=100.0)
    ... )
    >>> for k in range(1001):
    ...     ran = ctrl.tick(k * 0.001)
"""

from __future__ import annotations

import logging
import math
from pathlib import Path
from typing import IO, Optional

from discretectl.config import ControllerConfig, validate_tolerance
from discretectl.control.interfaces import ControlLaw, IOInterface
from discretectl.core.datalog import TimeSeriesLog
from discretectl.core.monitor import PerformanceMonitor
from discretectl.core.results import CycleFailure, CycleOutcome, CycleStage, CycleSuccess
from discretectl.core.timing import TickDecision, TimingState

logger = logging.getLogger(__name__)


class DiscreteController:
    """
    Self-timed discrete controller.

    Owns its schedule, counters, log and control law; none of them are
    shared. Not safe for concurrent tick() calls on the same instance.

    Attributes:
        _name: Controller identifier (informational).
        _law: Owned control law.
        _timing: Sampling schedule.
        _monitor: Success / missed-deadline counters.
        _log: Time-series log of successful cycles.
        _io: Optional I/O callables.
    """

    def __init__(self, config: ControllerConfig) -> None:
        """
        Create a controller from a validated configuration.

        Args:
            config: Built by ControllerConfig.from_args() or one of the
                    factory helpers in discretectl.factory.
        """
        self._name = config.name
        self._law = config.control_law
        self._sample_period = config.sample_period
        self._active = config.active

        self._setpoint = config.setpoint
        self._process_variable = config.process_variable
        self._error = 0.0
        self._recompute_error()
        self._output = math.nan     # Undefined until the first successful cycle

        self._io = config.io
        self._timing = TimingState.start(
            config.initial_time,
            config.sample_period,
            config.timing_tolerance,
        )
        self._monitor = PerformanceMonitor()

        self._logging_enabled = config.enable_logging
        self._log = TimeSeriesLog()

        self._last_outcome: Optional[CycleOutcome] = None

    # ─────────────────────────────────────────────────────────────────
    # Tick / cycle execution
    # ─────────────────────────────────────────────────────────────────

    def tick(self, new_time: float) -> bool:
        """
        Advance the controller to new_time, running a cycle if one is due.

        Args:
            new_time: Current time of the driving loop

        Returns:
            True if a cycle was due and completed, False otherwise
        """
        new_time = float(new_time)
        previous_time = self._timing.current_time
        decision = self._timing.advance(new_time, active=self._active)

        if decision is TickDecision.REGRESSION:
            logger.warning(
                "Time regression detected in %s: %s < %s",
                self._name, new_time, previous_time,
                extra={"controller": self._name, "new_time": new_time, "current_time": previous_time},
            )
            return False

        if decision is not TickDecision.DUE:
            return False

        outcome = self._run_cycle(new_time)
        self._last_outcome = outcome

        if isinstance(outcome, CycleFailure):
            self._monitor.record_miss()
            logger.error(
                "Controller update failed in %s at t=%s: %s",
                self._name, new_time, outcome.describe(),
                exc_info=outcome.cause,
                extra={"controller": self._name, "stage": outcome.stage.value},
            )
            return False

        self._timing.commit(new_time)
        self._monitor.record_success()
        if self._logging_enabled:
            self._log.append(
                new_time,
                self._setpoint,
                self._process_variable,
                self._output,
                self._error,
                self._monitor.update_count,
            )
        return True

    def _run_cycle(self, time: float) -> CycleOutcome:
        """
        Execute one cycle body.

        Each stage writes its result into the controller as soon as it
        succeeds, so a later failure leaves earlier stages' values in place.
        """
        io = self._io

        stage = CycleStage.READ_SETPOINT
        try:
            if io.read_setpoint is not None:
                self._setpoint = float(io.read_setpoint(time))
                self._recompute_error()

            stage = CycleStage.READ_PROCESS_VARIABLE
            if io.read_process_variable is not None:
                self._process_variable = float(io.read_process_variable())
                self._recompute_error()

            stage = CycleStage.CONTROL_LAW
            self._output = float(self._law.evaluate(self._setpoint, self._process_variable, 0.0))

            stage = CycleStage.APPLY_OUTPUT
            if io.apply_output is not None:
                io.apply_output(self._output)
        except Exception as exc:
            return CycleFailure(time=time, stage=stage, cause=exc)

        return CycleSuccess(time=time, output=self._output)

    def _recompute_error(self) -> None:
        self._error = self._setpoint - self._process_variable

    # ─────────────────────────────────────────────────────────────────
    # State management
    # ─────────────────────────────────────────────────────────────────

    def set_setpoint(self, value: float) -> None:
        """Overwrite the setpoint (manual override) and update the error."""
        self._setpoint = float(value)
        self._recompute_error()

    def set_process_variable(self, value: float) -> None:
        """Overwrite the process variable (manual override) and update the error."""
        self._process_variable = float(value)
        self._recompute_error()

    def activate(self) -> None:
        """Enable control updates."""
        self._active = True

    def deactivate(self) -> None:
        """Disable control updates; time still advances on tick()."""
        self._active = False

    def reset(self, time: float) -> None:
        """
        Reset state, counters, schedule and the control law.

        Afterwards the controller behaves as if a cycle had just completed
        at time: the next cycle is due at time + sample_period. The setpoint
        is kept; the log is not cleared.

        Args:
            time: Time to restart the schedule from
        """
        self._timing.reset(time)
        self._output = 0.0
        self._process_variable = 0.0
        self._recompute_error()
        self._monitor.reset()
        self._last_outcome = None
        self._law.reset()

    def set_timing_tolerance(self, tolerance: float) -> None:
        """
        Set the early-fire window as a fraction of the sample period.

        Raises:
            ConfigurationError: If tolerance is outside [0, 1)
        """
        self._timing.tolerance = validate_tolerance(tolerance)

    def time_until_next_update(self) -> float:
        """Time until the next scheduled cycle (negative when overdue)."""
        return self._timing.time_until_next_update()

    # ─────────────────────────────────────────────────────────────────
    # Logging
    # ─────────────────────────────────────────────────────────────────

    def enable_logging(self) -> None:
        self._logging_enabled = True

    def disable_logging(self) -> None:
        self._logging_enabled = False

    def clear_log(self) -> None:
        self._log.clear()

    def export_log(self, destination: Path | str | IO[str]) -> int:
        """Write the log as CSV; see TimeSeriesLog.export_csv()."""
        return self._log.export_csv(destination)

    # ─────────────────────────────────────────────────────────────────
    # Accessors
    # ─────────────────────────────────────────────────────────────────

    @property
    def name(self) -> str:
        return self._name

    @property
    def sample_period(self) -> float:
        return self._sample_period

    @property
    def is_active(self) -> bool:
        return self._active

    @property
    def setpoint(self) -> float:
        return self._setpoint

    @property
    def process_variable(self) -> float:
        return self._process_variable

    @property
    def error(self) -> float:
        return self._error

    @property
    def output(self) -> float:
        """Last control output; NaN before the first successful cycle."""
        return self._output

    @property
    def control_law(self) -> ControlLaw:
        return self._law

    @property
    def output_bounds(self) -> tuple[float, float]:
        """(umin, umax) of the control law. Not enforced by the controller."""
        return (self._law.umin, self._law.umax)

    @property
    def io(self) -> IOInterface:
        return self._io

    @io.setter
    def io(self, io: IOInterface) -> None:
        self._io = io if io is not None else IOInterface()

    @property
    def timing(self) -> TimingState:
        return self._timing

    @property
    def monitor(self) -> PerformanceMonitor:
        return self._monitor

    @property
    def log(self) -> TimeSeriesLog:
        return self._log

    @property
    def logging_enabled(self) -> bool:
        return self._logging_enabled

    @property
    def current_time(self) -> float:
        return self._timing.current_time

    @property
    def last_update_time(self) -> float:
        return self._timing.last_update_time

    @property
    def next_update_time(self) -> float:
        return self._timing.next_update_time

    @property
    def timing_tolerance(self) -> float:
        return self._timing.tolerance

    @property
    def update_count(self) -> int:
        return self._monitor.update_count

    @property
    def missed_deadlines(self) -> int:
        return self._monitor.missed_deadlines

    @property
    def last_outcome(self) -> Optional[CycleOutcome]:
        """Outcome of the most recent due cycle, None before any."""
        return self._last_outcome

    def status(self) -> str:
        """Multi-line status summary."""
        from discretectl.status import format_status

        return format_status(self)

    def __str__(self) -> str:
        return self.status()

    def __repr__(self) -> str:
        return (
            f"DiscreteController(name={self._name!r}, Ts={self._sample_period}, "
            f"active={self._active}, updates={self._monitor.update_count})"
        )
