"""
Sampling schedule for a discrete controller.

TimingState decides, for each new time value fed by the driving loop,
whether a control cycle is due. The trigger uses a relative tolerance
window so that a clock built by repeatedly adding a float step still
fires on the sample it was meant to hit:

    due  <=>  t >= next_update_time - tolerance * sample_period

The window only ever opens *before* the due time; a tick after the due
time is always due.

Time that moves backward (or is NaN) is reported as a regression and
leaves the state untouched. TimingState only decides; the controller commits a
successful cycle with commit().
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum


class TickDecision(Enum):
    """Result of advancing the schedule to a new time."""
    REGRESSION = "regression"   # new time < current time, nothing changed
    INACTIVE = "inactive"       # time advanced, controller disabled
    WAITING = "waiting"         # time advanced, cycle not yet due
    DUE = "due"                 # time advanced, cycle should execute


@dataclass(slots=True)
class TimingState:
    """
    Mutable scheduling state.

    Attributes:
        sample_period: Fixed interval between cycles (s). Never changes.
        current_time: Latest accepted time value.
        last_update_time: Time of the last successful cycle, or reset time.
                          -inf when no cycle has run yet.
        next_update_time: Earliest nominal time of the next cycle.
        tolerance: Fraction of sample_period a cycle may fire early.
    """
    sample_period: float
    current_time: float
    last_update_time: float
    next_update_time: float
    tolerance: float

    @staticmethod
    def start(initial_time: float, sample_period: float, tolerance: float) -> "TimingState":
        """Schedule the first cycle one sample period after initial_time."""
        initial_time = float(initial_time)
        return TimingState(
            sample_period=float(sample_period),
            current_time=initial_time,
            last_update_time=-math.inf,
            next_update_time=initial_time + sample_period,
            tolerance=float(tolerance),
        )

    @property
    def has_executed(self) -> bool:
        """True once a cycle has succeeded or the schedule has been reset."""
        return self.last_update_time != -math.inf

    def trigger_time(self) -> float:
        """Earliest time at which the next cycle fires."""
        return self.next_update_time - self.tolerance * self.sample_period

    def advance(self, new_time: float, *, active: bool) -> TickDecision:
        """
        Advance to new_time and decide whether a cycle is due.

        Args:
            new_time: Time value from the driving loop
            active: Whether the owning controller is enabled

        Returns:
            TickDecision for this time value. NaN never compares as
            moving forward and is reported as a regression.
        """
        if not new_time >= self.current_time:
            return TickDecision.REGRESSION

        self.current_time = new_time

        if not active:
            return TickDecision.INACTIVE

        if new_time >= self.trigger_time():
            return TickDecision.DUE
        return TickDecision.WAITING

    def commit(self, time: float) -> None:
        """Record a successful cycle at time and schedule the next one."""
        self.last_update_time = time
        self.next_update_time = time + self.sample_period

    def reset(self, time: float) -> None:
        """Restart the schedule as if a cycle had just completed at time."""
        time = float(time)
        self.current_time = time
        self.commit(time)

    def time_until_next_update(self) -> float:
        """Time remaining until the next cycle (negative when overdue)."""
        return self.next_update_time - self.current_time
