from __future__ import annotations

from typing import Callable

# Type alias for setpoint schedules; fits IOInterface.read_setpoint
SetpointSchedule = Callable[[float], float]


def constant_setpoint(value: float) -> SetpointSchedule:
    """
    Constant setpoint schedule.

    Args:
        value: Setpoint at every time

    Returns:
        Schedule function: time -> setpoint
    """
    def schedule(time: float) -> float:
        return value
    return schedule


def step_setpoint(
    initial: float = 0.0,
    final: float = 1.0,
    step_time: float = 1.0,
) -> SetpointSchedule:
    """
    Step setpoint from initial to final at step_time.

    Useful for testing transient response.

    Args:
        initial: Setpoint before step_time
        final: Setpoint from step_time on
        step_time: Time of the step (s)

    Returns:
        Schedule function: time -> setpoint
    """
    def schedule(time: float) -> float:
        return initial if time < step_time else final
    return schedule


def ramp_setpoint(
    start_value: float = 0.0,
    end_value: float = 1.0,
    start_time: float = 0.0,
    ramp_duration: float = 1.0,
) -> SetpointSchedule:
    """
    Linear ramp of setpoint over ramp_duration, starting at start_time.

    Args:
        start_value: Setpoint before the ramp
        end_value: Setpoint after the ramp
        start_time: Time the ramp begins (s)
        ramp_duration: Duration of the ramp (s), > 0

    Returns:
        Schedule function: time -> setpoint
    """
    if not ramp_duration > 0:
        raise ValueError("ramp_duration must be > 0")

    def schedule(time: float) -> float:
        if time <= start_time:
            return start_value
        if time >= start_time + ramp_duration:
            return end_value
        # Linear interpolation
        frac = (time - start_time) / ramp_duration
        return start_value + frac * (end_value - start_value)
    return schedule


def square_setpoint(
    low: float = 0.0,
    high: float = 1.0,
    period: float = 2.0,
) -> SetpointSchedule:
    """
    Square wave alternating high/low, each for half a period, starting high.

    Args:
        low: Low level
        high: High level
        period: Full period (s), > 0

    Returns:
        Schedule function: time -> setpoint
    """
    if not period > 0:
        raise ValueError("period must be > 0")

    def schedule(time: float) -> float:
        phase = (time % period) / period
        return high if phase < 0.5 else low
    return schedule
