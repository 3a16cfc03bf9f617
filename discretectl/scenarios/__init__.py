from __future__ import annotations

from discretectl.scenarios.setpoints import (
    SetpointSchedule,
    constant_setpoint,
    step_setpoint,
    ramp_setpoint,
    square_setpoint,
)

__all__ = [
    "SetpointSchedule",
    "constant_setpoint",
    "step_setpoint",
    "ramp_setpoint",
    "square_setpoint",
]
