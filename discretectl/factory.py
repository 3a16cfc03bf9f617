"""
Convenience constructors for DiscreteController.

Both helpers build a ControllerConfig and pass it to the one canonical
constructor; they add no behavior of their own.
"""

from __future__ import annotations

import math

from discretectl.config import DEFAULT_TIMING_TOLERANCE, ControllerConfig
from discretectl.control.interfaces import ControlLaw, IOInterface
from discretectl.control.pid import DiscretePID, PIDParams
from discretectl.core.controller import DiscreteController


def controller_from_pid(
    pid: ControlLaw,
    *,
    name: str,
    setpoint: float | None = None,
    process_variable: float | None = None,
    sample_period: float | None = None,
    initial_time: float = 0.0,
    active: bool = True,
    timing_tolerance: float = DEFAULT_TIMING_TOLERANCE,
    io: IOInterface | None = None,
    enable_logging: bool = False,
) -> DiscreteController:
    """
    Wrap an existing control law in a DiscreteController.

    The sample period defaults to the control law's; passing a different
    one is a ConfigurationError.
    """
    config = ControllerConfig.from_args(
        name=name,
        control_law=pid,
        sample_period=sample_period,
        setpoint=setpoint,
        process_variable=process_variable,
        initial_time=initial_time,
        active=active,
        timing_tolerance=timing_tolerance,
        io=io,
        enable_logging=enable_logging,
    )
    return DiscreteController(config)


def controller_from_gains(
    *,
    name: str,
    K: float,
    Ts: float,
    Ti: float = math.inf,
    Td: float = 0.0,
    Tt: float | None = None,
    N: float = 10.0,
    b: float = 1.0,
    umin: float = -math.inf,
    umax: float = math.inf,
    setpoint: float | None = None,
    process_variable: float | None = None,
    initial_time: float = 0.0,
    active: bool = True,
    timing_tolerance: float = DEFAULT_TIMING_TOLERANCE,
    io: IOInterface | None = None,
    enable_logging: bool = False,
) -> DiscreteController:
    """
    Build a DiscretePID from raw gains and wrap it in a DiscreteController.

    Example:
        >>> ctrl = controller_from_gains(
        ...     name="pressure", K=20.0, Ti=3.0, Td=0.1, Ts=0.05, setpoint=6.0,
        ... )
    """
    pid = DiscretePID(
        PIDParams.from_args(K=K, Ts=Ts, Ti=Ti, Td=Td, Tt=Tt, N=N, b=b, umin=umin, umax=umax)
    )
    return controller_from_pid(
        pid,
        name=name,
        setpoint=setpoint,
        process_variable=process_variable,
        initial_time=initial_time,
        active=active,
        timing_tolerance=timing_tolerance,
        io=io,
        enable_logging=enable_logging,
    )
