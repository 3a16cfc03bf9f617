"""
discretectl: Autonomous discrete-time sampling for control loops.

Features:
- Self-timed controller: feed it time, it decides when a cycle is due
- Relative tolerance window against floating-point clock jitter
- Hybrid value/callback I/O with per-cycle failure isolation
- In-memory time-series log with CSV export
- Discrete PID and relay control laws
- Closed-loop simulation harness, JSON/CSV run artifacts, plotting
"""

from __future__ import annotations

from discretectl.config import ControllerConfig, SimConfig
from discretectl.control.interfaces import ControlLaw, IOInterface
from discretectl.core.controller import DiscreteController
from discretectl.errors import ConfigurationError, DiscreteCtlError
from discretectl.factory import controller_from_gains, controller_from_pid
from discretectl.status import format_status, show_controller_status

__all__ = [
    "__version__",
    "ControllerConfig",
    "SimConfig",
    "ControlLaw",
    "IOInterface",
    "DiscreteController",
    "ConfigurationError",
    "DiscreteCtlError",
    "controller_from_gains",
    "controller_from_pid",
    "format_status",
    "show_controller_status",
]

__version__ = "0.1.0"
