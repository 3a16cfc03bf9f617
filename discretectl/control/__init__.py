from __future__ import annotations

from discretectl.control.interfaces import ControlLaw, IOInterface
from discretectl.control.pid import DiscretePID, PIDParams
from discretectl.control.relay import RelayController, RelayParams

__all__ = [
    "ControlLaw",
    "IOInterface",
    "DiscretePID",
    "PIDParams",
    "RelayController",
    "RelayParams",
]
