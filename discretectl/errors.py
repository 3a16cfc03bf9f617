from __future__ import annotations


class DiscreteCtlError(Exception):
    """Base class for all discretectl errors."""


class ConfigurationError(DiscreteCtlError, ValueError):
    """
    Invalid construction-time parameters.

    Raised once, while a configuration is being validated. A controller that
    was built successfully never raises this from its tick loop.
    """
