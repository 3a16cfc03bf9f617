from __future__ import annotations

from dataclasses import dataclass

from discretectl.errors import ConfigurationError


@dataclass(frozen=True, slots=True)
class RelayParams:
    """
    Parameters for relay (on/off) controller.
    """
    Ts: float                       # Sample period (s)
    umin: float = 0.0               # "Off" output
    umax: float = 1.0               # "On" output
    hysteresis: float = 0.0         # Half-width of the hold band around zero error

    @staticmethod
    def from_args(
        *,
        Ts: float,
        umin: float = 0.0,
        umax: float = 1.0,
        hysteresis: float = 0.0,
    ) -> "RelayParams":
        if not Ts > 0:
            raise ConfigurationError(f"Ts must be > 0 (got {Ts})")
        if not umin < umax:
            raise ConfigurationError(f"umin must be < umax (got {umin} >= {umax})")
        if hysteresis < 0:
            raise ConfigurationError(f"hysteresis must be >= 0 (got {hysteresis})")
        return RelayParams(Ts=float(Ts), umin=float(umin), umax=float(umax), hysteresis=float(hysteresis))


class RelayController:
    """
    Relay controller with hysteresis.

    Control law:
    - If error > hysteresis: output umax
    - If error < -hysteresis: output umin
    - Else: hold previous output

    Where error = setpoint - process_variable. Feedforward is added to the
    switched level.

    The controller is stateful (remembers last level) but deterministic.
    """

    def __init__(self, params: RelayParams):
        """
        Initialize relay controller.

        Args:
            params: Controller parameters
        """
        self.params = params
        self._level: float = params.umin

    @property
    def sample_period(self) -> float:
        return self.params.Ts

    @property
    def umin(self) -> float:
        return self.params.umin

    @property
    def umax(self) -> float:
        return self.params.umax

    def reset(self) -> None:
        """Reset controller state."""
        self._level = self.params.umin

    def evaluate(self, setpoint: float, process_variable: float, feedforward: float = 0.0) -> float:
        error = setpoint - process_variable

        if error > self.params.hysteresis:
            self._level = self.params.umax
        elif error < -self.params.hysteresis:
            self._level = self.params.umin
        # Else: inside the band, hold current level

        return self._level + feedforward
