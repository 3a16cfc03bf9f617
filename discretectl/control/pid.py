from __future__ import annotations

import math
from dataclasses import dataclass

from discretectl.errors import ConfigurationError


@dataclass(frozen=True, slots=True)
class PIDParams:
    """
    Parameters for the discrete PID controller.

    Use PIDParams.from_args() to get validated parameters with the
    derived tracking time constant filled in.
    """
    K: float                        # Proportional gain
    Ts: float                       # Sample period (s)
    Ti: float = math.inf            # Integral time (s), inf disables integral action
    Td: float = 0.0                 # Derivative time (s), 0 disables derivative action
    Tt: float = math.inf            # Anti-windup tracking time (s)
    N: float = 10.0                 # Derivative filter divisor, Td/N is the filter time
    b: float = 1.0                  # Setpoint weight on the proportional term
    umin: float = -math.inf         # Lower output limit
    umax: float = math.inf          # Upper output limit

    @staticmethod
    def from_args(
        *,
        K: float,
        Ts: float,
        Ti: float = math.inf,
        Td: float = 0.0,
        Tt: float | None = None,
        N: float = 10.0,
        b: float = 1.0,
        umin: float = -math.inf,
        umax: float = math.inf,
    ) -> "PIDParams":
        if not Ts > 0:
            raise ConfigurationError(f"Ts must be > 0 (got {Ts})")
        if not Ti > 0:
            raise ConfigurationError(f"Ti must be > 0 (got {Ti})")
        if Td < 0:
            raise ConfigurationError(f"Td must be >= 0 (got {Td})")
        if not N > 0:
            raise ConfigurationError(f"N must be > 0 (got {N})")
        if not umin < umax:
            raise ConfigurationError(f"umin must be < umax (got {umin} >= {umax})")

        if Tt is None:
            # Geometric mean of Ti and Td, or Ti alone for a PI controller
            Tt = math.sqrt(Ti * Td) if Td > 0 else Ti
        if not Tt > 0:
            raise ConfigurationError(f"Tt must be > 0 (got {Tt})")

        return PIDParams(
            K=float(K),
            Ts=float(Ts),
            Ti=float(Ti),
            Td=float(Td),
            Tt=float(Tt),
            N=float(N),
            b=float(b),
            umin=float(umin),
            umax=float(umax),
        )


class DiscretePID:
    """
    Discrete PID controller in parallel form.

    Control law:
        P = K * (b*r - y)
        v = P + I + D + uff
        u = clamp(v, umin, umax)
        I(k+1) = I + K*Ts/Ti * (r - y) + Ts/Tt * (u - v)
        D(k+1) = ad*D - bd*(y - y_prev)

    with ad = Td / (Td + N*Ts) and bd = K*N*ad.

    Features:
    - Setpoint weighting on the proportional term
    - Back-calculation anti-windup
    - Derivative on measurement with first-order filter
    - Output clamping to [umin, umax]
    """

    def __init__(self, params: PIDParams):
        """
        Initialize PID controller.

        Args:
            params: Controller parameters
        """
        self.params = params

        # Precomputed gains
        self._bi = params.K * params.Ts / params.Ti if math.isfinite(params.Ti) else 0.0
        self._ar = params.Ts / params.Tt if math.isfinite(params.Tt) else 0.0
        self._ad = params.Td / (params.Td + params.N * params.Ts)
        self._bd = params.K * params.N * self._ad

        self._integrator: float = 0.0
        self._derivative: float = 0.0
        self._last_pv: float = 0.0

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
        self._integrator = 0.0
        self._derivative = 0.0
        self._last_pv = 0.0

    def evaluate(self, setpoint: float, process_variable: float, feedforward: float = 0.0) -> float:
        """
        Compute PID control output.

        Args:
            setpoint: Reference value r
            process_variable: Measurement y
            feedforward: Additive feedforward uff

        Returns:
            Clamped control output u
        """
        p = self.params

        p_term = p.K * (p.b * setpoint - process_variable)
        v = p_term + self._integrator + self._derivative + feedforward
        u = max(p.umin, min(p.umax, v))

        # Integrate for the next sample; saturation feeds back through Tt
        error = setpoint - process_variable
        self._integrator += self._bi * error + self._ar * (u - v)

        # Filtered derivative on measurement, used from the next sample on
        self._derivative = self._ad * self._derivative - self._bd * (process_variable - self._last_pv)
        self._last_pv = process_variable
        return u

    def __call__(self, setpoint: float, process_variable: float, feedforward: float = 0.0) -> float:
        return self.evaluate(setpoint, process_variable, feedforward)
