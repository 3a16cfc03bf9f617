from __future__ import annotations

import math
import random
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class FirstOrderParams:
    """
    Parameters for a first-order lag plant.

    Models e.g. a heated body relaxing to ambient:
        tau * dy/dt = gain * u - (y - ambient)
    """
    gain: float                     # Steady-state rise per unit input
    time_constant_s: float          # Time constant tau (s)
    ambient: float = 0.0            # Value the plant relaxes to with u = 0
    u_min: float = -math.inf        # Actuator lower limit
    u_max: float = math.inf         # Actuator upper limit


@dataclass(frozen=False, slots=True)
class FirstOrderState:
    """
    State of the first-order plant.

    This is mutable to allow efficient state updates during simulation.
    """
    value: float                    # Current output y


def step_first_order(
    state: FirstOrderState,
    *,
    dt_s: float,
    u: float,
    p: FirstOrderParams,
) -> FirstOrderState:
    """
    Step the plant forward by dt_s seconds using Euler integration.

    Args:
        state: Current plant state
        dt_s: Time step in seconds
        u: Actuator input (clamped to [u_min, u_max])
        p: Plant parameters

    Returns:
        New plant state (does not mutate input)
    """
    u = max(p.u_min, min(p.u_max, u))

    # Euler integration: fine while dt_s << time_constant_s
    dy_dt = (p.gain * u - (state.value - p.ambient)) / p.time_constant_s
    return FirstOrderState(value=state.value + dt_s * dy_dt)


@dataclass(frozen=True, slots=True)
class PlantSample:
    """Plant trace point recorded once per simulation step."""
    time: float                     # Simulation time after the step (s)
    value: float                    # True plant output (no noise)
    input: float                    # Actuator input held during the step


class FirstOrderPlant:
    """
    Encapsulates first-order plant state, measurement and actuation.

    Its measure() and actuate() methods fit the read_process_variable and
    apply_output slots of an IOInterface directly. Measurement noise is
    Gaussian and drawn from a private RNG seeded at construction, so runs
    are reproducible.
    """

    def __init__(
        self,
        params: FirstOrderParams,
        initial_value: float,
        noise_std: float = 0.0,
        seed: int = 0,
    ):
        """
        Initialize the plant.

        Args:
            params: Plant parameters
            initial_value: Initial plant output
            noise_std: Standard deviation of measurement noise
            seed: Seed for the measurement noise RNG
        """
        if not params.time_constant_s > 0:
            raise ValueError("time_constant_s must be > 0")
        if noise_std < 0:
            raise ValueError("noise_std must be >= 0")

        self.params = params
        self.noise_std = noise_std
        self._initial_value = float(initial_value)
        self._seed = seed
        self._rng = random.Random(seed)
        self.state = FirstOrderState(value=self._initial_value)
        self._input = 0.0

    def reset(self) -> None:
        """Restore initial state, input and noise sequence."""
        self.state = FirstOrderState(value=self._initial_value)
        self._input = 0.0
        self._rng = random.Random(self._seed)

    def measure(self) -> float:
        """Read the plant output, with measurement noise if configured."""
        if self.noise_std > 0:
            return self.state.value + self._rng.gauss(0.0, self.noise_std)
        return self.state.value

    def actuate(self, u: float) -> None:
        """Set the actuator input, held until the next call."""
        self._input = max(self.params.u_min, min(self.params.u_max, float(u)))

    @property
    def input(self) -> float:
        return self._input

    def step(self, dt_s: float) -> FirstOrderState:
        """Advance the plant by dt_s with the current input held."""
        self.state = step_first_order(self.state, dt_s=dt_s, u=self._input, p=self.params)
        return self.state
