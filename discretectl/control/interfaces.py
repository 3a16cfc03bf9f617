from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional, Protocol

# Slot signatures for the I/O capability set
SetpointSource = Callable[[float], float]       # time -> setpoint
ProcessVariableSource = Callable[[], float]     # () -> measurement
OutputSink = Callable[[float], None]            # output -> None


@dataclass(frozen=True, slots=True)
class IOInterface:
    """
    Optional I/O callables connecting a controller to the outside system.

    Each slot is independent. A slot left as None means that quantity is
    managed through the controller's explicit setters instead; the
    controller never substitutes a default callable.

    Read slots are expected to be free of side effects on the controller.
    The output slot may have arbitrary external side effects. Anything a
    slot raises during a cycle is caught by the controller and counted as
    a missed deadline.
    """
    read_setpoint: Optional[SetpointSource] = None               # Called with the tick time
    read_process_variable: Optional[ProcessVariableSource] = None
    apply_output: Optional[OutputSink] = None                    # Called after the control law

    @property
    def has_setpoint_source(self) -> bool:
        return self.read_setpoint is not None

    @property
    def has_process_variable_source(self) -> bool:
        return self.read_process_variable is not None

    @property
    def has_output_sink(self) -> bool:
        return self.apply_output is not None


class ControlLaw(Protocol):
    """
    Protocol for control laws driven by a DiscreteController.

    A control law maps (setpoint, process variable, feedforward) to an
    output once per sample period. It may keep internal state (integrator,
    filtered derivative) and must be able to reset it.

    umin/umax are informational for consumers such as plotting. The
    controller exposes them but never clamps against them.
    """
    sample_period: float
    umin: float
    umax: float

    def evaluate(self, setpoint: float, process_variable: float, feedforward: float = 0.0) -> float:
        """
        Compute the control output for one sample.

        Args:
            setpoint: Desired value
            process_variable: Measured value
            feedforward: Additive feedforward term

        Returns:
            Control output (manipulated variable)
        """
        ...

    def reset(self) -> None:
        """Reset controller internal state."""
        ...
