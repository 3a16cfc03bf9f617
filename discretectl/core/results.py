from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union


class CycleStage(Enum):
    """Steps of a control cycle, in execution order."""
    READ_SETPOINT = "read_setpoint"
    READ_PROCESS_VARIABLE = "read_process_variable"
    CONTROL_LAW = "control_law"
    APPLY_OUTPUT = "apply_output"


@dataclass(frozen=True, slots=True)
class CycleSuccess:
    """A cycle that ran every stage."""
    time: float                     # Tick time the cycle ran at
    output: float                   # Control law output that was applied

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True, slots=True)
class CycleFailure:
    """
    A cycle that stopped at some stage.

    The cause is kept as the original exception object so callers can
    inspect it; it is never re-raised by the controller.
    """
    time: float                     # Tick time the cycle ran at
    stage: CycleStage               # Stage that raised
    cause: Exception                # What it raised

    @property
    def ok(self) -> bool:
        return False

    def describe(self) -> str:
        return f"{self.stage.value} failed: {type(self.cause).__name__}: {self.cause}"


CycleOutcome = Union[CycleSuccess, CycleFailure]
