from __future__ import annotations

import logging
import math

import pytest

from discretectl import ControllerConfig, DiscreteController, IOInterface
from discretectl.control.pid import DiscretePID, PIDParams
from discretectl.core.results import CycleFailure, CycleStage, CycleSuccess


class FlakySource:
    """Callable that raises on selected calls, otherwise returns value."""

    def __init__(self, value: float, fail_on: set[int]) -> None:
        self.value = value
        self.fail_on = fail_on
        self.calls = 0

    def __call__(self, *args) -> float:
        self.calls += 1
        if self.calls in self.fail_on:
            raise RuntimeError(f"sensor fault on call {self.calls}")
        return self.value


class ExplodingLaw:
    """Control law whose evaluate() always raises."""

    sample_period = 0.1
    umin = -math.inf
    umax = math.inf

    def evaluate(self, setpoint: float, process_variable: float, feedforward: float = 0.0) -> float:
        raise ZeroDivisionError("bad gain schedule")

    def reset(self) -> None:
        pass


def _build(io: IOInterface, law=None, **kwargs) -> DiscreteController:
    law = law if law is not None else DiscretePID(PIDParams.from_args(K=1.0, Ts=0.1))
    cfg = ControllerConfig.from_args(name="flaky", control_law=law, io=io, **kwargs)
    return DiscreteController(cfg)


def _error_records(caplog) -> list[logging.LogRecord]:
    return [r for r in caplog.records if r.levelno == logging.ERROR]


def test_setpoint_read_failure(caplog):
    # Call 1 is the construction probe, call 2 is the first cycle
    source = FlakySource(5.0, fail_on={2})
    ctrl = _build(IOInterface(read_setpoint=source), enable_logging=True)

    with caplog.at_level(logging.ERROR, logger="discretectl"):
        assert ctrl.tick(0.1) is False

    assert ctrl.update_count == 0
    assert ctrl.missed_deadlines == 1
    assert len(ctrl.log) == 0
    assert math.isnan(ctrl.output)
    assert len(_error_records(caplog)) == 1

    outcome = ctrl.last_outcome
    assert isinstance(outcome, CycleFailure)
    assert not outcome.ok
    assert outcome.stage is CycleStage.READ_SETPOINT
    assert isinstance(outcome.cause, RuntimeError)


def test_failure_does_not_advance_schedule():
    source = FlakySource(5.0, fail_on={2})
    ctrl = _build(IOInterface(read_setpoint=source))

    ctrl.tick(0.1)
    assert ctrl.current_time == 0.1
    assert ctrl.next_update_time == pytest.approx(0.1)
    assert ctrl.last_update_time == -math.inf

    # Still due: the very next tick retries
    assert ctrl.tick(0.101) is True
    assert ctrl.update_count == 1
    assert ctrl.missed_deadlines == 1
    assert ctrl.next_update_time == pytest.approx(0.201)
    assert isinstance(ctrl.last_outcome, CycleSuccess)


def test_process_variable_read_failure_keeps_new_setpoint(caplog):
    sp_values = iter([1.0, 3.0])
    pv = FlakySource(0.5, fail_on={2})
    ctrl = _build(IOInterface(read_setpoint=lambda t: next(sp_values), read_process_variable=pv))
    assert ctrl.setpoint == 1.0

    with caplog.at_level(logging.ERROR, logger="discretectl"):
        assert ctrl.tick(0.1) is False

    assert ctrl.last_outcome.stage is CycleStage.READ_PROCESS_VARIABLE
    # Setpoint stage committed before the failure
    assert ctrl.setpoint == 3.0
    assert ctrl.process_variable == 0.5
    assert ctrl.error == ctrl.setpoint - ctrl.process_variable
    assert ctrl.missed_deadlines == 1
    assert len(_error_records(caplog)) == 1


def test_control_law_failure(caplog):
    applied: list[float] = []
    ctrl = _build(IOInterface(apply_output=applied.append), law=ExplodingLaw(), setpoint=1.0)
    ctrl.set_process_variable(0.25)

    with caplog.at_level(logging.ERROR, logger="discretectl"):
        assert ctrl.tick(0.1) is False

    assert ctrl.last_outcome.stage is CycleStage.CONTROL_LAW
    assert isinstance(ctrl.last_outcome.cause, ZeroDivisionError)
    assert applied == []
    assert math.isnan(ctrl.output)
    assert ctrl.error == 0.75
    assert ctrl.missed_deadlines == 1

    record = _error_records(caplog)[0]
    assert record.exc_info is not None
    assert record.stage == "control_law"
    assert record.controller == "flaky"


def test_apply_output_failure_keeps_computed_output(caplog):
    sink = FlakySource(0.0, fail_on={1})
    ctrl = _build(IOInterface(apply_output=sink), setpoint=2.0)

    with caplog.at_level(logging.ERROR, logger="discretectl"):
        assert ctrl.tick(0.1) is False

    assert ctrl.last_outcome.stage is CycleStage.APPLY_OUTPUT
    assert ctrl.output == pytest.approx(2.0)
    assert ctrl.update_count == 0
    assert ctrl.missed_deadlines == 1

    # Sink recovers
    assert ctrl.tick(0.2) is True
    assert ctrl.update_count == 1
    assert sink.calls == 2


def test_repeated_failures_count_each_due_tick():
    ctrl = _build(IOInterface(), law=ExplodingLaw(), setpoint=1.0)
    results = [ctrl.tick(0.1 + k * 0.01) for k in range(5)]

    assert results == [False] * 5
    assert ctrl.missed_deadlines == 5
    assert ctrl.update_count == 0


def test_failures_never_escape_tick():
    def boom(t: float) -> float:
        raise KeyError("missing channel")

    ctrl = _build(IOInterface(), setpoint=1.0)
    ctrl.io = IOInterface(read_setpoint=boom)

    # Must not raise
    assert ctrl.tick(0.1) is False
    assert "missing channel" in ctrl.last_outcome.describe()


def test_non_numeric_reading_is_a_failure():
    ctrl = _build(IOInterface(), setpoint=1.0)
    ctrl.io = IOInterface(read_process_variable=lambda: "n/a")

    assert ctrl.tick(0.1) is False
    assert ctrl.last_outcome.stage is CycleStage.READ_PROCESS_VARIABLE
    assert isinstance(ctrl.last_outcome.cause, ValueError)


def test_status_reports_missed_deadlines():
    ctrl = _build(IOInterface(), law=ExplodingLaw(), setpoint=1.0)
    ctrl.tick(0.1)
    assert "MISSED DEADLINES: 1" in ctrl.status()
