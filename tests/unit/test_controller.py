from __future__ import annotations

import io
import logging
import math

import pytest

from discretectl import ControllerConfig, DiscreteController, IOInterface
from discretectl.control.pid import DiscretePID, PIDParams
from discretectl.core.results import CycleSuccess


class Plant:
    """Mutable stand-in for the outside system."""

    def __init__(self) -> None:
        self.measurement = 0.0
        self.applied: list[float] = []

    def measure(self) -> float:
        return self.measurement

    def actuate(self, u: float) -> None:
        self.applied.append(u)


@pytest.fixture
def plant() -> Plant:
    return Plant()


@pytest.fixture
def ctrl(plant) -> DiscreteController:
    """PID controller with Ts=0.01 wired to the stand-in plant."""
    pid = DiscretePID(PIDParams.from_args(K=1.0, Ti=2.0, Td=0.1, Ts=0.01))
    cfg = ControllerConfig.from_args(
        name="test_controller",
        control_law=pid,
        setpoint=100.0,
        initial_time=0.0,
        io=IOInterface(read_process_variable=plant.measure, apply_output=plant.actuate),
    )
    return DiscreteController(cfg)


def _manual(setpoint: float = 10.0, process_variable: float = 0.0, **kwargs) -> DiscreteController:
    pid = DiscretePID(PIDParams.from_args(K=2.0, Ts=0.1))
    cfg = ControllerConfig.from_args(
        name="manual",
        control_law=pid,
        setpoint=setpoint,
        process_variable=process_variable,
        **kwargs,
    )
    return DiscreteController(cfg)


# ─────────────────────────────────────────────────────────────────────
# Construction
# ─────────────────────────────────────────────────────────────────────


def test_constructor(ctrl):
    assert ctrl.name == "test_controller"
    assert ctrl.sample_period == 0.01
    assert ctrl.is_active
    assert ctrl.setpoint == 100.0
    assert ctrl.process_variable == 0.0
    assert ctrl.error == 100.0
    assert ctrl.update_count == 0
    assert ctrl.missed_deadlines == 0
    assert ctrl.last_outcome is None
    assert not ctrl.logging_enabled
    assert len(ctrl.log) == 0


def test_output_undefined_before_first_cycle(ctrl):
    assert math.isnan(ctrl.output)


def test_initial_schedule(ctrl):
    assert ctrl.current_time == 0.0
    assert ctrl.last_update_time == -math.inf
    assert ctrl.next_update_time == pytest.approx(0.01)
    assert ctrl.timing_tolerance == 1e-12


# ─────────────────────────────────────────────────────────────────────
# Timing
# ─────────────────────────────────────────────────────────────────────


def test_timing_scenario(ctrl, plant, caplog):
    plant.measurement = 50.0
    assert ctrl.tick(0.005) is False
    assert ctrl.update_count == 0

    assert ctrl.tick(0.01) is True
    assert ctrl.update_count == 1
    assert ctrl.process_variable == 50.0
    assert ctrl.next_update_time == pytest.approx(0.02)

    plant.measurement = 75.0
    assert ctrl.tick(0.02) is True
    assert ctrl.update_count == 2
    assert ctrl.process_variable == 75.0
    assert ctrl.next_update_time == pytest.approx(0.03)

    with caplog.at_level(logging.WARNING, logger="discretectl"):
        assert ctrl.tick(0.0) is False
    assert ctrl.update_count == 2
    assert any("regression" in r.getMessage().lower() for r in caplog.records)


def test_time_regression_leaves_state_unchanged(ctrl, caplog):
    ctrl.tick(0.01)
    ctrl.tick(0.015)
    before = (ctrl.current_time, ctrl.next_update_time, ctrl.update_count, ctrl.missed_deadlines)

    with caplog.at_level(logging.WARNING, logger="discretectl"):
        assert ctrl.tick(0.015 - 1e-6) is False

    after = (ctrl.current_time, ctrl.next_update_time, ctrl.update_count, ctrl.missed_deadlines)
    assert after == before

    records = [r for r in caplog.records if r.levelno == logging.WARNING]
    assert len(records) == 1
    message = records[0].getMessage()
    assert "test_controller" in message
    assert "0.015" in message


def test_nan_time_rejected_and_guard_kept(ctrl, caplog):
    assert ctrl.tick(0.5) is True

    with caplog.at_level(logging.WARNING, logger="discretectl"):
        assert ctrl.tick(math.nan) is False
        assert ctrl.tick(0.0) is False

    assert ctrl.current_time == 0.5
    assert ctrl.update_count == 1
    warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
    assert len(warnings) == 2
    assert all("regression" in r.getMessage().lower() for r in warnings)


def test_tick_count_matches_elapsed_periods():
    """Ticking at dt=1ms for 1s with Ts=10ms gives ~100 cycles."""
    pid = DiscretePID(PIDParams.from_args(K=1.0, Ts=0.01))
    ctrl = DiscreteController(ControllerConfig.from_args(name="count", control_law=pid, setpoint=1.0))

    ran = sum(ctrl.tick(k * 0.001) for k in range(1001))

    expected = math.floor(1.0 / 0.01)
    assert abs(ran - expected) <= 1
    assert ctrl.update_count == ran


def test_tick_count_with_accumulated_clock():
    """A clock built by repeated addition still hits every sample."""
    pid = DiscretePID(PIDParams.from_args(K=1.0, Ts=0.01))
    ctrl = DiscreteController(
        ControllerConfig.from_args(name="acc", control_law=pid, setpoint=1.0, timing_tolerance=1e-6)
    )
    t = 0.0
    ran = 0
    for _ in range(1000):
        t += 0.001
        ran += ctrl.tick(t)
    assert ran == 100


def test_cycle_fires_once_per_period_with_coarse_ticks():
    """Ticks coarser than Ts run one cycle per tick, not a catch-up burst."""
    ctrl = _manual()
    assert ctrl.tick(0.35) is True
    assert ctrl.update_count == 1
    assert ctrl.next_update_time == pytest.approx(0.45)
    assert ctrl.tick(0.40) is False


def test_boundary_inclusion():
    ctrl = _manual(timing_tolerance=1e-6)
    edge = ctrl.next_update_time - ctrl.timing_tolerance * ctrl.sample_period

    assert ctrl.tick(edge - 1e-9) is False
    assert ctrl.tick(edge) is True


def test_set_timing_tolerance():
    ctrl = _manual()
    ctrl.set_timing_tolerance(0.1)
    assert ctrl.timing_tolerance == 0.1
    # Window now opens 10% of a period early
    assert ctrl.tick(0.0905) is True


def test_set_timing_tolerance_rejects_out_of_range():
    ctrl = _manual()
    with pytest.raises(ValueError):
        ctrl.set_timing_tolerance(1.5)
    assert ctrl.timing_tolerance == 1e-12


def test_time_until_next_update(ctrl):
    ctrl.tick(0.004)
    assert ctrl.time_until_next_update() == pytest.approx(0.006)


def test_time_until_next_update_negative_when_inactive_and_overdue(ctrl):
    ctrl.deactivate()
    ctrl.tick(0.05)
    assert ctrl.time_until_next_update() == pytest.approx(-0.04)


# ─────────────────────────────────────────────────────────────────────
# Control logic and I/O
# ─────────────────────────────────────────────────────────────────────


def test_control_logic_applies_output(plant):
    pid = DiscretePID(PIDParams.from_args(K=2.0, Ti=1.0, Td=0.0, Ts=0.01))
    ctrl = DiscreteController(
        ControllerConfig.from_args(
            name="control_test",
            control_law=pid,
            setpoint=100.0,
            process_variable=0.0,
            io=IOInterface(read_process_variable=plant.measure, apply_output=plant.actuate),
        )
    )
    # Construction probed the plant with measurement 0.0; now it changes
    plant.measurement = 80.0
    ctrl.tick(0.01)

    assert plant.applied == [pytest.approx(40.0)]
    assert ctrl.output == plant.applied[-1]
    assert ctrl.error == pytest.approx(20.0)
    assert isinstance(ctrl.last_outcome, CycleSuccess)
    assert ctrl.last_outcome.output == ctrl.output


def test_setpoint_capability_receives_tick_time():
    seen: list[float] = []

    def read_setpoint(t: float) -> float:
        seen.append(t)
        return 10.0 * t

    pid = DiscretePID(PIDParams.from_args(K=1.0, Ts=0.1))
    ctrl = DiscreteController(
        ControllerConfig.from_args(
            name="sp", control_law=pid, io=IOInterface(read_setpoint=read_setpoint),
        )
    )
    ctrl.tick(0.1)

    assert seen == [0.0, 0.1]      # Construction probe, then the cycle
    assert ctrl.setpoint == pytest.approx(1.0)
    assert ctrl.error == pytest.approx(1.0)


def test_manual_values_without_capabilities():
    ctrl = _manual(setpoint=10.0, process_variable=4.0)
    assert ctrl.tick(0.1) is True
    assert ctrl.output == pytest.approx(12.0)     # K=2, error=6


def test_set_setpoint_updates_error(ctrl):
    ctrl.set_setpoint(150.0)
    assert ctrl.setpoint == 150.0
    assert ctrl.error == 150.0


def test_set_process_variable_updates_error(ctrl):
    ctrl.set_process_variable(30.0)
    assert ctrl.process_variable == 30.0
    assert ctrl.error == 70.0


def test_manual_process_variable_overridden_by_capability(ctrl, plant):
    ctrl.set_process_variable(30.0)
    plant.measurement = 55.0
    ctrl.tick(0.01)
    assert ctrl.process_variable == 55.0
    assert ctrl.error == 45.0


def test_io_can_be_replaced(ctrl):
    applied: list[float] = []
    ctrl.io = IOInterface(apply_output=applied.append)
    ctrl.set_process_variable(90.0)

    assert ctrl.tick(0.01) is True
    assert ctrl.process_variable == 90.0
    assert len(applied) == 1


def test_output_bounds_read_through_not_enforced():
    pid = DiscretePID(PIDParams.from_args(K=1.0, Ts=0.1, umin=-5.0, umax=5.0))
    ctrl = DiscreteController(ControllerConfig.from_args(name="b", control_law=pid, setpoint=1.0))
    assert ctrl.output_bounds == (-5.0, 5.0)
    assert ctrl.control_law is pid


# ─────────────────────────────────────────────────────────────────────
# Activation / reset
# ─────────────────────────────────────────────────────────────────────


def test_activation_deactivation(ctrl, plant):
    ctrl.deactivate()
    assert not ctrl.is_active

    plant.measurement = 50.0
    assert ctrl.tick(0.01) is False
    assert ctrl.update_count == 0

    ctrl.activate()
    assert ctrl.is_active
    assert ctrl.tick(0.02) is True
    assert ctrl.update_count == 1


def test_inactive_controller_never_runs(ctrl, plant):
    ctrl.deactivate()
    results = [ctrl.tick(k * 0.01) for k in range(1, 50)]
    assert not any(results)
    assert ctrl.update_count == 0
    assert ctrl.missed_deadlines == 0
    assert plant.applied == []
    assert ctrl.current_time == pytest.approx(0.49)


def test_reset(ctrl, plant):
    plant.measurement = 50.0
    ctrl.tick(0.01)
    ctrl.tick(0.02)
    assert ctrl.update_count == 2
    assert ctrl.current_time == 0.02

    ctrl.reset(1.0)

    assert ctrl.update_count == 0
    assert ctrl.missed_deadlines == 0
    assert ctrl.current_time == 1.0
    assert ctrl.last_update_time == 1.0
    assert ctrl.next_update_time == pytest.approx(1.01)
    assert ctrl.process_variable == 0.0
    assert ctrl.output == 0.0
    assert ctrl.error == ctrl.setpoint
    assert ctrl.last_outcome is None


def test_reset_delays_next_cycle_by_one_period(ctrl):
    ctrl.reset(1.0)
    assert ctrl.tick(1.005) is False
    assert ctrl.tick(1.01) is True


def test_reset_resets_control_law():
    pid = DiscretePID(PIDParams.from_args(K=1.0, Ti=0.1, Ts=0.1))
    ctrl = DiscreteController(ControllerConfig.from_args(name="r", control_law=pid, setpoint=1.0))
    for k in range(1, 6):
        ctrl.tick(k * 0.1)
    wound_up = ctrl.output

    ctrl.reset(1.0)
    ctrl.tick(1.1)
    # Fresh integrator: output is the proportional term only (error = 1 - 0)
    assert ctrl.output == pytest.approx(1.0)
    assert ctrl.output < wound_up


def test_reset_keeps_log():
    ctrl = _manual(enable_logging=True)
    ctrl.tick(0.1)
    ctrl.reset(0.0)
    assert len(ctrl.log) == 1


# ─────────────────────────────────────────────────────────────────────
# Logging
# ─────────────────────────────────────────────────────────────────────


def test_logging_records_each_cycle(plant):
    pid = DiscretePID(PIDParams.from_args(K=1.0, Ts=0.01))
    ctrl = DiscreteController(
        ControllerConfig.from_args(
            name="log",
            control_law=pid,
            setpoint=1.0,
            io=IOInterface(read_process_variable=plant.measure),
            enable_logging=True,
        )
    )
    for k in range(0, 51):
        ctrl.tick(k * 0.001)

    assert len(ctrl.log) == ctrl.update_count == 5
    assert ctrl.log.update_counts == [1, 2, 3, 4, 5]
    sample = ctrl.log.samples()[-1]
    assert sample.time == pytest.approx(0.05)
    assert sample.error == sample.setpoint - sample.process_variable
    assert sample.output == ctrl.output


def test_logging_disabled_records_nothing():
    ctrl = _manual()
    ctrl.tick(0.1)
    assert len(ctrl.log) == 0


def test_enable_disable_logging():
    ctrl = _manual()
    ctrl.enable_logging()
    ctrl.tick(0.1)
    ctrl.disable_logging()
    ctrl.tick(0.2)
    ctrl.enable_logging()
    ctrl.tick(0.3)

    assert ctrl.log.update_counts == [1, 3]


def test_clear_log():
    ctrl = _manual(enable_logging=True)
    ctrl.tick(0.1)
    ctrl.clear_log()
    assert len(ctrl.log) == 0
    ctrl.tick(0.2)
    assert len(ctrl.log) == 1


def test_export_log(tmp_path):
    ctrl = _manual(enable_logging=True)
    ctrl.tick(0.1)
    ctrl.tick(0.2)

    path = tmp_path / "out.csv"
    assert ctrl.export_log(path) == 2
    assert path.read_text(encoding="utf-8").splitlines()[0] == (
        "time,setpoint,process_variable,manipulated_variable,error,update_count"
    )


def test_export_empty_log_does_not_raise(caplog):
    ctrl = _manual(enable_logging=True)
    buf = io.StringIO()
    with caplog.at_level(logging.WARNING, logger="discretectl"):
        assert ctrl.export_log(buf) == 0
    assert buf.getvalue() == ""


def test_repr_and_str():
    ctrl = _manual()
    assert "manual" in repr(ctrl)
    assert str(ctrl).startswith("Controller: manual")
