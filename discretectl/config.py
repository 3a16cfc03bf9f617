from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path

from discretectl.control.interfaces import ControlLaw, IOInterface
from discretectl.errors import ConfigurationError

DEFAULT_TIMING_TOLERANCE = 1e-12


def _clean_path_name(path_name: str) -> str:
    # Remove unsafe characters from directory name
    cleaned = [c if (c.isalnum() or c in ("-", "_")) else "_" for c in path_name]
    return "".join(cleaned).strip("_")


def validate_tolerance(tolerance: float) -> float:
    """Check a timing tolerance fraction, returning it as float."""
    tolerance = float(tolerance)
    if not 0.0 <= tolerance < 1.0:
        raise ConfigurationError(f"timing tolerance must be in [0, 1) (got {tolerance})")
    return tolerance


def _probe(name: str, read) -> float:
    # Capabilities are probed once at construction to check consistency
    try:
        return float(read())
    except Exception as exc:
        raise ConfigurationError(f"{name} capability failed during construction: {exc}") from exc


# slots are used to enfore good interface hygiene, disables dynamic attribute creation.
@dataclass(frozen=True, slots=True)
class ControllerConfig:
    """
    ControllerConfig

    Validated construction parameters for a DiscreteController. Build it
    with ControllerConfig.from_args(); the dataclass constructor itself
    does not validate.

    Params:
    - name (str) : controller identifier, informational only
    - control_law (ControlLaw) : owned control law instance
    - sample_period (float) : fixed interval between cycles (s), > 0
    - setpoint (float) : initial setpoint
    - process_variable (float) : initial process variable
    - initial_time (float) : time the schedule starts from
    - active (bool) : whether the controller starts enabled
    - timing_tolerance (float) : early-fire window as fraction of sample_period
    - io (IOInterface) : optional I/O callables
    - enable_logging (bool) : record each successful cycle
    """
    name: str
    control_law: ControlLaw
    sample_period: float
    setpoint: float
    process_variable: float = 0.0
    initial_time: float = 0.0
    active: bool = True
    timing_tolerance: float = DEFAULT_TIMING_TOLERANCE
    io: IOInterface = field(default_factory=IOInterface)
    enable_logging: bool = False

    @staticmethod
    def from_args(
        *,
        name: str,
        control_law: ControlLaw,
        sample_period: float | None = None,
        setpoint: float | None = None,
        process_variable: float | None = None,
        initial_time: float = 0.0,
        active: bool = True,
        timing_tolerance: float = DEFAULT_TIMING_TOLERANCE,
        io: IOInterface | None = None,
        enable_logging: bool = False,
    ) -> "ControllerConfig":
        """
        Validate parameters and build a ControllerConfig.

        Rules:
        - sample_period defaults to the control law's period; when both are
          given they must be equal
        - sample_period must be > 0
        - a read_setpoint / read_process_variable capability given together
          with an explicit initial value must agree with it; with no explicit
          value, the initial value is read from the capability
        - without a setpoint capability, setpoint is required

        Raises:
            ConfigurationError: On any violated rule
        """
        if not isinstance(name, str) or not name:
            raise ConfigurationError("name must be a non-empty string")
        if control_law is None:
            raise ConfigurationError("control_law is required")

        law_period = float(control_law.sample_period)
        if sample_period is None:
            sample_period = law_period
        sample_period = float(sample_period)
        if not (sample_period > 0 and math.isfinite(sample_period)):
            raise ConfigurationError(f"sample_period must be > 0 (got {sample_period})")
        if sample_period != law_period:
            raise ConfigurationError(
                f"Controller's sample period (Ts={sample_period}) must match "
                f"control law sample period ({law_period})"
            )

        tolerance = validate_tolerance(timing_tolerance)
        io = io if io is not None else IOInterface()
        initial_time = float(initial_time)
        if not math.isfinite(initial_time):
            raise ConfigurationError(f"initial_time must be finite (got {initial_time})")

        # ─────────────────────────────────────────────────────────────
        # Reconcile initial values with the I/O capabilities
        # ─────────────────────────────────────────────────────────────
        if io.read_setpoint is not None:
            read_sp = _probe("read_setpoint", lambda: io.read_setpoint(initial_time))
            if setpoint is None:
                setpoint = read_sp
            elif not math.isclose(float(setpoint), read_sp, rel_tol=1e-9, abs_tol=1e-12):
                raise ConfigurationError(
                    f"setpoint={setpoint} disagrees with read_setpoint({initial_time})={read_sp}"
                )
        elif setpoint is None:
            raise ConfigurationError("setpoint is required when no read_setpoint capability is given")

        if io.read_process_variable is not None:
            read_pv = _probe("read_process_variable", io.read_process_variable)
            if process_variable is None:
                process_variable = read_pv
            elif not math.isclose(float(process_variable), read_pv, rel_tol=1e-9, abs_tol=1e-12):
                raise ConfigurationError(
                    f"process_variable={process_variable} disagrees with "
                    f"read_process_variable()={read_pv}"
                )
        elif process_variable is None:
            process_variable = 0.0

        return ControllerConfig(
            name=name,
            control_law=control_law,
            sample_period=sample_period,
            setpoint=float(setpoint),
            process_variable=float(process_variable),
            initial_time=initial_time,
            active=bool(active),
            timing_tolerance=tolerance,
            io=io,
            enable_logging=bool(enable_logging),
        )


@dataclass(frozen=True, slots=True)
class SimConfig:
    """
    SimConfig

    Definitions and configuration for a closed-loop simulation run

    Params:
    - name (str) : simulation name
    - duration_s (float) : simulated time span (s)
    - dt_s (float) : simulation step, the time between controller ticks (s)
    - seed (int) : random seed for determinism (measurement noise)
    - start_time (float) : first tick time (s)
    - out_dir (Path) : output directory for simulation artifacts
                       default: artifacts/runs/<timestamp>_<name>
    """
    name: str
    duration_s: float
    dt_s: float
    seed: int
    out_dir: Path
    start_time: float = 0.0

    @property
    def steps(self) -> int:
        """Number of simulation steps after the start tick."""
        return int(round(self.duration_s / self.dt_s))

    @staticmethod
    def from_args(
        *,
        name: str,
        duration_s: float,
        dt_s: float,
        seed: int,
        out_dir: str | None,
        start_time: float = 0.0,
    ) -> "SimConfig":
        if not isinstance(name, str) or not name:
            raise ConfigurationError("name must be a non-empty string")
        if duration_s < 0:
            raise ConfigurationError("duration_s must be >= 0")
        if not dt_s > 0:
            raise ConfigurationError("dt_s must be > 0")

        if out_dir is not None:
            out_dir = Path(out_dir)
        else:
            """
            Default output location:
            artifacts/runs/<timestamp>_<scenario>
            Timestamp is UTC in YYYYmmdd_HHMMSS format.
            """
            ts = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S")
            clean_name = _clean_path_name(name)

            # Check if name is empty after cleaning
            if not clean_name:
                clean_name = "scenario"
            out_dir = Path("artifacts").joinpath(f"runs/{ts}_{clean_name}")

        return SimConfig(
            name=name,
            duration_s=float(duration_s),
            dt_s=float(dt_s),
            seed=int(seed),
            out_dir=out_dir,
            start_time=float(start_time),
        )
