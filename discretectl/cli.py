"""
Command-line interface for discretectl.

Runs a discrete PID controller against a simulated first-order plant,
writes run artifacts and prints a one-line summary.

Usage:
    # Basic run
    discretectl --name smoke --duration 10 --dt 0.01 --sample-period 0.1

    # Setpoint step with measurement noise, plus a plot
    discretectl --name step --setpoint 1 --step-at 5 --step-to 2 --noise 0.01 --plot

Entry points:
    - discretectl: Direct CLI command (from pyproject.toml)
    - python -m discretectl: Module execution
"""

from __future__ import annotations

import argparse
import logging
import math
import sys

from .config import SimConfig
from .control.interfaces import IOInterface
from .errors import ConfigurationError
from .factory import controller_from_gains
from .logs import configure_logging
from .scenarios import constant_setpoint, step_setpoint
from .sim import ClosedLoopRunner, FirstOrderParams, FirstOrderPlant, write_run_artifacts

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    """
    Build the argument parser for the CLI.

    Returns:
        Configured ArgumentParser with all supported options.
    """
    p = argparse.ArgumentParser(
        prog="discretectl",
        description="discretectl: discrete controller closed-loop simulation",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  discretectl --name smoke --duration 1
      Run a 1 s closed-loop simulation with default gains

  discretectl --name step --step-at 5 --step-to 2 --plot
      Step the setpoint at t=5 s and render plot.png
""",
    )

    # ─────────────────────────────────────────────────────────────────
    # Core simulation parameters
    # ─────────────────────────────────────────────────────────────────
    p.add_argument("--name", type=str, default="default",
                   help="Scenario name for artifact directory (default: %(default)s)")
    p.add_argument("--duration", type=float, default=10.0,
                   help="Simulated time span in seconds (default: %(default)s)")
    p.add_argument("--dt", type=float, default=0.01,
                   help="Simulation step in seconds (default: %(default)s)")
    p.add_argument("--out-dir", type=str, default=None,
                   help="Output directory (default: artifacts/runs/<timestamp>_<name>)")
    p.add_argument("--seed", type=int, default=0,
                   help="Random seed for measurement noise (default: %(default)s)")

    # ─────────────────────────────────────────────────────────────────
    # Controller options
    # ─────────────────────────────────────────────────────────────────
    p.add_argument("--sample-period", type=float, default=0.1,
                   help="Controller sample period in seconds (default: %(default)s)")
    p.add_argument("--kp", type=float, default=2.0, help="Proportional gain K (default: %(default)s)")
    p.add_argument("--ti", type=float, default=1.0,
                   help="Integral time Ti in seconds, 'inf' disables (default: %(default)s)")
    p.add_argument("--td", type=float, default=0.0, help="Derivative time Td in seconds (default: %(default)s)")
    p.add_argument("--umin", type=float, default=-math.inf, help="Lower output limit (default: %(default)s)")
    p.add_argument("--umax", type=float, default=math.inf, help="Upper output limit (default: %(default)s)")
    p.add_argument("--tolerance", type=float, default=1e-12,
                   help="Timing tolerance as fraction of the sample period (default: %(default)s)")
    p.add_argument("--setpoint", type=float, default=1.0, help="Initial setpoint (default: %(default)s)")
    p.add_argument("--step-at", type=float, default=None, help="Time of a setpoint step (s)")
    p.add_argument("--step-to", type=float, default=None, help="Setpoint after the step")

    # ─────────────────────────────────────────────────────────────────
    # Plant options
    # ─────────────────────────────────────────────────────────────────
    p.add_argument("--plant-gain", type=float, default=1.0, help="Plant static gain (default: %(default)s)")
    p.add_argument("--plant-tau", type=float, default=2.0,
                   help="Plant time constant in seconds (default: %(default)s)")
    p.add_argument("--noise", type=float, default=0.0,
                   help="Measurement noise standard deviation (default: %(default)s)")

    # ─────────────────────────────────────────────────────────────────
    # Output options
    # ─────────────────────────────────────────────────────────────────
    p.add_argument("--plot", action="store_true", help="Render plot.png into the output directory")
    p.add_argument("--log-level", type=str, default="INFO", help="Logging level (default: %(default)s)")
    p.add_argument("--json-logs", action="store_true", help="Emit log records as JSON lines")

    return p


def main(argv: list[str] | None = None) -> int:
    """
    Main CLI entry point.

    Parses arguments, configures the simulation, runs it, and writes
    artifacts to disk.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code: 0 for success, 2 for configuration errors
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(args.log_level, json_format=args.json_logs)

    # ─────────────────────────────────────────────────────────────────
    # Build configuration, plant and controller
    # ─────────────────────────────────────────────────────────────────
    try:
        config = SimConfig.from_args(
            name=args.name,
            duration_s=args.duration,
            dt_s=args.dt,
            seed=args.seed,
            out_dir=args.out_dir,
        )

        plant = FirstOrderPlant(
            FirstOrderParams(gain=args.plant_gain, time_constant_s=args.plant_tau),
            initial_value=0.0,
            noise_std=args.noise,
            seed=args.seed,
        )

        if args.step_at is not None:
            final = args.step_to if args.step_to is not None else args.setpoint
            schedule = step_setpoint(initial=args.setpoint, final=final, step_time=args.step_at)
        else:
            schedule = constant_setpoint(args.setpoint)

        controller = controller_from_gains(
            name=args.name,
            K=args.kp,
            Ts=args.sample_period,
            Ti=args.ti,
            Td=args.td,
            umin=args.umin,
            umax=args.umax,
            initial_time=config.start_time,
            timing_tolerance=args.tolerance,
            io=IOInterface(
                read_setpoint=schedule,
                read_process_variable=plant.measure,
                apply_output=plant.actuate,
            ),
            enable_logging=True,
        )
    except (ConfigurationError, ValueError) as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2

    # ─────────────────────────────────────────────────────────────────
    # Run and write artifacts
    # ─────────────────────────────────────────────────────────────────
    result = ClosedLoopRunner(config, controller, plant).run()

    write_run_artifacts(
        out_path=config.out_dir,
        metrics=result.metrics,
        log=controller.log,
        plant_trace=result.plant_trace,
    )
    metrics_file = config.out_dir / "metrics.json"

    if args.plot:
        # Import here to avoid requiring matplotlib when not used
        from .plotting import plot_controller

        try:
            plot_controller(controller, output_path=config.out_dir / "plot.png")
        except RuntimeError as e:
            print(f"Plot skipped: {e}", file=sys.stderr)

    # ─────────────────────────────────────────────────────────────────
    # Print summary to stdout
    # ─────────────────────────────────────────────────────────────────
    final_value = result.plant_trace[-1].value if result.plant_trace else math.nan
    print(f"{result.metrics.scenario_name}: ", end="")
    print(f"steps={result.metrics.total_steps} ", end="")
    print(f"updates={result.metrics.update_count} ", end="")
    print(f"missed={result.metrics.missed_deadlines} ", end="")
    print(f"final_pv={final_value:.4f}", end="")
    print(f" -> {metrics_file}")

    return 0


# Allow module execution: python -m discretectl.cli
if __name__ == "__main__":
    sys.exit(main())
