"""
Plotting utilities for controller logs.

Plots can be generated from a live DiscreteController, a TimeSeriesLog,
or from a run artifact directory on disk.

Four panels:
1. Setpoint tracking (setpoint and process variable)
2. Control error
3. Control output as a discrete staircase, with the control law's
   output bounds when they are finite
4. Phase portrait (error vs. error rate)

Requires matplotlib: pip install discretectl[plot]
"""

from __future__ import annotations

import json
import logging
import math
from pathlib import Path
from typing import TYPE_CHECKING, Union

from discretectl.core.datalog import TimeSeriesLog

if TYPE_CHECKING:
    from discretectl.core.controller import DiscreteController

logger = logging.getLogger(__name__)

_TIMESCALES = {
    "s": (1.0, "s"),
    "ms": (1e3, "ms"),
    "us": (1e6, "μs"),
    "μs": (1e6, "μs"),
}


def check_matplotlib_available() -> bool:
    """Check if matplotlib is available."""
    try:
        import matplotlib  # noqa: F401
        return True
    except ImportError:
        return False


def time_scale_info(timescale: str) -> tuple[float, str]:
    """
    Scale factor and unit label for a timescale name.

    Unknown names log a warning and fall back to seconds.
    """
    if timescale not in _TIMESCALES:
        logger.warning("Unknown timescale %s, using seconds", timescale)
        return _TIMESCALES["s"]
    return _TIMESCALES[timescale]


def plot_controller(
    source: Union["DiscreteController", TimeSeriesLog],
    output_path: Path | str | None = None,
    show: bool = False,
    title: str | None = None,
    timescale: str = "s",
) -> bool:
    """
    Generate the four-panel plot of a controller log.

    Args:
        source: Controller (its log and output bounds are used) or a bare log.
        output_path: Path to save the figure (PNG, PDF, etc.).
                     If None and show=False, saves to 'controller_plot.png'.
        show: If True, display the plot interactively.
        title: Optional title for the figure. Defaults to the controller name.
        timescale: Time axis unit: "s", "ms" or "us".

    Returns:
        True if a figure was produced, False if the log was empty.

    Raises:
        RuntimeError: If matplotlib is not installed.
    """
    if isinstance(source, TimeSeriesLog):
        log = source
        bounds = None
        name = None
    else:
        log = source.log
        bounds = source.output_bounds
        name = source.name

    if log.is_empty:
        logger.warning("Controller log is empty, nothing to plot")
        return False

    if title is None:
        title = f"Controller Performance: {name}" if name else "Controller Performance"

    if output_path is None and not show:
        output_path = "controller_plot.png"

    _render(log, bounds=bounds, title=title, timescale=timescale,
            output_path=output_path, show=show)
    return True


def plot_from_artifacts(
    artifact_dir: Path | str,
    output_path: Path | str | None = None,
    show: bool = False,
    timescale: str = "s",
) -> bool:
    """
    Generate a plot from artifact files on disk.

    Loads log.csv (and metrics.json for the title, if present) from the
    artifact directory.

    Args:
        artifact_dir: Path to the artifact directory.
        output_path: Path to save the figure. If None, saves to artifact_dir/plot.png.
        show: If True, display the plot interactively.
        timescale: Time axis unit: "s", "ms" or "us".

    Returns:
        True if a figure was produced, False if the log was empty (including
        a run directory written without log.csv because nothing was logged).

    Raises:
        RuntimeError: If matplotlib is not installed.
        FileNotFoundError: If neither log.csv nor metrics.json exists.
    """
    artifact_dir = Path(artifact_dir)

    log_path = artifact_dir / "log.csv"
    metrics_path = artifact_dir / "metrics.json"
    if not log_path.exists():
        if not metrics_path.exists():
            raise FileNotFoundError(f"log.csv not found in {artifact_dir}")
        # write_run_artifacts skips log.csv for an empty log
        logger.warning("No log.csv in %s, nothing to plot", artifact_dir)
        return False
    log = TimeSeriesLog.read_csv(log_path)

    if log.is_empty:
        logger.warning("Controller log is empty, nothing to plot")
        return False

    title = "Controller Performance"
    if metrics_path.exists():
        with metrics_path.open() as f:
            run_info = json.load(f).get("run", {})
        scenario = run_info.get("scenario_name", "unknown")
        controller = run_info.get("controller_name", "")
        title = f"Controller Performance: {controller} ({scenario})"

    if output_path is None:
        output_path = artifact_dir / "plot.png"

    _render(log, bounds=None, title=title, timescale=timescale,
            output_path=output_path, show=show)
    return True


def _render(
    log: TimeSeriesLog,
    *,
    bounds: tuple[float, float] | None,
    title: str,
    timescale: str,
    output_path: Path | str | None,
    show: bool,
) -> None:
    if not check_matplotlib_available():
        raise RuntimeError(
            "matplotlib not installed. Install with: pip install discretectl[plot]"
        )

    import matplotlib.pyplot as plt

    scale, unit = time_scale_info(timescale)
    times = [t * scale for t in log.timestamps]

    fig, axes = plt.subplots(2, 2, figsize=(12, 9))
    ax_track, ax_error = axes[0]
    ax_control, ax_phase = axes[1]

    # Panel 1: Setpoint tracking
    ax_track.plot(times, log.setpoints, color="0.2", linestyle="--", linewidth=2.5, label="Setpoint")
    ax_track.plot(times, log.process_variables, "b-", linewidth=1.5, label="Process Variable")
    ax_track.set_title("Setpoint Tracking Performance")
    ax_track.set_xlabel(f"Time [{unit}]")
    ax_track.set_ylabel("Value")
    ax_track.grid(True, alpha=0.3)
    ax_track.legend(loc="best")

    # Panel 2: Error
    ax_error.plot(times, log.errors, "r-", linewidth=1.5, label="Error")
    ax_error.axhline(y=0.0, color="black", linestyle=":", linewidth=1)
    ax_error.set_title("Control Error Over Time")
    ax_error.set_xlabel(f"Time [{unit}]")
    ax_error.set_ylabel("Error")
    ax_error.grid(True, alpha=0.3)
    ax_error.legend(loc="best")

    # Panel 3: Control output, held between samples
    ax_control.step(times, log.outputs, where="post", color="g", linewidth=1.5, label="Control Output")
    if bounds is not None:
        umin, umax = bounds
        if math.isfinite(umax):
            ax_control.axhline(y=umax, color="black", linestyle=":", linewidth=1.5,
                               label=f"Max MV ({umax:.2g})")
        if math.isfinite(umin):
            ax_control.axhline(y=umin, color="black", linestyle="-.", linewidth=1.5,
                               label=f"Min MV ({umin:.2g})")
    ax_control.set_title("Manipulated Variable (Discrete)")
    ax_control.set_xlabel(f"Time [{unit}]")
    ax_control.set_ylabel("MV")
    ax_control.grid(True, alpha=0.3)
    ax_control.legend(loc="best")

    # Panel 4: Phase portrait
    ax_phase.set_title("Phase Portrait")
    ax_phase.set_xlabel("Error")
    ax_phase.set_ylabel(f"Error Rate [1/{unit}]")
    if len(times) >= 2:
        errors, rates = _error_rates(times, log.errors)
        ax_phase.plot(errors, rates, color="purple", linewidth=1.2, label="Trajectory")
        ax_phase.plot(errors[0], rates[0], "go", label="Start")
        ax_phase.plot(errors[-1], rates[-1], "rs", label="End")
        ax_phase.plot(0.0, 0.0, "k+", markersize=12, label="Origin")
        ax_phase.legend(loc="best")
    else:
        logger.warning("Controller log needs at least 2 points for phase plot")
        ax_phase.text(0.5, 0.5, "Not enough data", ha="center", va="center",
                      transform=ax_phase.transAxes)
    ax_phase.grid(True, alpha=0.3)

    fig.suptitle(title, fontsize=14, fontweight="bold")
    plt.tight_layout()

    if output_path:
        output_path = Path(output_path)
        plt.savefig(output_path, dpi=150, bbox_inches="tight")
        logger.info("Plot saved to: %s", output_path)

    if show:
        plt.show()

    plt.close(fig)


def _error_rates(times: list[float], errors: list[float]) -> tuple[list[float], list[float]]:
    # Backward differences; the first point has no predecessor and is dropped
    out_errors: list[float] = []
    out_rates: list[float] = []
    for i in range(1, len(times)):
        dt = times[i] - times[i - 1]
        if dt <= 0:
            continue
        out_errors.append(errors[i])
        out_rates.append((errors[i] - errors[i - 1]) / dt)
    if not out_errors:
        out_errors, out_rates = [errors[-1]], [0.0]
    return out_errors, out_rates
