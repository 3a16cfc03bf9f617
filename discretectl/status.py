from __future__ import annotations

import math
import sys
from typing import IO, TYPE_CHECKING

if TYPE_CHECKING:
    from discretectl.core.controller import DiscreteController


def format_status(ctrl: "DiscreteController") -> str:
    """
    Render a short tree-style status summary of a controller.

    Example output:
        Controller: temperature
        ├─ Status: ACTIVE
        ├─ Sample Time: 0.1 s
        ├─ Setpoint: 60.000
        ├─ Process Variable: 55.000
        ├─ Error: 5.000 (8.3%)
        ├─ Control Output: 12.500
        ├─ Updates: 100
        ╰─ Logging: Enabled (100 data points)
    """
    lines = [f"Controller: {ctrl.name}"]
    lines.append(f"├─ Status: {'ACTIVE' if ctrl.is_active else 'INACTIVE'}")
    lines.append(f"├─ Sample Time: {ctrl.sample_period} s")
    lines.append(f"├─ Setpoint: {ctrl.setpoint:.3f}")
    lines.append(f"├─ Process Variable: {ctrl.process_variable:.3f}")

    error_str = f"{ctrl.error:.3f}"
    # Relative error only makes sense away from a zero setpoint
    if abs(ctrl.setpoint) > 1e-10:
        rel_error = ctrl.error / ctrl.setpoint * 100.0
        error_str += f" ({rel_error:.1f}%)"
    lines.append(f"├─ Error: {error_str}")

    if math.isnan(ctrl.output):
        lines.append("├─ Control Output: N/A")
    else:
        lines.append(f"├─ Control Output: {ctrl.output:.3f}")

    updates = f"├─ Updates: {ctrl.update_count}"
    if ctrl.missed_deadlines > 0:
        updates += f" | MISSED DEADLINES: {ctrl.missed_deadlines}"
    lines.append(updates)

    if ctrl.logging_enabled:
        lines.append(f"╰─ Logging: Enabled ({len(ctrl.log)} data points)")
    else:
        lines.append("╰─ Logging: Disabled")

    return "\n".join(lines)


def show_controller_status(ctrl: "DiscreteController", stream: IO[str] | None = None) -> None:
    """Print the status summary followed by a blank line (stdout by default)."""
    stream = stream if stream is not None else sys.stdout
    print(format_status(ctrl), file=stream)
    print(file=stream)
