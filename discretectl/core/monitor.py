from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class PerformanceMonitor:
    """
    Cycle counters for one controller.

    Both counters only grow between resets and are reset together.
    """
    update_count: int = 0           # Successful cycles
    missed_deadlines: int = 0       # Due cycles that failed

    def record_success(self) -> None:
        self.update_count += 1

    def record_miss(self) -> None:
        self.missed_deadlines += 1

    def reset(self) -> None:
        """Zero both counters."""
        self.update_count = 0
        self.missed_deadlines = 0
