from __future__ import annotations

from discretectl.core.controller import DiscreteController
from discretectl.core.datalog import CSV_COLUMNS, LogSample, TimeSeriesLog
from discretectl.core.monitor import PerformanceMonitor
from discretectl.core.results import CycleFailure, CycleOutcome, CycleStage, CycleSuccess
from discretectl.core.timing import TickDecision, TimingState

__all__ = [
    "DiscreteController",
    "CSV_COLUMNS",
    "LogSample",
    "TimeSeriesLog",
    "PerformanceMonitor",
    "CycleFailure",
    "CycleOutcome",
    "CycleStage",
    "CycleSuccess",
    "TickDecision",
    "TimingState",
]
