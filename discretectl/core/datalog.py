"""
In-memory time-series log of controller cycles.

The log holds six parallel columns that always have the same length:
timestamps, setpoints, process variables, outputs, errors and the update
count at the time of the sample. The controller appends one row per
successful cycle while logging is enabled; rows are only removed by
clear().

CSV export format:
```
time,setpoint,process_variable,manipulated_variable,error,update_count
0.01,100.0,50.0,50.0,50.0,1
...
```
All fields are numeric, so no quoting is needed.
"""

from __future__ import annotations

import csv
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import IO, Iterator

logger = logging.getLogger(__name__)

CSV_COLUMNS = (
    "time",
    "setpoint",
    "process_variable",
    "manipulated_variable",
    "error",
    "update_count",
)


@dataclass(frozen=True, slots=True)
class LogSample:
    """One logged controller cycle."""
    time: float                     # Tick time of the cycle
    setpoint: float
    process_variable: float
    output: float                   # Manipulated variable
    error: float                    # setpoint - process_variable
    update_count: int               # Successful cycles including this one


class TimeSeriesLog:
    """
    Append-only parallel columns of controller samples.
    """

    def __init__(self) -> None:
        self.timestamps: list[float] = []
        self.setpoints: list[float] = []
        self.process_variables: list[float] = []
        self.outputs: list[float] = []
        self.errors: list[float] = []
        self.update_counts: list[int] = []

    def __len__(self) -> int:
        return len(self.timestamps)

    @property
    def is_empty(self) -> bool:
        return not self.timestamps

    def append(
        self,
        time: float,
        setpoint: float,
        process_variable: float,
        output: float,
        error: float,
        update_count: int,
    ) -> None:
        """Append one row to every column."""
        self.timestamps.append(time)
        self.setpoints.append(setpoint)
        self.process_variables.append(process_variable)
        self.outputs.append(output)
        self.errors.append(error)
        self.update_counts.append(update_count)

    def clear(self) -> None:
        """Remove all rows."""
        self.timestamps.clear()
        self.setpoints.clear()
        self.process_variables.clear()
        self.outputs.clear()
        self.errors.clear()
        self.update_counts.clear()

    def rows(self) -> Iterator[tuple[float, float, float, float, float, int]]:
        """Iterate rows in append order, in CSV column order."""
        return zip(
            self.timestamps,
            self.setpoints,
            self.process_variables,
            self.outputs,
            self.errors,
            self.update_counts,
        )

    def samples(self) -> list[LogSample]:
        return [LogSample(*row) for row in self.rows()]

    def columns(self) -> dict[str, list]:
        """Columns keyed by their CSV header names (copies)."""
        return {
            "time": list(self.timestamps),
            "setpoint": list(self.setpoints),
            "process_variable": list(self.process_variables),
            "manipulated_variable": list(self.outputs),
            "error": list(self.errors),
            "update_count": list(self.update_counts),
        }

    def export_csv(self, destination: Path | str | IO[str]) -> int:
        """
        Write the log as CSV.

        An empty log is not an error: a warning is logged and nothing is
        written (no file is created).

        Args:
            destination: File path, or an open text stream

        Returns:
            Number of data rows written
        """
        if self.is_empty:
            logger.warning("Log is empty, no data to export")
            return 0

        if hasattr(destination, "write"):
            count = self._write_csv(destination)
            logger.info("Controller time-series data exported (%d rows)", count)
            return count

        path = Path(destination)
        with path.open("w", encoding="utf-8", newline="") as f:
            count = self._write_csv(f)
        logger.info("Controller time-series data exported to: %s", path)
        return count

    def _write_csv(self, stream: IO[str]) -> int:
        writer = csv.writer(stream, lineterminator="\n")
        writer.writerow(CSV_COLUMNS)
        count = 0
        for row in self.rows():
            writer.writerow(row)
            count += 1
        return count

    @classmethod
    def read_csv(cls, path: Path | str) -> "TimeSeriesLog":
        """
        Load a log previously written by export_csv().

        Raises:
            FileNotFoundError: If path does not exist
            ValueError: If the header does not match the export format
        """
        path = Path(path)
        log = cls()
        with path.open("r", encoding="utf-8", newline="") as f:
            reader = csv.reader(f)
            header = next(reader, None)
            if header is None or tuple(header) != CSV_COLUMNS:
                raise ValueError(f"{path} is not a controller log (header: {header})")
            for row in reader:
                if not row:
                    continue
                t, sp, pv, mv, err, count = row
                log.append(float(t), float(sp), float(pv), float(mv), float(err), int(count))
        return log
