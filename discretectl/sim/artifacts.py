"""
Artifact writing for discretectl simulation runs.

Artifact files produced:
- metrics.json: Run metadata and final controller counters
- log.csv: Controller time-series log (same format as export_log)
- plant.json: Per-step plant trace

Example artifact directory structure:
```
artifacts/runs/20240115_120000_example/
├── metrics.json       # Run metadata
├── log.csv            # Controller samples
└── plant.json         # Plant trace
```
"""

from __future__ import annotations

import json
import logging
from dataclasses import asdict
from pathlib import Path

from discretectl.core.datalog import TimeSeriesLog
from discretectl.sim.interfaces import RunMetrics
from discretectl.sim.plant import PlantSample

logger = logging.getLogger(__name__)


def write_run_artifacts(
    *,
    out_path: Path,
    metrics: RunMetrics,
    log: TimeSeriesLog | None = None,
    plant_trace: list[PlantSample] | None = None,
) -> None:
    """
    Write all simulation artifacts to disk.

    Creates the output directory (if needed) and writes each artifact
    for which data is provided.

    Args:
        out_path: Output directory path. Created with parents if missing.
        metrics: Run-level metrics. Always written.
        log: Controller log. When provided and non-empty, writes log.csv.
        plant_trace: Plant samples. When provided and non-empty, writes
                     plant.json.
    """
    out_path = Path(out_path)
    out_path.mkdir(parents=True, exist_ok=True)

    _write_metrics_json(out_path, metrics)

    if log is not None and not log.is_empty:
        log.export_csv(out_path / "log.csv")

    if plant_trace:
        _write_plant_json(out_path, plant_trace)

    logger.info("Artifacts written to %s", out_path)


def _write_metrics_json(out_path: Path, metrics: RunMetrics) -> None:
    """
    Write metrics.json artifact.

    Schema:
    {
        "run": {
            "scenario_name": str,
            "controller_name": str,
            "start_time": str (ISO 8601),
            "finish_time": str (ISO 8601),
            "sim_start_s": float,
            "sim_end_s": float,
            "total_steps": int,
            "dt_s": float,
            "sample_period_s": float,
            "update_count": int,
            "missed_deadlines": int
        }
    }
    """
    payload = {"run": asdict(metrics)}

    metrics_path = out_path / "metrics.json"
    metrics_path.write_text(
        json.dumps(payload, indent=2, sort_keys=True) + "\n",
        encoding="utf-8",
    )


def _write_plant_json(out_path: Path, plant_trace: list[PlantSample]) -> None:
    """
    Write plant.json artifact.

    Schema:
    {
        "samples": [
            {"time": float, "value": float, "input": float},
            ...
        ]
    }
    """
    payload = {"samples": [asdict(s) for s in plant_trace]}
    plant_path = out_path / "plant.json"
    plant_path.write_text(
        json.dumps(payload, indent=2) + "\n",
        encoding="utf-8",
    )
