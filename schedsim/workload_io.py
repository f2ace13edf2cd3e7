from __future__ import annotations

import csv
import json
from pathlib import Path
from typing import List

from .errors import InvalidInputError
from .models import ProcessRecord


def load_workload(path: str | Path) -> List[ProcessRecord]:
    """
    Load a workload from a JSON or CSV file into a list of ProcessRecord objects.
    """
    path = Path(path)
    suffix = path.suffix.lower()

    if suffix == ".json":
        return _load_json(path)
    if suffix == ".csv":
        return _load_csv(path)

    raise InvalidInputError(f"Unsupported workload format: {suffix} (use .json or .csv)")


def _load_json(path: Path) -> List[ProcessRecord]:
    with path.open("r", encoding="utf-8") as f:
        try:
            raw = json.load(f)
        except json.JSONDecodeError as exc:
            raise InvalidInputError(f"{path}: not valid JSON ({exc})") from exc

    if not isinstance(raw, list):
        raise InvalidInputError("JSON workload must be a list of process objects")

    return [_process_from_mapping(entry) for entry in raw]


def _load_csv(path: Path) -> List[ProcessRecord]:
    processes: List[ProcessRecord] = []
    with path.open("r", encoding="utf-8", newline="") as f:
        reader = csv.DictReader(f)
        for row in reader:
            processes.append(_process_from_mapping(row))
    return processes


def _process_from_mapping(mapping) -> ProcessRecord:
    try:
        pid = int(mapping["pid"])
        arrival = int(mapping["arrival_time"])
        burst = int(mapping["burst_time"])
    except (KeyError, TypeError, ValueError) as exc:
        raise InvalidInputError(f"Invalid process entry: {mapping!r}") from exc

    priority_val = mapping.get("priority")
    try:
        priority = int(priority_val) if priority_val not in (None, "") else 0
    except (TypeError, ValueError) as exc:
        raise InvalidInputError(f"Invalid priority in entry: {mapping!r}") from exc

    return ProcessRecord(pid=pid, arrival=arrival, burst=burst, priority=priority)
