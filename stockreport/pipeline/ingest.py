from __future__ import annotations

import csv
import json
from pathlib import Path
from typing import Any, Dict, List


def _load_csv(path: Path) -> List[Dict[str, Any]]:
    with path.open("r", encoding="utf-8-sig", newline="") as handle:
        reader = csv.DictReader(handle)
        if reader.fieldnames is None:
            raise ValueError("CSV has no header")
        return [row for row in reader if any((value or "").strip() for value in row.values())]


def _load_json(path: Path) -> List[Dict[str, Any]]:
    with path.open("r", encoding="utf-8") as handle:
        payload = json.load(handle)
    # report endpoints wrap the rows as {"data": [...]}
    if isinstance(payload, dict):
        payload = payload.get("data", payload.get("rows"))
    if not isinstance(payload, list):
        raise ValueError(f"JSON rows must be a list of objects: {path}")
    for index, row in enumerate(payload):
        if not isinstance(row, dict):
            raise ValueError(f"Row {index} is not an object")
    return payload


def load_rows(path: Path) -> List[Dict[str, Any]]:
    """Report rows from a CSV export or the JSON body of the report endpoint."""
    if not path.exists():
        raise FileNotFoundError(f"Rows file not found: {path}")
    if path.suffix.lower() == ".json":
        return _load_json(path)
    return _load_csv(path)
