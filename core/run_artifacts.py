"""JSON run reports summarizing one codemap extraction run."""

from __future__ import annotations

import json
import os
from datetime import datetime, timezone
from typing import Any, Optional

DEFAULT_REPORT_DIR = "output/run_reports"


def build_run_report(
    source: str,
    status: str,
    stats: Optional[dict[str, Any]] = None,
    config: Optional[dict[str, Any]] = None,
    error: Optional[str] = None,
) -> dict[str, Any]:
    """Assemble the JSON-serializable summary of one extraction run."""
    report: dict[str, Any] = {
        "source": os.path.abspath(source),
        "status": status,
        "stats": dict(stats or {}),
        "config": dict(config or {}),
    }
    if error is not None:
        report["error"] = error
    return report


def write_run_report(
    report: dict[str, Any],
    run_id: str,
    output_dir: str = DEFAULT_REPORT_DIR,
) -> str:
    """Write a JSON run report named after the run ID and return its path."""
    os.makedirs(output_dir, exist_ok=True)
    payload = dict(report)
    payload.setdefault("run_id", run_id)
    payload.setdefault("timestamp_utc", datetime.now(timezone.utc).isoformat())
    path = os.path.join(output_dir, f"codemap_{run_id}.json")
    with open(path, "w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2, sort_keys=True)
    return path
