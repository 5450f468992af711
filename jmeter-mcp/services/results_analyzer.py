# services/results_analyzer.py
"""
Summary statistics for a JMeter JTL (CSV) results file.
"""

import csv
import logging
import math
import os
from typing import Any, Dict, List, Optional

from utils.file_utils import get_run_dir

logger = logging.getLogger(__name__)

RESULT_FILE_NAME = "result.jtl"


def _percentile(sorted_values: List[float], pct: float) -> Optional[float]:
    """Nearest-rank percentile over an already sorted list."""
    if not sorted_values:
        return None
    idx = max(0, min(len(sorted_values) - 1, int(math.ceil(pct / 100.0 * len(sorted_values)) - 1)))
    return sorted_values[idx]


def _to_number(raw: Optional[str]) -> Optional[float]:
    if raw is None or raw.strip() == "":
        return None
    try:
        return float(raw)
    except ValueError:
        return None


def analyze_jtl(jtl_path: str) -> Dict[str, Any]:
    """
    Parse a JTL file and compute summary statistics.

    Returns:
        dict with keys:
          - total_samples, valid_samples
          - error_count, error_pct
          - avg_response_time_ms, min_ms, max_ms, p90_ms, p95_ms, p99_ms
          - throughput_per_sec (None when the run has no measurable duration)
          - test_duration_sec

    Raises:
        FileNotFoundError: if the JTL file is missing.
        ValueError: if no row has a usable elapsed time.
    """
    if not os.path.isfile(jtl_path):
        raise FileNotFoundError(f"JTL file not found: {jtl_path}")

    total = 0
    errors = 0
    times: List[float] = []
    first_ts = None
    last_ts = None

    with open(jtl_path, newline="", encoding="utf-8", errors="ignore") as f:
        reader = csv.DictReader(f)
        for row in reader:
            total += 1

            elapsed = _to_number(row.get("elapsed"))
            if elapsed is not None and elapsed >= 0:
                times.append(elapsed)

            if (row.get("success") or "").strip().lower() == "false":
                errors += 1

            ts = _to_number(row.get("timeStamp"))
            if ts is not None:
                if first_ts is None or ts < first_ts:
                    first_ts = ts
                if last_ts is None or ts > last_ts:
                    last_ts = ts

    if not times:
        raise ValueError(f"No valid samples found in JTL: {jtl_path}")

    times.sort()
    duration_sec = (last_ts - first_ts) / 1000.0 if first_ts is not None and last_ts is not None else 0.0

    summary = {
        "total_samples": total,
        "valid_samples": len(times),
        "error_count": errors,
        "error_pct": round(errors / total * 100.0, 2),
        "avg_response_time_ms": round(sum(times) / len(times), 2),
        "min_ms": times[0],
        "max_ms": times[-1],
        "p90_ms": _percentile(times, 90),
        "p95_ms": _percentile(times, 95),
        "p99_ms": _percentile(times, 99),
        "throughput_per_sec": round(total / duration_sec, 2) if duration_sec > 0 else None,
        "test_duration_sec": round(duration_sec, 2),
    }
    logger.info("Analyzed %s: %d samples, %d errors", jtl_path, total, errors)
    return summary


def analyze_run(run_id: str) -> Dict[str, Any]:
    """
    Analyze <reports_dir>/<run_id>/result.jtl.

    Returns:
        dict: { "status", "run_id", "jtl_path", "summary" | "message" }
    """
    try:
        jtl_path = os.path.join(get_run_dir(run_id), RESULT_FILE_NAME)
    except ValueError as e:
        return {"status": "ERROR", "run_id": run_id, "jtl_path": None, "message": str(e)}

    try:
        summary = analyze_jtl(jtl_path)
    except FileNotFoundError:
        return {
            "status": "NOT_FOUND",
            "run_id": run_id,
            "jtl_path": jtl_path,
            "message": f"{RESULT_FILE_NAME} not found for run '{run_id}'",
        }
    except ValueError as e:
        return {
            "status": "ERROR",
            "run_id": run_id,
            "jtl_path": jtl_path,
            "message": str(e),
        }

    return {
        "status": "OK",
        "run_id": run_id,
        "jtl_path": jtl_path,
        "summary": summary,
    }
