"""
Saved reports.

A report is the JSON form of a ScanResult. Loading one rebuilds the result
so it can be filtered and rendered again without rescanning.
"""

from __future__ import annotations

import json
from dataclasses import replace
from pathlib import Path

from .models import SEVERITY_RANK, ScanResult, build_summary, severity_at_least
from .errors import ReportError


def write_report(result: ScanResult, path: Path | str, pretty: bool = True) -> None:
    """
    Write a report to file.

    Args:
        result: Scan result to save
        path: Report file path
        pretty: Indent the JSON

    Raises:
        ReportError: If the file cannot be written
    """
    path = Path(path)

    # Atomic write: write to temp file then rename
    try:
        temp_path = path.with_suffix(path.suffix + ".tmp")
        with open(temp_path, "w", encoding="utf-8") as f:
            json.dump(result.to_dict(), f, indent=2 if pretty else None, ensure_ascii=False)
        temp_path.replace(path)
    except OSError as e:
        raise ReportError(f"Failed to write report: {e}") from e


def load_report(path: Path | str) -> ScanResult:
    """
    Load a report from file.

    Raises:
        ReportError: If the file is missing, not JSON, or not a report
    """
    path = Path(path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ReportError(f"Failed to read report {path}: {e}") from e

    if not isinstance(data, dict):
        raise ReportError(f"Not a path-audit report: {path}")

    try:
        return ScanResult.from_dict(data)
    except (KeyError, TypeError, ValueError) as e:
        raise ReportError(f"Malformed report {path}: {e}") from e


def filter_conflicts(
    result: ScanResult,
    binary: str | None = None,
    category: str | None = None,
    min_severity: str | None = None,
) -> ScanResult:
    """
    Narrow a result's conflicts.

    Args:
        result: Scan result (fresh or loaded)
        binary: Keep only this binary name
        category: Keep only this category
        min_severity: Keep only conflicts at or above this severity

    Returns:
        New ScanResult sharing records and directories, with the kept
        conflicts and a recomputed summary

    Raises:
        ValueError: If min_severity is not a known severity
    """
    if min_severity is not None and min_severity not in SEVERITY_RANK:
        raise ValueError(f"Unknown severity: {min_severity}")

    conflicts = [
        c for c in result.conflicts
        if (binary is None or c.binary_name == binary)
        and (category is None or c.category == category)
        and (min_severity is None or severity_at_least(c.severity, min_severity))
    ]
    return replace(
        result,
        conflicts=conflicts,
        summary=build_summary(result.directories, result.records, conflicts),
    )
