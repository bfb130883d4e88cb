"""
Output rendering and formatting.

Human-readable reports go to stdout; colors and emoji follow the
PATH_AUDIT_COLOR and PATH_AUDIT_EMOJI environment flags.
"""

import json
import os

from .models import CATEGORIES, CATEGORY_LABELS, SEVERITY_CRITICAL, SEVERITY_HIGH, SEVERITY_INFO, SEVERITY_LOW, SEVERITY_MEDIUM


# Environment options
USE_EMOJI = os.environ.get("PATH_AUDIT_EMOJI", "1") == "1"
USE_COLOR = os.environ.get("PATH_AUDIT_COLOR", "1") == "1"

# ANSI color codes
GREEN = "\033[32m"
BOLD = "\033[1m"
BOLD_GREEN = "\033[1;32m"
BOLD_RED = "\033[1;31m"
YELLOW = "\033[33m"
BLUE = "\033[34m"
CYAN = "\033[36m"
RED = "\033[31m"
RESET = "\033[0m"

RULE_WIDTH = 60

SEVERITY_ICON = {
    SEVERITY_CRITICAL: "🔴",
    SEVERITY_HIGH: "🟠",
    SEVERITY_MEDIUM: "🟡",
    SEVERITY_LOW: "🔵",
    SEVERITY_INFO: "⚪",
}
SEVERITY_ICON_PLAIN = {
    SEVERITY_CRITICAL: "!!",
    SEVERITY_HIGH: "!",
    SEVERITY_MEDIUM: "~",
    SEVERITY_LOW: "-",
    SEVERITY_INFO: ".",
}
SEVERITY_COLOR = {
    SEVERITY_CRITICAL: RED,
    SEVERITY_HIGH: RED,
    SEVERITY_MEDIUM: YELLOW,
    SEVERITY_LOW: BLUE,
    SEVERITY_INFO: "",
}


def colorize(text: str, color: str) -> str:
    """Apply color to text.

    Args:
        text: Text to colorize
        color: ANSI color code

    Returns:
        Colored text or plain text if colors disabled
    """
    if not USE_COLOR or not text or not color:
        return text
    return f"{color}{text}{RESET}"


def severity_icon(severity: str) -> str:
    """Get the icon for a severity."""
    if not USE_EMOJI:
        return SEVERITY_ICON_PLAIN.get(severity, "?")
    return SEVERITY_ICON.get(severity, "❓")


def _format_header(result) -> list[str]:
    platform = result.platform
    line = f"Platform: {platform.os} ({platform.arch})"
    if platform.is_wsl:
        line += colorize(f" with {platform.wsl_version or 'WSL'}", CYAN)
    return [
        colorize("PATH Conflict Analysis Report", BOLD),
        "═" * RULE_WIDTH,
        line,
        f"Scan Time: {result.scan_time}",
    ]


def _format_summary(summary) -> list[str]:
    conflicts_line = f"Conflicts Found: {summary.total_conflicts}"
    return [
        "",
        colorize("SUMMARY", BOLD),
        "─" * RULE_WIDTH,
        f"Total PATH Entries: {summary.total_directories}",
        f"Total Executables: {summary.total_executables}",
        f"Unique Executables: {summary.unique_executables}",
        colorize(conflicts_line, BOLD_RED if summary.total_conflicts else GREEN),
    ]


def _format_by_category(summary) -> list[str]:
    lines = ["", colorize("CONFLICTS BY CATEGORY", BOLD), "─" * RULE_WIDTH]
    for category in CATEGORIES:
        count = summary.conflicts_by_category.get(category, 0)
        if count:
            lines.append(f"{CATEGORY_LABELS[category]} ({count})")
    return lines


def format_executable(record, verbose: bool = False) -> str:
    """One-line description of an executable: path, version, manager."""
    parts = [record.full_path]
    if record.version:
        parts.append(f"→ {record.version}")
    if verbose and record.manager_classification is not None:
        parts.append(f"({record.manager_classification.name})")
    return " ".join(parts)


def format_conflict(number: int, conflict, show_recommendations: bool = False, verbose: bool = False) -> list[str]:
    """Format one conflict block."""
    header = (
        f"[{number}] {severity_icon(conflict.severity)} {conflict.severity}: "
        f"{conflict.binary_name} ({conflict.category})"
    )
    lines = [
        colorize(header, SEVERITY_COLOR.get(conflict.severity, "")),
        "─" * RULE_WIDTH,
        f"{colorize('Active:', BOLD_GREEN)} {format_executable(conflict.active_instance, verbose)}",
    ]

    if conflict.shadowed_instances:
        lines.append("")
        lines.append(colorize("Shadowed instances:", YELLOW))
        for idx, instance in enumerate(conflict.shadowed_instances, start=2):
            lines.append(f"   [{idx}] {format_executable(instance, verbose)}")

    if show_recommendations and conflict.recommendation:
        lines.append("")
        lines.append(f"{colorize('Recommendation:', CYAN)} {conflict.recommendation}")

    return lines


def format_human(result, show_recommendations: bool = False, verbose: bool = False, conflicts_only: bool = False) -> str:
    """
    Format a scan result as a human-readable report.

    Args:
        result: ScanResult to format
        show_recommendations: Include recommendations
        verbose: Include manager names
        conflicts_only: Omit header and summary sections

    Returns:
        Report text ending with a newline
    """
    lines: list[str] = []
    if not conflicts_only:
        lines.extend(_format_header(result))
        lines.extend(_format_summary(result.summary))
        if result.conflicts:
            lines.extend(_format_by_category(result.summary))

    if not result.conflicts:
        if not conflicts_only:
            lines.append("")
        lines.append(colorize("No conflicts detected! All executables in PATH are unique.", GREEN))
        return "\n".join(lines) + "\n"

    if not conflicts_only:
        lines.extend(["", colorize("DETAILED CONFLICTS", BOLD), "═" * RULE_WIDTH])

    for number, conflict in enumerate(result.conflicts, start=1):
        lines.append("")
        lines.extend(format_conflict(number, conflict, show_recommendations, verbose))

    return "\n".join(lines) + "\n"


def render_json(result, pretty: bool = False, conflicts_only: bool = False) -> str:
    """
    Serialize a scan result to JSON.

    Args:
        result: ScanResult to serialize
        pretty: Indent the output
        conflicts_only: Emit only the conflicts list and summary

    Returns:
        JSON text
    """
    if conflicts_only:
        data = {
            "conflicts": [c.to_dict() for c in result.conflicts],
            "summary": result.summary.to_dict(),
        }
    else:
        data = result.to_dict()
    return json.dumps(data, indent=2 if pretty else None, ensure_ascii=False)
