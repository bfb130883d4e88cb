"""
Version enrichment for discovered executables.

Runs each binary with common version flags and parses the output, falling
back to version numbers embedded in the path (e.g. .nvm/versions/node/v18.0.0).
This is an optional collaborator: the conflict analysis only reads the
VersionInfo it attaches and never calls it itself.
"""

from __future__ import annotations

import os
import re
import subprocess
from typing import Sequence

from packaging.version import InvalidVersion, Version

from .common import vlog
from .models import ExecutableRecord, VersionInfo

# Constants
TIMEOUT_SECONDS = int(os.environ.get("PATH_AUDIT_TIMEOUT_SECONDS", "3"))

ANSI_ESCAPE_RE = re.compile(r'\x1b\[[0-9;]*m|\033\[[0-9;]*m')

VERSION_FLAG_SETS = (
    ("--version",),
    ("-v",),
    ("version",),
    ("-V",),
)

# Tried in order against command output
OUTPUT_PATTERNS = (
    re.compile(r"(\d+\.\d+\.\d+)"),
    re.compile(r"v(\d+\.\d+\.\d+)"),
    re.compile(r"[Vv]ersion\s+(\d+\.\d+(?:\.\d+)?)"),
    re.compile(r"[A-Za-z]+\s+(\d+\.\d+(?:\.\d+)?)"),
    re.compile(r"(\d+\.\d+)"),
)

METHOD_COMMAND = "command execution"
METHOD_PATH = "path parsing"


def normalize_version(raw: str) -> str | None:
    """
    Normalize a version string with packaging.

    Returns:
        Normalized version (e.g., "v18.0.0" -> "18.0.0"), or None if invalid
    """
    try:
        return str(Version(raw))
    except InvalidVersion:
        return None


def parse_version_output(output: str) -> str | None:
    """
    Pull a version out of command output.

    Args:
        output: Combined command output

    Returns:
        Version string, a short first line if no pattern matched, or None
    """
    for pattern in OUTPUT_PATTERNS:
        m = pattern.search(output)
        if m:
            return m.group(1)

    lines = output.splitlines()
    if lines and lines[0] and len(lines[0]) < 100:
        return lines[0]
    return None


def parse_version_from_path(path: str, binary_name: str) -> str | None:
    """
    Pull a version out of an install path.

    /usr/local/lib/python3.11/bin/python -> 3.11
    /home/user/.nvm/versions/node/v18.0.0/bin/node -> 18.0.0
    """
    patterns = (
        re.compile(re.escape(binary_name) + r"\s*(\d+\.\d+(?:\.\d+)?)"),
        re.compile(r"v(\d+\.\d+\.\d+)"),
        re.compile(r"/(\d+\.\d+(?:\.\d+)?)/"),
    )
    for pattern in patterns:
        m = pattern.search(path)
        if m:
            return m.group(1)
    return None


class VersionExtractor:
    """
    Callable version enricher.

    Attributes:
        timeout: Seconds allowed per version command
        flag_sets: Argument sets tried in order
    """

    def __init__(self, timeout: float | None = None, flag_sets: Sequence[tuple[str, ...]] = VERSION_FLAG_SETS):
        self.timeout = timeout or TIMEOUT_SECONDS
        self.flag_sets = tuple(flag_sets)

    def run_version_command(self, path: str, args: Sequence[str]) -> str:
        """
        Run a binary with version arguments.

        Returns:
            Cleaned stdout, or stderr if stdout is empty; "" on any failure
        """
        try:
            proc = subprocess.run(
                [path, *args],
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                stdin=subprocess.DEVNULL,  # Isolate stdin
                text=True,
                timeout=self.timeout,
                check=False,
                env={**os.environ, "TERM": "dumb"},  # Disable ANSI output
            )
        except (OSError, subprocess.SubprocessError, ValueError):
            return ""

        for stream in (proc.stdout, proc.stderr):
            cleaned = ANSI_ESCAPE_RE.sub("", (stream or "").strip())
            if cleaned:
                return cleaned
        return ""

    def extract(self, path: str, binary_name: str) -> VersionInfo | None:
        """Extract a version by execution, then from the path."""
        for args in self.flag_sets:
            output = self.run_version_command(path, args)
            if not output:
                continue
            version = parse_version_output(output)
            if version:
                return VersionInfo(
                    raw=version,
                    parsed=normalize_version(version),
                    extraction_method=METHOD_COMMAND,
                )

        version = parse_version_from_path(path, binary_name)
        if version:
            return VersionInfo(
                raw=version,
                parsed=normalize_version(version),
                extraction_method=METHOD_PATH,
            )
        return None

    def __call__(self, record: ExecutableRecord) -> VersionInfo | None:
        return self.extract(record.full_path, record.name)


def enrich_versions(records: Sequence[ExecutableRecord], enricher, verbose: bool = False) -> int:
    """
    Attach versions to records.

    Args:
        records: Records to update in place
        enricher: Callable returning VersionInfo or None for a record
        verbose: Enable verbose logging

    Returns:
        Number of records that received a version
    """
    found = 0
    for record in records:
        info = enricher(record)
        if info is not None:
            record.version_info = info
            found += 1
            vlog(f"  {record.full_path}: {info.raw} ({info.extraction_method})", verbose)
    return found
