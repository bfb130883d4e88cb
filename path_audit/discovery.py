"""
Executable discovery in search directories.

Lists the direct children of each existing, accessible search directory and
records every executable. Within one directory only the first occurrence of a
binary name is kept; duplicates across directories are kept and later become
conflicts.
"""

from __future__ import annotations

import logging
import os
from typing import Sequence

from .common import vlog
from .errors import DirectoryAccessError
from .models import ExecutableRecord, SearchDirectory
from .platforms import WINDOWS_BULK_SYSTEM_DIRS, binary_name, is_executable_mode

logger = logging.getLogger(__name__)


def default_skip_directories(windows: bool) -> tuple[str, ...]:
    """Return the default skip patterns for the platform."""
    return WINDOWS_BULK_SYSTEM_DIRS if windows else ()


def should_skip_directory(path: str, skip_patterns: Sequence[str]) -> bool:
    """
    Check whether a directory is excluded from scanning.

    Args:
        path: Directory path
        skip_patterns: Case-insensitive substrings that exclude a directory

    Returns:
        True if the directory should not be scanned
    """
    lowered = path.lower()
    return any(pattern.lower() in lowered for pattern in skip_patterns if pattern)


def scan_directory(directory: SearchDirectory, windows: bool = False) -> list[ExecutableRecord]:
    """
    List the executables directly inside one directory.

    Hidden entries and subdirectories are skipped. Entries whose metadata
    cannot be read are logged and skipped.

    Args:
        directory: Directory to scan
        windows: Apply Windows executable rules

    Returns:
        Records in name order, first occurrence per binary name

    Raises:
        DirectoryAccessError: If the directory cannot be listed
    """
    try:
        with os.scandir(directory.path) as it:
            entries = sorted(it, key=lambda e: e.name)
    except OSError as e:
        raise DirectoryAccessError(directory.path, str(e)) from e

    records: list[ExecutableRecord] = []
    seen_names: set[str] = set()

    for entry in entries:
        if entry.name.startswith("."):
            continue

        try:
            is_symlink = entry.is_symlink()
            st = entry.stat(follow_symlinks=True)
        except OSError as e:
            # Broken symlinks land here too: nothing to execute
            logger.warning("Skipping unreadable entry %s: %s", entry.path, e)
            continue

        if not is_executable_mode(st.st_mode, entry.name, windows=windows):
            continue

        name = binary_name(entry.name, windows=windows)
        if name in seen_names:
            continue
        seen_names.add(name)

        symlink_target = None
        if is_symlink:
            try:
                symlink_target = os.readlink(entry.path)
            except OSError as e:
                logger.warning("Could not read link target of %s: %s", entry.path, e)

        records.append(ExecutableRecord(
            name=name,
            full_path=entry.path,
            resolved_path=entry.path,
            is_symlink=is_symlink,
            symlink_target=symlink_target,
            size=st.st_size,
            modified_time=int(st.st_mtime),
            search_order=directory.order,
        ))

    return records


def discover_executables(
    directories: Sequence[SearchDirectory],
    skip_patterns: Sequence[str] | None = None,
    windows: bool = False,
    verbose: bool = False,
) -> list[ExecutableRecord]:
    """
    Discover executables across all search directories.

    Fills each directory's record_indices with positions in the returned list.
    Missing, inaccessible and skipped directories contribute nothing.

    Args:
        directories: Search directories in path order
        skip_patterns: Directory exclusion patterns (defaults per platform)
        windows: Apply Windows executable rules
        verbose: Enable verbose logging

    Returns:
        All records, grouped by directory in path order
    """
    if skip_patterns is None:
        skip_patterns = default_skip_directories(windows)

    records: list[ExecutableRecord] = []
    for directory in directories:
        directory.record_indices = []
        if not directory.exists or not directory.accessible:
            continue

        if should_skip_directory(directory.path, skip_patterns):
            vlog(f"Skipping system directory: {directory.path}", verbose)
            continue

        try:
            found = scan_directory(directory, windows=windows)
        except DirectoryAccessError as e:
            logger.warning("%s", e)
            continue

        for record in found:
            directory.record_indices.append(len(records))
            records.append(record)
        vlog(f"Scanned {directory.path}: {len(found)} executables", verbose)

    return records
