"""
Search path parsing.

Turns the raw path-list string into ordered SearchDirectory descriptors.
Blank segments are skipped but still count toward numbering, so a directory's
order is its segment index in the raw list ("/usr/bin::/bin" -> 0 and 2).
"""

from __future__ import annotations

import logging
import os

from .common import vlog
from .environment import EnvironmentFacts
from .models import SearchDirectory
from .platforms import expand_env_vars, get_path_env_var, path_separator

logger = logging.getLogger(__name__)


def normalize_directory(path: str) -> str:
    """
    Make a directory path absolute and canonical where possible.

    Relative paths are joined to the working directory and "."/".." removed.
    Existing directories are further canonicalized through the filesystem.
    """
    absolute = os.path.abspath(path)
    if os.path.exists(absolute):
        try:
            return os.path.realpath(absolute, strict=True)
        except OSError:
            return absolute
    return absolute


def check_accessibility(path: str) -> bool:
    """Check that a directory exists and can be listed."""
    if not os.path.isdir(path):
        return False
    try:
        with os.scandir(path):
            return True
    except OSError as e:
        logger.warning("Search directory is not accessible: %s (%s)", path, e)
        return False


def parse_path_list(
    raw: str,
    windows: bool = False,
    env: EnvironmentFacts | None = None,
    verbose: bool = False,
) -> list[SearchDirectory]:
    """
    Parse a raw path list into ordered search directories.

    Args:
        raw: Path-list string ("/usr/bin:/bin" or "C:\\Windows;C:\\Tools")
        windows: Use the Windows separator and %VAR% expansion
        env: Environment facts for variable expansion
        verbose: Enable verbose logging

    Returns:
        SearchDirectory list in path order
    """
    if env is None:
        env = EnvironmentFacts.from_os()

    directories: list[SearchDirectory] = []
    for order, segment in enumerate(raw.split(path_separator(windows))):
        segment = segment.strip()
        if not segment:
            continue

        expanded = expand_env_vars(segment, env, windows=windows)
        path = normalize_directory(expanded)
        exists = os.path.exists(path)
        accessible = check_accessibility(path) if exists else False

        directories.append(SearchDirectory(
            path=path,
            order=order,
            exists=exists,
            accessible=accessible,
        ))
        vlog(f"  [{order}] {path}{'' if exists else ' (missing)'}", verbose)

    return directories


def parse_system_path(
    env: EnvironmentFacts | None = None,
    windows: bool = False,
    verbose: bool = False,
) -> list[SearchDirectory]:
    """
    Parse the process search path.

    Raises:
        PathListUnavailableError: If PATH is not set
    """
    if env is None:
        env = EnvironmentFacts.from_os()
    raw = get_path_env_var(env, windows=windows)
    return parse_path_list(raw, windows=windows, env=env, verbose=verbose)
