"""
Platform predicates for search path handling.

Separator and variable-expansion rules, executable detection, and the
WSL/Windows path predicates used to tell Linux-side binaries from Windows-side
ones when both appear in a WSL search path.
"""

from __future__ import annotations

import os
import re
import stat

from .environment import EnvironmentFacts
from .errors import PathListUnavailableError


POSIX_SEPARATOR = ":"
WINDOWS_SEPARATOR = ";"

WINDOWS_EXECUTABLE_EXTENSIONS = (".exe", ".bat", ".cmd", ".ps1", ".com")

# Bulk Windows system directories: hundreds of OS utilities, not developer tools
WINDOWS_BULK_SYSTEM_DIRS = (
    "windows\\system32",
    "windows\\syswow64",
    "windows\\winsxs",
    "c:\\windows\\",
)

_BRACED_VAR_RE = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)\}")
_BARE_VAR_RE = re.compile(r"\$([A-Za-z_][A-Za-z0-9_]*)")
_WINDOWS_VAR_RE = re.compile(r"%([^%]+)%")
_WSL_DRIVE_MOUNT_RE = re.compile(r"^/mnt/[A-Za-z]/")
_DRIVE_LETTER_RE = re.compile(r"^[A-Za-z]:[\\/]")


def path_separator(windows: bool) -> str:
    """Return the path-list separator for the platform."""
    return WINDOWS_SEPARATOR if windows else POSIX_SEPARATOR


def get_path_env_var(env: EnvironmentFacts, windows: bool = False) -> str:
    """
    Read the raw search path.

    Args:
        env: Environment facts to read from
        windows: Also accept the Windows spelling "Path"

    Returns:
        Raw path-list string (may be empty)

    Raises:
        PathListUnavailableError: If the variable is not set
    """
    value = env.get("PATH")
    if value is None and windows:
        value = env.get("Path")
    if value is None:
        raise PathListUnavailableError("Failed to read PATH environment variable")
    return value


def expand_unix_env_vars(path: str, env: EnvironmentFacts) -> str:
    """
    Expand ${VAR}, $VAR and a leading ~ in a POSIX path.

    Unset variables are left verbatim.
    """
    def _sub(match: re.Match) -> str:
        value = env.get(match.group(1))
        return value if value is not None else match.group(0)

    result = _BRACED_VAR_RE.sub(_sub, path)
    result = _BARE_VAR_RE.sub(_sub, result)

    if result == "~" or result.startswith("~/"):
        home = env.get("HOME")
        if home is not None:
            result = home + result[1:]

    return result


def expand_windows_env_vars(path: str, env: EnvironmentFacts) -> str:
    """Expand %VAR% in a Windows path; unset variables are left verbatim."""
    def _sub(match: re.Match) -> str:
        value = env.get(match.group(1))
        return value if value is not None else match.group(0)

    return _WINDOWS_VAR_RE.sub(_sub, path)


def expand_env_vars(path: str, env: EnvironmentFacts, windows: bool = False) -> str:
    """Expand environment variables using the platform's syntax."""
    if windows:
        return expand_windows_env_vars(path, env)
    return expand_unix_env_vars(path, env)


def has_windows_executable_extension(name: str) -> bool:
    """Check for a Windows executable extension (case-insensitive)."""
    return name.lower().endswith(WINDOWS_EXECUTABLE_EXTENSIONS)


def binary_name(file_name: str, windows: bool = False) -> str:
    """
    Return the command name for a file.

    On Windows the executable extension is stripped ("python.exe" -> "python").
    Other platforms keep the file name as is.
    """
    if windows:
        lowered = file_name.lower()
        for ext in WINDOWS_EXECUTABLE_EXTENSIONS:
            if lowered.endswith(ext):
                return file_name[:-len(ext)]
    return file_name


def is_executable_mode(mode: int, file_name: str, windows: bool = False) -> bool:
    """
    Decide executability from a stat mode.

    Args:
        mode: st_mode of the (followed) file
        file_name: Entry name, used for the Windows extension check
        windows: Apply Windows rules

    Returns:
        True for regular files that are executable on the platform
    """
    if not stat.S_ISREG(mode):
        return False
    if windows:
        return has_windows_executable_extension(file_name)
    return bool(mode & (stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH))


def is_windows_path_in_wsl(path: str) -> bool:
    """
    Check whether a path points at the Windows side from WSL.

    True for drive mounts (/mnt/c/...) and drive-letter paths (C:\\..., C:/...).
    """
    return bool(_WSL_DRIVE_MOUNT_RE.match(path) or _DRIVE_LETTER_RE.match(path))


def is_wsl_native_path(path: str) -> bool:
    """Check for a POSIX-style path that is not under a Windows drive mount."""
    return path.startswith("/") and not is_windows_path_in_wsl(path)


def is_windows_executable_in_wsl(path: str) -> bool:
    """Check whether a path names a Windows executable."""
    return has_windows_executable_extension(os.path.basename(path))


def convert_wsl_to_windows_path(path: str) -> str | None:
    """
    Convert a WSL drive mount path to its Windows form.

    /mnt/c/Windows/System32 -> C:\\Windows\\System32

    Returns:
        Windows path, or None for paths outside a drive mount
    """
    if not _WSL_DRIVE_MOUNT_RE.match(path) and not re.match(r"^/mnt/[A-Za-z]$", path):
        return None
    drive = path[5].upper()
    rest = path[7:].replace("/", "\\")
    return f"{drive}:\\{rest}"

