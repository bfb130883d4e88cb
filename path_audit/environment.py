"""
Environment and platform detection.

Detects:
- Operating system and architecture
- Windows Subsystem for Linux (WSL1/WSL2) and the running distribution

Environment variable lookups go through EnvironmentFacts so callers (and tests)
can supply a controlled set of variables instead of the process environment.
"""

from __future__ import annotations

import os
import platform
import sys
from dataclasses import dataclass, field
from typing import Any, Mapping

from .common import vlog


PROC_VERSION = "/proc/version"
WSL_MOUNT_PROBE = "/mnt/c"


@dataclass(frozen=True)
class EnvironmentFacts:
    """
    Read-only view of environment variables.

    Attributes:
        variables: Variable name to value mapping
        case_insensitive: Match names ignoring case (Windows semantics)
    """
    variables: Mapping[str, str] = field(default_factory=dict)
    case_insensitive: bool = False

    @staticmethod
    def from_os() -> EnvironmentFacts:
        """Snapshot the current process environment."""
        return EnvironmentFacts(
            variables=dict(os.environ),
            case_insensitive=sys.platform == "win32",
        )

    def get(self, name: str, default: str | None = None) -> str | None:
        """Look up a variable, returning default if unset."""
        if name in self.variables:
            return self.variables[name]
        if self.case_insensitive:
            lowered = name.lower()
            for key, value in self.variables.items():
                if key.lower() == lowered:
                    return value
        return default

    def has(self, name: str) -> bool:
        """Check whether a variable is set."""
        return self.get(name) is not None


@dataclass(frozen=True)
class PlatformFacts:
    """
    Platform the search path is evaluated on.

    Attributes:
        os: Operating system ('linux', 'macos', 'windows', ...)
        arch: Machine architecture (e.g., 'x86_64', 'arm64')
        is_wsl: Whether running under Windows Subsystem for Linux
        wsl_version: 'WSL1' or 'WSL2' when known
        wsl_distro: WSL distribution name when known
    """
    os: str
    arch: str
    is_wsl: bool = False
    wsl_version: str | None = None
    wsl_distro: str | None = None

    @property
    def is_windows(self) -> bool:
        """Whether Windows path-list and executable rules apply."""
        return self.os == "windows"

    def __str__(self) -> str:
        base = f"{self.os} ({self.arch})"
        if self.is_wsl:
            details = ", ".join(p for p in (self.wsl_version, self.wsl_distro) if p)
            return f"{base} WSL{': ' + details if details else ''}"
        return base

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "os": self.os,
            "arch": self.arch,
            "is_wsl": self.is_wsl,
            "wsl_version": self.wsl_version,
            "wsl_distro": self.wsl_distro,
        }

    @staticmethod
    def from_dict(data: dict[str, Any]) -> PlatformFacts:
        """Create PlatformFacts from dictionary."""
        return PlatformFacts(
            os=data.get("os", ""),
            arch=data.get("arch", ""),
            is_wsl=data.get("is_wsl", False),
            wsl_version=data.get("wsl_version"),
            wsl_distro=data.get("wsl_distro"),
        )


def current_os_name() -> str:
    """Map sys.platform to the short OS name used in reports."""
    if sys.platform == "win32":
        return "windows"
    if sys.platform == "darwin":
        return "macos"
    if sys.platform.startswith("linux"):
        return "linux"
    return sys.platform


def _read_proc_version(proc_version: str) -> str | None:
    try:
        with open(proc_version, "r", encoding="utf-8", errors="replace") as f:
            return f.read()
    except OSError:
        return None


def _wsl_version_from(proc_text: str) -> str | None:
    if "WSL2" in proc_text:
        return "WSL2"
    if "Microsoft" in proc_text:
        # WSL1 kernels report "Microsoft" without "WSL2"
        return "WSL1"
    return None


def detect_wsl(
    env: EnvironmentFacts | None = None,
    proc_version: str = PROC_VERSION,
    mount_probe: str = WSL_MOUNT_PROBE,
    verbose: bool = False,
) -> tuple[bool, str | None, str | None]:
    """
    Detect Windows Subsystem for Linux.

    Detection priority:
    1. /proc/version mentions Microsoft or WSL
    2. WSL_DISTRO_NAME is set
    3. /mnt/c exists alongside /proc/version

    Args:
        env: Environment facts (defaults to the process environment)
        proc_version: Kernel version file to inspect
        mount_probe: Windows drive mount to probe
        verbose: Enable verbose logging

    Returns:
        Tuple of (is_wsl, wsl_version, wsl_distro)
    """
    if env is None:
        env = EnvironmentFacts.from_os()

    distro = env.get("WSL_DISTRO_NAME")
    proc_text = _read_proc_version(proc_version)

    if proc_text is not None:
        lowered = proc_text.lower()
        if "microsoft" in lowered or "wsl" in lowered:
            version = _wsl_version_from(proc_text)
            vlog(f"WSL detected via {proc_version}: {version or 'unknown version'}", verbose)
            return (True, version, distro)

    if distro is not None:
        vlog(f"WSL detected via WSL_DISTRO_NAME={distro}", verbose)
        return (True, None, distro)

    if proc_text is not None and os.path.exists(mount_probe):
        vlog(f"WSL detected via {mount_probe} mount", verbose)
        return (True, None, None)

    return (False, None, None)


def detect_platform(env: EnvironmentFacts | None = None, verbose: bool = False) -> PlatformFacts:
    """
    Detect the platform the audit runs on.

    Args:
        env: Environment facts (defaults to the process environment)
        verbose: Enable verbose logging

    Returns:
        PlatformFacts for the current host
    """
    os_name = current_os_name()
    arch = platform.machine() or "unknown"

    if os_name == "linux":
        is_wsl, wsl_version, wsl_distro = detect_wsl(env, verbose=verbose)
    else:
        is_wsl, wsl_version, wsl_distro = (False, None, None)

    facts = PlatformFacts(
        os=os_name,
        arch=arch,
        is_wsl=is_wsl,
        wsl_version=wsl_version,
        wsl_distro=wsl_distro,
    )
    vlog(f"Platform: {facts}", verbose)
    return facts
