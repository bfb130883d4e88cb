"""
Exception taxonomy for PATH auditing.

Only PathListUnavailableError aborts a run. Everything else is raised by a
single stage, logged by its caller and degraded to a safe default.
"""

from __future__ import annotations


class PathAuditError(Exception):
    """Base exception for path-audit errors."""
    pass


class PathListUnavailableError(PathAuditError):
    """Raised when the search path variable cannot be read."""
    pass


class DirectoryAccessError(PathAuditError):
    """Raised when a search directory exists but cannot be listed."""

    def __init__(self, path: str, reason: str = ""):
        self.path = path
        self.reason = reason
        message = f"Failed to access directory: {path}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class SymlinkError(PathAuditError):
    """
    Base exception for symbolic link resolution failures.

    Attributes:
        path: Link (or chain member) where resolution stopped
    """
    def __init__(self, path: str, message: str | None = None):
        self.path = path
        super().__init__(message or f"Failed to resolve symbolic link: {path}")


class CircularSymlinkError(SymlinkError):
    """Raised when a link chain revisits a path."""

    def __init__(self, path: str):
        super().__init__(path, f"Circular symbolic link detected: {path}")


class SymlinkDepthError(SymlinkError):
    """Raised when a link chain is longer than the hop cap."""

    def __init__(self, path: str, max_depth: int):
        self.max_depth = max_depth
        super().__init__(path, f"Symbolic link chain exceeds {max_depth} hops: {path}")


class BrokenSymlinkError(SymlinkError):
    """Raised when a link chain ends at a path that does not exist."""

    def __init__(self, path: str, target: str):
        self.target = target
        super().__init__(path, f"Broken symbolic link: {path} -> {target}")


class ReportError(PathAuditError):
    """Raised when a saved report cannot be read or written."""
    pass
