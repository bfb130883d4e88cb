"""
Common utilities shared across path_audit modules.
"""

from __future__ import annotations

import os
import sys


def debug_enabled() -> bool:
    """Check whether PATH_AUDIT_DEBUG forces verbose logging."""
    return os.environ.get("PATH_AUDIT_DEBUG", "0") == "1"


def vlog(msg: str, verbose: bool = False) -> None:
    """
    Log a verbose progress message.

    Args:
        msg: Message to log
        verbose: Whether verbose mode is enabled
    """
    if verbose or debug_enabled():
        try:
            from .logging_config import get_logger
            get_logger().info(msg)
        except Exception:
            # Fallback to stderr if logging fails
            try:
                print(f"[path_audit] {msg}", file=sys.stderr)
            except Exception:
                pass
