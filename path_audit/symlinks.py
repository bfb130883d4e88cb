"""
Symbolic link resolution.

Follows link chains hop by hop with a visited set and a hop cap, so cyclic or
runaway chains terminate with an error instead of looping.
"""

from __future__ import annotations

import logging
import os
from typing import Sequence

from .common import vlog
from .errors import BrokenSymlinkError, CircularSymlinkError, SymlinkDepthError, SymlinkError
from .models import ExecutableRecord

logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 10


class SymlinkResolver:
    """
    Resolve executables to their canonical targets.

    Attributes:
        max_depth: Maximum number of link hops followed
    """

    def __init__(self, max_depth: int = DEFAULT_MAX_DEPTH):
        if max_depth < 1:
            raise ValueError(f"Invalid max_depth: {max_depth}. Must be at least 1")
        self.max_depth = max_depth

    def resolve(self, path: str) -> str:
        """
        Resolve a path through its link chain.

        Relative link targets are joined to the link's own directory.

        Args:
            path: Path to resolve

        Returns:
            Canonical path when the filesystem allows it, else the last path
            of the chain

        Raises:
            CircularSymlinkError: If the chain revisits a path
            SymlinkDepthError: If the chain is longer than max_depth
            BrokenSymlinkError: If the chain ends at a missing path
            SymlinkError: If a link cannot be read
        """
        current = path
        seen: set[str] = set()
        hops = 0

        while os.path.islink(current):
            if current in seen:
                raise CircularSymlinkError(current)
            if hops >= self.max_depth:
                raise SymlinkDepthError(path, self.max_depth)
            seen.add(current)

            try:
                target = os.readlink(current)
            except OSError as e:
                raise SymlinkError(current) from e

            if not os.path.isabs(target):
                target = os.path.join(os.path.dirname(current), target)
            current = target
            hops += 1

        if hops and not os.path.lexists(current):
            raise BrokenSymlinkError(path, current)

        try:
            return os.path.realpath(current, strict=True)
        except OSError:
            return current

    def are_same_binary(self, path1: str, path2: str) -> bool:
        """Check whether two paths resolve to the same canonical file."""
        try:
            return self.resolve(path1) == self.resolve(path2)
        except SymlinkError:
            return False

    def resolve_records(self, records: Sequence[ExecutableRecord], verbose: bool = False) -> int:
        """
        Set resolved_path on every record.

        Non-symlinks and failed resolutions keep their full path. Failures are
        logged, never raised.

        Args:
            records: Records to update in place
            verbose: Enable verbose logging

        Returns:
            Number of links that failed to resolve
        """
        failures = 0
        for record in records:
            if not record.is_symlink:
                record.resolved_path = record.full_path
                continue
            try:
                record.resolved_path = self.resolve(record.full_path)
                vlog(f"  {record.full_path} -> {record.resolved_path}", verbose)
            except SymlinkError as e:
                logger.warning("%s", e)
                record.resolved_path = record.full_path
                failures += 1
        return failures
