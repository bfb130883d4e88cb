"""
Content hashing for discovered executables.

Only the leading bytes are hashed so large binaries stay cheap to fingerprint.
"""

from __future__ import annotations

import hashlib
import logging
from typing import Sequence

from .models import ExecutableRecord

logger = logging.getLogger(__name__)

HASH_PREFIX_BYTES = 8192


def compute_content_hash(path: str, algorithm: str = "sha256", limit: int = HASH_PREFIX_BYTES) -> str | None:
    """
    Hash the first bytes of a file.

    Args:
        path: File to hash (symlinks are followed)
        algorithm: hashlib algorithm name
        limit: Number of leading bytes hashed

    Returns:
        Hex digest, or None if the file cannot be read
    """
    try:
        hasher = hashlib.new(algorithm)
        with open(path, "rb") as f:
            hasher.update(f.read(limit))
        return hasher.hexdigest()
    except OSError as e:
        logger.warning("Could not hash %s: %s", path, e)
        return None


def hash_records(records: Sequence[ExecutableRecord]) -> None:
    """Set content_hash on every record."""
    for record in records:
        record.content_hash = compute_content_hash(record.full_path)
