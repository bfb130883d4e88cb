"""
Configuration file parsing and management.

Supports YAML (.yml/.yaml) and JSON (.json) configuration files.
Merges configurations from multiple sources (custom → project → user → system → defaults).
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from typing import Any

import yaml

from .common import vlog
from .symlinks import DEFAULT_MAX_DEPTH


# Configuration file locations (in priority order)
CONFIG_LOCATIONS = [
    ".path-audit.yml",                             # Project root (highest priority)
    ".path-audit.yaml",                            # Alternative extension
    os.path.expanduser("~/.config/path-audit/config.yml"),  # User global
    os.path.expanduser("~/.config/path-audit/config.yaml"),
    "/etc/path-audit/config.yml",                  # System global
    "/etc/path-audit/config.yaml",
]

DEFAULT_VERSION_TIMEOUT = 3


def _as_pattern_tuple(value: Any) -> tuple[str, ...]:
    """Normalize a skip_directories value; a single string is one pattern."""
    if not value:
        return ()
    if isinstance(value, str):
        return (value,)
    if not isinstance(value, (list, tuple)):
        raise ValueError(f"Invalid skip_directories: {value!r}. Must be a list of strings")
    return tuple(value)


@dataclass(frozen=True)
class ScanPreferences:
    """
    Preferences for scanning the search path.

    Attributes:
        max_symlink_depth: Maximum number of symlink hops followed
        resolve_symlinks: Resolve symlinks to canonical targets
        extract_versions: Run binaries to extract their versions
        include_hashes: Hash the leading bytes of every executable
        skip_directories: Case-insensitive substrings excluding directories
        version_timeout_seconds: Timeout per version command
        explicit_keys: Keys set by the configuration file
    """
    max_symlink_depth: int = DEFAULT_MAX_DEPTH
    resolve_symlinks: bool = True
    extract_versions: bool = False
    include_hashes: bool = False
    skip_directories: tuple[str, ...] = ()
    version_timeout_seconds: int = DEFAULT_VERSION_TIMEOUT
    explicit_keys: frozenset[str] = field(default=frozenset(), compare=False, repr=False)

    def __post_init__(self):
        """Validate preferences after initialization."""
        # Validate max_symlink_depth
        if self.max_symlink_depth < 1 or self.max_symlink_depth > 64:
            raise ValueError(
                f"Invalid max_symlink_depth: {self.max_symlink_depth}. "
                "Must be between 1 and 64"
            )

        # Validate version_timeout_seconds
        if self.version_timeout_seconds < 1 or self.version_timeout_seconds > 60:
            raise ValueError(
                f"Invalid version_timeout_seconds: {self.version_timeout_seconds}. "
                "Must be between 1 and 60"
            )

        if isinstance(self.skip_directories, str) or not all(isinstance(d, str) for d in self.skip_directories):
            raise ValueError("Invalid skip_directories: must be a list of strings")

    @staticmethod
    def from_dict(data: dict[str, Any]) -> ScanPreferences:
        """Create ScanPreferences from dictionary."""
        return ScanPreferences(
            max_symlink_depth=data.get("max_symlink_depth", DEFAULT_MAX_DEPTH),
            resolve_symlinks=data.get("resolve_symlinks", True),
            extract_versions=data.get("extract_versions", False),
            include_hashes=data.get("include_hashes", False),
            skip_directories=_as_pattern_tuple(data.get("skip_directories")),
            version_timeout_seconds=data.get("version_timeout_seconds", DEFAULT_VERSION_TIMEOUT),
            explicit_keys=frozenset(data),
        )


@dataclass(frozen=True)
class OutputPreferences:
    """
    Preferences for report output.

    Attributes:
        recommendations: Show recommendations in human output
        explicit_keys: Keys set by the configuration file
    """
    recommendations: bool = False
    explicit_keys: frozenset[str] = field(default=frozenset(), compare=False, repr=False)

    @staticmethod
    def from_dict(data: dict[str, Any]) -> OutputPreferences:
        """Create OutputPreferences from dictionary."""
        return OutputPreferences(
            recommendations=data.get("recommendations", False),
            explicit_keys=frozenset(data),
        )


def _pick(high: Any, low: Any, name: str) -> Any:
    """Choose one preference value from two sections of the same type."""
    mine = getattr(high, name)
    if name in high.explicit_keys:
        return mine
    if not high.explicit_keys and mine != getattr(type(high)(), name):
        return mine
    return getattr(low, name)


@dataclass(frozen=True)
class Config:
    """
    Complete configuration for path-audit.

    Attributes:
        version: Config schema version
        scan: Scan preferences
        output: Output preferences
        source: Path to the configuration file that was loaded
    """
    version: int = 1
    scan: ScanPreferences = field(default_factory=ScanPreferences)
    output: OutputPreferences = field(default_factory=OutputPreferences)
    source: str = ""

    def __post_init__(self):
        """Validate config after initialization."""
        if self.version != 1:
            raise ValueError(f"Unsupported config version: {self.version}. Expected version 1")

    @staticmethod
    def from_dict(data: dict[str, Any], source: str = "") -> Config:
        """Create Config from dictionary."""
        return Config(
            version=data.get("version", 1),
            scan=ScanPreferences.from_dict(data.get("scan") or {}),
            output=OutputPreferences.from_dict(data.get("output") or {}),
            source=source,
        )

    def merge_with(self, other: Config) -> Config:
        """
        Merge this config with another, preferring values from this config.

        A key set in this config's file wins even when it equals the default.
        Without file provenance, a value equal to its default counts as unset
        and yields to other. Skip directories are combined.

        Args:
            other: Other config to merge (lower priority)

        Returns:
            New merged Config object
        """
        merged_scan = ScanPreferences(
            max_symlink_depth=_pick(self.scan, other.scan, "max_symlink_depth"),
            resolve_symlinks=_pick(self.scan, other.scan, "resolve_symlinks"),
            extract_versions=_pick(self.scan, other.scan, "extract_versions"),
            include_hashes=_pick(self.scan, other.scan, "include_hashes"),
            skip_directories=tuple(dict.fromkeys(self.scan.skip_directories + other.scan.skip_directories)),
            version_timeout_seconds=_pick(self.scan, other.scan, "version_timeout_seconds"),
            explicit_keys=self.scan.explicit_keys | other.scan.explicit_keys,
        )

        merged_output = OutputPreferences(
            recommendations=_pick(self.output, other.output, "recommendations"),
            explicit_keys=self.output.explicit_keys | other.output.explicit_keys,
        )

        return Config(
            version=self.version,
            scan=merged_scan,
            output=merged_output,
            source=self.source or other.source,
        )


def _load_yaml(file_path: str) -> dict[str, Any] | None:
    """
    Load YAML configuration file.

    Args:
        file_path: Path to YAML file

    Returns:
        Parsed configuration dictionary, or None if file invalid
    """
    try:
        with open(file_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
            return data if isinstance(data, dict) else {}
    except (OSError, yaml.YAMLError):
        return None  # File not readable or invalid YAML


def _load_json(file_path: str) -> dict[str, Any] | None:
    """
    Load JSON configuration file.

    Args:
        file_path: Path to JSON file

    Returns:
        Parsed configuration dictionary, or None if file invalid
    """
    try:
        with open(file_path, "r", encoding="utf-8") as f:
            data = json.load(f)
            return data if isinstance(data, dict) else {}
    except (OSError, json.JSONDecodeError):
        return None


def load_config_file(file_path: str, verbose: bool = False) -> Config | None:
    """
    Load configuration from a single file.

    Files ending in .json are parsed as JSON, everything else as YAML.

    Args:
        file_path: Path to configuration file
        verbose: Enable verbose logging

    Returns:
        Config object, or None if file cannot be loaded
    """
    if not os.path.exists(file_path):
        return None

    vlog(f"Loading config from: {file_path}", verbose)

    if file_path.endswith(".json"):
        data = _load_json(file_path)
    else:
        data = _load_yaml(file_path)

    if data is None:
        vlog(f"Invalid config file: {file_path}", verbose)
        return None

    try:
        config = Config.from_dict(data, source=file_path)
        vlog(f"Loaded config successfully: {file_path}", verbose)
        return config
    except (ValueError, TypeError) as e:
        vlog(f"Config validation failed for {file_path}: {e}", verbose)
        return None


def load_config(
    custom_path: str | None = None,
    verbose: bool = False,
    locations: list[str] | None = None,
) -> Config:
    """
    Load and merge configuration from all sources.

    Configuration precedence (highest to lowest):
    1. Custom path (if provided)
    2. Project .path-audit.yml
    3. User ~/.config/path-audit/config.yml
    4. System /etc/path-audit/config.yml
    5. Default configuration

    Args:
        custom_path: Optional path to custom configuration file
        verbose: Enable verbose logging
        locations: Standard locations to search (defaults to CONFIG_LOCATIONS)

    Returns:
        Merged Config object (never None, returns defaults if no config found)

    Raises:
        ValueError: If custom_path is provided but file cannot be loaded
    """
    configs: list[Config] = []

    # Try custom path first (highest priority)
    if custom_path:
        config = load_config_file(custom_path, verbose)
        if config is None:
            raise ValueError(f"Could not load config from specified path: {custom_path}")
        configs.append(config)
        vlog(f"Using custom config: {custom_path}", verbose)

    # Try standard locations
    for location in CONFIG_LOCATIONS if locations is None else locations:
        config = load_config_file(location, verbose)
        if config is not None:
            configs.append(config)
            vlog(f"Found config at: {location}", verbose)

    if not configs:
        vlog("No config files found, using defaults", verbose)
        return Config()

    # Merge configs (first config has highest priority)
    merged = configs[0]
    for config in configs[1:]:
        merged = merged.merge_with(config)

    vlog(f"Merged {len(configs)} config files", verbose)
    return merged
