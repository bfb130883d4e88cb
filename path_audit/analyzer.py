"""
PATH analysis pipeline.

Runs the stages in order over one owned record list:
parse -> discover -> resolve symlinks -> classify managers -> [versions]
-> [hashes] -> detect conflicts -> summarize.
"""

from __future__ import annotations

import datetime
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Sequence

from .common import vlog
from .conflicts import ConflictDetector
from .config import Config
from .discovery import discover_executables
from .environment import EnvironmentFacts, PlatformFacts, detect_platform
from .hashing import hash_records
from .managers import MANAGER_RULES, ManagerClassifier, ManagerRule
from .models import ConflictGroup, ExecutableRecord, ScanResult, SearchDirectory, VersionInfo, build_summary
from .path_parser import parse_path_list
from .platforms import get_path_env_var
from .symlinks import DEFAULT_MAX_DEPTH, SymlinkResolver
from .versions import VersionExtractor, enrich_versions

VersionEnricher = Callable[[ExecutableRecord], "VersionInfo | None"]


@dataclass(frozen=True)
class AnalysisOptions:
    """
    Options for one analysis run.

    Attributes:
        extract_versions: Run the version enrichment collaborator
        resolve_symlinks: Resolve symlinks to canonical targets
        classify_managers: Classify install mechanisms
        include_hashes: Hash the leading bytes of every executable
        custom_path: Path-list string to analyze instead of PATH
        max_symlink_depth: Hop cap for symlink resolution
        skip_directories: Directory exclusion patterns (None for platform default)
        version_timeout_seconds: Timeout per version command
    """
    extract_versions: bool = False
    resolve_symlinks: bool = True
    classify_managers: bool = True
    include_hashes: bool = False
    custom_path: str | None = None
    max_symlink_depth: int = DEFAULT_MAX_DEPTH
    skip_directories: tuple[str, ...] | None = None
    version_timeout_seconds: int = 3

    @staticmethod
    def from_config(config: Config, **overrides: Any) -> AnalysisOptions:
        """Build options from a loaded config; keyword overrides win."""
        scan = config.scan
        options = AnalysisOptions(
            extract_versions=scan.extract_versions,
            resolve_symlinks=scan.resolve_symlinks,
            include_hashes=scan.include_hashes,
            max_symlink_depth=scan.max_symlink_depth,
            skip_directories=tuple(scan.skip_directories) if scan.skip_directories else None,
            version_timeout_seconds=scan.version_timeout_seconds,
        )
        return replace(options, **overrides) if overrides else options


def utc_timestamp() -> str:
    """Current UTC time as ISO 8601 with a Z suffix."""
    return datetime.datetime.now(datetime.timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z")


@dataclass
class PathAnalyzer:
    """
    Audits a search path for conflicting executables.

    Attributes:
        options: Analysis options
        platform: Platform facts (detected once when not supplied)
        env: Environment facts (process environment when not supplied)
        version_enricher: Callable returning VersionInfo for a record
        manager_rules: Ordered install mechanism rule table
        verbose: Enable verbose logging
    """
    options: AnalysisOptions = field(default_factory=AnalysisOptions)
    platform: PlatformFacts | None = None
    env: EnvironmentFacts | None = None
    version_enricher: VersionEnricher | None = None
    manager_rules: Sequence[ManagerRule] = MANAGER_RULES
    verbose: bool = False

    def __post_init__(self):
        if self.env is None:
            self.env = EnvironmentFacts.from_os()
        if self.platform is None:
            self.platform = detect_platform(self.env, verbose=self.verbose)
        if self.version_enricher is None and self.options.extract_versions:
            self.version_enricher = VersionExtractor(timeout=self.options.version_timeout_seconds)

    def raw_path_list(self) -> str:
        """
        Return the path list to analyze.

        Raises:
            PathListUnavailableError: If no custom path is set and PATH is missing
        """
        if self.options.custom_path is not None:
            return self.options.custom_path
        return get_path_env_var(self.env, windows=self.platform.is_windows)

    def collect(self) -> tuple[list[SearchDirectory], list[ExecutableRecord]]:
        """Parse, discover and enrich; returns (directories, records)."""
        windows = self.platform.is_windows

        vlog("Parsing search path...", self.verbose)
        directories = parse_path_list(self.raw_path_list(), windows=windows, env=self.env, verbose=self.verbose)

        vlog(f"Discovering executables in {len(directories)} directories...", self.verbose)
        records = discover_executables(
            directories,
            skip_patterns=self.options.skip_directories,
            windows=windows,
            verbose=self.verbose,
        )

        if self.options.resolve_symlinks:
            vlog("Resolving symbolic links...", self.verbose)
            SymlinkResolver(self.options.max_symlink_depth).resolve_records(records, verbose=self.verbose)

        if self.options.classify_managers:
            vlog("Classifying install mechanisms...", self.verbose)
            ManagerClassifier(self.env, self.manager_rules).classify_records(records, verbose=self.verbose)

        if self.version_enricher is not None:
            vlog("Extracting versions...", self.verbose)
            found = enrich_versions(records, self.version_enricher, verbose=self.verbose)
            vlog(f"Versions found for {found}/{len(records)} executables", self.verbose)

        if self.options.include_hashes:
            vlog("Hashing executables...", self.verbose)
            hash_records(records)

        return directories, records

    def analyze(self) -> ScanResult:
        """
        Run the full analysis.

        Returns:
            ScanResult with conflicts sorted most severe first

        Raises:
            PathListUnavailableError: If the search path cannot be read
        """
        scan_time = utc_timestamp()
        directories, records = self.collect()

        vlog("Detecting conflicts...", self.verbose)
        conflicts = ConflictDetector(self.platform).detect_conflicts(records)
        vlog(f"Found {len(conflicts)} conflicts", self.verbose)

        return ScanResult(
            scan_time=scan_time,
            platform=self.platform,
            directories=directories,
            records=records,
            conflicts=conflicts,
            summary=build_summary(directories, records, conflicts),
        )

    def check_binary(self, binary_name: str) -> ConflictGroup | None:
        """Analyze the path and return the conflict for one binary, if any."""
        _, records = self.collect()
        return ConflictDetector(self.platform).find_binary_conflict(records, binary_name)

    def find_conflicts(self) -> list[ConflictGroup]:
        """Analyze the path and return only the conflicts."""
        return self.analyze().conflicts
