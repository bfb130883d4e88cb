"""
Data model for a PATH audit run.

One run owns a single list of ExecutableRecord objects. SearchDirectory refers
to its records by index and ConflictGroup holds references to the same objects,
so each enrichment stage mutates one source of truth.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Sequence

from .environment import PlatformFacts


# Manager kinds
KIND_VERSION_MANAGER = "version-manager"
KIND_PACKAGE_MANAGER = "package-manager"
KIND_SYSTEM = "system"
KIND_MANUAL = "manual"
KIND_UNKNOWN = "unknown"

MANAGER_KINDS = (
    KIND_VERSION_MANAGER,
    KIND_PACKAGE_MANAGER,
    KIND_SYSTEM,
    KIND_MANUAL,
    KIND_UNKNOWN,
)

# Conflict categories
CATEGORY_WSL_VS_WINDOWS = "wsl-vs-windows"
CATEGORY_MULTIPLE_VERSION_MANAGERS = "multiple-version-managers"
CATEGORY_VERSION_MANAGER_VS_SYSTEM = "version-manager-vs-system"
CATEGORY_PACKAGE_MANAGER_VS_SYSTEM = "package-manager-vs-system"
CATEGORY_DUPLICATE_VERSIONS = "duplicate-versions"
CATEGORY_SHADOWED_BINARY = "shadowed-binary"
CATEGORY_OTHER = "other"

CATEGORIES = (
    CATEGORY_WSL_VS_WINDOWS,
    CATEGORY_MULTIPLE_VERSION_MANAGERS,
    CATEGORY_VERSION_MANAGER_VS_SYSTEM,
    CATEGORY_PACKAGE_MANAGER_VS_SYSTEM,
    CATEGORY_DUPLICATE_VERSIONS,
    CATEGORY_SHADOWED_BINARY,
    CATEGORY_OTHER,
)

CATEGORY_LABELS = {
    CATEGORY_WSL_VS_WINDOWS: "WSL vs Windows",
    CATEGORY_MULTIPLE_VERSION_MANAGERS: "Multiple Version Managers",
    CATEGORY_VERSION_MANAGER_VS_SYSTEM: "Version Manager vs System",
    CATEGORY_PACKAGE_MANAGER_VS_SYSTEM: "Package Manager vs System",
    CATEGORY_DUPLICATE_VERSIONS: "Duplicate Versions",
    CATEGORY_SHADOWED_BINARY: "Shadowed Binary",
    CATEGORY_OTHER: "Other",
}

# Severities, lowest to highest
SEVERITY_INFO = "info"
SEVERITY_LOW = "low"
SEVERITY_MEDIUM = "medium"
SEVERITY_HIGH = "high"
SEVERITY_CRITICAL = "critical"

SEVERITIES = (
    SEVERITY_INFO,
    SEVERITY_LOW,
    SEVERITY_MEDIUM,
    SEVERITY_HIGH,
    SEVERITY_CRITICAL,
)

SEVERITY_RANK = {severity: rank for rank, severity in enumerate(SEVERITIES)}


def severity_at_least(severity: str, minimum: str) -> bool:
    """Check whether severity is at or above minimum."""
    return SEVERITY_RANK[severity] >= SEVERITY_RANK[minimum]


@dataclass(frozen=True)
class ManagerClassification:
    """
    Install mechanism that produced an executable.

    Attributes:
        kind: One of MANAGER_KINDS
        name: Manager name (e.g., "nvm", "Homebrew", "System")
        description: Human-readable description
    """
    kind: str
    name: str
    description: str

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {"kind": self.kind, "name": self.name, "description": self.description}

    @staticmethod
    def from_dict(data: dict[str, Any]) -> ManagerClassification:
        """Create ManagerClassification from dictionary."""
        return ManagerClassification(
            kind=data.get("kind", KIND_UNKNOWN),
            name=data.get("name", ""),
            description=data.get("description", ""),
        )


@dataclass(frozen=True)
class VersionInfo:
    """
    Version reported for an executable by the enrichment collaborator.

    Attributes:
        raw: Version string as extracted
        parsed: Normalized version, if the raw string is a valid version
        extraction_method: How the version was obtained
    """
    raw: str
    parsed: str | None = None
    extraction_method: str = ""

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "raw": self.raw,
            "parsed": self.parsed,
            "extraction_method": self.extraction_method,
        }

    @staticmethod
    def from_dict(data: dict[str, Any]) -> VersionInfo:
        """Create VersionInfo from dictionary."""
        return VersionInfo(
            raw=data.get("raw", ""),
            parsed=data.get("parsed"),
            extraction_method=data.get("extraction_method", ""),
        )


@dataclass
class ExecutableRecord:
    """
    A single executable found in a search directory.

    Attributes:
        name: Binary name (Windows executable extension stripped on Windows)
        full_path: Path where the executable was found
        resolved_path: Canonical target if a symlink resolved, else full_path
        is_symlink: Whether full_path is a symbolic link
        size: File size in bytes
        modified_time: Modification time as Unix seconds
        search_order: Order of the directory it was found in
        symlink_target: Raw target text of the first link hop
        manager_classification: Install mechanism, if one was recognized
        version_info: Version, if the enrichment collaborator supplied one
        content_hash: Hex digest of the leading bytes, if hashing was requested
    """
    name: str
    full_path: str
    resolved_path: str
    is_symlink: bool
    size: int
    modified_time: int
    search_order: int
    symlink_target: str | None = None
    manager_classification: ManagerClassification | None = None
    version_info: VersionInfo | None = None
    content_hash: str | None = None

    @property
    def version(self) -> str | None:
        """Raw version string, if known."""
        return self.version_info.raw if self.version_info else None

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "name": self.name,
            "full_path": self.full_path,
            "resolved_path": self.resolved_path,
            "is_symlink": self.is_symlink,
            "symlink_target": self.symlink_target,
            "size": self.size,
            "modified_time": self.modified_time,
            "search_order": self.search_order,
            "manager_classification": (
                self.manager_classification.to_dict() if self.manager_classification else None
            ),
            "version_info": self.version_info.to_dict() if self.version_info else None,
            "content_hash": self.content_hash,
        }

    @staticmethod
    def from_dict(data: dict[str, Any]) -> ExecutableRecord:
        """Create ExecutableRecord from dictionary."""
        manager = data.get("manager_classification")
        version = data.get("version_info")
        full_path = data["full_path"]
        return ExecutableRecord(
            name=data["name"],
            full_path=full_path,
            resolved_path=data.get("resolved_path", full_path),
            is_symlink=data.get("is_symlink", False),
            symlink_target=data.get("symlink_target"),
            size=data.get("size", 0),
            modified_time=data.get("modified_time", 0),
            search_order=data["search_order"],
            manager_classification=ManagerClassification.from_dict(manager) if manager else None,
            version_info=VersionInfo.from_dict(version) if version else None,
            content_hash=data.get("content_hash"),
        )


@dataclass
class SearchDirectory:
    """
    One entry of the search path.

    Attributes:
        path: Absolute (canonical when possible) directory path
        order: Position in the raw path list; lower wins
        exists: Whether the directory exists
        accessible: Whether the directory could be listed
        record_indices: Indices of this directory's records in the run's record list
    """
    path: str
    order: int
    exists: bool
    accessible: bool
    record_indices: list[int] = field(default_factory=list)

    def executables(self, records: Sequence[ExecutableRecord]) -> list[ExecutableRecord]:
        """Return this directory's records from the run's record list."""
        return [records[i] for i in self.record_indices]


@dataclass(frozen=True)
class ConflictGroup:
    """
    Executables sharing one name across search directories.

    Attributes:
        binary_name: Shared binary name
        instances: Records sorted by search order; the first one runs
        category: One of CATEGORIES
        severity: One of SEVERITIES
        description: One-line explanation
        recommendation: Suggested fix, for categories that have one
    """
    binary_name: str
    instances: tuple[ExecutableRecord, ...]
    category: str
    severity: str
    description: str
    recommendation: str | None = None

    @property
    def active_instance(self) -> ExecutableRecord:
        """The executable that actually runs."""
        return self.instances[0]

    @property
    def shadowed_instances(self) -> tuple[ExecutableRecord, ...]:
        """Executables hidden by the active one."""
        return self.instances[1:]

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "binary_name": self.binary_name,
            "instances": [i.to_dict() for i in self.instances],
            "active_instance": self.active_instance.to_dict(),
            "category": self.category,
            "severity": self.severity,
            "description": self.description,
            "recommendation": self.recommendation,
        }


@dataclass(frozen=True)
class Summary:
    """
    Counts describing a scan.

    Attributes:
        total_directories: Number of search path entries
        total_executables: Number of executables discovered
        unique_executables: Number of distinct binary names
        total_conflicts: Number of conflict groups
        conflicts_by_category: Conflict count per category
        conflicts_by_severity: Conflict count per severity
    """
    total_directories: int = 0
    total_executables: int = 0
    unique_executables: int = 0
    total_conflicts: int = 0
    conflicts_by_category: dict[str, int] = field(default_factory=dict)
    conflicts_by_severity: dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "total_directories": self.total_directories,
            "total_executables": self.total_executables,
            "unique_executables": self.unique_executables,
            "total_conflicts": self.total_conflicts,
            "conflicts_by_category": dict(self.conflicts_by_category),
            "conflicts_by_severity": dict(self.conflicts_by_severity),
        }

    @staticmethod
    def from_dict(data: dict[str, Any]) -> Summary:
        """Create Summary from dictionary."""
        return Summary(
            total_directories=data.get("total_directories", 0),
            total_executables=data.get("total_executables", 0),
            unique_executables=data.get("unique_executables", 0),
            total_conflicts=data.get("total_conflicts", 0),
            conflicts_by_category=dict(data.get("conflicts_by_category", {})),
            conflicts_by_severity=dict(data.get("conflicts_by_severity", {})),
        )


def build_summary(
    directories: Sequence[SearchDirectory],
    records: Sequence[ExecutableRecord],
    conflicts: Sequence[ConflictGroup],
) -> Summary:
    """
    Count directories, executables and conflicts.

    Args:
        directories: Search directories of the run
        records: All records of the run
        conflicts: Conflict groups to count

    Returns:
        Summary with per-category and per-severity counts
    """
    by_category: dict[str, int] = {}
    by_severity: dict[str, int] = {}
    for conflict in conflicts:
        by_category[conflict.category] = by_category.get(conflict.category, 0) + 1
        by_severity[conflict.severity] = by_severity.get(conflict.severity, 0) + 1

    return Summary(
        total_directories=len(directories),
        total_executables=len(records),
        unique_executables=len({r.name for r in records}),
        total_conflicts=len(conflicts),
        conflicts_by_category=by_category,
        conflicts_by_severity=by_severity,
    )


@dataclass
class ScanResult:
    """
    Complete result of one audit run.

    Attributes:
        scan_time: UTC timestamp (ISO 8601, "Z" suffix)
        platform: Platform facts the run was evaluated against
        directories: Search directories in path order
        records: All discovered executables (single owned collection)
        conflicts: Conflict groups, most severe first
        summary: Counts
    """
    scan_time: str
    platform: PlatformFacts
    directories: list[SearchDirectory]
    records: list[ExecutableRecord]
    conflicts: list[ConflictGroup]
    summary: Summary

    def executables_named(self, binary_name: str) -> list[ExecutableRecord]:
        """Return every record with the given name, in search order."""
        return [r for r in self.records if r.name == binary_name]

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "scan_time": self.scan_time,
            "platform": self.platform.to_dict(),
            "directories": [
                {
                    "path": d.path,
                    "order": d.order,
                    "exists": d.exists,
                    "accessible": d.accessible,
                    "executables": [r.to_dict() for r in d.executables(self.records)],
                }
                for d in self.directories
            ],
            "conflicts": [c.to_dict() for c in self.conflicts],
            "summary": self.summary.to_dict(),
        }

    @staticmethod
    def from_dict(data: dict[str, Any]) -> ScanResult:
        """
        Rebuild a ScanResult from its dictionary form.

        Conflict instances are re-linked to the loaded records by full path.
        """
        records: list[ExecutableRecord] = []
        directories: list[SearchDirectory] = []
        for entry in data.get("directories", []):
            directory = SearchDirectory(
                path=entry["path"],
                order=entry["order"],
                exists=entry.get("exists", False),
                accessible=entry.get("accessible", False),
            )
            for record_data in entry.get("executables", []):
                directory.record_indices.append(len(records))
                records.append(ExecutableRecord.from_dict(record_data))
            directories.append(directory)

        by_path = {r.full_path: r for r in records}
        conflicts = []
        for conflict_data in data.get("conflicts", []):
            instances = tuple(
                by_path.get(i["full_path"]) or ExecutableRecord.from_dict(i)
                for i in conflict_data.get("instances", [])
            )
            conflicts.append(ConflictGroup(
                binary_name=conflict_data["binary_name"],
                instances=instances,
                category=conflict_data["category"],
                severity=conflict_data["severity"],
                description=conflict_data.get("description", ""),
                recommendation=conflict_data.get("recommendation"),
            ))

        return ScanResult(
            scan_time=data.get("scan_time", ""),
            platform=PlatformFacts.from_dict(data.get("platform", {})),
            directories=directories,
            records=records,
            conflicts=conflicts,
            summary=Summary.from_dict(data.get("summary", {})),
        )
