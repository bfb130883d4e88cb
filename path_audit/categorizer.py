"""
Conflict categorization, severity and recommendations.

Categories are decided by an ordered ladder of (category, predicate) rules;
the first predicate that holds wins:
1. WSL vs Windows (WSL platforms only)
2. Multiple version managers
3. Version manager vs system
4. Package manager vs system
5. Duplicate versions
6. Shadowed binary (default)
"""

from __future__ import annotations

import re
from typing import Callable, Sequence

from .environment import PlatformFacts
from .models import (
    CATEGORY_DUPLICATE_VERSIONS,
    CATEGORY_MULTIPLE_VERSION_MANAGERS,
    CATEGORY_PACKAGE_MANAGER_VS_SYSTEM,
    CATEGORY_SHADOWED_BINARY,
    CATEGORY_VERSION_MANAGER_VS_SYSTEM,
    CATEGORY_WSL_VS_WINDOWS,
    KIND_PACKAGE_MANAGER,
    KIND_SYSTEM,
    KIND_VERSION_MANAGER,
    SEVERITY_CRITICAL,
    SEVERITY_HIGH,
    SEVERITY_INFO,
    SEVERITY_LOW,
    SEVERITY_MEDIUM,
    ExecutableRecord,
)
from .platforms import (
    convert_wsl_to_windows_path,
    is_windows_executable_in_wsl,
    is_windows_path_in_wsl,
    is_wsl_native_path,
)


MAJOR_VERSION_RE = re.compile(r"^[vV]?(\d+)")

Predicate = Callable[[Sequence[ExecutableRecord], PlatformFacts], bool]


def _has_kind(instances: Sequence[ExecutableRecord], kind: str) -> bool:
    return any(
        i.manager_classification is not None and i.manager_classification.kind == kind
        for i in instances
    )


def is_wsl_vs_windows(instances: Sequence[ExecutableRecord], platform: PlatformFacts) -> bool:
    """WSL-native and Windows-side copies of the same binary on a WSL host."""
    if not platform.is_wsl or len(instances) < 2:
        return False
    has_wsl = any(is_wsl_native_path(i.resolved_path) for i in instances)
    has_windows = any(
        is_windows_path_in_wsl(i.resolved_path) or is_windows_executable_in_wsl(i.resolved_path)
        for i in instances
    )
    return has_wsl and has_windows


def is_multiple_version_managers(instances: Sequence[ExecutableRecord], platform: PlatformFacts) -> bool:
    """At least two different version managers provide the binary."""
    names = {
        i.manager_classification.name
        for i in instances
        if i.manager_classification is not None
        and i.manager_classification.kind == KIND_VERSION_MANAGER
    }
    return len(names) > 1


def is_version_manager_vs_system(instances: Sequence[ExecutableRecord], platform: PlatformFacts) -> bool:
    """A version manager copy next to a system copy."""
    return _has_kind(instances, KIND_VERSION_MANAGER) and _has_kind(instances, KIND_SYSTEM)


def is_package_manager_vs_system(instances: Sequence[ExecutableRecord], platform: PlatformFacts) -> bool:
    """A package manager copy next to a system copy."""
    return _has_kind(instances, KIND_PACKAGE_MANAGER) and _has_kind(instances, KIND_SYSTEM)


def has_different_versions(instances: Sequence[ExecutableRecord], platform: PlatformFacts) -> bool:
    """At least two distinct raw versions among instances with a known version."""
    versions = {i.version for i in instances if i.version is not None}
    return len(versions) > 1


CATEGORY_RULES: tuple[tuple[str, Predicate], ...] = (
    (CATEGORY_WSL_VS_WINDOWS, is_wsl_vs_windows),
    (CATEGORY_MULTIPLE_VERSION_MANAGERS, is_multiple_version_managers),
    (CATEGORY_VERSION_MANAGER_VS_SYSTEM, is_version_manager_vs_system),
    (CATEGORY_PACKAGE_MANAGER_VS_SYSTEM, is_package_manager_vs_system),
    (CATEGORY_DUPLICATE_VERSIONS, has_different_versions),
)


def extract_major_version(version: str) -> int | None:
    """
    Extract the major version number.

    "3.11.0" -> 3, "v18.0.0" -> 18, "unknown" -> None
    """
    m = MAJOR_VERSION_RE.match(version.strip())
    return int(m.group(1)) if m else None


def has_major_version_difference(instances: Sequence[ExecutableRecord]) -> bool:
    """Check whether parsable major versions differ; fewer than two means no."""
    majors = [
        major
        for major in (extract_major_version(i.version) for i in instances if i.version is not None)
        if major is not None
    ]
    if len(majors) < 2:
        return False
    return len(set(majors)) > 1


def are_likely_same_binary(instances: Sequence[ExecutableRecord]) -> bool:
    """Check whether every instance resolves to one canonical path."""
    if len(instances) < 2:
        return False
    return len({i.resolved_path for i in instances}) == 1


class ConflictCategorizer:
    """
    Categorizes conflict groups for one platform.

    Attributes:
        platform: Platform facts the predicates are evaluated against
        rules: Ordered (category, predicate) ladder
    """

    def __init__(
        self,
        platform: PlatformFacts,
        rules: Sequence[tuple[str, Predicate]] = CATEGORY_RULES,
    ):
        self.platform = platform
        self.rules = tuple(rules)

    def categorize(self, instances: Sequence[ExecutableRecord]) -> str:
        """Return the first category whose predicate holds."""
        for category, predicate in self.rules:
            if predicate(instances, self.platform):
                return category
        return CATEGORY_SHADOWED_BINARY

    def assess_severity(self, category: str, instances: Sequence[ExecutableRecord]) -> str:
        """
        Rate a categorized conflict.

        Args:
            category: Category returned by categorize()
            instances: Group instances

        Returns:
            Severity string
        """
        if category == CATEGORY_WSL_VS_WINDOWS:
            return SEVERITY_HIGH
        if category == CATEGORY_MULTIPLE_VERSION_MANAGERS:
            return SEVERITY_MEDIUM
        if category == CATEGORY_VERSION_MANAGER_VS_SYSTEM:
            return SEVERITY_CRITICAL if has_major_version_difference(instances) else SEVERITY_MEDIUM
        if category == CATEGORY_PACKAGE_MANAGER_VS_SYSTEM:
            return SEVERITY_LOW
        if category == CATEGORY_DUPLICATE_VERSIONS:
            return SEVERITY_HIGH if has_major_version_difference(instances) else SEVERITY_LOW
        if category == CATEGORY_SHADOWED_BINARY:
            return SEVERITY_INFO if are_likely_same_binary(instances) else SEVERITY_MEDIUM
        return SEVERITY_LOW

    def generate_recommendation(
        self,
        category: str,
        binary_name: str,
        instances: Sequence[ExecutableRecord],
    ) -> str | None:
        """Suggest a fix; categories without advice return None."""
        if category == CATEGORY_WSL_VS_WINDOWS:
            windows_locations = [
                convert_wsl_to_windows_path(i.resolved_path)
                for i in instances
                if is_windows_path_in_wsl(i.resolved_path)
            ]
            where = next((w for w in windows_locations if w), None)
            located = f" (Windows copy: {where})" if where else ""
            return (
                f"{binary_name} is on both the WSL and the Windows PATH{located}. "
                f"Use the WSL version only, or stop appending Windows paths to the WSL PATH "
                f"(appendWindowsPath=false in /etc/wsl.conf)."
            )
        if category == CATEGORY_MULTIPLE_VERSION_MANAGERS:
            return (
                f"Multiple version managers are managing {binary_name}. "
                f"Consolidate to a single version manager for consistency."
            )
        if category == CATEGORY_VERSION_MANAGER_VS_SYSTEM:
            manager = next(
                (
                    i.manager_classification.name
                    for i in instances
                    if i.manager_classification is not None
                    and i.manager_classification.kind == KIND_VERSION_MANAGER
                ),
                "version manager",
            )
            return (
                f"Use {manager} consistently or remove the system installation of "
                f"{binary_name} to avoid confusion."
            )
        if category == CATEGORY_DUPLICATE_VERSIONS:
            return f"Multiple versions of {binary_name} found. Make sure the active one is the version you intend to use."
        return None
