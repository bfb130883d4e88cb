"""
Conflict grouping.

Builds a name -> records multimap over every search directory, turns each name
with two or more records into a ConflictGroup, and orders the groups most
severe first.
"""

from __future__ import annotations

from typing import Sequence

from .categorizer import ConflictCategorizer
from .environment import PlatformFacts
from .models import SEVERITY_RANK, ConflictGroup, ExecutableRecord


def group_by_name(records: Sequence[ExecutableRecord]) -> dict[str, list[ExecutableRecord]]:
    """Group records by binary name, keeping first-encounter order of names."""
    index: dict[str, list[ExecutableRecord]] = {}
    for record in records:
        index.setdefault(record.name, []).append(record)
    return index


def describe_conflict(binary_name: str, instances: Sequence[ExecutableRecord]) -> str:
    """One-line description naming the active instance."""
    active = instances[0]
    shadowed = len(instances) - 1
    version = f" ({active.version})" if active.version else ""
    noun = "instance" if shadowed == 1 else "instances"
    return f"{binary_name} has {shadowed} shadowed {noun}. Active: {active.full_path}{version}"


class ConflictDetector:
    """
    Detects and categorizes name collisions on the search path.

    Attributes:
        categorizer: Categorizer used for category, severity and advice
    """

    def __init__(self, platform: PlatformFacts, categorizer: ConflictCategorizer | None = None):
        self.categorizer = categorizer or ConflictCategorizer(platform)

    def build_group(self, binary_name: str, instances: Sequence[ExecutableRecord]) -> ConflictGroup:
        """Categorize one group of same-named records."""
        ordered = tuple(sorted(instances, key=lambda r: r.search_order))
        category = self.categorizer.categorize(ordered)
        return ConflictGroup(
            binary_name=binary_name,
            instances=ordered,
            category=category,
            severity=self.categorizer.assess_severity(category, ordered),
            description=describe_conflict(binary_name, ordered),
            recommendation=self.categorizer.generate_recommendation(category, binary_name, ordered),
        )

    def detect_conflicts(self, records: Sequence[ExecutableRecord]) -> list[ConflictGroup]:
        """
        Find every binary name provided by more than one record.

        Args:
            records: All records of the run, in discovery order

        Returns:
            Conflict groups sorted by descending severity; ties keep
            encounter order
        """
        conflicts = [
            self.build_group(name, instances)
            for name, instances in group_by_name(records).items()
            if len(instances) > 1
        ]
        conflicts.sort(key=lambda c: SEVERITY_RANK[c.severity], reverse=True)
        return conflicts

    def find_binary_conflict(self, records: Sequence[ExecutableRecord], binary_name: str) -> ConflictGroup | None:
        """Return the conflict for one binary name, if there is one."""
        instances = [r for r in records if r.name == binary_name]
        if len(instances) < 2:
            return None
        return self.build_group(binary_name, instances)
