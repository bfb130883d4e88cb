"""
Tests for conflict grouping (path_audit/conflicts.py).
"""

from path_audit.conflicts import ConflictDetector, describe_conflict, group_by_name
from path_audit.models import (
    CATEGORY_PACKAGE_MANAGER_VS_SYSTEM,
    CATEGORY_SHADOWED_BINARY,
    CATEGORY_VERSION_MANAGER_VS_SYSTEM,
    CATEGORY_WSL_VS_WINDOWS,
    SEVERITY_CRITICAL,
    SEVERITY_HIGH,
    SEVERITY_LOW,
    SEVERITY_MEDIUM,
    SEVERITY_RANK,
)

from conftest import LINUX, WSL, make_record


class TestGroupByName:
    """Tests for group_by_name()."""

    def test_keeps_encounter_order(self):
        """Test that names appear in first-encounter order."""
        records = [
            make_record("/a/zeta", 0),
            make_record("/a/alpha", 0),
            make_record("/b/zeta", 1),
        ]
        groups = group_by_name(records)
        assert list(groups) == ["zeta", "alpha"]
        assert [r.full_path for r in groups["zeta"]] == ["/a/zeta", "/b/zeta"]


class TestDescribeConflict:
    """Tests for describe_conflict()."""

    def test_single_shadowed_with_version(self):
        instances = [make_record("/usr/bin/node", 0, version="18.0.0"), make_record("/opt/node", 1)]
        assert describe_conflict("node", instances) == (
            "node has 1 shadowed instance. Active: /usr/bin/node (18.0.0)"
        )

    def test_plural_without_version(self):
        instances = [make_record(f"/d{i}/node", i) for i in range(3)]
        assert describe_conflict("node", instances) == "node has 2 shadowed instances. Active: /d0/node"


class TestConflictDetector:
    """Tests for ConflictDetector."""

    def test_unique_names_are_not_conflicts(self):
        """Test that names found once produce no group."""
        records = [make_record("/usr/bin/a", 0), make_record("/usr/bin/b", 0)]
        assert ConflictDetector(LINUX).detect_conflicts(records) == []

    def test_active_instance_is_lowest_order(self):
        """Test that the earliest directory wins."""
        records = [make_record("/usr/bin/python", 0), make_record("/usr/local/bin/python", 1)]
        conflict = ConflictDetector(LINUX).detect_conflicts(records)[0]
        assert conflict.active_instance.full_path == "/usr/bin/python"
        assert [i.full_path for i in conflict.shadowed_instances] == ["/usr/local/bin/python"]
        assert conflict.category == CATEGORY_SHADOWED_BINARY
        assert conflict.severity == SEVERITY_MEDIUM

    def test_instances_sorted_by_search_order(self):
        """Test that instances are ordered by search order, not input order."""
        records = [make_record("/second/tool", 5), make_record("/first/tool", 2)]
        conflict = ConflictDetector(LINUX).build_group("tool", records)
        assert [i.search_order for i in conflict.instances] == [2, 5]

    def test_groups_share_record_objects(self):
        """Test that conflict instances are the run's own records."""
        records = [make_record("/usr/bin/node", 0), make_record("/opt/homebrew/bin/node", 1)]
        conflict = ConflictDetector(LINUX).detect_conflicts(records)[0]
        assert conflict.instances[0] is records[0]
        assert conflict.instances[1] is records[1]

    def test_package_manager_vs_system_same_version(self):
        """Test /usr/bin before /opt/homebrew/bin with equal versions."""
        records = [
            make_record("/usr/bin/node", 0, version="20.1.0"),
            make_record("/opt/homebrew/bin/node", 1, version="20.1.0"),
        ]
        conflict = ConflictDetector(LINUX).detect_conflicts(records)[0]
        assert conflict.category == CATEGORY_PACKAGE_MANAGER_VS_SYSTEM
        assert conflict.severity == SEVERITY_LOW
        assert conflict.active_instance.full_path == "/usr/bin/node"
        assert conflict.recommendation is None

    def test_wsl_scenario(self):
        """Test a Linux-side nvm node shadowing a Windows node.exe."""
        records = [
            make_record("/home/user/.nvm/versions/node/v18/bin/node", 0),
            make_record("/mnt/c/Windows/system32/node.exe", 1),
        ]
        conflict = ConflictDetector(WSL).detect_conflicts(records)[0]
        assert conflict.category == CATEGORY_WSL_VS_WINDOWS
        assert conflict.severity == SEVERITY_HIGH
        assert conflict.recommendation is not None

    def test_sorted_by_severity_descending_and_stable(self):
        """Test final ordering: most severe first, ties in encounter order."""
        records = [
            # shadowed-binary, medium
            make_record("/usr/bin/aaa", 0),
            # package-manager-vs-system, low
            make_record("/usr/bin/node", 0),
            # version-manager-vs-system, critical
            make_record("/usr/bin/python", 0, version="2.7.0"),
            # shadowed-binary, medium (ties with aaa)
            make_record("/usr/bin/zzz", 0),
            make_record("/usr/local/bin/aaa", 1),
            make_record("/opt/homebrew/bin/node", 1),
            make_record("/home/u/.pyenv/versions/3.11.0/bin/python", 1, version="3.11.0"),
            make_record("/usr/local/bin/zzz", 1),
        ]
        conflicts = ConflictDetector(LINUX).detect_conflicts(records)
        assert [c.binary_name for c in conflicts] == ["python", "aaa", "zzz", "node"]
        assert conflicts[0].category == CATEGORY_VERSION_MANAGER_VS_SYSTEM
        assert conflicts[0].severity == SEVERITY_CRITICAL
        ranks = [SEVERITY_RANK[c.severity] for c in conflicts]
        assert ranks == sorted(ranks, reverse=True)

    def test_find_binary_conflict(self):
        """Test looking up one binary's conflict."""
        records = [
            make_record("/usr/bin/node", 0),
            make_record("/opt/homebrew/bin/node", 1),
            make_record("/usr/bin/git", 0),
        ]
        detector = ConflictDetector(LINUX)
        assert detector.find_binary_conflict(records, "node").binary_name == "node"
        assert detector.find_binary_conflict(records, "git") is None
        assert detector.find_binary_conflict(records, "missing") is None
