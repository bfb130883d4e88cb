"""
Install mechanism classification.

A fixed, ordered rule table is evaluated top to bottom against the resolved
path; the first rule with a matching pattern wins. Order:
1. Version managers (nvm, pyenv, rbenv, rustup, asdf, sdkman)
2. Package managers (Homebrew, Chocolatey, Scoop)
3. System prefixes

A path no rule matches is a manual install unless it looks system-owned
("usr/" or "Windows" in it), in which case it stays unclassified.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Sequence

from .common import vlog
from .environment import EnvironmentFacts
from .models import (
    KIND_MANUAL,
    KIND_PACKAGE_MANAGER,
    KIND_SYSTEM,
    KIND_VERSION_MANAGER,
    ExecutableRecord,
    ManagerClassification,
)


@dataclass(frozen=True)
class ManagerRule:
    """
    One classification rule.

    Attributes:
        kind: Manager kind assigned on match
        name: Manager name
        description: Human-readable description
        patterns: Regular expressions searched in the resolved path
        env_vars: Variables that indicate the manager is configured
    """
    kind: str
    name: str
    description: str
    patterns: tuple[str, ...]
    env_vars: tuple[str, ...] = ()

    def matches(self, path: str) -> bool:
        """Check whether any pattern matches the path."""
        return any(re.search(pattern, path) for pattern in self.patterns)

    def classification(self) -> ManagerClassification:
        """Classification produced by this rule."""
        return ManagerClassification(kind=self.kind, name=self.name, description=self.description)


MANAGER_RULES = (
    # Version managers
    ManagerRule(
        kind=KIND_VERSION_MANAGER,
        name="nvm",
        description="Node Version Manager",
        patterns=(r"\.nvm/", r"/nvm/"),
        env_vars=("NVM_DIR",),
    ),
    ManagerRule(
        kind=KIND_VERSION_MANAGER,
        name="pyenv",
        description="Python Version Manager",
        patterns=(r"\.pyenv/", r"/pyenv/"),
        env_vars=("PYENV_ROOT",),
    ),
    ManagerRule(
        kind=KIND_VERSION_MANAGER,
        name="rbenv",
        description="Ruby Version Manager",
        patterns=(r"\.rbenv/", r"/rbenv/"),
        env_vars=("RBENV_ROOT",),
    ),
    ManagerRule(
        kind=KIND_VERSION_MANAGER,
        name="rustup",
        description="Rust Toolchain Manager",
        patterns=(r"\.cargo/bin", r"\.rustup/"),
        env_vars=("RUSTUP_HOME", "CARGO_HOME"),
    ),
    ManagerRule(
        kind=KIND_VERSION_MANAGER,
        name="asdf",
        description="Multiple Runtime Version Manager",
        patterns=(r"\.asdf/",),
        env_vars=("ASDF_DIR", "ASDF_DATA_DIR"),
    ),
    ManagerRule(
        kind=KIND_VERSION_MANAGER,
        name="sdkman",
        description="Software Development Kit Manager",
        patterns=(r"\.sdkman/",),
        env_vars=("SDKMAN_DIR",),
    ),
    # Package managers
    ManagerRule(
        kind=KIND_PACKAGE_MANAGER,
        name="Homebrew",
        description="Package Manager for macOS",
        patterns=(r"/opt/homebrew/", r"/usr/local/Cellar/", r"Homebrew/"),
        env_vars=("HOMEBREW_PREFIX",),
    ),
    ManagerRule(
        kind=KIND_PACKAGE_MANAGER,
        name="Chocolatey",
        description="Package Manager for Windows",
        patterns=(r"chocolatey/", r"\\chocolatey\\"),
        env_vars=("ChocolateyInstall",),
    ),
    ManagerRule(
        kind=KIND_PACKAGE_MANAGER,
        name="Scoop",
        description="Package Manager for Windows",
        patterns=(r"\\scoop\\", r"/scoop/"),
        env_vars=("SCOOP",),
    ),
    # System paths
    ManagerRule(
        kind=KIND_SYSTEM,
        name="System",
        description="System Installation",
        patterns=(
            r"^/usr/bin",
            r"^/usr/local/bin",
            r"^/bin",
            r"^/sbin",
            r"^C:\\Windows\\",
            r"^C:\\Program Files\\",
            r"^/System/",
        ),
    ),
)

MANUAL_INSTALL = ManagerClassification(
    kind=KIND_MANUAL,
    name="Manual",
    description="Manually Installed",
)


def classify_path(path: str, rules: Sequence[ManagerRule] = MANAGER_RULES) -> ManagerClassification | None:
    """
    Classify the install mechanism behind a resolved path.

    Args:
        path: Resolved executable path
        rules: Ordered rule table

    Returns:
        First matching classification, MANUAL_INSTALL for non-system-looking
        paths, or None
    """
    for rule in rules:
        if rule.matches(path):
            return rule.classification()

    if "usr/" not in path and "Windows" not in path:
        return MANUAL_INSTALL

    return None


class ManagerClassifier:
    """
    Classifies records by install mechanism.

    Environment facts are only reported through configured_managers(); they
    never change a classification.
    """

    def __init__(
        self,
        env: EnvironmentFacts | None = None,
        rules: Sequence[ManagerRule] = MANAGER_RULES,
    ):
        self.env = env if env is not None else EnvironmentFacts.from_os()
        self.rules = tuple(rules)

    def classify(self, path: str) -> ManagerClassification | None:
        """Classify one resolved path."""
        return classify_path(path, self.rules)

    def configured_managers(self) -> list[str]:
        """Names of managers whose environment variables are set."""
        return [
            rule.name
            for rule in self.rules
            if any(self.env.has(var) for var in rule.env_vars)
        ]

    def classify_records(self, records: Sequence[ExecutableRecord], verbose: bool = False) -> None:
        """Set manager_classification on every record from its resolved path."""
        configured = self.configured_managers()
        if configured:
            vlog(f"Managers configured in environment: {', '.join(configured)}", verbose)

        for record in records:
            record.manager_classification = self.classify(record.resolved_path)
