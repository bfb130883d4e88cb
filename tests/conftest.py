"""
Shared fixtures for path-audit tests.
"""

import logging
import os
from pathlib import Path

import pytest

from path_audit import logging_config
from path_audit.environment import EnvironmentFacts, PlatformFacts
from path_audit.managers import classify_path
from path_audit.models import ExecutableRecord, VersionInfo


LINUX = PlatformFacts(os="linux", arch="x86_64")
WSL = PlatformFacts(os="linux", arch="x86_64", is_wsl=True, wsl_version="WSL2", wsl_distro="Ubuntu")


def make_record(path: str, order: int, version: str | None = None, resolved: str | None = None) -> ExecutableRecord:
    """Build a classified record for a path without touching the filesystem."""
    resolved = resolved or path
    name = os.path.basename(path)
    if name.lower().endswith(".exe"):
        name = name[:-4]
    return ExecutableRecord(
        name=name,
        full_path=path,
        resolved_path=resolved,
        is_symlink=resolved != path,
        size=0,
        modified_time=0,
        search_order=order,
        manager_classification=classify_path(resolved),
        version_info=VersionInfo(raw=version) if version else None,
    )


def make_executable(directory: Path, name: str, content: str = "#!/bin/sh\necho ok\n", mode: int = 0o755) -> Path:
    """Create a file with the given mode, creating its directory."""
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / name
    path.write_text(content)
    path.chmod(mode)
    return path


@pytest.fixture
def empty_env():
    """Environment with no variables set."""
    return EnvironmentFacts({})


@pytest.fixture
def linux_platform():
    return LINUX


@pytest.fixture
def wsl_platform():
    return WSL


@pytest.fixture
def bin_dirs(tmp_path):
    """
    Two search directories sharing a binary name.

    first/tool, first/only-first, second/tool, second/only-second
    """
    first = tmp_path / "first"
    second = tmp_path / "second"
    make_executable(first, "tool")
    make_executable(first, "only-first")
    make_executable(second, "tool", content="#!/bin/sh\necho other\n")
    make_executable(second, "only-second")
    return first, second


def is_root() -> bool:
    return hasattr(os, "geteuid") and os.geteuid() == 0


@pytest.fixture(autouse=True)
def reset_logging():
    """Undo setup_logging() so records reach caplog in later tests."""
    yield
    logger = logging.getLogger(logging_config.LOGGER_NAME)
    for handler in list(logger.handlers):
        handler.close()
    logger.handlers.clear()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
    logging_config._logger = None
