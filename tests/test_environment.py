"""
Tests for environment and platform detection (path_audit/environment.py).
"""

from unittest.mock import patch

import pytest

from path_audit.environment import (
    EnvironmentFacts,
    PlatformFacts,
    current_os_name,
    detect_platform,
    detect_wsl,
)


class TestEnvironmentFacts:
    """Tests for EnvironmentFacts."""

    def test_get_and_has(self):
        env = EnvironmentFacts({"A": "1"})
        assert env.get("A") == "1"
        assert env.get("B") is None
        assert env.get("B", "x") == "x"
        assert env.has("A") is True
        assert env.has("B") is False

    def test_case_sensitive_by_default(self):
        env = EnvironmentFacts({"Path": "x"})
        assert env.get("PATH") is None

    def test_case_insensitive(self):
        env = EnvironmentFacts({"Path": "x"}, case_insensitive=True)
        assert env.get("PATH") == "x"

    def test_from_os(self, monkeypatch):
        monkeypatch.setenv("PATH_AUDIT_TEST_VAR", "yes")
        assert EnvironmentFacts.from_os().get("PATH_AUDIT_TEST_VAR") == "yes"


class TestDetectWsl:
    """Tests for detect_wsl()."""

    def test_wsl2_from_proc_version(self, tmp_path, empty_env):
        proc = tmp_path / "version"
        proc.write_text("Linux version 5.15.90.1-microsoft-standard-WSL2 (gcc)")
        assert detect_wsl(empty_env, proc_version=str(proc), mount_probe=str(tmp_path / "none")) == (
            True, "WSL2", None,
        )

    def test_wsl1_from_proc_version(self, tmp_path, empty_env):
        proc = tmp_path / "version"
        proc.write_text("Linux version 4.4.0-19041-Microsoft (Microsoft@Microsoft.com)")
        is_wsl, version, _ = detect_wsl(empty_env, proc_version=str(proc), mount_probe=str(tmp_path / "none"))
        assert is_wsl is True
        assert version == "WSL1"

    def test_distro_name_reported(self, tmp_path):
        proc = tmp_path / "version"
        proc.write_text("Linux version 5.15-microsoft-standard-WSL2")
        env = EnvironmentFacts({"WSL_DISTRO_NAME": "Ubuntu"})
        assert detect_wsl(env, proc_version=str(proc))[2] == "Ubuntu"

    def test_distro_variable_alone(self, tmp_path):
        env = EnvironmentFacts({"WSL_DISTRO_NAME": "Debian"})
        assert detect_wsl(env, proc_version=str(tmp_path / "missing")) == (True, None, "Debian")

    def test_mount_probe_fallback(self, tmp_path, empty_env):
        proc = tmp_path / "version"
        proc.write_text("Linux version 6.1.0-generic")
        mount = tmp_path / "c"
        mount.mkdir()
        assert detect_wsl(empty_env, proc_version=str(proc), mount_probe=str(mount)) == (True, None, None)

    def test_plain_linux(self, tmp_path, empty_env):
        proc = tmp_path / "version"
        proc.write_text("Linux version 6.1.0-generic")
        assert detect_wsl(empty_env, proc_version=str(proc), mount_probe=str(tmp_path / "none")) == (
            False, None, None,
        )


class TestPlatformFacts:
    """Tests for PlatformFacts and detect_platform()."""

    def test_is_windows(self):
        assert PlatformFacts(os="windows", arch="AMD64").is_windows is True
        assert PlatformFacts(os="linux", arch="x86_64").is_windows is False

    def test_str(self):
        assert str(PlatformFacts(os="linux", arch="x86_64")) == "linux (x86_64)"
        wsl = PlatformFacts(os="linux", arch="x86_64", is_wsl=True, wsl_version="WSL2", wsl_distro="Ubuntu")
        assert str(wsl) == "linux (x86_64) WSL: WSL2, Ubuntu"

    def test_dict_round_trip(self):
        facts = PlatformFacts(os="linux", arch="arm64", is_wsl=True, wsl_version="WSL1")
        assert PlatformFacts.from_dict(facts.to_dict()) == facts

    def test_immutable(self):
        facts = PlatformFacts(os="linux", arch="x86_64")
        with pytest.raises(AttributeError):
            facts.os = "windows"

    @pytest.mark.parametrize("sys_platform,expected", [
        ("win32", "windows"),
        ("darwin", "macos"),
        ("linux", "linux"),
        ("freebsd13", "freebsd13"),
    ])
    def test_current_os_name(self, sys_platform, expected):
        with patch("path_audit.environment.sys.platform", sys_platform):
            assert current_os_name() == expected

    def test_detect_platform_macos_skips_wsl(self, empty_env):
        with patch("path_audit.environment.current_os_name", return_value="macos"), \
             patch("path_audit.environment.detect_wsl") as mock_wsl:
            facts = detect_platform(empty_env)
        assert facts.os == "macos"
        assert facts.is_wsl is False
        mock_wsl.assert_not_called()

    def test_detect_platform_linux_uses_wsl_detection(self, empty_env):
        with patch("path_audit.environment.current_os_name", return_value="linux"), \
             patch("path_audit.environment.detect_wsl", return_value=(True, "WSL2", "Ubuntu")):
            facts = detect_platform(empty_env)
        assert facts.is_wsl is True
        assert facts.wsl_version == "WSL2"
        assert facts.wsl_distro == "Ubuntu"
