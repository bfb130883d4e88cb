"""
Tests for the command line interface (path_audit/cli.py).
"""

import json

import pytest

from path_audit import render
from path_audit.cli import EXIT_CONFLICTS, EXIT_ERROR, EXIT_OK, build_parser, main

from conftest import make_executable


@pytest.fixture(autouse=True)
def isolated(monkeypatch, tmp_path):
    """No config files from the host; plain output."""
    monkeypatch.setattr("path_audit.config.CONFIG_LOCATIONS", [])
    monkeypatch.setattr(render, "USE_COLOR", False)
    monkeypatch.setattr(render, "USE_EMOJI", False)


@pytest.fixture
def conflict_path(bin_dirs):
    first, second = bin_dirs
    return f"{first}:{second}"


@pytest.fixture
def clean_path(tmp_path):
    make_executable(tmp_path / "only", "lonely")
    return str(tmp_path / "only")


class TestExitCodes:
    """Tests for main() exit codes."""

    def test_no_conflicts(self, clean_path, capsys):
        assert main(["--custom-path", clean_path]) == EXIT_OK
        assert "No conflicts detected!" in capsys.readouterr().out

    def test_conflicts(self, conflict_path, capsys):
        assert main(["--custom-path", conflict_path]) == EXIT_CONFLICTS
        out = capsys.readouterr().out
        assert "tool (shadowed-binary)" in out
        assert "Conflicts Found: 1" in out

    def test_quiet_returns_ok(self, conflict_path, capsys):
        assert main(["--custom-path", conflict_path, "-q"]) == EXIT_OK
        assert capsys.readouterr().out == ""

    def test_reads_path_environment(self, conflict_path, monkeypatch):
        monkeypatch.setenv("PATH", conflict_path)
        assert main([]) == EXIT_CONFLICTS

    def test_missing_path(self, monkeypatch, capsys):
        monkeypatch.delenv("PATH", raising=False)
        assert main([]) == EXIT_ERROR
        assert "✗ Failed to read PATH environment variable" in capsys.readouterr().err

    def test_bad_config(self, tmp_path, clean_path, capsys):
        assert main(["--custom-path", clean_path, "--config", str(tmp_path / "none.yml")]) == EXIT_ERROR
        assert capsys.readouterr().err.startswith("✗ ")

    def test_missing_report(self, tmp_path, capsys):
        assert main(["--from-report", str(tmp_path / "none.json")]) == EXIT_ERROR
        assert "Failed to read report" in capsys.readouterr().err


class TestOutput:
    """Tests for output options."""

    def test_json(self, conflict_path, capsys):
        main(["--custom-path", conflict_path, "--json"])
        data = json.loads(capsys.readouterr().out)
        assert [c["binary_name"] for c in data["conflicts"]] == ["tool"]
        assert data["summary"]["total_executables"] == 4

    def test_json_conflicts_only(self, conflict_path, capsys):
        main(["--custom-path", conflict_path, "--json", "--conflicts-only"])
        assert set(json.loads(capsys.readouterr().out)) == {"conflicts", "summary"}

    def test_binary_filter(self, conflict_path, capsys):
        assert main(["--custom-path", conflict_path, "-b", "only-first"]) == EXIT_OK
        assert "No conflicts detected!" in capsys.readouterr().out

    def test_category_filter(self, conflict_path, capsys):
        assert main(["--custom-path", conflict_path, "-c", "duplicate-versions"]) == EXIT_OK
        assert main(["--custom-path", conflict_path, "-c", "shadowed-binary"]) == EXIT_CONFLICTS

    def test_hashes(self, conflict_path, capsys):
        main(["--custom-path", conflict_path, "--json", "--hashes"])
        data = json.loads(capsys.readouterr().out)
        assert all(
            e["content_hash"]
            for d in data["directories"]
            for e in d["executables"]
        )

    def test_recommendations_from_config(self, tmp_path, monkeypatch, capsys):
        """Test that the config file can turn recommendations on."""
        pyenv_bin = tmp_path / ".pyenv" / "shims"
        asdf_bin = tmp_path / ".asdf" / "shims"
        make_executable(pyenv_bin, "python")
        make_executable(asdf_bin, "python")
        custom_path = f"{pyenv_bin}:{asdf_bin}"

        assert main(["--custom-path", custom_path]) == EXIT_CONFLICTS
        assert "Recommendation:" not in capsys.readouterr().out

        config = tmp_path / "config.yml"
        config.write_text("output:\n  recommendations: true\n")
        main(["--custom-path", custom_path, "--config", str(config)])
        assert "Recommendation: Multiple version managers are managing python" in capsys.readouterr().out


class TestReports:
    """Tests for --write-report and --from-report."""

    def test_write_then_filter(self, tmp_path, conflict_path, capsys):
        report = tmp_path / "report.json"
        assert main(["--custom-path", conflict_path, "--write-report", str(report), "-q"]) == EXIT_OK
        assert json.loads(report.read_text())["summary"]["total_conflicts"] == 1
        capsys.readouterr()

        assert main(["--from-report", str(report)]) == EXIT_CONFLICTS
        assert "tool" in capsys.readouterr().out

        assert main(["--from-report", str(report), "-s", "high"]) == EXIT_OK
        assert "No conflicts detected!" in capsys.readouterr().out


class TestParser:
    """Tests for argument parsing."""

    def test_defaults(self):
        args = build_parser().parse_args([])
        assert args.recommendations is None
        assert args.versions is None
        assert args.resolve_symlinks is None
        assert args.json is False

    def test_conflicts_only_help(self):
        action = next(a for a in build_parser()._actions if a.dest == "conflicts_only")
        assert action.help == "Only show conflicts (omit header and summary)"

    def test_no_resolve_symlinks(self):
        assert build_parser().parse_args(["--no-resolve-symlinks"]).resolve_symlinks is False

    def test_verbose_and_quiet_exclusive(self, capsys):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["-v", "-q"])

    def test_invalid_severity(self, capsys):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["-s", "extreme"])

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as exc:
            build_parser().parse_args(["--version"])
        assert exc.value.code == 0
        assert "path-audit 1.0.0" in capsys.readouterr().out
