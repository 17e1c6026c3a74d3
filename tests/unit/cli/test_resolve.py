"""Unit tests for the resolve and graph commands.

Tests output formats, exit codes and error reporting through CliRunner.
"""

from __future__ import annotations

import json
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest
import yaml
from click.testing import CliRunner

from tessera_core.cli.main import cli
from tessera_core.cli.utils import ExitCode

# Keep log lines off the output that tests parse.
QUIET = ["--log-level", "CRITICAL"]


class TestResolveCommand:
    """Tests for `tessera resolve`."""

    @pytest.mark.requirement("CLI-001")
    def test_text_output_with_rejects(self, cli_runner: CliRunner, good_case_dir: Path) -> None:
        """Test the load order and rejects are printed, exiting PLUGINS_REJECTED."""
        result = cli_runner.invoke(cli, [*QUIET, "resolve", str(good_case_dir)])

        assert result.exit_code == ExitCode.PLUGINS_REJECTED
        assert "Load order:" in result.output
        assert "Rejected:" in result.output
        assert "C: Required service not found: pluginId: B" in result.output
        order = [line.split(". ", 1)[1] for line in result.output.splitlines() if ". " in line]
        assert order.index("A") < order.index("B")

    @pytest.mark.requirement("CLI-001")
    def test_success_exit_code(self, cli_runner: CliRunner, accepted_dir: Path) -> None:
        """Test a fully installable plugin set exits 0."""
        result = cli_runner.invoke(cli, [*QUIET, "resolve", str(accepted_dir)])

        assert result.exit_code == ExitCode.SUCCESS
        assert "1. A" in result.output
        assert "2. B" in result.output
        assert "Rejected:" not in result.output

    @pytest.mark.requirement("CLI-002")
    def test_json_output(self, cli_runner: CliRunner, good_case_dir: Path) -> None:
        """Test JSON output carries plugins and structured rejects."""
        result = cli_runner.invoke(
            cli, [*QUIET, "resolve", str(good_case_dir), "--format", "json"]
        )

        document = json.loads(result.output)
        assert set(document["plugins"]) == {"A", "B", "D"}
        assert document["plugins"].index("A") < document["plugins"].index("B")
        assert document["rejects"] == [
            {
                "pluginId": "C",
                "status": "REQUIRED_SERVICE_NOT_FOUND",
                "validationError": {"status": "REQUIRED_SERVICE_NOT_FOUND", "pluginId": "B"},
            }
        ]

    @pytest.mark.requirement("CLI-002")
    def test_yaml_output(self, cli_runner: CliRunner, accepted_dir: Path) -> None:
        """Test YAML output parses to the same document shape."""
        result = cli_runner.invoke(
            cli, [*QUIET, "resolve", str(accepted_dir), "--format", "yaml"]
        )

        assert result.exit_code == ExitCode.SUCCESS
        assert yaml.safe_load(result.output) == {"plugins": ["A", "B"], "rejects": []}

    @pytest.mark.requirement("CLI-003")
    def test_cycle_exit_code(self, cli_runner: CliRunner, cyclic_dir: Path) -> None:
        """Test a cycle exits DEPENDENCY_CYCLE with the path."""
        result = cli_runner.invoke(cli, [*QUIET, "resolve", str(cyclic_dir)])

        assert result.exit_code == ExitCode.DEPENDENCY_CYCLE
        assert "Circular dependency: A -> B -> A" in result.output

    @pytest.mark.requirement("CLI-003")
    def test_missing_path(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        """Test a missing path exits FILE_NOT_FOUND."""
        result = cli_runner.invoke(cli, [*QUIET, "resolve", str(tmp_path / "missing.json")])

        assert result.exit_code == ExitCode.FILE_NOT_FOUND
        assert "not found" in result.output

    @pytest.mark.requirement("CLI-003")
    def test_malformed_definition(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        """Test a malformed definition exits VALIDATION_ERROR."""
        path = tmp_path / "broken.json"
        path.write_text(json.dumps({"dataServices": []}), encoding="utf-8")

        result = cli_runner.invoke(cli, [*QUIET, "resolve", str(path)])

        assert result.exit_code == ExitCode.VALIDATION_ERROR
        assert "identifier" in result.output

    @pytest.mark.requirement("CLI-003")
    def test_undecodable_definition(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        """Test a definition that is not UTF-8 exits VALIDATION_ERROR."""
        path = tmp_path / "binary.json"
        path.write_bytes(b"\xff\xfe{\x00}\x00")

        result = cli_runner.invoke(cli, [*QUIET, "resolve", str(path)])

        assert result.exit_code == ExitCode.VALIDATION_ERROR
        assert str(path) in result.output

    @pytest.mark.requirement("CLI-003")
    def test_empty_directory_warns(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        """Test a directory without definitions resolves to nothing, with a warning."""
        result = cli_runner.invoke(cli, [*QUIET, "resolve", str(tmp_path)])

        assert result.exit_code == ExitCode.SUCCESS
        assert "Warning: No plugin definitions found" in result.output
        assert "(none)" in result.output

    @pytest.mark.requirement("CLI-003")
    def test_paths_required(self, cli_runner: CliRunner) -> None:
        """Test omitting PATHS is a usage error."""
        result = cli_runner.invoke(cli, ["resolve"])

        assert result.exit_code == ExitCode.USAGE_ERROR

    @pytest.mark.requirement("CLI-004")
    def test_include_prerelease_flag(
        self,
        cli_runner: CliRunner,
        tmp_path: Path,
        write_definition: Callable[..., Path],
        make_import_entry: Callable[[str, str, str], dict[str, Any]],
    ) -> None:
        """Test --include-prerelease lets a pre-release provider satisfy a plain range."""
        write_definition("A", {"type": "service", "name": "S1", "version": "1.1.0-rc.1"})
        write_definition("B", make_import_entry("A", "S1", "^1.0.0"))

        strict = cli_runner.invoke(cli, [*QUIET, "resolve", str(tmp_path)])
        relaxed = cli_runner.invoke(
            cli, [*QUIET, "resolve", str(tmp_path), "--include-prerelease"]
        )

        assert strict.exit_code == ExitCode.PLUGINS_REJECTED
        assert relaxed.exit_code == ExitCode.SUCCESS

    @pytest.mark.requirement("CLI-004")
    def test_duplicate_identifier_warns(
        self,
        cli_runner: CliRunner,
        tmp_path: Path,
        write_definition: Callable[..., Path],
    ) -> None:
        """Test a repeated identifier is logged and the later definition wins."""
        write_definition("first", {"name": "S", "version": "1.0.0"}, identifier="A")
        write_definition("second", {"name": "S", "version": "2.0.0"}, identifier="A")

        result = cli_runner.invoke(cli, ["--log-level", "WARNING", "resolve", str(tmp_path)])

        assert result.exit_code == ExitCode.SUCCESS
        assert "register.duplicate_plugin" in result.output

    @pytest.mark.requirement("CLI-005")
    def test_invalid_environment(
        self,
        cli_runner: CliRunner,
        accepted_dir: Path,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """Test a bad TESSERA_LOG_LEVEL is a usage error."""
        monkeypatch.setenv("TESSERA_LOG_LEVEL", "chatty")

        result = cli_runner.invoke(cli, ["resolve", str(accepted_dir)])

        assert result.exit_code == ExitCode.USAGE_ERROR
        assert "Invalid environment configuration" in result.output


class TestGraphCommand:
    """Tests for `tessera graph`."""

    @pytest.mark.requirement("CLI-006")
    def test_edges_and_standalone_nodes(
        self, cli_runner: CliRunner, good_case_dir: Path
    ) -> None:
        """Test one line per edge, and standalone plugins on their own."""
        result = cli_runner.invoke(cli, [*QUIET, "graph", str(good_case_dir)])

        assert result.exit_code == ExitCode.SUCCESS
        assert result.output.splitlines() == [
            "A --S1@^1.0.0--> B [ok]",
            "B --S1@^1.0.0--> C [REQUIRED_SERVICE_NOT_FOUND]",
            "C",
            "D",
        ]

    @pytest.mark.requirement("CLI-006")
    def test_graph_does_not_fail_on_cycle(
        self, cli_runner: CliRunner, cyclic_dir: Path
    ) -> None:
        """Test the graph of a cyclic set can still be inspected."""
        result = cli_runner.invoke(cli, [*QUIET, "graph", str(cyclic_dir)])

        assert result.exit_code == ExitCode.SUCCESS
        assert "A --SA@*--> B [ok]" in result.output
        assert "B --SB@*--> A [ok]" in result.output
