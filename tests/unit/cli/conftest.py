"""Unit test fixtures for the CLI module.

CLI tests write plugin definitions to a temporary directory and invoke the
commands through Click's CliRunner.

For shared fixtures across all test tiers, see ../../conftest.py.
"""

from __future__ import annotations

import json
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest
from click.testing import CliRunner

from tessera_core.plugin_loader import PLUGIN_DEFINITION_FILENAME

DefinitionWriter = Callable[..., Path]


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner.

    Returns:
        CliRunner instance for testing Click commands.
    """
    return CliRunner()


@pytest.fixture
def write_definition(tmp_path: Path) -> DefinitionWriter:
    """Write a pluginDefinition.json under ``tmp_path/<directory>/``.

    Args (of the returned callable):
        directory: Subdirectory name; also the default identifier.
        data_services: The definition's dataServices entries.
        identifier: Identifier, if different from ``directory``.
    """

    def _write(
        directory: str,
        *data_services: dict[str, Any],
        identifier: str | None = None,
    ) -> Path:
        path = tmp_path / directory / PLUGIN_DEFINITION_FILENAME
        path.parent.mkdir(parents=True, exist_ok=True)
        document = {
            "identifier": identifier or directory,
            "pluginVersion": "1.0.0",
            "dataServices": list(data_services),
        }
        path.write_text(json.dumps(document), encoding="utf-8")
        return path

    return _write


def import_entry(source_plugin: str, source_name: str, version_range: str) -> dict[str, Any]:
    """Build an import entry of a plugin definition."""
    return {
        "type": "import",
        "sourcePlugin": source_plugin,
        "sourceName": source_name,
        "localName": source_name,
        "versionRange": version_range,
    }


@pytest.fixture
def good_case_dir(tmp_path: Path, write_definition: DefinitionWriter) -> Path:
    """Directory with A (exports S1), B (imports it), C (imports S1 from B) and D."""
    write_definition("A", {"type": "service", "name": "S1", "version": "1.0.0"})
    write_definition("B", import_entry("A", "S1", "^1.0.0"))
    write_definition("C", import_entry("B", "S1", "^1.0.0"))
    write_definition("D")
    return tmp_path


@pytest.fixture
def accepted_dir(tmp_path: Path, write_definition: DefinitionWriter) -> Path:
    """Directory where every plugin can be installed."""
    write_definition("A", {"type": "service", "name": "S1", "version": "1.2.0"})
    write_definition("B", import_entry("A", "S1", "^1.0.0"))
    return tmp_path


@pytest.fixture
def cyclic_dir(tmp_path: Path, write_definition: DefinitionWriter) -> Path:
    """Directory where A and B import from each other."""
    write_definition(
        "A", {"type": "service", "name": "SA", "version": "1.0.0"}, import_entry("B", "SB", "*")
    )
    write_definition(
        "B", {"type": "service", "name": "SB", "version": "1.0.0"}, import_entry("A", "SA", "*")
    )
    return tmp_path


@pytest.fixture
def make_import_entry() -> Callable[[str, str, str], dict[str, Any]]:
    """Provide ``import_entry`` to tests."""
    return import_entry
