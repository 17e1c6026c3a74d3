"""Load plugin descriptors from plugin definition documents.

A plugin definition is the document a plugin ships with (conventionally
``pluginDefinition.json``). Only the parts the resolver needs are read:

.. code-block:: json

    {
      "identifier": "org.example.editor",
      "pluginVersion": "1.0.0",
      "dataServices": [
        {"type": "router", "name": "documents", "version": "1.1.0"},
        {"type": "import", "sourcePlugin": "org.example.storage",
         "sourceName": "files", "localName": "storage", "versionRange": "^1.0.0"}
      ]
    }

Every ``dataServices`` entry of type ``import`` becomes an ImportDeclaration.
An import entry that also carries its own ``name`` is listed among the
plugin's services too, as a ServiceDeclaration of kind IMPORT: the plugin
exposes it under that name, but others cannot import it from there. Any
other entry becomes a normal exported service. Other keys of the definition
are ignored.

Example:
    >>> from tessera_core.plugin_loader import load_plugin_definitions
    >>> descriptors = load_plugin_definitions([Path("plugins/")])
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

import structlog
import yaml
from pydantic import ValidationError

from tessera_core.plugin_descriptor import PluginDescriptor
from tessera_core.plugin_errors import PluginDefinitionError
from tessera_core.plugin_types import ServiceKind

logger = structlog.get_logger(__name__)

PLUGIN_DEFINITION_FILENAME = "pluginDefinition.json"

_JSON_SUFFIXES = frozenset({".json"})
_YAML_SUFFIXES = frozenset({".yaml", ".yml"})

# definition key -> ImportDeclaration field
_IMPORT_KEYS = {
    "sourcePlugin": "source_plugin",
    "sourceName": "source_name",
    "localName": "local_name",
}


def _convert_pydantic_errors(error: ValidationError) -> list[dict[str, Any]]:
    """Convert a pydantic ValidationError to field-level error details."""
    errors: list[dict[str, Any]] = []
    for err in error.errors():
        loc = err.get("loc", ())
        errors.append(
            {
                "field": ".".join(str(part) for part in loc),
                "message": err.get("msg", "Unknown error"),
                "type": err.get("type", "unknown"),
            }
        )
    return errors


def _import_fields(entry: Mapping[str, Any]) -> dict[str, Any]:
    fields = {name: entry[key] for key, name in _IMPORT_KEYS.items() if key in entry}
    # older definitions put the range under "version"
    version_range = entry.get("versionRange", entry.get("version"))
    if version_range is not None:
        fields["version_range"] = version_range
    return fields


def parse_plugin_definition(
    data: Any,
    *,
    source: str = "<memory>",
) -> PluginDescriptor:
    """Build a descriptor from a parsed plugin definition document.

    Args:
        data: Parsed JSON/YAML document.
        source: Where the document came from, for error messages.

    Returns:
        The plugin's descriptor.

    Raises:
        PluginDefinitionError: If the document is not a mapping, or lacks
            required fields, or has malformed service entries.
    """
    if not isinstance(data, Mapping):
        raise PluginDefinitionError(
            source, [{"field": "", "message": "Plugin definition must be a mapping"}]
        )

    data_services = data.get("dataServices") or []
    if not isinstance(data_services, list):
        raise PluginDefinitionError(
            source, [{"field": "dataServices", "message": "Must be a list"}]
        )

    services: list[dict[str, Any]] = []
    imports: list[dict[str, Any]] = []
    for index, entry in enumerate(data_services):
        if not isinstance(entry, Mapping):
            raise PluginDefinitionError(
                source,
                [{"field": f"dataServices.{index}", "message": "Must be a mapping"}],
            )
        service_type = str(entry.get("type", "service"))
        if service_type == ServiceKind.IMPORT.value:
            imports.append(_import_fields(entry))
            if "name" in entry:
                services.append(
                    {"name": entry["name"], "kind": ServiceKind.IMPORT, "type": service_type}
                )
            continue

        service: dict[str, Any] = {"type": service_type}
        if "name" in entry:
            service["name"] = entry["name"]
        if entry.get("version") is not None:
            service["version"] = str(entry["version"])
        services.append(service)

    document: dict[str, Any] = {"services": services, "imports": imports}
    if "identifier" in data:
        document["identifier"] = data["identifier"]
    if data.get("pluginVersion") is not None:
        document["plugin_version"] = str(data["pluginVersion"])

    try:
        descriptor = PluginDescriptor.model_validate(document)
    except ValidationError as e:
        errors = _convert_pydantic_errors(e)
        logger.warning("parse_plugin_definition.invalid", source=source, error_count=len(errors))
        raise PluginDefinitionError(source, errors) from e

    logger.debug(
        "parse_plugin_definition.completed",
        source=source,
        plugin_id=descriptor.identifier,
        service_count=len(descriptor.services),
        import_count=len(descriptor.imports),
    )
    return descriptor


def load_plugin_definition(path: Path) -> PluginDescriptor:
    """Read and parse one plugin definition file (JSON or YAML).

    Args:
        path: File to read.

    Returns:
        The plugin's descriptor.

    Raises:
        FileNotFoundError: If the file does not exist.
        PluginDefinitionError: If the file type is unsupported or the
            content is malformed.
    """
    suffix = path.suffix.lower()
    if suffix not in _JSON_SUFFIXES | _YAML_SUFFIXES:
        raise PluginDefinitionError(
            str(path), [{"field": "", "message": f"Unsupported file type: {suffix or '<none>'}"}]
        )

    try:
        text = path.read_text(encoding="utf-8")
        data = json.loads(text) if suffix in _JSON_SUFFIXES else yaml.safe_load(text)
    except (UnicodeDecodeError, json.JSONDecodeError, yaml.YAMLError) as e:
        raise PluginDefinitionError(str(path), [{"field": "", "message": str(e)}]) from e

    return parse_plugin_definition(data, source=str(path))


def _definition_files(directory: Path) -> list[Path]:
    files = set(directory.rglob(PLUGIN_DEFINITION_FILENAME))
    files.update(
        child
        for child in directory.iterdir()
        if child.is_file() and child.suffix.lower() in _JSON_SUFFIXES | _YAML_SUFFIXES
    )
    return sorted(files)


def load_plugin_definitions(paths: Iterable[Path]) -> list[PluginDescriptor]:
    """Load descriptors from files and directories, in a stable order.

    Files are loaded as given. For a directory, every
    ``pluginDefinition.json`` below it and every JSON/YAML file directly in
    it is loaded, in sorted path order.

    Args:
        paths: Files and directories to load.

    Returns:
        Descriptors in load order.

    Raises:
        FileNotFoundError: If a path does not exist.
        PluginDefinitionError: If a definition is malformed.
    """
    descriptors: list[PluginDescriptor] = []
    for path in paths:
        if path.is_dir():
            files = _definition_files(path)
            logger.debug("load_plugin_definitions.directory", path=str(path), file_count=len(files))
            descriptors.extend(load_plugin_definition(file) for file in files)
        elif path.exists():
            descriptors.append(load_plugin_definition(path))
        else:
            raise FileNotFoundError(f"Plugin definition path not found: {path}")
    return descriptors


__all__ = [
    "PLUGIN_DEFINITION_FILENAME",
    "load_plugin_definition",
    "load_plugin_definitions",
    "parse_plugin_definition",
]
