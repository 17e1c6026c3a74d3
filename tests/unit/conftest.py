"""Unit test fixtures for tessera-core.

Descriptors are built with ``make_plugin`` so tests read like the plugin
graphs they describe:

    make_plugin("B", exports=[("S2", "1.0.0")], imports=[("A", "S1", "^1.0.0")])
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Any

import pytest

from tessera_core.plugin_descriptor import (
    ImportDeclaration,
    PluginDescriptor,
    ServiceDeclaration,
)
from tessera_core.plugin_types import ServiceKind

PluginFactory = Callable[..., PluginDescriptor]


def _make_plugin(
    identifier: str,
    *,
    exports: Sequence[tuple[str, str]] = (),
    reexports: Sequence[str] = (),
    imports: Sequence[tuple[str, str, str]] = (),
) -> PluginDescriptor:
    services = [ServiceDeclaration(name=name, version=version) for name, version in exports]
    services.extend(ServiceDeclaration(name=name, kind=ServiceKind.IMPORT) for name in reexports)
    declarations = [
        ImportDeclaration(
            source_plugin=source_plugin,
            source_name=source_name,
            local_name=source_name,
            version_range=version_range,
        )
        for source_plugin, source_name, version_range in imports
    ]
    return PluginDescriptor(identifier=identifier, services=services, imports=declarations)


@pytest.fixture
def make_plugin() -> PluginFactory:
    """Factory for plugin descriptors.

    Args (of the returned callable):
        identifier: Plugin identifier.
        exports: ``(name, version)`` pairs of exported services.
        reexports: Names of re-exported imports (ServiceKind.IMPORT).
        imports: ``(source_plugin, source_name, version_range)`` triples;
            the local name is the source name.
    """
    return _make_plugin


@pytest.fixture
def make_registry() -> Callable[..., dict[str, PluginDescriptor]]:
    """Build an insertion-ordered registry mapping from descriptors."""

    def _make_registry(*plugins: PluginDescriptor) -> dict[str, PluginDescriptor]:
        return {plugin.identifier: plugin for plugin in plugins}

    return _make_registry


@pytest.fixture
def good_case_registry(
    make_plugin: PluginFactory,
    make_registry: Callable[..., dict[str, PluginDescriptor]],
) -> dict[str, Any]:
    """A exports S1; B imports it; C imports S1 from B (which lacks it); D is standalone."""
    return make_registry(
        make_plugin("A", exports=[("S1", "1.0.0")]),
        make_plugin("B", imports=[("A", "S1", "^1.0.0")]),
        make_plugin("C", imports=[("B", "S1", "^1.0.0")]),
        make_plugin("D"),
    )
