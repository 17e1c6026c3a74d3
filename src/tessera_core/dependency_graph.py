"""Dependency graph construction for plugin service imports.

The graph has one node per plugin identifier that appears anywhere: as a
registered plugin, or as the source of some plugin's import. Identifiers
that are referenced but not registered get a node too (a "phantom" node);
the edges pointing out of it are all invalid, and the resolution façade
drops it from the output because it is not in the registry.

Edge direction:
    Edges are stored on the *provider's* node. ``node.dependents`` is the
    list of things that depend on the node, not a list of its own
    dependencies. Walking forward from a provider therefore reaches its
    consumers after it, which is what a provider-before-consumer order needs.

Example:
    >>> graph = build_graph(registry)
    >>> [edge.importer for edge in graph["org.example.storage"].dependents]
    ['org.example.editor']
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

import structlog

from tessera_core.config import ResolverConfig
from tessera_core.plugin_descriptor import ImportDeclaration, PluginDescriptor, ServiceDeclaration
from tessera_core.plugin_types import ResolutionStatus
from tessera_core.version_compat import is_valid_range, satisfies

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class RejectionReason:
    """Why an import, and therefore a plugin, could not be resolved.

    Attributes:
        status: Status code from the stable vocabulary.
        plugin_id: The plugin the failure points at (the provider for
            validation failures, the failed provider for cascades).
        service_name: Offending service name, for IMPORTED_SERVICE_IS_AN_IMPORT.
        required_version: Required range, for version failures.

    Example:
        >>> reason = RejectionReason(ResolutionStatus.REQUIRED_PLUGIN_NOT_FOUND, "Z")
        >>> reason.to_dict()
        {'status': 'REQUIRED_PLUGIN_NOT_FOUND', 'pluginId': 'Z'}
    """

    status: ResolutionStatus
    plugin_id: str
    service_name: str | None = None
    required_version: str | None = None

    def context(self) -> dict[str, str]:
        """Return the non-status fields under their wire names, omitting unset ones."""
        values: dict[str, str] = {"pluginId": self.plugin_id}
        if self.service_name is not None:
            values["serviceName"] = self.service_name
        if self.required_version is not None:
            values["requiredVersion"] = self.required_version
        return values

    def to_dict(self) -> dict[str, Any]:
        """Return the wire representation: ``status`` plus the context fields."""
        return {"status": self.status.value, **self.context()}


@dataclass(frozen=True)
class ValidationOutcome:
    """Result of validating one import against its provider."""

    valid: bool
    error: RejectionReason | None = None
    target_service: ServiceDeclaration | None = None


@dataclass(frozen=True)
class DependencyEdge:
    """One import, recorded on the provider's node.

    An edge stored under provider P's node means "importer I depends on P".

    Attributes:
        provider: Identifier of the plugin the service is imported from.
        service: Service name on the provider.
        importer: Identifier of the importing plugin.
        alias: Local name the importer uses for the service.
        required_version_range: Range the importer requires.
        valid: Whether the provider can satisfy this import.
        validation_error: Why not, when ``valid`` is False.
    """

    provider: str
    service: str
    importer: str
    alias: str
    required_version_range: str
    valid: bool
    validation_error: RejectionReason | None = None


@dataclass
class GraphNode:
    """A plugin identifier in the dependency graph.

    ``dependents`` is fixed once the graph is built. The traversal state
    (``visited``, ``visiting``) and the verdict (``valid``,
    ``validation_error``) are the only fields the sorter mutates.
    """

    plugin_id: str
    dependents: list[DependencyEdge] = field(default_factory=list)
    visited: bool = False
    visiting: bool = False
    valid: bool = True
    validation_error: RejectionReason | None = None

    def needs_visit(self, incoming_valid: bool) -> bool:
        """Decide whether an incoming link requires (re)processing this node.

        An unvisited node is always processed. A visited node is processed
        again only to downgrade it from valid to invalid; a node is never
        upgraded back to valid.

        Args:
            incoming_valid: Validity carried by the incoming link.

        Returns:
            True if the node must be (re)visited.
        """
        downgrade = self.valid and not incoming_valid
        return not self.visited or downgrade


DependencyGraph = dict[str, GraphNode]
"""Ordered mapping of plugin identifier to node, in first-seen order."""


def validate_import(
    declaration: ImportDeclaration,
    provider: PluginDescriptor | None,
    *,
    config: ResolverConfig | None = None,
) -> ValidationOutcome:
    """Check whether a provider can satisfy one import declaration.

    Checks, in order: the provider exists; the required range parses; the
    provider declares a service of that name that is not itself an import
    and whose version satisfies the range. The first satisfying declaration
    wins. A same-named re-exported import rejects the import outright, even
    if a later declaration would have matched.

    Args:
        declaration: The import to validate.
        provider: The provider's descriptor, or None if it is not registered.
        config: Version matching options.

    Returns:
        ValidationOutcome; ``target_service`` is set when valid. Never raises.
    """
    config = config or ResolverConfig()
    provider_id = declaration.source_plugin
    required = declaration.version_range

    if provider is None:
        return ValidationOutcome(
            valid=False,
            error=RejectionReason(ResolutionStatus.REQUIRED_PLUGIN_NOT_FOUND, provider_id),
        )

    if not is_valid_range(required, loose=config.loose_versions):
        return ValidationOutcome(
            valid=False,
            error=RejectionReason(
                ResolutionStatus.INVALID_REQUIRED_VERSION_RANGE,
                provider.identifier,
                required_version=required,
            ),
        )

    found_at_different_version = False
    for service in provider.services_named(declaration.source_name):
        if service.is_import:
            return ValidationOutcome(
                valid=False,
                error=RejectionReason(
                    ResolutionStatus.IMPORTED_SERVICE_IS_AN_IMPORT,
                    provider.identifier,
                    service_name=service.name,
                ),
            )
        if not satisfies(
            service.version,
            required,
            loose=config.loose_versions,
            include_prerelease=config.include_prerelease,
        ):
            found_at_different_version = True
            continue
        return ValidationOutcome(valid=True, target_service=service)

    if found_at_different_version:
        return ValidationOutcome(
            valid=False,
            error=RejectionReason(
                ResolutionStatus.REQUIRED_SERVICE_VERSION_MISMATCH,
                provider.identifier,
                required_version=required,
            ),
        )
    return ValidationOutcome(
        valid=False,
        error=RejectionReason(ResolutionStatus.REQUIRED_SERVICE_NOT_FOUND, provider.identifier),
    )


def _ensure_node(graph: DependencyGraph, plugin_id: str) -> GraphNode:
    node = graph.get(plugin_id)
    if node is None:
        node = graph[plugin_id] = GraphNode(plugin_id=plugin_id)
    return node


def build_graph(
    registry: Mapping[str, PluginDescriptor],
    *,
    config: ResolverConfig | None = None,
    log: Any = None,
) -> DependencyGraph:
    """Build the provider -> consumer graph for a registry snapshot.

    Every import of every registered plugin becomes one edge on its
    provider's node, valid or not. Every import's ``target_service`` is
    written back onto the caller's ImportDeclaration: the bound service for a
    valid import, None for a failed one, so a binding from an earlier build
    never survives.

    Args:
        registry: Plugin identifier -> descriptor, iterated in its own order.
        config: Version matching options.
        log: structlog logger to use instead of the module logger.

    Returns:
        Fresh graph; nothing is cached between calls.
    """
    config = config or ResolverConfig()
    log = log or logger
    graph: DependencyGraph = {}

    for plugin_id, plugin in registry.items():
        _ensure_node(graph, plugin_id)
        if not plugin.has_imports:
            log.debug("build_graph.standalone_plugin", plugin_id=plugin_id)
            continue

        for declaration in plugin.imports:
            provider_id = declaration.source_plugin
            provider_node = _ensure_node(graph, provider_id)
            outcome = validate_import(declaration, registry.get(provider_id), config=config)
            edge = DependencyEdge(
                provider=provider_id,
                service=declaration.source_name,
                importer=plugin_id,
                alias=declaration.local_name,
                required_version_range=declaration.version_range,
                valid=outcome.valid,
                validation_error=outcome.error,
            )
            provider_node.dependents.append(edge)
            declaration.target_service = outcome.target_service

            if outcome.valid:
                log.debug(
                    "build_graph.dependency_resolved",
                    provider=provider_id,
                    importer=plugin_id,
                    service=declaration.source_name,
                    version=outcome.target_service.version if outcome.target_service else None,
                )
            else:
                log.debug(
                    "build_graph.dependency_invalid",
                    provider=provider_id,
                    importer=plugin_id,
                    service=declaration.source_name,
                    status=outcome.error.status.value if outcome.error else None,
                )

    log.debug("build_graph.completed", node_count=len(graph))
    return graph


__all__ = [
    "DependencyEdge",
    "DependencyGraph",
    "GraphNode",
    "RejectionReason",
    "ValidationOutcome",
    "build_graph",
    "validate_import",
]
