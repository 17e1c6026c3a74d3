"""Plugin dependency resolution façade.

Ties together graph construction and load-order sorting, then filters the
result against the registry that was resolved:

- ``plugins``: registered, non-rejected plugins in load order (providers
  before their consumers). Phantom identifiers, referenced but never
  registered, are dropped here and nowhere else.
- ``rejects``: registered plugins that cannot be installed, each with the
  reason, in registry order.

Rejection never raises. The only exception is CircularDependencyError,
which aborts the whole resolution: a cycle is a configuration error that
needs a human, not something to work around. This is a known limitation;
the acyclic remainder of the graph is not resolved either.

Example:
    >>> from tessera_core.resolution import resolve
    >>> result = resolve({p.identifier: p for p in descriptors})
    >>> [p.identifier for p in result.plugins]
    ['org.example.storage', 'org.example.editor']
    >>> result.rejects[0].reason.to_dict()
    {'status': 'REQUIRED_PLUGIN_NOT_FOUND', 'pluginId': 'org.example.search'}
"""

from __future__ import annotations

import time
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

import structlog
from opentelemetry import trace

from tessera_core.config import ResolverConfig
from tessera_core.dependency_graph import RejectionReason, build_graph
from tessera_core.load_order import SortResult, sort_graph
from tessera_core.plugin_descriptor import PluginDescriptor
from tessera_core.plugin_errors import CircularDependencyError
from tessera_core.plugin_registry import PluginRegistry
from tessera_core.telemetry import get_tracer

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class RejectedPlugin:
    """A registered plugin that cannot be installed.

    Attributes:
        plugin_id: Identifier of the rejected plugin.
        reason: Why it was rejected.
        descriptor: The rejected plugin's descriptor.
    """

    plugin_id: str
    reason: RejectionReason
    descriptor: PluginDescriptor

    @property
    def status(self) -> str:
        """The rejection status code."""
        return self.reason.status.value

    def to_dict(self) -> dict[str, Any]:
        """Return the wire representation of this reject.

        ``pluginId`` is the rejected plugin; ``validationError`` carries the
        reason, whose own ``pluginId`` names the plugin the failure points at.
        """
        return {
            "pluginId": self.plugin_id,
            "status": self.status,
            "validationError": self.reason.to_dict(),
        }


@dataclass
class ResolutionResult:
    """Output of a resolution call.

    Attributes:
        plugins: Installable plugins in initialization order.
        rejects: Plugins that cannot be installed, with reasons.
    """

    plugins: list[PluginDescriptor] = field(default_factory=list)
    rejects: list[RejectedPlugin] = field(default_factory=list)

    @property
    def plugin_ids(self) -> list[str]:
        """Identifiers of ``plugins``, in order."""
        return [plugin.identifier for plugin in self.plugins]

    @property
    def rejected_ids(self) -> list[str]:
        """Identifiers of ``rejects``, in order."""
        return [reject.plugin_id for reject in self.rejects]


def format_error_status(reason: RejectionReason) -> str:
    """Render a rejection reason for humans.

    Args:
        reason: Reason to render.

    Returns:
        ``"<description>: key: value, key: value"``.

    Example:
        >>> format_error_status(
        ...     RejectionReason(ResolutionStatus.REQUIRED_SERVICE_VERSION_MISMATCH, "A", required_version="^1.0.0")
        ... )
        'Required service version not found: pluginId: A, requiredVersion: ^1.0.0'
    """
    keywords = ", ".join(f"{key}: {value}" for key, value in reason.context().items())
    return f"{reason.status.description}: {keywords}"


def _collect(
    registry: Mapping[str, PluginDescriptor],
    sorted_graph: SortResult,
) -> ResolutionResult:
    """Intersect the sorted graph with the registry."""
    plugins: list[PluginDescriptor] = []
    emitted: set[str] = set()
    for plugin_id in sorted_graph.ordered:
        if plugin_id in sorted_graph.rejects or plugin_id in emitted:
            continue
        plugin = registry.get(plugin_id)
        if plugin is None:
            # phantom node
            continue
        emitted.add(plugin_id)
        plugins.append(plugin)

    rejects = [
        RejectedPlugin(plugin_id=plugin_id, reason=sorted_graph.rejects[plugin_id], descriptor=plugin)
        for plugin_id, plugin in registry.items()
        if plugin_id in sorted_graph.rejects
    ]
    return ResolutionResult(plugins=plugins, rejects=rejects)


def resolve(
    registry: Mapping[str, PluginDescriptor],
    *,
    config: ResolverConfig | None = None,
    log: Any = None,
) -> ResolutionResult:
    """Decide which plugins can be installed, and in what order.

    As a side effect every ImportDeclaration's ``target_service`` is set to
    the service it bound to, or to None if the import failed.

    Args:
        registry: Plugin identifier -> descriptor. Its iteration order
            decides tie-breaks, so pass an insertion-ordered mapping.
        config: Version matching options.
        log: structlog logger for diagnostics; defaults to this module's.

    Returns:
        ResolutionResult with ordered plugins and rejects.

    Raises:
        CircularDependencyError: If plugin imports form a cycle. No partial
            result is produced.
    """
    config = config or ResolverConfig()
    log = log or logger
    tracer = get_tracer()

    with tracer.start_as_current_span("tessera.resolve") as span:
        start = time.monotonic()
        span.set_attribute("tessera.plugin_count", len(registry))
        log.debug("resolve.started", plugin_count=len(registry))

        graph = build_graph(registry, config=config, log=log)
        try:
            sorted_graph = sort_graph(graph, log=log)
        except CircularDependencyError as e:
            span.set_attribute("tessera.cycle", e.cycle)
            span.set_status(trace.Status(trace.StatusCode.ERROR, str(e)))
            raise

        result = _collect(registry, sorted_graph)

        duration_ms = (time.monotonic() - start) * 1000
        span.set_attribute("tessera.node_count", len(graph))
        span.set_attribute("tessera.accepted_count", len(result.plugins))
        span.set_attribute("tessera.rejected_count", len(result.rejects))
        span.set_attribute("tessera.duration_ms", duration_ms)

        for reject in result.rejects:
            log.warning(
                "resolve.plugin_rejected",
                plugin_id=reject.plugin_id,
                status=reject.status,
                reason=format_error_status(reject.reason),
            )
        log.debug(
            "resolve.completed",
            order=result.plugin_ids,
            rejected=result.rejected_ids,
            duration_ms=round(duration_ms, 3),
        )
        return result


class DependencyResolver:
    """Stateful resolver that plugins are added to one at a time.

    Useful when plugins arrive incrementally, e.g. already-installed
    plugins first and newly discovered ones after.

    Example:
        >>> resolver = DependencyResolver(installed_plugins)
        >>> for descriptor in new_descriptors:
        ...     resolver.add_plugin(descriptor)
        >>> result = resolver.process_imports()
    """

    def __init__(
        self,
        initial_plugins: Iterable[PluginDescriptor] = (),
        *,
        config: ResolverConfig | None = None,
        log: Any = None,
    ) -> None:
        self._config = config or ResolverConfig()
        self._log = log or logger
        self._registry = PluginRegistry(log=self._log)
        for plugin in initial_plugins:
            self.add_plugin(plugin)

    @property
    def registry(self) -> PluginRegistry:
        """The plugins added so far."""
        return self._registry

    def add_plugin(self, plugin: PluginDescriptor) -> None:
        """Add a plugin; a later plugin with the same identifier replaces it."""
        self._registry.register(plugin, replace=True)

    def process_imports(self) -> ResolutionResult:
        """Resolve the plugins added so far.

        Raises:
            CircularDependencyError: If plugin imports form a cycle.
        """
        return resolve(self._registry, config=self._config, log=self._log)


__all__ = [
    "DependencyResolver",
    "RejectedPlugin",
    "ResolutionResult",
    "format_error_status",
    "resolve",
]
