"""Invalidation-aware topological sort of the plugin dependency graph.

The sorter walks the provider -> consumer graph depth-first and computes,
for every node, a final verdict and a load order:

- A node finishing as valid is put at the *front* of the order. Consumers
  finish before their providers, so providers end up first.
- An invalid link (the edge itself is bad, or its provider is invalid)
  invalidates the consumer, and through it everything that depends on the
  consumer.
- A node that was already accepted can be revisited and downgraded to
  invalid when another of its imports turns out to be broken. It is never
  upgraded back to valid.
- Reaching a node that is still being visited means the graph has a cycle.
  Resolution aborts with CircularDependencyError; there is no partial result.

The traversal uses an explicit stack of frames instead of recursion, so
long dependency chains are not bounded by the interpreter's recursion limit.

Example:
    >>> graph = build_graph(registry)
    >>> result = sort_graph(graph)
    >>> result.ordered  # may contain phantom ids
    ['D', 'A', 'B']
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import structlog

from tessera_core.dependency_graph import DependencyEdge, DependencyGraph, GraphNode, RejectionReason
from tessera_core.plugin_errors import CircularDependencyError
from tessera_core.plugin_types import ResolutionStatus

logger = structlog.get_logger(__name__)


@dataclass
class SortResult:
    """Outcome of sorting a graph.

    Attributes:
        ordered: Identifiers of nodes that finished as valid, providers
            first. May include phantom identifiers, and identifiers that
            were accepted first and rejected later; ``rejects`` wins.
        rejects: Identifier -> reason for every node whose final verdict
            is invalid.
    """

    ordered: list[str] = field(default_factory=list)
    rejects: dict[str, RejectionReason] = field(default_factory=dict)


@dataclass
class _Frame:
    """A node whose dependents are being walked."""

    node: GraphNode
    next_edge: int = 0


def _link_error(node: GraphNode, edge: DependencyEdge) -> RejectionReason | None:
    """Pick the reason to hand to the consumer at the end of ``edge``.

    The edge's own error takes precedence. A good edge out of an invalid
    provider is reported as the provider having failed to load.
    """
    if not edge.valid:
        return edge.validation_error
    if not node.valid:
        return RejectionReason(ResolutionStatus.REQUIRED_PLUGIN_FAILED_TO_LOAD, edge.provider)
    return None


class LoadOrderSorter:
    """Single-use sorter over one graph.

    Example:
        >>> result = LoadOrderSorter(graph).run()
    """

    def __init__(self, graph: DependencyGraph, *, log: Any = None) -> None:
        self._graph = graph
        self._log = log or logger
        self._stack: list[_Frame] = []
        # Valid finishes in finishing order; the load order is its reverse.
        self._finished: list[str] = []
        self._rejects: dict[str, RejectionReason] = {}

    def run(self) -> SortResult:
        """Visit every node as a root, in graph order.

        Returns:
            SortResult with the order and the rejects.

        Raises:
            CircularDependencyError: If a dependency cycle is found.
        """
        for node in list(self._graph.values()):
            self._visit(node, True, None)
        return SortResult(ordered=self._finished[::-1], rejects=self._rejects)

    def _visit(self, root: GraphNode, valid: bool, error: RejectionReason | None) -> None:
        self._enter(root, valid, error)
        while self._stack:
            frame = self._stack[-1]
            node = frame.node
            if frame.next_edge < len(node.dependents):
                edge = node.dependents[frame.next_edge]
                frame.next_edge += 1
                self._enter(
                    self._graph[edge.importer],
                    node.valid and edge.valid,
                    _link_error(node, edge),
                )
            else:
                self._stack.pop()
                self._finish(node)

    def _enter(self, node: GraphNode, valid: bool, error: RejectionReason | None) -> None:
        if not node.needs_visit(valid):
            return
        if node.visiting:
            raise self._cycle_error(node)

        node.visiting = True
        node.valid = valid
        node.validation_error = error
        self._stack.append(_Frame(node))

    def _finish(self, node: GraphNode) -> None:
        node.visiting = False
        node.visited = True
        if node.valid:
            self._finished.append(node.plugin_id)
        else:
            assert node.validation_error is not None
            self._log.debug(
                "sort_graph.rejecting",
                plugin_id=node.plugin_id,
                status=node.validation_error.status.value,
                cause=node.validation_error.plugin_id,
            )
            self._rejects[node.plugin_id] = node.validation_error

    def _cycle_error(self, node: GraphNode) -> CircularDependencyError:
        ids = [frame.node.plugin_id for frame in self._stack]
        start = ids.index(node.plugin_id)
        cycle = [*ids[start:], node.plugin_id]
        self._log.error("sort_graph.circular_dependency", cycle=cycle)
        return CircularDependencyError(cycle)


def sort_graph(graph: DependencyGraph, *, log: Any = None) -> SortResult:
    """Compute load order and rejects for a freshly built graph.

    Args:
        graph: Graph from build_graph(); its node state is mutated.
        log: structlog logger to use instead of the module logger.

    Returns:
        SortResult with the order and the rejects.

    Raises:
        CircularDependencyError: If a dependency cycle is found.
    """
    return LoadOrderSorter(graph, log=log).run()


__all__ = [
    "LoadOrderSorter",
    "SortResult",
    "sort_graph",
]
