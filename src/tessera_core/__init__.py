"""tessera-core: Plugin dependency resolution and load ordering.

This package provides:
- PluginDescriptor, ServiceDeclaration, ImportDeclaration: What a plugin
  exports and imports
- PluginRegistry: Insertion-ordered registry of descriptors
- resolve, DependencyResolver: Decide which plugins load, and in what order
- ResolutionStatus: Stable vocabulary of rejection reasons
- Loader: Read descriptors from pluginDefinition.json (or YAML) documents
- Errors: Custom exceptions for the fatal and I/O paths

Example:
    >>> from tessera_core import PluginRegistry, resolve
    >>> registry = PluginRegistry(load_plugin_definitions([Path("plugins/")]))
    >>> result = resolve(registry)
    >>> result.plugin_ids
    ['org.example.storage', 'org.example.editor']
"""

from __future__ import annotations

__version__ = "0.1.0"

from tessera_core.config import ResolverConfig
from tessera_core.dependency_graph import (
    DependencyEdge,
    GraphNode,
    RejectionReason,
    build_graph,
    validate_import,
)
from tessera_core.load_order import SortResult, sort_graph
from tessera_core.plugin_descriptor import (
    ImportDeclaration,
    PluginDescriptor,
    ServiceDeclaration,
)
from tessera_core.plugin_errors import (
    CircularDependencyError,
    DuplicatePluginError,
    PluginDefinitionError,
    PluginError,
    PluginNotFoundError,
)
from tessera_core.plugin_loader import (
    load_plugin_definition,
    load_plugin_definitions,
    parse_plugin_definition,
)
from tessera_core.plugin_registry import PluginRegistry
from tessera_core.plugin_types import ResolutionStatus, ServiceKind
from tessera_core.resolution import (
    DependencyResolver,
    RejectedPlugin,
    ResolutionResult,
    format_error_status,
    resolve,
)

__all__ = [
    "__version__",
    # Configuration
    "ResolverConfig",
    # Descriptors
    "ImportDeclaration",
    "PluginDescriptor",
    "ServiceDeclaration",
    "ServiceKind",
    # Registry and loading
    "PluginRegistry",
    "load_plugin_definition",
    "load_plugin_definitions",
    "parse_plugin_definition",
    # Resolution
    "DependencyEdge",
    "DependencyResolver",
    "GraphNode",
    "RejectedPlugin",
    "RejectionReason",
    "ResolutionResult",
    "ResolutionStatus",
    "SortResult",
    "build_graph",
    "format_error_status",
    "resolve",
    "sort_graph",
    "validate_import",
    # Errors
    "CircularDependencyError",
    "DuplicatePluginError",
    "PluginDefinitionError",
    "PluginError",
    "PluginNotFoundError",
]
