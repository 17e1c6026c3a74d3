"""Plugin exception hierarchy for tessera-core.

Rejections of individual plugins are not exceptions: they are returned as
structured results by the resolver. The exceptions below cover the fatal
and I/O paths only.

Exception Hierarchy:
    PluginError (base)
    ├── PluginNotFoundError      # Plugin not in registry
    ├── DuplicatePluginError     # Identifier already registered
    ├── CircularDependencyError  # Dependency cycle detected, resolution aborted
    └── PluginDefinitionError    # Plugin definition document is malformed

Example:
    >>> from tessera_core.plugin_errors import CircularDependencyError
    >>> raise CircularDependencyError(["A", "B", "A"])
    Traceback (most recent call last):
        ...
    CircularDependencyError: Circular dependency: A -> B -> A
"""

from __future__ import annotations

from typing import Any


class PluginError(Exception):
    """Base exception for all plugin-related errors.

    Example:
        >>> try:
        ...     resolve(registry)
        ... except PluginError as e:
        ...     print(f"Plugin resolution failed: {e}")
    """

    pass


class PluginNotFoundError(PluginError):
    """Raised when a requested plugin is not found in the registry.

    Attributes:
        plugin_id: The identifier that was requested.
    """

    def __init__(self, plugin_id: str) -> None:
        """Initialize PluginNotFoundError.

        Args:
            plugin_id: The identifier that was requested.
        """
        self.plugin_id = plugin_id
        super().__init__(f"Plugin not found: {plugin_id}")


class DuplicatePluginError(PluginError):
    """Raised when registering an identifier that is already registered.

    Attributes:
        plugin_id: The duplicate identifier.

    Example:
        >>> raise DuplicatePluginError("org.example.storage")
        Traceback (most recent call last):
            ...
        DuplicatePluginError: Duplicate plugin: org.example.storage
    """

    def __init__(self, plugin_id: str) -> None:
        """Initialize DuplicatePluginError.

        Args:
            plugin_id: The duplicate identifier.
        """
        self.plugin_id = plugin_id
        super().__init__(f"Duplicate plugin: {plugin_id}")


class CircularDependencyError(PluginError):
    """Raised when a circular dependency is detected in the plugin graph.

    A cycle aborts the whole resolution; no partial result is produced.

    Attributes:
        cycle: Plugin identifiers forming the cycle, in provider -> consumer
            order, with the first identifier repeated at the end.

    Example:
        >>> raise CircularDependencyError(["A", "B", "C", "A"])
        Traceback (most recent call last):
            ...
        CircularDependencyError: Circular dependency: A -> B -> C -> A
    """

    def __init__(self, cycle: list[str]) -> None:
        """Initialize CircularDependencyError.

        Args:
            cycle: List of plugin identifiers forming the dependency cycle.
        """
        self.cycle = cycle
        super().__init__(f"Circular dependency: {' -> '.join(cycle)}")


class PluginDefinitionError(PluginError):
    """Raised when a plugin definition document cannot be parsed.

    Attributes:
        source: Where the definition came from (file path or "<memory>").
        errors: List of error detail dictionaries.

    Example:
        >>> raise PluginDefinitionError("plugins/a.json", [{"field": "identifier", "message": "Field required"}])
        Traceback (most recent call last):
            ...
        PluginDefinitionError: Invalid plugin definition in plugins/a.json: identifier: Field required
    """

    def __init__(self, source: str, errors: list[dict[str, Any]]) -> None:
        """Initialize PluginDefinitionError.

        Args:
            source: Where the definition came from.
            errors: List of error dictionaries with ``field`` and ``message`` keys.
        """
        self.source = source
        self.errors = errors
        details = "; ".join(
            f"{e['field']}: {e['message']}" if e.get("field") else str(e["message"]) for e in errors
        )
        super().__init__(f"Invalid plugin definition in {source}: {details}")


__all__ = [
    "CircularDependencyError",
    "DuplicatePluginError",
    "PluginDefinitionError",
    "PluginError",
    "PluginNotFoundError",
]
