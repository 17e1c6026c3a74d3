"""Plugin registry holding the descriptors to be resolved.

The registry is an insertion-ordered, read-only ``Mapping`` of plugin
identifier to PluginDescriptor, so it can be handed straight to
``resolve()``. Registration order is part of the resolution contract: it
decides which plugins are visited first and therefore the relative order of
plugins that do not depend on each other.

Example:
    >>> from tessera_core.plugin_registry import PluginRegistry
    >>> registry = PluginRegistry()
    >>> registry.register(storage_descriptor)
    >>> registry.register(editor_descriptor)
    >>> list(registry)
    ['org.example.storage', 'org.example.editor']
"""

from __future__ import annotations

import builtins
import threading
from collections.abc import Iterable, Iterator, Mapping
from typing import Any

import structlog

from tessera_core.plugin_descriptor import PluginDescriptor
from tessera_core.plugin_errors import DuplicatePluginError, PluginNotFoundError

logger = structlog.get_logger(__name__)


class PluginRegistry(Mapping[str, PluginDescriptor]):
    """Insertion-ordered registry of plugin descriptors.

    Registration is guarded by a lock; resolution reads a consistent
    snapshot only if nobody registers concurrently.

    Attributes:
        _plugins: Identifier -> descriptor, in registration order.
    """

    def __init__(
        self,
        plugins: Iterable[PluginDescriptor] = (),
        *,
        log: Any = None,
    ) -> None:
        """Initialize the registry, registering ``plugins`` in order.

        Args:
            plugins: Descriptors to register up front.
            log: structlog logger to use instead of the module logger.

        Raises:
            DuplicatePluginError: If ``plugins`` repeats an identifier.
        """
        self._plugins: dict[str, PluginDescriptor] = {}
        self._lock = threading.Lock()
        self._log = log or logger
        for plugin in plugins:
            self.register(plugin)

    def __getitem__(self, plugin_id: str) -> PluginDescriptor:
        return self._plugins[plugin_id]

    def __iter__(self) -> Iterator[str]:
        return iter(self._plugins)

    def __len__(self) -> int:
        return len(self._plugins)

    def register(self, plugin: PluginDescriptor, *, replace: bool = False) -> None:
        """Register a plugin descriptor.

        A replaced plugin keeps its original registration position.

        Args:
            plugin: Descriptor to register.
            replace: If True, a plugin already registered under the same
                identifier is replaced (with a warning) instead of rejected.

        Raises:
            DuplicatePluginError: If the identifier is taken and ``replace``
                is False.
        """
        plugin_id = plugin.identifier
        with self._lock:
            if plugin_id in self._plugins:
                if not replace:
                    raise DuplicatePluginError(plugin_id)
                self._log.warning("register.duplicate_plugin", plugin_id=plugin_id)
            self._plugins[plugin_id] = plugin

        self._log.debug(
            "register.completed",
            plugin_id=plugin_id,
            service_count=len(plugin.services),
            import_count=len(plugin.imports),
        )

    def unregister(self, plugin_id: str) -> PluginDescriptor:
        """Remove a plugin and return its descriptor.

        Raises:
            PluginNotFoundError: If no plugin has this identifier.
        """
        with self._lock:
            try:
                plugin = self._plugins.pop(plugin_id)
            except KeyError:
                raise PluginNotFoundError(plugin_id) from None
        self._log.debug("unregister.completed", plugin_id=plugin_id)
        return plugin

    def require(self, plugin_id: str) -> PluginDescriptor:
        """Return a registered plugin.

        Unlike ``get()``, a missing identifier is an error.

        Raises:
            PluginNotFoundError: If no plugin has this identifier.
        """
        try:
            return self._plugins[plugin_id]
        except KeyError:
            raise PluginNotFoundError(plugin_id) from None

    def list(self) -> builtins.list[PluginDescriptor]:
        """Return all descriptors in registration order."""
        return builtins.list(self._plugins.values())

    def clear(self) -> None:
        """Remove every plugin."""
        with self._lock:
            self._plugins.clear()


__all__ = ["PluginRegistry"]
