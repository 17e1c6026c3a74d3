"""Plugin descriptor models (Pydantic v2).

A plugin descriptor is the resolver's view of one installed plugin: its
identifier, the services it exports and the services it imports from other
plugins. Descriptors are owned by the caller; the resolver only reads them,
with one exception: a successfully resolved ``ImportDeclaration`` gets its
``target_service`` set to the exact ``ServiceDeclaration`` it bound to.

Example:
    >>> from tessera_core.plugin_descriptor import (
    ...     ImportDeclaration, PluginDescriptor, ServiceDeclaration,
    ... )
    >>> provider = PluginDescriptor(
    ...     identifier="org.example.storage",
    ...     services=[ServiceDeclaration(name="files", version="1.2.0")],
    ... )
    >>> consumer = PluginDescriptor(
    ...     identifier="org.example.editor",
    ...     imports=[
    ...         ImportDeclaration(
    ...             source_plugin="org.example.storage",
    ...             source_name="files",
    ...             local_name="storage",
    ...             version_range="^1.0.0",
    ...         )
    ...     ],
    ... )
    >>> consumer.has_imports
    True
"""

from __future__ import annotations

from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field

from tessera_core.plugin_types import ServiceKind


class ServiceDeclaration(BaseModel):
    """A named, versioned service declared by a plugin.

    A plugin may declare the same ``name`` several times at different
    versions; declaration order matters when more than one satisfies an
    import.

    Attributes:
        name: Service name other plugins import it by.
        version: Concrete semantic version (e.g., "1.2.0").
        kind: SERVICE for a real export, IMPORT for a re-exported import.
        type: Raw declaration type from the plugin definition
            (e.g., "service", "router", "external", "import").

    Example:
        >>> svc = ServiceDeclaration(name="files", version="1.0.0")
        >>> svc.kind
        <ServiceKind.SERVICE: 'service'>
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: Annotated[str, Field(min_length=1)]
    version: str = ""
    kind: ServiceKind = ServiceKind.SERVICE
    type: str = "service"

    @property
    def is_import(self) -> bool:
        """True if this declaration is a re-exported import."""
        return self.kind is ServiceKind.IMPORT


class ImportDeclaration(BaseModel):
    """A plugin's request for a service exported by another plugin.

    Attributes:
        source_plugin: Identifier of the desired provider.
        source_name: Name of the service on the provider.
        local_name: Alias the importing plugin uses for the service.
        version_range: Required version range (e.g., "^1.0.0").
        target_service: Set by the resolver to the provider's declaration
            this import bound to. None until resolved, and left None when the
            import cannot be satisfied. Not serialized.
    """

    model_config = ConfigDict(extra="forbid")

    source_plugin: Annotated[str, Field(min_length=1)]
    source_name: Annotated[str, Field(min_length=1)]
    local_name: Annotated[str, Field(min_length=1)]
    version_range: str = "*"
    target_service: ServiceDeclaration | None = Field(default=None, exclude=True, repr=False)


class PluginDescriptor(BaseModel):
    """Declarations of one plugin, as seen by the resolver.

    Attributes:
        identifier: Unique plugin identifier (registry key).
        plugin_version: Version of the plugin itself, informational only.
        services: Service declarations, in declaration order.
        imports: Import declarations, in declaration order.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    identifier: Annotated[str, Field(min_length=1)]
    plugin_version: str | None = None
    services: list[ServiceDeclaration] = Field(default_factory=list)
    imports: list[ImportDeclaration] = Field(default_factory=list)

    @property
    def has_imports(self) -> bool:
        """True if the plugin declares at least one import."""
        return bool(self.imports)

    def services_named(self, name: str) -> list[ServiceDeclaration]:
        """Return every declaration with the given name, in declaration order.

        Args:
            name: Service name to look up.

        Returns:
            Matching declarations (possibly empty).
        """
        return [service for service in self.services if service.name == name]


__all__ = [
    "ImportDeclaration",
    "PluginDescriptor",
    "ServiceDeclaration",
]
