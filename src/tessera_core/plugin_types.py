"""Enumerations shared by the dependency resolution engine.

This module defines:
- ServiceKind: whether a declared service is a real export or a re-exported import
- ResolutionStatus: the stable status vocabulary attached to rejected plugins

Example:
    >>> from tessera_core.plugin_types import ResolutionStatus
    >>> ResolutionStatus.REQUIRED_PLUGIN_NOT_FOUND.value
    'REQUIRED_PLUGIN_NOT_FOUND'
    >>> ResolutionStatus.REQUIRED_PLUGIN_NOT_FOUND.description
    'Required plugin not found'
"""

from __future__ import annotations

from enum import Enum


class ServiceKind(Enum):
    """Kind of a service declaration on a plugin.

    Attributes:
        SERVICE: A service the plugin implements and exports itself.
        IMPORT: A service the plugin imports from another plugin. It shows up
            in the plugin's service list under its local name but cannot be
            imported from this plugin in turn.
    """

    SERVICE = "service"
    IMPORT = "import"


class ResolutionStatus(str, Enum):
    """Status codes for plugins rejected during resolution.

    The string values are part of the public contract: they are logged,
    serialized by the CLI and matched by callers.

    Example:
        >>> ResolutionStatus("REQUIRED_SERVICE_NOT_FOUND")
        <ResolutionStatus.REQUIRED_SERVICE_NOT_FOUND: 'REQUIRED_SERVICE_NOT_FOUND'>
    """

    REQUIRED_PLUGIN_FAILED_TO_LOAD = "REQUIRED_PLUGIN_FAILED_TO_LOAD"
    REQUIRED_PLUGIN_NOT_FOUND = "REQUIRED_PLUGIN_NOT_FOUND"
    INVALID_REQUIRED_VERSION_RANGE = "INVALID_REQUIRED_VERSION_RANGE"
    IMPORTED_SERVICE_IS_AN_IMPORT = "IMPORTED_SERVICE_IS_AN_IMPORT"
    REQUIRED_SERVICE_VERSION_MISMATCH = "REQUIRED_SERVICE_VERSION_MISMATCH"
    REQUIRED_SERVICE_NOT_FOUND = "REQUIRED_SERVICE_NOT_FOUND"

    @property
    def description(self) -> str:
        """Return the human-readable description of this status."""
        return _STATUS_DESCRIPTIONS[self]


_STATUS_DESCRIPTIONS: dict[ResolutionStatus, str] = {
    ResolutionStatus.REQUIRED_PLUGIN_FAILED_TO_LOAD: "Required plugin failed to load",
    ResolutionStatus.REQUIRED_PLUGIN_NOT_FOUND: "Required plugin not found",
    ResolutionStatus.INVALID_REQUIRED_VERSION_RANGE: "Invalid required version range",
    ResolutionStatus.IMPORTED_SERVICE_IS_AN_IMPORT: "Imported service is itself an import",
    ResolutionStatus.REQUIRED_SERVICE_VERSION_MISMATCH: "Required service version not found",
    ResolutionStatus.REQUIRED_SERVICE_NOT_FOUND: "Required service not found",
}


__all__ = [
    "ResolutionStatus",
    "ServiceKind",
]
