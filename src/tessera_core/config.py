"""Resolver configuration model (Pydantic v2).

Configuration is optional: every field has a default that reproduces the
standard npm semver behaviour. Values can be supplied directly, or read from
``TESSERA_*`` environment variables via ``ResolverConfig.from_env()``.

Environment Variables:
    TESSERA_LOOSE_VERSIONS: Accept loosely formatted versions ("true"/"false").
    TESSERA_INCLUDE_PRERELEASE: Let pre-releases match plain ranges.
    TESSERA_LOG_LEVEL: Minimum log level (DEBUG, INFO, WARNING, ERROR).
    TESSERA_JSON_LOGS: Emit JSON logs instead of console output.

Example:
    >>> from tessera_core.config import ResolverConfig
    >>> config = ResolverConfig(include_prerelease=True)
    >>> config.loose_versions
    False
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

ENV_PREFIX = "TESSERA_"

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})


class ResolverConfig(BaseModel):
    """Settings for dependency resolution and its diagnostics.

    Attributes:
        loose_versions: Parse versions and ranges in node-semver loose mode.
        include_prerelease: Allow pre-release service versions to satisfy
            ranges that do not name a pre-release.
        log_level: Minimum log level for the CLI's structlog configuration.
        json_logs: Render logs as JSON (True) or for the console (False).
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    loose_versions: bool = Field(default=False)
    include_prerelease: bool = Field(default=False)
    log_level: LogLevel = Field(default="WARNING")
    json_logs: bool = Field(default=False)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> ResolverConfig:
        """Build a configuration from ``TESSERA_*`` environment variables.

        Unset variables keep their defaults.

        Args:
            environ: Mapping to read instead of ``os.environ`` (for tests).

        Returns:
            Validated configuration.

        Raises:
            pydantic.ValidationError: If TESSERA_LOG_LEVEL is not a known level.

        Example:
            >>> ResolverConfig.from_env({"TESSERA_LOOSE_VERSIONS": "yes"}).loose_versions
            True
        """
        env = os.environ if environ is None else environ
        values: dict[str, object] = {}

        for field_name in ("loose_versions", "include_prerelease", "json_logs"):
            raw = env.get(f"{ENV_PREFIX}{field_name.upper()}")
            if raw is not None and raw.strip():
                values[field_name] = raw.strip().lower() in _TRUE_VALUES

        level = env.get(f"{ENV_PREFIX}LOG_LEVEL", "").strip()
        if level:
            values["log_level"] = level.upper()

        return cls.model_validate(values)


__all__ = [
    "ENV_PREFIX",
    "LogLevel",
    "ResolverConfig",
]
