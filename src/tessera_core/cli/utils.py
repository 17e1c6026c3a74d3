"""Output helpers and exit codes for the tessera CLI.

Errors are printed as plain text to stderr and the process exits with an
ExitCode, so CI pipelines can tell a rejected plugin set from a broken
configuration.

Example:
    from tessera_core.cli.utils import error_exit, ExitCode

    if result.rejects:
        error_exit("Some plugins were rejected", exit_code=ExitCode.PLUGINS_REJECTED)
"""

from __future__ import annotations

import sys
from enum import IntEnum
from typing import TYPE_CHECKING

import click

if TYPE_CHECKING:
    from typing import NoReturn


class ExitCode(IntEnum):
    """Exit codes for tessera commands."""

    SUCCESS = 0
    """Command completed successfully; no plugin was rejected."""

    GENERAL_ERROR = 1
    """Unexpected failure."""

    USAGE_ERROR = 2
    """Bad arguments, or a bad TESSERA_* environment variable."""

    FILE_NOT_FOUND = 3
    """Plugin definition file or directory not found."""

    VALIDATION_ERROR = 5
    """A plugin definition is malformed."""

    PLUGINS_REJECTED = 6
    """Resolution succeeded but at least one plugin was rejected."""

    DEPENDENCY_CYCLE = 7
    """Plugin imports form a cycle; resolution aborted."""


def _with_context(prefix: str, message: str, context: dict[str, str | int | bool | None]) -> str:
    context_str = ", ".join(f"{k}={v}" for k, v in context.items() if v is not None)
    if context_str:
        return f"{prefix}: {message} ({context_str})"
    return f"{prefix}: {message}"


def error(message: str, **context: str | int | bool | None) -> None:
    """Print an error message to stderr.

    Example:
        error("Plugin definition not found", path="plugins/a.json")
        # Output: Error: Plugin definition not found (path=plugins/a.json)
    """
    click.echo(_with_context("Error", message, context), err=True)


def error_exit(
    message: str,
    exit_code: ExitCode = ExitCode.GENERAL_ERROR,
    **context: str | int | bool | None,
) -> NoReturn:
    """Print an error message to stderr, then exit with ``exit_code``."""
    error(message, **context)
    sys.exit(exit_code)


def warn(message: str, **context: str | int | bool | None) -> None:
    """Print a warning message to stderr."""
    click.echo(_with_context("Warning", message, context), err=True)


def success(message: str) -> None:
    """Print command output to stdout."""
    click.echo(message)


__all__ = [
    "ExitCode",
    "error",
    "error_exit",
    "success",
    "warn",
]
