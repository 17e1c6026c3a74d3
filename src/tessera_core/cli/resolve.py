"""Resolve and graph commands.

Both commands take plugin definition files or directories, load them into a
registry (a later definition with the same identifier replaces an earlier
one, with a warning), and report on them.

Example:
    $ tessera resolve plugins/
    $ tessera resolve plugins/ --format json
    $ tessera graph plugins/editor/pluginDefinition.json plugins/storage/
"""

from __future__ import annotations

import json
from collections.abc import Sequence
from pathlib import Path
from typing import Any

import click
import structlog
import yaml

from tessera_core.cli.utils import ExitCode, error_exit, success, warn
from tessera_core.config import ResolverConfig
from tessera_core.dependency_graph import DependencyEdge, build_graph
from tessera_core.plugin_descriptor import PluginDescriptor
from tessera_core.plugin_errors import CircularDependencyError, PluginDefinitionError
from tessera_core.plugin_loader import load_plugin_definitions
from tessera_core.resolution import DependencyResolver, ResolutionResult, format_error_status

logger = structlog.get_logger(__name__)

_paths_argument = click.argument(
    "paths",
    nargs=-1,
    required=True,
    type=click.Path(path_type=Path),
)


def _resolver_config(ctx: click.Context, loose: bool, include_prerelease: bool) -> ResolverConfig:
    """Return the group's config with command-line overrides applied."""
    config: ResolverConfig = (ctx.obj or {}).get("config") or ResolverConfig()
    updates: dict[str, bool] = {}
    if loose:
        updates["loose_versions"] = True
    if include_prerelease:
        updates["include_prerelease"] = True
    return config.model_copy(update=updates) if updates else config


def _load(paths: Sequence[Path]) -> list[PluginDescriptor]:
    try:
        descriptors = load_plugin_definitions(paths)
    except FileNotFoundError as e:
        error_exit(str(e), exit_code=ExitCode.FILE_NOT_FOUND)
    except PluginDefinitionError as e:
        error_exit(str(e), exit_code=ExitCode.VALIDATION_ERROR)

    if not descriptors:
        warn("No plugin definitions found", paths=", ".join(str(p) for p in paths))
    return descriptors


def _result_document(result: ResolutionResult) -> dict[str, Any]:
    return {
        "plugins": result.plugin_ids,
        "rejects": [reject.to_dict() for reject in result.rejects],
    }


def _format_result_text(result: ResolutionResult) -> str:
    lines = ["Load order:"]
    if result.plugins:
        lines.extend(
            f"  {position}. {plugin_id}" for position, plugin_id in enumerate(result.plugin_ids, 1)
        )
    else:
        lines.append("  (none)")

    if result.rejects:
        lines.append("")
        lines.append("Rejected:")
        lines.extend(
            f"  {reject.plugin_id}: {format_error_status(reject.reason)}"
            for reject in result.rejects
        )
    return "\n".join(lines)


@click.command(
    name="resolve",
    help="""\b
Resolve plugin dependencies and print the load order.

Exits 0 when every plugin can be installed, 6 when some plugin is
rejected, and 7 when plugin imports form a cycle.

PATHS are plugin definition files (JSON or YAML) or directories to scan
for pluginDefinition.json files.

Examples:
    $ tessera resolve plugins/
    $ tessera resolve a.json b.yaml --format json
""",
)
@_paths_argument
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["text", "json", "yaml"], case_sensitive=False),
    default="text",
    show_default=True,
    help="Output format.",
)
@click.option("--loose", is_flag=True, default=False, help="Parse versions in loose mode.")
@click.option(
    "--include-prerelease",
    is_flag=True,
    default=False,
    help="Let pre-release versions satisfy plain ranges.",
)
@click.pass_context
def resolve_command(
    ctx: click.Context,
    paths: tuple[Path, ...],
    output_format: str,
    loose: bool,
    include_prerelease: bool,
) -> None:
    """Resolve plugin dependencies and print the load order."""
    config = _resolver_config(ctx, loose, include_prerelease)
    descriptors = _load(paths)

    resolver = DependencyResolver(descriptors, config=config)
    try:
        result = resolver.process_imports()
    except CircularDependencyError as e:
        error_exit(str(e), exit_code=ExitCode.DEPENDENCY_CYCLE)

    output_format = output_format.lower()
    if output_format == "json":
        success(json.dumps(_result_document(result), indent=2))
    elif output_format == "yaml":
        success(yaml.safe_dump(_result_document(result), sort_keys=False).rstrip())
    else:
        success(_format_result_text(result))

    if result.rejects:
        ctx.exit(ExitCode.PLUGINS_REJECTED)


def _format_edge(edge: DependencyEdge) -> str:
    status = "ok"
    if not edge.valid and edge.validation_error is not None:
        status = edge.validation_error.status.value
    return (
        f"{edge.provider} --{edge.service}@{edge.required_version_range}--> "
        f"{edge.importer} [{status}]"
    )


@click.command(
    name="graph",
    help="""\b
Print the plugin dependency graph, one edge per import.

Each line reads "provider --service@range--> importer [status]", where
status is "ok" or the reason the import cannot be satisfied. Plugins
nobody imports from are listed on their own.

Examples:
    $ tessera graph plugins/
""",
)
@_paths_argument
@click.option("--loose", is_flag=True, default=False, help="Parse versions in loose mode.")
@click.option(
    "--include-prerelease",
    is_flag=True,
    default=False,
    help="Let pre-release versions satisfy plain ranges.",
)
@click.pass_context
def graph_command(
    ctx: click.Context,
    paths: tuple[Path, ...],
    loose: bool,
    include_prerelease: bool,
) -> None:
    """Print the plugin dependency graph."""
    config = _resolver_config(ctx, loose, include_prerelease)
    resolver = DependencyResolver(_load(paths), config=config)
    graph = build_graph(resolver.registry, config=config)

    lines: list[str] = []
    for plugin_id, node in graph.items():
        if not node.dependents:
            lines.append(plugin_id)
            continue
        lines.extend(_format_edge(edge) for edge in node.dependents)
    logger.debug("graph.completed", node_count=len(graph), line_count=len(lines))
    success("\n".join(lines))


__all__ = ["graph_command", "resolve_command"]
