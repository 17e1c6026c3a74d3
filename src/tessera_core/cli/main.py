"""Main entry point for the tessera CLI.

Commands:
    tessera resolve: Resolve plugin dependencies and print the load order
    tessera graph: Print the plugin dependency graph

Logging goes to stderr and is configured from the ``--log-level`` and
``--json-logs`` options, falling back to the ``TESSERA_*`` environment
variables.

Example:
    $ tessera --help
    $ tessera resolve plugins/ --format json
    $ TESSERA_LOG_LEVEL=DEBUG tessera graph plugins/
"""

from __future__ import annotations

import sys
from importlib.metadata import version as get_version

import click
from pydantic import ValidationError

from tessera_core.cli.resolve import graph_command, resolve_command
from tessera_core.cli.utils import ExitCode, error_exit
from tessera_core.config import ResolverConfig
from tessera_core.logging import configure_logging


def _get_version() -> str:
    """Get the tessera-core package version.

    Returns:
        Version string from package metadata, or 'unknown' if not installed.
    """
    try:
        return get_version("tessera-core")
    except Exception:
        return "unknown"


@click.group(
    name="tessera",
    help="tessera - Plugin dependency resolution and load ordering.",
    epilog="Use 'tessera <command> --help' for command-specific help.",
    context_settings={
        "help_option_names": ["-h", "--help"],
    },
)
@click.version_option(
    version=_get_version(),
    prog_name="tessera",
    message="%(prog)s %(version)s",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], case_sensitive=False),
    default=None,
    help="Minimum log level (default: TESSERA_LOG_LEVEL or WARNING).",
)
@click.option(
    "--json-logs/--console-logs",
    default=None,
    help="Log format (default: TESSERA_JSON_LOGS or console).",
)
@click.pass_context
def cli(ctx: click.Context, log_level: str | None, json_logs: bool | None) -> None:
    """Root command group for the tessera CLI."""
    ctx.ensure_object(dict)

    try:
        config = ResolverConfig.from_env()
    except ValidationError as e:
        error_exit(f"Invalid environment configuration: {e}", exit_code=ExitCode.USAGE_ERROR)

    updates: dict[str, object] = {}
    if log_level is not None:
        updates["log_level"] = log_level.upper()
    if json_logs is not None:
        updates["json_logs"] = json_logs
    if updates:
        config = config.model_copy(update=updates)

    configure_logging(log_level=config.log_level, json_output=config.json_logs)
    ctx.obj["config"] = config


cli.add_command(resolve_command)
cli.add_command(graph_command)


def main(argv: list[str] | None = None) -> None:
    """Main entry point for the tessera CLI.

    Args:
        argv: Command-line arguments (uses sys.argv if None).
    """
    try:
        rv = cli(args=argv, standalone_mode=False)
    except click.ClickException as e:
        e.show()
        sys.exit(e.exit_code)
    except click.Abort:
        click.echo("Aborted!", err=True)
        sys.exit(1)
    except Exception as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(ExitCode.GENERAL_ERROR)
    # ctx.exit() codes are returned, not raised, outside standalone mode
    if isinstance(rv, int):
        sys.exit(rv)


if __name__ == "__main__":
    main()
