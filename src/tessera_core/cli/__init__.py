"""Command-line interface for tessera-core.

Example:
    $ tessera resolve plugins/
"""

from __future__ import annotations

from tessera_core.cli.main import cli, main

__all__ = ["cli", "main"]
