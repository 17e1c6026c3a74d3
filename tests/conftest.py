"""Shared pytest configuration for tessera-core tests.

NOTE: Do NOT add __init__.py to test directories - pytest uses importlib mode
which can cause namespace collisions with __init__.py files.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import pytest

if TYPE_CHECKING:
    from collections.abc import Generator


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line(
        "markers",
        "requirement(id): Mark test as covering a specific requirement",
    )


@pytest.fixture(scope="session")
def project_root() -> Path:
    """Path to the repository root."""
    return Path(__file__).parent.parent


@pytest.fixture(autouse=True)
def reset_tracer() -> Generator[None, None, None]:
    """Drop any tracer a test installed, before and after each test."""
    from tessera_core.telemetry import reset_tracer as _reset_tracer

    _reset_tracer()
    yield
    _reset_tracer()


@pytest.fixture(autouse=True)
def reset_structlog() -> Generator[None, None, None]:
    """Undo configure_logging() calls made by CLI tests.

    The CLI binds structlog to the stderr of the invocation, which CliRunner
    closes afterwards.
    """
    import structlog

    yield
    structlog.reset_defaults()
