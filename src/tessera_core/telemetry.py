"""OpenTelemetry tracer access for tessera-core.

Resolution runs inside a span so that slow or failing plugin startups can be
correlated with the resolution that ordered them. Only the OpenTelemetry API
is used; without an SDK configured by the host process, spans are no-ops.

Tracers are cached per name. Tests can swap in a recording tracer with
``set_tracer`` and clear the cache with ``reset_tracer``.

Example:
    >>> tracer = get_tracer()
    >>> with tracer.start_as_current_span("tessera.resolve") as span:
    ...     span.set_attribute("tessera.plugin_count", 3)
"""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING

from opentelemetry import trace

if TYPE_CHECKING:
    from opentelemetry.trace import Tracer

TRACER_NAME = "tessera_core"

_tracers: dict[str, Tracer] = {}
_lock = threading.Lock()


def get_tracer(name: str = TRACER_NAME) -> Tracer:
    """Return the cached tracer for ``name``, creating it on first use.

    Falls back to a NoOpTracer if the global OpenTelemetry state cannot
    produce one; tracing must never break resolution.

    Args:
        name: Instrumentation scope name.

    Returns:
        Tracer instance.
    """
    tracer = _tracers.get(name)
    if tracer is not None:
        return tracer

    with _lock:
        if name not in _tracers:
            try:
                _tracers[name] = trace.get_tracer(name)
            except RecursionError:
                # Global OTel provider state can be corrupted by test fixtures
                _tracers[name] = trace.NoOpTracer()
        return _tracers[name]


def set_tracer(name: str, tracer: Tracer | None) -> None:
    """Install (or with None, drop) the tracer cached under ``name``."""
    with _lock:
        if tracer is None:
            _tracers.pop(name, None)
        else:
            _tracers[name] = tracer


def reset_tracer() -> None:
    """Clear all cached tracers."""
    with _lock:
        _tracers.clear()


__all__ = ["TRACER_NAME", "get_tracer", "reset_tracer", "set_tracer"]
