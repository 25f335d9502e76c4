"""
OpenTelemetry telemetry module for floorsync.

Provides tracing and metrics for merge analysis and version review.
"""

from floorsync.telemetry.config import (
    configure_telemetry,
    get_meter,
    get_tracer,
    is_telemetry_configured,
    shutdown_telemetry,
)
from floorsync.telemetry.decorators import trace_merge, trace_sync

__all__ = [
    # Configuration
    "configure_telemetry",
    "get_tracer",
    "get_meter",
    "is_telemetry_configured",
    "shutdown_telemetry",
    # Decorators
    "trace_sync",
    "trace_merge",
]
