"""
OpenTelemetry configuration for floorsync.

Configures the tracer provider, meter provider, and OTLP exporters.
Until ``configure_telemetry`` is called, tracers and meters are no-ops.
"""

import logging
import os
from functools import lru_cache
from typing import Optional

from opentelemetry import metrics, trace
from opentelemetry.exporter.otlp.proto.grpc.metric_exporter import OTLPMetricExporter
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.logging import LoggingInstrumentor
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import PeriodicExportingMetricReader
from opentelemetry.sdk.resources import SERVICE_NAME, SERVICE_VERSION, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor

from floorsync import __version__

logger = logging.getLogger(__name__)

DEFAULT_SERVICE_NAME = "floorsync"
DEFAULT_OTLP_ENDPOINT = "http://localhost:4317"

# Global state
_telemetry_configured = False
_tracer_provider: Optional[TracerProvider] = None
_meter_provider: Optional[MeterProvider] = None


def configure_telemetry(
    service_name: Optional[str] = None,
    otlp_endpoint: Optional[str] = None,
    enable_logging: bool = True,
) -> None:
    """
    Configure OpenTelemetry for the application.

    Call once at startup; later calls are ignored.

    Args:
        service_name: Name of the service
        otlp_endpoint: OTLP collector endpoint (e.g., "http://localhost:4317")
        enable_logging: Whether to correlate log records with traces
    """
    global _telemetry_configured, _tracer_provider, _meter_provider

    if _telemetry_configured:
        logger.warning("Telemetry already configured, skipping reconfiguration")
        return

    service_name = service_name or os.environ.get("OTEL_SERVICE_NAME", DEFAULT_SERVICE_NAME)
    otlp_endpoint = otlp_endpoint or os.environ.get(
        "OTEL_EXPORTER_OTLP_ENDPOINT", DEFAULT_OTLP_ENDPOINT
    )

    logger.info(f"Configuring OpenTelemetry: service={service_name}, endpoint={otlp_endpoint}")

    resource = Resource.create(
        {
            SERVICE_NAME: service_name,
            SERVICE_VERSION: __version__,
            "deployment.environment": os.environ.get("ENVIRONMENT", "development"),
        }
    )

    _tracer_provider = TracerProvider(resource=resource)
    _tracer_provider.add_span_processor(
        BatchSpanProcessor(OTLPSpanExporter(endpoint=otlp_endpoint, insecure=True))
    )
    trace.set_tracer_provider(_tracer_provider)

    metric_reader = PeriodicExportingMetricReader(
        OTLPMetricExporter(endpoint=otlp_endpoint, insecure=True),
        export_interval_millis=60000,
    )
    _meter_provider = MeterProvider(resource=resource, metric_readers=[metric_reader])
    metrics.set_meter_provider(_meter_provider)

    if enable_logging:
        LoggingInstrumentor().instrument(set_logging_format=True)

    _telemetry_configured = True
    logger.info("OpenTelemetry configured successfully")


def shutdown_telemetry() -> None:
    """
    Shutdown telemetry providers gracefully.

    Flushes pending spans before exit.
    """
    global _telemetry_configured, _tracer_provider, _meter_provider

    if not _telemetry_configured:
        return

    if _tracer_provider:
        _tracer_provider.force_flush()
        _tracer_provider.shutdown()
        _tracer_provider = None

    if _meter_provider:
        _meter_provider.shutdown()
        _meter_provider = None

    _telemetry_configured = False
    logger.info("OpenTelemetry shutdown complete")


@lru_cache(maxsize=32)
def get_tracer(name: str = "floorsync") -> trace.Tracer:
    """
    Get a tracer instance for creating spans.

    Args:
        name: Name of the tracer (typically the module name)
    """
    return trace.get_tracer(name)


@lru_cache(maxsize=32)
def get_meter(name: str = "floorsync") -> metrics.Meter:
    """
    Get a meter instance for creating metrics.

    Args:
        name: Name of the meter (typically the module name)
    """
    return metrics.get_meter(name)


def is_telemetry_configured() -> bool:
    """Check if telemetry has been configured."""
    return _telemetry_configured
