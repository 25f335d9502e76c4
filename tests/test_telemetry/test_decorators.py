"""Tests for the tracing decorators."""

from unittest.mock import patch

import pytest
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import SimpleSpanProcessor
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter
from opentelemetry.trace import StatusCode

from floorsync.telemetry import (
    get_tracer,
    is_telemetry_configured,
    shutdown_telemetry,
    trace_merge,
    trace_sync,
)


@pytest.fixture
def exporter():
    """Route decorator spans to an in-memory exporter."""
    exporter = InMemorySpanExporter()
    provider = TracerProvider()
    provider.add_span_processor(SimpleSpanProcessor(exporter))
    with patch(
        "floorsync.telemetry.decorators.get_tracer",
        side_effect=lambda name="floorsync": provider.get_tracer(name),
    ):
        yield exporter


class TestTraceMerge:
    """Tests for trace_merge."""

    def test_span_tags_floor_plan(self, exporter, base_plan):
        """Test the span carries the operation and floor plan id."""

        @trace_merge("auto_merge")
        def auto_merge(base, pending_versions):
            return len(pending_versions)

        assert auto_merge(base_plan, []) == 0

        (span,) = exporter.get_finished_spans()
        assert span.name == "merge.auto_merge"
        assert span.attributes["floorsync.merge.operation"] == "auto_merge"
        assert span.attributes["floorsync.floor_plan.id"] == "fp-1"
        assert span.attributes["floorsync.duration_ms"] >= 0
        assert span.status.status_code == StatusCode.OK

    def test_floor_plan_id_from_version(self, exporter, make_version):
        """Test a version argument identifies the floor plan."""

        @trace_merge()
        def inspect_version(version):
            return version.id

        inspect_version(make_version([], floor_plan_id="fp-7"))

        (span,) = exporter.get_finished_spans()
        assert span.name == "merge.inspect_version"
        assert span.attributes["floorsync.floor_plan.id"] == "fp-7"

    def test_error_recorded_and_reraised(self, exporter):
        """Test failures mark the span and propagate."""

        @trace_merge("explode")
        def explode(floor_plan_id):
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError, match="boom"):
            explode(floor_plan_id="fp-1")

        (span,) = exporter.get_finished_spans()
        assert span.status.status_code == StatusCode.ERROR
        assert span.events[0].name == "exception"


class TestTraceSync:
    """Tests for trace_sync."""

    def test_simple_arguments_become_attributes(self, exporter, base_plan):
        """Test simple and id-carrying arguments are recorded."""

        @trace_sync("service.save")
        def save(floor_plan, reason, force=False):
            return reason

        save(base_plan, "import", force=True)

        (span,) = exporter.get_finished_spans()
        assert span.name == "service.save"
        assert span.attributes["arg.floor_plan.id"] == "fp-1"
        assert span.attributes["arg.reason"] == "import"
        assert span.attributes["arg.force"] is True

    def test_error_reraised(self, exporter):
        """Test exceptions propagate with an error status."""

        @trace_sync()
        def fail():
            raise ValueError("bad")

        with pytest.raises(ValueError):
            fail()

        (span,) = exporter.get_finished_spans()
        assert span.name == "fail"
        assert span.status.status_code == StatusCode.ERROR


class TestUnconfigured:
    """Tests for telemetry before configure_telemetry is called."""

    def test_tracer_available(self):
        """Test tracing works as a no-op without configuration."""
        assert not is_telemetry_configured()

        tracer = get_tracer("floorsync.tests")
        with tracer.start_as_current_span("noop"):
            pass
        assert get_tracer("floorsync.tests") is tracer

    def test_shutdown_without_configuration(self):
        """Test shutdown is a no-op when nothing was configured."""
        shutdown_telemetry()

        assert not is_telemetry_configured()
