"""
Trace context correlation tests, using an in-memory OpenTelemetry SDK tracer.
"""

from __future__ import annotations

import pytest
from opentelemetry import trace
from opentelemetry.sdk.trace import TracerProvider

from fishlog import Logger
from fishlog.tracing import active_span_ids


@pytest.fixture(scope="module")
def tracer() -> trace.Tracer:
    return TracerProvider().get_tracer("fishlog-tests")


class TestActiveSpanIds:
    def test_no_span(self) -> None:
        assert active_span_ids() is None

    def test_current_span(self, tracer: trace.Tracer) -> None:
        with tracer.start_as_current_span("work") as span:
            span_context = span.get_span_context()
            trace_id, span_id = active_span_ids()
        assert trace_id == span_context.trace_id & (2**64 - 1)
        assert span_id == span_context.span_id

    def test_explicit_context(self, tracer: trace.Tracer) -> None:
        span = tracer.start_span("detached")
        ctx = trace.set_span_in_context(span)
        assert active_span_ids() is None
        assert active_span_ids(ctx) == (span.get_span_context().trace_id & (2**64 - 1), span.get_span_context().span_id)
        span.end()

    def test_trace_id_fits_64_bits(self, tracer: trace.Tracer) -> None:
        with tracer.start_as_current_span("work"):
            trace_id, _ = active_span_ids()
        assert 0 <= trace_id < 2**64


class TestWithTraceContext:
    def test_binds_datadog_ids(self, log: Logger, captured, tracer: trace.Tracer) -> None:
        with tracer.start_as_current_span("request") as span:
            log.with_trace_context().info("handled")
            expected_span_id = span.get_span_context().span_id

        record = captured.last()
        assert record["dd.span_id"] == expected_span_id
        assert isinstance(record["dd.trace_id"], int)

    def test_without_span_returns_same_entry(self, log: Logger) -> None:
        entry = log.new_entry()
        assert entry.with_trace_context() is entry

    def test_invalid_span_in_context(self, log: Logger) -> None:
        ctx = trace.set_span_in_context(trace.INVALID_SPAN)
        assert log.with_trace_context(ctx).fields == {}
