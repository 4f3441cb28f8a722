"""
Distributed-trace correlation.

Looks up the active OpenTelemetry span and exposes its identifiers in the
shape Datadog expects for log/trace correlation.
"""

from __future__ import annotations

from typing import Optional

from opentelemetry import trace
from opentelemetry.context import Context

# Datadog correlates OpenTelemetry traces on the lower 64 bits of the trace id.
_LOW_64_BITS = (1 << 64) - 1


def active_span_ids(ctx: Optional[Context] = None) -> Optional[tuple[int, int]]:
    """Return ``(trace_id, span_id)`` of the span active in ``ctx``.

    ``ctx`` defaults to the current context. Returns ``None`` when no valid
    span is recording there.
    """
    span = trace.get_current_span(ctx)
    span_context = span.get_span_context()
    if not span_context.is_valid:
        return None
    return span_context.trace_id & _LOW_64_BITS, span_context.span_id
