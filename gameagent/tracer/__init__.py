from gameagent.tracer.context import annotate, get_active_tracer, get_current_span, set_current_span
from gameagent.tracer.decorators import (
    trace_dispatch,
    trace_iteration,
    trace_provider,
    trace_task,
)
from gameagent.tracer.exporter import YAMLExporter
from gameagent.tracer.span import Span, SpanKind
from gameagent.tracer.tracer import Tracer

__all__ = [
    "Tracer",
    "YAMLExporter",
    "Span",
    "SpanKind",
    "annotate",
    "get_active_tracer",
    "get_current_span",
    "set_current_span",
    "trace_task",
    "trace_iteration",
    "trace_dispatch",
    "trace_provider",
]
