"""Span decorators for the task loop, the dispatcher and the providers.

A decorated coroutine runs inside a new span while a tracer is active and
runs untouched otherwise. ``trace_task`` also hands the finished root span
to the tracer's exporter, whether the task ended normally or raised.
"""

from __future__ import annotations

import functools
from typing import Any, Callable, TypeVar

from gameagent.tracer.context import get_active_tracer
from gameagent.tracer.span import SpanKind

F = TypeVar("F", bound=Callable[..., Any])


def _traced(kind: SpanKind, name: str | None = None, *, export_root: bool = False) -> Callable[[F], F]:
    def decorator(fn: F) -> F:
        @functools.wraps(fn)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            tracer = get_active_tracer()
            if tracer is None:
                return await fn(*args, **kwargs)

            span, token = tracer.start_span(kind, name or fn.__name__)
            error: Exception | None = None
            try:
                return await fn(*args, **kwargs)
            except Exception as exc:
                error = exc
                raise
            finally:
                tracer.end_span(span, token, error=error)
                if export_root and span.parent is None:
                    tracer.export(span)

        return wrapper  # type: ignore[return-value]

    return decorator


def trace_task(name: str | None = None) -> Callable[[F], F]:
    """Root span of one task run; exported when the run returns or raises."""
    return _traced(SpanKind.TASK, name, export_root=True)


def trace_iteration(name: str | None = None) -> Callable[[F], F]:
    return _traced(SpanKind.ITERATION, name)


def trace_dispatch(name: str | None = None) -> Callable[[F], F]:
    return _traced(SpanKind.DISPATCH, name)


def trace_provider(name: str) -> Callable[[F], F]:
    """Span around one request to the code assistant or the market-data API."""
    return _traced(SpanKind.PROVIDER_CALL, name)
