"""Per-task tracing state.

The span being recorded and the tracer collecting it are kept in context
variables, so concurrent tasks on one event loop each see their own trace.
"""

from __future__ import annotations

from contextvars import ContextVar, Token
from typing import TYPE_CHECKING, Any, Optional

if TYPE_CHECKING:
    from gameagent.tracer.span import Span
    from gameagent.tracer.tracer import Tracer

_current_span: ContextVar[Any] = ContextVar("gameagent_span", default=None)
_active_tracer: ContextVar[Any] = ContextVar("gameagent_tracer", default=None)


def get_current_span() -> Optional[Span]:
    return _current_span.get()


def set_current_span(span: Optional[Span]) -> Token:
    return _current_span.set(span)


def reset_current_span(token: Token) -> None:
    _current_span.reset(token)


def get_active_tracer() -> Optional[Tracer]:
    return _active_tracer.get()


def set_active_tracer(tracer: Optional[Tracer]) -> Token:
    return _active_tracer.set(tracer)


def reset_active_tracer(token: Token) -> None:
    _active_tracer.reset(token)


def annotate(**attributes: Any) -> None:
    """Record *attributes* on the span being traced, if any.

    Untraced runs ignore the call, so the loop and the dispatcher can
    annotate unconditionally.
    """
    span = get_current_span()
    if span is None:
        return
    for key, value in attributes.items():
        span.set_attribute(key, value)
