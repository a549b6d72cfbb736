import logging
from contextvars import Token
from typing import Any, Optional

from gameagent.tracer.context import (
    get_current_span,
    reset_active_tracer,
    reset_current_span,
    set_active_tracer,
    set_current_span,
)
from gameagent.tracer.exporter import YAMLExporter
from gameagent.tracer.span import Span, SpanKind

logger = logging.getLogger(__name__)


class Tracer:
    """Collects one span tree per task run.

    Every parentless ``TASK`` span starts a new tree; an agent running
    several tasks keeps them all in :attr:`task_spans`. Without an exporter
    the trees stay in memory only.
    """

    def __init__(self, exporter: YAMLExporter | None = None) -> None:
        self._exporter = exporter
        self._task_spans: list[Span] = []

    def activate(self) -> Token:
        return set_active_tracer(self)

    def deactivate(self, token: Token) -> None:
        reset_active_tracer(token)

    def start_span(
        self,
        kind: SpanKind,
        name: str,
        attributes: dict[str, Any] | None = None,
    ) -> tuple[Span, Token]:
        """Open a span under the current one and make it current.

        Pass the returned token to :meth:`end_span`.
        """
        span = Span(kind=kind, name=name, attributes=dict(attributes or {}))
        parent = get_current_span()
        if parent is not None:
            parent.add_child(span)
        elif kind == SpanKind.TASK:
            self._task_spans.append(span)
        return span, set_current_span(span)

    def end_span(self, span: Span, token: Token, error: Exception | None = None) -> None:
        span.finish(error=error)
        reset_current_span(token)

    def export(self, span: Span | None = None) -> None:
        if self._exporter is None:
            logger.debug("No exporter configured, skipping trace export.")
            return
        span = span or self.last_task_span
        if span is None:
            logger.warning("No task span recorded, nothing to export.")
            return
        self._exporter.export(span)

    @property
    def task_spans(self) -> list[Span]:
        return list(self._task_spans)

    @property
    def last_task_span(self) -> Optional[Span]:
        return self._task_spans[-1] if self._task_spans else None
