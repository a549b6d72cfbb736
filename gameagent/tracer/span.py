import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Iterator, Optional


class SpanKind(str, Enum):
    """Level of a span in a task trace.

    A task run nests as ``task > iteration > dispatch > provider_call``:
    one iteration per action requested from the decision service, one
    dispatch per action, and one provider call per DeepSeek or BirdEye
    request made while dispatching.
    """

    TASK = "task"
    ITERATION = "iteration"
    DISPATCH = "dispatch"
    PROVIDER_CALL = "provider_call"


def _short_id() -> str:
    return uuid.uuid4().hex[:12]


@dataclass
class Span:
    kind: SpanKind
    name: str
    span_id: str = field(default_factory=_short_id)
    start_time: datetime = field(default_factory=datetime.now)
    end_time: Optional[datetime] = None
    duration_ms: Optional[float] = None
    status: str = "ok"
    error: Optional[str] = None
    attributes: dict[str, Any] = field(default_factory=dict)
    children: list['Span'] = field(default_factory=list)
    parent: Optional['Span'] = field(default=None, repr=False)

    @property
    def failed(self) -> bool:
        return self.status == "error"

    def set_attribute(self, key: str, value: Any) -> None:
        self.attributes[key] = value

    def add_child(self, child: 'Span') -> None:
        child.parent = self
        self.children.append(child)

    def walk(self) -> Iterator['Span']:
        """Yield this span and every descendant, depth first."""
        yield self
        for child in self.children:
            yield from child.walk()

    def descendants(self, kind: SpanKind) -> list['Span']:
        return [span for span in self.walk() if span is not self and span.kind == kind]

    def finish(self, error: Exception | None = None) -> None:
        self.end_time = datetime.now()
        self.duration_ms = (self.end_time - self.start_time).total_seconds() * 1000
        if error is not None:
            self.status = "error"
            self.error = str(error)

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "kind": self.kind.value,
            "name": self.name,
            "span_id": self.span_id,
            "start_time": self.start_time.isoformat(),
        }
        if self.end_time is not None:
            d["end_time"] = self.end_time.isoformat()
        if self.duration_ms is not None:
            d["duration_ms"] = round(self.duration_ms, 2)
        d["status"] = self.status
        if self.error is not None:
            d["error"] = self.error
        if self.attributes:
            d["attributes"] = self.attributes
        if self.children:
            d["children"] = [c.to_dict() for c in self.children]
        return d
