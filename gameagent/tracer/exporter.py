"""Writes finished task traces to YAML files.

Each file is named after the task submission it records and starts with a
``summary`` section (iterations, the action type requested in each,
provider calls and failed spans) ahead of the full span tree.
"""

import logging
import os
import re
from datetime import datetime
from pathlib import Path
from typing import Any

import yaml

from gameagent.tracer.span import Span, SpanKind

logger = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def summarize(root: Span) -> dict[str, Any]:
    iterations = root.descendants(SpanKind.ITERATION)
    return {
        "iterations": len(iterations),
        "actions": [span.attributes.get("action_type") for span in iterations],
        "provider_calls": len(root.descendants(SpanKind.PROVIDER_CALL)),
        "errors": sum(1 for span in root.walk() if span.failed),
    }


def trace_label(root: Span) -> str:
    """Submission id of the traced task, or the span id when there is none."""
    label = root.attributes.get("submission_id") or root.span_id
    return _UNSAFE_CHARS.sub("_", str(label)).strip("_") or root.span_id


class YAMLExporter:
    def __init__(self, output_dir: Path | str) -> None:
        self.output_dir = Path(output_dir)
        os.makedirs(self.output_dir, exist_ok=True)

    def export(self, root_span: Span, filename: str | None = None) -> Path:
        if filename is None:
            ts = datetime.now().strftime("%Y%m%d_%H%M%S")
            filename = f"trace_{ts}_{trace_label(root_span)}.yaml"

        path = self.output_dir / filename
        data = {"summary": summarize(root_span), **root_span.to_dict()}

        with open(path, "w", encoding="utf-8") as fh:
            yaml.safe_dump(data, fh, default_flow_style=False, allow_unicode=True, sort_keys=False)

        logger.info(f"Trace for {root_span.attributes.get('submission_id', root_span.name)} exported to {path}")
        return path
