"""Tests for the gameagent.tracer framework."""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml

from gameagent.tracer.context import (
    annotate,
    get_active_tracer,
    get_current_span,
    reset_active_tracer,
    reset_current_span,
    set_active_tracer,
    set_current_span,
)
from gameagent.tracer.decorators import (
    trace_dispatch,
    trace_iteration,
    trace_provider,
    trace_task,
)
from gameagent.tracer.exporter import YAMLExporter, summarize, trace_label
from gameagent.tracer.span import Span, SpanKind
from gameagent.tracer.tracer import Tracer


# ---------------------------------------------------------------------------
# Span
# ---------------------------------------------------------------------------


class TestSpan:
    def test_create_span(self):
        span = Span(kind=SpanKind.TASK, name="test")
        assert span.kind == SpanKind.TASK
        assert span.name == "test"
        assert span.status == "ok"
        assert span.children == []
        assert span.parent is None
        assert len(span.span_id) == 12

    def test_set_attribute(self):
        span = Span(kind=SpanKind.PROVIDER_CALL, name="token_price")
        span.set_attribute("address", "0xABC")
        assert span.attributes["address"] == "0xABC"

    def test_add_child(self):
        parent = Span(kind=SpanKind.TASK, name="task")
        child = Span(kind=SpanKind.ITERATION, name="iteration")
        parent.add_child(child)
        assert child.parent is parent
        assert child in parent.children

    def test_finish_ok(self):
        span = Span(kind=SpanKind.DISPATCH, name="test")
        span.finish()
        assert span.end_time is not None
        assert span.duration_ms is not None
        assert span.duration_ms >= 0
        assert span.status == "ok"

    def test_finish_error(self):
        span = Span(kind=SpanKind.DISPATCH, name="test")
        span.finish(error=ValueError("boom"))
        assert span.status == "error"
        assert span.error == "boom"

    def test_to_dict(self):
        parent = Span(kind=SpanKind.TASK, name="task")
        child = Span(kind=SpanKind.ITERATION, name="iteration")
        child.set_attribute("action_type", "wait")
        parent.add_child(child)
        child.finish()
        parent.finish()

        d = parent.to_dict()
        assert d["kind"] == "task"
        assert d["name"] == "task"
        assert "duration_ms" in d
        assert len(d["children"]) == 1
        assert d["children"][0]["kind"] == "iteration"
        assert d["children"][0]["attributes"] == {"action_type": "wait"}

    def test_to_dict_no_children(self):
        span = Span(kind=SpanKind.PROVIDER_CALL, name="leaf")
        d = span.to_dict()
        assert "children" not in d
        assert "attributes" not in d
        assert "end_time" not in d

    def test_walk_and_descendants(self):
        task = Span(kind=SpanKind.TASK, name="task_loop")
        for _ in range(2):
            iteration = Span(kind=SpanKind.ITERATION, name="iteration")
            dispatch = Span(kind=SpanKind.DISPATCH, name="dispatch")
            dispatch.add_child(Span(kind=SpanKind.PROVIDER_CALL, name="token_price"))
            iteration.add_child(dispatch)
            task.add_child(iteration)

        assert [s.kind for s in task.walk()][:4] == [
            SpanKind.TASK, SpanKind.ITERATION, SpanKind.DISPATCH, SpanKind.PROVIDER_CALL,
        ]
        assert len(task.descendants(SpanKind.ITERATION)) == 2
        assert len(task.descendants(SpanKind.PROVIDER_CALL)) == 2
        assert task.descendants(SpanKind.TASK) == []


# ---------------------------------------------------------------------------
# Context
# ---------------------------------------------------------------------------


class TestContext:
    def test_default_none(self):
        assert get_current_span() is None
        assert get_active_tracer() is None

    def test_set_and_reset_span(self):
        span = Span(kind=SpanKind.DISPATCH, name="test")
        token = set_current_span(span)
        assert get_current_span() is span
        reset_current_span(token)
        assert get_current_span() is None

    def test_set_and_reset_tracer(self):
        tracer = Tracer()
        token = set_active_tracer(tracer)
        assert get_active_tracer() is tracer
        reset_active_tracer(token)
        assert get_active_tracer() is None

    def test_annotate_current_span(self):
        span = Span(kind=SpanKind.ITERATION, name="iteration")
        token = set_current_span(span)
        try:
            annotate(iteration=3, action_type="go_to")
        finally:
            reset_current_span(token)
        assert span.attributes == {"iteration": 3, "action_type": "go_to"}

    def test_annotate_without_span_is_ignored(self):
        assert get_current_span() is None
        annotate(action_type="wait")


# ---------------------------------------------------------------------------
# Tracer
# ---------------------------------------------------------------------------


class TestTracer:
    def test_activate_deactivate(self):
        tracer = Tracer()
        token = tracer.activate()
        assert get_active_tracer() is tracer
        tracer.deactivate(token)
        assert get_active_tracer() is None

    def test_start_end_span(self):
        tracer = Tracer()
        span, token = tracer.start_span(SpanKind.TASK, "root")
        assert get_current_span() is span
        assert tracer.last_task_span is span

        child_span, child_token = tracer.start_span(SpanKind.ITERATION, "iteration")
        assert get_current_span() is child_span
        assert child_span.parent is span
        assert child_span in span.children

        tracer.end_span(child_span, child_token)
        assert get_current_span() is span
        assert child_span.duration_ms is not None

        tracer.end_span(span, token)
        assert get_current_span() is None

    def test_start_span_error(self):
        tracer = Tracer()
        span, token = tracer.start_span(SpanKind.PROVIDER_CALL, "test")
        tracer.end_span(span, token, error=RuntimeError("fail"))
        assert span.status == "error"
        assert span.error == "fail"

    def test_parentless_non_task_span_is_not_a_root(self):
        tracer = Tracer()
        span, token = tracer.start_span(SpanKind.DISPATCH, "orphan")
        tracer.end_span(span, token)
        assert tracer.task_spans == []

    def test_each_task_becomes_a_root(self):
        tracer = Tracer()
        for name in ("first", "second"):
            span, token = tracer.start_span(SpanKind.TASK, name)
            tracer.end_span(span, token)
        assert [s.name for s in tracer.task_spans] == ["first", "second"]
        assert tracer.last_task_span.name == "second"

    def test_export_without_exporter_is_noop(self):
        tracer = Tracer()
        span, token = tracer.start_span(SpanKind.TASK, "root")
        tracer.end_span(span, token)
        tracer.export()

    def test_export_defaults_to_last_task(self, tmp_path: Path):
        tracer = Tracer(exporter=YAMLExporter(output_dir=tmp_path))
        span, token = tracer.start_span(SpanKind.TASK, "root")
        tracer.end_span(span, token)
        tracer.export()
        files = list(tmp_path.glob("trace_*.yaml"))
        assert len(files) == 1
        assert span.span_id in files[0].name


# ---------------------------------------------------------------------------
# YAMLExporter
# ---------------------------------------------------------------------------


class TestYAMLExporter:
    def test_export_creates_file(self, tmp_path: Path):
        exporter = YAMLExporter(output_dir=tmp_path)
        root = Span(kind=SpanKind.TASK, name="task_loop")
        child = Span(kind=SpanKind.DISPATCH, name="dispatch")
        root.add_child(child)
        child.finish()
        root.finish()

        path = exporter.export(root, filename="test_trace.yaml")
        assert path.exists()

        with open(path, "r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh)

        assert data["kind"] == "task"
        assert data["name"] == "task_loop"
        assert len(data["children"]) == 1
        assert data["children"][0]["kind"] == "dispatch"

    def test_export_auto_filename(self, tmp_path: Path):
        exporter = YAMLExporter(output_dir=tmp_path)
        root = Span(kind=SpanKind.TASK, name="auto")
        root.finish()

        path = exporter.export(root)
        assert path.exists()
        assert path.name.startswith("trace_")
        assert path.suffix == ".yaml"

    def test_creates_output_dir(self, tmp_path: Path):
        target = tmp_path / "nested" / "traces"
        YAMLExporter(output_dir=target)
        assert target.is_dir()

    def test_file_named_after_submission(self, tmp_path: Path):
        root = Span(kind=SpanKind.TASK, name="task_loop", attributes={"submission_id": "sub-42"})
        root.finish()
        path = YAMLExporter(output_dir=tmp_path).export(root)
        assert path.name.startswith("trace_")
        assert path.name.endswith("_sub-42.yaml")

    def test_label_is_made_filename_safe(self):
        root = Span(kind=SpanKind.TASK, name="task_loop", attributes={"submission_id": "a/b c"})
        assert trace_label(root) == "a_b_c"
        assert trace_label(Span(kind=SpanKind.TASK, name="t", span_id="abc123")) == "abc123"

    def test_summary_section(self, tmp_path: Path):
        root = Span(kind=SpanKind.TASK, name="task_loop", attributes={"submission_id": "sub-1"})
        for action_type in ("bird_eye", "wait"):
            iteration = Span(kind=SpanKind.ITERATION, name="iteration", attributes={"action_type": action_type})
            dispatch = Span(kind=SpanKind.DISPATCH, name="dispatch")
            iteration.add_child(dispatch)
            root.add_child(iteration)
        provider = Span(kind=SpanKind.PROVIDER_CALL, name="trending_tokens")
        root.children[0].children[0].add_child(provider)
        provider.finish(error=RuntimeError("timeout"))
        root.finish()

        assert summarize(root) == {
            "iterations": 2, "actions": ["bird_eye", "wait"], "provider_calls": 1, "errors": 1,
        }
        path = YAMLExporter(output_dir=tmp_path).export(root)
        with open(path, "r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh)
        assert list(data)[0] == "summary"
        assert data["summary"]["errors"] == 1
        assert data["kind"] == "task"


# ---------------------------------------------------------------------------
# Decorators
# ---------------------------------------------------------------------------


class TestDecorators:
    @pytest.mark.asyncio
    async def test_trace_provider_creates_span(self):
        tracer = Tracer()
        token = tracer.activate()

        # Push a parent span (simulating a dispatch)
        parent, parent_token = tracer.start_span(SpanKind.DISPATCH, "parent")

        @trace_provider("token_price")
        async def my_func():
            current = get_current_span()
            assert current is not None
            assert current.kind == SpanKind.PROVIDER_CALL
            assert current.name == "token_price"
            return 1.5

        result = await my_func()
        assert result == 1.5

        assert get_current_span() is parent
        assert len(parent.children) == 1
        assert parent.children[0].name == "token_price"
        assert parent.children[0].status == "ok"
        assert parent.children[0].duration_ms is not None

        tracer.end_span(parent, parent_token)
        tracer.deactivate(token)

    @pytest.mark.asyncio
    async def test_trace_provider_error(self):
        tracer = Tracer()
        token = tracer.activate()
        parent, parent_token = tracer.start_span(SpanKind.DISPATCH, "parent")

        @trace_provider("failing_call")
        async def failing():
            raise ValueError("fail!")

        with pytest.raises(ValueError, match="fail!"):
            await failing()

        assert parent.children[0].status == "error"
        assert parent.children[0].error == "fail!"
        assert get_current_span() is parent

        tracer.end_span(parent, parent_token)
        tracer.deactivate(token)

    @pytest.mark.asyncio
    async def test_no_tracer_passthrough(self):
        """When no tracer is active, decorated functions run normally."""
        assert get_active_tracer() is None

        @trace_provider("test")
        async def my_func():
            assert get_current_span() is None
            return 42

        result = await my_func()
        assert result == 42

    @pytest.mark.asyncio
    async def test_trace_dispatch_uses_function_name(self):
        tracer = Tracer()
        token = tracer.activate()
        parent, parent_token = tracer.start_span(SpanKind.ITERATION, "iteration")

        @trace_dispatch()
        async def dispatch():
            current = get_current_span()
            assert current.kind == SpanKind.DISPATCH

        await dispatch()
        assert parent.children[0].kind == SpanKind.DISPATCH
        assert parent.children[0].name == "dispatch"

        tracer.end_span(parent, parent_token)
        tracer.deactivate(token)

    @pytest.mark.asyncio
    async def test_trace_iteration(self):
        tracer = Tracer()
        token = tracer.activate()
        parent, parent_token = tracer.start_span(SpanKind.TASK, "task")

        @trace_iteration("iteration")
        async def iterate():
            assert get_current_span().kind == SpanKind.ITERATION

        await iterate()
        await iterate()
        assert [c.kind for c in parent.children] == [SpanKind.ITERATION, SpanKind.ITERATION]

        tracer.end_span(parent, parent_token)
        tracer.deactivate(token)

    @pytest.mark.asyncio
    async def test_trace_task_auto_export(self, tmp_path: Path):
        exporter = YAMLExporter(output_dir=tmp_path)
        tracer = Tracer(exporter=exporter)
        token = tracer.activate()

        @trace_task("test_task")
        async def task_func():
            current = get_current_span()
            assert current.kind == SpanKind.TASK
            assert current.name == "test_task"

        await task_func()

        files = list(tmp_path.glob("trace_*.yaml"))
        assert len(files) == 1

        with open(files[0], "r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh)
        assert data["kind"] == "task"
        assert data["name"] == "test_task"

        tracer.deactivate(token)

    @pytest.mark.asyncio
    async def test_trace_task_exports_on_error(self, tmp_path: Path):
        tracer = Tracer(exporter=YAMLExporter(output_dir=tmp_path))
        token = tracer.activate()

        @trace_task("broken")
        async def task_func():
            raise RuntimeError("down")

        with pytest.raises(RuntimeError):
            await task_func()

        files = list(tmp_path.glob("trace_*.yaml"))
        assert len(files) == 1
        with open(files[0], "r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh)
        assert data["status"] == "error"
        assert data["error"] == "down"

        tracer.deactivate(token)

    @pytest.mark.asyncio
    async def test_nested_hierarchy(self, tmp_path: Path):
        """Full hierarchy: task → iteration → dispatch → provider_call."""
        exporter = YAMLExporter(output_dir=tmp_path)
        tracer = Tracer(exporter=exporter)
        token = tracer.activate()

        @trace_provider("trending_tokens")
        async def provider_func():
            return "tokens"

        @trace_dispatch("dispatch")
        async def dispatch_func():
            return await provider_func()

        @trace_iteration("iteration")
        async def iteration_func():
            return await dispatch_func()

        @trace_task("task_loop")
        async def task_func():
            return await iteration_func()

        result = await task_func()
        assert result == "tokens"

        files = list(tmp_path.glob("trace_*.yaml"))
        assert len(files) == 1
        with open(files[0], "r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh)

        assert data["kind"] == "task"
        iteration = data["children"][0]
        assert iteration["kind"] == "iteration"
        dispatch = iteration["children"][0]
        assert dispatch["kind"] == "dispatch"
        provider = dispatch["children"][0]
        assert provider["kind"] == "provider_call"
        assert provider["name"] == "trending_tokens"

        tracer.deactivate(token)
