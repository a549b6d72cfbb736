"""Tests for GameFunction, ExecutionResult and FunctionRegistry."""

import pytest

from gameagent.context import CollectingExecutionContext
from gameagent.function import (
    ArgSpec,
    ExecutionResult,
    FunctionRegistry,
    FunctionStatus,
    GameFunction,
)
from gameagent.worker import GameWorker


def greet(args, ctx):
    return ExecutionResult.done(f"Hello {args['name']}")


async def async_greet(args, ctx):
    await ctx.info(f"greeting {args['name']}")
    return ExecutionResult.done(f"Hi {args['name']}", function_id="ignored")


def greet_function(executable=greet) -> GameFunction:
    return GameFunction(
        name="greet",
        description="Say hello",
        args=[
            ArgSpec(name="name", description="Who to greet"),
            ArgSpec(name="title", description="Honorific", type="string", optional=True),
        ],
        executable=executable,
    )


class TestExecutionResult:
    def test_wire_aliases(self):
        result = ExecutionResult.done("ok", "f-1")
        assert result.to_json() == {"action_id": "f-1", "action_status": "done", "feedback_message": "ok"}

    def test_parse_from_wire(self):
        result = ExecutionResult.model_validate({"action_id": "f-2", "action_status": "failed"})
        assert result.status == FunctionStatus.FAILED
        assert result.function_id == "f-2"
        assert result.feedback_message == ""


class TestGameFunction:
    def test_duplicate_arg_names_rejected(self):
        with pytest.raises(ValueError, match="Duplicate argument names"):
            GameFunction(
                name="f",
                description="",
                args=[ArgSpec(name="a", description=""), ArgSpec(name="a", description="")],
                executable=greet,
            )

    def test_to_json(self):
        data = greet_function().to_json()
        assert data["fn_name"] == "greet"
        assert data["fn_description"] == "Say hello"
        assert data["args"][0] == {"name": "name", "description": "Who to greet", "optional": False}
        assert data["args"][1]["type"] == "string"

    def test_bind_positional_follows_declared_order(self):
        assert greet_function().bind(["bob", "Dr"]) == {"name": "bob", "title": "Dr"}

    def test_bind_too_many_positional(self):
        with pytest.raises(ValueError):
            greet_function().bind(["a", "b", "c"])

    def test_bind_unwraps_value_objects(self):
        bound = greet_function().bind({"name": {"value": "bob"}, "extra": {"value": 1, "unit": "s"}})
        assert bound == {"name": "bob", "extra": {"value": 1, "unit": "s"}}

    def test_missing_args_ignores_optional(self):
        assert greet_function().missing_args({"title": "Dr"}) == ["name"]
        assert greet_function().missing_args({"name": "bob"}) == []

    @pytest.mark.asyncio
    async def test_execute_sync(self):
        result = await greet_function().execute("f-1", {"name": "bob"})
        assert result == ExecutionResult.done("Hello bob", "f-1")

    @pytest.mark.asyncio
    async def test_execute_async_overrides_function_id(self):
        ctx = CollectingExecutionContext()
        result = await greet_function(async_greet).execute("f-2", ["ann"], ctx)
        assert result.function_id == "f-2"
        assert result.feedback_message == "Hi ann"
        assert ctx.messages == [("info", "greeting ann")]

    @pytest.mark.asyncio
    async def test_execute_missing_required(self):
        calls = []

        def record(args, ctx):
            calls.append(args)
            return ExecutionResult.done("")

        result = await greet_function(record).execute("f-3", {})
        assert result.status == FunctionStatus.FAILED
        assert "name" in result.feedback_message
        assert result.function_id == "f-3"
        assert calls == []

    @pytest.mark.asyncio
    async def test_execute_exception_becomes_failed(self):
        def boom(args, ctx):
            raise RuntimeError("kaput")

        result = await greet_function(boom).execute("f-4", {"name": "x"})
        assert result.status == FunctionStatus.FAILED
        assert result.feedback_message == "Function greet raised: kaput"

    @pytest.mark.asyncio
    async def test_execute_wrong_return_type(self):
        with pytest.raises(TypeError):
            await greet_function(lambda args, ctx: "nope").execute("f-5", {"name": "x"})


class TestFunctionRegistry:
    def test_lookup_and_iteration(self):
        registry = FunctionRegistry([greet_function()])
        assert "greet" in registry
        assert list(registry) == ["greet"]
        assert len(registry) == 1
        assert registry["greet"].name == "greet"

    def test_duplicate_names_rejected(self):
        with pytest.raises(ValueError, match="registered twice"):
            FunctionRegistry([greet_function(), greet_function()])

    def test_is_read_only(self):
        registry = FunctionRegistry([greet_function()])
        with pytest.raises(TypeError):
            registry._functions["other"] = greet_function()

    def test_worker_exposes_registry(self):
        worker = GameWorker("w-1", "Greeter", "Greets people", [greet_function()])
        assert worker.functions_json() == [greet_function().to_json()]
        assert worker.location_json() == {"id": "w-1", "name": "Greeter", "description": "Greets people"}
