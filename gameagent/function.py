"""Locally executable functions and the registry the dispatcher looks them up in.

This module provides:
- ArgSpec / GameFunction: a named function with an ordered argument schema
- ExecutionResult: the normalized outcome fed back to the Decision Service
- FunctionRegistry: an immutable name -> GameFunction mapping
"""

import inspect
import logging
from enum import Enum
from types import MappingProxyType
from typing import Any, Awaitable, Callable, Iterable, Iterator, Mapping, Sequence, Union

from pydantic import BaseModel, ConfigDict, Field
from typing_extensions import Annotated

from gameagent.context import ExecutionContext, LoggingExecutionContext

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Execution result
# ---------------------------------------------------------------------------


class FunctionStatus(str, Enum):
    """Status reported back to the Decision Service"""
    DONE = "done"
    FAILED = "failed"


class ExecutionResult(BaseModel):
    """Universal outcome shape, regardless of which executor produced it"""
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    function_id: Annotated[str, Field(alias="action_id", description="Id of the action that produced this result")] = ""
    status: Annotated[FunctionStatus, Field(alias="action_status", description="Execution status")]
    feedback_message: Annotated[str, Field(description="Free text the Decision Service reasons about")] = ""

    @classmethod
    def done(cls, feedback_message: str, function_id: str = "") -> 'ExecutionResult':
        return cls(function_id=function_id, status=FunctionStatus.DONE, feedback_message=feedback_message)

    @classmethod
    def failed(cls, feedback_message: str, function_id: str = "") -> 'ExecutionResult':
        return cls(function_id=function_id, status=FunctionStatus.FAILED, feedback_message=feedback_message)

    def to_json(self) -> dict[str, Any]:
        """Render with the wire field names."""
        return self.model_dump(mode="json", by_alias=True)


# ---------------------------------------------------------------------------
# Functions
# ---------------------------------------------------------------------------


class ArgSpec(BaseModel):
    """Declared argument of a GameFunction"""
    model_config = ConfigDict(frozen=True)

    name: Annotated[str, Field(description="Argument name")]
    description: Annotated[str, Field(description="What the argument means")]
    type: Annotated[str | None, Field(description="Optional type hint shown to the Decision Service")] = None
    optional: Annotated[bool, Field(description="Whether the argument may be omitted")] = False

    def to_json(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)


Executable = Callable[
    [dict[str, Any], ExecutionContext],
    Union[ExecutionResult, Awaitable[ExecutionResult]],
]


class GameFunction:
    """A locally executable function with an ordered argument schema.

    The executable receives the bound arguments as a mapping and an
    ``ExecutionContext``.  It may be a plain function or a coroutine function
    and must return an ``ExecutionResult``.  Executables build it with
    ``ExecutionResult.done(message)`` or ``ExecutionResult.failed(message)``;
    the id is filled in with the id of the action being executed.
    """

    def __init__(
            self,
            name: str,
            description: str,
            args: Sequence[ArgSpec],
            executable: Executable,
    ):
        names = [arg.name for arg in args]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise ValueError(f"Duplicate argument names in function '{name}': {', '.join(duplicates)}")
        self.name = name
        self.description = description
        self.args: tuple[ArgSpec, ...] = tuple(args)
        self.executable = executable

    def __repr__(self) -> str:
        return f"GameFunction(name={self.name!r}, args={[a.name for a in self.args]!r})"

    def to_json(self) -> dict[str, Any]:
        return {
            "fn_name": self.name,
            "fn_description": self.description,
            "args": [arg.to_json() for arg in self.args],
        }

    def bind(self, values: Mapping[str, Any] | Sequence[Any]) -> dict[str, Any]:
        """Bind caller-supplied values to the declared arguments.

        A sequence is bound positionally in declaration order.  A mapping is
        taken by name; values wrapped as ``{"value": x}`` are unwrapped.
        Unknown names are kept so executables can opt into extra fields.
        """
        if isinstance(values, Mapping):
            return {key: _unwrap(value) for key, value in values.items()}
        if len(values) > len(self.args):
            raise ValueError(
                f"Function '{self.name}' takes {len(self.args)} arguments but {len(values)} were given"
            )
        return {spec.name: _unwrap(value) for spec, value in zip(self.args, values)}

    def missing_args(self, bound: Mapping[str, Any]) -> list[str]:
        return [arg.name for arg in self.args if not arg.optional and bound.get(arg.name) is None]

    async def execute(
            self,
            function_id: str,
            values: Mapping[str, Any] | Sequence[Any],
            ctx: ExecutionContext | None = None,
    ) -> ExecutionResult:
        """Run the executable once and normalize its outcome."""
        ctx = ctx or LoggingExecutionContext(logger, prefix=self.name)
        try:
            bound = self.bind(values)
        except ValueError as e:
            return ExecutionResult.failed(str(e), function_id)

        missing = self.missing_args(bound)
        if missing:
            return ExecutionResult.failed(
                f"Missing required argument(s) for {self.name}: {', '.join(missing)}",
                function_id,
            )

        try:
            result = self.executable(bound, ctx)
            if inspect.isawaitable(result):
                result = await result
        except Exception as e:
            logger.exception(f"Error executing function {self.name}")
            return ExecutionResult.failed(f"Function {self.name} raised: {e}", function_id)

        if not isinstance(result, ExecutionResult):
            raise TypeError(f"Unexpected result type from function {self.name}: {type(result)}")
        return result.model_copy(update={"function_id": function_id})


def _unwrap(value: Any) -> Any:
    if isinstance(value, Mapping) and set(value.keys()) == {"value"}:
        return value["value"]
    return value


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------


class FunctionRegistry(Mapping[str, GameFunction]):
    """Immutable name -> GameFunction mapping shared read-only by dispatchers"""

    def __init__(self, functions: Iterable[GameFunction] = ()):
        table: dict[str, GameFunction] = {}
        for fn in functions:
            if fn.name in table:
                raise ValueError(f"Function '{fn.name}' registered twice")
            table[fn.name] = fn
        self._functions = MappingProxyType(table)

    def __getitem__(self, name: str) -> GameFunction:
        return self._functions[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._functions)

    def __len__(self) -> int:
        return len(self._functions)

    def __repr__(self) -> str:
        return f"FunctionRegistry({list(self._functions)!r})"

    def to_json(self) -> list[dict[str, Any]]:
        return [fn.to_json() for fn in self._functions.values()]
