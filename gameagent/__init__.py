"""Agent action-resolution loop.

An agent repeatedly asks a remote Decision Service for its next action,
dispatches it to a local function or a delegate provider, and feeds the
outcome back until the service answers ``wait``.

Core components:
- ActionDispatcher: classifies an Action and invokes its executor
- TaskExecutionLoop: request → dispatch → feedback until a terminal action
- GameAgent: agent/map/task registration on top of the loop

Models:
- Action, ActionType, ActionArgs: what the Decision Service asks for
- GameFunction, ArgSpec, FunctionRegistry, ExecutionResult: local functions
- GameWorker: a location owning a function registry
"""

from .action import Action, ActionArgs, ActionType, CodeAssistantArgs, MarketDataArgs, parse_action
from .agent import GameAgent
from .client import DecisionClient, GameClient, GameClientV2, Task
from .context import ExecutionContext, LoggingExecutionContext
from .dispatcher import ActionDispatcher, DispatchOutcome
from .function import ArgSpec, ExecutionResult, FunctionRegistry, FunctionStatus, GameFunction
from .loop import LoopOutcome, LoopState, LoopStatus, TaskExecutionLoop
from .worker import GameWorker

__all__ = [
    # Core
    "ActionDispatcher",
    "DispatchOutcome",
    "TaskExecutionLoop",
    "LoopOutcome",
    "LoopState",
    "LoopStatus",
    "GameAgent",

    # Decision Service
    "DecisionClient",
    "GameClient",
    "GameClientV2",
    "Task",

    # Models
    "Action",
    "ActionArgs",
    "ActionType",
    "CodeAssistantArgs",
    "MarketDataArgs",
    "parse_action",
    "ArgSpec",
    "ExecutionResult",
    "FunctionRegistry",
    "FunctionStatus",
    "GameFunction",
    "GameWorker",

    # Runtime
    "ExecutionContext",
    "LoggingExecutionContext",
]
