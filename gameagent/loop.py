"""Task execution loop: request → dispatch → feedback until the service says wait."""

import asyncio
import json
import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from gameagent.action import Action, ActionType
from gameagent.client.base import DecisionClient, Task
from gameagent.context import ExecutionContext, LoggingExecutionContext
from gameagent.dispatcher import ActionDispatcher, DispatchOutcome
from gameagent.exceptions import DispatchError, UnrecognizedActionTypeError
from gameagent.function import ExecutionResult
from gameagent.tracer import annotate, trace_iteration, trace_task
from gameagent.worker import GameWorker

logger = logging.getLogger(__name__)

PASS_THROUGH_FEEDBACK = "Action completed successfully"
MAX_FEEDBACK_LEN = 4000


class LoopState(Enum):
    AWAITING_ACTION = "awaiting_action"
    DISPATCHING = "dispatching"
    FEEDBACK = "feedback"
    TERMINATED = "terminated"
    ABORTED = "aborted"


class LoopStatus(Enum):
    """How a loop run ended."""
    TERMINATED = "terminated"  # the Decision Service returned wait
    ABORTED = "aborted"  # a local limit or cancellation stopped the loop


@dataclass
class LoopOutcome:
    task: Task
    status: LoopStatus
    iterations: int
    last_action: Action | None = None
    last_result: ExecutionResult | None = None
    abort_reason: str | None = None
    actions: list[Action] = field(default_factory=list)


class TaskExecutionLoop:
    """Drives one submitted task until a terminal action is observed.

    Each iteration issues exactly one ``request_next_task_action`` call and
    dispatches the returned action.  A ``wait`` action ends the run.  Dispatch
    failures are reported back as ``failed`` results when
    *feed_back_failures* is set, so the Decision Service can pick a different
    action; unrecognized action types and transport errors always propagate.

    *max_iterations*, *timeout* and a *cancel_event* are checked at the start
    of every iteration and end the run with ``LoopStatus.ABORTED``.
    """

    def __init__(
            self,
            client: DecisionClient,
            dispatcher: ActionDispatcher,
            worker: GameWorker,
            *,
            max_iterations: int | None = None,
            timeout: float | None = None,
            feed_back_failures: bool = True,
            ctx: ExecutionContext | None = None,
    ):
        self.client = client
        self.dispatcher = dispatcher
        self.worker = worker
        self.max_iterations = max_iterations
        self.timeout = timeout
        self.feed_back_failures = feed_back_failures
        self.ctx = ctx or LoggingExecutionContext(logger, prefix=worker.name)
        self.state = LoopState.AWAITING_ACTION

    @trace_task("task_loop")
    async def run(
            self,
            task: Task,
            environment: dict[str, Any] | None = None,
            cancel_event: asyncio.Event | None = None,
    ) -> LoopOutcome:
        annotate(task_id=task.id, submission_id=task.submission_id)

        environment = environment or {}
        outcome = LoopOutcome(task=task, status=LoopStatus.TERMINATED, iterations=0)
        started = time.monotonic()
        self.state = LoopState.AWAITING_ACTION

        while True:
            reason = self._abort_reason(outcome.iterations, started, cancel_event)
            if reason is not None:
                logger.warning(f"Aborting task {task.submission_id}: {reason}")
                self.state = LoopState.ABORTED
                outcome.status = LoopStatus.ABORTED
                outcome.abort_reason = reason
                annotate(loop_status=outcome.status.value, abort_reason=reason)
                return outcome

            outcome.iterations += 1
            action, result = await self._iterate(task, outcome.last_result, environment, outcome.iterations)
            if action is not None:
                outcome.last_action = action
                outcome.actions.append(action)
            if action is not None and action.is_terminal:
                logger.info(f"Task {task.submission_id} finished after {outcome.iterations} iteration(s)")
                self.state = LoopState.TERMINATED
                annotate(loop_status=outcome.status.value)
                return outcome
            outcome.last_result = result
            self.state = LoopState.AWAITING_ACTION

    @trace_iteration("iteration")
    async def _iterate(
            self,
            task: Task,
            last_result: ExecutionResult | None,
            environment: dict[str, Any],
            number: int = 1,
    ) -> tuple[Action | None, ExecutionResult | None]:
        self.state = LoopState.AWAITING_ACTION
        annotate(iteration=number)
        try:
            action = await self.client.request_next_task_action(
                task.id, task.submission_id, self.worker, last_result, environment,
            )
        except DispatchError as e:
            # the service sent a malformed action; nothing to dispatch
            return None, self._failure(e)

        self.state = LoopState.DISPATCHING
        annotate(action_type=action.type_name, function_id=action.function_id)
        await self.ctx.info(f"Executing action: {action.type_name}")
        thought = action.args.thought or action.thought
        if thought:
            await self.ctx.debug(f"Thought: {thought}")
        try:
            dispatched = await self.dispatcher.dispatch(action, self.ctx)
        except DispatchError as e:
            return action, self._failure(e, action)

        self.state = LoopState.FEEDBACK
        return dispatched.action, build_result(dispatched)

    def _failure(self, error: DispatchError, action: Action | None = None) -> ExecutionResult:
        if isinstance(error, UnrecognizedActionTypeError) or not self.feed_back_failures:
            raise error
        logger.warning(f"Dispatch failed, reporting back: {error}")
        function_id = action.function_id if action is not None else (error.function_id or "")
        return ExecutionResult.failed(str(error), function_id)

    def _abort_reason(self, iterations: int, started: float, cancel_event: asyncio.Event | None) -> str | None:
        if cancel_event is not None and cancel_event.is_set():
            return "cancelled"
        if self.max_iterations is not None and iterations >= self.max_iterations:
            return f"reached max_iterations={self.max_iterations}"
        if self.timeout is not None and time.monotonic() - started >= self.timeout:
            return f"exceeded timeout of {self.timeout}s"
        return None


def build_result(outcome: DispatchOutcome) -> ExecutionResult:
    """Normalize a dispatch outcome into the result fed to the next request."""
    action = outcome.action
    if outcome.result is not None:
        return outcome.result
    if action.type in (ActionType.DELEGATE_CODE_ASSISTANT, ActionType.DELEGATE_MARKET_DATA):
        return ExecutionResult.done(_summarize(outcome.delegated_result), action.function_id)
    return ExecutionResult.done(PASS_THROUGH_FEEDBACK, action.function_id)


def _summarize(value: Any) -> str:
    text = value if isinstance(value, str) else json.dumps(value, ensure_ascii=False, default=str)
    if len(text) > MAX_FEEDBACK_LEN:
        text = text[:MAX_FEEDBACK_LEN] + "…"
    return text
