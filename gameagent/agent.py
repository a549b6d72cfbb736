"""Agent facade: one-shot registration plus the task and map-step loops."""

import asyncio
import logging
from typing import Any

from gameagent.action import Action
from gameagent.client import DecisionClient, Task, build_client
from gameagent.client.base import AgentInfo, MapInfo
from gameagent.config.game import GameAgentConfig
from gameagent.context import ExecutionContext, LoggingExecutionContext
from gameagent.dispatcher import ActionDispatcher
from gameagent.exceptions import DispatchError, UnrecognizedActionTypeError
from gameagent.function import ExecutionResult, GameFunction
from gameagent.llm import ChatLLMFactory
from gameagent.loop import LoopOutcome, TaskExecutionLoop, build_result
from gameagent.providers import CodeAssistant, CodeAssistantClient, MarketData, MarketDataClient
from gameagent.worker import GameWorker

logger = logging.getLogger(__name__)


class GameAgent:
    """An agent registered with the Decision Service.

    ``init`` creates the agent and its map once.  ``run_task`` submits a task
    and drives it through a ``TaskExecutionLoop``; ``step`` performs a single
    map-level request/dispatch round, carrying the agent state the service
    returns from one step to the next.
    """

    def __init__(
            self,
            client: DecisionClient,
            worker: GameWorker,
            *,
            name: str,
            goal: str,
            description: str = "",
            code_assistant: CodeAssistant | None = None,
            market_data: MarketData | None = None,
            max_iterations: int | None = None,
            timeout: float | None = None,
            feed_back_failures: bool = True,
            ctx: ExecutionContext | None = None,
    ):
        self.client = client
        self.worker = worker
        self.name = name
        self.goal = goal
        self.description = description
        self.code_assistant = code_assistant
        self.market_data = market_data
        self.dispatcher = ActionDispatcher(worker.functions, code_assistant, market_data)
        self.max_iterations = max_iterations
        self.timeout = timeout
        self.feed_back_failures = feed_back_failures
        self.ctx = ctx or LoggingExecutionContext(logger, prefix=name)

        self.agent: AgentInfo | None = None
        self.map: MapInfo | None = None
        self.agent_state: dict[str, Any] = {}
        self.last_result: ExecutionResult | None = None

    @classmethod
    def from_config(
            cls,
            config: GameAgentConfig,
            functions: list[GameFunction] | None = None,
            ctx: ExecutionContext | None = None,
    ) -> 'GameAgent':
        worker = GameWorker(
            id=config.worker.id,
            name=config.worker.name or config.worker.id,
            description=config.worker.description,
            functions=functions or [],
        )
        code_assistant = None
        if config.code_assistant is not None:
            code_assistant = CodeAssistantClient(ChatLLMFactory.build(config.code_assistant))
        market_data = None
        if config.market_data is not None:
            market_data = MarketDataClient(
                config.market_data.api_key,
                base_url=config.market_data.base_url,
                chain=config.market_data.chain,
                timeout=config.market_data.timeout,
            )
        return cls(
            build_client(config.decision_service),
            worker,
            name=config.agent.name,
            goal=config.agent.goal,
            description=config.agent.description,
            code_assistant=code_assistant,
            market_data=market_data,
            max_iterations=config.loop.max_iterations,
            timeout=config.loop.timeout,
            feed_back_failures=config.loop.feed_back_failures,
            ctx=ctx,
        )

    async def __aenter__(self) -> 'GameAgent':
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        for resource in (self.client, self.code_assistant, self.market_data):
            close = getattr(resource, "aclose", None)
            if close is not None:
                await close()

    async def init(self) -> AgentInfo:
        if self.agent is None:
            self.agent = await self.client.create_agent(self.name, self.goal, self.description)
            logger.info(f"Created agent {self.agent.id} ({self.name})")
        return self.agent

    async def ensure_map(self) -> MapInfo:
        if self.map is None:
            self.map = await self.client.create_map([self.worker])
            logger.info(f"Created map {self.map.id}")
        return self.map

    def task_loop(self) -> TaskExecutionLoop:
        return TaskExecutionLoop(
            self.client,
            self.dispatcher,
            self.worker,
            max_iterations=self.max_iterations,
            timeout=self.timeout,
            feed_back_failures=self.feed_back_failures,
            ctx=self.ctx,
        )

    async def submit_task(self, task: str) -> Task:
        agent = await self.init()
        submission_id = await self.client.set_task(agent.id, task)
        logger.info(f"Submitted task {submission_id}: {task}")
        return Task(id=agent.id, submission_id=submission_id)

    async def run_task(
            self,
            task: str,
            environment: dict[str, Any] | None = None,
            cancel_event: asyncio.Event | None = None,
    ) -> LoopOutcome:
        submitted = await self.submit_task(task)
        return await self.task_loop().run(submitted, environment, cancel_event)

    async def step(self, environment: dict[str, Any] | None = None) -> Action | None:
        """Request and dispatch one map-level action.

        Returns the dispatched action, or ``None`` when the service sent one
        that could not be built; the result is kept for the next step.
        """
        agent = await self.init()
        game_map = await self.ensure_map()
        try:
            action = await self.client.request_action(
                agent.id,
                game_map.id,
                self.worker,
                self.last_result,
                environment or {},
                self.agent_state,
            )
        except DispatchError as e:
            self.last_result = self._failure(e, e.function_id or "")
            return None
        if action.agent_state is not None:
            self.agent_state = action.agent_state

        await self.ctx.info(f"Executing action: {action.type_name}")
        try:
            outcome = await self.dispatcher.dispatch(action, self.ctx)
        except DispatchError as e:
            self.last_result = self._failure(e, action.function_id)
            return action
        self.last_result = None if outcome.action.is_terminal else build_result(outcome)
        return outcome.action

    def _failure(self, error: DispatchError, function_id: str) -> ExecutionResult:
        if isinstance(error, UnrecognizedActionTypeError) or not self.feed_back_failures:
            raise error
        logger.warning(f"Dispatch failed, reporting back: {error}")
        return ExecutionResult.failed(str(error), function_id)
