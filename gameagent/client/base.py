"""Decision Client protocol and the records its one-shot calls return."""

from typing import Any, Protocol, Sequence

from pydantic import BaseModel, ConfigDict

from gameagent.action import Action
from gameagent.function import ExecutionResult
from gameagent.worker import GameWorker


class AgentInfo(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str
    name: str = ""
    goal: str = ""
    description: str = ""


class MapInfo(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str


class Task(BaseModel):
    """A submitted task, referenced by every loop iteration"""
    model_config = ConfigDict(frozen=True)

    id: str
    submission_id: str


class DecisionClient(Protocol):
    async def create_agent(self, name: str, goal: str, description: str) -> AgentInfo:
        ...

    async def create_map(self, workers: Sequence[GameWorker]) -> MapInfo:
        ...

    async def set_task(self, agent_id: str, task: str) -> str:
        """Submit *task* and return its submission id."""
        ...

    async def request_action(
            self,
            agent_id: str,
            map_id: str,
            worker: GameWorker,
            last_result: ExecutionResult | None,
            environment: dict[str, Any],
            agent_state: dict[str, Any],
    ) -> Action:
        ...

    async def request_next_task_action(
            self,
            agent_id: str,
            submission_id: str,
            worker: GameWorker,
            last_result: ExecutionResult | None,
            environment: dict[str, Any],
    ) -> Action:
        ...

    async def aclose(self) -> None:
        ...
