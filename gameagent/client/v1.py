from typing import Any, Sequence

from gameagent.action import Action
from gameagent.client.base import AgentInfo, MapInfo
from gameagent.client.transport import HttpDecisionClient
from gameagent.function import ExecutionResult
from gameagent.worker import GameWorker


class GameClient(HttpDecisionClient):
    """Decision Service profile with unwrapped request and response bodies.

    Workers are sent whole (id plus function schemas) on every action request
    and the previous outcome travels as ``game_action_result``.
    """

    DEFAULT_BASE_URL = "https://api.artterminal.com/v1"

    def auth_headers(self, api_key: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {api_key}"}

    @staticmethod
    def _worker(worker: GameWorker) -> dict[str, Any]:
        return {"id": worker.id, "functions": worker.functions_json()}

    async def create_agent(self, name: str, goal: str, description: str) -> AgentInfo:
        body = await self._post("/agents", {"name": name, "goal": goal, "description": description})
        return AgentInfo.model_validate(body)

    async def create_map(self, workers: Sequence[GameWorker]) -> MapInfo:
        body = await self._post("/maps", {"workers": [self._worker(w) for w in workers]})
        return MapInfo.model_validate(body)

    async def set_task(self, agent_id: str, task: str) -> str:
        body = await self._post(f"/agents/{agent_id}/tasks", {"task": task})
        return self._field(body, "submission_id")

    async def request_action(
            self,
            agent_id: str,
            map_id: str,
            worker: GameWorker,
            last_result: ExecutionResult | None,
            environment: dict[str, Any],
            agent_state: dict[str, Any],
    ) -> Action:
        body = await self._post(f"/agents/{agent_id}/actions", {
            "map_id": map_id,
            "worker": self._worker(worker),
            "game_action_result": last_result.to_json() if last_result else None,
            "environment": environment,
            "agent_state": agent_state,
        })
        return self._action(body)

    async def request_next_task_action(
            self,
            agent_id: str,
            submission_id: str,
            worker: GameWorker,
            last_result: ExecutionResult | None,
            environment: dict[str, Any],
    ) -> Action:
        body = await self._post(f"/agents/{agent_id}/tasks/{submission_id}/actions", {
            "worker": self._worker(worker),
            "game_action_result": last_result.to_json() if last_result else None,
            "environment": environment,
        })
        return self._action(body)
