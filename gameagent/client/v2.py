from typing import Any, Sequence

from gameagent.action import Action
from gameagent.client.base import AgentInfo, MapInfo
from gameagent.client.transport import HttpDecisionClient
from gameagent.function import ExecutionResult
from gameagent.worker import GameWorker


class GameClientV2(HttpDecisionClient):
    """Decision Service profile whose bodies are wrapped in ``{"data": ...}``.

    Maps are built from worker locations only; function schemas are sent
    with each action request.  The previous outcome is omitted entirely on
    the first request.
    """

    DEFAULT_BASE_URL = "https://sdk.game.virtuals.io/v2"

    def auth_headers(self, api_key: str) -> dict[str, str]:
        return {"x-api-key": api_key}

    async def _post_data(self, path: str, payload: dict[str, Any]) -> Any:
        body = await self._post(path, {"data": payload})
        return self._field(body, "data")

    async def create_agent(self, name: str, goal: str, description: str) -> AgentInfo:
        data = await self._post_data("/agents", {"name": name, "goal": goal, "description": description})
        return AgentInfo.model_validate(data)

    async def create_map(self, workers: Sequence[GameWorker]) -> MapInfo:
        data = await self._post_data("/maps", {"locations": [w.location_json() for w in workers]})
        return MapInfo.model_validate(data)

    async def set_task(self, agent_id: str, task: str) -> str:
        data = await self._post_data(f"/agents/{agent_id}/tasks", {"task": task})
        return self._field(data, "submission_id")

    async def request_action(
            self,
            agent_id: str,
            map_id: str,
            worker: GameWorker,
            last_result: ExecutionResult | None,
            environment: dict[str, Any],
            agent_state: dict[str, Any],
    ) -> Action:
        payload: dict[str, Any] = {
            "location": worker.id,
            "map_id": map_id,
            "environment": environment,
            "functions": worker.functions_json(),
            "agent_state": agent_state,
            "version": "v2",
        }
        if last_result:
            payload["current_action"] = last_result.to_json()
        return self._action(await self._post_data(f"/agents/{agent_id}/actions", payload))

    async def request_next_task_action(
            self,
            agent_id: str,
            submission_id: str,
            worker: GameWorker,
            last_result: ExecutionResult | None,
            environment: dict[str, Any],
    ) -> Action:
        payload: dict[str, Any] = {
            "environment": environment,
            "functions": worker.functions_json(),
        }
        if last_result:
            payload["action_result"] = last_result.to_json()
        return self._action(await self._post_data(f"/agents/{agent_id}/tasks/{submission_id}/next", payload))
