import logging
from typing import Any

import httpx
from pydantic import ValidationError

from gameagent.action import Action, parse_action
from gameagent.exceptions import DecisionServiceError

logger = logging.getLogger(__name__)


class HttpDecisionClient:
    """Shared JSON-over-HTTPS plumbing for the Decision Service profiles.

    The underlying ``httpx.AsyncClient`` is created in the constructor and
    lives until :meth:`aclose`.
    """

    DEFAULT_BASE_URL: str = ""

    def __init__(
            self,
            api_key: str,
            *,
            base_url: str | None = None,
            timeout: float = 60.0,
            transport: httpx.AsyncBaseTransport | None = None,
    ):
        if not api_key:
            raise ValueError("api_key is required for the Decision Service client")
        self.base_url = base_url or self.DEFAULT_BASE_URL
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            transport=transport,
            headers={"Content-Type": "application/json", **self.auth_headers(api_key)},
        )

    def auth_headers(self, api_key: str) -> dict[str, str]:
        raise NotImplementedError

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _post(self, path: str, payload: dict[str, Any]) -> Any:
        logger.debug(f"POST {path}")
        try:
            resp = await self._client.post(path, json=payload)
            resp.raise_for_status()
            return resp.json()
        except httpx.HTTPStatusError as e:
            raise DecisionServiceError(f"{e.response.status_code}: {e.response.text}", e.response.status_code) from e
        except httpx.HTTPError as e:
            raise DecisionServiceError(str(e) or type(e).__name__) from e
        except ValueError as e:
            raise DecisionServiceError(f"Invalid JSON response: {e}") from e

    @staticmethod
    def _field(body: Any, *keys: str) -> Any:
        for key in keys:
            if not isinstance(body, dict) or key not in body:
                raise DecisionServiceError(f"Response is missing '{'.'.join(keys)}'")
            body = body[key]
        return body

    @staticmethod
    def _action(data: Any) -> Action:
        if not isinstance(data, dict):
            raise DecisionServiceError(f"Expected an action object, got {type(data).__name__}")
        try:
            action = parse_action(data)
        except ValidationError as e:
            raise DecisionServiceError(f"Malformed action: {e}") from e
        logger.debug(f"Received action {action.type_name} (fn_id={action.function_id})")
        return action
