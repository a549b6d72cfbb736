"""Market-data provider: trending tokens, prices and token metadata from BirdEye."""

import logging
from typing import Any, Literal, Protocol

import httpx
from pydantic import BaseModel, ConfigDict, Field, ValidationError
from typing_extensions import Annotated

from gameagent.exceptions import ProviderError
from gameagent.tracer import trace_provider

logger = logging.getLogger(__name__)

SortType = Literal["asc", "desc"]


class TokenInfo(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    address: str
    name: str = ""
    symbol: str = ""
    rank: int | None = None
    price: float | None = None
    volume24h: Annotated[float | None, Field(alias="volume24hUSD")] = None
    market_cap: Annotated[float | None, Field(alias="marketCap")] = None
    price_change24h: Annotated[float | None, Field(alias="priceChange24h")] = None


class TokenMetadata(BaseModel):
    model_config = ConfigDict(extra="allow")

    name: str
    symbol: str
    decimals: int


class MarketData(Protocol):
    async def get_trending_tokens(
            self,
            limit: int = 20,
            offset: int = 0,
            sort_by: str = "rank",
            sort_type: SortType = "asc",
    ) -> list[TokenInfo]:
        ...

    async def get_token_price(self, address: str) -> float:
        ...

    async def get_token_metadata(self, address: str) -> TokenMetadata:
        ...


class MarketDataClient:
    """Thin async client over the BirdEye public API.

    Every response is an envelope ``{"success": bool, "data": ...}``; an
    unsuccessful envelope, an HTTP error status or a network failure is raised
    as ``ProviderError``.
    """

    SERVICE = "BirdEye"

    def __init__(
            self,
            api_key: str,
            *,
            base_url: str = "https://public-api.birdeye.so",
            chain: str = "base",
            timeout: float = 30.0,
            transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._client = httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout,
            transport=transport,
            headers={
                "X-API-KEY": api_key,
                "accept": "application/json",
                "x-chain": chain,
            },
        )

    async def __aenter__(self) -> 'MarketDataClient':
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    @trace_provider("trending_tokens")
    async def get_trending_tokens(
            self,
            limit: int = 20,
            offset: int = 0,
            sort_by: str = "rank",
            sort_type: SortType = "asc",
    ) -> list[TokenInfo]:
        data = await self._get(
            "/defi/token_trending",
            {"sort_by": sort_by, "sort_type": sort_type, "offset": offset, "limit": limit},
            "Failed to fetch trending tokens",
        )
        try:
            return [TokenInfo.model_validate(token) for token in data.get("tokens", [])]
        except (AttributeError, TypeError, ValidationError) as e:
            raise ProviderError(self.SERVICE, f"Malformed trending tokens response: {e}") from e

    @trace_provider("token_price")
    async def get_token_price(self, address: str) -> float:
        data = await self._get("/defi/token_price", {"address": address}, "Failed to fetch token price")
        try:
            return float(data["value"])
        except (KeyError, TypeError, ValueError) as e:
            raise ProviderError(self.SERVICE, f"Malformed token price response: {e}") from e

    @trace_provider("token_metadata")
    async def get_token_metadata(self, address: str) -> TokenMetadata:
        data = await self._get("/defi/token_metadata", {"address": address}, "Failed to fetch token metadata")
        try:
            return TokenMetadata.model_validate(data)
        except ValidationError as e:
            raise ProviderError(self.SERVICE, f"Malformed token metadata response: {e}") from e

    async def _get(self, path: str, params: dict[str, Any], failure_message: str) -> Any:
        logger.debug(f"GET {path} {params}")
        try:
            resp = await self._client.get(path, params=params)
            resp.raise_for_status()
            body = resp.json()
        except httpx.HTTPStatusError as e:
            raise ProviderError(self.SERVICE, f"{e.response.status_code}: {e.response.text}", e.response.status_code) from e
        except httpx.HTTPError as e:
            raise ProviderError(self.SERVICE, str(e) or type(e).__name__) from e
        except ValueError as e:
            raise ProviderError(self.SERVICE, f"Invalid JSON response: {e}") from e

        if not isinstance(body, dict) or not body.get("success"):
            raise ProviderError(self.SERVICE, failure_message)
        return body.get("data") or {}
