"""Action dispatcher: classify an action and run its executor.

The dispatcher is stateless.  It never mutates the action it is given; the
outcome carries a copy whose argument bag holds the delegate's result under
``code_assistant_result`` or ``market_data_result``.  Every failure is raised
as a ``DispatchError`` subclass, and the dispatcher never downgrades one into a
result; deciding what a failure means for the task is the loop's job.
"""

import logging
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel

from gameagent.action import (
    FUNCTION_ACTIONS,
    SIGNAL_ACTIONS,
    Action,
    ActionType,
    CodeAssistantOperation,
    MarketDataOperation,
    check_delegate_payload,
)
from gameagent.context import ExecutionContext
from gameagent.exceptions import (
    MissingProviderError,
    MissingRequiredArgumentError,
    UnknownFunctionError,
    UnknownOperationError,
    UnrecognizedActionTypeError,
)
from gameagent.function import ExecutionResult, FunctionRegistry
from gameagent.providers.code_assistant import CodeAssistant
from gameagent.providers.market_data import MarketData
from gameagent.tracer import annotate, trace_dispatch

logger = logging.getLogger(__name__)

CODE_ASSISTANT_RESULT = "code_assistant_result"
MARKET_DATA_RESULT = "market_data_result"


@dataclass(frozen=True)
class DispatchOutcome:
    """What a dispatch produced.

    ``action`` is the (possibly merged) action; ``result`` is set only when a
    local function ran.
    """
    action: Action
    result: ExecutionResult | None = None

    @property
    def delegated_result(self) -> Any:
        bag = self.action.args.args
        if self.action.type == ActionType.DELEGATE_CODE_ASSISTANT:
            return bag.get(CODE_ASSISTANT_RESULT)
        if self.action.type == ActionType.DELEGATE_MARKET_DATA:
            return bag.get(MARKET_DATA_RESULT)
        return None


class ActionDispatcher:
    def __init__(
            self,
            registry: FunctionRegistry,
            code_assistant: CodeAssistant | None = None,
            market_data: MarketData | None = None,
    ):
        self.registry = registry
        self.code_assistant = code_assistant
        self.market_data = market_data

    @trace_dispatch()
    async def dispatch(self, action: Action, ctx: ExecutionContext | None = None) -> DispatchOutcome:
        annotate(action_type=action.type_name, function_id=action.function_id)

        if action.type in FUNCTION_ACTIONS:
            return DispatchOutcome(action=action, result=await self._call_function(action, ctx))
        if action.type == ActionType.DELEGATE_CODE_ASSISTANT:
            check_delegate_payload(action)
            result = await self._delegate_code_assistant(action)
            return DispatchOutcome(action=action.with_result(CODE_ASSISTANT_RESULT, result))
        if action.type == ActionType.DELEGATE_MARKET_DATA:
            check_delegate_payload(action)
            result = await self._delegate_market_data(action)
            return DispatchOutcome(action=action.with_result(MARKET_DATA_RESULT, _to_plain(result)))
        if action.type in SIGNAL_ACTIONS:
            logger.debug(f"Passing through {action.type.value} action")
            return DispatchOutcome(action=action)
        raise UnrecognizedActionTypeError(action.type_name, action.function_id)

    async def _call_function(self, action: Action, ctx: ExecutionContext | None) -> ExecutionResult:
        name = action.args.function_name
        if name not in self.registry:
            raise UnknownFunctionError(name, list(self.registry), action.function_id)
        logger.info(f"Calling function {name} with args: {action.args.args}")
        return await self.registry[name].execute(action.function_id, action.args.args, ctx)

    async def _delegate_code_assistant(self, action: Action) -> str:
        payload = action.args.code_assistant
        assert payload is not None
        if self.code_assistant is None:
            raise MissingProviderError("code assistant", action.function_id)

        operation = payload.operation
        if operation == CodeAssistantOperation.GENERATE_CODE.value:
            return await self.code_assistant.generate_code(payload.prompt)
        if operation in (CodeAssistantOperation.EXPLAIN_CODE.value, CodeAssistantOperation.IMPROVE_CODE.value):
            if not payload.code:
                raise MissingRequiredArgumentError(operation, "code", action.function_id)
            if operation == CodeAssistantOperation.EXPLAIN_CODE.value:
                return await self.code_assistant.explain_code(payload.code)
            return await self.code_assistant.improve_code(payload.code)
        raise UnknownOperationError("DeepSeek", operation, action.function_id)

    async def _delegate_market_data(self, action: Action) -> Any:
        payload = action.args.market_data
        assert payload is not None
        if self.market_data is None:
            raise MissingProviderError("market data", action.function_id)

        operation = payload.operation
        if operation == MarketDataOperation.TRENDING_TOKENS.value:
            # only forward what was sent so the provider's defaults apply
            paging = {k: v for k, v in (("limit", payload.limit), ("offset", payload.offset)) if v is not None}
            return await self.market_data.get_trending_tokens(**paging)
        if operation in (MarketDataOperation.TOKEN_PRICE.value, MarketDataOperation.TOKEN_METADATA.value):
            if not payload.token_address:
                raise MissingRequiredArgumentError(operation, "tokenAddress", action.function_id)
            if operation == MarketDataOperation.TOKEN_PRICE.value:
                return await self.market_data.get_token_price(payload.token_address)
            return await self.market_data.get_token_metadata(payload.token_address)
        raise UnknownOperationError("BirdEye", operation, action.function_id)


def _to_plain(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", by_alias=True)
    if isinstance(value, list):
        return [_to_plain(v) for v in value]
    return value
