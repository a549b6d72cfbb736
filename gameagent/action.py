"""Action model returned by the Decision Service.

An ``Action`` is a tagged variant over the closed ``ActionType`` set.  The two
delegate tags carry their own sub-payload and no other; this is checked when
the model is built, so a well-formed ``Action`` never has to be re-checked for
payload shape further down the line.
"""

from enum import Enum
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, model_validator
from typing_extensions import Annotated

from gameagent.exceptions import ConflictingDelegatePayloadError, MissingDelegatePayloadError


class ActionType(str, Enum):
    CALL_FUNCTION = "call_function"
    CONTINUE_FUNCTION = "continue_function"
    WAIT = "wait"
    TRY_TO_TALK = "try_to_talk"
    CONVERSATION = "conversation"
    GO_TO = "go_to"
    DELEGATE_CODE_ASSISTANT = "deep_seek"
    DELEGATE_MARKET_DATA = "bird_eye"
    UNKNOWN = "unknown"


FUNCTION_ACTIONS = frozenset({ActionType.CALL_FUNCTION, ActionType.CONTINUE_FUNCTION})
SIGNAL_ACTIONS = frozenset({ActionType.WAIT, ActionType.TRY_TO_TALK, ActionType.CONVERSATION, ActionType.GO_TO})


class CodeAssistantOperation(str, Enum):
    GENERATE_CODE = "generate_code"
    EXPLAIN_CODE = "explain_code"
    IMPROVE_CODE = "improve_code"


class MarketDataOperation(str, Enum):
    TRENDING_TOKENS = "trending_tokens"
    TOKEN_PRICE = "token_price"
    TOKEN_METADATA = "token_metadata"


class CodeAssistantArgs(BaseModel):
    """Sub-payload of a code-assistant delegation"""
    model_config = ConfigDict(populate_by_name=True)

    operation: Annotated[str, Field(
        validation_alias=AliasChoices("operation", "action"),
        serialization_alias="action",
        description="One of generate_code, explain_code, improve_code",
    )]
    prompt: Annotated[str, Field(description="Instruction for code generation")] = ""
    code: Annotated[str | None, Field(description="Source code to explain or improve")] = None


class MarketDataArgs(BaseModel):
    """Sub-payload of a market-data delegation"""
    model_config = ConfigDict(populate_by_name=True)

    operation: Annotated[str, Field(
        validation_alias=AliasChoices("operation", "action"),
        serialization_alias="action",
        description="One of trending_tokens, token_price, token_metadata",
    )]
    token_address: Annotated[str | None, Field(
        validation_alias=AliasChoices("token_address", "tokenAddress"),
        serialization_alias="tokenAddress",
        description="Token contract address",
    )] = None
    limit: Annotated[int | None, Field(description="Page size for trending tokens")] = None
    offset: Annotated[int | None, Field(description="Page offset for trending tokens")] = None


class ActionArgs(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    location_id: Annotated[str, Field(description="Worker/location the action targets")] = ""
    task_id: Annotated[str, Field(description="Task the action belongs to")] = ""
    function_id: Annotated[str, Field(alias="fn_id", description="Id echoed back in the ExecutionResult")] = ""
    function_name: Annotated[str, Field(alias="fn_name", description="Registered function to call")] = ""
    args: Annotated[dict[str, Any], Field(default_factory=dict, description="Open argument bag")]
    thought: Annotated[str, Field(description="Decision Service reasoning for this step")] = ""
    code_assistant: Annotated[CodeAssistantArgs | None, Field(
        validation_alias=AliasChoices("code_assistant", "codeAssistant", "deepseek"),
        serialization_alias="deepseek",
    )] = None
    market_data: Annotated[MarketDataArgs | None, Field(
        validation_alias=AliasChoices("market_data", "marketData", "birdeye"),
        serialization_alias="birdeye",
    )] = None


_DELEGATE_PAYLOADS = {
    ActionType.DELEGATE_CODE_ASSISTANT: "code_assistant",
    ActionType.DELEGATE_MARKET_DATA: "market_data",
}


class Action(BaseModel):
    """Next step chosen by the Decision Service"""
    model_config = ConfigDict(populate_by_name=True)

    type: Annotated[ActionType, Field(alias="action_type")]
    args: Annotated[ActionArgs, Field(alias="action_args", default_factory=ActionArgs)]
    thought: str = ""
    agent_state: dict[str, Any] | None = None
    raw_type: Annotated[str | None, Field(exclude=True, description="Tag as sent, when it was not recognized")] = None

    @model_validator(mode="before")
    @classmethod
    def _coerce_unknown_type(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        key = "action_type" if "action_type" in data else "type"
        raw = data.get(key)
        if isinstance(raw, ActionType) or raw is None:
            return data
        try:
            ActionType(raw)
        except ValueError:
            data = {**data, key: ActionType.UNKNOWN, "raw_type": str(raw)}
        return data

    @model_validator(mode="after")
    def _check_delegate_payload(self) -> 'Action':
        check_delegate_payload(self)
        return self

    @property
    def function_id(self) -> str:
        return self.args.function_id

    @property
    def type_name(self) -> str:
        return self.raw_type or self.type.value

    @property
    def is_terminal(self) -> bool:
        return self.type == ActionType.WAIT

    def with_result(self, key: str, value: Any) -> 'Action':
        """Return a copy whose argument bag is extended with *key*."""
        merged = self.model_copy(deep=True)
        merged.args.args = {**merged.args.args, key: value}
        return merged

    def to_json(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


def check_delegate_payload(action: Action) -> None:
    """Enforce that a delegate action carries exactly its own payload.

    Raises MissingDelegatePayloadError or ConflictingDelegatePayloadError.
    ``wait`` and unrecognized tags are left alone: the first always ends the
    task and the second must reach the dispatcher as an unrecognized type.
    """
    if action.type in (ActionType.WAIT, ActionType.UNKNOWN):
        return
    present = [name for name in _DELEGATE_PAYLOADS.values() if getattr(action.args, name) is not None]
    expected = _DELEGATE_PAYLOADS.get(action.type)
    if expected is not None and expected not in present:
        raise MissingDelegatePayloadError(action.type.value, expected, action.args.function_id)
    extra = [name for name in present if name != expected]
    if extra:
        raise ConflictingDelegatePayloadError(action.type_name, extra, action.args.function_id)


def parse_action(data: dict[str, Any]) -> Action:
    return Action.model_validate(data)
