from pydantic import BaseModel, Field
from typing_extensions import Annotated

from gameagent.config.client import DecisionServiceConfig, MarketDataConfig, VoiceConfig
from gameagent.config.llm import ChatConfig


class LoopConfig(BaseModel):
    max_iterations: Annotated[int | None, Field(
        description="Stop with an aborted outcome after this many iterations",
        default=None,
        gt=0,
    )]
    timeout: Annotated[float | None, Field(
        description="Stop with an aborted outcome once this many seconds have elapsed",
        default=None,
        gt=0,
    )]
    feed_back_failures: Annotated[bool, Field(
        description="Report dispatch failures to the Decision Service instead of raising",
        default=True,
    )]


class WorkerConfig(BaseModel):
    id: Annotated[str, Field(description="Worker/location id")]
    name: Annotated[str | None, Field(default=None, description="Display name, defaults to the id")]
    description: Annotated[str, Field(default="", description="What the worker is for")]


class AgentConfig(BaseModel):
    name: Annotated[str, Field(description="Agent name")]
    goal: Annotated[str, Field(description="Agent goal")]
    description: Annotated[str, Field(default="", description="Agent description")]


class GameAgentConfig(BaseModel):
    decision_service: Annotated[DecisionServiceConfig, Field(default_factory=DecisionServiceConfig)]
    code_assistant: Annotated[ChatConfig | None, Field(default=None)]
    market_data: Annotated[MarketDataConfig | None, Field(default=None)]
    voice: Annotated[VoiceConfig | None, Field(default=None)]
    agent: Annotated[AgentConfig, Field()]
    worker: Annotated[WorkerConfig, Field()]
    loop: Annotated[LoopConfig, Field(default_factory=LoopConfig)]
