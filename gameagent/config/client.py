import os
from enum import Enum

from pydantic import BaseModel, Field
from typing_extensions import Annotated


class ClientProfile(str, Enum):
    V1 = "v1"
    V2 = "v2"


class DecisionServiceConfig(BaseModel):
    profile: Annotated[ClientProfile, Field(
        description="Wire profile of the Decision Service: v1 (unwrapped bodies) or v2 (data-wrapped bodies)",
        default=ClientProfile.V2,
    )]
    api_key: Annotated[str, Field(
        description="The API key for authentication",
        default_factory=lambda: os.environ["GAME_API_KEY"],
    )]
    base_url: Annotated[str | None, Field(
        description="Override for the profile's default base URL",
        default=None,
    )]
    timeout: Annotated[float, Field(
        description="Request timeout in seconds",
        default=60.0,
    )]


class MarketDataConfig(BaseModel):
    api_key: Annotated[str, Field(
        description="The BirdEye API key",
        default_factory=lambda: os.environ["BIRDEYE_API_KEY"],
    )]
    base_url: Annotated[str, Field(
        description="The BirdEye public API URL",
        default="https://public-api.birdeye.so",
    )]
    chain: Annotated[str, Field(
        description="Chain sent in the x-chain header",
        default="base",
    )]
    timeout: Annotated[float, Field(
        description="Request timeout in seconds",
        default=30.0,
    )]


class VoiceConfig(BaseModel):
    api_key: Annotated[str, Field(
        description="The OpenAI API key used for transcription",
        default_factory=lambda: os.environ["OPENAI_API_KEY"],
    )]
    model: Annotated[str, Field(
        description="Transcription model",
        default="whisper-1",
    )]
