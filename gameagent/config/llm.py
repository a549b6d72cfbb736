import os
from enum import Enum

from pydantic import BaseModel, Field, TypeAdapter
from typing_extensions import Annotated, Literal


class ChatLLMType(str, Enum):
    OpenAI = "openai"
    DeepSeek = "deepseek"


class OpenAIChatConfig(BaseModel):
    type: Literal[ChatLLMType.OpenAI]
    endpoint: Annotated[str, Field(
        description="The OpenAI-compatible endpoint URL",
        default="https://api.openai.com/v1",
    )]
    api_key: Annotated[str, Field(
        description="The API key for authentication",
        default_factory=lambda: os.environ["OPENAI_API_KEY"],
    )]
    timeout: Annotated[float, Field(
        description="Request timeout in seconds",
        default=180.0,
    )]
    model: Annotated[str, Field(
        description="The model identifier to use for chat completions",
    )]
    top_p: Annotated[float | None, Field(
        description="Controls diversity via nucleus sampling (0.0 to 1.0)",
        default=1.0,
    )]

    def chat_params(self) -> dict:
        """Build kwargs shared by every chat completion call.

        Per-operation sampling (temperature, max_tokens) is chosen by the
        code assistant and passed on each call.
        """
        return {
            'top_p': self.top_p,
        }


class DeepSeekChatConfig(OpenAIChatConfig):
    type: Literal[ChatLLMType.DeepSeek]
    api_key: Annotated[str, Field(
        description="The API key for authentication",
        default_factory=lambda: os.environ["DEEPSEEK_API_KEY"],
    )]
    endpoint: Annotated[str, Field(
        description="The DeepSeek endpoint URL",
        default="https://api.deepseek.com/v1",
    )]
    model: Annotated[str, Field(
        description="The model identifier to use for chat completions",
        default="deepseek-coder",
    )]


ChatConfig = Annotated[OpenAIChatConfig | DeepSeekChatConfig, Field(
    description="Configuration for the code assistant chat model",
    discriminator="type",
)]


def validate_chat_config(data: dict) -> ChatConfig:
    """Validate and return a ChatConfig instance from raw data."""
    return TypeAdapter(ChatConfig).validate_python(data)
