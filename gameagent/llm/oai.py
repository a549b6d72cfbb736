import logging

from openai import AsyncOpenAI, OpenAIError

from gameagent.config.llm import DeepSeekChatConfig, OpenAIChatConfig
from gameagent.exceptions import ProviderError
from gameagent.llm.types import ChatLLM

logger = logging.getLogger(__name__)


class OpenAIChatLLM(ChatLLM):
    def __init__(
            self,
            client: AsyncOpenAI,
            model: str,
            *,
            provider: str = "OpenAI",
            chat_params: dict | None = None,
    ):
        self.client = client
        self.model = model
        self.provider = provider
        self.chat_params: dict = chat_params or {}

    @classmethod
    def from_config(cls, config: OpenAIChatConfig | DeepSeekChatConfig) -> 'OpenAIChatLLM':
        client = AsyncOpenAI(
            base_url=config.endpoint,
            api_key=config.api_key,
            timeout=config.timeout,
        )
        provider = "DeepSeek" if isinstance(config, DeepSeekChatConfig) else "OpenAI"
        return cls(client, config.model, provider=provider, chat_params=config.chat_params())

    async def chat(self, messages: list[dict], **params) -> str:
        """
        Send a chat completion request to an OpenAI-compatible endpoint

        Args:
            messages: List of message dictionaries with 'role' and 'content'
            **params: Additional parameters for the chat completion API

        Returns:
            Content of the first choice
        """
        try:
            resp = await self.client.chat.completions.create(
                messages=messages,
                model=self.model,
                **{**self.chat_params, **params},
            )
        except OpenAIError as e:
            status_code = getattr(e, "status_code", None)
            raise ProviderError(self.provider, str(e), status_code) from e
        if not resp.choices:
            raise ProviderError(self.provider, "Response contained no choices")
        return resp.choices[0].message.content or ""

    async def aclose(self) -> None:
        await self.client.close()
