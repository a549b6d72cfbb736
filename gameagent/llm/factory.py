from gameagent.config.llm import ChatConfig, DeepSeekChatConfig, OpenAIChatConfig
from gameagent.exceptions import ConfigError
from .types import ChatLLM


class ChatLLMFactory:
    @classmethod
    def build(cls, config: ChatConfig) -> ChatLLM:
        if isinstance(config, OpenAIChatConfig | DeepSeekChatConfig):
            from .oai import OpenAIChatLLM
            return OpenAIChatLLM.from_config(config)
        raise ConfigError(f'Unexpected code assistant config: {config}')
