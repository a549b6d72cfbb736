from .client import ClientProfile, DecisionServiceConfig, MarketDataConfig, VoiceConfig
from .game import AgentConfig, GameAgentConfig, LoopConfig, WorkerConfig
from .llm import ChatConfig, ChatLLMType, DeepSeekChatConfig, OpenAIChatConfig, validate_chat_config
