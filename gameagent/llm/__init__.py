from .factory import ChatLLMFactory
from .types import ChatLLM
