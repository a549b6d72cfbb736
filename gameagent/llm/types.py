from abc import ABC, abstractmethod


class ChatLLM(ABC):
    """Abstract base class for chat language models."""

    @abstractmethod
    async def chat(self, messages: list[dict], **params) -> str:
        """Send a chat completion request.

        Args:
            messages: List of message dictionaries with 'role' and 'content'
            **params: Additional parameters for the chat completion API

        Returns:
            Generated response text
        """
        pass

    async def aclose(self) -> None:
        """Release any transport held by the model."""
        return None
