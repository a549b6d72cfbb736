"""Code-assistant provider: generate, explain and improve source code."""

import logging
from typing import Protocol

from gameagent.llm.types import ChatLLM
from gameagent.tracer import trace_provider

logger = logging.getLogger(__name__)


class CodeAssistant(Protocol):
    async def generate_code(self, prompt: str) -> str:
        ...

    async def explain_code(self, code: str) -> str:
        ...

    async def improve_code(self, code: str) -> str:
        ...


class CodeAssistantClient:
    """Code assistant backed by a chat-completion model.

    Each operation uses its own sampling settings: code generation and
    improvement run colder and with a larger token allowance than explanations.
    Transport failures surface as ``ProviderError`` from the chat model.
    """

    EXPLAIN_PROMPT = "Please explain the following code:\n\n{code}"
    IMPROVE_PROMPT = (
        "Please improve the following code by making it more efficient, readable, "
        "and following best practices:\n\n{code}"
    )

    def __init__(self, chat_llm: ChatLLM):
        self.chat_llm = chat_llm

    async def __aenter__(self) -> 'CodeAssistantClient':
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self.chat_llm.aclose()

    @trace_provider("generate_code")
    async def generate_code(self, prompt: str) -> str:
        return await self._complete(prompt, temperature=0.3, max_tokens=2000)

    @trace_provider("explain_code")
    async def explain_code(self, code: str) -> str:
        return await self._complete(self.EXPLAIN_PROMPT.format(code=code), temperature=0.5, max_tokens=1000)

    @trace_provider("improve_code")
    async def improve_code(self, code: str) -> str:
        return await self._complete(self.IMPROVE_PROMPT.format(code=code), temperature=0.3, max_tokens=2000)

    async def _complete(self, prompt: str, *, temperature: float, max_tokens: int) -> str:
        logger.debug(f"Code assistant request (temperature={temperature}, max_tokens={max_tokens})")
        return await self.chat_llm.chat(
            [{'role': 'user', 'content': prompt}],
            temperature=temperature,
            max_tokens=max_tokens,
        )
