"""Voice commands: transcribe recorded audio and act on a few spoken commands.

Capturing audio is left to the caller; ``VoiceCommandHandler.listen`` takes
the recorded bytes.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Any

from openai import AsyncOpenAI, OpenAIError

from gameagent.client.base import AgentInfo, DecisionClient
from gameagent.exceptions import ProviderError
from gameagent.providers.market_data import MarketData, TokenInfo

logger = logging.getLogger(__name__)

DEFAULT_AGENT_NAME = "Default Agent"
DEFAULT_AGENT_GOAL = "Default Goal"
DEFAULT_AGENT_DESCRIPTION = "Default Description"

_NAME_PATTERN = re.compile(r"name:\s*([^\s,]+)")
_GOAL_PATTERN = re.compile(r"goal:\s*([^,]+)")
_DESCRIPTION_PATTERN = re.compile(r"description:\s*(.+)")


@dataclass
class VoiceCommandResult:
    command: str
    handled: bool
    tokens: list[TokenInfo] = field(default_factory=list)
    agent: AgentInfo | None = None


def parse_agent_details(command: str) -> dict[str, str]:
    """Pull ``name:``, ``goal:`` and ``description:`` out of a spoken command."""
    def find(pattern: re.Pattern, default: str) -> str:
        match = pattern.search(command)
        return match.group(1).strip() if match else default

    return {
        "name": find(_NAME_PATTERN, DEFAULT_AGENT_NAME),
        "goal": find(_GOAL_PATTERN, DEFAULT_AGENT_GOAL),
        "description": find(_DESCRIPTION_PATTERN, DEFAULT_AGENT_DESCRIPTION),
    }


class VoiceCommandHandler:
    def __init__(
            self,
            client: DecisionClient,
            market_data: MarketData | None,
            openai_client: AsyncOpenAI,
            *,
            model: str = "whisper-1",
    ):
        self.client = client
        self.market_data = market_data
        self.openai_client = openai_client
        self.model = model

    async def transcribe(self, audio: bytes, filename: str = "audio.wav") -> str:
        try:
            resp: Any = await self.openai_client.audio.transcriptions.create(
                model=self.model,
                file=(filename, audio),
            )
        except OpenAIError as e:
            raise ProviderError("OpenAI", str(e), getattr(e, "status_code", None)) from e
        return resp.text

    async def handle_command(self, command: str) -> VoiceCommandResult:
        text = command.lower()
        if "trending tokens" in text:
            if self.market_data is None:
                logger.warning("Voice command asked for trending tokens but no market data provider is set")
                return VoiceCommandResult(command=command, handled=False)
            tokens = await self.market_data.get_trending_tokens()
            logger.info(f"Trending tokens: {[t.symbol for t in tokens]}")
            return VoiceCommandResult(command=command, handled=True, tokens=tokens)
        if "create agent" in text:
            details = parse_agent_details(command)
            agent = await self.client.create_agent(**details)
            logger.info(f"Created agent {agent.id} from voice command")
            return VoiceCommandResult(command=command, handled=True, agent=agent)
        logger.info(f"Ignoring unrecognized voice command: {command}")
        return VoiceCommandResult(command=command, handled=False)

    async def listen(self, audio: bytes) -> VoiceCommandResult:
        return await self.handle_command(await self.transcribe(audio))
