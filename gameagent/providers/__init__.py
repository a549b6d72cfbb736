"""Delegate providers the dispatcher can hand an action to.

- CodeAssistantClient: generate, explain and improve code via a chat model
- MarketDataClient: trending tokens, token price and metadata via BirdEye
"""

from .code_assistant import CodeAssistant, CodeAssistantClient
from .market_data import MarketData, MarketDataClient, TokenInfo, TokenMetadata

__all__ = [
    "CodeAssistant",
    "CodeAssistantClient",
    "MarketData",
    "MarketDataClient",
    "TokenInfo",
    "TokenMetadata",
]
