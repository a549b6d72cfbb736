"""Decision Service clients.

Both profiles implement the same ``DecisionClient`` protocol; ``GameClient``
speaks the unwrapped v1 wire format and ``GameClientV2`` the data-wrapped v2
format.  Neither performs delegate orchestration, which is the dispatcher's
job.
"""

from gameagent.config.client import ClientProfile, DecisionServiceConfig

from .base import AgentInfo, DecisionClient, MapInfo, Task
from .transport import HttpDecisionClient
from .v1 import GameClient
from .v2 import GameClientV2


def build_client(config: DecisionServiceConfig) -> HttpDecisionClient:
    cls = GameClient if config.profile == ClientProfile.V1 else GameClientV2
    return cls(config.api_key, base_url=config.base_url, timeout=config.timeout)


__all__ = [
    "AgentInfo",
    "DecisionClient",
    "GameClient",
    "GameClientV2",
    "HttpDecisionClient",
    "MapInfo",
    "Task",
    "build_client",
]
