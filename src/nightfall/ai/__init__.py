"""AI decision providers for Nightfall opponents."""

from nightfall.ai.base import DecisionContext, DecisionProvider, PlayerView
from nightfall.ai.stub_ai import StubDecisionProvider, create_stub_provider

__all__ = [
    "DecisionContext",
    "DecisionProvider",
    "PlayerView",
    "StubDecisionProvider",
    "create_stub_provider",
]
