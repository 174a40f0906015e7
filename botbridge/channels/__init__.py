"""Per-channel translation strategies and their registry."""

from .base import ChannelStrategy
from .registry import StrategyRegistry, default_registry
from .roster import ConnectorRosterFetcher, RosterFetcher
from .teams import TeamsStrategy
from .text import TextStrategy

__all__ = [
    "ChannelStrategy",
    "ConnectorRosterFetcher",
    "RosterFetcher",
    "StrategyRegistry",
    "TeamsStrategy",
    "TextStrategy",
    "default_registry",
]
