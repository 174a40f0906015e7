"""Channel name -> strategy registry."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from ..errors import UnsupportedChannelError
from ..messaging.cards import CardTemplateCatalog
from ..state.authorized_users import AuthorizedUserStore
from ..state.user_directory import UserDirectory
from .base import ChannelStrategy
from .roster import RosterFetcher
from .teams import TeamsStrategy
from .text import TextStrategy

logger = logging.getLogger(__name__)

TEXT_CHANNELS: tuple[str, ...] = ("emulator", "webchat", "directline", "test")


class StrategyRegistry:
    """Case-insensitive mapping of ``channel_id`` to :class:`ChannelStrategy`."""

    def __init__(self) -> None:
        self._strategies: dict[str, ChannelStrategy] = {}

    def register(self, name: str, strategy: ChannelStrategy) -> None:
        key = name.lower()
        if key in self._strategies:
            logger.info("Replacing channel strategy for %s", key)
        self._strategies[key] = strategy

    def resolve(self, name: str | None) -> ChannelStrategy:
        strategy = self._strategies.get((name or "").lower())
        if strategy is None:
            raise UnsupportedChannelError(name or "")
        return strategy

    def names(self) -> list[str]:
        return sorted(self._strategies)


def default_registry(
    bot_name: str,
    users: UserDirectory,
    authorized_users: AuthorizedUserStore,
    roster: RosterFetcher,
    tenant_allowlist: Iterable[str] = (),
    catalog: CardTemplateCatalog | None = None,
) -> StrategyRegistry:
    registry = StrategyRegistry()
    registry.register(
        TeamsStrategy.name,
        TeamsStrategy(
            bot_name,
            users,
            authorized_users,
            roster,
            tenant_allowlist=tenant_allowlist,
            catalog=catalog,
        ),
    )
    text = TextStrategy(bot_name, users)
    for channel in TEXT_CHANNELS:
        registry.register(channel, text)
    return registry
