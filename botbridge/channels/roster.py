"""Conversation roster lookup through the Bot Framework connector."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Protocol

from botbuilder.schema import Activity, ChannelAccount

from ..errors import RosterFetchError

if TYPE_CHECKING:
    from botbuilder.core import BotFrameworkAdapter

logger = logging.getLogger(__name__)


class RosterFetcher(Protocol):
    async def fetch(self, activity: Activity) -> list[ChannelAccount]: ...


class ConnectorRosterFetcher:
    """Fetches conversation members with the adapter's connector client.

    Any failure surfaces as :class:`RosterFetchError`.
    """

    def __init__(self, adapter: BotFrameworkAdapter) -> None:
        self._adapter = adapter

    async def fetch(self, activity: Activity) -> list[ChannelAccount]:
        conversation_id = activity.conversation.id if activity.conversation else None
        if not activity.service_url or not conversation_id:
            raise RosterFetchError("Activity has no service URL or conversation id")
        try:
            client = await self._adapter.create_connector_client(activity.service_url)
            members = await client.conversations.get_conversation_members(conversation_id)
        except Exception as exc:
            logger.error("[teams] Roster fetch failed for %s: %s", conversation_id, exc)
            raise RosterFetchError(f"Failed to fetch members of {conversation_id}: {exc}") from exc
        logger.debug("[teams] Fetched %d members for %s", len(members or []), conversation_id)
        return list(members or [])
