"""Connector transport -- delivers outbound activity batches."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Protocol

from botbuilder.core import TurnContext
from botbuilder.schema import Activity, ConversationReference

from ..errors import TransportError

if TYPE_CHECKING:
    from botbuilder.core import BotAdapter

logger = logging.getLogger(__name__)


class ConnectorTransport(Protocol):
    async def send(self, reference: ConversationReference, activities: list[Activity]) -> None: ...


class AdapterTransport:
    """Sends each batch with ``adapter.continue_conversation``.

    Failures raised inside the turn are captured and re-raised as
    :class:`TransportError` so an adapter ``on_turn_error`` hook cannot
    hide them.
    """

    def __init__(self, adapter: BotAdapter, app_id: str = "") -> None:
        self._adapter = adapter
        self._app_id = app_id

    async def send(self, reference: ConversationReference, activities: list[Activity]) -> None:
        failures: list[Exception] = []

        async def _callback(turn_context: TurnContext) -> None:
            try:
                await turn_context.send_activities(activities)
            except Exception as exc:
                failures.append(exc)

        bot_id = self._app_id or (reference.bot.id if reference.bot else None) or ""
        conversation = reference.conversation.id if reference.conversation else "?"
        try:
            await self._adapter.continue_conversation(reference, _callback, bot_id=bot_id)
        except Exception as exc:
            logger.error("[bot] Delivery to %s failed: %s", conversation, exc)
            raise TransportError(f"Delivery to {conversation} failed: {exc}") from exc
        if failures:
            logger.error("[bot] Delivery to %s failed: %s", conversation, failures[0])
            raise TransportError(f"Delivery to {conversation} failed: {failures[0]}") from failures[0]
        logger.debug("[bot] Delivered %d activities to %s", len(activities), conversation)
