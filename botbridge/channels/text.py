"""Baseline strategy for text-only channels (emulator, web chat, Direct Line)."""

from __future__ import annotations

import logging

from botbuilder.schema import Activity, ActivityTypes

from ..messaging.events import GenericEvent, InternalEvent, TextMessage
from ..messaging.mentions import flatten_outbound
from .base import ChannelStrategy, OutboundMessage, is_membership_event, trim_trailing_newline

logger = logging.getLogger(__name__)


class TextStrategy(ChannelStrategy):
    name = "text"

    async def to_receivable(self, activity: Activity) -> InternalEvent | None:
        if activity.type in (ActivityTypes.message, ActivityTypes.invoke):
            text = trim_trailing_newline(activity.text or "")
            if not text.strip():
                logger.info("[text] Dropping %s activity without text", activity.type)
                return None
            return TextMessage(self._user_for(activity), text, activity.id or "", activity)
        if is_membership_event(activity):
            return GenericEvent(self._user_for(activity), activity)
        logger.debug("[text] Dropping unsupported activity type %s", activity.type)
        return None

    def to_sendable(self, context: InternalEvent, message: OutboundMessage) -> list[Activity]:
        if isinstance(message, str):
            message = Activity(type=ActivityTypes.message, text=flatten_outbound(message.strip(), self.users))
        return [self._address(message, context)]
