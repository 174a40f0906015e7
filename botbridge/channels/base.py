"""Channel strategy interface shared by every supported channel."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import ClassVar

from botbuilder.core import TurnContext
from botbuilder.schema import Activity, ActivityTypes

from ..messaging.events import InternalEvent, User
from ..state.user_directory import UserDirectory

OutboundMessage = str | Activity


def tenant_id_of(activity: Activity) -> str:
    channel_data = activity.channel_data if isinstance(activity.channel_data, dict) else {}
    tenant = channel_data.get("tenant") or {}
    if isinstance(tenant, dict) and tenant.get("id"):
        return tenant["id"]
    conversation = activity.conversation
    return (getattr(conversation, "tenant_id", None) or "") if conversation else ""


def trim_trailing_newline(text: str) -> str:
    if text.endswith("\r\n"):
        return text[:-2]
    if text.endswith("\n"):
        return text[:-1]
    return text


def is_membership_event(activity: Activity) -> bool:
    return activity.type == ActivityTypes.conversation_update and bool(activity.members_added)


class ChannelStrategy(ABC):
    """Translate between one channel's activities and internal events.

    ``to_receivable`` is always a coroutine, whether or not the channel
    needs a network round trip before it can answer.  ``None`` means the
    activity is dropped.
    """

    name: ClassVar[str] = ""

    def __init__(self, bot_name: str, users: UserDirectory) -> None:
        self.bot_name = bot_name
        self.users = users

    @abstractmethod
    async def to_receivable(self, activity: Activity) -> InternalEvent | None: ...

    @abstractmethod
    def to_sendable(self, context: InternalEvent, message: OutboundMessage) -> list[Activity]:
        """Return the content payloads for *message*; typing is added by the dispatcher."""

    def supports_auth(self) -> bool:
        return False

    # -- helpers -----------------------------------------------------------

    def _user_for(self, activity: Activity, **attrs: str) -> User:
        sender = activity.from_property
        conversation = activity.conversation
        return self.users.user_for_id(
            sender.id if sender else "",
            name=(sender.name or "") if sender else "",
            room=(conversation.id or "") if conversation else "",
            **attrs,
        )

    @staticmethod
    def _address(payload: Activity, context: InternalEvent) -> Activity:
        if context.activity is None:
            return payload
        reference = TurnContext.get_conversation_reference(context.activity)
        return TurnContext.apply_conversation_reference(payload, reference)
