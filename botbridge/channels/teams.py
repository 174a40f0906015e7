"""Microsoft Teams strategy -- roster-aware inbound, cards and mentions outbound."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable

from botbuilder.schema import Activity, ActivityTypes, ChannelAccount

from ..messaging.authorization import caller_object_id
from ..messaging.cards import TRIGGER_WORD, CardTemplateCatalog, synthesize
from ..messaging.events import GenericEvent, InternalEvent, TextMessage
from ..messaging.mentions import rewrite_inbound, rewrite_outbound
from ..state.authorized_users import AuthorizedUserStore
from ..state.user_directory import UserDirectory
from .base import (
    ChannelStrategy,
    OutboundMessage,
    is_membership_event,
    tenant_id_of,
    trim_trailing_newline,
)
from .roster import RosterFetcher

logger = logging.getLogger(__name__)

# A bare "<" that is not part of an <at>...</at> mention placeholder.
_BARE_LT = re.compile(r"<(?!/?at>)")


def format_reply(text: str, bot_name: str) -> str:
    """Apply Teams rendering policy to an outbound reply.

    Replies that start with the bot name are usually help output such as
    ``hubot <query>``; their angle brackets are escaped so Teams does not
    swallow them as markup.
    """
    if bot_name and text.lower().startswith(bot_name.lower()):
        text = _BARE_LT.sub("&lt;", text)
    return text.replace("\r\n", "\n").replace("\n", "<br/>")


def text_from_submission(value: dict, bot_name: str) -> str:
    """Rebuild a command from an Adaptive Card ``Action.Submit`` payload."""
    prefix = value.get("queryPrefix") or TRIGGER_WORD
    parts: list[str] = []
    i = 0
    while (query := value.get(f"{prefix} - query{i}")) is not None:
        parts.append(str(query))
        user_input = value.get(f"{prefix} - input{i}")
        if user_input is not None:
            parts.append(str(user_input))
        i += 1
    return "".join(parts).replace(TRIGGER_WORD, bot_name, 1)


def is_direct(activity: Activity) -> bool:
    conversation = activity.conversation
    if conversation is None:
        return True
    if conversation.conversation_type:
        return conversation.conversation_type == "personal"
    return not conversation.is_group


class TeamsStrategy(ChannelStrategy):
    name = "msteams"

    def __init__(
        self,
        bot_name: str,
        users: UserDirectory,
        authorized_users: AuthorizedUserStore,
        roster: RosterFetcher,
        *,
        tenant_allowlist: Iterable[str] = (),
        catalog: CardTemplateCatalog | None = None,
    ) -> None:
        super().__init__(bot_name, users)
        self.authorized_users = authorized_users
        self.roster = roster
        self.tenant_allowlist = frozenset(tenant_allowlist)
        self.catalog = catalog

    def supports_auth(self) -> bool:
        return True

    async def to_receivable(self, activity: Activity) -> InternalEvent | None:
        tenant_id = tenant_id_of(activity)
        if self.tenant_allowlist and tenant_id not in self.tenant_allowlist:
            logger.info("[teams] Ignoring activity from unlisted tenant %r", tenant_id)
            return None

        if activity.type not in (ActivityTypes.message, ActivityTypes.invoke):
            if is_membership_event(activity):
                user = self._user_for(activity, tenant_id=tenant_id, aad_object_id=caller_object_id(activity))
                return GenericEvent(user, activity)
            logger.debug("[teams] Dropping unsupported activity type %s", activity.type)
            return None

        members = await self.roster.fetch(activity)
        roster: dict[str, ChannelAccount] = {m.id: m for m in members if m.id}

        sender = activity.from_property
        listed = roster.get(sender.id) if sender else None
        object_id = caller_object_id(activity) or (getattr(listed, "aad_object_id", None) if listed else None)
        user = self._user_for(activity, tenant_id=tenant_id, aad_object_id=object_id or "")

        if isinstance(activity.value, dict) and activity.value:
            text = text_from_submission(activity.value, self.bot_name)
        else:
            text = self._text_from_message(activity, roster)

        if not text.strip():
            logger.info("[teams] Dropping %s activity without text", activity.type)
            return None
        return TextMessage(user, text, activity.id or "", activity)

    def _text_from_message(self, activity: Activity, roster: dict[str, ChannelAccount]) -> str:
        bot_id = activity.recipient.id if activity.recipient else ""
        text = rewrite_inbound(activity.text or "", activity.entities, roster, bot_id or "", self.bot_name)
        if not text.strip():
            return ""
        if is_direct(activity) and not text.lower().startswith(self.bot_name.lower()):
            text = f"{self.bot_name} {text}"
        return trim_trailing_newline(text)

    def to_sendable(self, context: InternalEvent, message: OutboundMessage) -> list[Activity]:
        if isinstance(message, Activity):
            return [self._address(message, context)]

        inbound = context.text if isinstance(context, TextMessage) else ""
        card = synthesize(message.strip(), inbound, self.authorized_users, self.catalog)
        payload = Activity(type=ActivityTypes.message)
        if card.attachments:
            payload.attachments = card.attachments
        else:
            text, mentions = rewrite_outbound(card.text or "", self.users)
            payload.text = format_reply(text, self.bot_name)
            if mentions:
                payload.entities = mentions
        return [self._address(payload, context)]
