"""Mention rewriting between inline tokens and channel mention entities.

Internally a user reference is written inline as ``<@id>`` or
``<@id|Display Name>``.  Channels that support mentions (Teams) carry a
structured ``mention`` entity next to a ``<at>Display Name</at>`` span in
the text.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from botbuilder.schema import ChannelAccount
from botbuilder.schema import Mention as MentionEntity

from ..state.user_directory import UserDirectory

logger = logging.getLogger(__name__)

MENTION_TOKEN = re.compile(r"<@([^|>\s]+)(?:\|([^>]*))?>")
_AT_TAG = re.compile(r"</?at>", re.IGNORECASE)


@dataclass(frozen=True, slots=True)
class Mention:
    source_id: str
    display_text: str
    replacement_text: str
    span: str


def _entity_fields(entity: Any) -> tuple[str, str, str] | None:
    """Return ``(id, name, span)`` for a mention entity, else ``None``.

    Entities arrive as :class:`botbuilder.schema.Mention` objects, as
    generic ``Entity`` objects holding the payload in
    ``additional_properties`` (deserialized wire JSON), or as plain dicts.
    """
    if isinstance(entity, dict):
        data = entity
    else:
        data = dict(getattr(entity, "additional_properties", None) or {})
        data["type"] = getattr(entity, "type", None)
        for key in ("mentioned", "text"):
            value = getattr(entity, key, None)
            if value is not None:
                data[key] = value

    if str(data.get("type") or "").lower() != "mention":
        return None

    mentioned = data.get("mentioned") or {}
    if isinstance(mentioned, dict):
        mentioned_id, name = mentioned.get("id"), mentioned.get("name")
    else:
        mentioned_id, name = getattr(mentioned, "id", None), getattr(mentioned, "name", None)
    if not mentioned_id:
        return None
    span = data.get("text") or ""
    return mentioned_id, name or _AT_TAG.sub("", span), span


def _resolve(
    source_id: str,
    display: str,
    roster: Mapping[str, ChannelAccount],
    bot_id: str,
    bot_name: str,
) -> str:
    if bot_id and source_id == bot_id:
        return bot_name
    member = roster.get(source_id)
    object_id = getattr(member, "aad_object_id", None) if member is not None else None
    if object_id:
        return object_id
    return display or source_id


def parse_inbound(
    text: str,
    entities: Iterable[Any] | None,
    roster: Mapping[str, ChannelAccount],
    bot_id: str,
    bot_name: str,
) -> list[Mention]:
    """Collect every mention in *text*, entity-based first, then inline tokens."""
    mentions: list[Mention] = []
    for entity in entities or ():
        fields = _entity_fields(entity)
        if fields is None:
            continue
        source_id, name, span = fields
        if not span or span not in text:
            continue
        mentions.append(
            Mention(source_id, name, _resolve(source_id, name, roster, bot_id, bot_name), span)
        )
    for match in MENTION_TOKEN.finditer(text):
        source_id, display = match.group(1), match.group(2) or ""
        mentions.append(
            Mention(source_id, display, _resolve(source_id, display, roster, bot_id, bot_name), match.group(0))
        )
    return mentions


def rewrite_inbound(
    text: str,
    entities: Iterable[Any] | None,
    roster: Mapping[str, ChannelAccount],
    bot_id: str,
    bot_name: str,
) -> str:
    for mention in parse_inbound(text, entities, roster, bot_id, bot_name):
        text = text.replace(mention.span, mention.replacement_text, 1)
    return text


def _label_for(raw_id: str, display: str | None, directory: UserDirectory) -> tuple[str, str]:
    user = directory.get(raw_id) or directory.user_for_name(raw_id)
    if user is None:
        logger.debug("Unresolved mention %r; using raw identifier", raw_id)
        return raw_id, display or raw_id
    return user.id, display or user.name or raw_id


def rewrite_outbound(text: str, directory: UserDirectory) -> tuple[str, list[MentionEntity]]:
    """Replace inline tokens with ``<at>`` placeholders and build mention entities.

    Ids are resolved against *directory* by id, then by name.  An
    unresolved id is used verbatim as both id and name.
    """
    entities: list[MentionEntity] = []

    def _substitute(match: re.Match) -> str:
        mentioned_id, label = _label_for(match.group(1), match.group(2), directory)
        placeholder = f"<at>{label}</at>"
        entities.append(
            MentionEntity(
                mentioned=ChannelAccount(id=mentioned_id, name=label),
                text=placeholder,
                type="mention",
            )
        )
        return placeholder

    return MENTION_TOKEN.sub(_substitute, text), entities


def flatten_outbound(text: str, directory: UserDirectory) -> str:
    """Replace inline tokens with plain display names, for channels without mentions."""
    return MENTION_TOKEN.sub(lambda m: _label_for(m.group(1), m.group(2), directory)[1], text)
