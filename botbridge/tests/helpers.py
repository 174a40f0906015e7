"""Activity factories for tests."""

from __future__ import annotations

from botbuilder.schema import (
    Activity,
    ActivityTypes,
    ChannelAccount,
    ConversationAccount,
)


def make_activity(
    text: str | None = "hello",
    *,
    type: str = ActivityTypes.message,
    channel_id: str = "msteams",
    user_id: str = "u1",
    user_name: str = "Alice",
    aad_object_id: str | None = "obj1",
    bot_id: str = "b1",
    conversation_type: str | None = "personal",
    tenant_id: str | None = "t1",
    **kwargs,
) -> Activity:
    return Activity(
        type=type,
        id="act1",
        text=text,
        channel_id=channel_id,
        service_url="https://smba.trafficmanager.net/emea/",
        from_property=ChannelAccount(id=user_id, name=user_name, aad_object_id=aad_object_id),
        recipient=ChannelAccount(id=bot_id, name="hubot"),
        conversation=ConversationAccount(
            id="conv1",
            conversation_type=conversation_type,
            is_group=conversation_type not in (None, "personal"),
        ),
        channel_data={"tenant": {"id": tenant_id}} if tenant_id else None,
        **kwargs,
    )
