"""Bot Framework ActivityHandler -- routes channel activities to the message bus.

Inbound: resolve the channel strategy, authorize, translate, deliver.
Outbound: translate each response through the same strategy and send it
as its own ``[typing, message]`` batch.
"""

from __future__ import annotations

import logging

from botbuilder.core import ActivityHandler, InvokeResponse, TurnContext
from botbuilder.schema import Activity, ActivityTypes

from ..channels.base import OutboundMessage
from ..channels.registry import StrategyRegistry
from .authorization import AuthorizationGate, denial_text
from .events import InternalEvent, MessageBus
from .transport import ConnectorTransport

logger = logging.getLogger(__name__)

INVOKE_MESSAGE_KEY = "hubotMessage"


def extract_invoke_message(activity: Activity) -> None:
    """Move ``value.hubotMessage`` of an invoke activity into ``text``."""
    value = activity.value
    if isinstance(value, dict) and INVOKE_MESSAGE_KEY in value:
        activity.text = value[INVOKE_MESSAGE_KEY]
        activity.value = None


class Bot(ActivityHandler):
    def __init__(
        self,
        registry: StrategyRegistry,
        gate: AuthorizationGate,
        bus: MessageBus,
        transport: ConnectorTransport,
        bot_name: str,
    ) -> None:
        self.registry = registry
        self.gate = gate
        self.bus = bus
        self.transport = transport
        self.bot_name = bot_name

    async def on_turn(self, turn_context: TurnContext) -> None:
        activity = turn_context.activity
        await self.receive(activity)
        if activity.type == ActivityTypes.invoke:
            await turn_context.send_activity(
                Activity(type=ActivityTypes.invoke_response, value=InvokeResponse(status=200))
            )

    async def receive(self, activity: Activity) -> InternalEvent | None:
        """Run one inbound activity through the pipeline.

        Returns the event handed to the bus, or ``None`` when the strategy
        dropped the activity.  A denied caller reaches the bus only as a
        denial command; denied non-text activities are dropped.
        """
        strategy = self.registry.resolve(activity.channel_id)

        if activity.type == ActivityTypes.invoke:
            extract_invoke_message(activity)

        decision = self.gate.authorize(activity, strategy.supports_auth())
        if not decision.allowed:
            if activity.type not in (ActivityTypes.message, ActivityTypes.invoke):
                logger.info("[bot] Dropped denied %s activity (channel=%s)", activity.type, activity.channel_id)
                return None
            activity.text = denial_text(decision, self.bot_name)
            activity.value = None

        event = await strategy.to_receivable(activity)
        if event is None:
            logger.info(
                "[bot] Dropped %s activity from %s (channel=%s)",
                activity.type,
                activity.from_property.id if activity.from_property else "?",
                activity.channel_id,
            )
            return None

        await self.bus.receive(event)
        return event

    async def send(self, context: InternalEvent, *messages: OutboundMessage) -> None:
        """Deliver *messages* in reply to the activity that produced *context*.

        Each message becomes one transport batch.  A :class:`TransportError`
        aborts the remaining messages.
        """
        if context.activity is None:
            raise ValueError("Reply context carries no originating activity")
        strategy = self.registry.resolve(context.activity.channel_id)
        reference = TurnContext.get_conversation_reference(context.activity)

        for message in messages:
            payloads = strategy.to_sendable(context, message)
            typing = TurnContext.apply_conversation_reference(
                Activity(type=ActivityTypes.typing), reference
            )
            await self.transport.send(reference, [typing, *payloads])

    async def reply(self, context: InternalEvent, *messages: OutboundMessage) -> None:
        """Like :meth:`send`, but text replies mention the originating user."""
        user = context.user
        token = f"<@{user.id}|{user.name}>" if user.name else f"<@{user.id}>"
        await self.send(
            context,
            *(f"{token} {m}" if isinstance(m, str) else m for m in messages),
        )
