"""Internal, channel-agnostic events handed to the message bus."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Protocol

from botbuilder.schema import Activity

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class User:
    """Identity record keyed by the channel's stable user id."""

    id: str
    name: str = ""
    tenant_id: str = ""
    aad_object_id: str = ""
    room: str = ""

    def to_dict(self) -> dict[str, str]:
        return {
            "id": self.id,
            "name": self.name,
            "tenant_id": self.tenant_id,
            "aad_object_id": self.aad_object_id,
            "room": self.room,
        }

    @classmethod
    def from_dict(cls, data: dict) -> User:
        return cls(
            id=data.get("id", ""),
            name=data.get("name", ""),
            tenant_id=data.get("tenant_id", ""),
            aad_object_id=data.get("aad_object_id", ""),
            room=data.get("room", ""),
        )


@dataclass(frozen=True, slots=True)
class TextMessage:
    user: User
    text: str
    reply_to_id: str = ""
    activity: Activity | None = field(default=None, compare=False, repr=False)


@dataclass(frozen=True, slots=True)
class GenericEvent:
    """A non-text event (e.g. members joining) worth telling the bus about."""

    user: User
    activity: Activity | None = field(default=None, compare=False, repr=False)


InternalEvent = TextMessage | GenericEvent


class MessageBus(Protocol):
    """Consumer of translated inbound events."""

    async def receive(self, event: InternalEvent) -> None: ...


class QueueMessageBus:
    """In-process bus backed by an :class:`asyncio.Queue`."""

    def __init__(self, maxsize: int = 0) -> None:
        self._queue: asyncio.Queue[InternalEvent] = asyncio.Queue(maxsize=maxsize)

    async def receive(self, event: InternalEvent) -> None:
        logger.debug("[bus] queued %s from %s", type(event).__name__, event.user.id)
        await self._queue.put(event)

    async def get(self) -> InternalEvent:
        return await self._queue.get()
