"""Chat room service: one durable, ordered message log per debate."""

import logging
from collections.abc import Awaitable, Callable

from .models import Message
from .store import MessageStore

logger = logging.getLogger(__name__)

ROOM_CREATED_TEXT = "Chat room created"

type MessageListener = Callable[[int, Message], Awaitable[None]]


class ChatRoomService:
    """Creates rooms, admits participants and appends messages.

    Every appended message is pushed to the registered listeners after it has
    been stored. Store errors are never caught here.
    """

    def __init__(self, store: MessageStore):
        self.store = store
        self._listeners: list[MessageListener] = []

    def subscribe(self, listener: MessageListener) -> None:
        """Register a coroutine called with (debate_id, message) on every append."""
        self._listeners.append(listener)

    def unsubscribe(self, listener: MessageListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    async def create_chat_room(self, debate_id: int) -> str:
        """Return the debate's room, creating it on first use."""
        room_id = await self.store.room_id_for(debate_id)
        if room_id is not None:
            return room_id

        # The created message goes in before the room is mapped, so nobody can
        # write ahead of it.
        new_room = await self.store.create_room()
        created = Message.system(ROOM_CREATED_TEXT)
        await self.store.append(new_room, created)

        room_id = await self.store.map_debate_to_room(debate_id, new_room)
        if room_id != new_room:
            logger.info(
                f"Debate {debate_id} was mapped concurrently; discarding room {new_room}"
            )
            return room_id

        logger.info(f"Created chat room {room_id} for debate {debate_id}")
        await self._notify(debate_id, created)
        return room_id

    async def join_as_participant(self, debate_id: int, name: str) -> None:
        await self.send_system_message(debate_id, f"{name} has joined the chat")

    async def join_as_judge(self, debate_id: int, name: str) -> None:
        await self.send_system_message(debate_id, f"Judge {name} has joined the chat")

    async def send_system_message(self, debate_id: int, content: str) -> None:
        await self._append(debate_id, Message.system(content))

    async def send_message(self, debate_id: int, sender_id: str, content: str) -> None:
        await self._append(debate_id, Message(sender=sender_id, content=content))

    async def get_messages(self, debate_id: int) -> list[Message]:
        """Return the debate's messages in append order; empty for unknown debates."""
        room_id = await self.store.room_id_for(debate_id)
        if room_id is None:
            return []
        return await self.store.all_messages(room_id)

    async def get_chat_history(self, debate_id: int) -> list[Message]:
        return await self.get_messages(debate_id)

    async def _append(self, debate_id: int, message: Message) -> None:
        room_id = await self.create_chat_room(debate_id)
        await self.store.append(room_id, message)
        logger.debug(f"Debate {debate_id} <- {message.sender}: {message.content[:80]}")
        await self._notify(debate_id, message)

    async def _notify(self, debate_id: int, message: Message) -> None:
        for listener in list(self._listeners):
            try:
                await listener(debate_id, message)
            except Exception as e:
                logger.warning(f"Message listener failed for debate {debate_id}: {e}")
