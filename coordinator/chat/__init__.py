"""Chat rooms, messages and their persistence."""

from .factory import create_message_store
from .models import SYSTEM_SENDER, Gladiator, Judge, Message
from .room import ROOM_CREATED_TEXT, ChatRoomService
from .store import InMemoryMessageStore, MessageStore

__all__ = [
    "SYSTEM_SENDER",
    "ROOM_CREATED_TEXT",
    "ChatRoomService",
    "Gladiator",
    "InMemoryMessageStore",
    "Judge",
    "Message",
    "MessageStore",
    "create_message_store",
]
