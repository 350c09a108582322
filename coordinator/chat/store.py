"""Message store interface and the in-memory backend."""

import logging
import time
import uuid
from abc import ABC, abstractmethod

from .models import Message

logger = logging.getLogger(__name__)


def new_room_id() -> str:
    return uuid.uuid4().hex


class MessageStore(ABC):
    """Append-only ordered message log per room, plus a small key/value space.

    The key/value operations back the debate to room mapping, verdict records
    and the transition leases used by the lifecycle monitor. ``claim`` and
    ``release`` must be atomic in every backend.
    """

    async def connect(self) -> None:
        """Open backend connections. No-op by default."""

    async def close(self) -> None:
        """Release backend connections. No-op by default."""

    @abstractmethod
    async def create_room(self) -> str:
        """Allocate a new, unmapped room id."""

    @abstractmethod
    async def map_debate_to_room(self, debate_id: int, room_id: str) -> str:
        """Map a debate to a room if it has none yet.

        Returns the room id that is mapped after the call, which is an earlier
        room when another writer won the race.
        """

    @abstractmethod
    async def room_id_for(self, debate_id: int) -> str | None:
        """Return the room mapped to a debate, or None."""

    @abstractmethod
    async def debate_id_for(self, room_id: str) -> int | None:
        """Return the debate a room is mapped to, or None."""

    @abstractmethod
    async def append(self, room_id: str, message: Message) -> None:
        """Append a message to the end of a room's log."""

    @abstractmethod
    async def all_messages(self, room_id: str) -> list[Message]:
        """Return every message of a room in append order."""

    @abstractmethod
    async def get(self, key: str) -> str | None:
        """Read a value from the key/value space."""

    @abstractmethod
    async def put(self, key: str, value: str) -> None:
        """Write a value to the key/value space."""

    @abstractmethod
    async def claim(self, key: str, token: str, ttl: float | None = None) -> bool:
        """Set ``key`` to ``token`` only if the key is absent or its claim expired.

        A claim made with ``ttl`` lapses after that many seconds so a holder
        that died cannot keep the key forever. Without ``ttl`` it never lapses.
        """

    @abstractmethod
    async def release(self, key: str, token: str) -> bool:
        """Delete ``key`` only if it still holds ``token``."""


class InMemoryMessageStore(MessageStore):
    """Process-local store used for development and tests."""

    def __init__(self, clock=time.time):
        self._clock = clock
        self._expires_at: dict[str, float] = {}
        self._rooms: dict[str, list[Message]] = {}
        self._room_by_debate: dict[int, str] = {}
        self._debate_by_room: dict[str, int] = {}
        self._values: dict[str, str] = {}

    async def create_room(self) -> str:
        room_id = new_room_id()
        self._rooms[room_id] = []
        return room_id

    async def map_debate_to_room(self, debate_id: int, room_id: str) -> str:
        # No await between check and set, so this is atomic on the event loop.
        existing = self._room_by_debate.get(debate_id)
        if existing is not None:
            return existing
        self._room_by_debate[debate_id] = room_id
        self._debate_by_room[room_id] = debate_id
        return room_id

    async def room_id_for(self, debate_id: int) -> str | None:
        return self._room_by_debate.get(debate_id)

    async def debate_id_for(self, room_id: str) -> int | None:
        return self._debate_by_room.get(room_id)

    async def append(self, room_id: str, message: Message) -> None:
        self._rooms.setdefault(room_id, []).append(message)

    async def all_messages(self, room_id: str) -> list[Message]:
        return list(self._rooms.get(room_id, []))

    async def get(self, key: str) -> str | None:
        return self._values.get(key)

    async def put(self, key: str, value: str) -> None:
        self._values[key] = value
        self._expires_at.pop(key, None)

    async def claim(self, key: str, token: str, ttl: float | None = None) -> bool:
        now = self._clock()
        if key in self._values:
            expires_at = self._expires_at.get(key)
            if expires_at is None or expires_at > now:
                return False
            logger.info(f"Claim on {key} expired, taking it over")
        self._values[key] = token
        if ttl is None:
            self._expires_at.pop(key, None)
        else:
            self._expires_at[key] = now + ttl
        return True

    async def release(self, key: str, token: str) -> bool:
        if self._values.get(key) != token:
            return False
        del self._values[key]
        self._expires_at.pop(key, None)
        return True
