"""Redis-backed message store using the coordinator's persisted key layout.

Keys:
    debate:<id>:roomId      room id mapped to a debate
    room:<id>:debateId      inverse mapping
    room:<id>:messages      list of JSON messages in append order
    kv:<key>                verdict records and transition leases
"""

import logging

import redis.asyncio as redis
from redis.exceptions import RedisError

from coordinator.exceptions import StoreUnavailable
from .models import Message
from .store import MessageStore, new_room_id

logger = logging.getLogger(__name__)

# Compare-and-delete so a lease is only released by its holder.
RELEASE_SCRIPT = """
if redis.call('GET', KEYS[1]) == ARGV[1] then
    return redis.call('DEL', KEYS[1])
end
return 0
"""


def _debate_key(debate_id: int) -> str:
    return f"debate:{debate_id}:roomId"


def _room_debate_key(room_id: str) -> str:
    return f"room:{room_id}:debateId"


def _messages_key(room_id: str) -> str:
    return f"room:{room_id}:messages"


def _value_key(key: str) -> str:
    return f"kv:{key}"


class RedisMessageStore(MessageStore):
    """Message store on a Redis server."""

    def __init__(self, redis_url: str = "redis://localhost:6379", client=None):
        self.redis_url = redis_url
        self._client = client

    @property
    def client(self):
        if self._client is None:
            raise StoreUnavailable("Redis store is not connected")
        return self._client

    async def connect(self) -> None:
        if self._client is None:
            self._client = redis.from_url(self.redis_url, decode_responses=True)
        try:
            await self._client.ping()
        except RedisError as e:
            raise StoreUnavailable(f"Cannot reach Redis at {self.redis_url}: {e}") from e
        logger.info(f"Connected to Redis at {self.redis_url}")

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def create_room(self) -> str:
        return new_room_id()

    async def map_debate_to_room(self, debate_id: int, room_id: str) -> str:
        try:
            if await self.client.set(_debate_key(debate_id), room_id, nx=True):
                await self.client.set(_room_debate_key(room_id), str(debate_id))
                return room_id
            existing = await self.client.get(_debate_key(debate_id))
        except RedisError as e:
            raise StoreUnavailable(f"Redis mapping failed: {e}") from e
        return existing

    async def room_id_for(self, debate_id: int) -> str | None:
        try:
            return await self.client.get(_debate_key(debate_id))
        except RedisError as e:
            raise StoreUnavailable(f"Redis read failed: {e}") from e

    async def debate_id_for(self, room_id: str) -> int | None:
        try:
            value = await self.client.get(_room_debate_key(room_id))
        except RedisError as e:
            raise StoreUnavailable(f"Redis read failed: {e}") from e
        return int(value) if value is not None else None

    async def append(self, room_id: str, message: Message) -> None:
        try:
            await self.client.rpush(_messages_key(room_id), message.to_json())
        except RedisError as e:
            raise StoreUnavailable(f"Redis append failed: {e}") from e

    async def all_messages(self, room_id: str) -> list[Message]:
        try:
            raw_messages = await self.client.lrange(_messages_key(room_id), 0, -1)
        except RedisError as e:
            raise StoreUnavailable(f"Redis read failed: {e}") from e
        return [Message.from_json(raw) for raw in raw_messages]

    async def get(self, key: str) -> str | None:
        try:
            return await self.client.get(_value_key(key))
        except RedisError as e:
            raise StoreUnavailable(f"Redis read failed: {e}") from e

    async def put(self, key: str, value: str) -> None:
        try:
            await self.client.set(_value_key(key), value)
        except RedisError as e:
            raise StoreUnavailable(f"Redis write failed: {e}") from e

    async def claim(self, key: str, token: str, ttl: float | None = None) -> bool:
        # Redis drops an expired key itself, so NX alone covers takeover.
        px = int(ttl * 1000) if ttl is not None else None
        try:
            return bool(await self.client.set(_value_key(key), token, nx=True, px=px))
        except RedisError as e:
            raise StoreUnavailable(f"Redis claim failed: {e}") from e

    async def release(self, key: str, token: str) -> bool:
        try:
            return bool(await self.client.eval(RELEASE_SCRIPT, 1, _value_key(key), token))
        except RedisError as e:
            raise StoreUnavailable(f"Redis release failed: {e}") from e
