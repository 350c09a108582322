"""Tests for the message store backends."""

import asyncio
import sqlite3

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from coordinator.chat.factory import create_message_store
from coordinator.chat.models import Message
from coordinator.chat.redis_store import RedisMessageStore
from coordinator.chat.sqlite_store import SqliteMessageStore
from coordinator.chat.store import InMemoryMessageStore
from coordinator.config.settings import StoreConfig
from coordinator.exceptions import StoreUnavailable


class FakeRedis:
    """Minimal async Redis client covering the commands the store uses."""

    def __init__(self, fail: bool = False):
        self.values: dict[str, str] = {}
        self.lists: dict[str, list[str]] = {}
        self.expiry_ms: dict[str, int] = {}
        self.fail = fail
        self.closed = False

    def _check(self) -> None:
        if self.fail:
            raise RedisConnectionError("connection refused")

    async def ping(self) -> bool:
        self._check()
        return True

    async def set(self, key: str, value: str, nx: bool = False, px: int | None = None):
        self._check()
        if nx and key in self.values:
            return None
        self.values[key] = value
        if px is None:
            self.expiry_ms.pop(key, None)
        else:
            self.expiry_ms[key] = px
        return True

    def expire(self, key: str) -> None:
        """Drop ``key`` the way Redis does once its expiry passes."""
        self.values.pop(key, None)
        self.expiry_ms.pop(key, None)

    async def get(self, key: str):
        self._check()
        return self.values.get(key)

    async def rpush(self, key: str, value: str) -> int:
        self._check()
        self.lists.setdefault(key, []).append(value)
        return len(self.lists[key])

    async def lrange(self, key: str, start: int, end: int) -> list[str]:
        self._check()
        items = self.lists.get(key, [])
        return items[start:] if end == -1 else items[start : end + 1]

    async def eval(self, script: str, numkeys: int, key: str, token: str) -> int:
        self._check()
        if self.values.get(key) == token:
            del self.values[key]
            return 1
        return 0

    async def aclose(self) -> None:
        self.closed = True


def make_store(kind: str, tmp_path):
    if kind == "memory":
        return InMemoryMessageStore()
    if kind == "sqlite":
        return SqliteMessageStore(str(tmp_path / "messages.db"))
    return RedisMessageStore(client=FakeRedis())


BACKENDS = ["memory", "sqlite", "redis"]


def make_clocked_store(kind: str, tmp_path, now: list[float]):
    if kind == "memory":
        return InMemoryMessageStore(clock=lambda: now[0])
    return SqliteMessageStore(str(tmp_path / "leases.db"), clock=lambda: now[0])


@pytest.mark.parametrize("kind", BACKENDS)
def test_messages_come_back_in_append_order(kind: str, tmp_path) -> None:
    store = make_store(kind, tmp_path)

    async def run():
        room_id = await store.create_room()
        for i in range(4):
            await store.append(room_id, Message(sender=f"agent-{i % 2}", content=f"m{i}"))
        return await store.all_messages(room_id)

    messages = asyncio.run(run())

    assert [m.content for m in messages] == ["m0", "m1", "m2", "m3"]
    assert messages[1].sender == "agent-1"


@pytest.mark.parametrize("kind", BACKENDS)
def test_debate_mapping_is_set_if_absent(kind: str, tmp_path) -> None:
    store = make_store(kind, tmp_path)

    async def run():
        first = await store.create_room()
        second = await store.create_room()
        mapped_first = await store.map_debate_to_room(42, first)
        mapped_second = await store.map_debate_to_room(42, second)
        return (
            first,
            mapped_first,
            mapped_second,
            await store.room_id_for(42),
            await store.debate_id_for(first),
        )

    first, mapped_first, mapped_second, resolved, debate_id = asyncio.run(run())

    assert mapped_first == first
    assert mapped_second == first
    assert resolved == first
    assert debate_id == 42


@pytest.mark.parametrize("kind", BACKENDS)
def test_unknown_debate_has_no_room(kind: str, tmp_path) -> None:
    store = make_store(kind, tmp_path)

    assert asyncio.run(store.room_id_for(999)) is None
    assert asyncio.run(store.debate_id_for("missing")) is None


@pytest.mark.parametrize("kind", BACKENDS)
def test_claim_and_release_respect_the_holder(kind: str, tmp_path) -> None:
    store = make_store(kind, tmp_path)

    async def run():
        return [
            await store.claim("lease", "token-a"),
            await store.claim("lease", "token-b"),
            await store.release("lease", "token-b"),
            await store.release("lease", "token-a"),
            await store.claim("lease", "token-b"),
        ]

    assert asyncio.run(run()) == [True, False, False, True, True]


@pytest.mark.parametrize("kind", ["memory", "sqlite"])
def test_expired_claims_can_be_taken_over(kind: str, tmp_path) -> None:
    now = [1000.0]
    store = make_clocked_store(kind, tmp_path, now)

    async def run():
        results = [await store.claim("lease", "dead-process", ttl=60)]
        now[0] += 30
        results.append(await store.claim("lease", "fresh", ttl=60))
        now[0] += 31
        results.append(await store.claim("lease", "fresh", ttl=60))
        results.append(await store.release("lease", "dead-process"))
        results.append(await store.get("lease"))
        return results

    assert asyncio.run(run()) == [True, False, True, False, "fresh"]


@pytest.mark.parametrize("kind", ["memory", "sqlite"])
def test_claims_without_ttl_and_written_values_never_lapse(kind: str, tmp_path) -> None:
    now = [1000.0]
    store = make_clocked_store(kind, tmp_path, now)

    async def run():
        await store.claim("once", "first")
        await store.claim("record", "lease-token", ttl=5)
        await store.put("record", "verdict")
        now[0] += 1_000_000
        return await store.claim("once", "second"), await store.claim("record", "other", ttl=5)

    assert asyncio.run(run()) == (False, False)


def test_redis_claim_sets_expiry_in_milliseconds() -> None:
    client = FakeRedis()
    store = RedisMessageStore(client=client)

    async def run():
        first = await store.claim("debate:42:discussion:lease", "dead-process", ttl=90)
        await store.claim("debate:42:gladiators_admitted", "done")
        client.expire("kv:debate:42:discussion:lease")
        second = await store.claim("debate:42:discussion:lease", "fresh", ttl=90)
        return first, second

    assert asyncio.run(run()) == (True, True)
    assert client.values["kv:debate:42:discussion:lease"] == "fresh"
    assert client.expiry_ms["kv:debate:42:discussion:lease"] == 90_000
    assert "kv:debate:42:gladiators_admitted" not in client.expiry_ms


def test_sqlite_store_adds_expiry_column_to_older_files(tmp_path) -> None:
    db_path = tmp_path / "old.db"
    conn = sqlite3.connect(db_path)
    conn.execute("CREATE TABLE kv (key TEXT PRIMARY KEY, value TEXT NOT NULL)")
    conn.execute("INSERT INTO kv (key, value) VALUES ('debate:1:discussion', 'done')")
    conn.commit()
    conn.close()

    store = SqliteMessageStore(str(db_path))

    async def run():
        return (
            await store.get("debate:1:discussion"),
            await store.claim("debate:1:discussion:lease", "token", ttl=10),
        )

    assert asyncio.run(run()) == ("done", True)


@pytest.mark.parametrize("kind", BACKENDS)
def test_key_value_roundtrip(kind: str, tmp_path) -> None:
    store = make_store(kind, tmp_path)

    async def run():
        missing = await store.get("debate:1:round:0:verdict")
        await store.put("debate:1:round:0:verdict", '{"winner_id": "plato"}')
        await store.put("debate:1:round:0:verdict", '{"winner_id": "socrates"}')
        return missing, await store.get("debate:1:round:0:verdict")

    missing, value = asyncio.run(run())

    assert missing is None
    assert value == '{"winner_id": "socrates"}'


def test_sqlite_store_persists_across_instances(tmp_path) -> None:
    db_path = str(tmp_path / "durable.db")

    async def write():
        store = SqliteMessageStore(db_path)
        room_id = await store.create_room()
        await store.map_debate_to_room(7, room_id)
        await store.append(room_id, Message.system("Chat room created"))
        return room_id

    async def read():
        store = SqliteMessageStore(db_path)
        room_id = await store.room_id_for(7)
        return room_id, await store.all_messages(room_id)

    written_room = asyncio.run(write())
    room_id, messages = asyncio.run(read())

    assert room_id == written_room
    assert [m.content for m in messages] == ["Chat room created"]
    assert messages[0].is_system


def test_sqlite_errors_become_store_unavailable(tmp_path, monkeypatch: pytest.MonkeyPatch) -> None:
    store = SqliteMessageStore(str(tmp_path / "broken.db"))

    def broken_connect(*args, **kwargs):
        raise sqlite3.OperationalError("disk I/O error")

    monkeypatch.setattr("coordinator.chat.sqlite_store.sqlite3.connect", broken_connect)

    with pytest.raises(StoreUnavailable):
        asyncio.run(store.all_messages("room"))


def test_redis_store_uses_persisted_key_layout() -> None:
    client = FakeRedis()
    store = RedisMessageStore(client=client)

    async def run():
        room_id = await store.create_room()
        await store.map_debate_to_room(42, room_id)
        await store.append(room_id, Message(sender="socrates", content="Know thyself"))
        return room_id

    room_id = asyncio.run(run())

    assert client.values["debate:42:roomId"] == room_id
    assert client.values[f"room:{room_id}:debateId"] == "42"
    stored = Message.from_json(client.lists[f"room:{room_id}:messages"][0])
    assert stored.sender == "socrates"
    assert stored.content == "Know thyself"


def test_redis_errors_become_store_unavailable() -> None:
    store = RedisMessageStore(client=FakeRedis(fail=True))

    with pytest.raises(StoreUnavailable):
        asyncio.run(store.room_id_for(1))
    with pytest.raises(StoreUnavailable):
        asyncio.run(store.connect())


def test_redis_store_requires_connection() -> None:
    store = RedisMessageStore("redis://localhost:6379")

    with pytest.raises(StoreUnavailable):
        asyncio.run(store.get("anything"))


def test_factory_selects_backend(tmp_path) -> None:
    assert isinstance(create_message_store(StoreConfig(backend="memory")), InMemoryMessageStore)
    sqlite_store = create_message_store(
        StoreConfig(backend="sqlite", sqlite_path=str(tmp_path / "f.db"))
    )
    assert isinstance(sqlite_store, SqliteMessageStore)
    redis_store = create_message_store(StoreConfig(backend="redis", redis_url="redis://cache:6379"))
    assert isinstance(redis_store, RedisMessageStore)
    assert redis_store.redis_url == "redis://cache:6379"
