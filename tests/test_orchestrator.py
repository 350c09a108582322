"""Tests for the round-robin discussion orchestrator."""

import asyncio

import pytest

from coordinator.chat.models import Gladiator
from coordinator.chat.room import ROOM_CREATED_TEXT, ChatRoomService
from coordinator.config.settings import DiscussionConfig
from coordinator.debate_engine.orchestrator import DiscussionOrchestrator, TurnCursor
from coordinator.exceptions import RoomNotFound
from fakes import FakeGateway, delivery_failure


async def open_debate(chat: ChatRoomService, debate_id: int, *gladiators: Gladiator) -> None:
    await chat.create_chat_room(debate_id)
    for gladiator in gladiators:
        await chat.join_as_participant(debate_id, gladiator.name)


def test_two_gladiators_alternate_for_the_whole_budget(
    chat: ChatRoomService,
    discussion_config: DiscussionConfig,
    socrates: Gladiator,
    plato: Gladiator,
    sample_debate_topic: str,
) -> None:
    gateway = FakeGateway()
    orchestrator = DiscussionOrchestrator(discussion_config, chat, gateway)

    async def run():
        await open_debate(chat, 42, socrates, plato)
        result = await orchestrator.facilitate_discussion(
            42, [socrates, plato], sample_debate_topic
        )
        return result, await chat.get_messages(42)

    result, messages = asyncio.run(run())

    assert result.turns_completed == 5
    assert result.replies_appended == 5
    assert result.failed_turns == []
    assert [c["agent_id"] for c in gateway.calls] == [
        "socrates",
        "plato",
        "socrates",
        "plato",
        "socrates",
    ]

    assert messages[0].content == ROOM_CREATED_TEXT
    assert messages[1].content == "Socrates has joined the chat"
    assert messages[2].content == "Plato has joined the chat"
    opening = messages[3]
    assert opening.is_system
    assert sample_debate_topic in opening.content
    assert "Socrates, you open the debate" in opening.content
    assert "3 supporting points" in opening.content

    agent_messages = messages[4:]
    assert [m.sender for m in agent_messages] == [
        "socrates",
        "plato",
        "socrates",
        "plato",
        "socrates",
    ]
    assert len(messages) == 1 + 2 + 1 + 5


def test_each_speaker_receives_the_latest_message(
    chat: ChatRoomService,
    discussion_config: DiscussionConfig,
    socrates: Gladiator,
    plato: Gladiator,
) -> None:
    gateway = FakeGateway()
    orchestrator = DiscussionOrchestrator(discussion_config, chat, gateway)

    async def run():
        await open_debate(chat, 42, socrates, plato)
        await orchestrator.facilitate_discussion(42, [socrates, plato], "Justice")

    asyncio.run(run())

    first, second, third = gateway.calls[:3]
    assert first["sender_id"] == "system"
    assert first["text"].startswith('The topic of this debate is: "Justice"')
    assert second["sender_id"] == "socrates"
    assert second["text"] == "Socrates says 1"
    assert third["sender_id"] == "plato"
    assert third["text"] == "Plato says 1"
    assert {c["room_id"] for c in gateway.calls} == {asyncio.run(chat.store.room_id_for(42))}


def test_failed_delivery_leaves_a_gap_but_counts_toward_budget(
    chat: ChatRoomService,
    discussion_config: DiscussionConfig,
    socrates: Gladiator,
    plato: Gladiator,
) -> None:
    gateway = FakeGateway(
        {
            "socrates": ["First", "Second", "Third"],
            "plato": [delivery_failure("plato"), "Rebuttal"],
        }
    )
    orchestrator = DiscussionOrchestrator(discussion_config, chat, gateway)

    async def run():
        await open_debate(chat, 42, socrates, plato)
        result = await orchestrator.facilitate_discussion(42, [socrates, plato], "Justice")
        return result, await chat.get_messages(42)

    result, messages = asyncio.run(run())

    assert len(gateway.calls) == 5
    assert result.turns_completed == 5
    assert result.replies_appended == 4
    assert result.failed_turns == [1]
    assert [m.content for m in messages if not m.is_system] == [
        "First",
        "Second",
        "Rebuttal",
        "Third",
    ]


def test_empty_replies_are_not_appended(
    chat: ChatRoomService, socrates: Gladiator, plato: Gladiator
) -> None:
    config = DiscussionConfig(turn_budget=2, turn_delay=0.0)
    gateway = FakeGateway({"socrates": ["   "], "plato": ["Something"]})
    orchestrator = DiscussionOrchestrator(config, chat, gateway)

    async def run():
        await open_debate(chat, 9, socrates, plato)
        result = await orchestrator.facilitate_discussion(9, [socrates, plato], "Beauty")
        return result, await chat.get_messages(9)

    result, messages = asyncio.run(run())

    assert result.failed_turns == [0]
    assert [m.sender for m in messages if not m.is_system] == ["plato"]


def test_budget_is_independent_of_participant_count(
    chat: ChatRoomService, socrates: Gladiator, plato: Gladiator
) -> None:
    aristotle = Gladiator(agent_id="aristotle", name="Aristotle", index=2, endpoint="http://agents")
    config = DiscussionConfig(turn_budget=4, turn_delay=0.0)
    gateway = FakeGateway()
    orchestrator = DiscussionOrchestrator(config, chat, gateway)

    async def run():
        await open_debate(chat, 11, socrates, plato, aristotle)
        return await orchestrator.facilitate_discussion(
            11, [socrates, plato, aristotle], "Causes"
        )

    result = asyncio.run(run())

    assert result.turns_completed == 4
    assert [c["agent_id"] for c in gateway.calls] == [
        "socrates",
        "plato",
        "aristotle",
        "socrates",
    ]


def test_waits_turn_delay_between_turns(
    chat: ChatRoomService,
    socrates: Gladiator,
    plato: Gladiator,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    sleeps: list[float] = []

    async def fake_sleep(delay: float) -> None:
        sleeps.append(delay)

    monkeypatch.setattr("coordinator.debate_engine.orchestrator.asyncio.sleep", fake_sleep)

    config = DiscussionConfig(turn_budget=3, turn_delay=5.0)
    orchestrator = DiscussionOrchestrator(config, chat, FakeGateway())

    async def run():
        await open_debate(chat, 1, socrates, plato)
        await orchestrator.facilitate_discussion(1, [socrates, plato], "Time")

    asyncio.run(run())

    assert sleeps == [5.0, 5.0]


def test_keepalive_nudges_after_full_cycles(
    chat: ChatRoomService, socrates: Gladiator, plato: Gladiator
) -> None:
    config = DiscussionConfig(turn_budget=5, turn_delay=0.0, keepalive_every_cycles=1)
    orchestrator = DiscussionOrchestrator(config, chat, FakeGateway())

    async def run():
        await open_debate(chat, 2, socrates, plato)
        await orchestrator.facilitate_discussion(2, [socrates, plato], "Courage")
        return await chat.get_messages(2)

    messages = asyncio.run(run())

    nudges = [m for m in messages if m.is_system and m.content.startswith("Reminder:")]
    assert len(nudges) == 2
    assert all('"Courage"' in m.content for m in nudges)


def test_keepalive_is_off_by_default(
    chat: ChatRoomService,
    discussion_config: DiscussionConfig,
    socrates: Gladiator,
    plato: Gladiator,
) -> None:
    orchestrator = DiscussionOrchestrator(discussion_config, chat, FakeGateway())

    async def run():
        await open_debate(chat, 2, socrates, plato)
        await orchestrator.facilitate_discussion(2, [socrates, plato], "Courage")
        return await chat.get_messages(2)

    messages = asyncio.run(run())

    assert not any(m.content.startswith("Reminder:") for m in messages)


def test_discussion_without_room_raises(
    chat: ChatRoomService,
    discussion_config: DiscussionConfig,
    socrates: Gladiator,
) -> None:
    gateway = FakeGateway()
    orchestrator = DiscussionOrchestrator(discussion_config, chat, gateway)

    with pytest.raises(RoomNotFound):
        asyncio.run(orchestrator.facilitate_discussion(77, [socrates], "Nothing"))

    assert gateway.calls == []
    assert asyncio.run(chat.get_messages(77)) == []


def test_discussion_without_participants_raises(
    chat: ChatRoomService, discussion_config: DiscussionConfig
) -> None:
    orchestrator = DiscussionOrchestrator(discussion_config, chat, FakeGateway())
    asyncio.run(chat.create_chat_room(3))

    with pytest.raises(ValueError):
        asyncio.run(orchestrator.facilitate_discussion(3, [], "Nothing"))


def test_active_discussions_are_tracked_while_running(
    chat: ChatRoomService,
    discussion_config: DiscussionConfig,
    socrates: Gladiator,
) -> None:
    orchestrator = DiscussionOrchestrator(discussion_config, chat, FakeGateway())
    seen: list[int] = []

    class WatchingGateway(FakeGateway):
        async def send(self, participant, room_id, sender_id, text, sender_name=None):
            seen.append(orchestrator.active_discussions[5].turns_elapsed)
            return await super().send(participant, room_id, sender_id, text, sender_name)

    orchestrator.gateway = WatchingGateway()

    async def run():
        await open_debate(chat, 5, socrates)
        await orchestrator.facilitate_discussion(5, [socrates], "Solitude")

    asyncio.run(run())

    assert seen == [0, 1, 2, 3, 4]
    assert orchestrator.active_discussions == {}


def test_turn_cursor_wraps_around() -> None:
    cursor = TurnCursor(participant_count=2, budget=3)

    speakers = []
    while not cursor.exhausted:
        speakers.append(cursor.speaker_index)
        cursor.advance()

    assert speakers == [0, 1, 0]
    assert cursor.completed_cycles == 1
