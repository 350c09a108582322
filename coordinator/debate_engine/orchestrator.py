"""Round-robin discussion orchestration between gladiator agents."""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from enum import Enum

from coordinator.agents.gateway import AgentGateway
from coordinator.chat.models import Gladiator
from coordinator.chat.room import ChatRoomService
from coordinator.config.settings import DiscussionConfig
from coordinator.exceptions import DeliveryFailed, RoomNotFound

logger = logging.getLogger(__name__)


class DiscussionState(Enum):
    NOT_STARTED = "not_started"
    RUNNING = "running"
    FINISHED = "finished"


@dataclass
class TurnCursor:
    """Transient position of a running discussion. Never persisted."""

    participant_count: int
    budget: int
    speaker_index: int = 0
    turns_elapsed: int = 0
    state: DiscussionState = DiscussionState.NOT_STARTED

    @property
    def exhausted(self) -> bool:
        return self.turns_elapsed >= self.budget

    @property
    def completed_cycles(self) -> int:
        return self.turns_elapsed // self.participant_count

    def advance(self) -> None:
        self.speaker_index = (self.speaker_index + 1) % self.participant_count
        self.turns_elapsed += 1


@dataclass
class DiscussionResult:
    """Outcome of one discussion session."""

    room_id: str
    turns_completed: int
    replies_appended: int = 0
    failed_turns: list[int] = field(default_factory=list)
    duration_ms: int = 0


class DiscussionOrchestrator:
    """Cycles speaking rights among gladiators and relays the latest message."""

    def __init__(
        self,
        config: DiscussionConfig,
        chat: ChatRoomService,
        gateway: AgentGateway,
    ):
        self.config = config
        self.chat = chat
        self.gateway = gateway
        self.active_discussions: dict[int, TurnCursor] = {}

    async def facilitate_discussion(
        self, debate_id: int, participants: list[Gladiator], topic: str
    ) -> DiscussionResult:
        """Run one discussion of ``turn_budget`` relay exchanges."""
        if not participants:
            raise ValueError(f"Debate {debate_id} has no participants to discuss")

        room_id = await self.chat.store.room_id_for(debate_id)
        if room_id is None:
            raise RoomNotFound(debate_id)

        start_time = time.time()
        cursor = TurnCursor(participant_count=len(participants), budget=self.config.turn_budget)
        cursor.state = DiscussionState.RUNNING
        self.active_discussions[debate_id] = cursor
        result = DiscussionResult(room_id=room_id, turns_completed=0)

        await self.chat.send_system_message(
            debate_id, self._opening_prompt(topic, participants)
        )
        logger.info(
            f"Discussion started for debate {debate_id} with {len(participants)} gladiators, "
            f"budget {cursor.budget}"
        )

        try:
            while not cursor.exhausted:
                speaker = participants[cursor.speaker_index]
                turn = cursor.turns_elapsed

                if await self._take_turn(debate_id, room_id, speaker, turn):
                    result.replies_appended += 1
                else:
                    result.failed_turns.append(turn)

                cursor.advance()
                result.turns_completed = cursor.turns_elapsed

                if cursor.exhausted:
                    break

                if self._keepalive_due(cursor):
                    await self.chat.send_system_message(debate_id, self._keepalive_prompt(topic))

                await asyncio.sleep(self.config.turn_delay)
        finally:
            cursor.state = DiscussionState.FINISHED
            self.active_discussions.pop(debate_id, None)

        result.duration_ms = int((time.time() - start_time) * 1000)
        logger.info(
            f"Discussion for debate {debate_id} finished: {result.turns_completed} turns, "
            f"{result.replies_appended} replies, {len(result.failed_turns)} silent turns "
            f"in {result.duration_ms}ms"
        )
        return result

    async def _take_turn(
        self, debate_id: int, room_id: str, speaker: Gladiator, turn: int
    ) -> bool:
        """Relay the latest message to ``speaker``; True when a reply was appended."""
        messages = await self.chat.store.all_messages(room_id)
        if not messages:
            logger.warning(f"Debate {debate_id} turn {turn}: no message to relay, skipping")
            return False

        last_message = messages[-1]
        try:
            reply = await self.gateway.send(
                speaker,
                room_id,
                sender_id=last_message.sender,
                text=last_message.content,
            )
        except DeliveryFailed as e:
            logger.warning(
                f"Debate {debate_id} turn {turn}: {speaker.name} ({speaker.agent_id}) "
                f"did not answer: {e.cause}"
            )
            return False

        if not reply.strip():
            logger.warning(
                f"Debate {debate_id} turn {turn}: {speaker.name} returned an empty reply"
            )
            return False

        await self.chat.send_message(debate_id, speaker.agent_id, reply)
        logger.info(f"Debate {debate_id} turn {turn}: {speaker.name} replied")
        return True

    def _keepalive_due(self, cursor: TurnCursor) -> bool:
        every = self.config.keepalive_every_cycles
        if not every:
            return False
        return (
            cursor.turns_elapsed % cursor.participant_count == 0
            and cursor.completed_cycles % every == 0
        )

    def _opening_prompt(self, topic: str, participants: list[Gladiator]) -> str:
        opener = participants[0]
        return (
            f'The topic of this debate is: "{topic}". '
            f"{opener.name}, you open the debate: state your position clearly and "
            f"back it with {self.config.opening_points} supporting points. "
            "Everyone else, answer the previous speaker directly, challenge weak "
            "arguments and keep the debate going."
        )

    def _keepalive_prompt(self, topic: str) -> str:
        return (
            f'Reminder: the debate is about "{topic}". Avoid repeating earlier points, '
            "bring a new argument or rebut the last one."
        )
