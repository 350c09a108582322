"""Judge verdict protocol.

The judge is walked through four sequential exchanges: a priming message, the
debate transcript, a request for a reasoned decision and finally a request to
restate the winner as ``{winner: '<identifier>'}``. Only the last exchange is
retried, and only when the reply does not match the expected format.
"""

import logging
import re
from dataclasses import dataclass

from coordinator.agents.gateway import AgentGateway
from coordinator.chat.models import SYSTEM_SENDER, Judge, Message
from coordinator.chat.room import ChatRoomService
from coordinator.config.settings import VerdictConfig
from coordinator.exceptions import RoomNotFound
from .retry import retry_until_parsed

logger = logging.getLogger(__name__)

WINNER_PATTERN = re.compile(r"""\{\s*["']?winner["']?\s*:\s*(["'])(.+?)\1\s*\}""")

PRIME_PROMPT = (
    "You are about to receive the full transcript of a debate. "
    "Read it carefully and do not respond yet."
)
DECISION_PROMPT = (
    "You have now seen the whole debate. Decide which gladiator made the best "
    "points while debating. Explain your reasoning and name the winner."
)
FORMAT_PROMPT = (
    "Restate only the winner of this debate in exactly this format and nothing else: "
    "{winner: '<identifier>'}"
)


@dataclass
class Verdict:
    """The judge's reasoning plus the winner it named."""

    verdict_text: str
    winner_id: str
    attempts: int


def parse_winner(reply: str) -> str | None:
    """Return the identifier from a ``{winner: '...'}`` reply, or None."""
    match = WINNER_PATTERN.search(reply)
    if match is None:
        return None
    return match.group(2).strip() or None


def format_transcript(messages: list[Message]) -> str:
    """Render participant messages as ``sender: content`` lines, system lines excluded."""
    return "\n".join(
        f"{message.sender}: {message.content}"
        for message in messages
        if not message.is_system
    )


class VerdictProtocol:
    """Runs the verdict exchange against a judge agent."""

    def __init__(self, config: VerdictConfig, chat: ChatRoomService, gateway: AgentGateway):
        self.config = config
        self.chat = chat
        self.gateway = gateway

    async def request_verdict(self, debate_id: int, judge: Judge) -> Verdict:
        room_id = await self.chat.store.room_id_for(debate_id)
        if room_id is None:
            raise RoomNotFound(debate_id)

        logger.info(f"Requesting verdict for debate {debate_id} from judge {judge.name}")

        await self._ask(judge, room_id, PRIME_PROMPT)

        messages = await self.chat.store.all_messages(room_id)
        transcript = format_transcript(messages)
        logger.debug(f"Debate {debate_id} transcript has {len(transcript)} chars")
        await self._ask(judge, room_id, transcript)

        verdict_text = await self._ask(judge, room_id, DECISION_PROMPT)

        winner_id, attempts = await retry_until_parsed(
            lambda: self._ask(judge, room_id, FORMAT_PROMPT),
            parse_winner,
            max_attempts=self.config.max_attempts,
            base_delay=self.config.retry_base_delay,
            max_delay=self.config.retry_max_delay,
        )

        logger.info(
            f"Judge {judge.name} named {winner_id} as winner of debate {debate_id} "
            f"after {attempts} format attempt(s)"
        )
        return Verdict(verdict_text=verdict_text, winner_id=winner_id, attempts=attempts)

    async def _ask(self, judge: Judge, room_id: str, text: str) -> str:
        return await self.gateway.send(
            judge, room_id, sender_id=SYSTEM_SENDER, text=text, sender_name="Coordinator"
        )
