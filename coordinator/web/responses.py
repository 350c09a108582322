"""Response models for the HTTP API."""

from pydantic import BaseModel

from coordinator.chat.models import Message
from coordinator.ledger.models import Round, RoundVerdict
from coordinator.lifecycle.models import VerdictRecord


class MessageResponse(BaseModel):
    """Response model for chat messages."""

    sender: str
    content: str
    timestamp: str

    @classmethod
    def from_message(cls, message: Message) -> "MessageResponse":
        return cls(sender=message.sender, content=message.content, timestamp=message.timestamp)


class RoomResponse(BaseModel):
    debate_id: int
    room_id: str
    message_count: int


class RoundStatusResponse(BaseModel):
    """Current round of a market with its chat log and verdicts."""

    market_id: int
    debate_id: int
    round: Round
    messages: list[MessageResponse]
    verdict: RoundVerdict | None = None
    recorded_verdict: VerdictRecord | None = None


class AgentHealthResponse(BaseModel):
    agent_id: str
    endpoint: str
    healthy: bool


class EventAccepted(BaseModel):
    status: str = "accepted"
    type: str
    market_id: int
    round_index: int
