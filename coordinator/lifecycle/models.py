"""Lifecycle events and verdict records."""

from enum import Enum

from pydantic import BaseModel, Field

from coordinator.chat.models import utc_timestamp


class RoundEventType(str, Enum):
    BONDING_COMPLETE = "bonding_complete"
    ROUND_STARTED = "round_started"


class RoundEvent(BaseModel):
    """A ledger event observed for a market."""

    type: RoundEventType = Field(..., description="Kind of lifecycle event")
    market_id: int = Field(..., description="Market the event belongs to")
    round_index: int = Field(default=0, ge=0, description="Round the event refers to")


class VerdictRecord(BaseModel):
    """Verdict of one round as recorded in the store."""

    debate_id: int
    round_index: int
    winner_id: str = Field(..., description="Identifier the judge restated")
    winner_index: int | None = Field(
        default=None, description="Gladiator index the identifier resolved to"
    )
    winner_name: str | None = None
    verdict_text: str
    judge_id: str
    attempts: int = Field(default=1, description="Format requests the judge needed")
    timestamp: str = Field(default_factory=utc_timestamp)
