"""Ledger data models (markets, debates, rounds, registries)."""

from pydantic import BaseModel, Field


class RoundVerdict(BaseModel):
    """Judge scores recorded on the ledger for one round."""

    scores: list[int] = Field(default_factory=list, description="Score per gladiator index")
    timestamp: int = Field(..., description="Unix time the verdict was recorded")


class Round(BaseModel):
    """One timed segment of a debate."""

    index: int = Field(..., description="Zero-based round index")
    start_time: int = Field(..., description="Unix start time")
    end_time: int = Field(..., description="Unix end time")
    is_complete: bool = Field(default=False)
    verdict: RoundVerdict | None = None

    def is_overdue(self, now: float) -> bool:
        """True when the round ran past its end time without completing."""
        return not self.is_complete and now > self.end_time


class GladiatorRecord(BaseModel):
    """Gladiator registration as stored on the ledger."""

    ai_address: str = Field(..., description="Agent id of the gladiator")
    name: str
    index: int
    is_active: bool = True
    public_key: str | None = None


class JudgeRecord(BaseModel):
    """Judge registration as stored on the ledger."""

    address: str = Field(..., description="Agent id of the judge")
    name: str


class BondingCurve(BaseModel):
    target: int = 0
    current: int = 0
    base_price: int = 0
    current_price: int = 0
    is_fulfilled: bool = False
    end_time: int = 0


class Market(BaseModel):
    """Prediction market wrapping one debate."""

    id: int
    debate_id: int
    token: str | None = None
    resolved: bool = False
    judge_ai: str = ""
    winning_gladiator: int | None = None
    bonding_curve: BondingCurve = Field(default_factory=BondingCurve)
    total_bonding_amount: int = 0
    gladiators: list[GladiatorRecord] = Field(default_factory=list)
    current_round: int = Field(default=0, description="Index of the active round")


class Debate(BaseModel):
    """Debate metadata owned by the ledger."""

    id: int
    topic: str
    total_rounds: int = Field(default=1, ge=1)
    round_duration: int = Field(default=3600, description="Seconds per round")
    winner: int | None = None


class LedgerSnapshot(BaseModel):
    """Serialized content of the in-memory ledger (fixture file format)."""

    markets: list[Market] = Field(default_factory=list)
    debates: list[Debate] = Field(default_factory=list)
    judges: dict[int, JudgeRecord] = Field(
        default_factory=dict, description="Judge per market id"
    )
    rounds: dict[int, list[Round]] = Field(
        default_factory=dict, description="Rounds per market id"
    )
