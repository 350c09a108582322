"""Interface of the ledger the coordinator reads round state from."""

from abc import ABC, abstractmethod

from .models import Debate, GladiatorRecord, JudgeRecord, Market, Round, RoundVerdict


class LedgerReader(ABC):
    """Read access to markets and rounds, plus the two round lifecycle actions.

    Implementations raise ``LedgerReadFailed`` for every backend failure.
    """

    async def close(self) -> None:
        """Release connections. No-op by default."""

    @abstractmethod
    async def get_active_markets(self) -> list[Market]:
        pass

    @abstractmethod
    async def get_market(self, market_id: int) -> Market:
        pass

    @abstractmethod
    async def get_current_round(self, market_id: int) -> Round:
        pass

    @abstractmethod
    async def get_gladiators(self, market_id: int) -> list[GladiatorRecord]:
        pass

    @abstractmethod
    async def get_judge(self, market_id: int) -> JudgeRecord:
        pass

    @abstractmethod
    async def get_debate(self, debate_id: int) -> Debate:
        pass

    @abstractmethod
    async def get_round_verdict(self, market_id: int, round_index: int) -> RoundVerdict | None:
        pass

    @abstractmethod
    async def finalize_round(self, market_id: int, round_index: int) -> None:
        """Mark an overdue round complete."""

    @abstractmethod
    async def start_next_round(self, market_id: int) -> Round:
        """Open the round after the current, completed one."""
