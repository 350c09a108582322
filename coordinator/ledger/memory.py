"""In-memory ledger, optionally seeded from a JSON fixture."""

import json
import logging
import time
from pathlib import Path

from coordinator.exceptions import LedgerReadFailed
from .base import LedgerReader
from .models import (
    Debate,
    GladiatorRecord,
    JudgeRecord,
    LedgerSnapshot,
    Market,
    Round,
    RoundVerdict,
)

logger = logging.getLogger(__name__)


class InMemoryLedger(LedgerReader):
    """Ledger stand-in for local development and tests."""

    def __init__(self, snapshot: LedgerSnapshot | None = None, clock=time.time):
        snapshot = snapshot or LedgerSnapshot()
        self._clock = clock
        self.markets: dict[int, Market] = {m.id: m for m in snapshot.markets}
        self.debates: dict[int, Debate] = {d.id: d for d in snapshot.debates}
        self.judges: dict[int, JudgeRecord] = dict(snapshot.judges)
        self.rounds: dict[int, list[Round]] = {
            market_id: list(rounds) for market_id, rounds in snapshot.rounds.items()
        }

    @classmethod
    def from_fixture(cls, fixture_path: Path) -> "InMemoryLedger":
        """Load a ledger snapshot; a missing fixture gives an empty ledger."""
        if not fixture_path.exists():
            logger.warning(f"Ledger fixture {fixture_path} not found, starting empty")
            return cls()
        with open(fixture_path, "r", encoding="utf-8") as f:
            snapshot = LedgerSnapshot.model_validate(json.load(f))
        logger.info(
            f"Loaded ledger fixture with {len(snapshot.markets)} markets from {fixture_path}"
        )
        return cls(snapshot)

    def add_market(
        self,
        market: Market,
        debate: Debate,
        judge: JudgeRecord,
        rounds: list[Round] | None = None,
    ) -> None:
        self.markets[market.id] = market
        self.debates[debate.id] = debate
        self.judges[market.id] = judge
        self.rounds[market.id] = list(rounds or [])

    def _market(self, market_id: int) -> Market:
        market = self.markets.get(market_id)
        if market is None:
            raise LedgerReadFailed(f"Unknown market {market_id}")
        return market

    def _round(self, market_id: int, round_index: int) -> Round:
        rounds = self.rounds.get(market_id, [])
        if not 0 <= round_index < len(rounds):
            raise LedgerReadFailed(f"Market {market_id} has no round {round_index}")
        return rounds[round_index]

    async def get_active_markets(self) -> list[Market]:
        return [m for m in self.markets.values() if not m.resolved]

    async def get_market(self, market_id: int) -> Market:
        return self._market(market_id)

    async def get_current_round(self, market_id: int) -> Round:
        market = self._market(market_id)
        return self._round(market_id, market.current_round)

    async def get_gladiators(self, market_id: int) -> list[GladiatorRecord]:
        return sorted(self._market(market_id).gladiators, key=lambda g: g.index)

    async def get_judge(self, market_id: int) -> JudgeRecord:
        self._market(market_id)
        judge = self.judges.get(market_id)
        if judge is None:
            raise LedgerReadFailed(f"Market {market_id} has no judge")
        return judge

    async def get_debate(self, debate_id: int) -> Debate:
        debate = self.debates.get(debate_id)
        if debate is None:
            raise LedgerReadFailed(f"Unknown debate {debate_id}")
        return debate

    async def get_round_verdict(self, market_id: int, round_index: int) -> RoundVerdict | None:
        return self._round(market_id, round_index).verdict

    async def finalize_round(self, market_id: int, round_index: int) -> None:
        current = self._round(market_id, round_index)
        self.rounds[market_id][round_index] = current.model_copy(update={"is_complete": True})
        logger.info(f"Ledger: market {market_id} round {round_index} finalized")

    async def start_next_round(self, market_id: int) -> Round:
        market = self._market(market_id)
        debate = await self.get_debate(market.debate_id)
        next_index = market.current_round + 1
        if next_index >= debate.total_rounds:
            raise LedgerReadFailed(f"Market {market_id} has no round after {market.current_round}")

        now = int(self._clock())
        next_round = Round(
            index=next_index, start_time=now, end_time=now + debate.round_duration
        )
        rounds = self.rounds.setdefault(market_id, [])
        if next_index < len(rounds):
            rounds[next_index] = next_round
        else:
            rounds.append(next_round)
        self.markets[market_id] = market.model_copy(update={"current_round": next_index})
        logger.info(f"Ledger: market {market_id} started round {next_index}")
        return next_round
