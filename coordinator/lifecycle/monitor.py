"""Lifecycle monitor: reacts to ledger events and polls round state."""

import asyncio
import logging
import time
from dataclasses import dataclass, field

from coordinator.agents.registry import AgentRegistry
from coordinator.chat.room import ChatRoomService
from coordinator.chat.store import MessageStore
from coordinator.config.settings import MonitorConfig
from coordinator.debate_engine.orchestrator import DiscussionOrchestrator, DiscussionResult
from coordinator.judges.verdict import VerdictProtocol
from coordinator.ledger.base import LedgerReader
from coordinator.ledger.models import GladiatorRecord, Market
from .lease import (
    TransitionLease,
    claim_once,
    discussion_key,
    finalize_key,
    gladiators_admitted_key,
    judge_admitted_key,
    next_round_key,
    verdict_key,
)
from .models import RoundEvent, RoundEventType, VerdictRecord

logger = logging.getLogger(__name__)


@dataclass
class PollSummary:
    """What one poll cycle did."""

    markets_checked: int = 0
    finalized: list[int] = field(default_factory=list)
    started: list[int] = field(default_factory=list)
    failed: list[int] = field(default_factory=list)


class LifecycleMonitor:
    """Drives round transitions from event notifications and periodic polling.

    Events run the conversation: a bonding-complete event opens the chat room
    and starts the discussion, a round-started event brings in the judge. The
    poll loop only keeps the ledger moving (finalizing overdue rounds and
    starting the next one). Every transition holds a lease, so duplicate
    triggers from either path are no-ops, and join announcements are written
    once per debate or round even when a failed transition is retried.
    """

    def __init__(
        self,
        config: MonitorConfig,
        ledger: LedgerReader,
        chat: ChatRoomService,
        orchestrator: DiscussionOrchestrator,
        verdict: VerdictProtocol,
        registry: AgentRegistry,
        clock=time.time,
    ):
        self.config = config
        self.ledger = ledger
        self.chat = chat
        self.orchestrator = orchestrator
        self.verdict = verdict
        self.registry = registry
        self._clock = clock
        self._poll_task: asyncio.Task | None = None
        self._tasks: set[asyncio.Task] = set()

    @property
    def store(self) -> MessageStore:
        return self.chat.store

    @property
    def in_flight(self) -> int:
        return len(self._tasks)

    # Event path

    def dispatch(self, event: RoundEvent) -> asyncio.Task:
        """Handle ``event`` in a background task owned by the monitor."""
        task = asyncio.create_task(
            self.handle_event(event), name=f"{event.type.value}:{event.market_id}"
        )
        self._tasks.add(task)
        task.add_done_callback(self._on_task_done)
        return task

    def _on_task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error(f"Lifecycle task {task.get_name()} failed: {exc}")

    async def handle_event(self, event: RoundEvent) -> None:
        logger.info(
            f"Handling {event.type.value} for market {event.market_id} "
            f"(round {event.round_index})"
        )
        if event.type == RoundEventType.BONDING_COMPLETE:
            await self.on_bonding_complete(event.market_id)
        elif event.type == RoundEventType.ROUND_STARTED:
            await self.on_round_started(event.market_id, event.round_index)

    async def on_bonding_complete(self, market_id: int) -> DiscussionResult | None:
        """Open the debate's chat room, admit the gladiators and run the discussion."""
        market = await self.ledger.get_market(market_id)
        debate = await self.ledger.get_debate(market.debate_id)

        lease = TransitionLease(
            self.store, discussion_key(debate.id), self.config.lease_ttl
        )
        async with lease as acquired:
            if not acquired:
                logger.info(f"Discussion for debate {debate.id} already started")
                return None

            await self.chat.create_chat_room(debate.id)

            records = await self.ledger.get_gladiators(market.id)
            gladiators = [
                self.registry.gladiator(r.ai_address, r.name, r.index, r.is_active)
                for r in records
                if r.is_active
            ]
            if await claim_once(self.store, gladiators_admitted_key(debate.id)):
                for gladiator in gladiators:
                    await self.chat.join_as_participant(debate.id, gladiator.name)

            return await self.orchestrator.facilitate_discussion(
                debate.id, gladiators, debate.topic
            )

    async def on_round_started(self, market_id: int, round_index: int) -> VerdictRecord | None:
        """Bring the judge in, obtain its verdict and record it."""
        market = await self.ledger.get_market(market_id)
        debate_id = market.debate_id

        if await self.store.get(verdict_key(debate_id, round_index)) is not None:
            logger.info(f"Verdict for debate {debate_id} round {round_index} already recorded")
            return None

        lease = TransitionLease(
            self.store, verdict_key(debate_id, round_index), self.config.lease_ttl
        )
        async with lease as acquired:
            if not acquired:
                return None

            judge_record = await self.ledger.get_judge(market.id)
            judge = self.registry.judge(judge_record.address, judge_record.name)

            if await claim_once(self.store, judge_admitted_key(debate_id, round_index)):
                await self.chat.join_as_judge(debate_id, judge.name)
                await self.chat.send_system_message(
                    debate_id,
                    f"Judge {judge.name} takes the stand to decide round {round_index}",
                )

            verdict = await self.verdict.request_verdict(debate_id, judge)
            if verdict.verdict_text.strip():
                await self.chat.send_message(debate_id, judge.agent_id, verdict.verdict_text)
            else:
                logger.warning(
                    f"Judge {judge.name} gave no reasoning for debate {debate_id} "
                    f"round {round_index}"
                )

            winner = self._resolve_winner(verdict.winner_id, market.gladiators)
            winner_label = winner.name if winner else verdict.winner_id
            await self.chat.send_system_message(
                debate_id,
                f"Judge {judge.name} declared {winner_label} the winner of round {round_index}",
            )

            record = VerdictRecord(
                debate_id=debate_id,
                round_index=round_index,
                winner_id=verdict.winner_id,
                winner_index=winner.index if winner else None,
                winner_name=winner.name if winner else None,
                verdict_text=verdict.verdict_text,
                judge_id=judge.agent_id,
                attempts=verdict.attempts,
            )
            await self.store.put(verdict_key(debate_id, round_index), record.model_dump_json())
            logger.info(
                f"Recorded verdict for debate {debate_id} round {round_index}: {winner_label}"
            )
            return record

    async def get_verdict_record(self, debate_id: int, round_index: int) -> VerdictRecord | None:
        raw = await self.store.get(verdict_key(debate_id, round_index))
        if raw is None:
            return None
        return VerdictRecord.model_validate_json(raw)

    @staticmethod
    def _resolve_winner(
        winner_id: str, gladiators: list[GladiatorRecord]
    ) -> GladiatorRecord | None:
        wanted = winner_id.strip().lower()
        for gladiator in gladiators:
            if wanted in (gladiator.ai_address.lower(), gladiator.name.lower()):
                return gladiator
        logger.warning(f"Judge named unknown winner {winner_id!r}")
        return None

    # Poll path

    async def poll_once(self) -> PollSummary:
        """Run one poll cycle over every active market."""
        summary = PollSummary()
        markets = await self.ledger.get_active_markets()
        for market in markets:
            summary.markets_checked += 1
            try:
                await self._poll_market(market, summary)
            except Exception as e:
                summary.failed.append(market.id)
                logger.error(f"Polling market {market.id} failed: {e}")
        return summary

    async def _poll_market(self, market: Market, summary: PollSummary) -> None:
        current = await self.ledger.get_current_round(market.id)

        if current.is_overdue(self._clock()):
            key = finalize_key(market.id, current.index)
            async with TransitionLease(self.store, key, self.config.lease_ttl) as acquired:
                if acquired:
                    await self.ledger.finalize_round(market.id, current.index)
                    summary.finalized.append(market.id)
                    logger.info(f"Finalized overdue round {current.index} of market {market.id}")
            return

        if not current.is_complete:
            return

        debate = await self.ledger.get_debate(market.debate_id)
        if current.index + 1 >= debate.total_rounds:
            logger.debug(f"Market {market.id} finished its final round")
            return

        key = next_round_key(market.id, current.index)
        async with TransitionLease(self.store, key, self.config.lease_ttl) as acquired:
            if acquired:
                next_round = await self.ledger.start_next_round(market.id)
                summary.started.append(market.id)
                logger.info(f"Started round {next_round.index} of market {market.id}")

    async def _poll_loop(self) -> None:
        while True:
            try:
                await asyncio.sleep(self.config.poll_interval)
                summary = await self.poll_once()
                if summary.finalized or summary.started or summary.failed:
                    logger.info(
                        f"Poll cycle: {summary.markets_checked} markets, "
                        f"{len(summary.finalized)} finalized, {len(summary.started)} started, "
                        f"{len(summary.failed)} failed"
                    )
            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.error(f"Error in lifecycle poll loop: {e}")

    # Lifecycle

    def start(self) -> None:
        if not self.config.polling_enabled:
            logger.info("Round polling disabled")
            return
        if self._poll_task is None:
            logger.info(f"Starting round poll loop every {self.config.poll_interval}s")
            self._poll_task = asyncio.create_task(self._poll_loop())

    async def stop(self) -> None:
        """Cancel the poll loop and every in-flight event task."""
        tasks = list(self._tasks)
        if self._poll_task is not None:
            tasks.append(self._poll_task)
            self._poll_task = None
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
            logger.info(f"Lifecycle monitor stopped ({len(tasks)} tasks cancelled)")
