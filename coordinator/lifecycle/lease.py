"""Exclusive leases over lifecycle transitions."""

import logging
import uuid

from coordinator.chat.store import MessageStore

logger = logging.getLogger(__name__)

DONE_MARKER = "done"


class TransitionLease:
    """Claims one transition identified by ``key``.

    Used as ``async with TransitionLease(store, key, ttl) as acquired``. When
    ``acquired`` is False the caller must skip the transition.

    Two keys are involved. ``<key>:lease`` is held while the transition runs
    and lapses after ``ttl`` seconds, so a process that died mid-transition
    does not block it forever. ``<key>`` itself is the done marker, written on
    success unless the transition already stored its own record there. Once
    the done marker exists every later trigger is a no-op. A failed
    transition only releases the running lease so the next trigger retries.
    """

    def __init__(self, store: MessageStore, key: str, ttl: float | None = None):
        self.store = store
        self.key = key
        self.lease_key = f"{key}:lease"
        self.ttl = ttl
        self.token = uuid.uuid4().hex
        self.acquired = False

    async def __aenter__(self) -> bool:
        if not await self.store.claim(self.lease_key, self.token, self.ttl):
            logger.debug(f"Lease {self.lease_key} already held, skipping transition")
            return False
        # Checked after claiming: a holder writes the marker before releasing.
        if await self.store.get(self.key) is not None:
            await self.store.release(self.lease_key, self.token)
            logger.debug(f"Transition {self.key} already done")
            return False
        self.acquired = True
        return True

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if not self.acquired:
            return
        if exc_type is None and await self.store.get(self.key) is None:
            await self.store.put(self.key, DONE_MARKER)
        released = await self.store.release(self.lease_key, self.token)
        if exc_type is not None:
            logger.info(
                f"Released lease {self.lease_key} after failed transition"
                if released
                else f"Lease {self.lease_key} was no longer ours to release"
            )


async def claim_once(store: MessageStore, key: str) -> bool:
    """True exactly once per ``key``; used for announcements that must not repeat."""
    return await store.claim(key, DONE_MARKER)


def discussion_key(debate_id: int) -> str:
    return f"debate:{debate_id}:discussion"


def gladiators_admitted_key(debate_id: int) -> str:
    return f"debate:{debate_id}:gladiators_admitted"


def verdict_key(debate_id: int, round_index: int) -> str:
    return f"debate:{debate_id}:round:{round_index}:verdict"


def judge_admitted_key(debate_id: int, round_index: int) -> str:
    return f"debate:{debate_id}:round:{round_index}:judge_admitted"


def finalize_key(market_id: int, round_index: int) -> str:
    return f"market:{market_id}:round:{round_index}:finalize"


def next_round_key(market_id: int, round_index: int) -> str:
    return f"market:{market_id}:round:{round_index}:next"
