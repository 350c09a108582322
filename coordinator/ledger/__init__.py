"""Ledger access (market and round state)."""

from pathlib import Path

from coordinator.config.settings import LedgerConfig
from .base import LedgerReader
from .memory import InMemoryLedger
from .models import (
    BondingCurve,
    Debate,
    GladiatorRecord,
    JudgeRecord,
    LedgerSnapshot,
    Market,
    Round,
    RoundVerdict,
)


def create_ledger(config: LedgerConfig) -> LedgerReader:
    """Build the ledger reader selected in configuration."""
    if config.backend == "http":
        if not config.base_url:
            raise ValueError("Ledger backend 'http' requires base_url or LEDGER_URL")
        from .http import HttpLedgerClient

        return HttpLedgerClient(config.base_url, timeout=config.timeout)

    if config.fixture_path:
        return InMemoryLedger.from_fixture(Path(config.fixture_path))
    return InMemoryLedger()


__all__ = [
    "BondingCurve",
    "Debate",
    "GladiatorRecord",
    "InMemoryLedger",
    "JudgeRecord",
    "LedgerReader",
    "LedgerSnapshot",
    "Market",
    "Round",
    "RoundVerdict",
    "create_ledger",
]
