"""Ledger reader backed by an HTTP ledger gateway (chain indexer)."""

import logging
from typing import Any

import httpx
from pydantic import TypeAdapter, ValidationError

from coordinator.exceptions import LedgerReadFailed
from .base import LedgerReader
from .models import Debate, GladiatorRecord, JudgeRecord, Market, Round, RoundVerdict

logger = logging.getLogger(__name__)

_markets_adapter = TypeAdapter(list[Market])
_gladiators_adapter = TypeAdapter(list[GladiatorRecord])


class HttpLedgerClient(LedgerReader):
    """Reads market and round state from a JSON gateway in front of the contracts."""

    def __init__(self, base_url: str, timeout: float = 15.0, client: httpx.AsyncClient | None = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client = client

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(base_url=self.base_url, timeout=self.timeout)
        return self._client

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _request(self, method: str, path: str, allow_missing: bool = False) -> Any:
        try:
            response = await self.client.request(method, path)
            if allow_missing and response.status_code == 404:
                return None
            response.raise_for_status()
            return response.json() if response.content else None
        except httpx.HTTPError as e:
            logger.error(f"Ledger request {method} {path} failed: {e}")
            raise LedgerReadFailed(f"{method} {path} failed: {e}") from e
        except ValueError as e:
            raise LedgerReadFailed(f"{method} {path} returned invalid JSON: {e}") from e

    def _validate(self, parse, data: Any, what: str):
        try:
            return parse(data)
        except ValidationError as e:
            raise LedgerReadFailed(f"Unexpected {what} payload from ledger: {e}") from e

    async def get_active_markets(self) -> list[Market]:
        data = await self._request("GET", "/markets/active")
        return self._validate(_markets_adapter.validate_python, data, "markets")

    async def get_market(self, market_id: int) -> Market:
        data = await self._request("GET", f"/markets/{market_id}")
        return self._validate(Market.model_validate, data, "market")

    async def get_current_round(self, market_id: int) -> Round:
        data = await self._request("GET", f"/markets/{market_id}/round")
        return self._validate(Round.model_validate, data, "round")

    async def get_gladiators(self, market_id: int) -> list[GladiatorRecord]:
        data = await self._request("GET", f"/markets/{market_id}/gladiators")
        gladiators = self._validate(_gladiators_adapter.validate_python, data, "gladiators")
        return sorted(gladiators, key=lambda g: g.index)

    async def get_judge(self, market_id: int) -> JudgeRecord:
        data = await self._request("GET", f"/markets/{market_id}/judge")
        return self._validate(JudgeRecord.model_validate, data, "judge")

    async def get_debate(self, debate_id: int) -> Debate:
        data = await self._request("GET", f"/debates/{debate_id}")
        return self._validate(Debate.model_validate, data, "debate")

    async def get_round_verdict(self, market_id: int, round_index: int) -> RoundVerdict | None:
        data = await self._request(
            "GET", f"/markets/{market_id}/rounds/{round_index}/verdict", allow_missing=True
        )
        if data is None:
            return None
        return self._validate(RoundVerdict.model_validate, data, "verdict")

    async def finalize_round(self, market_id: int, round_index: int) -> None:
        await self._request("POST", f"/markets/{market_id}/rounds/{round_index}/finalize")

    async def start_next_round(self, market_id: int) -> Round:
        data = await self._request("POST", f"/markets/{market_id}/rounds/next")
        return self._validate(Round.model_validate, data, "round")
