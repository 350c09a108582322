"""Market round status endpoint."""

import logging

from fastapi import APIRouter, Depends, HTTPException

from coordinator.exceptions import LedgerReadFailed, StoreUnavailable
from coordinator.services import CoordinatorServices
from coordinator.web.dependencies import get_services
from coordinator.web.responses import MessageResponse, RoundStatusResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")


@router.get("/markets/{market_id}/status", response_model=RoundStatusResponse)
async def get_round_status(
    market_id: int, services: CoordinatorServices = Depends(get_services)
):
    """Current round of a market, the debate's messages and any verdict."""
    try:
        market = await services.ledger.get_market(market_id)
        current = await services.ledger.get_current_round(market_id)
        ledger_verdict = await services.ledger.get_round_verdict(market_id, current.index)
        messages = await services.chat.get_messages(market.debate_id)
        recorded = await services.monitor.get_verdict_record(market.debate_id, current.index)
    except (LedgerReadFailed, StoreUnavailable) as e:
        logger.error(f"Round status for market {market_id} unavailable: {e}")
        raise HTTPException(status_code=503, detail=str(e))

    return RoundStatusResponse(
        market_id=market_id,
        debate_id=market.debate_id,
        round=current,
        messages=[MessageResponse.from_message(m) for m in messages],
        verdict=ledger_verdict,
        recorded_verdict=recorded,
    )
