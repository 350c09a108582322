"""Lifecycle event notification endpoint."""

import logging

from fastapi import APIRouter, Depends

from coordinator.lifecycle.models import RoundEvent
from coordinator.services import CoordinatorServices
from coordinator.web.dependencies import get_services
from coordinator.web.responses import EventAccepted

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")


@router.post("/events", status_code=202, response_model=EventAccepted)
async def notify_event(
    event: RoundEvent, services: CoordinatorServices = Depends(get_services)
):
    """Accept a ledger event and handle it in the background."""
    services.monitor.dispatch(event)
    logger.info(f"Accepted {event.type.value} event for market {event.market_id}")
    return EventAccepted(
        type=event.type.value, market_id=event.market_id, round_index=event.round_index
    )
