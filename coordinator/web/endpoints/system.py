"""System health endpoint."""

import logging

from fastapi import APIRouter, Depends

from coordinator import __version__
from coordinator.services import CoordinatorServices
from coordinator.web.dependencies import get_services

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")


@router.get("/health")
async def health_check(services: CoordinatorServices = Depends(get_services)):
    """Health check endpoint to verify API is running."""
    return {
        "isAlive": True,
        "version": __version__,
        "store": services.config.store.backend,
        "ledger": services.config.ledger.backend,
        "active_discussions": len(services.orchestrator.active_discussions),
        "spectators": services.feed.connection_count(),
    }
