"""Agent liveness endpoint."""

from fastapi import APIRouter, Depends

from coordinator.services import CoordinatorServices
from coordinator.web.dependencies import get_services
from coordinator.web.responses import AgentHealthResponse

router = APIRouter(prefix="/api")


@router.get("/agents/{agent_id}/health", response_model=AgentHealthResponse)
async def get_agent_health(
    agent_id: str, services: CoordinatorServices = Depends(get_services)
):
    # Probed as a judge: only the endpoint matters for liveness.
    participant = services.registry.judge(agent_id, agent_id)
    healthy = await services.gateway.is_healthy(participant)
    return AgentHealthResponse(
        agent_id=agent_id, endpoint=participant.endpoint, healthy=healthy
    )
