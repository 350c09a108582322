"""Agent id to endpoint registry."""

import logging

from coordinator.chat.models import Gladiator, Judge
from coordinator.config.settings import AgentGatewayConfig

logger = logging.getLogger(__name__)


class AgentRegistry:
    """Resolves agent ids to the agent server that hosts them."""

    def __init__(self, config: AgentGatewayConfig):
        self._default_endpoint = config.default_endpoint
        self._endpoints: dict[str, str] = dict(config.agents)

    def register_agent(self, agent_id: str, endpoint: str) -> None:
        self._endpoints[agent_id] = endpoint.rstrip("/")
        logger.info(f"Registered agent {agent_id} at {endpoint}")

    def endpoint_for(self, agent_id: str) -> str:
        """Return the agent's endpoint, the default endpoint, or an empty string."""
        endpoint = self._endpoints.get(agent_id) or self._default_endpoint
        if not endpoint:
            logger.warning(f"No endpoint registered for agent {agent_id}")
            return ""
        return endpoint.rstrip("/")

    def gladiator(self, agent_id: str, name: str, index: int, is_active: bool = True) -> Gladiator:
        return Gladiator(
            agent_id=agent_id,
            name=name,
            index=index,
            endpoint=self.endpoint_for(agent_id),
            is_active=is_active,
        )

    def judge(self, agent_id: str, name: str) -> Judge:
        return Judge(agent_id=agent_id, name=name, endpoint=self.endpoint_for(agent_id))
