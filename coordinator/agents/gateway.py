"""HTTP gateway to remote agent servers."""

import logging

import httpx

from coordinator.chat.models import Participant
from coordinator.config.settings import AgentGatewayConfig
from coordinator.exceptions import DeliveryFailed, ReplyShapeInvalid
from .schemas import ReplyValidationError, extract_reply_text

logger = logging.getLogger(__name__)


class AgentGateway:
    """Relays chat messages to agent servers and probes their liveness."""

    def __init__(self, config: AgentGatewayConfig, client: httpx.AsyncClient | None = None):
        self.config = config
        self._client = client

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.config.timeout)
        return self._client

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def send(
        self,
        participant: Participant,
        room_id: str,
        sender_id: str,
        text: str,
        sender_name: str | None = None,
    ) -> str:
        """Deliver ``text`` to the participant's agent and return its first reply."""
        if not participant.endpoint:
            raise DeliveryFailed(participant.agent_id, "no endpoint registered")

        url = participant.endpoint.rstrip("/") + self.config.message_path.format(
            agent_id=participant.agent_id
        )
        form = {"roomId": room_id, "userId": sender_id, "text": text}
        if sender_name:
            form["userName"] = sender_name

        try:
            response = await self.client.post(url, data=form)
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPStatusError as e:
            logger.error(
                f"Agent {participant.agent_id} answered {e.response.status_code} at {url}"
            )
            raise DeliveryFailed(participant.agent_id, e) from e
        except httpx.HTTPError as e:
            logger.error(f"Error communicating with agent {participant.agent_id}: {e}")
            raise DeliveryFailed(participant.agent_id, e) from e
        except ValueError as e:
            raise ReplyShapeInvalid(participant.agent_id, f"reply is not JSON: {e}") from e

        try:
            reply = extract_reply_text(payload)
        except ReplyValidationError as e:
            logger.debug(f"Rejected reply from {participant.agent_id}: {payload!r}")
            raise ReplyShapeInvalid(participant.agent_id, e) from e

        logger.debug(f"Agent {participant.agent_id} replied with {len(reply)} chars")
        return reply

    async def is_healthy(self, participant: Participant) -> bool:
        """Fast liveness probe; any failure counts as unhealthy."""
        if not participant.endpoint:
            return False
        try:
            response = await self.client.get(
                participant.endpoint.rstrip("/") + self.config.health_path
            )
            return response.is_success
        except Exception as e:
            logger.debug(f"Health check failed for agent {participant.agent_id}: {e}")
            return False
