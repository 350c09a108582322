"""Service registry owned by the running application."""

import logging
from dataclasses import dataclass

from coordinator.agents.gateway import AgentGateway
from coordinator.agents.registry import AgentRegistry
from coordinator.chat.factory import create_message_store
from coordinator.chat.room import ChatRoomService
from coordinator.chat.store import MessageStore
from coordinator.config.settings import AppConfig
from coordinator.debate_engine.orchestrator import DiscussionOrchestrator
from coordinator.judges.verdict import VerdictProtocol
from coordinator.ledger import LedgerReader, create_ledger
from coordinator.lifecycle.monitor import LifecycleMonitor
from coordinator.web.feed import SpectatorFeed

logger = logging.getLogger(__name__)


@dataclass
class CoordinatorServices:
    """Every long-lived component of one coordinator instance."""

    config: AppConfig
    store: MessageStore
    registry: AgentRegistry
    gateway: AgentGateway
    chat: ChatRoomService
    orchestrator: DiscussionOrchestrator
    verdict: VerdictProtocol
    ledger: LedgerReader
    monitor: LifecycleMonitor
    feed: SpectatorFeed

    async def start(self) -> None:
        await self.store.connect()
        self.chat.subscribe(self.feed.on_message)
        self.monitor.start()
        logger.info("Coordinator services started")

    async def stop(self) -> None:
        await self.monitor.stop()
        self.chat.unsubscribe(self.feed.on_message)
        await self.gateway.close()
        await self.ledger.close()
        await self.store.close()
        logger.info("Coordinator services stopped")


def build_services(
    config: AppConfig,
    store: MessageStore | None = None,
    ledger: LedgerReader | None = None,
    gateway: AgentGateway | None = None,
) -> CoordinatorServices:
    """Wire the coordinator components from configuration.

    ``store``, ``ledger`` and ``gateway`` replace the configured backends when
    given.
    """
    store = store or create_message_store(config.store)
    ledger = ledger or create_ledger(config.ledger)
    gateway = gateway or AgentGateway(config.agents)
    registry = AgentRegistry(config.agents)
    chat = ChatRoomService(store)
    orchestrator = DiscussionOrchestrator(config.discussion, chat, gateway)
    verdict = VerdictProtocol(config.verdict, chat, gateway)
    monitor = LifecycleMonitor(
        config.monitor, ledger, chat, orchestrator, verdict, registry
    )
    return CoordinatorServices(
        config=config,
        store=store,
        registry=registry,
        gateway=gateway,
        chat=chat,
        orchestrator=orchestrator,
        verdict=verdict,
        ledger=ledger,
        monitor=monitor,
        feed=SpectatorFeed(),
    )
