"""Factory for message store backends."""

import logging

from coordinator.config.settings import StoreConfig
from .store import InMemoryMessageStore, MessageStore

logger = logging.getLogger(__name__)


def create_message_store(config: StoreConfig) -> MessageStore:
    """Build the message store selected in configuration."""
    if config.backend == "memory":
        logger.info("Using in-memory message store (messages are not persisted)")
        return InMemoryMessageStore()

    if config.backend == "sqlite":
        from .sqlite_store import SqliteMessageStore

        return SqliteMessageStore(config.sqlite_path)

    if config.backend == "redis":
        from .redis_store import RedisMessageStore

        return RedisMessageStore(config.redis_url)

    raise ValueError(f"Unknown store backend: {config.backend}")
