"""Pytest configuration and shared fixtures.

Fixtures here build coordinator components wired to in-memory backends.
Scripted test doubles live in fakes.py.
"""

import pytest

from coordinator.chat.models import Gladiator, Judge
from coordinator.chat.room import ChatRoomService
from coordinator.chat.store import InMemoryMessageStore
from coordinator.config.settings import (
    AgentGatewayConfig,
    AppConfig,
    DiscussionConfig,
    LedgerConfig,
    MonitorConfig,
    StoreConfig,
    VerdictConfig,
)


# =============================================================================
# SHARED FIXTURES - Available to all test modules
# =============================================================================


@pytest.fixture
def store() -> InMemoryMessageStore:
    return InMemoryMessageStore()


@pytest.fixture
def chat(store: InMemoryMessageStore) -> ChatRoomService:
    return ChatRoomService(store)


@pytest.fixture
def discussion_config() -> DiscussionConfig:
    """Five-turn discussion without waiting between turns."""
    return DiscussionConfig(turn_budget=5, turn_delay=0.0)


@pytest.fixture
def verdict_config() -> VerdictConfig:
    return VerdictConfig(max_attempts=3, retry_base_delay=1.0, retry_max_delay=30.0)


@pytest.fixture
def socrates() -> Gladiator:
    return Gladiator(agent_id="socrates", name="Socrates", index=0, endpoint="http://agents")


@pytest.fixture
def plato() -> Gladiator:
    return Gladiator(agent_id="plato", name="Plato", index=1, endpoint="http://agents")


@pytest.fixture
def judge() -> Judge:
    return Judge(agent_id="athena", name="Athena", endpoint="http://agents")


@pytest.fixture
def sample_debate_topic() -> str:
    """Provide a standard debate topic for testing."""
    return "Should artificial intelligence be regulated by governments?"


@pytest.fixture
def app_config(tmp_path) -> AppConfig:
    """Configuration with in-memory backends and no background polling."""
    return AppConfig(
        agents=AgentGatewayConfig(default_endpoint="http://agents"),
        store=StoreConfig(backend="memory", sqlite_path=str(tmp_path / "test.db")),
        discussion=DiscussionConfig(turn_budget=5, turn_delay=0.0),
        verdict=VerdictConfig(max_attempts=3, retry_base_delay=0.0),
        monitor=MonitorConfig(polling_enabled=False),
        ledger=LedgerConfig(backend="memory"),
    )


# =============================================================================
# PYTEST CONFIGURATION HOOKS
# =============================================================================


def pytest_configure(config: pytest.Config) -> None:
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )
