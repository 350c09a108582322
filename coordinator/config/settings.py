"""Configuration settings and data models."""

import json
import os
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field, field_validator


class AgentGatewayConfig(BaseModel):
    """Configuration for reaching remote agent servers."""

    timeout: float = Field(default=60.0, description="Request timeout in seconds")
    message_path: str = Field(
        default="/{agent_id}/message",
        description="Path template for message delivery, relative to the agent endpoint",
    )
    health_path: str = Field(default="/hello", description="Liveness probe path")
    default_endpoint: str | None = Field(
        default=None,
        description="Endpoint used for agents without an explicit registration",
    )
    agents: dict[str, str] = Field(
        default_factory=dict, description="Agent id to endpoint URL"
    )

    @field_validator("message_path")
    @classmethod
    def validate_message_path(cls, v: str) -> str:
        if not v.startswith("/"):
            raise ValueError("message_path must start with '/'")
        return v


class StoreConfig(BaseModel):
    """Message store backend configuration."""

    backend: Literal["memory", "sqlite", "redis"] = Field(
        default="sqlite", description="Persistence backend for chat rooms"
    )
    sqlite_path: str = Field(
        default="coordinator.db", description="SQLite database file"
    )
    redis_url: str = Field(
        default="redis://localhost:6379",
        description="Redis connection URL (REDIS_URL env var takes precedence)",
    )


class DiscussionConfig(BaseModel):
    """Turn orchestration settings."""

    turn_budget: int = Field(default=5, description="Relay exchanges per discussion")
    turn_delay: float = Field(
        default=5.0, description="Seconds to wait between turns"
    )
    opening_points: int = Field(
        default=3, description="Supporting points requested from the opening speaker"
    )
    keepalive_every_cycles: int = Field(
        default=0,
        description="Inject a keep-alive nudge every N full cycles (0 disables it)",
    )

    @field_validator("turn_budget")
    @classmethod
    def validate_turn_budget(cls, v: int) -> int:
        if v < 1:
            raise ValueError("turn_budget must be at least 1")
        return v

    @field_validator("turn_delay", "keepalive_every_cycles", "opening_points")
    @classmethod
    def validate_non_negative(cls, v):
        if v < 0:
            raise ValueError("value must not be negative")
        return v


class VerdictConfig(BaseModel):
    """Judge verdict extraction settings."""

    max_attempts: int = Field(
        default=5, description="Maximum winner-format requests before giving up"
    )
    retry_base_delay: float = Field(
        default=1.0, description="Initial backoff between format requests"
    )
    retry_max_delay: float = Field(default=30.0, description="Backoff ceiling")

    @field_validator("max_attempts")
    @classmethod
    def validate_max_attempts(cls, v: int) -> int:
        if v < 1:
            raise ValueError("max_attempts must be at least 1")
        return v


class MonitorConfig(BaseModel):
    """Lifecycle monitor settings."""

    poll_interval: float = Field(
        default=60.0, description="Seconds between round polling cycles"
    )
    polling_enabled: bool = Field(default=True, description="Run the poll loop")
    lease_ttl: float = Field(
        default=3600.0,
        gt=0,
        description="Seconds before a transition lease held by a dead process can be taken over",
    )


class LedgerConfig(BaseModel):
    """Ledger access configuration."""

    backend: Literal["memory", "http"] = Field(
        default="memory", description="Ledger reader implementation"
    )
    base_url: str | None = Field(
        default=None,
        description="Ledger gateway URL (LEDGER_URL env var takes precedence)",
    )
    fixture_path: str | None = Field(
        default=None, description="JSON fixture loaded by the in-memory ledger"
    )
    timeout: float = Field(default=15.0, description="Ledger request timeout")


class SystemConfig(BaseModel):
    """System-wide configuration."""

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(default="INFO")
    host: str = Field(default="0.0.0.0", description="Bind address")
    port: int = Field(default=3003, description="HTTP port (PORT env var takes precedence)")
    allowed_origins: list[str] = Field(
        default_factory=list, description="CORS origins; empty means localhost only"
    )


class AppConfig(BaseModel):
    """Complete application configuration."""

    agents: AgentGatewayConfig = Field(default_factory=AgentGatewayConfig)
    store: StoreConfig = Field(default_factory=StoreConfig)
    discussion: DiscussionConfig = Field(default_factory=DiscussionConfig)
    verdict: VerdictConfig = Field(default_factory=VerdictConfig)
    monitor: MonitorConfig = Field(default_factory=MonitorConfig)
    ledger: LedgerConfig = Field(default_factory=LedgerConfig)
    system: SystemConfig = Field(default_factory=SystemConfig)

    @classmethod
    def load_from_file(cls, config_path: Path) -> "AppConfig":
        """Load configuration from JSON file."""
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")

        with open(config_path, "r", encoding="utf-8") as f:
            data = json.load(f)

        if not isinstance(data, dict):
            raise ValueError(f"Config file must contain a JSON object: {config_path}")

        return cls(**data).with_env_overrides()

    def with_env_overrides(self) -> "AppConfig":
        """Apply deployment environment variables on top of file settings."""
        redis_url = os.environ.get("REDIS_URL")
        if redis_url:
            self.store.redis_url = redis_url

        ledger_url = os.environ.get("LEDGER_URL")
        if ledger_url:
            self.ledger.base_url = ledger_url

        port = os.environ.get("PORT")
        if port:
            self.system.port = int(port)

        origins = os.environ.get("ALLOWED_ORIGINS")
        if origins:
            self.system.allowed_origins = [o.strip() for o in origins.split(",")]

        return self

    def save_to_file(self, config_path: Path) -> None:
        """Save configuration to YAML file."""
        config_path.parent.mkdir(parents=True, exist_ok=True)

        with open(config_path, "w", encoding="utf-8") as f:
            yaml.dump(
                self.model_dump(exclude_unset=True),
                f,
                default_flow_style=False,
                indent=2,
            )


def get_default_config(config_path: Path | None = None) -> AppConfig:
    """Load coordinator_config.json, creating it from the template if needed."""
    config_path = config_path or Path(
        os.environ.get("COORDINATOR_CONFIG", "coordinator_config.json")
    )
    if not config_path.exists():
        template_config = get_template_config()
        with open(config_path, "w", encoding="utf-8") as f:
            json.dump(template_config.model_dump(), f, indent=2)
    return AppConfig.load_from_file(config_path)


def get_template_config() -> AppConfig:
    """Get template configuration for config file generation."""
    return AppConfig(
        agents=AgentGatewayConfig(
            timeout=60.0,
            default_endpoint="http://localhost:3000",
            agents={},
        ),
        store=StoreConfig(backend="sqlite", sqlite_path="coordinator.db"),
        discussion=DiscussionConfig(
            turn_budget=5,
            turn_delay=5.0,
            opening_points=3,
            keepalive_every_cycles=0,
        ),
        verdict=VerdictConfig(max_attempts=5, retry_base_delay=1.0, retry_max_delay=30.0),
        monitor=MonitorConfig(poll_interval=60.0, polling_enabled=True),
        ledger=LedgerConfig(backend="memory", fixture_path="ledger_fixture.json"),
        system=SystemConfig(log_level="INFO", port=3003),
    )
