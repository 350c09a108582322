"""Data models for chat rooms and their participants."""

import json
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any

SYSTEM_SENDER = "system"


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass(frozen=True)
class Message:
    """A single chat room message. Messages are never mutated once appended."""

    sender: str
    content: str
    timestamp: str = field(default_factory=utc_timestamp)

    @property
    def is_system(self) -> bool:
        return self.sender == SYSTEM_SENDER

    def to_dict(self) -> dict[str, str]:
        return asdict(self)

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Message":
        return cls(
            sender=str(data["sender"]),
            content=str(data["content"]),
            timestamp=str(data.get("timestamp") or utc_timestamp()),
        )

    @classmethod
    def from_json(cls, raw: str | bytes) -> "Message":
        return cls.from_dict(json.loads(raw))

    @classmethod
    def system(cls, content: str) -> "Message":
        return cls(sender=SYSTEM_SENDER, content=content)


@dataclass(frozen=True)
class Gladiator:
    """A debating agent with an ordinal speaking position."""

    agent_id: str
    name: str
    index: int
    endpoint: str = ""
    is_active: bool = True


@dataclass(frozen=True)
class Judge:
    """The arbiter agent that reviews a transcript and names a winner."""

    agent_id: str
    name: str
    endpoint: str = ""


type Participant = Gladiator | Judge
