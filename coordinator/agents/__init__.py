"""Remote agent access."""

from .gateway import AgentGateway
from .registry import AgentRegistry
from .schemas import extract_reply_text

__all__ = ["AgentGateway", "AgentRegistry", "extract_reply_text"]
