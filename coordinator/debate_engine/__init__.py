"""Discussion orchestration."""

from .orchestrator import (
    DiscussionOrchestrator,
    DiscussionResult,
    DiscussionState,
    TurnCursor,
)

__all__ = [
    "DiscussionOrchestrator",
    "DiscussionResult",
    "DiscussionState",
    "TurnCursor",
]
