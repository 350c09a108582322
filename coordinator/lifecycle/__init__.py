"""Round lifecycle: events, polling and transition leases."""

from .lease import TransitionLease
from .models import RoundEvent, RoundEventType, VerdictRecord
from .monitor import LifecycleMonitor, PollSummary

__all__ = [
    "LifecycleMonitor",
    "PollSummary",
    "RoundEvent",
    "RoundEventType",
    "TransitionLease",
    "VerdictRecord",
]
