"""Judge verdict protocol."""

from .retry import backoff_delay, retry_until_parsed
from .verdict import Verdict, VerdictProtocol, format_transcript, parse_winner

__all__ = [
    "Verdict",
    "VerdictProtocol",
    "backoff_delay",
    "format_transcript",
    "parse_winner",
    "retry_until_parsed",
]
