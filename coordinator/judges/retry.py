"""Bounded retry for judge replies that must match a fixed format."""

import asyncio
import logging
from typing import Awaitable, Callable, TypeVar

from coordinator.exceptions import VerdictFormatUnparsable

logger = logging.getLogger(__name__)

T = TypeVar("T")


def backoff_delay(attempt: int, base_delay: float, max_delay: float) -> float:
    """Exponential delay before retry number ``attempt`` (1-based), capped."""
    return min(base_delay * (2 ** (attempt - 1)), max_delay)


async def retry_until_parsed(
    attempt: Callable[[], Awaitable[str]],
    parse: Callable[[str], T | None],
    *,
    max_attempts: int,
    base_delay: float = 1.0,
    max_delay: float = 30.0,
) -> tuple[T, int]:
    """Call ``attempt`` until ``parse`` accepts its reply.

    ``parse`` returns None for a reply that does not match. Exceptions raised by
    ``attempt`` (transport failures) are not retried and propagate unchanged.

    Returns the parsed value and the number of attempts used. Raises
    VerdictFormatUnparsable once ``max_attempts`` replies have been rejected.
    """
    last_reply = ""
    for attempt_number in range(1, max_attempts + 1):
        last_reply = await attempt()
        parsed = parse(last_reply)
        if parsed is not None:
            return parsed, attempt_number

        logger.warning(
            f"Reply did not match expected format (attempt {attempt_number}/{max_attempts}): "
            f"{last_reply[:120]!r}"
        )
        if attempt_number < max_attempts:
            delay = backoff_delay(attempt_number, base_delay, max_delay)
            logger.debug(f"Retrying in {delay:.1f}s")
            await asyncio.sleep(delay)

    raise VerdictFormatUnparsable(max_attempts, last_reply)
