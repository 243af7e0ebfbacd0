"""
Store-backed rolling-window rate limiter.

Counts records a user created inside the window instead of keeping
in-process counters, so the limit survives restarts and spans workers.
"""
import logging
from datetime import datetime, timedelta

from app.core.errors import RateLimitedError
from app.db.store import DocumentStore

logger = logging.getLogger(__name__)


async def check_creation_rate_limit(
    store: DocumentStore,
    collection: str,
    owner_field: str,
    owner_id: str,
    now: datetime,
    max_requests: int = 10,
    window_minutes: int = 60,
) -> int:
    """
    Check whether ``owner_id`` may create another record in ``collection``.

    Args:
        store: Document store to count against
        collection: Collection name (e.g. "shares")
        owner_field: Field holding the creator id
        owner_id: Creator to check
        now: Current time
        max_requests: Maximum creations allowed inside the window
        window_minutes: Rolling window length

    Returns:
        Number of creations already inside the window

    Raises:
        RateLimitedError: If the creator is at or over the limit
    """
    cutoff = now - timedelta(minutes=window_minutes)
    request_count = await store.count(
        collection,
        [(owner_field, "==", owner_id), ("created_at", ">", cutoff)],
    )

    if request_count >= max_requests:
        logger.warning(
            f"Rate limit exceeded: collection={collection}, owner={owner_id} "
            f"({request_count} creations in {window_minutes}m)"
        )
        raise RateLimitedError(
            f"Rate limit exceeded. Maximum {max_requests} new shares per {window_minutes} minutes."
        )

    logger.debug(f"Rate limit check passed: owner={owner_id} ({request_count + 1}/{max_requests})")
    return request_count
