# backend/barbershop/services/slots/invalidator.py
"""
Cache invalidation for shop rule snapshots.

Triggers:
✓ Closed dates, open Sundays (+ staff), open holidays created/deleted
✓ Free-day exceptions and staff time off created/deleted

Does NOT trigger:
✗ Appointment booked/cancelled (the ledger is never cached)
"""

import logging

from redis import Redis

from .redis_store import RulesRedisStore

logger = logging.getLogger(__name__)


def invalidate_shop_rules(redis: Redis | None, shop_id: int) -> int:
    """
    Drop the cached rules of a shop.

    Returns:
        Number of deleted cache keys (0 when no Redis is configured)
    """
    if redis is None:
        return 0
    deleted = RulesRedisStore(redis).delete(shop_id)
    logger.info(f"Rules cache invalidated: shop_id={shop_id}, deleted={deleted}")
    return deleted
