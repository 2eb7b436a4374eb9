# backend/barbershop/services/slots/redis_store.py
"""
Redis storage for shop rule snapshots.

Key format: rules:shop:{shop_id}
Value: ShopRules JSON, expires after rules_cache_ttl_seconds.

Only configuration is cached. The appointment ledger is always read
from the database.
"""

import logging

from redis import Redis

from .config import BookingConfig, get_booking_config
from .rules import ShopRules

logger = logging.getLogger(__name__)


class RulesRedisStore:
    """Redis storage wrapper for ShopRules snapshots."""

    KEY_PREFIX = "rules:shop"

    def __init__(self, redis: Redis, config: BookingConfig | None = None):
        self.redis = redis
        self.config = config or get_booking_config()

    def _key(self, shop_id: int) -> str:
        return f"{self.KEY_PREFIX}:{shop_id}"

    # ── Write ────────────────────────────────────────────────────────────

    def store(self, rules: ShopRules) -> None:
        self.redis.setex(
            self._key(rules.shop_id),
            self.config.rules_cache_ttl_seconds,
            rules.to_json(),
        )

    # ── Read ─────────────────────────────────────────────────────────────

    def get(self, shop_id: int) -> ShopRules | None:
        """Cached snapshot, or None on cache miss."""
        raw = self.redis.get(self._key(shop_id))
        if raw is None:
            return None
        try:
            return ShopRules.from_json(raw)
        except (ValueError, KeyError, TypeError):
            logger.warning(f"Dropping unreadable rules cache for shop {shop_id}")
            self.redis.delete(self._key(shop_id))
            return None

    # ── Delete ───────────────────────────────────────────────────────────

    def delete(self, shop_id: int) -> int:
        """Delete the cached snapshot. Returns number of deleted keys."""
        return self.redis.delete(self._key(shop_id))
