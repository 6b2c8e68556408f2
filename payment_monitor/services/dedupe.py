"""
Idempotency ledger for downstream deliveries.

Stripe retries a webhook until it receives a 2xx. The ledger remembers which
deliveries (table row, alert email) already succeeded for an event so a
retried event only re-runs the delivery that failed.
"""

from typing import Optional

import redis.asyncio as redis
from redis.exceptions import RedisError

from payment_monitor.config import Settings
from payment_monitor.utils.logging import get_logger

logger = get_logger(__name__, service="redis")


class NullDedupeStore:
    """Ledger used when no Redis is configured: nothing is ever seen."""
    
    async def has(self, kind: str, event_id: str) -> bool:
        return False
    
    async def mark(self, kind: str, event_id: str) -> None:
        return None
    
    async def close(self) -> None:
        return None


class RedisDedupeStore:
    """
    Redis-backed ledger of delivered (kind, event id) pairs.
    
    Keys expire after ``ttl_seconds``. Redis errors are logged and reported
    as "not seen" so that an unavailable ledger never blocks an alert.
    """
    
    KEY_TEMPLATE = "payment_monitor:{kind}:{event_id}"
    
    def __init__(
        self,
        redis_url: Optional[str] = None,
        ttl_seconds: int = 7 * 24 * 3600,
        client: Optional[redis.Redis] = None
    ):
        """
        Initialize the ledger.
        
        Args:
            redis_url: Redis connection URL, used when no client is given
            ttl_seconds: How long a delivery is remembered
            client: Existing async Redis client
        """
        if client is None:
            if not redis_url:
                raise ValueError("redis_url or client is required")
            client = redis.from_url(redis_url, decode_responses=True)
        self._client = client
        self._ttl_seconds = ttl_seconds
    
    def _key(self, kind: str, event_id: str) -> str:
        return self.KEY_TEMPLATE.format(kind=kind, event_id=event_id)
    
    async def has(self, kind: str, event_id: str) -> bool:
        try:
            return bool(await self._client.exists(self._key(kind, event_id)))
        except RedisError as e:
            logger.warning(f"Dedupe lookup failed for {kind} {event_id}: {e}")
            return False
    
    async def mark(self, kind: str, event_id: str) -> None:
        try:
            await self._client.set(self._key(kind, event_id), "1", ex=self._ttl_seconds)
        except RedisError as e:
            logger.warning(f"Dedupe mark failed for {kind} {event_id}: {e}")
    
    async def close(self) -> None:
        await self._client.aclose()


def build_dedupe_store(settings: Settings):
    """Pick the ledger implementation for the configured settings."""
    if settings.redis_url:
        logger.info("Delivery dedupe enabled (Redis)")
        return RedisDedupeStore(redis_url=settings.redis_url, ttl_seconds=settings.dedupe_ttl_seconds)
    return NullDedupeStore()
