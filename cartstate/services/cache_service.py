# cartstate/services/cache_service.py
from typing import Callable, List

import redis
from pydantic import TypeAdapter, ValidationError
from redis.exceptions import RedisError

from cartstate.domain.schemas import CartItemOut
from cartstate.utils.retry import redis_retry
from cartstate.utils.settings import REDIS_URL
from cartstate.utils.logging import get_logger

logger = get_logger(__name__)

_items_adapter = TypeAdapter(List[CartItemOut])


class CartCache:
    """
    Read-through cache of materialized carts, one Redis key per identity.

    Reads degrade to a miss when Redis is down; ``forget`` does not, a
    failed invalidation would leave a stale cart behind.
    """

    def __init__(self, url: str | None = None, client: redis.Redis | None = None):
        self.redis = client or redis.Redis.from_url(
            url or REDIS_URL,
            decode_responses=True,
        )

    @redis_retry()
    def _read(self, key: str) -> str | None:
        return self.redis.get(key)

    @redis_retry()
    def _write(self, key: str, ttl_seconds: int, payload: str) -> None:
        self.redis.set(name=key, value=payload, ex=ttl_seconds)

    def get(self, key: str) -> List[CartItemOut] | None:
        try:
            raw = self._read(key)
        except RedisError as e:
            logger.warning(f"Cache read failed for {key}, falling back to store: {e}")
            return None

        if raw is None:
            return None

        try:
            return _items_adapter.validate_json(raw)
        except ValidationError as e:
            logger.warning(f"Discarding unreadable cache entry {key}: {e}")
            return None

    def remember(
        self,
        key: str,
        ttl_seconds: int,
        producer: Callable[[], List[CartItemOut]],
        cacheable: Callable[[List[CartItemOut]], bool] | None = None,
    ) -> List[CartItemOut]:
        cached = self.get(key)
        if cached is not None:
            return cached

        items = producer()
        if cacheable is not None and not cacheable(items):
            return items

        try:
            self._write(key, ttl_seconds, _items_adapter.dump_json(items).decode())
        except RedisError as e:
            logger.warning(f"Cache write failed for {key}: {e}")
        return items

    @redis_retry()
    def forget(self, key: str) -> None:
        self.redis.delete(key)
