"""
Tests for CartCache
"""
from datetime import datetime, timezone
from decimal import Decimal

import pytest
from redis.exceptions import RedisError

from cartstate.domain.schemas import CartItemOut, Purchasable


def _item(quantity=1):
    now = datetime(2026, 1, 1, tzinfo=timezone.utc)
    return CartItemOut(
        id="item-1",
        owner_id="guest",
        cookie_id="guest",
        purchasable_type="product",
        purchasable_key="1",
        quantity=quantity,
        created_at=now,
        updated_at=now,
        purchasable=Purchasable(type="product", key="1", name="Keyboard", price=Decimal("199.99")),
    )


class TestRemember:
    def test_miss_calls_producer_and_stores(self, cache, fake_redis):
        calls = []

        def producer():
            calls.append(1)
            return [_item(2)]

        items = cache.remember("k", 120, producer)

        assert calls == [1]
        assert items[0].quantity == 2
        assert fake_redis.ttls["k"] == 120

    def test_hit_skips_producer(self, cache):
        cache.remember("k", 60, lambda: [_item(3)])

        def producer():
            raise AssertionError("producer must not run on a hit")

        items = cache.remember("k", 60, producer)
        assert items[0].quantity == 3
        assert items[0].purchasable.price == Decimal("199.99")

    def test_empty_cart_is_cached(self, cache):
        cache.remember("k", 60, lambda: [])
        assert cache.get("k") == []

    def test_write_failure_still_returns_fresh_items(self, cache, fake_redis):
        fake_redis.fail_writes = True
        items = cache.remember("k", 60, lambda: [_item()])

        assert len(items) == 1
        assert "k" not in fake_redis.store


class TestGet:
    def test_missing_key(self, cache):
        assert cache.get("nothing") is None

    def test_unreadable_entry_is_a_miss(self, cache, fake_redis):
        fake_redis.store["k"] = "{not json"
        assert cache.get("k") is None

    def test_read_failure_is_a_miss(self, cache, fake_redis):
        fake_redis.fail_reads = True
        assert cache.get("k") is None
        assert fake_redis.reads == 3


class TestForget:
    def test_removes_entry(self, cache, fake_redis):
        cache.remember("k", 60, lambda: [_item()])
        cache.forget("k")
        assert "k" not in fake_redis.store

    def test_failure_is_raised(self, cache, fake_redis):
        fake_redis.fail_deletes = True
        with pytest.raises(RedisError):
            cache.forget("k")
