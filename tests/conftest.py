"""Pytest configuration and fixtures"""
import os

# must be set before cartstate reads its settings
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["CELERY_BROKER_URL"] = "memory://"
os.environ["CELERY_RESULT_BACKEND"] = "cache+memory://"
os.environ.setdefault("CART_LOG_ENABLED", "true")

from decimal import Decimal

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from cartstate.data.database import Base, SessionLocal, engine
from cartstate.data.models import ProductModel
from cartstate.services.cache_service import CartCache
from cartstate.services.cart_service import CartService
from cartstate.services.identity_service import StaticIdentityResolver
from cartstate.services.purchasable_registry import PurchasableRegistry, local_product_resolver


class FakeRedis:
    """Dict-backed stand-in for the few redis commands the cache uses."""

    def __init__(self):
        self.store = {}
        self.ttls = {}
        self.fail_reads = False
        self.fail_writes = False
        self.fail_deletes = False
        self.reads = 0

    def get(self, name):
        self.reads += 1
        if self.fail_reads:
            raise RedisConnectionError("redis is down")
        return self.store.get(name)

    def set(self, name, value, ex=None):
        if self.fail_writes:
            raise RedisConnectionError("redis is down")
        self.store[name] = value
        self.ttls[name] = ex
        return True

    def delete(self, *names):
        if self.fail_deletes:
            raise RedisConnectionError("redis is down")
        removed = 0
        for name in names:
            if self.store.pop(name, None) is not None:
                removed += 1
            self.ttls.pop(name, None)
        return removed


class RecordingNotifier:
    def __init__(self):
        self.events = []

    def publish(self, event, payload):
        self.events.append((event, payload))

    def names(self):
        return [e for e, _ in self.events]


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    session.add_all([
        ProductModel(id=1, name="Keyboard", price=Decimal("199.99")),
        ProductModel(id=2, name="Mouse", price=Decimal("49.50")),
        ProductModel(id=3, name="Monitor", price=Decimal("899.00")),
    ])
    session.commit()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
def cache(fake_redis):
    return CartCache(client=fake_redis)


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def registry(db):
    registry = PurchasableRegistry()
    registry.register("product", local_product_resolver(db))
    return registry


@pytest.fixture
def guest():
    return StaticIdentityResolver(cookie_id="guest-cookie-1")


@pytest.fixture
def make_service(db, registry, notifier, cache, guest):
    """Builds a fresh CartService, i.e. a new request for the given identity."""

    def factory(identity=None, **kwargs):
        kwargs.setdefault("cache", cache)
        kwargs.setdefault("cache_enabled", True)
        return CartService(
            db=db,
            identity=identity or guest,
            registry=registry,
            notifier=notifier,
            **kwargs,
        )

    return factory
