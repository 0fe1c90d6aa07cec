"""
Shared fixtures: an in-memory stand-in for the handful of Redis hash
commands the rating store issues, and an ASGI client wired to it.
"""

import asyncio

import pytest
from httpx import ASGITransport, AsyncClient
from redis.exceptions import WatchError

from rating_service.database import get_service, get_store
from rating_service.main import app
from rating_service.service import MatchService
from rating_service.store import RatingStore


def _encode(value):
    # redis-py sends floats as repr()
    return repr(value) if isinstance(value, float) else str(value)


class FakeRedis:
    """Hash commands over plain dicts, decoded like ``decode_responses=True``."""

    def __init__(self, yield_on_read=False):
        self.hashes = {}
        self.version = 0
        self.deleted = []
        self.yield_on_read = yield_on_read

    def touch(self, key, field, value):
        """Write synchronously, as another client would."""
        self.hashes.setdefault(key, {})[field] = _encode(value)
        self.version += 1

    async def hgetall(self, key):
        snapshot = dict(self.hashes.get(key, {}))
        if self.yield_on_read:
            await asyncio.sleep(0)
        return snapshot

    async def hset(self, key, field=None, value=None, mapping=None):
        items = dict(mapping or {})
        if field is not None:
            items[field] = value
        table = self.hashes.setdefault(key, {})
        for f, v in items.items():
            table[f] = _encode(v)
        self.version += 1
        return len(items)

    async def hdel(self, key, *fields):
        table = self.hashes.get(key, {})
        removed = 0
        for f in fields:
            if f in table:
                del table[f]
                removed += 1
            self.deleted.append(f)
        self.version += 1
        return removed

    def pipeline(self, transaction=True):
        return FakePipeline(self)


class FakePipeline:
    def __init__(self, redis):
        self.redis = redis
        self.watched_version = None
        self.queued = []

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        self.queued = []
        return False

    async def watch(self, key):
        self.watched_version = self.redis.version

    async def hgetall(self, key):
        return await self.redis.hgetall(key)

    def multi(self):
        self.queued = []

    def hset(self, key, field=None, value=None, mapping=None):
        self.queued.append((key, field, value, mapping))
        return self

    async def execute(self):
        if self.watched_version is not None and self.watched_version != self.redis.version:
            raise WatchError("Watched variable changed.")
        results = []
        for key, field, value, mapping in self.queued:
            results.append(await self.redis.hset(key, field, value, mapping=mapping))
        return results


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
def yielding_redis():
    """A FakeRedis whose reads hand control back to the event loop, so concurrent matches interleave."""
    return FakeRedis(yield_on_read=True)


@pytest.fixture
def store(fake_redis):
    return RatingStore(fake_redis, key="elo")


@pytest.fixture
def service(store):
    return MatchService(store)


@pytest.fixture
def client_factory(fake_redis):
    """Build an AsyncClient against the app with the store swapped for ``fake_redis``."""

    def make(consistency=None):
        app.dependency_overrides[get_store] = lambda: RatingStore(fake_redis, key="elo")
        if consistency is not None:
            app.dependency_overrides[get_service] = lambda: MatchService(
                RatingStore(fake_redis, key="elo"), consistency=consistency
            )
        transport = ASGITransport(app=app)
        return AsyncClient(transport=transport, base_url="http://test")

    yield make
    app.dependency_overrides.clear()
