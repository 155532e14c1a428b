"""Shared test fixtures."""
import pytest
from unittest.mock import patch
from redis.exceptions import ConnectionError as RedisConnectionError

from leadscout.markets.models import CountyBusinessData, CountyDemographics


class FakeRedis:
    """Minimal in-memory Redis fake for circuit breaker tests."""

    def __init__(self):
        self.get_store = {}
        self.hash_store = {}

    def get(self, key):
        return self.get_store.get(key)

    def set(self, key, value):
        self.get_store[key] = value

    def incr(self, key):
        val = int(self.get_store.get(key, 0)) + 1
        self.get_store[key] = str(val)
        return val

    def delete(self, *keys):
        for k in keys:
            self.get_store.pop(k, None)
            self.hash_store.pop(k, None)

    def hset(self, key, field, value):
        self.hash_store.setdefault(key, {})[field] = value

    def hincrby(self, key, field, amount):
        h = self.hash_store.setdefault(key, {})
        h[field] = str(int(h.get(field, 0)) + amount)

    def hgetall(self, key):
        return dict(self.hash_store.get(key, {}))

    def pipeline(self):
        return FakePipeline(self)


class FakePipeline:
    """Fake Redis pipeline that executes immediately."""

    def __init__(self, redis):
        self._redis = redis
        self._ops = []

    def set(self, key, value):
        self._ops.append(('set', key, value))
        return self

    def delete(self, *keys):
        self._ops.append(('delete', keys))
        return self

    def hincrby(self, key, field, amount):
        self._ops.append(('hincrby', key, field, amount))
        return self

    def hset(self, key, field, value):
        self._ops.append(('hset', key, field, value))
        return self

    def execute(self):
        for op in self._ops:
            if op[0] == 'set':
                self._redis.set(op[1], op[2])
            elif op[0] == 'delete':
                self._redis.delete(*op[1])
            elif op[0] == 'hincrby':
                self._redis.hincrby(op[1], op[2], op[3])
            elif op[0] == 'hset':
                self._redis.hset(op[1], op[2], op[3])
        self._ops = []


class DownRedis:
    """Every command fails as if the server were unreachable."""

    def __getattr__(self, name):
        def _fail(*args, **kwargs):
            raise RedisConnectionError('Connection refused')
        return _fail


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start=1_700_000_000.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


class PassthroughBreaker:
    """Breaker stand-in that always calls through."""

    def __init__(self):
        self.calls = 0

    def call(self, func, *args, **kwargs):
        self.calls += 1
        return func(*args, **kwargs)


@pytest.fixture
def fake_redis():
    """In-memory Redis fake with dict-backed storage."""
    return FakeRedis()


@pytest.fixture
def down_redis():
    return DownRedis()


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def passthrough_breaker():
    return PassthroughBreaker()


@pytest.fixture
def app(fake_redis):
    """Flask test app with circuit breakers backed by the Redis fake."""
    from leadscout import create_app
    from leadscout.services.circuit_breaker import _registry

    with patch('leadscout.extensions.redis_client', fake_redis):
        app = create_app()
    app.config['TESTING'] = True
    yield app
    _registry.clear()


@pytest.fixture
def client(app):
    """Flask test client."""
    with app.test_client() as c:
        yield c


@pytest.fixture
def county_business():
    """Factory fixture for CountyBusinessData rows."""
    def _make(**overrides):
        defaults = dict(
            fips_code='12086',
            county_name='Miami-Dade',
            state='12',
            total_establishments=1000,
            total_employees=8000,
            annual_payroll=400_000,
            avg_business_size=8,
        )
        defaults.update(overrides)
        return CountyBusinessData(**defaults)
    return _make


@pytest.fixture
def county_demographics():
    def _make(**overrides):
        defaults = dict(fips_code='12086', population=100_000, median_age=42.0, median_income=60000)
        defaults.update(overrides)
        return CountyDemographics(**defaults)
    return _make
