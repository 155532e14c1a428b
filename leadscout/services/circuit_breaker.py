"""
Redis-backed circuit breakers for the upstream data services.

One breaker per upstream (census, fred, bls, scrapingbee, apify). After
`failure_threshold` consecutive failures the breaker opens and callers get
CircuitOpenError immediately, which every client treats as "upstream
unavailable" and answers with its fallback data. Once `reset_timeout`
seconds have passed the breaker goes half-open and lets one call through.

All Redis access fails open: if Redis itself is down the breaker reports
CLOSED and never blocks a request.
"""
import logging
import time
from functools import wraps

from redis.exceptions import RedisError

logger = logging.getLogger('services.circuit_breaker')

CLOSED = 'closed'
OPEN = 'open'
HALF_OPEN = 'half_open'

# name -> (failure_threshold, reset_timeout seconds)
BREAKER_SETTINGS = {
    'census': (5, 120),
    'fred': (3, 300),
    'bls': (3, 300),
    'scrapingbee': (3, 180),
    'apify': (3, 300),
}


class CircuitOpenError(Exception):
    """Raised instead of calling an upstream whose breaker is open."""

    def __init__(self, name, retry_after=None):
        self.name = name
        self.retry_after = retry_after
        super().__init__(f"circuit '{name}' is open")


class CircuitBreaker:
    """
    Failure counter + state machine persisted in Redis.

        cb = CircuitBreaker('census', redis_client)
        resp = cb.call(requests.get, url, params=params, timeout=25)
    """

    PREFIX = 'cb'

    def __init__(self, name, redis_client, failure_threshold=3, reset_timeout=300, clock=time.time):
        self.name = name
        self.redis = redis_client
        self.failure_threshold = failure_threshold
        self.reset_timeout = reset_timeout
        self._clock = clock

    def _key(self, suffix):
        return f'{self.PREFIX}:{self.name}:{suffix}'

    # ── State ─────────────────────────────────────────────────────────

    @property
    def state(self):
        try:
            current = self.redis.get(self._key('state')) or CLOSED
            if current == OPEN and self._seconds_since_failure() > self.reset_timeout:
                self.redis.set(self._key('state'), HALF_OPEN)
                return HALF_OPEN
            return current
        except RedisError:
            return CLOSED

    @property
    def failure_count(self):
        try:
            return int(self.redis.get(self._key('failures')) or 0)
        except RedisError:
            return 0

    def _seconds_since_failure(self):
        last = self.redis.get(self._key('last_failure'))
        if not last:
            return float('inf')
        return self._clock() - float(last)

    # ── Calls ─────────────────────────────────────────────────────────

    def call(self, func, *args, **kwargs):
        """Run func through the breaker; re-raises whatever func raises."""
        if self.state == OPEN:
            try:
                retry_after = max(0.0, self.reset_timeout - self._seconds_since_failure())
            except RedisError:
                retry_after = None
            raise CircuitOpenError(self.name, retry_after=retry_after)

        try:
            result = func(*args, **kwargs)
        except Exception as e:
            self._on_failure(e)
            raise
        self._on_success()
        return result

    def protect(self, func):
        """Decorator form of call()."""
        @wraps(func)
        def wrapper(*args, **kwargs):
            return self.call(func, *args, **kwargs)
        return wrapper

    def _on_success(self):
        try:
            pipe = self.redis.pipeline()
            pipe.set(self._key('state'), CLOSED)
            pipe.set(self._key('failures'), 0)
            pipe.hincrby(self._key('health'), 'success', 1)
            pipe.hset(self._key('health'), 'last_success', str(self._clock()))
            pipe.execute()
        except RedisError as e:
            logger.debug("Circuit '%s' could not record success: %s", self.name, e)

    def _on_failure(self, error):
        try:
            count = self.redis.incr(self._key('failures'))
            now = str(self._clock())
            self.redis.set(self._key('last_failure'), now)
            pipe = self.redis.pipeline()
            pipe.hincrby(self._key('health'), 'failure', 1)
            pipe.hset(self._key('health'), 'last_failure', now)
            pipe.hset(self._key('health'), 'last_error', str(error)[:200])
            pipe.execute()
        except RedisError as e:
            logger.debug("Circuit '%s' could not record failure: %s", self.name, e)
            return

        if count >= self.failure_threshold:
            try:
                self.redis.set(self._key('state'), OPEN)
            except RedisError:
                return
            logger.warning("Circuit '%s' OPEN after %d failures: %s", self.name, count, error)
        else:
            logger.info("Circuit '%s' failure %d/%d: %s",
                        self.name, count, self.failure_threshold, error)

    # ── Health / admin ────────────────────────────────────────────────

    def get_health(self):
        """Counters and timestamps for /api/health."""
        health = {
            'name': self.name,
            'state': 'unknown',
            'failure_count': 0,
            'failure_threshold': self.failure_threshold,
            'reset_timeout': self.reset_timeout,
            'total_success': 0,
            'total_failure': 0,
            'last_success': None,
            'last_failure': None,
            'last_error': '',
        }
        try:
            data = self.redis.hgetall(self._key('health')) or {}
        except RedisError:
            return health

        health.update({
            'state': self.state,
            'failure_count': self.failure_count,
            'total_success': int(data.get('success', 0)),
            'total_failure': int(data.get('failure', 0)),
            'last_success': float(data['last_success']) if data.get('last_success') else None,
            'last_failure': float(data['last_failure']) if data.get('last_failure') else None,
            'last_error': data.get('last_error', ''),
        })
        return health

    def reset(self):
        """Force the breaker back to CLOSED."""
        try:
            pipe = self.redis.pipeline()
            pipe.set(self._key('state'), CLOSED)
            pipe.set(self._key('failures'), 0)
            pipe.delete(self._key('last_failure'))
            pipe.execute()
        except RedisError as e:
            logger.error("Failed to reset circuit '%s': %s", self.name, e)
            return False
        logger.info("Circuit '%s' reset to CLOSED", self.name)
        return True


# ── Registry ─────────────────────────────────────────────────────────────────

_registry = {}


def get_breaker(name, redis_client=None):
    """Return the named breaker, creating it with BREAKER_SETTINGS on first use."""
    if name not in _registry:
        if redis_client is None:
            from leadscout.extensions import redis_client
        threshold, timeout = BREAKER_SETTINGS.get(name, (3, 300))
        _registry[name] = CircuitBreaker(name, redis_client, threshold, timeout)
    return _registry[name]


def get_all_breakers():
    return dict(_registry)


def init_breakers(redis_client):
    """Register a breaker for every upstream service."""
    for name, (threshold, timeout) in BREAKER_SETTINGS.items():
        _registry[name] = CircuitBreaker(name, redis_client, threshold, timeout)
    return dict(_registry)
