"""
Shared client instances.

redis.from_url does not connect until the first command, so importing this
module is safe without a running Redis (tests, local dev).
"""
import logging

import redis

from leadscout.config import REDIS_URL

logger = logging.getLogger('leadscout.extensions')

# ── Redis ─────────────────────────────────────────────────────────────────────
redis_client = redis.from_url(REDIS_URL, decode_responses=True)
logger.debug("Redis client configured for %s", REDIS_URL.rsplit('@', 1)[-1])
