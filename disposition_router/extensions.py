"""
Shared client instances: Redis.

Importing this module never connects: redis-py opens the connection on the
first command, so tests and migrations can import freely.
"""
import redis

from disposition_router.config import REDIS_URL

# ── Redis ─────────────────────────────────────────────────────────────────────
# Breaker state and health hashes are plain strings.
redis_client = redis.from_url(REDIS_URL, decode_responses=True)

# RQ pickles job payloads, so its connection must return raw bytes.
queue_connection = redis.from_url(REDIS_URL)
