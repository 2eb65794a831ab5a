"""
Circuit breakers for collaborator functions, with Redis-backed state.

One breaker per collaborator (workflow-executor, sms-messaging,
calendar-integration). States:
  - CLOSED    → calls pass through
  - OPEN      → too many consecutive failures, calls raise CircuitOpenError
  - HALF_OPEN → reset_timeout elapsed since the last failure, one probe allowed

Redis being unreachable never blocks a call: every Redis error is treated as
CLOSED (fail-open). Health counters back GET /api/health.
"""
import logging
import time

logger = logging.getLogger('services.circuit_breaker')

CLOSED = 'closed'
OPEN = 'open'
HALF_OPEN = 'half_open'


class CircuitOpenError(Exception):
    """Raised when calling through an open circuit breaker."""
    def __init__(self, name, retry_after=None):
        self.name = name
        self.retry_after = retry_after
        super().__init__(f"Circuit breaker '{name}' is OPEN, function unavailable")


class CircuitBreaker:
    """
    Redis-backed circuit breaker.

        cb = CircuitBreaker('sms-messaging', redis_client, failure_threshold=3)
        response = cb.call(requests.post, url, json=body, timeout=15)
    """

    PREFIX = 'cb'

    def __init__(self, name, redis_client, failure_threshold=3, reset_timeout=300):
        self.name = name
        self.redis = redis_client
        self.failure_threshold = failure_threshold
        self.reset_timeout = reset_timeout

    def _key(self, suffix):
        return f'{self.PREFIX}:{self.name}:{suffix}'

    # ── State ─────────────────────────────────────────────────────────

    @property
    def state(self):
        try:
            current = self.redis.get(self._key('state'))
            if current is None:
                return CLOSED
            if current == OPEN and self._seconds_since_failure() > self.reset_timeout:
                self.redis.set(self._key('state'), HALF_OPEN)
                return HALF_OPEN
            return current
        except Exception:
            return CLOSED

    @property
    def failure_count(self):
        try:
            val = self.redis.get(self._key('failures'))
            return int(val) if val else 0
        except Exception:
            return 0

    def _seconds_since_failure(self):
        last = self.redis.get(self._key('last_failure'))
        if not last:
            return float('inf')
        return time.time() - float(last)

    # ── Calls ─────────────────────────────────────────────────────────

    def call(self, func, *args, **kwargs):
        """Execute func through the breaker; re-raises whatever func raises."""
        if self.state == OPEN:
            retry_after = None
            try:
                retry_after = max(0, self.reset_timeout - self._seconds_since_failure())
            except Exception:
                pass
            raise CircuitOpenError(self.name, retry_after=retry_after)

        try:
            result = func(*args, **kwargs)
        except Exception as e:
            self._on_failure(e)
            raise
        self._on_success()
        return result

    def _on_success(self):
        try:
            pipe = self.redis.pipeline()
            pipe.set(self._key('state'), CLOSED)
            pipe.set(self._key('failures'), 0)
            pipe.hincrby(self._key('health'), 'success', 1)
            pipe.hset(self._key('health'), 'last_success', str(time.time()))
            pipe.execute()
        except Exception:
            pass

    def _on_failure(self, error):
        try:
            count = self.redis.incr(self._key('failures'))
            self.redis.set(self._key('last_failure'), str(time.time()))
            if count >= self.failure_threshold:
                self.redis.set(self._key('state'), OPEN)
                logger.warning(
                    "Circuit '%s' OPENED after %d failures (threshold=%d): %s",
                    self.name, count, self.failure_threshold, error,
                )
            else:
                logger.info("Circuit '%s' failure %d/%d: %s",
                            self.name, count, self.failure_threshold, error)

            pipe = self.redis.pipeline()
            pipe.hincrby(self._key('health'), 'failure', 1)
            pipe.hset(self._key('health'), 'last_failure', str(time.time()))
            pipe.hset(self._key('health'), 'last_error', str(error)[:200])
            pipe.execute()
        except Exception:
            pass

    def reset(self):
        """Force the breaker back to CLOSED."""
        try:
            pipe = self.redis.pipeline()
            pipe.set(self._key('state'), CLOSED)
            pipe.set(self._key('failures'), 0)
            pipe.delete(self._key('last_failure'))
            pipe.execute()
            logger.info("Circuit '%s' manually reset to CLOSED", self.name)
        except Exception as e:
            logger.error("Failed to reset circuit '%s': %s", self.name, e)

    def get_health(self):
        """Health metrics dict for /api/health."""
        try:
            data = self.redis.hgetall(self._key('health')) or {}
            state = self.state
        except Exception:
            data, state = {}, 'unknown'
        return {
            'name': self.name,
            'state': state,
            'failure_count': self.failure_count,
            'failure_threshold': self.failure_threshold,
            'reset_timeout': self.reset_timeout,
            'total_success': int(data.get('success', 0)),
            'total_failure': int(data.get('failure', 0)),
            'last_success': float(data['last_success']) if data.get('last_success') else None,
            'last_failure': float(data['last_failure']) if data.get('last_failure') else None,
            'last_error': data.get('last_error', ''),
        }


# ── Registry ──────────────────────────────────────────────────────────────

_registry = {}


def get_breaker(name, redis_client=None, **kwargs):
    """Get or create the breaker for a collaborator function."""
    if name not in _registry:
        if redis_client is None:
            from disposition_router.extensions import redis_client as rc
            redis_client = rc
        if not kwargs:
            from disposition_router.config import FUNCTION_BREAKERS
            kwargs = FUNCTION_BREAKERS.get(name, {})
        _registry[name] = CircuitBreaker(name, redis_client, **kwargs)
    return _registry[name]


def get_all_breakers():
    return dict(_registry)


def init_breakers(redis_client):
    """Register one breaker per configured collaborator function."""
    from disposition_router.config import FUNCTION_BREAKERS
    breakers = {
        name: CircuitBreaker(name, redis_client, **settings)
        for name, settings in FUNCTION_BREAKERS.items()
    }
    _registry.update(breakers)
    return breakers
