"""Redis-backed sliding window rate limiter shared by every service replica."""

from __future__ import annotations

import time
import uuid

from redis import Redis


class RedisSlidingWindowRateLimiter:
    """Sliding window limiter storing hit timestamps in a Redis sorted set per key.

    Each hit is added optimistically inside a MULTI block and withdrawn again
    when it pushed the window over the limit.
    """

    def __init__(
        self,
        client: Redis,
        *,
        max_requests: int,
        window_seconds: int,
        key_prefix: str = "throttle",
    ) -> None:
        self._client = client
        self._max_requests = max_requests
        self._window_ms = window_seconds * 1000
        self._key_prefix = key_prefix

    def allow(self, key: str) -> bool:
        """Return ``True`` while ``key`` stays within the shared limit."""
        now_ms = int(time.time() * 1000)
        redis_key = self._redis_key(key)
        member = f"{now_ms}:{uuid.uuid4().hex}"

        pipe = self._client.pipeline(transaction=True)
        pipe.zremrangebyscore(redis_key, 0, now_ms - self._window_ms)
        pipe.zadd(redis_key, {member: now_ms})
        pipe.zcard(redis_key)
        pipe.pexpire(redis_key, self._window_ms)
        _, _, count, _ = pipe.execute()

        if int(count) > self._max_requests:
            self._client.zrem(redis_key, member)
            return False
        return True

    def reset(self, key: str) -> None:
        self._client.delete(self._redis_key(key))

    def _redis_key(self, key: str) -> str:
        return f"{self._key_prefix}:{key}"
