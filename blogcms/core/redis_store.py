"""Redis-backed AttemptStore so every worker sees the same login lockouts.

Each identifier is one JSON string under ``{prefix}{key}``, written with a
TTL of max(window, block) so Redis expires records the throttle would treat
as lapsed. Updates run inside WATCH/MULTI, so concurrent failures for one
identifier from different workers do not overwrite each other.

Redis errors fail open: the failure is logged and the login proceeds as if
no record existed, so an unavailable Redis never locks every user out.
"""

import json
import logging
import math
from collections.abc import Callable

import redis
from redis.exceptions import RedisError, WatchError

from blogcms.core.throttle import LoginAttemptRecord

logger = logging.getLogger(__name__)

DEFAULT_PREFIX = "blogcms:login_attempts:"
MAX_TRANSACTION_RETRIES = 5


def _dump(record: LoginAttemptRecord) -> str:
    return json.dumps(
        {"count": record.count, "first": record.first, "blocked_until": record.blocked_until}
    )


def _load(raw: str | bytes | None) -> LoginAttemptRecord | None:
    if raw is None:
        return None
    try:
        data = json.loads(raw)
        return LoginAttemptRecord(
            count=int(data["count"]),
            first=float(data["first"]),
            blocked_until=float(data["blocked_until"]) if data.get("blocked_until") is not None else None,
        )
    except (ValueError, TypeError, KeyError):
        logger.warning("Discarding malformed login attempt record")
        return None


class RedisAttemptStore:
    """AttemptStore on a synchronous redis-py client."""

    def __init__(self, client: redis.Redis, *, ttl_seconds: float, prefix: str = DEFAULT_PREFIX) -> None:
        self.client = client
        self.ttl_seconds = max(1, math.ceil(ttl_seconds))
        self.prefix = prefix

    @classmethod
    def from_url(cls, url: str, *, ttl_seconds: float, prefix: str = DEFAULT_PREFIX) -> "RedisAttemptStore":
        return cls(redis.Redis.from_url(url, decode_responses=True), ttl_seconds=ttl_seconds, prefix=prefix)

    def _key(self, key: str) -> str:
        return f"{self.prefix}{key}"

    def get(self, key: str) -> LoginAttemptRecord | None:
        try:
            return _load(self.client.get(self._key(key)))
        except RedisError as e:
            logger.error("Redis get failed; failing open", extra={"error": str(e)})
            return None

    def update(
        self,
        key: str,
        apply: Callable[[LoginAttemptRecord | None], LoginAttemptRecord],
        now: float,
    ) -> LoginAttemptRecord:
        redis_key = self._key(key)
        try:
            for _ in range(MAX_TRANSACTION_RETRIES):
                with self.client.pipeline() as pipe:
                    try:
                        pipe.watch(redis_key)
                        record = apply(_load(pipe.get(redis_key)))
                        pipe.multi()
                        pipe.set(redis_key, _dump(record), ex=self.ttl_seconds)
                        pipe.execute()
                        return record
                    except WatchError:
                        # Another worker wrote the key first; re-read and retry.
                        continue
            logger.warning("Login attempt update kept conflicting", extra={"key": key})
        except RedisError as e:
            logger.error("Redis update failed; failing open", extra={"error": str(e)})
        return apply(None)

    def delete(self, key: str) -> None:
        try:
            self.client.delete(self._key(key))
        except RedisError as e:
            logger.error("Redis delete failed", extra={"error": str(e)})

    def clear(self) -> None:
        keys = list(self.client.scan_iter(match=f"{self.prefix}*"))
        if keys:
            self.client.delete(*keys)

    def __len__(self) -> int:
        return sum(1 for _ in self.client.scan_iter(match=f"{self.prefix}*"))
