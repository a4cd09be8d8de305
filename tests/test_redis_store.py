"""Unit tests for blogcms.core.redis_store against a mocked redis client."""

import json
import unittest
from unittest.mock import MagicMock

from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import WatchError

from blogcms.core.errors import TooManyRequests
from blogcms.core.redis_store import DEFAULT_PREFIX, RedisAttemptStore
from blogcms.core.throttle import LoginAttemptRecord, LoginThrottle
from tests.helpers import FakeClock


def _client(stored: str | None = None) -> tuple[MagicMock, MagicMock]:
    client = MagicMock()
    pipe = MagicMock()
    pipe.get.return_value = stored
    client.pipeline.return_value.__enter__.return_value = pipe
    return client, pipe


class TestRedisAttemptStore(unittest.TestCase):
    def test_get_parses_record(self) -> None:
        client, _ = _client()
        client.get.return_value = json.dumps({"count": 2, "first": 10.0, "blocked_until": None})
        store = RedisAttemptStore(client, ttl_seconds=900)
        self.assertEqual(store.get("a@example.com"), LoginAttemptRecord(2, 10.0, None))
        client.get.assert_called_once_with(f"{DEFAULT_PREFIX}a@example.com")

    def test_malformed_record_is_ignored(self) -> None:
        client, _ = _client()
        client.get.return_value = "{not json"
        self.assertIsNone(RedisAttemptStore(client, ttl_seconds=900).get("a@example.com"))

    def test_update_writes_with_ttl(self) -> None:
        client, pipe = _client(json.dumps({"count": 1, "first": 5.0, "blocked_until": None}))
        store = RedisAttemptStore(client, ttl_seconds=899.5)

        def bump(record):
            record.count += 1
            return record

        record = store.update("a@example.com", bump, now=6.0)
        self.assertEqual(record.count, 2)
        key = f"{DEFAULT_PREFIX}a@example.com"
        pipe.watch.assert_called_once_with(key)
        pipe.multi.assert_called_once_with()
        pipe.set.assert_called_once_with(
            key, json.dumps({"count": 2, "first": 5.0, "blocked_until": None}), ex=900
        )

    def test_update_retries_after_concurrent_write(self) -> None:
        client, pipe = _client(json.dumps({"count": 1, "first": 5.0, "blocked_until": None}))
        pipe.execute.side_effect = [WatchError(), []]
        store = RedisAttemptStore(client, ttl_seconds=900)
        calls = []

        def bump(record):
            calls.append(record.count)
            record.count += 1
            return record

        self.assertEqual(store.update("a@example.com", bump, now=6.0).count, 2)
        self.assertEqual(calls, [1, 1])
        self.assertEqual(pipe.execute.call_count, 2)

    def test_errors_fail_open(self) -> None:
        client, _ = _client()
        client.get.side_effect = RedisConnectionError("down")
        client.pipeline.side_effect = RedisConnectionError("down")
        store = RedisAttemptStore(client, ttl_seconds=900)
        self.assertIsNone(store.get("a@example.com"))
        record = store.update("a@example.com", lambda r: LoginAttemptRecord(1, 6.0), now=6.0)
        self.assertEqual(record.count, 1)

    def test_delete_uses_prefixed_key(self) -> None:
        client, _ = _client()
        RedisAttemptStore(client, ttl_seconds=900, prefix="t:").delete("a@example.com")
        client.delete.assert_called_once_with("t:a@example.com")


class TestThrottleOnRedisStore(unittest.TestCase):
    def test_stored_block_is_enforced(self) -> None:
        clock = FakeClock(start=1_000.0)
        client, _ = _client()
        client.get.return_value = json.dumps({"count": 0, "first": 990.0, "blocked_until": 1_500.0})
        throttle = LoginThrottle(clock=clock, store=RedisAttemptStore(client, ttl_seconds=900))
        with self.assertRaises(TooManyRequests) as ctx:
            throttle.check("A@example.com")
        self.assertEqual(ctx.exception.retry_after, 500)

    def test_threshold_failure_writes_block(self) -> None:
        clock = FakeClock(start=1_000.0)
        client, pipe = _client(json.dumps({"count": 4, "first": 990.0, "blocked_until": None}))
        throttle = LoginThrottle(clock=clock, store=RedisAttemptStore(client, ttl_seconds=900))
        record = throttle.record_failure("a@example.com")
        self.assertEqual(record.blocked_until, 1_900.0)
        written = json.loads(pipe.set.call_args.args[1])
        self.assertEqual(written, {"count": 0, "first": 1_000.0, "blocked_until": 1_900.0})
