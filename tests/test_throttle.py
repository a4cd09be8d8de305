"""Unit tests for blogcms.core.throttle: failure window, lockout, reset and bounded map."""

import threading
import unittest

from blogcms.core.errors import TooManyRequests
from blogcms.core.throttle import LoginThrottle, MemoryAttemptStore, throttle_key
from tests.helpers import FakeClock

WINDOW = 15 * 60
BLOCK = 15 * 60


def _throttle(clock: FakeClock, **kwargs: object) -> LoginThrottle:
    params = {"max_attempts": 5, "window_seconds": WINDOW, "block_seconds": BLOCK}
    params.update(kwargs)
    return LoginThrottle(clock=clock, **params)


class TestThrottleKey(unittest.TestCase):
    def test_trims_and_lowercases(self) -> None:
        self.assertEqual(throttle_key("  A@Example.COM "), "a@example.com")

    def test_none_is_empty(self) -> None:
        self.assertEqual(throttle_key(None), "")


class TestRecordFailure(unittest.TestCase):
    """Failures inside the window accumulate; the threshold starts a block."""

    def test_first_failure_creates_record(self) -> None:
        clock = FakeClock()
        throttle = _throttle(clock)
        record = throttle.record_failure("a@example.com")
        self.assertEqual(record.count, 1)
        self.assertEqual(record.first, clock.now)
        self.assertIsNone(record.blocked_until)

    def test_threshold_blocks_and_resets_counter(self) -> None:
        clock = FakeClock()
        throttle = _throttle(clock)
        for _ in range(4):
            clock.advance(10)
            throttle.record_failure("a@example.com")
        self.assertEqual(throttle.blocked_for("a@example.com"), 0)
        clock.advance(10)
        record = throttle.record_failure("a@example.com")
        self.assertEqual(record.blocked_until, clock.now + BLOCK)
        self.assertEqual(record.count, 0)
        self.assertEqual(record.first, clock.now)
        with self.assertRaises(TooManyRequests) as ctx:
            throttle.check("A@EXAMPLE.com")
        self.assertEqual(ctx.exception.retry_after, BLOCK)
        self.assertEqual(ctx.exception.headers, {"Retry-After": str(BLOCK)})

    def test_failure_outside_window_restarts_count(self) -> None:
        clock = FakeClock()
        throttle = _throttle(clock)
        for _ in range(4):
            throttle.record_failure("a@example.com")
        clock.advance(WINDOW + 1)
        record = throttle.record_failure("a@example.com")
        self.assertEqual(record.count, 1)
        self.assertIsNone(record.blocked_until)
        throttle.check("a@example.com")

    def test_failure_exactly_at_window_edge_still_counts(self) -> None:
        clock = FakeClock()
        throttle = _throttle(clock)
        throttle.record_failure("a@example.com")
        clock.advance(WINDOW)
        self.assertEqual(throttle.record_failure("a@example.com").count, 2)

    def test_block_expires(self) -> None:
        clock = FakeClock()
        throttle = _throttle(clock)
        for _ in range(5):
            throttle.record_failure("a@example.com")
        clock.advance(BLOCK - 1)
        with self.assertRaises(TooManyRequests):
            throttle.check("a@example.com")
        clock.advance(1)
        throttle.check("a@example.com")
        self.assertEqual(throttle.blocked_for("a@example.com"), 0)

    def test_identifiers_are_independent(self) -> None:
        clock = FakeClock()
        throttle = _throttle(clock)
        for _ in range(5):
            throttle.record_failure("a@example.com")
        throttle.check("b@example.com")


class TestResetAttempts(unittest.TestCase):
    def test_reset_removes_record(self) -> None:
        clock = FakeClock()
        throttle = _throttle(clock)
        throttle.record_failure("a@example.com")
        throttle.record_failure("a@example.com")
        throttle.reset_attempts("A@example.com")
        self.assertIsNone(throttle.get("a@example.com"))
        self.assertEqual(throttle.record_failure("a@example.com").count, 1)

    def test_reset_unknown_identifier_is_noop(self) -> None:
        throttle = _throttle(FakeClock())
        throttle.reset_attempts("nobody@example.com")
        self.assertEqual(len(throttle), 0)


class TestBoundedMap(unittest.TestCase):
    """The map stays within max_entries except while only active blocks remain."""

    def test_lapsed_entries_are_swept_first(self) -> None:
        clock = FakeClock()
        throttle = _throttle(clock, max_entries=3, block_seconds=2 * WINDOW)
        for _ in range(5):
            throttle.record_failure("blocked@example.com")
        throttle.record_failure("old1@example.com")
        clock.advance(WINDOW + 1)
        throttle.record_failure("new1@example.com")
        throttle.record_failure("new2@example.com")
        self.assertLessEqual(len(throttle), 3)
        self.assertIsNone(throttle.get("old1@example.com"))
        # Still blocked, so kept.
        self.assertIsNotNone(throttle.get("blocked@example.com"))
        self.assertIsNotNone(throttle.get("new2@example.com"))

    def test_least_recently_touched_evicted_when_nothing_lapsed(self) -> None:
        clock = FakeClock()
        throttle = _throttle(clock, max_entries=2)
        throttle.record_failure("a@example.com")
        throttle.record_failure("b@example.com")
        throttle.record_failure("a@example.com")
        throttle.record_failure("c@example.com")
        self.assertEqual(len(throttle), 2)
        self.assertIsNone(throttle.get("b@example.com"))
        self.assertEqual(throttle.get("a@example.com").count, 2)

    def test_active_block_never_evicted(self) -> None:
        clock = FakeClock()
        throttle = _throttle(clock, max_entries=3)
        for _ in range(5):
            throttle.record_failure("victim@example.com")
        for i in range(3):
            throttle.record_failure(f"junk{i}@example.com")
        self.assertEqual(len(throttle), 3)
        with self.assertRaises(TooManyRequests):
            throttle.check("victim@example.com")
        self.assertIsNone(throttle.get("junk0@example.com"))

    def test_only_blocks_left_may_exceed_cap(self) -> None:
        clock = FakeClock()
        throttle = _throttle(clock, max_entries=2, max_attempts=1)
        for name in ("a", "b", "c"):
            throttle.record_failure(f"{name}@example.com")
        self.assertEqual(len(throttle), 3)
        for name in ("a", "b", "c"):
            self.assertGreater(throttle.blocked_for(f"{name}@example.com"), 0)
        clock.advance(BLOCK + WINDOW + 1)
        throttle.record_failure("d@example.com")
        self.assertLessEqual(len(throttle), 2)


class TestConcurrency(unittest.TestCase):
    def test_parallel_failures_are_all_counted(self) -> None:
        throttle = _throttle(FakeClock(), max_attempts=1000)
        barrier = threading.Barrier(8)

        def fail_many() -> None:
            barrier.wait()
            for _ in range(50):
                throttle.record_failure("a@example.com")

        threads = [threading.Thread(target=fail_many) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        self.assertEqual(throttle.get("a@example.com").count, 400)


class TestFromSettings(unittest.TestCase):
    def test_reads_limits(self) -> None:
        from tests.helpers import make_settings

        settings = make_settings(
            LOGIN_MAX_ATTEMPTS=3,
            LOGIN_WINDOW_SECONDS=60,
            LOGIN_BLOCK_SECONDS=120,
            LOGIN_THROTTLE_MAX_ENTRIES=50,
        )
        throttle = LoginThrottle.from_settings(settings)
        self.assertEqual(throttle.max_attempts, 3)
        self.assertEqual(throttle.window_seconds, 60)
        self.assertEqual(throttle.block_seconds, 120)
        self.assertIsInstance(throttle.store, MemoryAttemptStore)
        self.assertEqual(throttle.store.max_entries, 50)

    def test_redis_url_selects_shared_store(self) -> None:
        from blogcms.core.redis_store import RedisAttemptStore
        from tests.helpers import make_settings

        settings = make_settings(
            LOGIN_THROTTLE_REDIS_URL="redis://localhost:6379/0",
            LOGIN_WINDOW_SECONDS=60,
            LOGIN_BLOCK_SECONDS=300,
        )
        throttle = LoginThrottle.from_settings(settings)
        self.assertIsInstance(throttle.store, RedisAttemptStore)
        self.assertEqual(throttle.store.ttl_seconds, 300)
