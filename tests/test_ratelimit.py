"""Unit tests for the per-client comment limiter."""

import unittest

from blogcms.core.errors import TooManyRequests
from blogcms.core.ratelimit import CommentRateLimiter
from tests.helpers import FakeClock, make_settings


class TestCommentRateLimiter(unittest.TestCase):
    def setUp(self) -> None:
        self.clock = FakeClock()
        self.limiter = CommentRateLimiter(clock=self.clock)

    def test_short_window_allows_one_submission(self) -> None:
        self.limiter.hit("10.0.0.1")
        self.clock.advance(5)
        with self.assertRaises(TooManyRequests) as ctx:
            self.limiter.hit("10.0.0.1")
        self.assertEqual(ctx.exception.message, "Too many comments, please slow down.")
        self.assertEqual(ctx.exception.retry_after, 5)
        self.clock.advance(6)
        self.limiter.hit("10.0.0.1")

    def test_rejected_submission_is_not_counted(self) -> None:
        self.limiter.hit("10.0.0.1")
        self.clock.advance(5)
        with self.assertRaises(TooManyRequests):
            self.limiter.hit("10.0.0.1")
        # 11s after the accepted one, 6s after the rejected one
        self.clock.advance(6)
        self.limiter.hit("10.0.0.1")

    def test_long_window_limit(self) -> None:
        limiter = CommentRateLimiter(short_window_seconds=1, long_window_seconds=600, long_limit=3, clock=self.clock)
        for _ in range(3):
            limiter.hit("10.0.0.1")
            self.clock.advance(2)
        with self.assertRaises(TooManyRequests) as ctx:
            limiter.hit("10.0.0.1")
        self.assertEqual(ctx.exception.retry_after, 600 - 6)

    def test_clients_are_independent(self) -> None:
        self.limiter.hit("10.0.0.1")
        self.limiter.hit("10.0.0.2")
        with self.assertRaises(TooManyRequests):
            self.limiter.hit("10.0.0.1")

    def test_unknown_client_not_limited(self) -> None:
        for _ in range(5):
            self.limiter.hit(None)
        self.assertEqual(len(self.limiter), 0)

    def test_clear(self) -> None:
        self.limiter.hit("10.0.0.1")
        self.limiter.clear()
        self.limiter.hit("10.0.0.1")


class TestBoundedMap(unittest.TestCase):
    def test_least_recent_client_evicted_over_cap(self) -> None:
        clock = FakeClock()
        limiter = CommentRateLimiter(max_entries=2, clock=clock)
        for client in ("a", "b", "c"):
            limiter.hit(client)
        self.assertEqual(len(limiter), 2)
        limiter.hit("a")

    def test_idle_clients_swept_before_recent_ones(self) -> None:
        clock = FakeClock()
        limiter = CommentRateLimiter(max_entries=2, clock=clock)
        limiter.hit("idle")
        clock.advance(700)
        limiter.hit("b")
        limiter.hit("c")
        self.assertEqual(len(limiter), 2)
        with self.assertRaises(TooManyRequests):
            limiter.hit("b")


class TestFromSettings(unittest.TestCase):
    def test_uses_configured_limits(self) -> None:
        settings = make_settings(
            COMMENT_RATE_SHORT_WINDOW_SECONDS=30,
            COMMENT_RATE_SHORT_LIMIT=2,
            COMMENT_RATE_LONG_WINDOW_SECONDS=3600,
            COMMENT_RATE_LONG_LIMIT=20,
            COMMENT_RATE_MAX_ENTRIES=50,
        )
        limiter = CommentRateLimiter.from_settings(settings)
        self.assertEqual(limiter.short_window_seconds, 30)
        self.assertEqual(limiter.short_limit, 2)
        self.assertEqual(limiter.long_window_seconds, 3600)
        self.assertEqual(limiter.long_limit, 20)
        self.assertEqual(limiter.max_entries, 50)
