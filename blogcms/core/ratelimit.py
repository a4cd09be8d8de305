"""In-process per-client limiter for public comment submissions."""

import logging
import math
import threading
import time
from collections import OrderedDict
from collections.abc import Callable
from typing import TYPE_CHECKING

from blogcms.core.errors import TooManyRequests

if TYPE_CHECKING:
    from blogcms.core.config import Settings

logger = logging.getLogger(__name__)


class CommentRateLimiter:
    """
    Sliding-window limits per client IP: at most short_limit submissions in
    the short window and long_limit in the long window.

    Timestamps older than the long window are dropped on every hit. The map
    is bounded like the login throttle: over max_entries, clients with no
    recent submissions are swept, then the least recently seen are evicted.
    """

    def __init__(
        self,
        *,
        short_window_seconds: float = 10,
        short_limit: int = 1,
        long_window_seconds: float = 10 * 60,
        long_limit: int = 10,
        max_entries: int = 10_000,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.short_window_seconds = short_window_seconds
        self.short_limit = short_limit
        self.long_window_seconds = long_window_seconds
        self.long_limit = long_limit
        self.max_entries = max_entries
        self._clock = clock
        self._hits: OrderedDict[str, list[float]] = OrderedDict()
        self._lock = threading.Lock()

    @classmethod
    def from_settings(cls, settings: "Settings", clock: Callable[[], float] = time.monotonic) -> "CommentRateLimiter":
        return cls(
            short_window_seconds=settings.COMMENT_RATE_SHORT_WINDOW_SECONDS,
            short_limit=settings.COMMENT_RATE_SHORT_LIMIT,
            long_window_seconds=settings.COMMENT_RATE_LONG_WINDOW_SECONDS,
            long_limit=settings.COMMENT_RATE_LONG_LIMIT,
            max_entries=settings.COMMENT_RATE_MAX_ENTRIES,
            clock=clock,
        )

    def __len__(self) -> int:
        return len(self._hits)

    def hit(self, client: str | None) -> None:
        """
        Count one submission for client, or raise TooManyRequests without counting it.

        An unknown client (no address) is not limited.
        """
        if not client:
            return
        now = self._clock()
        with self._lock:
            recent = [t for t in self._hits.get(client, []) if now - t <= self.long_window_seconds]
            short = [t for t in recent if now - t <= self.short_window_seconds]
            if len(short) >= self.short_limit or len(recent) >= self.long_limit:
                retry_after = self._retry_after(recent, short, now)
                self._hits[client] = recent
                logger.info("Comment rate limit hit", extra={"client": client})
                raise TooManyRequests("Too many comments, please slow down.", retry_after=retry_after)
            recent.append(now)
            self._hits[client] = recent
            self._hits.move_to_end(client)
            if len(self._hits) > self.max_entries:
                self._evict(now)

    def clear(self) -> None:
        with self._lock:
            self._hits.clear()

    def _retry_after(self, recent: list[float], short: list[float], now: float) -> int:
        waits = []
        if len(short) >= self.short_limit:
            waits.append(short[-self.short_limit] + self.short_window_seconds - now)
        if len(recent) >= self.long_limit:
            waits.append(recent[-self.long_limit] + self.long_window_seconds - now)
        return max(1, math.ceil(max(waits)))

    def _evict(self, now: float) -> None:
        # Caller holds the lock.
        for key in [k for k, hits in self._hits.items() if not hits or now - hits[-1] > self.long_window_seconds]:
            del self._hits[key]
        while len(self._hits) > self.max_entries:
            self._hits.popitem(last=False)
