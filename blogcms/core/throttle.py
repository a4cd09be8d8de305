"""Login throttle: counts failed logins per identifier and enforces a temporary block."""

import logging
import math
import threading
import time
from collections import OrderedDict
from collections.abc import Callable
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Protocol

from blogcms.core.errors import TooManyRequests

if TYPE_CHECKING:
    from blogcms.core.config import Settings

logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 5
DEFAULT_WINDOW_SECONDS = 15 * 60
DEFAULT_BLOCK_SECONDS = 15 * 60
DEFAULT_MAX_ENTRIES = 10_000


@dataclass
class LoginAttemptRecord:
    """Failure count and window start for one identifier; blocked_until is set during a lockout."""

    count: int
    first: float
    blocked_until: float | None = None

    def is_blocking(self, now: float) -> bool:
        return self.blocked_until is not None and self.blocked_until > now


def throttle_key(identifier: str | None) -> str:
    """Lookup key for an identifier: trimmed and lowercased, nothing more."""
    return (identifier or "").strip().lower()


class AttemptStore(Protocol):
    """Where attempt records live. update() must apply the change atomically per key."""

    def get(self, key: str) -> LoginAttemptRecord | None: ...

    def update(
        self,
        key: str,
        apply: Callable[[LoginAttemptRecord | None], LoginAttemptRecord],
        now: float,
    ) -> LoginAttemptRecord: ...

    def delete(self, key: str) -> None: ...

    def clear(self) -> None: ...

    def __len__(self) -> int: ...


class MemoryAttemptStore:
    """
    Bounded in-process map of attempt records.

    Once it holds more than max_entries records, lapsed records are swept,
    then the least recently touched records without an active block are
    evicted. Active blocks are never evicted; while only blocks remain the
    map may sit above the cap until they expire. State is lost on restart.
    """

    def __init__(self, *, window_seconds: float, max_entries: int = DEFAULT_MAX_ENTRIES) -> None:
        self.window_seconds = window_seconds
        self.max_entries = max_entries
        self._records: OrderedDict[str, LoginAttemptRecord] = OrderedDict()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._records)

    def get(self, key: str) -> LoginAttemptRecord | None:
        with self._lock:
            record = self._records.get(key)
            return replace(record) if record is not None else None

    def update(
        self,
        key: str,
        apply: Callable[[LoginAttemptRecord | None], LoginAttemptRecord],
        now: float,
    ) -> LoginAttemptRecord:
        with self._lock:
            current = self._records.get(key)
            record = apply(replace(current) if current is not None else None)
            self._records[key] = record
            self._records.move_to_end(key)
            if len(self._records) > self.max_entries:
                self._evict(now)
            return replace(record)

    def delete(self, key: str) -> None:
        with self._lock:
            self._records.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._records.clear()

    def _is_lapsed(self, record: LoginAttemptRecord, now: float) -> bool:
        if record.is_blocking(now):
            return False
        return now - record.first > self.window_seconds

    def _evict(self, now: float) -> None:
        # Caller holds the lock.
        for key in [k for k, r in self._records.items() if self._is_lapsed(r, now)]:
            del self._records[key]
        for key in [k for k, r in self._records.items() if not r.is_blocking(now)]:
            if len(self._records) <= self.max_entries:
                return
            del self._records[key]
        if len(self._records) > self.max_entries:
            logger.warning(
                "Login throttle over capacity with active blocks only",
                extra={"entries": len(self._records), "max_entries": self.max_entries},
            )


class LoginThrottle:
    """
    Tracks failed logins per identifier (lowercased email).

    N failures inside the window block the identifier for the block period.
    Records live in an AttemptStore: the bounded in-memory map by default,
    or Redis when several workers must share one view of the lockouts.
    """

    def __init__(
        self,
        *,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        window_seconds: float = DEFAULT_WINDOW_SECONDS,
        block_seconds: float = DEFAULT_BLOCK_SECONDS,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        clock: Callable[[], float] = time.monotonic,
        store: AttemptStore | None = None,
    ) -> None:
        self.max_attempts = max_attempts
        self.window_seconds = window_seconds
        self.block_seconds = block_seconds
        self.store = store or MemoryAttemptStore(window_seconds=window_seconds, max_entries=max_entries)
        self._clock = clock

    @classmethod
    def from_settings(
        cls, settings: "Settings", clock: Callable[[], float] | None = None
    ) -> "LoginThrottle":
        """Build from settings; LOGIN_THROTTLE_REDIS_URL selects the shared Redis store."""
        store: AttemptStore | None = None
        if settings.LOGIN_THROTTLE_REDIS_URL:
            from blogcms.core.redis_store import RedisAttemptStore

            store = RedisAttemptStore.from_url(
                settings.LOGIN_THROTTLE_REDIS_URL,
                ttl_seconds=max(settings.LOGIN_WINDOW_SECONDS, settings.LOGIN_BLOCK_SECONDS),
            )
            # Records are compared across processes, so the clock must be wall time.
            clock = clock or time.time
        return cls(
            max_attempts=settings.LOGIN_MAX_ATTEMPTS,
            window_seconds=settings.LOGIN_WINDOW_SECONDS,
            block_seconds=settings.LOGIN_BLOCK_SECONDS,
            max_entries=settings.LOGIN_THROTTLE_MAX_ENTRIES,
            clock=clock or time.monotonic,
            store=store,
        )

    def __len__(self) -> int:
        return len(self.store)

    def get(self, identifier: str) -> LoginAttemptRecord | None:
        """Copy of the current record for identifier, or None."""
        return self.store.get(throttle_key(identifier))

    def blocked_for(self, identifier: str) -> float:
        """Seconds left on an active block for identifier; 0 when not blocked."""
        now = self._clock()
        record = self.store.get(throttle_key(identifier))
        if record is None or record.blocked_until is None:
            return 0.0
        return max(0.0, record.blocked_until - now)

    def check(self, identifier: str) -> None:
        """Raise TooManyRequests while identifier is blocked."""
        remaining = self.blocked_for(identifier)
        if remaining > 0:
            raise TooManyRequests(
                "Too many login attempts. Please try again later.",
                retry_after=math.ceil(remaining),
            )

    def record_failure(self, identifier: str) -> LoginAttemptRecord:
        """Count one failed login; start a block when the threshold is reached inside the window."""
        key = throttle_key(identifier)
        now = self._clock()

        def apply(record: LoginAttemptRecord | None) -> LoginAttemptRecord:
            if record is None or now - record.first > self.window_seconds:
                # Failures outside the window do not accumulate.
                still_blocked = record is not None and record.is_blocking(now)
                record = LoginAttemptRecord(
                    count=1, first=now, blocked_until=record.blocked_until if still_blocked else None
                )
            else:
                record.count += 1
            if record.count >= self.max_attempts:
                record.blocked_until = now + self.block_seconds
                # The next window starts when the block begins.
                record.count = 0
                record.first = now
                logger.warning(
                    "Login lockout started",
                    extra={"identifier": key, "block_seconds": self.block_seconds},
                )
            return record

        return self.store.update(key, apply, now)

    def reset_attempts(self, identifier: str) -> None:
        """Forget all failures for identifier (called after a successful login)."""
        self.store.delete(throttle_key(identifier))

    def clear(self) -> None:
        self.store.clear()
