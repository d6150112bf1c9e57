"""Sliding-window rate limiting backed by the shared SQLite store."""

import math
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Union

from ..config.defaults import RateLimitPolicy
from ..errors import RateLimitExceededError
from .base import SQLiteStore


@dataclass(frozen=True)
class RateLimitResult:
    """Outcome of one rate-limit check."""
    allowed: bool
    remaining: int
    retry_after_seconds: int
    message: str = ""


class RateLimitStore(SQLiteStore):
    """
    Request counters keyed by actor

    Counters live in the database rather than in process memory, so every
    worker sharing the database sees the same budget.
    """

    def __init__(self, db_path: Union[str, Path] = "atlas.db",
                 clock: Callable[[], float] = time.time):
        self._clock = clock
        super().__init__(db_path)

    def _init_database(self) -> None:
        """Initialize database schema."""
        with self._get_connection() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS rate_limit_requests (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    actor_key TEXT NOT NULL,
                    requested_at REAL NOT NULL
                )
            """)
            conn.execute("""
                CREATE INDEX IF NOT EXISTS idx_rate_limit_actor
                ON rate_limit_requests(actor_key, requested_at)
            """)
            conn.commit()

    def check_rate_limit(self, key: str, policy: RateLimitPolicy) -> RateLimitResult:
        """
        Record a request for `key` if its window still has budget.

        Args:
            key: Actor key, e.g. "trading:<user_id>"
            policy: Window length and request budget

        Returns:
            RateLimitResult; rejected requests are not counted
        """
        now = self._clock()
        window_start = now - policy.window_seconds

        with self._lock:
            with self._get_connection() as conn:
                conn.execute("BEGIN IMMEDIATE")
                conn.execute(
                    "DELETE FROM rate_limit_requests WHERE actor_key = ? AND requested_at <= ?",
                    (key, window_start))

                row = conn.execute("""
                    SELECT COUNT(*) AS count, MIN(requested_at) AS oldest
                    FROM rate_limit_requests WHERE actor_key = ?
                """, (key,)).fetchone()
                count = row["count"]

                if count >= policy.max_requests:
                    conn.commit()
                    retry_after = max(1, math.ceil(row["oldest"] + policy.window_seconds - now))
                    self.logger.warning("Rate limit exceeded",
                                        actor_key=key,
                                        max_requests=policy.max_requests,
                                        retry_after_seconds=retry_after)
                    return RateLimitResult(
                        allowed=False,
                        remaining=0,
                        retry_after_seconds=retry_after,
                        message=policy.message,
                    )

                conn.execute(
                    "INSERT INTO rate_limit_requests (actor_key, requested_at) VALUES (?, ?)",
                    (key, now))
                conn.commit()

        return RateLimitResult(
            allowed=True,
            remaining=policy.max_requests - count - 1,
            retry_after_seconds=0,
        )

    def enforce(self, key: str, policy: RateLimitPolicy) -> RateLimitResult:
        """
        Like check_rate_limit, but raise when the budget is exhausted.

        Raises:
            RateLimitExceededError: If the actor is over its budget
        """
        result = self.check_rate_limit(key, policy)
        if not result.allowed:
            raise RateLimitExceededError(
                policy.message,
                actor_key=key,
                retry_after_seconds=result.retry_after_seconds,
            )
        return result

    def reset(self, key: str) -> None:
        """Forget all recorded requests for an actor."""
        with self._lock:
            with self._get_connection() as conn:
                conn.execute("DELETE FROM rate_limit_requests WHERE actor_key = ?", (key,))
                conn.commit()
