"""Per-user risk state: bot configuration, positions, daily PnL and the circuit-breaker latch."""

import json
from datetime import date
from typing import Any, Optional

from ..models.risk import Position
from ..utils.time import utc_now
from .base import SQLiteStore


class RiskStateStore(SQLiteStore):
    """
    SQLite store for the mutable state the risk monitor reads each tick

    The circuit breaker is a latch: once written it stays halted until
    explicitly reset, and every read goes to the database so a halt is
    visible to the next caller immediately.
    """

    def _init_database(self) -> None:
        """Initialize database schema."""
        with self._get_connection() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS bot_configs (
                    user_id TEXT PRIMARY KEY,
                    config TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
            """)

            conn.execute("""
                CREATE TABLE IF NOT EXISTS positions (
                    user_id TEXT NOT NULL,
                    symbol TEXT NOT NULL,
                    quantity REAL NOT NULL,
                    current_price REAL NOT NULL,
                    risk_amount REAL NOT NULL DEFAULT 0,
                    updated_at TEXT NOT NULL,
                    PRIMARY KEY (user_id, symbol)
                )
            """)

            conn.execute("""
                CREATE TABLE IF NOT EXISTS daily_pnl (
                    user_id TEXT NOT NULL,
                    trade_date TEXT NOT NULL,
                    pnl REAL NOT NULL DEFAULT 0,
                    PRIMARY KEY (user_id, trade_date)
                )
            """)

            conn.execute("""
                CREATE TABLE IF NOT EXISTS circuit_breakers (
                    user_id TEXT PRIMARY KEY,
                    halted INTEGER NOT NULL DEFAULT 0,
                    reason TEXT,
                    latched_at TEXT,
                    reset_at TEXT
                )
            """)

            conn.commit()

    # Bot configuration

    def save_bot_config(self, user_id: str, config: dict[str, Any]) -> None:
        """Store the raw bot configuration for a user, replacing any previous one."""
        with self._lock:
            with self._get_connection() as conn:
                conn.execute("""
                    INSERT INTO bot_configs (user_id, config, updated_at) VALUES (?, ?, ?)
                    ON CONFLICT(user_id) DO UPDATE SET
                        config = excluded.config,
                        updated_at = excluded.updated_at
                """, (user_id, json.dumps(config), utc_now().isoformat()))
                conn.commit()

    def load_bot_config(self, user_id: str) -> dict[str, Any]:
        """Raw bot configuration for a user; empty if none was saved."""
        with self._get_connection() as conn:
            row = conn.execute(
                "SELECT config FROM bot_configs WHERE user_id = ?", (user_id,)
            ).fetchone()
            if row is None:
                return {}
            return json.loads(row["config"])

    # Positions

    def upsert_position(self, user_id: str, position: Position) -> None:
        """Insert or replace the open position for (user, symbol)."""
        with self._lock:
            with self._get_connection() as conn:
                conn.execute("""
                    INSERT INTO positions (user_id, symbol, quantity, current_price, risk_amount, updated_at)
                    VALUES (?, ?, ?, ?, ?, ?)
                    ON CONFLICT(user_id, symbol) DO UPDATE SET
                        quantity = excluded.quantity,
                        current_price = excluded.current_price,
                        risk_amount = excluded.risk_amount,
                        updated_at = excluded.updated_at
                """, (user_id, position.symbol, position.quantity, position.current_price,
                      position.risk_amount, utc_now().isoformat()))
                conn.commit()

    def remove_position(self, user_id: str, symbol: str) -> bool:
        """Close a position. Returns False if none was open."""
        with self._lock:
            with self._get_connection() as conn:
                cursor = conn.execute(
                    "DELETE FROM positions WHERE user_id = ? AND symbol = ?", (user_id, symbol))
                conn.commit()
                return cursor.rowcount > 0

    def get_positions(self, user_id: str) -> list[Position]:
        """Open positions for a user, ordered by symbol."""
        with self._get_connection() as conn:
            rows = conn.execute("""
                SELECT symbol, quantity, current_price, risk_amount FROM positions
                WHERE user_id = ? ORDER BY symbol
            """, (user_id,)).fetchall()
            return [
                Position(
                    symbol=row["symbol"],
                    quantity=row["quantity"],
                    current_price=row["current_price"],
                    risk_amount=row["risk_amount"],
                )
                for row in rows
            ]

    # Daily PnL

    def record_pnl(self, user_id: str, pnl: float, trade_date: Optional[date] = None) -> float:
        """Add realised PnL to the day's total and return the new total."""
        day = (trade_date or utc_now().date()).isoformat()
        with self._lock:
            with self._get_connection() as conn:
                conn.execute("""
                    INSERT INTO daily_pnl (user_id, trade_date, pnl) VALUES (?, ?, ?)
                    ON CONFLICT(user_id, trade_date) DO UPDATE SET pnl = pnl + excluded.pnl
                """, (user_id, day, pnl))
                conn.commit()
                row = conn.execute(
                    "SELECT pnl FROM daily_pnl WHERE user_id = ? AND trade_date = ?",
                    (user_id, day)).fetchone()
                return row["pnl"]

    def get_daily_pnl(self, user_id: str, trade_date: Optional[date] = None) -> float:
        """PnL total for the day; 0.0 if nothing was recorded."""
        day = (trade_date or utc_now().date()).isoformat()
        with self._get_connection() as conn:
            row = conn.execute(
                "SELECT pnl FROM daily_pnl WHERE user_id = ? AND trade_date = ?",
                (user_id, day)).fetchone()
            return row["pnl"] if row else 0.0

    # Circuit breaker

    def latch_circuit_breaker(self, user_id: str, reason: str) -> None:
        """Halt trading for a user until explicitly reset."""
        with self._lock:
            with self._get_connection() as conn:
                conn.execute("""
                    INSERT INTO circuit_breakers (user_id, halted, reason, latched_at, reset_at)
                    VALUES (?, 1, ?, ?, NULL)
                    ON CONFLICT(user_id) DO UPDATE SET
                        halted = 1,
                        reason = excluded.reason,
                        latched_at = excluded.latched_at,
                        reset_at = NULL
                """, (user_id, reason, utc_now().isoformat()))
                conn.commit()

        self.logger.critical("Circuit breaker latched", user_id=user_id, reason=reason)

    def reset_circuit_breaker(self, user_id: str, reason: str) -> bool:
        """
        Clear the latch for a user.

        Returns:
            True if a latched breaker was reset, False if none was latched
        """
        with self._lock:
            with self._get_connection() as conn:
                cursor = conn.execute("""
                    UPDATE circuit_breakers SET halted = 0, reason = ?, reset_at = ?
                    WHERE user_id = ? AND halted = 1
                """, (reason, utc_now().isoformat(), user_id))
                conn.commit()
                was_reset = cursor.rowcount > 0

        if was_reset:
            self.logger.warning("Circuit breaker reset", user_id=user_id, reason=reason)
        return was_reset

    def is_halted(self, user_id: str) -> bool:
        """Whether the circuit breaker is currently latched for a user."""
        with self._get_connection() as conn:
            row = conn.execute(
                "SELECT halted FROM circuit_breakers WHERE user_id = ?", (user_id,)
            ).fetchone()
            return bool(row and row["halted"])

    def circuit_breaker_status(self, user_id: str) -> dict[str, Any]:
        """Latch details for a user."""
        with self._get_connection() as conn:
            row = conn.execute("""
                SELECT halted, reason, latched_at, reset_at FROM circuit_breakers
                WHERE user_id = ?
            """, (user_id,)).fetchone()
            if row is None:
                return {"halted": False, "reason": None, "latched_at": None, "reset_at": None}
            return {
                "halted": bool(row["halted"]),
                "reason": row["reason"],
                "latched_at": row["latched_at"],
                "reset_at": row["reset_at"],
            }
