"""Append-only decision records for audit trails and replay."""

import json
from dataclasses import dataclass
from typing import Any, Optional

from ..models.features import FeatureVector
from ..models.regime import Regime
from ..models.risk import RiskAlert, RiskAssessment
from ..models.signal import TradingSignal
from ..models.sizing import PositionSizingResult
from ..utils.time import utc_now
from .base import SQLiteStore


@dataclass
class StoredRecord:
    """Stored record with metadata."""
    id: int
    key: str
    data: dict[str, Any]
    created_at: str


class RecordStore(SQLiteStore):
    """
    SQLite store for pipeline outputs

    Every table is append-only. "Latest" reads are projections over the
    insertion order, so the most recent writer wins.
    """

    def _init_database(self) -> None:
        """Initialize database schema."""
        with self._get_connection() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS features (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    symbol TEXT NOT NULL,
                    price REAL NOT NULL,
                    data TEXT NOT NULL,
                    created_at TEXT NOT NULL
                )
            """)

            conn.execute("""
                CREATE TABLE IF NOT EXISTS regimes (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    symbol TEXT NOT NULL,
                    regime TEXT NOT NULL,
                    confidence REAL NOT NULL,
                    data TEXT NOT NULL,
                    created_at TEXT NOT NULL
                )
            """)

            conn.execute("""
                CREATE TABLE IF NOT EXISTS signals (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    symbol TEXT NOT NULL,
                    signal_type TEXT NOT NULL,
                    confidence REAL NOT NULL,
                    data TEXT NOT NULL,
                    created_at TEXT NOT NULL
                )
            """)

            conn.execute("""
                CREATE TABLE IF NOT EXISTS position_sizing (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    user_id TEXT,
                    symbol TEXT NOT NULL,
                    method TEXT NOT NULL,
                    recommended_size REAL NOT NULL,
                    data TEXT NOT NULL,
                    created_at TEXT NOT NULL
                )
            """)

            conn.execute("""
                CREATE TABLE IF NOT EXISTS risk_assessments (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    user_id TEXT NOT NULL,
                    state TEXT NOT NULL,
                    data TEXT NOT NULL,
                    created_at TEXT NOT NULL
                )
            """)

            conn.execute("""
                CREATE TABLE IF NOT EXISTS risk_events (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    user_id TEXT NOT NULL,
                    event_type TEXT NOT NULL,
                    severity TEXT NOT NULL,
                    description TEXT NOT NULL,
                    data TEXT NOT NULL,
                    created_at TEXT NOT NULL
                )
            """)

            for table, column in (
                ("features", "symbol"),
                ("regimes", "symbol"),
                ("signals", "symbol"),
                ("position_sizing", "symbol"),
                ("risk_assessments", "user_id"),
                ("risk_events", "user_id"),
            ):
                conn.execute(
                    f"CREATE INDEX IF NOT EXISTS idx_{table}_{column} ON {table}({column})")

            conn.commit()

    def _insert(self, sql: str, params: tuple) -> int:
        with self._lock:
            with self._get_connection() as conn:
                cursor = conn.execute(sql, params)
                conn.commit()
                return cursor.lastrowid

    def store_features(self, symbol: str, features: FeatureVector) -> int:
        """Append a feature vector."""
        return self._insert(_INSERT_FEATURES, _features_row(symbol, features))

    def store_regime(self, symbol: str, regime: Regime) -> int:
        """Append a regime classification."""
        return self._insert(_INSERT_REGIME, _regime_row(symbol, regime))

    def store_signal(self, signal: TradingSignal) -> int:
        """
        Append a trading signal.

        Args:
            signal: Signal to store

        Returns:
            Row id of the stored signal

        Raises:
            PersistenceError: If the write fails
        """
        signal_id = self._insert(_INSERT_SIGNAL, _signal_row(signal))

        self.logger.info("Signal stored",
                         symbol=signal.symbol,
                         signal_type=signal.signal_type.value,
                         signal_id=signal_id)
        return signal_id

    def store_position_sizing(self, symbol: str, result: PositionSizingResult,
                              inputs: Optional[dict[str, Any]] = None,
                              user_id: Optional[str] = None) -> int:
        """Append a position sizing calculation together with its inputs."""
        return self._insert(_INSERT_SIZING, _sizing_row(symbol, result, inputs, user_id))

    def store_analysis(self, symbol: str, features: FeatureVector, regime: Regime,
                       signal: TradingSignal, sizing: PositionSizingResult,
                       inputs: Optional[dict[str, Any]] = None,
                       user_id: Optional[str] = None) -> dict[str, int]:
        """
        Append the four records of one analysis in a single transaction.

        Either every record is written or none is.

        Returns:
            Row ids keyed by table name

        Raises:
            PersistenceError: If any write fails; nothing is committed
        """
        rows = (
            ("features", _INSERT_FEATURES, _features_row(symbol, features)),
            ("regimes", _INSERT_REGIME, _regime_row(symbol, regime)),
            ("signals", _INSERT_SIGNAL, _signal_row(signal)),
            ("position_sizing", _INSERT_SIZING, _sizing_row(symbol, sizing, inputs, user_id)),
        )

        ids = {}
        with self._lock:
            with self._get_connection() as conn:
                for table, sql, params in rows:
                    ids[table] = conn.execute(sql, params).lastrowid
                conn.commit()

        self.logger.info("Signal stored",
                         symbol=signal.symbol,
                         signal_type=signal.signal_type.value,
                         signal_id=ids["signals"])
        return ids

    def store_risk_assessment(self, user_id: str, assessment: RiskAssessment) -> int:
        """Append a risk assessment snapshot."""
        return self._insert("""
            INSERT INTO risk_assessments (user_id, state, data, created_at)
            VALUES (?, ?, ?, ?)
        """, (user_id, assessment.state.value, json.dumps(assessment.to_dict()),
              assessment.evaluated_at.isoformat()))

    def store_risk_event(self, user_id: str, alert: RiskAlert) -> int:
        """Append a risk event for an alert."""
        data = alert.to_dict()
        data["triggered_by"] = {"automatic": True}
        return self._insert("""
            INSERT INTO risk_events (user_id, event_type, severity, description, data, created_at)
            VALUES (?, ?, ?, ?, ?, ?)
        """, (user_id, alert.alert_type.value, alert.severity.value, alert.message,
              json.dumps(data), utc_now().isoformat()))

    def latest_regime(self, symbol: str) -> Optional[StoredRecord]:
        """Most recently stored regime for a symbol."""
        return self._latest("regimes", symbol)

    def latest_signal(self, symbol: str) -> Optional[StoredRecord]:
        """Most recently stored signal for a symbol."""
        return self._latest("signals", symbol)

    def recent_signals(self, symbol: str, limit: int = 20) -> list[StoredRecord]:
        """Signals for a symbol, newest first."""
        with self._get_connection() as conn:
            rows = conn.execute("""
                SELECT id, symbol, data, created_at FROM signals
                WHERE symbol = ? ORDER BY id DESC LIMIT ?
            """, (symbol, limit)).fetchall()
            return [self._row_to_record(row, "symbol") for row in rows]

    def risk_events(self, user_id: str, limit: int = 50) -> list[StoredRecord]:
        """Risk events for a user, newest first."""
        with self._get_connection() as conn:
            rows = conn.execute("""
                SELECT id, user_id, data, created_at FROM risk_events
                WHERE user_id = ? ORDER BY id DESC LIMIT ?
            """, (user_id, limit)).fetchall()
            return [self._row_to_record(row, "user_id") for row in rows]

    def count(self, table: str) -> int:
        """Number of rows in one of the record tables."""
        if table not in ("features", "regimes", "signals", "position_sizing",
                         "risk_assessments", "risk_events"):
            raise ValueError(f"Unknown table: {table}")
        with self._get_connection() as conn:
            return conn.execute(f"SELECT COUNT(*) FROM {table}").fetchone()[0]

    def _latest(self, table: str, symbol: str) -> Optional[StoredRecord]:
        with self._get_connection() as conn:
            row = conn.execute(f"""
                SELECT id, symbol, data, created_at FROM {table}
                WHERE symbol = ? ORDER BY id DESC LIMIT 1
            """, (symbol,)).fetchone()

            if row:
                return self._row_to_record(row, "symbol")
            return None

    def _row_to_record(self, row, key_column: str) -> StoredRecord:
        """Convert database row to StoredRecord object."""
        return StoredRecord(
            id=row["id"],
            key=row[key_column],
            data=json.loads(row["data"]),
            created_at=row["created_at"],
        )


_INSERT_FEATURES = """
    INSERT INTO features (symbol, price, data, created_at)
    VALUES (?, ?, ?, ?)
"""

_INSERT_REGIME = """
    INSERT INTO regimes (symbol, regime, confidence, data, created_at)
    VALUES (?, ?, ?, ?, ?)
"""

_INSERT_SIGNAL = """
    INSERT INTO signals (symbol, signal_type, confidence, data, created_at)
    VALUES (?, ?, ?, ?, ?)
"""

_INSERT_SIZING = """
    INSERT INTO position_sizing (user_id, symbol, method, recommended_size, data, created_at)
    VALUES (?, ?, ?, ?, ?, ?)
"""


def _features_row(symbol: str, features: FeatureVector) -> tuple:
    return (symbol, features.price, json.dumps(features.to_dict()), utc_now().isoformat())


def _regime_row(symbol: str, regime: Regime) -> tuple:
    return (symbol, regime.regime_type.value, regime.confidence,
            json.dumps(regime.to_dict()), utc_now().isoformat())


def _signal_row(signal: TradingSignal) -> tuple:
    return (signal.symbol, signal.signal_type.value, signal.confidence,
            json.dumps(signal.to_dict()), signal.created_at.isoformat())


def _sizing_row(symbol: str, result: PositionSizingResult,
                inputs: Optional[dict[str, Any]], user_id: Optional[str]) -> tuple:
    data = result.to_dict()
    data["inputs"] = inputs or {}
    return (user_id, symbol, result.method.value, result.recommended_size,
            json.dumps(data), utc_now().isoformat())
