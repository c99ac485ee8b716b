"""SQLite persistence for credit usage reported by the DWS API."""

from __future__ import annotations

import logging
import sqlite3
import threading
from dataclasses import dataclass
from pathlib import Path

from ..config import credits_db_path

_SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS usage_log (
    id                INTEGER PRIMARY KEY AUTOINCREMENT,
    timestamp         TEXT    NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ', 'now')),
    operation         TEXT    NOT NULL,
    request_cost      REAL    NOT NULL,
    remaining_credits REAL
);
CREATE INDEX IF NOT EXISTS idx_usage_timestamp ON usage_log(timestamp);
CREATE INDEX IF NOT EXISTS idx_usage_operation ON usage_log(operation);
"""

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class UsageRecord:
    id: int
    timestamp: str
    operation: str
    request_cost: float
    remaining_credits: float | None


@dataclass(slots=True)
class Balance:
    remaining: float
    as_of: str


@dataclass(slots=True)
class UsageSummaryRow:
    operation: str
    count: int
    total_credits: float
    avg_cost: float


class CreditLedger:
    """Append-only usage log; the connection is opened lazily on first use."""

    def __init__(self, db_path: str | Path | None = None) -> None:
        self.db_path = Path(db_path) if db_path is not None else credits_db_path()
        self._connection: sqlite3.Connection | None = None
        self._lock = threading.Lock()

    def _connect(self) -> sqlite3.Connection:
        if self._connection is None:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            connection = sqlite3.connect(self.db_path, check_same_thread=False)
            connection.row_factory = sqlite3.Row
            connection.execute("PRAGMA journal_mode=WAL")
            connection.executescript(_SCHEMA_SQL)
            self._connection = connection
            logger.debug("Opened credit ledger at %s", self.db_path)
        return self._connection

    def log_usage(
        self,
        operation: str,
        request_cost: float,
        remaining_credits: float | None = None,
        *,
        timestamp: str | None = None,
    ) -> None:
        with self._lock:
            connection = self._connect()
            if timestamp is None:
                connection.execute(
                    "INSERT INTO usage_log (operation, request_cost, remaining_credits) "
                    "VALUES (?, ?, ?)",
                    (operation, request_cost, remaining_credits),
                )
            else:
                connection.execute(
                    "INSERT INTO usage_log (timestamp, operation, request_cost, remaining_credits) "
                    "VALUES (?, ?, ?, ?)",
                    (timestamp, operation, request_cost, remaining_credits),
                )
            connection.commit()

    def latest_balance(self) -> Balance | None:
        with self._lock:
            row = self._connect().execute(
                """
                SELECT remaining_credits AS remaining, timestamp AS as_of
                FROM usage_log
                WHERE remaining_credits IS NOT NULL
                ORDER BY id DESC
                LIMIT 1
                """
            ).fetchone()
        if row is None:
            return None
        return Balance(remaining=row["remaining"], as_of=row["as_of"])

    def usage_by_period(self, start: str, end: str) -> list[UsageRecord]:
        with self._lock:
            rows = self._connect().execute(
                """
                SELECT id, timestamp, operation, request_cost, remaining_credits
                FROM usage_log
                WHERE timestamp >= ? AND timestamp <= ?
                ORDER BY id ASC
                """,
                (start, end),
            ).fetchall()
        return [
            UsageRecord(
                id=row["id"],
                timestamp=row["timestamp"],
                operation=row["operation"],
                request_cost=row["request_cost"],
                remaining_credits=row["remaining_credits"],
            )
            for row in rows
        ]

    def usage_summary(self, start: str, end: str) -> list[UsageSummaryRow]:
        with self._lock:
            rows = self._connect().execute(
                """
                SELECT operation,
                       COUNT(*)          AS count,
                       SUM(request_cost) AS total_credits,
                       AVG(request_cost) AS avg_cost
                FROM usage_log
                WHERE timestamp >= ? AND timestamp <= ?
                GROUP BY operation
                ORDER BY total_credits DESC
                """,
                (start, end),
            ).fetchall()
        return [
            UsageSummaryRow(
                operation=row["operation"],
                count=row["count"],
                total_credits=row["total_credits"],
                avg_cost=row["avg_cost"],
            )
            for row in rows
        ]

    def total_usage(self, start: str, end: str) -> float:
        with self._lock:
            row = self._connect().execute(
                """
                SELECT COALESCE(SUM(request_cost), 0) AS total
                FROM usage_log
                WHERE timestamp >= ? AND timestamp <= ?
                """,
                (start, end),
            ).fetchone()
        return float(row["total"])

    def close(self) -> None:
        with self._lock:
            if self._connection is not None:
                self._connection.close()
                self._connection = None


__all__ = ["Balance", "CreditLedger", "UsageRecord", "UsageSummaryRow"]
