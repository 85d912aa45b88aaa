"""SQLite-backed device-local store: session, table snapshot and completed orders."""

from __future__ import annotations

import json
import logging
import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from cafe_pos.config import DB_PATH
from cafe_pos.constant import COMPLETED_ORDER_LIMIT
from cafe_pos.models import Order

logger = logging.getLogger("cafe_pos.persistence")

SESSION_KEY = "session"
SNAPSHOT_KEY = "pos_store"


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class LocalStore:
    """Key/value and completed-order log kept on the till itself."""

    def __init__(self, db_path: str | Path = DB_PATH, completed_limit: int = COMPLETED_ORDER_LIMIT) -> None:
        self.db_path = Path(db_path)
        self.completed_limit = completed_limit
        self.bootstrap_schema()

    def _connect(self) -> sqlite3.Connection:
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        return sqlite3.connect(self.db_path)

    def bootstrap_schema(self) -> None:
        """Create persistence schema if it does not already exist."""
        with self._connect() as conn:
            conn.executescript(
                """
                CREATE TABLE IF NOT EXISTS kv_store (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                );

                CREATE TABLE IF NOT EXISTS completed_orders (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    order_number TEXT NOT NULL,
                    completed_at TEXT NOT NULL,
                    payload TEXT NOT NULL
                );

                CREATE INDEX IF NOT EXISTS idx_completed_orders_number
                    ON completed_orders(order_number);
                """
            )

    def get(self, key: str) -> Any | None:
        """Return the decoded value for a key, or None when absent or unreadable."""
        with self._connect() as conn:
            row = conn.execute("SELECT value FROM kv_store WHERE key = ?", (key,)).fetchone()
        if row is None:
            return None
        try:
            return json.loads(row[0])
        except json.JSONDecodeError:
            logger.warning("kv_decode_failed key=%s", key)
            return None

    def set(self, key: str, value: Any) -> None:
        payload = json.dumps(value)
        with self._connect() as conn:
            with conn:
                conn.execute(
                    """
                    INSERT INTO kv_store (key, value, updated_at) VALUES (?, ?, ?)
                    ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = excluded.updated_at
                    """,
                    (key, payload, _utc_now_iso()),
                )

    def delete(self, key: str) -> None:
        with self._connect() as conn:
            with conn:
                conn.execute("DELETE FROM kv_store WHERE key = ?", (key,))

    def append_completed_order(self, order: Order) -> Order:
        """Log a paid order, newest first, keeping only the most recent entries."""
        completed_at = _utc_now_iso()
        order.completed_at = completed_at
        order.status = "paid"
        with self._connect() as conn:
            with conn:
                conn.execute(
                    "INSERT INTO completed_orders (order_number, completed_at, payload) VALUES (?, ?, ?)",
                    (order.order_number, completed_at, json.dumps(order.to_dict())),
                )
                conn.execute(
                    """
                    DELETE FROM completed_orders WHERE id NOT IN (
                        SELECT id FROM completed_orders ORDER BY id DESC LIMIT ?
                    )
                    """,
                    (self.completed_limit,),
                )
        return order

    def completed_orders(self) -> list[Order]:
        with self._connect() as conn:
            rows = conn.execute("SELECT payload FROM completed_orders ORDER BY id DESC").fetchall()
        return [Order.from_dict(json.loads(row[0])) for row in rows]

    def find_completed_order(self, order_number: str) -> Order | None:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT payload FROM completed_orders WHERE order_number = ? ORDER BY id DESC LIMIT 1",
                (order_number,),
            ).fetchone()
        if row is None:
            return None
        return Order.from_dict(json.loads(row[0]))
