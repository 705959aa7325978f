"""SQLite persistence for the session token and the local receipt log."""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

from jwt_pizza.config import DB_PATH
from jwt_pizza.models import OrderReceipt

TOKEN_KEY = "token"


@dataclass(frozen=True)
class SavedReceipt:
    """A submitted order as recorded locally."""

    order_id: str
    created_at: str
    store_id: str
    franchise_id: str
    item_count: int
    total: str
    jwt: str
    status: str


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _connect(db_path: str) -> sqlite3.Connection:
    db_file = Path(db_path)
    db_file.parent.mkdir(parents=True, exist_ok=True)
    return sqlite3.connect(db_file)


def bootstrap_schema(db_path: str = DB_PATH) -> None:
    """Create persistence schema if it does not already exist."""
    with _connect(db_path) as conn:
        conn.executescript(
            """
            CREATE TABLE IF NOT EXISTS client_state (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL,
                updated_at TEXT NOT NULL
            );

            CREATE TABLE IF NOT EXISTS receipts (
                order_id TEXT PRIMARY KEY,
                created_at TEXT NOT NULL,
                store_id TEXT NOT NULL,
                franchise_id TEXT,
                item_count INTEGER NOT NULL,
                total TEXT NOT NULL,
                jwt TEXT NOT NULL,
                status TEXT NOT NULL
            );
            """
        )


def load_token(db_path: str = DB_PATH) -> str | None:
    """Return the persisted session token, if any."""
    bootstrap_schema(db_path)
    with _connect(db_path) as conn:
        row = conn.execute("SELECT value FROM client_state WHERE key = ?", (TOKEN_KEY,)).fetchone()
    if row is None or not row[0]:
        return None
    return str(row[0])


def save_token(token: str, db_path: str = DB_PATH) -> None:
    """Persist the session token so the next start can restore the session."""
    bootstrap_schema(db_path)
    with _connect(db_path) as conn:
        with conn:
            conn.execute(
                """
                INSERT INTO client_state (key, value, updated_at) VALUES (?, ?, ?)
                ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = excluded.updated_at
                """,
                (TOKEN_KEY, token, _utc_now_iso()),
            )


def clear_token(db_path: str = DB_PATH) -> None:
    """Forget the persisted session token."""
    bootstrap_schema(db_path)
    with _connect(db_path) as conn:
        with conn:
            conn.execute("DELETE FROM client_state WHERE key = ?", (TOKEN_KEY,))


def save_receipt(receipt: OrderReceipt, db_path: str = DB_PATH) -> SavedReceipt:
    """Record a committed order and its JWT."""
    order = receipt.order
    if order.id is None:
        raise ValueError("Cannot record an order without a server-assigned id")

    saved = SavedReceipt(
        order_id=str(order.id),
        created_at=order.date or _utc_now_iso(),
        store_id=str(order.store_id),
        franchise_id="" if order.franchise_id is None else str(order.franchise_id),
        item_count=len(order.items),
        total=str(order.total_price()),
        jwt=receipt.jwt,
        status="SUBMITTED",
    )

    bootstrap_schema(db_path)
    with _connect(db_path) as conn:
        with conn:
            conn.execute(
                """
                INSERT OR REPLACE INTO receipts
                    (order_id, created_at, store_id, franchise_id, item_count, total, jwt, status)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    saved.order_id,
                    saved.created_at,
                    saved.store_id,
                    saved.franchise_id,
                    saved.item_count,
                    saved.total,
                    saved.jwt,
                    saved.status,
                ),
            )
    return saved


def update_receipt_status(order_id: str, status: str, db_path: str = DB_PATH) -> None:
    """Update status for a recorded receipt."""
    with _connect(db_path) as conn:
        with conn:
            conn.execute("UPDATE receipts SET status = ? WHERE order_id = ?", (status, order_id))


def list_receipts(db_path: str = DB_PATH) -> list[SavedReceipt]:
    """Return recorded receipts, newest first."""
    bootstrap_schema(db_path)
    with _connect(db_path) as conn:
        rows = conn.execute(
            """
            SELECT order_id, created_at, store_id, franchise_id, item_count, total, jwt, status
            FROM receipts ORDER BY created_at DESC
            """
        ).fetchall()
    return [
        SavedReceipt(
            order_id=row[0],
            created_at=row[1],
            store_id=row[2],
            franchise_id=row[3] or "",
            item_count=int(row[4]),
            total=row[5],
            jwt=row[6],
            status=row[7],
        )
        for row in rows
    ]
