"""JSON values in the kv_store table, read and written wholesale."""

import json
import sqlite3
from typing import Any

from skylar.ingest.staleness import parse_timestamp


def get_value(conn: sqlite3.Connection, key: str) -> Any:
    """Decoded value for a key, or None when unset."""
    row = conn.execute("SELECT value FROM kv_store WHERE key = ?", (key,)).fetchone()
    if row is None:
        return None
    return json.loads(row[0])


def set_value(conn: sqlite3.Connection, key: str, value: Any) -> None:
    conn.execute(
        "INSERT INTO kv_store (key, value, updated_at) VALUES (?, ?, CURRENT_TIMESTAMP) "
        "ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = CURRENT_TIMESTAMP",
        (key, json.dumps(value)),
    )
    conn.commit()


def delete_value(conn: sqlite3.Connection, key: str) -> bool:
    cursor = conn.execute("DELETE FROM kv_store WHERE key = ?", (key,))
    conn.commit()
    return cursor.rowcount > 0


def list_keys(conn: sqlite3.Connection) -> list[str]:
    return [row[0] for row in conn.execute("SELECT key FROM kv_store ORDER BY key")]


def updated_at(conn: sqlite3.Connection, key: str) -> float | None:
    """Epoch seconds of the last write to a key."""
    row = conn.execute("SELECT updated_at FROM kv_store WHERE key = ?", (key,)).fetchone()
    return parse_timestamp(row[0]) if row is not None else None
