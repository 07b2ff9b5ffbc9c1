"""Initial schema: one JSON document per key, as the mobile client stores it."""

import sqlite3

KV_STORE = (
    "CREATE TABLE IF NOT EXISTS kv_store ("
    " key TEXT PRIMARY KEY,"
    " value TEXT NOT NULL,"
    " updated_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP)"
)
KV_STORE_UPDATED = (
    "CREATE INDEX IF NOT EXISTS idx_kv_store_updated ON kv_store(updated_at)"
)


def up(conn: sqlite3.Connection) -> None:
    with conn:
        conn.execute(KV_STORE)
        conn.execute(KV_STORE_UPDATED)
