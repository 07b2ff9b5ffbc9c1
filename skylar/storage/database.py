"""SQLite connection for the local key-value store, with numbered migrations."""

import importlib
import logging
import sqlite3
from pathlib import Path

logger = logging.getLogger(__name__)

MIGRATIONS_PACKAGE = "skylar.storage.migrations"
MEMORY = ":memory:"


def connect(db_path: str | Path) -> sqlite3.Connection:
    """Open the store in WAL mode, creating the parent directory if needed.

    ``":memory:"`` is passed through for tests.
    """
    if str(db_path) != MEMORY:
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(db_path))
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA journal_mode=WAL")
    return conn


def open_store(db_path: str | Path) -> sqlite3.Connection:
    """Connect and bring the schema up to date."""
    conn = connect(db_path)
    run_migrations(conn)
    return conn


def applied_versions(conn: sqlite3.Connection) -> set[str]:
    with conn:
        conn.execute(
            "CREATE TABLE IF NOT EXISTS schema_versions ("
            " version TEXT PRIMARY KEY,"
            " applied_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP)"
        )
    return {row["version"] for row in conn.execute("SELECT version FROM schema_versions")}


def run_migrations(conn: sqlite3.Connection) -> list[str]:
    """Apply pending ``v###_*`` migrations in order. Returns the applied names."""
    done = applied_versions(conn)
    pending = [name for name in _discover_migrations() if name not in done]

    for name in pending:
        module = importlib.import_module(f"{MIGRATIONS_PACKAGE}.{name}")
        module.up(conn)
        with conn:
            conn.execute("INSERT INTO schema_versions (version) VALUES (?)", (name,))
        logger.info("Applied migration %s", name)
    return pending


def _discover_migrations() -> list[str]:
    folder = Path(__file__).parent / "migrations"
    return sorted(path.stem for path in folder.glob("v[0-9]*_*.py"))
