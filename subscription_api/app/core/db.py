"""
SQLite database integration and simple migration system.

This module provides functions for obtaining a database connection
(``get_connection``), a cursor context manager (``get_cursor``) and
``init_db``, which applies migrations on application start.  SQLite is
used as a lightweight embedded database; switching to another DBMS
means replacing the connection logic and adapting the SQL in
``repositories/sqlite.py``.

The migration mechanism stores applied migration versions in the
``migrations`` table and executes new migrations in order.
"""

import logging
import os
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

from .config import settings
from .errors import DatabaseConnectionError

logger = logging.getLogger(__name__)

# Largest value an INTEGER column (and a bound parameter) can hold
MAX_INTEGER = 2**63 - 1

MIGRATIONS: list[tuple[int, str]] = [
    # Migration 1: subscriptions table
    (
        1,
        """
        -- Dates are stored as period ordinals (year * 12 + month - 1) so
        -- that range comparisons follow calendar order.  end_period NULL
        -- means the subscription is open-ended.
        CREATE TABLE IF NOT EXISTS subscriptions (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            service_name TEXT NOT NULL,
            price INTEGER NOT NULL CHECK (price > 0),
            user_id TEXT NOT NULL,
            start_period INTEGER NOT NULL,
            end_period INTEGER,
            created_at TIMESTAMP NOT NULL,
            updated_at TIMESTAMP NOT NULL,
            CHECK (end_period IS NULL OR end_period >= start_period)
        );
        """,
    ),
    # Migration 2: indexes for the list and cost queries
    (
        2,
        """
        CREATE INDEX IF NOT EXISTS idx_subscriptions_user_id ON subscriptions(user_id);
        CREATE INDEX IF NOT EXISTS idx_subscriptions_created_at ON subscriptions(created_at);
        CREATE INDEX IF NOT EXISTS idx_subscriptions_periods ON subscriptions(start_period, end_period);
        """,
    ),
]


def get_database_path(database_url: Optional[str] = None) -> str:
    """Compute the path to the SQLite database file.

    If the configured value is an absolute path (or SQLite's
    ``:memory:``), use it directly.  Otherwise resolve it relative to
    the project root.
    """
    db_url = database_url or settings.database_url
    if db_url == ":memory:" or os.path.isabs(db_url):
        return db_url
    base_dir = Path(__file__).resolve().parent.parent.parent.parent  # project root
    return str((base_dir / db_url).resolve())


def _casefold(value: Optional[str]) -> Optional[str]:
    return value.casefold() if value is not None else None


def get_connection(database_path: Optional[str] = None) -> sqlite3.Connection:
    """Create and return a new SQLite connection.

    Rows are returned as ``sqlite3.Row`` so columns can be accessed by
    name.  A ``casefold`` SQL function is registered because SQLite's
    own ``lower``/``LIKE`` only fold ASCII letters.
    """
    db_path = database_path or get_database_path()
    try:
        conn = sqlite3.connect(db_path)
    except sqlite3.Error as exc:
        logger.error("Failed to open database %s: %s", db_path, exc)
        raise DatabaseConnectionError(str(exc)) from exc
    conn.row_factory = sqlite3.Row
    conn.create_function("casefold", 1, _casefold, deterministic=True)
    return conn


@contextmanager
def get_cursor(database_path: Optional[str] = None) -> Iterator[sqlite3.Cursor]:
    """Context manager that yields a cursor and closes the connection on exit.

    The transaction is committed when the block exits normally and
    rolled back when it raises.
    """
    conn = get_connection(database_path)
    try:
        cursor = conn.cursor()
        yield cursor
        conn.commit()
    except BaseException:
        conn.rollback()
        raise
    finally:
        conn.close()


def init_db(database_path: Optional[str] = None) -> int:
    """Initialise the database and apply pending migrations.

    Creates the ``migrations`` table if it does not exist, checks the
    current schema version and applies any newer entries of
    ``MIGRATIONS``.  Returns the schema version after migrating.
    """
    with get_cursor(database_path) as cursor:
        cursor.execute(
            "CREATE TABLE IF NOT EXISTS migrations (version INTEGER PRIMARY KEY)"
        )
        cursor.execute("SELECT MAX(version) AS version FROM migrations")
        row = cursor.fetchone()
        current_version = row["version"] if row and row["version"] is not None else 0

        for version, sql in MIGRATIONS:
            if version > current_version:
                logger.info("Applying database migration %s", version)
                cursor.executescript(sql)
                cursor.execute(
                    "INSERT INTO migrations (version) VALUES (?)", (version,)
                )
                current_version = version

    return current_version
