"""Tests for the SQLite connection helpers and migrations."""

import sqlite3
from pathlib import Path

import pytest

from subscription_api.app.core.db import MIGRATIONS, get_connection, get_cursor, init_db


def test_init_db_applies_all_migrations(tmp_path: Path) -> None:
    path = str(tmp_path / "fresh.db")
    assert init_db(path) == MIGRATIONS[-1][0]

    conn = get_connection(path)
    try:
        tables = {row["name"] for row in conn.execute("SELECT name FROM sqlite_master WHERE type = 'table'")}
        versions = [row["version"] for row in conn.execute("SELECT version FROM migrations ORDER BY version")]
    finally:
        conn.close()
    assert {"subscriptions", "migrations"} <= tables
    assert versions == [version for version, _ in MIGRATIONS]


def test_init_db_is_idempotent(database_path: str) -> None:
    assert init_db(database_path) == MIGRATIONS[-1][0]


def test_schema_rejects_inverted_periods(database_path: str) -> None:
    with pytest.raises(sqlite3.IntegrityError):
        with get_cursor(database_path) as cursor:
            cursor.execute(
                "INSERT INTO subscriptions (service_name, price, user_id, start_period, end_period, created_at, updated_at)"
                " VALUES ('x', 1, 'u', 100, 99, 'now', 'now')"
            )


def test_failed_block_is_rolled_back(database_path: str) -> None:
    with pytest.raises(RuntimeError):
        with get_cursor(database_path) as cursor:
            cursor.execute(
                "INSERT INTO subscriptions (service_name, price, user_id, start_period, created_at, updated_at)"
                " VALUES ('x', 1, 'u', 100, 'now', 'now')"
            )
            raise RuntimeError("abort")
    with get_cursor(database_path) as cursor:
        assert cursor.execute("SELECT COUNT(*) AS n FROM subscriptions").fetchone()["n"] == 0


def test_casefold_function_registered(database_path: str) -> None:
    conn = get_connection(database_path)
    try:
        assert conn.execute("SELECT casefold('ЯНДЕКС') AS v").fetchone()["v"] == "яндекс"
    finally:
        conn.close()
