"""
SQLite implementation of the subscription store.

Every method opens its own connection through ``core.db.get_cursor``
and issues a single statement, which SQLite executes atomically.  All
queries use parameterized statements.  ``sqlite3`` errors are wrapped
in ``DatabaseQueryError`` so the API layer can answer with a generic
500 without leaking SQL details.
"""

import logging
import sqlite3
from datetime import datetime, timezone
from typing import Any, List, Optional

from ..core.db import get_cursor
from ..core.errors import DatabaseQueryError, InvalidDataError, NotFoundError
from ..core.month_date import MonthDate
from ..schemas.subscription import SubscriptionFilters, SubscriptionRead
from .base import CostQuery, SubscriptionChanges, SubscriptionDraft, SubscriptionRepository

logger = logging.getLogger(__name__)

_COLUMNS = "id, service_name, price, user_id, start_period, end_period, created_at, updated_at"


def _utcnow() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="microseconds")


def _row_to_subscription(row: sqlite3.Row) -> SubscriptionRead:
    end_period = row["end_period"]
    return SubscriptionRead(
        id=row["id"],
        service_name=row["service_name"],
        price=row["price"],
        user_id=row["user_id"],
        start_date=str(MonthDate.from_ordinal(row["start_period"])),
        end_date=str(MonthDate.from_ordinal(end_period)) if end_period is not None else None,
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def _filter_clauses(
    user_id: Optional[str], service_name: Optional[str]
) -> tuple[list[str], list[Any]]:
    where_clauses: list[str] = []
    params: list[Any] = []
    if user_id is not None:
        where_clauses.append("user_id = ?")
        params.append(user_id)
    if service_name:
        # instr() avoids LIKE wildcards in user input
        where_clauses.append("instr(casefold(service_name), ?) > 0")
        params.append(service_name.casefold())
    return where_clauses, params


class SQLiteSubscriptionRepository(SubscriptionRepository):
    """Subscription store backed by a SQLite database file.

    ``database_path`` defaults to the path derived from
    ``settings.database_url``.  The schema is created by
    ``core.db.init_db``.
    """

    def __init__(self, database_path: Optional[str] = None):
        self.database_path = database_path

    def _execute(self, action: str, sql: str, params: tuple = ()) -> tuple[Optional[int], int]:
        """Run a write statement and return ``(lastrowid, rowcount)``."""
        try:
            with get_cursor(self.database_path) as cursor:
                cursor.execute(sql, params)
                return cursor.lastrowid, cursor.rowcount
        except sqlite3.Error as exc:
            logger.error("Failed to %s: %s", action, exc)
            raise DatabaseQueryError(f"failed to {action}: {exc}") from exc

    def _fetch(self, action: str, sql: str, params: tuple = (), one: bool = False):
        try:
            with get_cursor(self.database_path) as cursor:
                cursor.execute(sql, params)
                return cursor.fetchone() if one else cursor.fetchall()
        except sqlite3.Error as exc:
            logger.error("Failed to %s: %s", action, exc)
            raise DatabaseQueryError(f"failed to {action}: {exc}") from exc

    def create(self, draft: SubscriptionDraft) -> SubscriptionRead:
        now = _utcnow()
        row_id, _ = self._execute(
            "create subscription",
            """
            INSERT INTO subscriptions (service_name, price, user_id, start_period, end_period, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            (
                draft.service_name,
                draft.price,
                draft.user_id,
                draft.start_date.ordinal,
                draft.end_date.ordinal if draft.end_date is not None else None,
                now,
                now,
            ),
        )
        return self.get(row_id)

    def get(self, subscription_id: int) -> SubscriptionRead:
        row = self._fetch(
            "get subscription",
            f"SELECT {_COLUMNS} FROM subscriptions WHERE id = ?",
            (subscription_id,),
            one=True,
        )
        if row is None:
            raise NotFoundError()
        return _row_to_subscription(row)

    def list(self, filters: SubscriptionFilters) -> List[SubscriptionRead]:
        where_clauses, params = _filter_clauses(filters.user_id, filters.service_name)
        query = f"SELECT {_COLUMNS} FROM subscriptions"
        if where_clauses:
            query += " WHERE " + " AND ".join(where_clauses)
        query += " ORDER BY created_at DESC, id DESC LIMIT ? OFFSET ?"
        params.extend([filters.limit, filters.offset])
        rows = self._fetch("list subscriptions", query, tuple(params))
        return [_row_to_subscription(row) for row in rows]

    def count(self, filters: SubscriptionFilters) -> int:
        where_clauses, params = _filter_clauses(filters.user_id, filters.service_name)
        query = "SELECT COUNT(*) AS total FROM subscriptions"
        if where_clauses:
            query += " WHERE " + " AND ".join(where_clauses)
        row = self._fetch("count subscriptions", query, tuple(params), one=True)
        return row["total"]

    def update(self, subscription_id: int, changes: SubscriptionChanges) -> SubscriptionRead:
        if changes.is_empty():
            raise InvalidDataError("at least one field must be provided for update")

        fields: list[str] = []
        values: list[Any] = []
        if changes.service_name is not None:
            fields.append("service_name = ?")
            values.append(changes.service_name)
        if changes.price is not None:
            fields.append("price = ?")
            values.append(changes.price)
        if changes.end_date is not None:
            fields.append("end_period = ?")
            values.append(changes.end_date.ordinal)
        elif changes.clear_end_date:
            fields.append("end_period = NULL")
        fields.append("updated_at = ?")
        values.append(_utcnow())
        values.append(subscription_id)

        _, rowcount = self._execute(
            "update subscription",
            f"UPDATE subscriptions SET {', '.join(fields)} WHERE id = ?",
            tuple(values),
        )
        if rowcount == 0:
            raise NotFoundError()
        return self.get(subscription_id)

    def delete(self, subscription_id: int) -> None:
        _, rowcount = self._execute(
            "delete subscription",
            "DELETE FROM subscriptions WHERE id = ?",
            (subscription_id,),
        )
        if rowcount == 0:
            raise NotFoundError()

    def sum_overlapping(self, query: CostQuery) -> int:
        where_clauses, params = _filter_clauses(query.user_id, query.service_name)
        # Overlap: starts no later than the period end and has not ended
        # before the period start.
        where_clauses.append("start_period <= ?")
        params.append(query.end_date.ordinal)
        where_clauses.append("(end_period IS NULL OR end_period >= ?)")
        params.append(query.start_date.ordinal)
        # SQLite SUM() raises on totals above 2**63 - 1, so add up in Python
        sql = "SELECT price FROM subscriptions WHERE " + " AND ".join(where_clauses)
        rows = self._fetch("calculate cost", sql, tuple(params))
        return sum(row["price"] for row in rows)
