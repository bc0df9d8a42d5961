"""
In-memory subscription store.

Implements the same contract as ``SQLiteSubscriptionRepository`` using
a dictionary.  Data lives only as long as the instance, which makes it
convenient for tests and for running the API without a database file.
"""

import itertools
import threading
from datetime import datetime, timezone
from typing import Dict, List, Optional, Tuple

from ..core.errors import InvalidDataError, NotFoundError
from ..core.month_date import MonthDate
from ..schemas.subscription import SubscriptionFilters, SubscriptionRead
from .base import (
    CostQuery,
    SubscriptionChanges,
    SubscriptionDraft,
    SubscriptionRepository,
    matches_service_name,
    overlaps,
)


class InMemorySubscriptionRepository(SubscriptionRepository):
    """Dictionary-backed store guarded by a lock."""

    def __init__(self) -> None:
        self._rows: Dict[int, SubscriptionRead] = {}
        # (start, end) per id, kept alongside the rendered records
        self._periods: Dict[int, Tuple[MonthDate, Optional[MonthDate]]] = {}
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    def _matching(self, user_id: Optional[str], service_name: Optional[str]) -> List[SubscriptionRead]:
        return [
            row
            for row in self._rows.values()
            if (user_id is None or row.user_id == user_id)
            and matches_service_name(row.service_name, service_name)
        ]

    def create(self, draft: SubscriptionDraft) -> SubscriptionRead:
        now = datetime.now(timezone.utc)
        with self._lock:
            record = SubscriptionRead(
                id=next(self._ids),
                service_name=draft.service_name,
                price=draft.price,
                user_id=draft.user_id,
                start_date=str(draft.start_date),
                end_date=str(draft.end_date) if draft.end_date is not None else None,
                created_at=now,
                updated_at=now,
            )
            self._rows[record.id] = record
            self._periods[record.id] = (draft.start_date, draft.end_date)
        return record

    def get(self, subscription_id: int) -> SubscriptionRead:
        with self._lock:
            record = self._rows.get(subscription_id)
        if record is None:
            raise NotFoundError()
        return record

    def list(self, filters: SubscriptionFilters) -> List[SubscriptionRead]:
        with self._lock:
            rows = self._matching(filters.user_id, filters.service_name)
        rows.sort(key=lambda row: (row.created_at, row.id), reverse=True)
        return rows[filters.offset:filters.offset + filters.limit]

    def count(self, filters: SubscriptionFilters) -> int:
        with self._lock:
            return len(self._matching(filters.user_id, filters.service_name))

    def update(self, subscription_id: int, changes: SubscriptionChanges) -> SubscriptionRead:
        if changes.is_empty():
            raise InvalidDataError("at least one field must be provided for update")

        updates: dict = {"updated_at": datetime.now(timezone.utc)}
        if changes.service_name is not None:
            updates["service_name"] = changes.service_name
        if changes.price is not None:
            updates["price"] = changes.price
        if changes.end_date is not None:
            updates["end_date"] = str(changes.end_date)
        elif changes.clear_end_date:
            updates["end_date"] = None

        with self._lock:
            record = self._rows.get(subscription_id)
            if record is None:
                raise NotFoundError()
            record = record.model_copy(update=updates)
            self._rows[subscription_id] = record
            if "end_date" in updates:
                start, _ = self._periods[subscription_id]
                self._periods[subscription_id] = (start, changes.end_date)
        return record

    def delete(self, subscription_id: int) -> None:
        with self._lock:
            if self._rows.pop(subscription_id, None) is None:
                raise NotFoundError()
            del self._periods[subscription_id]

    def sum_overlapping(self, query: CostQuery) -> int:
        with self._lock:
            rows = self._matching(query.user_id, query.service_name)
            periods = dict(self._periods)
        return sum(
            row.price
            for row in rows
            if overlaps(*periods[row.id], query.start_date, query.end_date)
        )
