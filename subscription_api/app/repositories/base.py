"""
Subscription store contract.

The domain service only talks to a ``SubscriptionRepository``; which
implementation backs it is decided when the application is assembled
(see ``create_app``).  Implementations receive values the service has
already validated: dates are ``MonthDate`` instances and owner ids are
canonical UUID strings.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional

from ..core.month_date import MonthDate
from ..schemas.subscription import SubscriptionFilters, SubscriptionRead


@dataclass(frozen=True)
class SubscriptionDraft:
    """A validated subscription that has not been stored yet."""

    service_name: str
    price: int
    user_id: str
    start_date: MonthDate
    end_date: Optional[MonthDate] = None


@dataclass(frozen=True)
class SubscriptionChanges:
    """Fields to change in a partial update.

    ``None`` means "leave unchanged".  Removing the end date is an
    explicit request (``clear_end_date``) rather than an empty value.
    """

    service_name: Optional[str] = None
    price: Optional[int] = None
    end_date: Optional[MonthDate] = None
    clear_end_date: bool = False

    def is_empty(self) -> bool:
        return (
            self.service_name is None
            and self.price is None
            and self.end_date is None
            and not self.clear_end_date
        )


@dataclass(frozen=True)
class CostQuery:
    """Filters and period for the overlap-sum aggregate."""

    start_date: MonthDate
    end_date: MonthDate
    user_id: Optional[str] = None
    service_name: Optional[str] = None


def overlaps(
    start: MonthDate, end: Optional[MonthDate], period_start: MonthDate, period_end: MonthDate
) -> bool:
    """Return True if ``[start, end]`` shares at least one month with the period.

    ``end`` of ``None`` is an open-ended subscription.  Both bounds are
    inclusive.
    """
    return start <= period_end and (end is None or end >= period_start)


def matches_service_name(service_name: str, needle: Optional[str]) -> bool:
    """Case-insensitive substring match; no needle matches everything."""
    if not needle:
        return True
    return needle.casefold() in service_name.casefold()


class SubscriptionRepository(ABC):
    """Storage operations required by ``SubscriptionService``."""

    @abstractmethod
    def create(self, draft: SubscriptionDraft) -> SubscriptionRead:
        """Persist ``draft`` and return it with id and timestamps assigned."""

    @abstractmethod
    def get(self, subscription_id: int) -> SubscriptionRead:
        """Return the subscription or raise ``NotFoundError``."""

    @abstractmethod
    def list(self, filters: SubscriptionFilters) -> List[SubscriptionRead]:
        """Return one page of matching rows, newest first.

        Always returns a list, empty when nothing matches.
        """

    @abstractmethod
    def count(self, filters: SubscriptionFilters) -> int:
        """Return the number of rows matching ``filters``, ignoring pagination."""

    @abstractmethod
    def update(self, subscription_id: int, changes: SubscriptionChanges) -> SubscriptionRead:
        """Apply ``changes`` and refresh ``updated_at``.

        Raises ``InvalidDataError`` for an empty change set before any
        write, and ``NotFoundError`` if the id does not exist.
        """

    @abstractmethod
    def delete(self, subscription_id: int) -> None:
        """Remove the row or raise ``NotFoundError``."""

    @abstractmethod
    def sum_overlapping(self, query: CostQuery) -> int:
        """Sum ``price`` over all rows matching the filters that overlap the period.

        Returns 0 when no row matches.
        """
