"""
Business logic for subscriptions.

``SubscriptionService`` validates every request before it reaches the
store: owner ids must be UUIDs, dates must be ``MM-YYYY`` months within
the accepted years, ranges must not run backwards and prices must be
positive.  Validation failures raise the typed errors from
``core.errors``; store failures propagate unchanged as
``StorageError``.

The store is passed to the constructor, so tests can run the service
against ``InMemorySubscriptionRepository``.
"""

import logging
import re
import uuid
from typing import Optional

from ..core.db import MAX_INTEGER
from ..core.errors import (
    InvalidDataError,
    InvalidPriceError,
    InvalidUUIDError,
    MissingRequiredFieldError,
)
from ..core.month_date import parse, validate_range
from ..repositories.base import (
    CostQuery,
    SubscriptionChanges,
    SubscriptionDraft,
    SubscriptionRepository,
)
from ..schemas.subscription import (
    CostCalculationRequest,
    CostCalculationResponse,
    SubscriptionCreate,
    SubscriptionFilters,
    SubscriptionList,
    SubscriptionRead,
    SubscriptionUpdate,
)

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 10
MAX_LIMIT = 100

_INTEGER_RE = re.compile(r"[+-]?[0-9]+")


def normalize_uuid(value: str) -> str:
    """Return ``value`` in canonical lowercase form or raise ``InvalidUUIDError``."""
    try:
        return str(uuid.UUID(value))
    except (TypeError, ValueError, AttributeError) as exc:
        raise InvalidUUIDError() from exc


def parse_pagination_param(value: Optional[str], default: int) -> int:
    """Read a ``limit``/``offset`` query value, falling back to ``default``.

    Anything that is not a plain decimal integer is treated as absent.
    """
    if value is None or not _INTEGER_RE.fullmatch(value):
        return default
    return int(value)


def clamp_pagination(limit: int, offset: int) -> tuple[int, int]:
    """Clamp ``limit`` to 1..100 (10 when not positive) and ``offset`` to 0..MAX_INTEGER."""
    if limit <= 0:
        limit = DEFAULT_LIMIT
    if limit > MAX_LIMIT:
        limit = MAX_LIMIT
    if offset < 0:
        offset = 0
    if offset > MAX_INTEGER:
        offset = MAX_INTEGER
    return limit, offset


def _clean_service_name(value: str) -> str:
    name = value.strip()
    if not name:
        raise MissingRequiredFieldError("service_name")
    return name


def _check_price(price: int) -> None:
    if price <= 0:
        raise InvalidPriceError()
    if price > MAX_INTEGER:
        raise InvalidPriceError("price is out of range")


def _require_positive_id(subscription_id: int) -> None:
    if subscription_id <= 0:
        raise InvalidDataError("subscription id must be a positive integer")
    if subscription_id > MAX_INTEGER:
        raise InvalidDataError("subscription id is out of range")


class SubscriptionService:
    """Validates requests and orchestrates the subscription store."""

    def __init__(self, repository: SubscriptionRepository):
        self.repository = repository

    async def create_subscription(self, data: SubscriptionCreate) -> SubscriptionRead:
        """Validate ``data`` and store a new subscription.

        Checks run in this order: owner UUID, start date format, end
        date range (when given), price, service name.
        """
        user_id = normalize_uuid(data.user_id)
        start_date = parse(data.start_date)
        end_date = None
        if data.end_date is not None:
            start_date, end_date = validate_range(start_date, data.end_date)
        _check_price(data.price)

        draft = SubscriptionDraft(
            service_name=_clean_service_name(data.service_name),
            price=data.price,
            user_id=user_id,
            start_date=start_date,
            end_date=end_date,
        )
        subscription = self.repository.create(draft)
        logger.info(
            "Subscription %s created for user %s (%s)",
            subscription.id,
            subscription.user_id,
            subscription.service_name,
        )
        return subscription

    async def get_subscription(self, subscription_id: int) -> SubscriptionRead:
        _require_positive_id(subscription_id)
        return self.repository.get(subscription_id)

    async def list_subscriptions(self, filters: SubscriptionFilters) -> SubscriptionList:
        """Return one page of subscriptions.

        Out-of-range pagination is clamped rather than rejected.
        ``total`` counts every matching row, not just this page.
        """
        limit, offset = clamp_pagination(filters.limit, filters.offset)
        user_id = normalize_uuid(filters.user_id) if filters.user_id is not None else None
        effective = SubscriptionFilters(
            user_id=user_id,
            service_name=filters.service_name or None,
            limit=limit,
            offset=offset,
        )
        subscriptions = self.repository.list(effective)
        total = self.repository.count(effective)
        return SubscriptionList(
            subscriptions=subscriptions,
            total=total,
            limit=limit,
            offset=offset,
        )

    async def update_subscription(
        self, subscription_id: int, data: SubscriptionUpdate
    ) -> SubscriptionRead:
        """Apply a partial update.

        Only fields present in ``data`` change.  A new end date is
        checked against the stored start date, which cannot be
        modified.  An explicit ``null`` end date clears it.
        """
        _require_positive_id(subscription_id)
        existing = self.repository.get(subscription_id)
        sent = data.model_fields_set

        end_date = None
        clear_end_date = False
        if "end_date" in sent:
            if data.end_date is None:
                clear_end_date = True
            else:
                _, end_date = validate_range(existing.start_date, data.end_date)

        price: Optional[int] = None
        if "price" in sent:
            if data.price is None:
                raise InvalidDataError("price cannot be null")
            _check_price(data.price)
            price = data.price

        service_name: Optional[str] = None
        if "service_name" in sent:
            if data.service_name is None:
                raise InvalidDataError("service_name cannot be null")
            service_name = _clean_service_name(data.service_name)

        changes = SubscriptionChanges(
            service_name=service_name,
            price=price,
            end_date=end_date,
            clear_end_date=clear_end_date,
        )
        subscription = self.repository.update(subscription_id, changes)
        logger.info("Subscription %s updated", subscription_id)
        return subscription

    async def delete_subscription(self, subscription_id: int) -> None:
        _require_positive_id(subscription_id)
        self.repository.delete(subscription_id)
        logger.info("Subscription %s deleted", subscription_id)

    async def calculate_cost(self, query: CostCalculationRequest) -> CostCalculationResponse:
        """Sum the prices of subscriptions active during the queried period.

        A subscription counts when it starts no later than the period
        end and either has no end date or ends no earlier than the
        period start.  Each matching subscription contributes its
        price once, regardless of how many months overlap.
        """
        start_date, end_date = validate_range(query.start_date, query.end_date)
        user_id = normalize_uuid(query.user_id) if query.user_id is not None else None

        total_cost = self.repository.sum_overlapping(
            CostQuery(
                start_date=start_date,
                end_date=end_date,
                user_id=user_id,
                service_name=query.service_name or None,
            )
        )
        logger.info(
            "Calculated cost %s for period %s..%s (user=%s, service=%s)",
            total_cost,
            query.start_date,
            query.end_date,
            user_id,
            query.service_name,
        )
        return CostCalculationResponse(
            total_cost=total_cost,
            start_date=query.start_date,
            end_date=query.end_date,
            user_id=user_id,
            service_name=query.service_name,
        )
