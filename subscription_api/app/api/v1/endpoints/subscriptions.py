"""
Subscription endpoints for API v1.

CRUD routes for subscription records plus the cost calculation over a
period.  Handlers only translate HTTP to service calls: validation
lives in ``SubscriptionService`` and errors are turned into the JSON
error envelope by the handlers registered in ``api.errors``.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Path, Query, status

from subscription_api.app.api.dependencies import get_subscription_service
from subscription_api.app.core.db import MAX_INTEGER
from subscription_api.app.schemas.subscription import (
    CostCalculationRequest,
    CostCalculationResponse,
    ErrorResponse,
    SubscriptionCreate,
    SubscriptionFilters,
    SubscriptionList,
    SubscriptionRead,
    SubscriptionUpdate,
)
from subscription_api.app.services.subscription_service import (
    DEFAULT_LIMIT,
    SubscriptionService,
    parse_pagination_param,
)

router = APIRouter(
    responses={
        400: {"model": ErrorResponse, "description": "Invalid input"},
        500: {"model": ErrorResponse, "description": "Internal error"},
    }
)


@router.post(
    "",
    response_model=SubscriptionRead,
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
)
async def create_subscription(
    subscription: SubscriptionCreate,
    service: SubscriptionService = Depends(get_subscription_service),
) -> SubscriptionRead:
    """Create a subscription.

    ``start_date`` and ``end_date`` use the ``MM-YYYY`` format; leave
    ``end_date`` out for a subscription that is still active.
    """
    return await service.create_subscription(subscription)


@router.get("", response_model=SubscriptionList, response_model_exclude_none=True)
async def list_subscriptions(
    user_id: Optional[str] = Query(None, description="Owner UUID"),
    service_name: Optional[str] = Query(None, description="Case-insensitive substring of the service name"),
    limit: Optional[str] = Query(None, description="Page size, clamped to 1..100; defaults to 10"),
    offset: Optional[str] = Query(None, description="Rows to skip, negative values become 0"),
    service: SubscriptionService = Depends(get_subscription_service),
) -> SubscriptionList:
    """List subscriptions, newest first.

    ``limit`` and ``offset`` that are not integers fall back to their
    defaults instead of failing the request.
    """
    filters = SubscriptionFilters(
        user_id=user_id or None,
        service_name=service_name or None,
        limit=parse_pagination_param(limit, DEFAULT_LIMIT),
        offset=parse_pagination_param(offset, 0),
    )
    return await service.list_subscriptions(filters)


@router.post("/cost-calculation", response_model=CostCalculationResponse, response_model_exclude_none=True)
async def calculate_cost(
    query: CostCalculationRequest,
    service: SubscriptionService = Depends(get_subscription_service),
) -> CostCalculationResponse:
    """Total price of the subscriptions active at any point of the period.

    Both bounds are inclusive months.  Optional ``user_id`` and
    ``service_name`` narrow the subscriptions that are summed.
    """
    return await service.calculate_cost(query)


@router.get(
    "/{subscription_id}",
    response_model=SubscriptionRead,
    response_model_exclude_none=True,
    responses={404: {"model": ErrorResponse}},
)
async def get_subscription(
    subscription_id: int = Path(..., le=MAX_INTEGER),
    service: SubscriptionService = Depends(get_subscription_service),
) -> SubscriptionRead:
    """Retrieve a single subscription by its ID."""
    return await service.get_subscription(subscription_id)


@router.put(
    "/{subscription_id}",
    response_model=SubscriptionRead,
    response_model_exclude_none=True,
    responses={404: {"model": ErrorResponse}},
)
async def update_subscription(
    updates: SubscriptionUpdate,
    subscription_id: int = Path(..., le=MAX_INTEGER),
    service: SubscriptionService = Depends(get_subscription_service),
) -> SubscriptionRead:
    """Update an existing subscription.

    Partial updates are supported: only ``service_name``, ``price`` and
    ``end_date`` present in the body change.  Send ``"end_date": null``
    to make the subscription open-ended.
    """
    return await service.update_subscription(subscription_id, updates)


@router.delete(
    "/{subscription_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"model": ErrorResponse}},
)
async def delete_subscription(
    subscription_id: int = Path(..., le=MAX_INTEGER),
    service: SubscriptionService = Depends(get_subscription_service),
) -> None:
    """Delete a subscription."""
    await service.delete_subscription(subscription_id)
