"""
Pydantic models for subscription data.

Request models stay permissive about values the domain service checks
itself (price sign, UUID syntax, ``MM-YYYY`` dates) so that every such
violation surfaces as the same typed error whether the service is
called over HTTP or directly.  Structural problems (wrong JSON types,
missing fields) are still rejected by pydantic.  ``price`` is a
strict integer: booleans and numeric strings are refused rather than
coerced.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, StrictInt


class SubscriptionCreate(BaseModel):
    """Schema for creating a subscription."""

    service_name: str = Field(..., max_length=255, examples=["Yandex Plus"])
    price: StrictInt = Field(..., examples=[400], description="Monthly price in the smallest currency unit")
    user_id: str = Field(..., examples=["60601fee-2bf1-4721-ae6f-7636e79a0cba"])
    start_date: str = Field(..., examples=["07-2025"], description="First active month, MM-YYYY")
    end_date: Optional[str] = Field(None, examples=["12-2025"], description="Last active month, MM-YYYY")


class SubscriptionUpdate(BaseModel):
    """Schema for a partial update.

    All fields are optional; only fields present in the request body
    are changed.  The start date cannot be changed.  Sending
    ``"end_date": null`` makes the subscription open-ended again.
    """

    service_name: Optional[str] = Field(None, max_length=255)
    price: Optional[StrictInt] = None
    end_date: Optional[str] = None


class SubscriptionRead(BaseModel):
    """Schema for reading a subscription from the API."""

    id: int
    service_name: str
    price: int
    user_id: str
    start_date: str
    end_date: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = {
        "from_attributes": True,
    }


class SubscriptionFilters(BaseModel):
    """Filters and pagination for listing subscriptions."""

    user_id: Optional[str] = None
    service_name: Optional[str] = None
    limit: int = 10
    offset: int = 0


class SubscriptionList(BaseModel):
    subscriptions: List[SubscriptionRead]
    total: int
    limit: int
    offset: int


class CostCalculationRequest(BaseModel):
    """Query for the total cost of subscriptions active within a period."""

    user_id: Optional[str] = Field(None, examples=["60601fee-2bf1-4721-ae6f-7636e79a0cba"])
    service_name: Optional[str] = Field(None, examples=["Yandex"])
    start_date: str = Field(..., examples=["01-2025"])
    end_date: str = Field(..., examples=["12-2025"])


class CostCalculationResponse(BaseModel):
    total_cost: int
    start_date: str
    end_date: str
    user_id: Optional[str] = None
    service_name: Optional[str] = None


class ErrorResponse(BaseModel):
    """Body returned for every failed request."""

    success: bool = False
    error: str
    code: int
